import pytest

from kasten.domain.models import Flashcard


def make_card(front: str, hint: str = "hint") -> Flashcard:
    """Helper to create test flashcards."""
    return Flashcard(front=front, back="back", hint=hint)


@pytest.fixture
def card_factory():
    return make_card


@pytest.fixture
def tier_cards() -> list[Flashcard]:
    """One distinct card per Leitner tier, cardB0..cardB5."""
    return [make_card(f"cardB{i}") for i in range(6)]


@pytest.fixture
def tier_buckets(tier_cards):
    """Dense sequence with tier_cards[i] alone in bucket i."""
    return [{card} for card in tier_cards]


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/logs
    monkeypatch.setenv("HOME", str(home))
    for var in ("KASTEN_DECK_FILE", "KASTEN_SESSION_LIMIT", "KASTEN_VERBOSE"):
        monkeypatch.delenv(var, raising=False)
    return home
