"""
Deck file store: a YAML document holding cards, buckets, history and the day counter.

This is the collaborator store the CLI persists through. Cards are written
once under ``cards`` and referenced by ID everywhere else, so each ID maps
to exactly one Flashcard object after loading.
"""

import contextlib
import datetime
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from kasten.application.buckets import check_bucket_number
from kasten.application.id_service import ensure_card_id
from kasten.application.scheduler import add_card
from kasten.domain.exceptions import (
    ContractViolationError,
    DeckFileError,
    InvalidCardError,
)
from kasten.domain.models import AnswerDifficulty, BucketMap, Flashcard, ReviewHistoryEntry

logger = logging.getLogger(__name__)


@dataclass
class Deck:
    """In-memory form of a deck document."""

    day: int = 0
    cards: dict[str, Flashcard] = field(default_factory=dict)
    buckets: BucketMap = field(default_factory=dict)
    history: list[ReviewHistoryEntry] = field(default_factory=list)

    def card(self, card_id: str) -> Flashcard:
        try:
            return self.cards[card_id]
        except KeyError:
            raise InvalidCardError(f"Unknown card id: {card_id}") from None

    def add(self, card: Flashcard) -> Flashcard:
        """Register a new card and put it in the learning bucket."""
        card = ensure_card_id(card)
        if card.card_id in self.cards:
            raise InvalidCardError(f"Duplicate card id: {card.card_id}")
        self.cards[card.card_id] = card
        self.buckets = add_card(self.buckets, card)
        return card


def load_deck(path: Path, missing_ok: bool = False) -> Deck:
    """
    Read a deck document from ``path``.

    Args:
        path: YAML file to read.
        missing_ok: Return an empty deck instead of failing when the file
            does not exist.
    """
    if not path.exists():
        if missing_ok:
            logger.info(f"No deck at {path}; starting empty")
            return Deck()
        raise DeckFileError(f"Deck file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DeckFileError(f"Could not read {path}: {e}") from e

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DeckFileError(f"Could not parse {path}: {e}") from e

    if raw is None:
        return Deck()
    if not isinstance(raw, dict):
        raise DeckFileError(f"{path}: top level must be a mapping")

    try:
        deck = _parse_deck(raw)
    except ContractViolationError as e:
        raise DeckFileError(f"{path}: {e}") from e

    logger.debug(
        f"Loaded {len(deck.cards)} card(s), {len(deck.history)} review(s) from {path}"
    )
    return deck


def dump_deck(deck: Deck, path: Path) -> None:
    """Write ``deck`` to ``path`` as YAML."""
    doc: dict[str, Any] = {
        "day": deck.day,
        "cards": [_card_to_dict(card) for card in deck.cards.values()],
        "buckets": {
            bucket: sorted(_id_of(card) for card in cards)
            for bucket, cards in sorted(deck.buckets.items())
        },
        "history": [
            {
                "card": _id_of(entry.card),
                "difficulty": entry.difficulty.value,
                "date": entry.date,
            }
            for entry in deck.history
        ],
    }

    text = yaml.safe_dump(doc, sort_keys=False, allow_unicode=True)

    # Write to a sibling file, then swap it in
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(path)
    except OSError as e:
        with contextlib.suppress(OSError):
            tmp_path.unlink(missing_ok=True)
        raise DeckFileError(f"Could not write {path}: {e}") from e
    logger.debug(f"Wrote deck to {path}")


def _parse_deck(raw: dict[str, Any]) -> Deck:
    day = raw.get("day", 0)
    if isinstance(day, bool) or not isinstance(day, int) or day < 0:
        raise DeckFileError(f"'day' must be a non-negative integer, got {day!r}")

    cards = _parse_cards(_section(raw, "cards", []))
    buckets = _parse_buckets(_section(raw, "buckets", {}), cards)
    history = _parse_history(_section(raw, "history", []), cards)
    return Deck(day=day, cards=cards, buckets=buckets, history=history)


def _section(raw: dict[str, Any], key: str, default: Any) -> Any:
    """A missing or null section means empty; any other value is passed on unchanged."""
    value = raw.get(key)
    return default if value is None else value


def _parse_cards(items: Any) -> dict[str, Flashcard]:
    if not isinstance(items, list):
        raise DeckFileError("'cards' must be a list")

    cards: dict[str, Flashcard] = {}
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise DeckFileError(f"Card #{index} must be a mapping")

        front, back = item.get("front"), item.get("back")
        if not isinstance(front, str) or not isinstance(back, str):
            raise DeckFileError(f"Card #{index} needs string 'front' and 'back'")

        hint = item.get("hint") or ""
        tags = item.get("tags") or []
        if not isinstance(hint, str) or not isinstance(tags, list):
            raise DeckFileError(f"Card #{index} has a malformed 'hint' or 'tags'")

        card = ensure_card_id(
            Flashcard(
                front=front,
                back=back,
                hint=hint,
                tags=tuple(str(t) for t in tags),
                card_id=str(item["id"]) if item.get("id") else None,
            )
        )
        if card.card_id in cards:
            raise DeckFileError(f"Duplicate card id: {card.card_id}")
        cards[card.card_id] = card

    return cards


def _parse_buckets(raw: Any, cards: dict[str, Flashcard]) -> BucketMap:
    if not isinstance(raw, dict):
        raise DeckFileError("'buckets' must be a mapping of bucket number to card ids")

    buckets: BucketMap = {}
    placed: dict[str, int] = {}
    for key, ids in raw.items():
        bucket = int(key) if isinstance(key, str) and key.isdigit() else key
        check_bucket_number(bucket)
        if not isinstance(ids, list):
            raise DeckFileError(f"Bucket {bucket} must list card ids")

        members: set[Flashcard] = set()
        for card_id in ids:
            card_id = str(card_id)
            if card_id not in cards:
                raise DeckFileError(f"Bucket {bucket} references unknown card {card_id}")
            if card_id in placed:
                raise DeckFileError(
                    f"Card {card_id} is in both bucket {placed[card_id]} and bucket {bucket}"
                )
            placed[card_id] = bucket
            members.add(cards[card_id])
        buckets[bucket] = members

    return buckets


def _parse_history(items: Any, cards: dict[str, Flashcard]) -> list[ReviewHistoryEntry]:
    if not isinstance(items, list):
        raise DeckFileError("'history' must be a list")

    history: list[ReviewHistoryEntry] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise DeckFileError(f"History entry #{index} must be a mapping")

        card_id = str(item.get("card"))
        if card_id not in cards:
            raise DeckFileError(f"History entry #{index} references unknown card {card_id}")

        history.append(
            ReviewHistoryEntry(
                card=cards[card_id],
                difficulty=AnswerDifficulty.parse(item.get("difficulty")),
                date=_parse_date(item.get("date"), index),
            )
        )

    return history


def _parse_date(value: Any, index: int) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        try:
            return datetime.date.fromisoformat(value)
        except ValueError:
            pass
    raise DeckFileError(f"History entry #{index} has an invalid date: {value!r}")


def _card_to_dict(card: Flashcard) -> dict[str, Any]:
    data: dict[str, Any] = {"id": card.card_id, "front": card.front, "back": card.back}
    if card.hint:
        data["hint"] = card.hint
    if card.tags:
        data["tags"] = list(card.tags)
    return data


def _id_of(card: Flashcard) -> str:
    if not card.card_id:
        raise InvalidCardError(f"Card {card.front!r} has no id and cannot be stored")
    return card.card_id
