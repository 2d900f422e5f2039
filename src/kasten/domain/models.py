"""
Domain models for the Leitner scheduler.

These are pure data structures with no I/O or external dependencies.
"""

import datetime
from dataclasses import dataclass, field
from enum import Enum

from .exceptions import InvalidDifficultyError


@dataclass(frozen=True, eq=False)
class Flashcard:
    """
    A single flashcard.

    Cards compare by identity, not content: two cards with the same text
    are still two different cards. ``eq=False`` keeps the default
    identity-based ``__eq__`` and ``__hash__`` so cards can live in sets.

    Attributes:
        front: Prompt shown to the learner.
        back: Expected answer.
        hint: Optional hint text; empty string when there is none.
        tags: Free-form labels.
        card_id: Stable identifier assigned by a store, if any.
    """

    front: str
    back: str
    hint: str = ""
    tags: tuple[str, ...] = field(default_factory=tuple)
    card_id: str | None = None


class AnswerDifficulty(Enum):
    """How well the learner answered a card."""

    WRONG = "wrong"
    HARD = "hard"
    EASY = "easy"

    @classmethod
    def parse(cls, value: "AnswerDifficulty | str") -> "AnswerDifficulty":
        """Accept an enum member or its name/value in any case."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidDifficultyError(
            f"Invalid difficulty {value!r}; expected one of: "
            + ", ".join(d.value for d in cls)
        )


@dataclass(frozen=True)
class ReviewHistoryEntry:
    """
    One past grading event.

    Attributes:
        card: The card that was practiced.
        difficulty: The grade the learner gave.
        date: Day the review happened.
    """

    card: Flashcard
    difficulty: AnswerDifficulty
    date: datetime.date


# Sparse layout: bucket number -> cards. The durable representation.
BucketMap = dict[int, set[Flashcard]]

# Dense layout: index i holds bucket i. Derived and disposable.
BucketSets = list[set[Flashcard]]


@dataclass(frozen=True)
class BucketRange:
    """Inclusive span of occupied bucket indices."""

    min_bucket: int
    max_bucket: int


@dataclass
class ProgressStats:
    """
    Review statistics over a history log.

    Hard answers count toward ``total_reviews`` only.
    """

    total_reviews: int
    correct_count: int
    incorrect_count: int
    accuracy_percent: float
    per_bucket_review_count: dict[int, int] = field(default_factory=dict)


@dataclass
class DeckSummary:
    """Snapshot of where the cards of a deck currently sit."""

    total_cards: int
    cards_by_bucket: dict[int, int]
    mastered_percent: float
    due_for_review: int
