"""
Modified-Leitner scheduling.

Selects the cards due on a given day and moves a card between buckets
after it has been graded. Every function here is pure: inputs are never
mutated and a new value is returned.
"""

import logging
from collections.abc import Iterable, Mapping

from kasten.domain.constants import (
    LEARNING_BUCKET,
    LEITNER_TIERS,
    NO_HINT_MESSAGE,
    RETIRED_BUCKET,
)
from kasten.domain.exceptions import (
    InvalidBucketError,
    InvalidCardError,
    InvalidDifficultyError,
)
from kasten.domain.models import AnswerDifficulty, BucketMap, BucketSets, Flashcard

from .buckets import (
    check_bucket_number,
    copy_buckets,
    find_bucket,
    validate_bucket_sets,
    validate_buckets,
)

logger = logging.getLogger(__name__)


def is_bucket_due(bucket: int, day: int) -> bool:
    """Bucket i is due on day d when (d + 1) is a multiple of 2**i."""
    return (day + 1) % (2**bucket) == 0


def practice(bucket_sets: BucketSets, day: int) -> set[Flashcard]:
    """
    Select the cards to practice on ``day``.

    Only buckets 0 through 5 are consulted. Positions past the retired
    bucket cannot be reached through ``update`` and are ignored here.

    Args:
        bucket_sets: Dense bucket sequence.
        day: Zero-based day counter.

    Returns:
        Union of the cards in every bucket due on ``day``.
    """
    if isinstance(day, bool) or not isinstance(day, int) or day < 0:
        raise InvalidBucketError(f"Day must be a non-negative integer, got {day!r}")
    validate_bucket_sets(bucket_sets)

    due: set[Flashcard] = set()
    for bucket, cards in enumerate(bucket_sets[:LEITNER_TIERS]):
        if is_bucket_due(bucket, day):
            due.update(cards)
    return due


def next_bucket(bucket: int, difficulty: AnswerDifficulty) -> int:
    """
    Bucket a card moves to from ``bucket`` after being graded.

    Wrong resets to the learning bucket, Hard drops one tier and Easy
    climbs one tier, capped at the retired bucket.
    """
    check_bucket_number(bucket)
    if difficulty is AnswerDifficulty.WRONG:
        return LEARNING_BUCKET
    if difficulty is AnswerDifficulty.HARD:
        return max(bucket - 1, LEARNING_BUCKET)
    if difficulty is AnswerDifficulty.EASY:
        return min(bucket + 1, RETIRED_BUCKET)
    raise InvalidDifficultyError(f"Invalid difficulty: {difficulty!r}")


def update(
    buckets: Mapping[int, Iterable[Flashcard]],
    card: Flashcard,
    difficulty: AnswerDifficulty,
) -> BucketMap:
    """
    Move a card to its new bucket after a practice trial.

    Args:
        buckets: Sparse bucket mapping. Left untouched.
        card: The card that was practiced.
        difficulty: How well the learner answered.

    Returns:
        A new mapping with the card moved. If the card is in no bucket the
        result is an unchanged copy.
    """
    validate_buckets(buckets)
    if not isinstance(card, Flashcard):
        raise InvalidCardError(f"Expected a Flashcard, got {type(card).__name__}")
    if not isinstance(difficulty, AnswerDifficulty):
        raise InvalidDifficultyError(f"Invalid difficulty: {difficulty!r}")

    updated = copy_buckets(buckets)

    current = find_bucket(updated, card)
    if current is None:
        logger.debug(f"Card {card.front!r} is not in any bucket; nothing to move")
        return updated

    target = next_bucket(current, difficulty)
    updated[current].discard(card)
    updated.setdefault(target, set()).add(card)

    logger.debug(f"Card {card.front!r}: bucket {current} -> {target} ({difficulty.value})")
    return updated


def add_card(buckets: Mapping[int, Iterable[Flashcard]], card: Flashcard) -> BucketMap:
    """
    Place a newly created card in the learning bucket.

    A card that already sits in some bucket is left where it is.
    """
    validate_buckets(buckets)
    if not isinstance(card, Flashcard):
        raise InvalidCardError(f"Expected a Flashcard, got {type(card).__name__}")

    updated = copy_buckets(buckets)
    if find_bucket(updated, card) is not None:
        return updated

    updated.setdefault(LEARNING_BUCKET, set()).add(card)
    return updated


def get_hint(card: Flashcard) -> str:
    """Return the card's hint, or a fixed message when it has none."""
    if not isinstance(card, Flashcard):
        raise InvalidCardError("Invalid flashcard.")
    return card.hint if card.hint else NO_HINT_MESSAGE
