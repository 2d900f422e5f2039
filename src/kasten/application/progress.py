"""
Progress statistics over buckets and review history.

This is a pure computation module with no I/O.
"""

from collections.abc import Iterable, Mapping, Sequence

from kasten.domain.constants import ACCURACY_DECIMALS, RETIRED_BUCKET
from kasten.domain.exceptions import InvalidHistoryEntryError
from kasten.domain.models import (
    AnswerDifficulty,
    DeckSummary,
    Flashcard,
    ProgressStats,
    ReviewHistoryEntry,
)

from .buckets import to_bucket_sets, validate_buckets
from .scheduler import practice


def compute_progress(
    buckets: Mapping[int, Iterable[Flashcard]],
    history: Sequence[ReviewHistoryEntry],
) -> ProgressStats:
    """
    Summarize a review history against the current buckets.

    Easy counts as correct and Wrong as incorrect. Hard only adds to the
    total. Per-bucket counts attribute each review to the bucket the card
    sits in now; reviews of cards that are in no bucket are left out of
    that breakdown.

    Args:
        buckets: Sparse bucket mapping.
        history: Past grading events.

    Returns:
        ProgressStats for the history.
    """
    validate_buckets(buckets)
    _validate_history(history)

    location = {id(card): bucket for bucket, cards in buckets.items() for card in cards}
    per_bucket = {bucket: 0 for bucket in buckets}

    correct = 0
    incorrect = 0
    for entry in history:
        if entry.difficulty is AnswerDifficulty.EASY:
            correct += 1
        elif entry.difficulty is AnswerDifficulty.WRONG:
            incorrect += 1

        bucket = location.get(id(entry.card))
        if bucket is not None:
            per_bucket[bucket] += 1

    total = len(history)
    return ProgressStats(
        total_reviews=total,
        correct_count=correct,
        incorrect_count=incorrect,
        accuracy_percent=_percent(correct, total),
        per_bucket_review_count=per_bucket,
    )


def summarize_deck(buckets: Mapping[int, Iterable[Flashcard]], day: int) -> DeckSummary:
    """
    Count cards per bucket, the share already retired, and how many are due on ``day``.
    """
    bucket_sets = to_bucket_sets(buckets)
    cards_by_bucket = {bucket: len(cards) for bucket, cards in sorted(buckets.items())}
    total = sum(cards_by_bucket.values())
    mastered = sum(n for bucket, n in cards_by_bucket.items() if bucket >= RETIRED_BUCKET)

    return DeckSummary(
        total_cards=total,
        cards_by_bucket=cards_by_bucket,
        mastered_percent=_percent(mastered, total),
        due_for_review=len(practice(bucket_sets, day)),
    )


def _percent(part: int, whole: int) -> float:
    if whole == 0:
        return 0.0
    return round(part / whole * 100, ACCURACY_DECIMALS)


def _validate_history(history: Sequence[ReviewHistoryEntry]) -> None:
    if not isinstance(history, Sequence) or isinstance(history, (str, bytes)):
        raise InvalidHistoryEntryError(
            f"History must be a sequence of entries, got {type(history).__name__}"
        )

    for index, entry in enumerate(history):
        if not isinstance(entry, ReviewHistoryEntry):
            raise InvalidHistoryEntryError(f"History entry {index} is not a ReviewHistoryEntry")
        if not isinstance(entry.card, Flashcard):
            raise InvalidHistoryEntryError(f"History entry {index} has no flashcard")
        if not isinstance(entry.difficulty, AnswerDifficulty):
            raise InvalidHistoryEntryError(
                f"History entry {index} has invalid difficulty {entry.difficulty!r}"
            )
