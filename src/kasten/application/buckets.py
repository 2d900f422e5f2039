"""
Conversions between the sparse and dense bucket layouts.

The sparse layout (``BucketMap``) is what callers persist. The dense
layout (``BucketSets``) is derived on demand for the scheduler and the
range inspector and is never written back.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence

from kasten.domain.exceptions import InvalidBucketError, InvalidCardError
from kasten.domain.models import BucketMap, BucketRange, BucketSets, Flashcard

logger = logging.getLogger(__name__)


def check_bucket_number(bucket: object) -> int:
    """Reject anything that is not a non-negative int (bools included)."""
    if isinstance(bucket, bool) or not isinstance(bucket, int) or bucket < 0:
        raise InvalidBucketError(f"Invalid bucket number: {bucket!r}")
    return bucket


def validate_buckets(buckets: Mapping[int, Iterable[Flashcard]]) -> None:
    """
    Check that a sparse mapping has the expected shape.

    Keys must be non-negative ints and every member must be a Flashcard.
    """
    if not isinstance(buckets, Mapping):
        raise InvalidBucketError(f"Expected a mapping of buckets, got {type(buckets).__name__}")

    for bucket, cards in buckets.items():
        check_bucket_number(bucket)
        if not isinstance(cards, (set, frozenset)):
            raise InvalidBucketError(
                f"Bucket {bucket} must hold a set of cards, got {type(cards).__name__}"
            )
        for card in cards:
            if not isinstance(card, Flashcard):
                raise InvalidCardError(f"Bucket {bucket} contains a non-card value: {card!r}")


def validate_bucket_sets(bucket_sets: Sequence[Iterable[Flashcard]]) -> None:
    """Check that a dense sequence is a list or tuple of sets of Flashcards."""
    if not isinstance(bucket_sets, (list, tuple)):
        raise InvalidBucketError(
            f"Expected a sequence of bucket sets, got {type(bucket_sets).__name__}"
        )

    for index, cards in enumerate(bucket_sets):
        if not isinstance(cards, (set, frozenset)):
            raise InvalidBucketError(
                f"Position {index} must hold a set of cards, got {type(cards).__name__}"
            )
        for card in cards:
            if not isinstance(card, Flashcard):
                raise InvalidCardError(f"Position {index} contains a non-card value: {card!r}")


def copy_buckets(buckets: Mapping[int, Iterable[Flashcard]]) -> BucketMap:
    """Return a copy whose sets can be changed without touching the original."""
    return {bucket: set(cards) for bucket, cards in buckets.items()}


def find_bucket(buckets: Mapping[int, Iterable[Flashcard]], card: Flashcard) -> int | None:
    """Return the bucket holding ``card``, or None if it is in no bucket."""
    for bucket, cards in buckets.items():
        if card in cards:
            return bucket
    return None


def to_bucket_sets(buckets: Mapping[int, Iterable[Flashcard]]) -> BucketSets:
    """
    Convert a sparse bucket mapping into a dense list of sets.

    Args:
        buckets: Mapping of bucket number -> set of cards.

    Returns:
        List where index i holds a fresh copy of bucket i. Gaps become
        empty sets. An empty mapping gives an empty list.
    """
    validate_buckets(buckets)
    if not buckets:
        return []

    size = max(buckets) + 1
    result: BucketSets = [set() for _ in range(size)]
    for bucket, cards in buckets.items():
        result[bucket] = set(cards)
    return result


def get_bucket_range(bucket_sets: BucketSets) -> BucketRange | None:
    """
    Find the span of buckets that hold at least one card.

    Returns:
        BucketRange with the first and last occupied index, or None when
        the sequence is empty or every bucket is empty.
    """
    validate_bucket_sets(bucket_sets)
    min_bucket = next((i for i, cards in enumerate(bucket_sets) if cards), None)
    if min_bucket is None:
        return None

    max_bucket = next(
        i for i in range(len(bucket_sets) - 1, min_bucket - 1, -1) if bucket_sets[i]
    )
    return BucketRange(min_bucket=min_bucket, max_bucket=max_bucket)


def occupied_buckets(bucket_sets: BucketSets) -> set[int]:
    """Indices of the non-empty positions in a dense sequence."""
    return {i for i, cards in enumerate(bucket_sets) if cards}
