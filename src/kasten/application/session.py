"""
Practice session orchestrator.

Builds the list of cards due on a day, serves them one at a time and
feeds each grade back through the scheduler. The session keeps its own
copy of the buckets and swaps in the new mapping after every grade; the
caller's mapping is never touched.
"""

import datetime
import logging
from collections.abc import Iterable, Mapping

from kasten.domain.constants import DEFAULT_SESSION_LIMIT
from kasten.domain.exceptions import ContractViolationError
from kasten.domain.models import (
    AnswerDifficulty,
    BucketMap,
    Flashcard,
    ReviewHistoryEntry,
)

from .buckets import copy_buckets, find_bucket, to_bucket_sets
from .scheduler import get_hint, practice, update

logger = logging.getLogger(__name__)


class PracticeSession:
    """
    One sitting of practice for a single day.

    Cards are served lowest bucket first, then alphabetically by front
    text, and at most ``limit`` of them.
    """

    def __init__(
        self,
        buckets: Mapping[int, Iterable[Flashcard]],
        day: int,
        history: Iterable[ReviewHistoryEntry] | None = None,
        limit: int = DEFAULT_SESSION_LIMIT,
        review_date: datetime.date | None = None,
    ):
        """
        Args:
            buckets: Sparse bucket mapping to start from.
            day: Zero-based day counter used to pick due cards.
            history: Earlier review events; new ones are appended to a copy.
            limit: Maximum number of cards served in this session.
            review_date: Date stamped on new history entries (defaults to today).
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ContractViolationError(f"Session limit must be a positive integer, got {limit!r}")

        self.day = day
        self.limit = limit
        self.review_date = review_date or datetime.date.today()
        self._buckets = copy_buckets(buckets)
        self._history = list(history or [])
        self._cards = self._build_queue()
        self._position = 0

        logger.info(f"Practice session for day {day}: {len(self._cards)} card(s) due")

    def _build_queue(self) -> list[Flashcard]:
        due = practice(to_bucket_sets(self._buckets), self.day)
        ordered = sorted(
            due,
            key=lambda card: (find_bucket(self._buckets, card), card.front.lower()),
        )
        return ordered[: self.limit]

    @property
    def buckets(self) -> BucketMap:
        """Current bucket mapping, including every grade recorded so far."""
        return copy_buckets(self._buckets)

    @property
    def history(self) -> list[ReviewHistoryEntry]:
        return list(self._history)

    @property
    def cards(self) -> list[Flashcard]:
        return list(self._cards)

    @property
    def current_card(self) -> Flashcard | None:
        if self.is_complete:
            return None
        return self._cards[self._position]

    @property
    def remaining(self) -> int:
        return len(self._cards) - self._position

    @property
    def is_complete(self) -> bool:
        return self._position >= len(self._cards)

    @property
    def progress_percent(self) -> float:
        if not self._cards:
            return 100.0
        return self._position / len(self._cards) * 100

    def hint(self) -> str:
        """Hint for the card currently being shown."""
        card = self.current_card
        if card is None:
            raise ContractViolationError("Session is complete; there is no current card")
        return get_hint(card)

    def grade(self, difficulty: AnswerDifficulty | str) -> int:
        """
        Record the learner's answer for the current card and advance.

        Returns:
            The bucket the card landed in.
        """
        card = self.current_card
        if card is None:
            raise ContractViolationError("Session is complete; there is no card to grade")

        difficulty = AnswerDifficulty.parse(difficulty)
        self._buckets = update(self._buckets, card, difficulty)
        self._history.append(
            ReviewHistoryEntry(card=card, difficulty=difficulty, date=self.review_date)
        )
        self._position += 1

        new_bucket = find_bucket(self._buckets, card)
        logger.debug(f"Graded {card.front!r} as {difficulty.value}; now in bucket {new_bucket}")
        if self.is_complete:
            logger.info(f"Practice session for day {self.day} complete")
        return new_bucket
