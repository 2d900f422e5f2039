# Domain Package
from .exceptions import (
    ContractViolationError,
    DeckFileError,
    InvalidBucketError,
    InvalidCardError,
    InvalidDifficultyError,
    InvalidHistoryEntryError,
    KastenError,
)
from .models import (
    AnswerDifficulty,
    BucketMap,
    BucketRange,
    BucketSets,
    DeckSummary,
    Flashcard,
    ProgressStats,
    ReviewHistoryEntry,
)

__all__ = [
    "AnswerDifficulty",
    "BucketMap",
    "BucketRange",
    "BucketSets",
    "DeckSummary",
    "Flashcard",
    "ProgressStats",
    "ReviewHistoryEntry",
    "KastenError",
    "ContractViolationError",
    "InvalidBucketError",
    "InvalidCardError",
    "InvalidDifficultyError",
    "InvalidHistoryEntryError",
    "DeckFileError",
]
