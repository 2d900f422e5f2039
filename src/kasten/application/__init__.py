# Application Package
from .buckets import get_bucket_range, to_bucket_sets
from .progress import compute_progress, summarize_deck
from .scheduler import add_card, get_hint, practice, update
from .session import PracticeSession

__all__ = [
    "to_bucket_sets",
    "get_bucket_range",
    "practice",
    "update",
    "add_card",
    "get_hint",
    "compute_progress",
    "summarize_deck",
    "PracticeSession",
]
