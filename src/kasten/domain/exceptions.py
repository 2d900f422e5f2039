"""
Exceptions raised by kasten.

Absence (a card that is in no bucket, an empty bucket sequence) is never
an error. These are raised only when a caller hands over a value of the
wrong shape.
"""


class KastenError(Exception):
    """Base class for every error raised by kasten."""


class ContractViolationError(KastenError, ValueError):
    """An input value does not have the shape an operation requires."""


class InvalidDifficultyError(ContractViolationError):
    """A difficulty is not one of Wrong, Hard or Easy."""


class InvalidCardError(ContractViolationError):
    """A value used as a flashcard is not a Flashcard."""


class InvalidHistoryEntryError(ContractViolationError):
    """A review history entry is missing its card or carries a bad difficulty."""


class InvalidBucketError(ContractViolationError):
    """A bucket number or day counter is not a non-negative integer."""


class DeckFileError(KastenError):
    """A deck document could not be read or is malformed."""
