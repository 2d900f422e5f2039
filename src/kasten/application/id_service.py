"""Service for assigning stable identifiers to flashcards."""

import dataclasses
import logging

from ulid import ULID

from kasten.domain.constants import CARD_ID_PREFIX
from kasten.domain.models import Flashcard

logger = logging.getLogger(__name__)


def generate_card_id() -> str:
    """Generate a stable card ID using ULID."""
    return f"{CARD_ID_PREFIX}{ULID()}"


def ensure_card_id(card: Flashcard) -> Flashcard:
    """
    Return ``card`` if it already has an ID, otherwise a copy that has one.

    Cards are immutable, so the copy is a new identity; callers must place
    the returned card in their buckets instead of the original.
    """
    if card.card_id:
        return card
    new_card = dataclasses.replace(card, card_id=generate_card_id())
    logger.debug(f"Assigned {new_card.card_id} to {card.front!r}")
    return new_card
