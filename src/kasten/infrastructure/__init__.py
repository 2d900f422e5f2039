# Infrastructure Package
from .deck_file import Deck, dump_deck, load_deck

__all__ = ["Deck", "load_deck", "dump_deck"]
