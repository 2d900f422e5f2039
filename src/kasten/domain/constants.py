"""Centralized constants for kasten.

All scheduling numbers and presentation defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Leitner tiers ----------
LEARNING_BUCKET = 0
RETIRED_BUCKET = 5
LEITNER_TIERS = RETIRED_BUCKET + 1  # buckets 0..5 take part in scheduling

BUCKET_LABELS = {
    0: "Learning",
    1: "Review 2 days",
    2: "Review 4 days",
    3: "Review 8 days",
    4: "Review 16 days",
    5: "Retired",
}

# ---------- Hints ----------
NO_HINT_MESSAGE = "No hint available."

# ---------- Progress ----------
ACCURACY_DECIMALS = 2

# ---------- Practice session ----------
DEFAULT_SESSION_LIMIT = 10

# ---------- Identifiers ----------
CARD_ID_PREFIX = "card_"
