"""kasten: a Modified-Leitner flashcard scheduler."""

VERSION = "0.1.0"
