"""Patience-specific constants: table layout, scoring and solver limits."""

from cardparlor.common.pile import FOUNDATION_COUNT, TABLEAU_COUNT

DECK_SIZE = 52
FOUNDATION_SIZE = 13  # Ace through King

# Scoring
FLIP_POINTS = 5
FOUNDATION_POINTS = 10
WASTE_TO_TABLEAU_POINTS = 5

# Autoplay
AUTOPLAY_HISTORY_SIZE = 10
MAX_STOCK_CYCLES = 3
EXPOSE_PRIORITY = 10
DEFAULT_PRIORITY = 1

__all__ = [
    "DECK_SIZE",
    "FOUNDATION_COUNT",
    "FOUNDATION_SIZE",
    "TABLEAU_COUNT",
    "FLIP_POINTS",
    "FOUNDATION_POINTS",
    "WASTE_TO_TABLEAU_POINTS",
    "AUTOPLAY_HISTORY_SIZE",
    "MAX_STOCK_CYCLES",
    "EXPOSE_PRIORITY",
    "DEFAULT_PRIORITY",
]
