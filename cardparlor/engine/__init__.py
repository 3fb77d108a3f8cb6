"""
Game engines for the Cardparlor framework.

This package provides the session engines that accept intents from a
presentation layer, plus the asyncio helpers that pace the stepping loops.
"""

from cardparlor.engine.base import CardparlorEngine
from cardparlor.engine.solitaire import SolitaireEngine
from cardparlor.engine.blackjack import BlackjackEngine
from cardparlor.engine.scheduler import StepScheduler, run_autoplay, run_dealer

__all__ = [
    "CardparlorEngine",
    "SolitaireEngine",
    "BlackjackEngine",
    "StepScheduler",
    "run_autoplay",
    "run_dealer",
]
