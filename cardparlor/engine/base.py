"""
Base engine class for the Cardparlor framework.

This module provides the abstract base class for the game engines. An engine
owns the state of one session, accepts intents from a presentation layer and
swaps in the new immutable state produced by the pure transitions.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
import logging
import random

from cardparlor.common.result import Result
from cardparlor.events import EventBus, EngineEventType

logger = logging.getLogger(__name__)


class CardparlorEngine(ABC):
    """
    Abstract base class for all game engines.

    Every engine instance is an independent session; nothing is shared
    between instances except the event bus.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the engine.

        Args:
            config: Configuration options for the game. ``seed`` makes the
                shuffles of this session reproducible.
        """
        self.config = config or {}
        self.event_bus = EventBus.get_instance()
        self.rng = random.Random(self.config.get("seed"))
        self.generation = 0
        self.state = None

    @abstractmethod
    def new_game(self) -> None:
        """
        Discard the current state and start a new game.

        Implementations must bump ``generation`` so that steps scheduled for
        the previous game are cancelled.
        """
        self.generation += 1

    def get_state(self):
        """
        Get the current immutable state snapshot.
        """
        return self.state

    def render_state(self) -> Dict[str, Any]:
        """
        Get the current state in a renderer-friendly format.
        """
        return self.state.to_dict()

    def _reject(self, action: str, result: Result) -> Result:
        """Report a rejected intent without touching the state."""
        logger.debug(f"Rejected {action}: {result.error.name} {result.message}")
        self.event_bus.emit(
            EngineEventType.ACTION_REJECTED,
            {
                "game_id": self.state.id if self.state else None,
                "action": action,
                "error": result.error.name,
                "message": result.message,
            },
        )
        return result
