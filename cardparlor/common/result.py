"""
Result types shared by the game engines.

Rejected intents are reported as values rather than exceptions: an engine
returns a `Result` describing why nothing happened, and the state it holds is
left untouched. Stepping functions driven by an external scheduler return an
`ActionResult` instead.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class ErrorCode(Enum):
    """Reasons an intent can be rejected."""

    INVALID_MOVE = auto()
    INSUFFICIENT_FUNDS = auto()
    NO_BET_PLACED = auto()
    ILLEGAL_ACTION = auto()


class ActionResult(Enum):
    """Outcome of a single scheduler tick."""

    ACTED = auto()
    NO_ACTION_AVAILABLE = auto()
    CANCELLED = auto()


@dataclass(frozen=True)
class Result:
    """
    Outcome of an intent.

    Attributes:
        ok: Whether the intent was applied
        error: Reason for rejection (None on success)
        message: Human-readable description for the presentation layer
    """

    ok: bool
    error: Optional[ErrorCode] = None
    message: str = ""

    @classmethod
    def success(cls, message: str = "") -> "Result":
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, error: ErrorCode, message: str = "") -> "Result":
        return cls(ok=False, error=error, message=message)

    def __bool__(self) -> bool:
        return self.ok
