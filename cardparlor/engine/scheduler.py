"""
Asyncio drivers for the stepping loops.

The engines never sleep or schedule anything themselves: autoplay and the
dealer's turn advance one transition per call. The helpers here pace those
calls on an asyncio event loop, which is what an interactive front end would
do between animation frames. Cancellation is handled by the engines: once
autoplay is stopped or a new game is started, the next step returns
``ActionResult.CANCELLED`` and the loop ends.
"""

from typing import Callable, Optional
import asyncio
import logging

from cardparlor.common.result import ActionResult
from cardparlor.blackjack import RoundStage
from cardparlor.engine.blackjack import BlackjackEngine
from cardparlor.engine.solitaire import SolitaireEngine

logger = logging.getLogger(__name__)

DEFAULT_AUTOPLAY_INTERVAL = 2.5
DEFAULT_DEALER_INTERVAL = 1.0
DEFAULT_ROUND_END_DELAY = 3.0


class StepScheduler:
    """
    Calls a step function at a fixed cadence until it stops acting.
    """

    def __init__(self, interval: float):
        """
        Args:
            interval: Seconds to wait before each step
        """
        self.interval = interval
        self.steps = 0

    async def run(self, step: Callable[[], ActionResult]) -> ActionResult:
        """
        Drive the step function.

        Returns:
            The first result other than ACTED
        """
        while True:
            await asyncio.sleep(self.interval)
            result = step()
            if result != ActionResult.ACTED:
                logger.debug(f"Stepping ended after {self.steps} steps: {result.name}")
                return result
            self.steps += 1


async def run_autoplay(
    engine: SolitaireEngine, interval: Optional[float] = None
) -> ActionResult:
    """
    Start autoplay and keep stepping until it stops.

    Args:
        engine: The patience engine to drive
        interval: Seconds between moves (defaults to the engine's
            ``autoplay_interval`` config value)

    Returns:
        NO_ACTION_AVAILABLE when the solver ran out of moves or won,
        CANCELLED when autoplay was stopped from outside
    """
    if interval is None:
        interval = engine.config.get("autoplay_interval", DEFAULT_AUTOPLAY_INTERVAL)
    if not engine.start_autoplay():
        return ActionResult.CANCELLED

    session = engine.autoplay_session
    result = await StepScheduler(interval).run(lambda: engine.autoplay_step(session))
    if result == ActionResult.CANCELLED and engine.state.is_won:
        return ActionResult.NO_ACTION_AVAILABLE
    return result


async def run_dealer(
    engine: BlackjackEngine,
    interval: Optional[float] = None,
    round_end_delay: Optional[float] = None,
) -> ActionResult:
    """
    Play out the dealer's turn, then clear the table after a display delay.

    Args:
        engine: The blackjack engine to drive
        interval: Seconds between dealer cards (defaults to the engine's
            ``dealer_interval`` config value)
        round_end_delay: Seconds the resolved round stays on the table
            (defaults to the engine's ``round_end_delay`` config value)

    Returns:
        NO_ACTION_AVAILABLE once the round has been cleared, CANCELLED if a
        new game was started in the meantime
    """
    if interval is None:
        interval = engine.config.get("dealer_interval", DEFAULT_DEALER_INTERVAL)
    if round_end_delay is None:
        round_end_delay = engine.config.get("round_end_delay", DEFAULT_ROUND_END_DELAY)

    generation = engine.generation
    result = ActionResult.NO_ACTION_AVAILABLE
    if engine.state.stage == RoundStage.DEALER_TURN:
        result = await StepScheduler(interval).run(
            lambda: engine.dealer_step(generation)
        )
    if result == ActionResult.CANCELLED:
        return result
    if engine.state.stage != RoundStage.RESOLVED:
        return ActionResult.NO_ACTION_AVAILABLE

    await asyncio.sleep(round_end_delay)
    if not engine.finish_round(generation):
        return ActionResult.CANCELLED
    return ActionResult.NO_ACTION_AVAILABLE
