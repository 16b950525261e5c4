"""
Per-question countdown.
One asyncio task ticks once per interval for the active question and fires
the expiry callback exactly once when the limit runs out.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from models.schemas import TimerState
from utils.config import config

logger = logging.getLogger(__name__)

WARNING_RATIO = 0.25
WARNING_FLOOR_SECONDS = 5

ExpiryCallback = Callable[[int, int], Awaitable[None]]
StateCallback = Callable[[TimerState], None]


def warning_threshold(time_limit: int) -> int:
    """Remaining seconds at or below which the warning shows."""
    return max(WARNING_FLOOR_SECONDS, int(time_limit * WARNING_RATIO))


class TimerEngine:
    """
    Countdown for the question at one session index.

    The running task is bound to the index it was activated for; once the
    engine is reactivated or stopped, an older task exits without touching
    any state.
    """

    def __init__(
        self,
        on_expire: Optional[ExpiryCallback] = None,
        on_tick: Optional[StateCallback] = None,
        on_warning: Optional[StateCallback] = None,
        tick_interval: Optional[float] = None,
    ):
        self.on_expire = on_expire
        self.on_tick = on_tick
        self.on_warning = on_warning
        self.tick_interval = tick_interval if tick_interval is not None else config.interview.tick_interval

        self.question_index: Optional[int] = None
        self.time_limit = 0
        self.remaining = 0
        self.running = False
        self.warning = False
        self.expired = False

        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    # ========================================
    # Control
    # ========================================

    def activate(self, index: int, time_limit: int, start: bool = True):
        """
        Reset the countdown for a question.

        Args:
            index: Session index the countdown belongs to
            time_limit: Full limit in seconds
            start: Schedule the ticking task on the running event loop
        """
        self._cancel_task()
        self._generation += 1

        self.question_index = index
        self.time_limit = time_limit
        self.remaining = time_limit
        self.running = True
        self.warning = False
        self.expired = False

        logger.debug(f"Timer activated for question {index} ({time_limit}s)")
        if start:
            self._task = asyncio.get_running_loop().create_task(self._run(self._generation))

    def stop(self):
        """Stop ticking; remaining time is kept only for display."""
        self._cancel_task()
        self._generation += 1
        if self.running:
            logger.debug(f"Timer stopped at question {self.question_index} ({self.remaining}s left)")
        self.running = False

    def tick(self) -> bool:
        """
        Advance the countdown by one second.

        Returns:
            True only on the tick that reaches zero
        """
        if not self.running or self.expired:
            return False

        self.remaining = max(0, self.remaining - 1)

        if not self.warning and self.remaining <= warning_threshold(self.time_limit):
            self.warning = True
            if self.on_warning:
                self.on_warning(self.state)

        if self.on_tick:
            self.on_tick(self.state)

        if self.remaining == 0:
            self.expired = True
            self.running = False
            logger.info(f"Time expired on question {self.question_index}")
            return True
        return False

    # ========================================
    # Queries
    # ========================================

    @property
    def elapsed(self) -> int:
        """Whole seconds counted down since activation."""
        return self.time_limit - self.remaining

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    @property
    def state(self) -> TimerState:
        return TimerState(
            question_index=self.question_index,
            time_limit=self.time_limit,
            remaining=self.remaining,
            running=self.running,
            warning=self.warning,
            expired=self.expired,
        )

    # ========================================
    # Internals
    # ========================================

    def _cancel_task(self):
        task = self._task
        self._task = None
        # The expiry callback may reactivate the timer from inside its own task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _run(self, generation: int):
        while True:
            await asyncio.sleep(self.tick_interval)
            if generation != self._generation:
                return

            if self.tick():
                index = self.question_index
                # Detach before the callback so reactivation does not cancel it
                self._task = None
                if self.on_expire:
                    await self.on_expire(index, self.elapsed)
                return
