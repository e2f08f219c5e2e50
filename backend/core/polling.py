"""
Fixed-interval polling.

Runs an async check every `interval_seconds` until it reports a value or
`max_attempts` checks have been made. There is no backoff: every attempt
waits the same interval. A check that raises counts as an attempt and the
loop keeps going, so the poll is always bounded.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

DONE = "done"
TIMEOUT = "timeout"
STOPPED = "stopped"


@dataclass
class PollResult:
    """Outcome of one polling run."""
    outcome: str                  # 'done', 'timeout', 'stopped'
    attempts: int
    value: Any = None

    @property
    def done(self) -> bool:
        return self.outcome == DONE


class FixedIntervalPoller:
    """Calls `check` until it returns something other than None."""

    def __init__(
        self,
        name: str,
        check: Callable[[], Awaitable[Optional[Any]]],
        interval_seconds: float,
        max_attempts: int,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.name = name
        self.check = check
        self.interval_seconds = interval_seconds
        self.max_attempts = max_attempts
        self.attempts = 0
        self._sleep = sleep
        self._running = False

    async def run(self) -> PollResult:
        """Poll from attempt zero. Calling run() again is a manual retry."""
        self.attempts = 0
        self._running = True
        logger.info(f"[Poller] {self.name}: every {self.interval_seconds}s, max {self.max_attempts} attempts")

        while self._running and self.attempts < self.max_attempts:
            self.attempts += 1
            try:
                value = await self.check()
            except Exception as e:
                logger.warning(f"[Poller] {self.name} attempt {self.attempts} failed: {e}")
                value = None

            if value is not None:
                self._running = False
                logger.info(f"[Poller] {self.name} done after {self.attempts} attempts")
                return PollResult(outcome=DONE, attempts=self.attempts, value=value)

            if self._running and self.attempts < self.max_attempts:
                await self._sleep(self.interval_seconds)

        if not self._running:
            logger.info(f"[Poller] {self.name} stopped after {self.attempts} attempts")
            return PollResult(outcome=STOPPED, attempts=self.attempts)

        self._running = False
        logger.info(f"[Poller] {self.name} timed out after {self.attempts} attempts")
        return PollResult(outcome=TIMEOUT, attempts=self.attempts)

    def stop(self):
        """Stop after the current attempt."""
        self._running = False
