"""Rotation Scheduler: triggers a rotation at the start of every window.

Invariants:
    - run_once never raises: failures are logged and the loop keeps going
    - Sleeps until the next window boundary plus a non-negative jitter, so the
      run always lands inside the new window and sees the new seed

Design Decisions:
    - Orchestrator built per tick through a factory: each run gets fresh
      dependencies and the scheduler holds no store handle of its own
"""

import asyncio
import logging
from random import randint
from typing import Awaitable, Callable

from slot_rotation.core.errors import RotationError, RotationInProgressError
from slot_rotation.core.period_clock import PeriodClock
from slot_rotation.services.rotation_orchestrator import (
    RotationOrchestrator, RotationResult,
)

logger = logging.getLogger(__name__)


class RotationScheduler:
    """Periodic in-process trigger for RotationOrchestrator.run()."""

    def __init__(
        self,
        orchestrator_factory: Callable[[], RotationOrchestrator],
        clock: PeriodClock,
        jitter_seconds: int = 15,
    ):
        self._orchestrator_factory = orchestrator_factory
        self.clock = clock
        self.jitter_seconds = jitter_seconds
        self._task: asyncio.Task | None = None

    async def run_once(self) -> RotationResult | None:
        """One guarded rotation; returns None when it did not complete."""
        try:
            return await self._orchestrator_factory().run()
        except RotationInProgressError as exc:
            logger.info(f"Scheduled rotation skipped: {exc.message}")
        except RotationError as exc:
            logger.error(
                f"Scheduled rotation failed: {exc.message}",
                extra={"error_code": exc.code},
            )
        except Exception:
            logger.exception("Scheduled rotation crashed")
        return None

    def seconds_until_next_run(self) -> float:
        jitter = randint(0, self.jitter_seconds) if self.jitter_seconds else 0
        return self.clock.ms_until_next_window() / 1000 + jitter

    async def run_forever(
        self, sleeper: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        while True:
            await sleeper(self.seconds_until_next_run())
            await self.run_once()

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run_forever())
            logger.info("Rotation scheduler started")
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Rotation scheduler stopped")
