"""Background loop that runs the overdue sweep once a day."""

import asyncio
import logging
from datetime import datetime, timedelta

from tasktracker.services.overdue_sweep import OverdueSweep, SweepReport

logger = logging.getLogger("tasktracker.sweep")

# Pause after an unexpected loop failure before trying again
_RETRY_DELAY_SECONDS = 60


class OverdueSweepScheduler:
    """Sleeps until `run_hour` local time, sweeps, and repeats.

    Each sweep opens its own session from `db_session_factory` and runs in a
    worker thread so the event loop keeps serving requests.
    """

    def __init__(self, db_session_factory, run_hour: int = 9):
        self.db_factory = db_session_factory
        self.run_hour = run_hour
        self._loop_task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def seconds_until_next_run(self, now: datetime | None = None) -> float:
        now = now or datetime.now()
        target = datetime.combine(now.date(), datetime.min.time()).replace(hour=self.run_hour)
        if target <= now:
            target += timedelta(days=1)
        return (target - now).total_seconds()

    def run_sweep(self) -> SweepReport | None:
        """Run one sweep; errors are logged and reported as None."""
        db = self.db_factory()
        try:
            return OverdueSweep.run(db)
        except Exception as e:
            logger.error(f"Overdue sweep failed: {e}", exc_info=True)
            return None
        finally:
            db.close()

    async def _loop(self) -> None:
        logger.info(f"Overdue sweep scheduled daily at {self.run_hour:02d}:00")
        while True:
            delay = self.seconds_until_next_run()
            logger.debug(f"Next overdue sweep in {delay:.0f}s")
            try:
                await asyncio.sleep(delay)
                await asyncio.to_thread(self.run_sweep)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Overdue sweep scheduler error: {e}", exc_info=True)
                await asyncio.sleep(_RETRY_DELAY_SECONDS)

    async def start(self) -> None:
        if self.is_running:
            logger.warning("Overdue sweep scheduler already running")
            return
        self._loop_task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        task, self._loop_task = self._loop_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Overdue sweep scheduler stopped")
