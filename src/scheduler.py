"""Daily wall-clock scheduler for the retention sweep.

The sweep itself never loops or retries; this module only decides when to
fire it. Runs are strictly sequential, so two sweeps never overlap.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, time, timedelta, timezone
from typing import Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

LOGGER = logging.getLogger(__name__)


def next_run_after(now: datetime, hour: int, minute: int, tz: ZoneInfo) -> datetime:
    """Return the next hour:minute in tz strictly after now (as a UTC datetime)."""

    local_now = now.astimezone(tz)
    candidate = datetime.combine(local_now.date(), time(hour, minute), tzinfo=tz)
    if candidate <= local_now:
        candidate = datetime.combine(local_now.date() + timedelta(days=1), time(hour, minute), tzinfo=tz)
    return candidate.astimezone(timezone.utc)


class DailyScheduler:
    """Fires a job once a day at a fixed local time."""

    def __init__(
        self,
        hour: int,
        minute: int,
        tz_name: str,
        clock: Optional[Callable[[], datetime]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if not 0 <= hour < 24 or not 0 <= minute < 60:
            raise ValueError(f"Invalid schedule time {hour:02d}:{minute:02d}")
        self._hour = hour
        self._minute = minute
        self._tz = ZoneInfo(tz_name)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sleep = sleep

    def next_run(self, after: Optional[datetime] = None) -> datetime:
        now = self._clock()
        if after is not None and after > now:
            now = after
        return next_run_after(now, self._hour, self._minute, self._tz)

    async def _sleep_until(self, target: datetime) -> None:
        # Timers may wake slightly early; never fire before the target.
        while True:
            delay = (target - self._clock()).total_seconds()
            if delay <= 0:
                return
            await self._sleep(delay)

    async def run_forever(self, job: Callable[[], Awaitable[object]], max_runs: Optional[int] = None) -> None:
        """Sleep until each scheduled time and run the job.

        A failing run is logged and the loop moves on to the next day; retry
        policy belongs to whoever watches the logs, not to the sweep. Each
        scheduled time fires at most once.
        """

        runs = 0
        last_target: Optional[datetime] = None
        while max_runs is None or runs < max_runs:
            target = self.next_run(after=last_target)
            delay = max((target - self._clock()).total_seconds(), 0.0)
            LOGGER.info("Next sweep at %s (in %.0f s)", target.astimezone(self._tz).isoformat(), delay)
            await self._sleep_until(target)
            last_target = target
            try:
                await job()
            except Exception:
                LOGGER.exception("Scheduled sweep failed")
            runs += 1
