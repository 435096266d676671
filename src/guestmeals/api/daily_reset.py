from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime, time, timedelta

from guestmeals.api.dependencies import Container
from guestmeals.application.use_cases.reset_daily_counters import ResetDailyCounters

logger = logging.getLogger(__name__)

_DISABLED_VALUES = {"0", "false", "no", "off"}


def daily_reset_enabled() -> bool:
    return os.getenv("DAILY_RESET_ENABLED", "true").strip().lower() not in _DISABLED_VALUES


def seconds_until_midnight(now: datetime) -> float:
    """Seconds until the next local midnight, in the zone of ``now``."""
    midnight = datetime.combine(now.date() + timedelta(days=1), time.min, tzinfo=now.tzinfo)
    return max((midnight - now).total_seconds(), 0.0)


async def run_daily_reset(container: Container) -> None:
    use_case = ResetDailyCounters(time_slot_repository=container.time_slot_repository)
    while True:
        await asyncio.sleep(seconds_until_midnight(container.clock.now()))
        try:
            await asyncio.to_thread(use_case.execute)
        except Exception:
            logger.exception("daily_reset_failed")
        # Step past the boundary so a slightly early wake-up does not fire twice.
        await asyncio.sleep(1.0)
