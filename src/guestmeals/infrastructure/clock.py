from __future__ import annotations

import os
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

DEFAULT_SITE_TIMEZONE = "Asia/Kolkata"


def site_timezone() -> tzinfo:
    return ZoneInfo(os.getenv("SITE_TIMEZONE", DEFAULT_SITE_TIMEZONE))


class SystemClock:
    """Wall clock of the guest house; all slot boundaries are read in this zone."""

    def __init__(self, tz: tzinfo | None = None) -> None:
        self._tz = tz or site_timezone()

    def now(self) -> datetime:
        return datetime.now(self._tz)
