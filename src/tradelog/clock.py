"""Time sources used for field defaults and export file names."""

import datetime


class SystemClock:
    """Reads the local wall clock"""

    def now(self) -> datetime.datetime:
        return datetime.datetime.now()

    def today(self) -> datetime.date:
        return self.now().date()


class FixedClock(SystemClock):
    """Always reports the same instant"""

    def __init__(self, instant: datetime.datetime):
        self.instant = instant

    def now(self) -> datetime.datetime:
        return self.instant
