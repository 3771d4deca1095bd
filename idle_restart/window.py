"""Recurring daily maintenance windows.

A window opens at a fixed local wall-clock time in a fixed timezone and stays
open for a fixed span of elapsed time. Starts are computed in local time and
then pinned to UTC before the duration is added, so a DST change inside a
window moves its local closing time rather than its length.
"""
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo


class ScheduleError(RuntimeError):
    pass


@dataclass(frozen=True)
class TimeWindow:
    start: datetime
    stop: datetime

    def __contains__(self, instant: datetime) -> bool:
        return self.start <= instant <= self.stop


def _require_aware(instant: datetime):
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValueError(f"naive datetime {instant!r}; pass a timezone-aware instant")


class WindowScheduler:
    def __init__(self, start: time, duration: timedelta, tz: ZoneInfo):
        if not timedelta(0) < duration < timedelta(hours=24):
            raise ValueError("window duration must be between 0 and 24 hours")
        self.start = start
        self.duration = duration
        self.tz = tz

    @classmethod
    def from_settings(cls, settings) -> "WindowScheduler":
        return cls(settings.window_start, settings.window_duration, settings.tz)

    def nearby_windows(self, reference: datetime) -> List[TimeWindow]:
        """Yesterday's, today's and tomorrow's windows around `reference`, oldest first."""
        _require_aware(reference)
        today = reference.astimezone(self.tz).date()
        windows = []
        for offset in (-1, 0, 1):
            day = today + timedelta(days=offset)
            start = datetime.combine(day, self.start, tzinfo=self.tz).astimezone(timezone.utc)
            windows.append(TimeWindow(start, start + self.duration))
        return windows

    def current_or_next_window(self, now: datetime) -> Optional[TimeWindow]:
        """The window `now` is inside of, else the next one to open."""
        return next((w for w in self.nearby_windows(now) if w.stop >= now), None)

    def strictly_next_window(self, now: datetime) -> Optional[TimeWindow]:
        """The next window to open, skipping one already in progress."""
        return next((w for w in self.nearby_windows(now) if w.start > now), None)
