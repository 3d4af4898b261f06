"""
Timeslot catalog and calendar arithmetic.

A timeslot code such as "TUE_P2" names a day token and a 1-based period
number. The catalog (ordered day tokens plus each period's time range) is an
immutable value so several configurations can coexist.

Example: week_start=2025-01-20 (Mon), code="TUE_P2" → 2025-01-21 10:45
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from ..config import TIMESLOT_DAYS, TIMESLOT_PERIOD_TIMES

logger = logging.getLogger(__name__)

DAY_NAMES = {
    "MON": "Monday",
    "TUE": "Tuesday",
    "WED": "Wednesday",
    "THU": "Thursday",
    "FRI": "Friday",
    "SAT": "Saturday",
    "SUN": "Sunday",
}

TIMESLOT_SEPARATOR = "_P"


def _parse_clock_time(value: str) -> time:
    hour, minute = value.strip().split(":")
    return time(int(hour), int(minute))


@dataclass(frozen=True)
class TimeslotCalendar:
    days: tuple[str, ...]
    period_times: tuple[str, ...]  # "09:00-09:50"; the end time follows the dash
    _period_ends: tuple[time, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.days or not self.period_times:
            raise ValueError("Timeslot catalog needs at least one day and one period")
        ends = tuple(_parse_clock_time(p.split("-")[1]) for p in self.period_times)
        object.__setattr__(self, "_period_ends", ends)

    @classmethod
    def from_config(cls) -> "TimeslotCalendar":
        return cls(tuple(TIMESLOT_DAYS), tuple(TIMESLOT_PERIOD_TIMES))

    @property
    def periods(self) -> int:
        return len(self.period_times)

    @property
    def codes(self) -> list[str]:
        """All valid codes, day-major then period"""
        return [
            f"{day}{TIMESLOT_SEPARATOR}{p}" for day in self.days for p in range(1, self.periods + 1)
        ]

    def _parse(self, code: Optional[str]) -> Optional[tuple[int, int]]:
        """Return (day_offset, period_number) or None for any malformed code"""
        if not code:
            return None
        parts = code.split(TIMESLOT_SEPARATOR)
        if len(parts) != 2:
            return None
        day, period_str = parts
        if not period_str.isdecimal():
            return None
        period = int(period_str)
        if period < 1 or period > self.periods:
            return None
        if day not in self.days:
            return None
        return self.days.index(day), period

    def is_valid(self, code: Optional[str]) -> bool:
        return self._parse(code) is not None

    def filter_valid(self, codes: Optional[Iterable[str]]) -> list[str]:
        """Keep valid codes in input order, dropping duplicates"""
        if not codes:
            return []
        seen = []
        for code in codes:
            if self.is_valid(code) and code not in seen:
                seen.append(code)
        return seen

    def label(self, code: str) -> str:
        """Label like "Monday, P1 (09:00-09:50)"; unknown codes are returned as-is"""
        parsed = self._parse(code)
        if parsed is None:
            return code
        day_offset, period = parsed
        day = self.days[day_offset]
        return f"{DAY_NAMES.get(day, day)}, P{period} ({self.period_times[period - 1]})"

    def resolve_end_time(self, week_start: Optional[date], code: Optional[str]) -> Optional[datetime]:
        """
        End timestamp of a timeslot within the week starting at week_start.

        Never raises: None inputs, malformed codes, unknown days and
        out-of-range periods all resolve to None.
        """
        if week_start is None:
            return None
        parsed = self._parse(code)
        if parsed is None:
            logger.debug(f"Unresolvable timeslot code: {code!r}")
            return None
        day_offset, period = parsed
        session_day = week_start + timedelta(days=day_offset)
        return datetime.combine(session_day, self._period_ends[period - 1])


def monday_of_week(value: date) -> date:
    """Monday of the week containing value (the value itself on a Monday)"""
    return value - timedelta(days=value.weekday())


default_calendar = TimeslotCalendar.from_config()
