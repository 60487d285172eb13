import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Optional, Tuple

_DATE_PREFIX = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")


@dataclass(frozen=True)
class PayPeriod:
    """Inclusive range of calendar dates."""
    start_date: date
    end_date: date

    @property
    def days(self) -> int:
        return max(0, (self.end_date - self.start_date).days + 1)

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


def parse_calendar_date(value: Any) -> Optional[date]:
    """
    Read a calendar date from a date, datetime or string.

    Strings only contribute their leading YYYY-MM-DD part, so
    "2025-07-01 0:00:00" and "2025-07-01T05:00:00+00:00" are both July 1st.
    The date is never shifted between time zones.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    match = _DATE_PREFIX.match(value.strip())
    if not match:
        return None

    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_wall_clock(value: Any) -> Optional[time]:
    """
    Parse "HH:MM" or "HH:MM:SS" into a time, None if missing or garbled.

    A UTC offset ("09:00:00+00:00", as timetz columns return it) is dropped so
    every result is a naive wall-clock time.
    """
    if value is None:
        return None
    if isinstance(value, time):
        return value.replace(tzinfo=None)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = time.fromisoformat(value.strip())
    except ValueError:
        return None
    return parsed.replace(tzinfo=None)


def month_period(day: date) -> PayPeriod:
    """First through last day of the month containing `day`."""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return PayPeriod(day.replace(day=1), day.replace(day=last_day))


def shift_month(period_start: date, months: int) -> PayPeriod:
    """Full calendar month `months` away from the month of `period_start`."""
    year, month = _add_months(period_start.year, period_start.month, months)
    return month_period(date(year, month, 1))


def _add_months(year: int, month: int, months: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1
