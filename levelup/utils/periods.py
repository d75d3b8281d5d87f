# levelup/utils/periods.py
from datetime import datetime, timedelta
from typing import NamedTuple, Optional


ONCE_START = datetime(1970, 1, 1)
ONCE_END = datetime(9999, 12, 31)


class PeriodWindow(NamedTuple):
    """Half-open window [start, end) in local calendar time."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _add_months(moment: datetime, months: int) -> datetime:
    index = moment.month - 1 + months
    return moment.replace(year=moment.year + index // 12, month=index % 12 + 1, day=1)


def _positive(value: Optional[int]) -> int:
    return 1 if value is None else max(1, int(value))


def resolve_period(
    now: datetime,
    frequency_type: Optional[str],
    interval: Optional[int] = 1,
    week_start: Optional[int] = 1,
) -> PeriodWindow:
    """
    Current quota window for a cadence, relative to `now`.

    daily   -> [today 00:00, today + interval days)
    weekly  -> [last `week_start` day 00:00, + 7 * interval days), 1=Monday..7=Sunday, 0=Sunday
    monthly -> [1st of the month, + interval months)
    once    -> one window spanning all time
    anything else falls back to a single day.
    """
    today = _start_of_day(now)

    if frequency_type == "daily":
        return PeriodWindow(today, today + timedelta(days=_positive(interval)))

    if frequency_type == "weekly":
        weekday_mon0 = today.weekday()
        week_start = 1 if week_start is None else int(week_start)
        start_mon0 = ((week_start % 7) + 6) % 7
        offset = (weekday_mon0 - start_mon0) % 7
        start = today - timedelta(days=offset)
        return PeriodWindow(start, start + timedelta(days=7 * _positive(interval)))

    if frequency_type == "monthly":
        start = today.replace(day=1)
        return PeriodWindow(start, _add_months(start, _positive(interval)))

    if frequency_type == "once":
        return PeriodWindow(ONCE_START, ONCE_END)

    return PeriodWindow(today, today + timedelta(days=1))


def period_key(now: datetime, frequency_type: Optional[str]) -> Optional[str]:
    """Informational label stored on completions (ISO week or ISO date)."""
    if frequency_type == "weekly":
        iso_year, iso_week, _ = now.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if frequency_type == "daily":
        return now.date().isoformat()
    return None
