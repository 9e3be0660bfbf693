"""Day-level calendar used by the offset loan simulator.

``generate_calendar`` builds a date-accurate sequence of ``CalendarDay``
records starting at a given date. The default horizon of 11,020 days covers a
little over 30 years, enough for the longest term the simulator supports.
``DayCalendar`` wraps a generated sequence with the lookups the simulator
needs: date to index, the days of a month and the period between two dates.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .data_models import CalendarDay
from .utils import days_in_month, is_leap_year, parse_date

HORIZON_DAYS = 11_020


def generate_calendar(start_date: Union[date, datetime], total_days: int = HORIZON_DAYS) -> List[CalendarDay]:
    """Return ``total_days`` consecutive ``CalendarDay`` records from ``start_date``.

    The result depends only on the two arguments, so regenerating with the
    same inputs yields an identical sequence.
    """
    if total_days < 0:
        raise ValueError("total_days must not be negative")
    start = parse_date(start_date)
    days: List[CalendarDay] = []
    current = start
    one_day = timedelta(days=1)
    for day_index in range(total_days):
        following = current + one_day
        days.append(
            CalendarDay(
                day_index=day_index,
                date=current,
                day_of_month=current.day,
                month=current.month,
                year=current.year,
                day_of_year=current.timetuple().tm_yday,
                is_last_day_of_month=following.month != current.month,
                is_leap_year=is_leap_year(current.year),
                days_in_month=days_in_month(current.month, current.year),
            )
        )
        current = following
    return days


def find_day_index(days: Sequence[CalendarDay], target: Union[date, datetime]) -> int:
    """Index of ``target`` in ``days`` (time of day ignored), or -1."""
    wanted = parse_date(target)
    for day in days:
        if day.date == wanted:
            return day.day_index
    return -1


def days_in_month_year(days: Sequence[CalendarDay], month: int, year: int) -> List[CalendarDay]:
    """All generated days that fall in ``month``/``year``."""
    return [day for day in days if day.month == month and day.year == year]


def last_day_of_month(days: Sequence[CalendarDay], month: int, year: int) -> Optional[CalendarDay]:
    for day in days:
        if day.month == month and day.year == year and day.is_last_day_of_month:
            return day
    return None


class DayCalendar:
    """A generated calendar indexed by date and by (year, month).

    Lookups return the same answers as the linear scans above; the indexes
    only avoid rescanning the sequence for every simulated month.
    """

    def __init__(self, start_date: Union[date, datetime], total_days: int = HORIZON_DAYS) -> None:
        self.start_date = parse_date(start_date)
        self.days: Tuple[CalendarDay, ...] = tuple(generate_calendar(self.start_date, total_days))
        self._by_date: Dict[date, int] = {}
        self._by_month: Dict[Tuple[int, int], List[CalendarDay]] = {}
        for day in self.days:
            self._by_date[day.date] = day.day_index
            self._by_month.setdefault((day.year, day.month), []).append(day)

    def __len__(self) -> int:
        return len(self.days)

    def __getitem__(self, index: int) -> CalendarDay:
        return self.days[index]

    @property
    def end_date(self) -> Optional[date]:
        """Last generated date, or None for an empty calendar."""
        return self.days[-1].date if self.days else None

    def find_day_index(self, target: Union[date, datetime]) -> int:
        return self._by_date.get(parse_date(target), -1)

    def days_in_month_year(self, month: int, year: int) -> List[CalendarDay]:
        return list(self._by_month.get((year, month), []))

    def last_day_of_month(self, month: int, year: int) -> Optional[CalendarDay]:
        for day in self._by_month.get((year, month), []):
            if day.is_last_day_of_month:
                return day
        return None

    def period(self, start: date, end: date) -> Optional[Sequence[CalendarDay]]:
        """Days from ``start`` up to but excluding ``end``.

        Returns None when either bound lies outside the generated horizon
        (``end`` may be the day right after the last generated one).
        """
        first = self.find_day_index(start)
        if first < 0:
            return None
        if end == self.end_date + timedelta(days=1):
            last = len(self.days)
        else:
            last = self.find_day_index(end)
            if last < 0:
                return None
        return self.days[first:last]
