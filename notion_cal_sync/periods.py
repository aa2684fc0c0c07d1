from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import List

from .errors import ValidationError
from .models import Window

PERIODS_PER_YEAR = 52
DAYS_PER_PERIOD = 7
# date.weekday() of the day each period starts on
FIRST_DAY_OF_WEEK = 6  # Sunday


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def _end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def first_period_start(year: int) -> date:
    jan_first = date(year, 1, 1)
    days_back = (jan_first.weekday() - FIRST_DAY_OF_WEEK) % 7
    return jan_first - timedelta(days=days_back)


def compute_window(year: int, period_index: int) -> Window:
    if not 1 <= period_index <= PERIODS_PER_YEAR:
        raise ValidationError(
            f"Period index must be between 1 and {PERIODS_PER_YEAR}, got {period_index}"
        )
    start = first_period_start(year) + timedelta(days=DAYS_PER_PERIOD * (period_index - 1))
    end = start + timedelta(days=DAYS_PER_PERIOD - 1)
    return Window(start=_start_of_day(start), end=_end_of_day(end))


def windows_for_year(year: int) -> List[Window]:
    return [compute_window(year, index) for index in range(1, PERIODS_PER_YEAR + 1)]


def day_window(day: date) -> Window:
    return Window(start=_start_of_day(day), end=_end_of_day(day))


def last_days_window(today: date, days: int = 7) -> Window:
    if days < 1:
        raise ValidationError(f"Number of days must be positive, got {days}")
    return Window(start=_start_of_day(today - timedelta(days=days - 1)), end=_end_of_day(today))


def window_between(start: date, end: date) -> Window:
    if start > end:
        raise ValidationError(f"Start date {start.isoformat()} is after end date {end.isoformat()}")
    return Window(start=_start_of_day(start), end=_end_of_day(end))


def describe_window(window: Window) -> str:
    start, end = window.start, window.end
    return f"{start:%b} {start.day} – {end:%b} {end.day}"
