"""
Recurrence expansion.

Given a date range and a set of weekdays, produce every concrete date in
the range (both ends inclusive) that falls on one of the weekdays.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import AbstractSet, List


def weekday_index(day: date) -> int:
    """
    Weekday number with Sunday=0 ... Saturday=6.
    """
    # date.weekday() is Monday=0 ... Sunday=6
    return (day.weekday() + 1) % 7


def expand_occurrences(start: date, end: date, weekdays: AbstractSet[int]) -> List[date]:
    """
    Return all dates from start through end whose weekday is in weekdays.

    Output is ascending. An inverted range or an empty weekday set gives [].
    """
    out: List[date] = []
    if not weekdays or start > end:
        return out

    day = start
    one_day = timedelta(days=1)
    while day <= end:
        if weekday_index(day) in weekdays:
            out.append(day)
        day += one_day
    return out
