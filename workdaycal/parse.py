"""
Parsing (raw cell values -> typed fields).

- parse_date: free-text or native date -> datetime.date
- parse_time: "8:00 AM", "8 PM", "20:30", native time -> TimeOfDay
- parse_days: "MWF", "TuTh", "Mon Wed Fri", ... -> frozenset of weekday numbers

Important rules:
- Parsers never raise on bad input. Unparseable values give None
  (dates, times) or an empty set (days) and the caller decides.
- Weekday numbers use Sunday=0 ... Saturday=6.
- Thursday is normalized to the token "R" so it cannot be confused
  with Tuesday ("T" / "TU").
"""

from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from dateutil import parser as dtparse

from workdaycal.model import (
    FRIDAY,
    MONDAY,
    SATURDAY,
    SUNDAY,
    THURSDAY,
    TUESDAY,
    WEDNESDAY,
    TimeOfDay,
)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

_COMPACT_DATE_RE = re.compile(r"^(\d{4})[-/]?(\d{2})[-/]?(\d{2})$")

# Two defaults that differ in year, month and day. dateutil fills missing
# parts from the default, so only text naming a full date parses the same
# way under both ("Monday", "10:00 AM" and "5" do not).
_DATE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def _parse_full_date(raw: str) -> Optional[date]:
    first, second = (dtparse.parse(raw, default=d).date() for d in _DATE_DEFAULTS)
    return first if first == second else None


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a start/end date cell.

    Native datetime values (from spreadsheets) are truncated to the date.
    Text is tried with dateutil first, then with the strict YYYY[-/]MM[-/]DD
    pattern. Text missing a year, month or day is not a date.
    Returns None if nothing matches.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None:
        return None

    raw = str(value).strip()
    if not raw:
        return None

    try:
        parsed = _parse_full_date(raw)
    except (ValueError, OverflowError):
        parsed = None
    if parsed is not None:
        return parsed

    m = _COMPACT_DATE_RE.match(raw)
    if m:
        year, month, day = (int(g) for g in m.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None

    return None


# ---------------------------------------------------------------------------
# Times
# ---------------------------------------------------------------------------

# Pattern A: H[:MM[:SS]] [AM|PM]
_TIME_12H_RE = re.compile(r"^(\d{1,2})(?::(\d{2}))?(?::(\d{2}))?\s*(AM|PM)?$")
# Pattern B: HH:MM[:SS] (24h)
_TIME_24H_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
# "a.m." / "P.M" -> "AM" / "PM"
_MERIDIEM_DOTS_RE = re.compile(r"([AP])\.?\s?M\.?$")


def _valid_time(hour: int, minute: int, second: int) -> Optional[TimeOfDay]:
    if 0 <= hour <= 23 and 0 <= minute <= 59 and 0 <= second <= 59:
        return TimeOfDay(hour, minute, second)
    return None


def parse_time(value: Any) -> Optional[TimeOfDay]:
    """
    Parse a start/end time cell into a TimeOfDay (None if unparseable).
    """
    if isinstance(value, datetime):
        value = value.time()
    if isinstance(value, time):
        return TimeOfDay(value.hour, value.minute, value.second)
    if value is None:
        return None

    s = str(value).strip().upper()
    if not s:
        return None
    s = _MERIDIEM_DOTS_RE.sub(r"\1M", s)

    m = _TIME_12H_RE.match(s)
    if m:
        hour = int(m.group(1))
        minute = int(m.group(2) or 0)
        second = int(m.group(3) or 0)
        meridiem = m.group(4)
        if meridiem == "AM" and hour == 12:
            hour = 0
        elif meridiem == "PM" and hour < 12:
            hour += 12
        return _valid_time(hour, minute, second)

    m = _TIME_24H_RE.match(s)
    if m:
        return _valid_time(int(m.group(1)), int(m.group(2)), int(m.group(3) or 0))

    return None


# ---------------------------------------------------------------------------
# Weekday patterns
# ---------------------------------------------------------------------------

# Applied in order. Thursday first so "THU"/"TH" become "R" before the
# Tuesday rules can see them.
_DAY_NORMALIZATION: List[Tuple[re.Pattern[str], str]] = [
    (re.compile(r"THURSDAYS?"), "R"),
    (re.compile(r"THURS?\b\.?"), "R"),
    (re.compile(r"THU\b\.?"), "R"),
    (re.compile(r"\bTH\b"), "R"),
    (re.compile(r"TUESDAYS?"), "TU"),
    (re.compile(r"TUES?\b\.?"), "TU"),
    (re.compile(r"\bTU\b"), "TU"),
    (re.compile(r"MONDAYS?"), "MO"),
    (re.compile(r"\bMON\b\.?"), "MO"),
    (re.compile(r"WEDNESDAYS?"), "WE"),
    (re.compile(r"\bWED\b\.?"), "WE"),
    (re.compile(r"FRIDAYS?"), "FR"),
    (re.compile(r"\bFRI\b\.?"), "FR"),
    (re.compile(r"SATURDAYS?"), "SA"),
    (re.compile(r"\bSAT\b\.?"), "SA"),
    (re.compile(r"SUNDAYS?"), "SU"),
    (re.compile(r"\bSUN\b\.?"), "SU"),
]

_SEPARATORS_RE = re.compile(r"[,&/\\|]+")
_WHITESPACE_RE = re.compile(r"\s+")

# Tokens of the space separated form.
_TOKEN_DAYS: Dict[str, int] = {
    "M": MONDAY,
    "MO": MONDAY,
    "T": TUESDAY,
    "TU": TUESDAY,
    "W": WEDNESDAY,
    "WE": WEDNESDAY,
    "TH": THURSDAY,
    "R": THURSDAY,
    "F": FRIDAY,
    "FR": FRIDAY,
    "SA": SATURDAY,
    "SU": SUNDAY,
}

# Compact scanner: run-together names ("MONWEDFRI") are tried first, then
# two-character tokens ("MOWEFR", "TUTH"), then single letters ("MWF").
_COMPACT_NAMES: Dict[str, int] = {
    "MON": MONDAY,
    "TUE": TUESDAY,
    "WED": WEDNESDAY,
    "THU": THURSDAY,
    "FRI": FRIDAY,
    "SAT": SATURDAY,
    "SUN": SUNDAY,
}
_COMPACT_PAIRS: Dict[str, int] = {
    "MO": MONDAY,
    "TU": TUESDAY,
    "WE": WEDNESDAY,
    "TH": THURSDAY,
    "FR": FRIDAY,
    "SA": SATURDAY,
    "SU": SUNDAY,
}
_COMPACT_SINGLES: Dict[str, int] = {
    "M": MONDAY,
    "T": TUESDAY,
    "W": WEDNESDAY,
    "R": THURSDAY,
    "F": FRIDAY,
}


def normalize_days_text(value: Any) -> str:
    """
    Uppercase, map day names to short tokens, replace separators, collapse spaces.
    """
    if value is None:
        return ""
    s = str(value).strip().upper()
    for pattern, token in _DAY_NORMALIZATION:
        s = pattern.sub(token, s)
    s = _SEPARATORS_RE.sub(" ", s)
    return _WHITESPACE_RE.sub(" ", s).strip()


def _scan_compact(s: str) -> set[int]:
    """
    Left-to-right scan of a concatenated pattern like "MWF", "MTWRF" or "TUTH".

    A recognized name consumes three characters, a pair two, a letter one,
    anything else is skipped. "FR" is a pair so its R is never read as Thursday.
    """
    found: set[int] = set()
    i = 0
    while i < len(s):
        name = s[i : i + 3]
        if name in _COMPACT_NAMES:
            found.add(_COMPACT_NAMES[name])
            i += 3
            continue
        pair = s[i : i + 2]
        if pair in _COMPACT_PAIRS:
            found.add(_COMPACT_PAIRS[pair])
            i += 2
            continue
        ch = s[i]
        if ch in _COMPACT_SINGLES:
            found.add(_COMPACT_SINGLES[ch])
        i += 1
    return found


def parse_days(value: Any) -> FrozenSet[int]:
    """
    Parse a weekday pattern into a set of weekday numbers (Sunday=0).

    Returns an empty set if no day could be recognized.
    """
    s = normalize_days_text(value)
    if not s:
        return frozenset()

    if " " not in s:
        return frozenset(_scan_compact(s))

    found = {_TOKEN_DAYS[tok] for tok in s.split(" ") if tok in _TOKEN_DAYS}
    return frozenset(found)
