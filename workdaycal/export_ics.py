"""
iCalendar (.ics) export.

We render occurrences into a calendar file that can be imported into:
- Google Calendar
- Outlook
- Apple Calendar

Format notes:
- DTSTART/DTEND are floating local times (no Z, no TZID)
- X-WR-TIMEZONE is only a display hint for the consuming app
- every content line is folded to at most 75 octets (RFC 5545, 3.1)
- lines are joined with CRLF
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from workdaycal.model import ICS_MEDIA_TYPE, Occurrence

logger = logging.getLogger(__name__)

PRODID = "-//workdaycal//Workday Schedule to iCal//EN"
UID_DOMAIN = "workdaycal.local"
FOLD_LIMIT = 75

__all__ = [
    "ICS_MEDIA_TYPE",
    "build_ics",
    "fold_line",
    "ics_escape",
    "ics_unescape",
    "sanitize_file_name",
    "unfold_lines",
    "write_calendar",
]


# ---------------------------------------------------------------------------
# Text escaping
# ---------------------------------------------------------------------------


def ics_escape(text: str) -> str:
    """
    Escape text for ICS TEXT values: backslash, newline, comma, semicolon.
    """
    return (
        (text or "")
        .replace("\\", "\\\\")
        .replace("\r\n", "\\n")
        .replace("\r", "\\n")
        .replace("\n", "\\n")
        .replace(";", "\\;")
        .replace(",", "\\,")
    )


def ics_unescape(text: str) -> str:
    """
    Inverse of ics_escape. Unknown escapes keep the escaped character.
    """
    out: List[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            out.append("\n" if nxt in "nN" else nxt)
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


# ---------------------------------------------------------------------------
# Line folding
# ---------------------------------------------------------------------------


def fold_line(line: str, limit: int = FOLD_LIMIT) -> List[str]:
    """
    Split one logical line into physical lines of at most `limit` UTF-8 octets.

    Continuation lines start with a single space, which counts toward the
    limit. A character is never split across two physical lines.
    """
    if len(line.encode("utf-8")) <= limit:
        return [line]

    parts: List[str] = []
    current: List[str] = []
    size = 0
    room = limit
    for ch in line:
        width = len(ch.encode("utf-8"))
        if current and size + width > room:
            parts.append("".join(current))
            current = []
            size = 0
            room = limit - 1  # leading space of the continuation
        current.append(ch)
        size += width
    parts.append("".join(current))

    return [parts[0]] + [" " + p for p in parts[1:]]


def unfold_lines(physical: Iterable[str]) -> List[str]:
    """
    Join continuation lines (leading space) back onto their logical line.
    """
    out: List[str] = []
    for line in physical:
        if line.startswith(" ") and out:
            out[-1] += line[1:]
        else:
            out.append(line)
    return out


# ---------------------------------------------------------------------------
# Date-time rendering
# ---------------------------------------------------------------------------


def _dt_local(dt: datetime) -> str:
    """
    Floating local date-time 'YYYYMMDDTHHMMSS'.
    """
    return dt.strftime("%Y%m%dT%H%M%S")


def _dt_utc(dt: datetime) -> str:
    """
    Absolute UTC date-time 'YYYYMMDDTHHMMSSZ'. Naive values are taken as UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def _random_uid() -> str:
    return f"{uuid.uuid4().hex}@{UID_DOMAIN}"


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


def _event_lines(ev: Occurrence, uid: str, dtstamp: str) -> List[str]:
    lines = [
        "BEGIN:VEVENT",
        f"UID:{uid}",
        f"DTSTAMP:{dtstamp}",
        f"DTSTART:{_dt_local(ev.start)}",
        f"DTEND:{_dt_local(ev.end)}",
    ]
    if ev.summary:
        lines.append(f"SUMMARY:{ics_escape(ev.summary)}")
    if ev.location:
        lines.append(f"LOCATION:{ics_escape(ev.location)}")
    if ev.description:
        lines.append(f"DESCRIPTION:{ics_escape(ev.description)}")
    lines.append("END:VEVENT")
    return lines


def build_ics(
    occurrences: Iterable[Occurrence],
    calendar_name: str = "",
    timezone_hint: str = "",
    now: Optional[datetime] = None,
    uid_factory: Optional[Callable[[], str]] = None,
) -> str:
    """
    Render occurrences into one calendar document.

    Events keep the order they are given in. DTSTAMP is shared by all events
    of one run. `now` and `uid_factory` exist so output can be pinned in tests.
    """
    stamp = _dt_utc(now if now is not None else datetime.now(timezone.utc))
    make_uid = uid_factory or _random_uid

    lines: List[str] = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "CALSCALE:GREGORIAN",
        f"PRODID:{PRODID}",
    ]
    if calendar_name:
        lines.append(f"X-WR-CALNAME:{ics_escape(calendar_name)}")
    if timezone_hint:
        lines.append(f"X-WR-TIMEZONE:{ics_escape(timezone_hint)}")

    count = 0
    for ev in occurrences:
        lines.extend(_event_lines(ev, make_uid(), stamp))
        count += 1

    lines.append("END:VCALENDAR")

    physical: List[str] = []
    for line in lines:
        physical.extend(fold_line(line))

    logger.debug("Rendered %d events into %d lines", count, len(physical))
    # ICS standard uses CRLF
    return "\r\n".join(physical) + "\r\n"


def sanitize_file_name(name: str, suffix: str = ".ics") -> str:
    """
    Suggested file name for a calendar: 'Fall 2025 / UBC' -> 'fall-2025-ubc.ics'.
    """
    stem = re.sub(r"[^A-Za-z0-9]+", "-", name or "").strip("-").lower()
    return f"{stem or 'schedule'}{suffix}"


def write_calendar(document: str, out_path: str | Path) -> Path:
    """
    Write a rendered document to disk as UTF-8, keeping CRLF line endings.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    # newline="" stops Python from translating the CRLFs
    with out.open("w", encoding="utf-8", newline="") as fh:
        fh.write(document)
    return out
