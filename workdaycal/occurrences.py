"""
Occurrence building.

Turns one source record plus its expanded dates into Occurrence objects:
- title from the mapped title column, or from the title template
- location / description from their mapped columns
- one Occurrence per date, combining the date with start and end time
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Iterable, List, Optional

from workdaycal.model import FieldMapping, Occurrence, Record, TimeOfDay

FALLBACK_TITLE = "Class"

_WHITESPACE_RE = re.compile(r"\s+")


def cell_text(record: Record, column: Optional[str]) -> str:
    """
    Trimmed text of a mapped cell. Unset column or missing value -> "".
    """
    if not column:
        return ""
    value: Any = record.get(column)
    if value is None:
        return ""
    return str(value).strip()


def resolve_title(record: Record, mapping: FieldMapping, template: str) -> str:
    """
    Build the event summary for one record.

    A mapped title column wins over the template. Template tokens
    {Course}, {Component} and {Section} are each replaced once, not recursively.
    """
    if mapping.title:
        summary = cell_text(record, mapping.title)
    else:
        replacements = {
            "{Course}": cell_text(record, mapping.course),
            "{Component}": cell_text(record, mapping.component),
            "{Section}": cell_text(record, mapping.section),
        }
        # single pass so substituted text is never scanned for tokens again
        pattern = re.compile("|".join(re.escape(tok) for tok in replacements))
        summary = pattern.sub(lambda m: replacements[m.group(0)], template or "")
        summary = _WHITESPACE_RE.sub(" ", summary).strip()

    return summary or FALLBACK_TITLE


def combine(day: date, time_of_day: TimeOfDay) -> datetime:
    """
    Naive (floating) datetime from a date and a time of day.
    """
    return datetime(day.year, day.month, day.day, time_of_day.hour, time_of_day.minute, time_of_day.second)


def build_occurrences(
    record: Record,
    mapping: FieldMapping,
    template: str,
    dates: Iterable[date],
    start_time: TimeOfDay,
    end_time: TimeOfDay,
) -> List[Occurrence]:
    """
    One Occurrence per date, all sharing the same summary/location/description.
    """
    summary = resolve_title(record, mapping, template)
    location = cell_text(record, mapping.location)
    description = cell_text(record, mapping.description)

    return [
        Occurrence(
            summary=summary,
            location=location,
            description=description,
            start=combine(d, start_time),
            end=combine(d, end_time),
        )
        for d in dates
    ]
