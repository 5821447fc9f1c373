"""
Central data model definitions used across the project.

This module defines the canonical structure of the values that flow through
one conversion run so that:
- all modules share the same field names
- parsers, the expander and the serializer agree on types
- the CLI can report results without knowing engine internals

Pipeline:
    Record -> parsed fields -> expanded Occurrences -> calendar document
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import Any, List, Mapping, Optional


# A Record is one source row: header name -> raw cell value.
Record = Mapping[str, Any]

# Weekday numbers follow the Sunday=0 ... Saturday=6 convention.
SUNDAY, MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY = range(7)

DEFAULT_TITLE_TEMPLATE = "{Course} {Component} {Section}"
DEFAULT_CALENDAR_NAME = "Workday Schedule"
DEFAULT_TIMEZONE_HINT = "America/Vancouver"
ICS_MEDIA_TYPE = "text/calendar"


class WorkdayCalError(Exception):
    """Base class for all fatal conversion errors."""


class MappingError(WorkdayCalError, ValueError):
    """A required field mapping role has no column assigned."""


class NoEventsError(WorkdayCalError, ValueError):
    """No row produced a single occurrence."""


class IngestError(WorkdayCalError, ValueError):
    """The input file could not be read into records."""


@dataclass(frozen=True)
class TimeOfDay:
    """
    Wall-clock time without a date component.
    """

    hour: int
    minute: int
    second: int = 0


# Role name -> label shown to users (mirrors the mapping form of the web tool).
ROLE_LABELS = {
    "title": "Title field",
    "course": "Course",
    "component": "Component",
    "section": "Section",
    "start_date": "Start date",
    "end_date": "End date",
    "start_time": "Start time",
    "end_time": "End time",
    "days": "Days pattern",
    "location": "Location",
    "description": "Description",
}

REQUIRED_ROLES = ("start_date", "end_date", "start_time", "end_time", "days")


@dataclass
class FieldMapping:
    """
    Maps each logical role to a column name of the source data.

    Optional roles may stay None. The five required roles must be set
    before expansion runs.
    """

    start_date: Optional[str] = None
    end_date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    days: Optional[str] = None
    title: Optional[str] = None
    course: Optional[str] = None
    component: Optional[str] = None
    section: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def roles(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    def missing_required(self) -> Optional[str]:
        """
        Return the first required role without a column, or None.
        """
        for role in REQUIRED_ROLES:
            if not getattr(self, role):
                return role
        return None

    def to_dict(self) -> dict[str, str]:
        return {k: v for k, v in asdict(self).items() if v}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FieldMapping":
        # unknown keys are ignored, empty values mean "unset"
        known = set(cls.roles())
        kwargs: dict[str, str] = {}
        for key, value in data.items():
            if key in known and isinstance(value, str) and value.strip():
                kwargs[key] = value.strip()
        return cls(**kwargs)


@dataclass
class CalendarOptions:
    title_template: str = DEFAULT_TITLE_TEMPLATE
    calendar_name: str = DEFAULT_CALENDAR_NAME
    timezone_hint: str = DEFAULT_TIMEZONE_HINT


@dataclass
class Occurrence:
    """
    One concrete calendar event instance.

    start/end are naive datetimes (floating local time). The engine does not
    check that end is after start.
    """

    summary: str
    location: str
    description: str
    start: datetime
    end: datetime


@dataclass
class RowFailure:
    row: int  # 1-based position in the input
    reason: str


@dataclass
class ConversionResult:
    document: str
    occurrences: List[Occurrence]
    failures: List[RowFailure] = field(default_factory=list)
    file_name: str = "schedule.ics"
    media_type: str = ICS_MEDIA_TYPE
