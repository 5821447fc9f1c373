"""
Conversion engine.

    records + mapping + options  ->  ConversionResult(document, failures, ...)

One run is a pure function of its inputs:
- the mapping is validated before any row is read
- each row is parsed, expanded and turned into occurrences on its own
- bad rows are skipped and reported as RowFailure (1-based row number)
- if no row produced an occurrence the run fails with NoEventsError
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from workdaycal.export_ics import build_ics, sanitize_file_name
from workdaycal.mapping import require_complete
from workdaycal.model import (
    CalendarOptions,
    ConversionResult,
    FieldMapping,
    NoEventsError,
    Occurrence,
    Record,
    RowFailure,
)
from workdaycal.occurrences import build_occurrences
from workdaycal.parse import parse_date, parse_days, parse_time
from workdaycal.recurrence import expand_occurrences

logger = logging.getLogger(__name__)

ROW_PARSE_ERROR = "Could not parse one of date, time, or days"


class _RowError(ValueError):
    pass


def _row_occurrences(record: Record, mapping: FieldMapping, template: str) -> List[Occurrence]:
    """
    Occurrences of a single row. Raises _RowError if a field does not parse.
    """
    start_date = parse_date(record.get(mapping.start_date))
    end_date = parse_date(record.get(mapping.end_date))
    start_time = parse_time(record.get(mapping.start_time))
    end_time = parse_time(record.get(mapping.end_time))
    days = parse_days(record.get(mapping.days))

    if start_date is None or end_date is None or start_time is None or end_time is None or not days:
        raise _RowError(ROW_PARSE_ERROR)

    dates = expand_occurrences(start_date, end_date, days)
    if not dates:
        logger.debug("Row range %s..%s has no matching weekdays", start_date, end_date)
    return build_occurrences(record, mapping, template, dates, start_time, end_time)


def convert_records(
    records: Iterable[Record],
    mapping: FieldMapping,
    options: Optional[CalendarOptions] = None,
    now: Optional[datetime] = None,
    uid_factory: Optional[Callable[[], str]] = None,
) -> ConversionResult:
    """
    Run one full conversion and return the rendered calendar.

    Raises MappingError for an incomplete mapping and NoEventsError if no
    occurrences were generated. Everything else is a per-row failure.
    """
    opts = options or CalendarOptions()
    require_complete(mapping)

    occurrences: List[Occurrence] = []
    failures: List[RowFailure] = []

    for idx, record in enumerate(records, start=1):
        try:
            occurrences.extend(_row_occurrences(record, mapping, opts.title_template))
        except _RowError as e:
            logger.debug("Row %d skipped: %s", idx, e)
            failures.append(RowFailure(row=idx, reason=str(e)))

    if not occurrences:
        raise NoEventsError("No events generated. Check mappings and data.")

    if failures:
        logger.warning("Skipped %d row(s) that could not be parsed", len(failures))

    document = build_ics(
        occurrences,
        calendar_name=opts.calendar_name,
        timezone_hint=opts.timezone_hint,
        now=now,
        uid_factory=uid_factory,
    )
    return ConversionResult(
        document=document,
        occurrences=occurrences,
        failures=failures,
        file_name=sanitize_file_name(opts.calendar_name),
    )


def summarize(result: ConversionResult) -> str:
    """
    One-line success message for the user.
    """
    n = len(result.occurrences)
    if result.failures:
        return f"Generated {n} events. Rows with issues: {len(result.failures)}"
    return f"Generated {n} events. All rows parsed."
