"""workdaycal: Workday schedule exports -> iCalendar files."""

from workdaycal.convert import convert_records, summarize
from workdaycal.model import CalendarOptions, FieldMapping

__all__ = ["CalendarOptions", "FieldMapping", "convert_records", "summarize"]
