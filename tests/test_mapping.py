"""
Unit tests for column guessing and mapping overrides.
"""

import unittest

from workdaycal.mapping import guess_mapping, merge_mapping, parse_overrides, require_complete, unknown_columns
from workdaycal.model import FieldMapping, MappingError


class TestGuessMapping(unittest.TestCase):
    def test_plain_headers(self) -> None:
        headers = ["Course", "Section", "Component", "Start Date", "End Date", "Start Time", "End Time", "Days", "Room"]
        m = guess_mapping(headers)
        self.assertEqual(m.course, "Course")
        self.assertEqual(m.section, "Section")
        self.assertEqual(m.component, "Component")
        self.assertEqual(m.start_date, "Start Date")
        self.assertEqual(m.end_date, "End Date")
        self.assertEqual(m.start_time, "Start Time")
        self.assertEqual(m.end_time, "End Time")
        self.assertEqual(m.days, "Days")
        self.assertEqual(m.location, "Room")
        self.assertIsNone(m.title)
        self.assertIsNone(m.description)
        self.assertIsNone(m.missing_required())

    def test_alternative_names(self) -> None:
        headers = ["Subject", "Instructional Type", "First Day", "Last Day", "Begin Time", "Finish Time", "Meeting Patterns"]
        m = guess_mapping(headers)
        self.assertEqual(m.course, "Subject")
        self.assertEqual(m.component, "Instructional Type")
        self.assertEqual(m.start_date, "First Day")
        self.assertEqual(m.end_date, "Last Day")
        self.assertEqual(m.start_time, "Begin Time")
        self.assertEqual(m.end_time, "Finish Time")
        self.assertEqual(m.days, "Meeting Patterns")

    def test_no_headers(self) -> None:
        self.assertEqual(guess_mapping([]), FieldMapping())


class TestOverrides(unittest.TestCase):
    def test_parse_overrides(self) -> None:
        self.assertEqual(
            parse_overrides(["days=Meeting Days", "start-time = Begins ", "title="]),
            {"days": "Meeting Days", "start_time": "Begins", "title": ""},
        )

    def test_parse_overrides_rejects_bad_input(self) -> None:
        with self.assertRaises(MappingError):
            parse_overrides(["days"])
        with self.assertRaises(MappingError):
            parse_overrides(["weekday=Days"])

    def test_merge_and_unset(self) -> None:
        base = FieldMapping(days="Days", title="Title")
        merged = merge_mapping(base, {"days": "Pattern", "title": ""})
        self.assertEqual(merged.days, "Pattern")
        self.assertIsNone(merged.title)
        self.assertEqual(base.days, "Days")

    def test_require_complete(self) -> None:
        with self.assertRaises(MappingError) as ctx:
            require_complete(FieldMapping(start_date="A", end_date="B", start_time="C", end_time="D"))
        self.assertEqual(str(ctx.exception), "Missing required mapping: Days pattern")
        require_complete(FieldMapping(start_date="A", end_date="B", start_time="C", end_time="D", days="E"))

    def test_unknown_columns(self) -> None:
        m = FieldMapping(days="Days", location="Where")
        self.assertEqual(unknown_columns(m, ["Days", "Room"]), ["Where"])

    def test_dict_roundtrip(self) -> None:
        m = FieldMapping(days="Days", course="Course")
        self.assertEqual(m.to_dict(), {"days": "Days", "course": "Course"})
        self.assertEqual(FieldMapping.from_dict({**m.to_dict(), "bogus": "x", "title": " "}), m)


if __name__ == "__main__":
    unittest.main()
