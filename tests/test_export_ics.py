"""
Unit tests for the iCalendar serializer.

Serializer contract:
- escaping is reversible for backslash, comma, semicolon and newline
- folded lines re-join to the original and stay within 75 octets
- events keep their input order; DTSTART/DTEND are floating local times
"""

import tempfile
import unittest
from datetime import datetime, timezone
from itertools import count
from pathlib import Path

from workdaycal.export_ics import (
    build_ics,
    fold_line,
    ics_escape,
    ics_unescape,
    sanitize_file_name,
    unfold_lines,
    write_calendar,
)
from workdaycal.model import Occurrence

NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _uids():
    counter = count(1)
    return lambda: f"uid-{next(counter)}@test"


def _occ(summary="CS 101 LEC 001", location="", description="", day=6):
    return Occurrence(
        summary=summary,
        location=location,
        description=description,
        start=datetime(2025, 1, day, 10, 0),
        end=datetime(2025, 1, day, 10, 50),
    )


class TestEscaping(unittest.TestCase):
    def test_escape_rules(self) -> None:
        self.assertEqual(ics_escape("a,b;c\\d\ne"), r"a\,b\;c\\d\ne")

    def test_crlf_is_one_newline(self) -> None:
        self.assertEqual(ics_escape("a\r\nb"), "a\\nb")

    def test_roundtrip(self) -> None:
        samples = [
            "",
            "plain text",
            "Room 101, Building A; Floor 2",
            "C:\\path\\to\\file",
            "line one\nline two\n",
            "\\n is not a newline, \\, is not a comma",
            "\\\\;;,,\n\n",
        ]
        for text in samples:
            with self.subTest(text=text):
                self.assertEqual(ics_unescape(ics_escape(text)), text)


class TestFolding(unittest.TestCase):
    def test_short_line_untouched(self) -> None:
        self.assertEqual(fold_line("SUMMARY:short"), ["SUMMARY:short"])

    def test_exactly_75_not_folded(self) -> None:
        line = "X" * 75
        self.assertEqual(fold_line(line), [line])

    def test_ascii_fold_and_unfold(self) -> None:
        line = "DESCRIPTION:" + "abcdefghij" * 30
        parts = fold_line(line)
        self.assertGreater(len(parts), 1)
        self.assertEqual(len(parts[0]), 75)
        for p in parts[1:]:
            self.assertTrue(p.startswith(" "))
        for p in parts:
            self.assertLessEqual(len(p.encode("utf-8")), 75)
        self.assertEqual(unfold_lines(parts), [line])

    def test_multibyte_never_split(self) -> None:
        line = "SUMMARY:" + "é漢😀" * 40
        parts = fold_line(line)
        for p in parts:
            self.assertLessEqual(len(p.encode("utf-8")), 75)
            p.encode("utf-8").decode("utf-8")
        self.assertEqual(unfold_lines(parts), [line])


class TestBuildICS(unittest.TestCase):
    def test_exact_document(self) -> None:
        doc = build_ics([_occ()], "Fall Term", "America/Vancouver", now=NOW, uid_factory=_uids())
        expected = [
            "BEGIN:VCALENDAR",
            "VERSION:2.0",
            "CALSCALE:GREGORIAN",
            "PRODID:-//workdaycal//Workday Schedule to iCal//EN",
            "X-WR-CALNAME:Fall Term",
            "X-WR-TIMEZONE:America/Vancouver",
            "BEGIN:VEVENT",
            "UID:uid-1@test",
            "DTSTAMP:20250101T120000Z",
            "DTSTART:20250106T100000",
            "DTEND:20250106T105000",
            "SUMMARY:CS 101 LEC 001",
            "END:VEVENT",
            "END:VCALENDAR",
        ]
        self.assertEqual(doc, "\r\n".join(expected) + "\r\n")

    def test_optional_lines_omitted(self) -> None:
        doc = build_ics([_occ(summary="")], "", "", now=NOW, uid_factory=_uids())
        self.assertNotIn("X-WR-CALNAME", doc)
        self.assertNotIn("X-WR-TIMEZONE", doc)
        self.assertNotIn("SUMMARY", doc)
        self.assertNotIn("LOCATION", doc)
        self.assertNotIn("DESCRIPTION", doc)

    def test_free_text_is_escaped(self) -> None:
        doc = build_ics(
            [_occ(summary="A, B; C", location="Hall\\1", description="x\ny")],
            "My, Calendar",
            "",
            now=NOW,
            uid_factory=_uids(),
        )
        self.assertIn("X-WR-CALNAME:My\\, Calendar\r\n", doc)
        self.assertIn("SUMMARY:A\\, B\\; C\r\n", doc)
        self.assertIn("LOCATION:Hall\\\\1\r\n", doc)
        self.assertIn("DESCRIPTION:x\\ny\r\n", doc)

    def test_long_description_is_folded(self) -> None:
        doc = build_ics([_occ(description="word " * 60)], "", "", now=NOW, uid_factory=_uids())
        physical = doc.split("\r\n")[:-1]
        for line in physical:
            self.assertLessEqual(len(line.encode("utf-8")), 75)
        logical = unfold_lines(physical)
        desc = [line for line in logical if line.startswith("DESCRIPTION:")]
        self.assertEqual(ics_unescape(desc[0][len("DESCRIPTION:"):]), "word " * 60)

    def test_event_order_and_shared_stamp(self) -> None:
        doc = build_ics([_occ(day=8), _occ(day=6)], "", "", now=NOW, uid_factory=_uids())
        starts = [line for line in doc.split("\r\n") if line.startswith("DTSTART:")]
        self.assertEqual(starts, ["DTSTART:20250108T100000", "DTSTART:20250106T100000"])
        stamps = {line for line in doc.split("\r\n") if line.startswith("DTSTAMP:")}
        self.assertEqual(stamps, {"DTSTAMP:20250101T120000Z"})

    def test_default_uids_are_unique(self) -> None:
        doc = build_ics([_occ() for _ in range(200)], "", "")
        uids = [line for line in doc.split("\r\n") if line.startswith("UID:")]
        self.assertEqual(len(uids), 200)
        self.assertEqual(len(set(uids)), 200)
        self.assertTrue(all(u.endswith("@workdaycal.local") for u in uids))

    def test_naive_now_is_utc(self) -> None:
        doc = build_ics([_occ()], "", "", now=datetime(2025, 3, 4, 5, 6, 7), uid_factory=_uids())
        self.assertIn("DTSTAMP:20250304T050607Z", doc)


class TestFiles(unittest.TestCase):
    def test_sanitize_file_name(self) -> None:
        self.assertEqual(sanitize_file_name("Workday Schedule"), "workday-schedule.ics")
        self.assertEqual(sanitize_file_name("  Fall 2025 / UBC!! "), "fall-2025-ubc.ics")
        self.assertEqual(sanitize_file_name("***"), "schedule.ics")
        self.assertEqual(sanitize_file_name(""), "schedule.ics")

    def test_write_calendar_keeps_crlf(self) -> None:
        doc = build_ics([_occ()], "Test", "", now=NOW, uid_factory=_uids())
        with tempfile.TemporaryDirectory() as d:
            out = write_calendar(doc, Path(d) / "sub" / "out.ics")
            self.assertTrue(out.exists())
            self.assertEqual(out.read_bytes(), doc.encode("utf-8"))
            self.assertIn(b"BEGIN:VEVENT\r\n", out.read_bytes())


if __name__ == "__main__":
    unittest.main()
