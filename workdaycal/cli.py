"""
CLI (Command Line Interface).

This module provides the terminal commands of workdaycal, e.g.:

    workdaycal columns schedule.xlsx
    workdaycal convert schedule.xlsx -o fall.ics
    workdaycal convert schedule.csv --map days="Meeting Days" --calendar-name "Fall 2025"

Mapping layers (later wins):
    guessed from headers  ->  saved profile (--profile)  ->  --map ROLE=COLUMN
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from workdaycal.convert import convert_records, summarize
from workdaycal.export_ics import write_calendar
from workdaycal.ingest import load_rows
from workdaycal.mapping import guess_mapping, merge_mapping, parse_overrides, unknown_columns
from workdaycal.model import ROLE_LABELS, REQUIRED_ROLES, CalendarOptions, FieldMapping, WorkdayCalError
from workdaycal.storage import load_profile, save_profile

logger = logging.getLogger(__name__)

console = Console()

PREVIEW_ROWS = 10


def _println(msg: str = "") -> None:
    # plain text: file names and cell values may contain [brackets]
    console.print(msg, markup=False, highlight=False, soft_wrap=True)


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


def _print_mapping(mapping: FieldMapping) -> None:
    table = Table(title="Column mapping", box=box.SIMPLE)
    table.add_column("Role")
    table.add_column("Column")
    for role, label in ROLE_LABELS.items():
        column = getattr(mapping, role) or ""
        marker = " [red]*[/]" if role in REQUIRED_ROLES else ""
        table.add_row(f"{label}{marker}", escape(column) if column else "[dim]-- not set --[/]")
    console.print(table)


def _print_preview(headers: Sequence[str], records: Sequence[dict[str, Any]]) -> None:
    table = Table(title=f"Preview (first {PREVIEW_ROWS} rows)", box=box.SIMPLE)
    for h in headers:
        table.add_column(escape(h))
    for record in records[:PREVIEW_ROWS]:
        table.add_row(*[escape(_cell(record.get(h))) for h in headers])
    console.print(table)


def _cmd_columns(args: argparse.Namespace) -> int:
    """
    Show detected headers, the guessed mapping and a preview of the data.
    """
    headers, records = load_rows(args.input)
    _println(f"Loaded {len(records)} rows from {Path(args.input).name}")
    _println("Headers: " + ", ".join(headers))
    _print_mapping(guess_mapping(headers))
    _print_preview(headers, records)
    return 0


def _resolve_options(args: argparse.Namespace, base: CalendarOptions) -> CalendarOptions:
    return CalendarOptions(
        title_template=args.title_template if args.title_template is not None else base.title_template,
        calendar_name=args.calendar_name if args.calendar_name is not None else base.calendar_name,
        timezone_hint=args.timezone if args.timezone is not None else base.timezone_hint,
    )


def _cmd_convert(args: argparse.Namespace) -> int:
    """
    Convert a schedule export into an .ics file.
    """
    headers, records = load_rows(args.input)

    mapping = FieldMapping() if args.no_guess else guess_mapping(headers)
    profile_options = CalendarOptions()
    if args.profile:
        profile_mapping, profile_options = load_profile(args.profile)
        mapping = merge_mapping(mapping, profile_mapping.to_dict())
    mapping = merge_mapping(mapping, parse_overrides(args.map or []))
    options = _resolve_options(args, profile_options)
    logger.debug("Using mapping %s", mapping.to_dict())

    for col in unknown_columns(mapping, headers):
        _println(f"Warning: mapped column '{col}' not found in input headers.")

    result = convert_records(records, mapping, options)

    out_path = args.out or result.file_name
    write_calendar(result.document, out_path)

    if args.save_profile:
        saved = save_profile(mapping, options, args.save_profile)
        _println(f"Saved mapping profile to: {saved}")

    _println(summarize(result))
    for failure in result.failures:
        _println(f"- row {failure.row}: {failure.reason}")
    _println(f"Exported to: {out_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="workdaycal", description="Workday schedule export -> iCalendar (.ics)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_columns = sub.add_parser("columns", help="Show headers, guessed mapping and a preview")
    p_columns.add_argument("input", type=str, help="Schedule export (.xlsx or .csv)")

    p_convert = sub.add_parser("convert", help="Convert a schedule export to .ics")
    p_convert.add_argument("input", type=str, help="Schedule export (.xlsx or .csv)")
    p_convert.add_argument("-o", "--out", type=str, default=None, help="Output .ics path (default from calendar name)")
    p_convert.add_argument(
        "--map",
        action="append",
        metavar="ROLE=COLUMN",
        help="Map a role to a column, e.g. days='Meeting Pattern' (repeatable)",
    )
    p_convert.add_argument("--profile", type=str, default=None, help="Load mapping and options from a saved profile")
    p_convert.add_argument("--save-profile", type=str, default=None, help="Save the final mapping and options")
    p_convert.add_argument(
        "--title-template",
        type=str,
        default=None,
        help="Title template with {Course}, {Component}, {Section} (ignored if a title column is mapped)",
    )
    p_convert.add_argument("--calendar-name", type=str, default=None, help="Calendar name (default: Workday Schedule)")
    p_convert.add_argument("--timezone", type=str, default=None, help="Timezone hint (default: America/Vancouver)")
    p_convert.add_argument("--no-guess", action="store_true", help="Do not guess columns from header names")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handlers = {"columns": _cmd_columns, "convert": _cmd_convert}
    handler = handlers.get(args.command)
    if handler is None:
        raise SystemExit(2)

    try:
        code = handler(args)
    except WorkdayCalError as e:
        _println(f"Error: {e}")
        code = 1
    except OSError as e:
        _println(f"Error: could not write output: {e}")
        code = 1
    raise SystemExit(code)
