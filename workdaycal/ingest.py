"""
Ingestion (spreadsheet / CSV file -> records).

Supported inputs:
- .csv   read with the csv module (quoted fields, embedded newlines)
- .xlsx  first worksheet read with openpyxl; native date/time cells are kept

The first row is the header row. Completely blank rows are dropped and
short rows are padded with "" so every record has every header.
"""

from __future__ import annotations

import csv
import logging
import zipfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Tuple

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from workdaycal.model import IngestError

logger = logging.getLogger(__name__)

CSV_SUFFIXES = {".csv"}
XLSX_SUFFIXES = {".xlsx", ".xlsm"}
# legacy binary Excel, openpyxl cannot read it
XLS_SUFFIXES = {".xls"}


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def rows_to_records(header: Sequence[Any], rows: Iterable[Sequence[Any]]) -> Tuple[List[str], List[Dict[str, Any]]]:
    """
    Zip data rows with the header row into dict records.
    """
    headers = ["" if h is None else str(h).strip() for h in header]
    records: List[Dict[str, Any]] = []
    for row in rows:
        cells = list(row)
        if not cells or all(_is_blank(c) for c in cells):
            continue
        record: Dict[str, Any] = {}
        for i, h in enumerate(headers):
            value = cells[i] if i < len(cells) else ""
            record[h] = "" if value is None else value
        records.append(record)
    return headers, records


def _read_csv(path: Path) -> Tuple[List[Any], List[List[Any]]]:
    # utf-8-sig strips the BOM Excel puts in front of CSV exports
    with path.open("r", encoding="utf-8-sig", newline="") as fh:
        rows = list(csv.reader(fh))
    if not rows:
        return [], []
    return rows[0], rows[1:]


def _read_xlsx(path: Path) -> Tuple[List[Any], List[List[Any]]]:
    wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        rows = [list(r) for r in ws.iter_rows(values_only=True)]
        logger.debug("Read %d rows from sheet %r", len(rows), ws.title)
    finally:
        wb.close()
    if not rows:
        return [], []
    return rows[0], rows[1:]


def load_rows(path: str | Path) -> Tuple[List[str], List[Dict[str, Any]]]:
    """
    Load a schedule export and return (headers, records).

    Raises IngestError for unsupported files, unreadable files and files
    without data rows.
    """
    p = Path(path)
    suffix = p.suffix.lower()

    try:
        if suffix in CSV_SUFFIXES:
            header, rows = _read_csv(p)
        elif suffix in XLSX_SUFFIXES:
            header, rows = _read_xlsx(p)
        elif suffix in XLS_SUFFIXES:
            raise IngestError("Legacy .xls files are not supported. Re-save the sheet as .xlsx or .csv and try again")
        else:
            raise IngestError("Please provide an .xlsx or .csv file")
    except IngestError:
        raise
    except (OSError, UnicodeDecodeError, csv.Error, ValueError, KeyError, zipfile.BadZipFile, InvalidFileException) as e:
        raise IngestError(f"Failed to read file. {e}") from e

    headers, records = rows_to_records(header, rows)
    if not records:
        raise IngestError("Failed to read file. No rows detected")

    logger.info("Loaded %d rows from %s", len(records), p.name)
    return headers, records
