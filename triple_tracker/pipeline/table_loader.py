"""
triple_tracker/pipeline/table_loader.py
Read a draw table (CSV or XLSX) into row dicts and validate its shape.
"""
from __future__ import annotations

import csv
import zipfile
from pathlib import Path
from typing import Any, Mapping, Sequence

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from triple_tracker.analytics.normalizer import parse_draw_number
from triple_tracker.utils.config import COL_DRAW, REQUIRED_COLUMNS
from triple_tracker.utils.logger import get_logger

log = get_logger("pipeline.loader")

CSV_SUFFIXES = {".csv"}
XLSX_SUFFIXES = {".xlsx", ".xlsm"}
READ_ERRORS = (OSError, UnicodeDecodeError, csv.Error, zipfile.BadZipFile, InvalidFileException, KeyError)


class InputRejectedError(ValueError):
    """The whole table is unusable: empty, missing a column, or unreadable."""


def validate_rows(rows: Sequence[Mapping[str, Any]], required: Sequence[str] = REQUIRED_COLUMNS) -> None:
    """Raise InputRejectedError when the table is empty or the first row lacks a column."""
    if not rows:
        raise InputRejectedError("Input table is empty")
    first = rows[0]
    for col in required:
        if col not in first:
            raise InputRejectedError(f"Missing required column: {col}")


def max_draw_number(rows: Sequence[Mapping[str, Any]], draw_field: str = COL_DRAW) -> int | float | None:
    """Highest numeric draw number; non-numeric cells are skipped."""
    numbers = [n for n in (parse_draw_number(r.get(draw_field)) for r in rows) if n is not None]
    return max(numbers, default=None)


def _read_csv(path: Path) -> list[dict[str, Any]]:
    with open(path, "r", newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        return [
            {(k or "").strip(): ("" if v is None else v) for k, v in row.items()}
            for row in reader
        ]


def _read_xlsx(path: Path) -> list[dict[str, Any]]:
    wb = load_workbook(path, read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        it = ws.iter_rows(values_only=True)
        header = next(it, None)
        if header is None:
            return []
        keys = ["" if h is None else str(h).strip() for h in header]
        rows: list[dict[str, Any]] = []
        for values in it:
            if values is None or all(v is None or str(v).strip() == "" for v in values):
                continue
            row = {k: "" for k in keys if k}
            for k, v in zip(keys, values):
                if k:
                    row[k] = "" if v is None else v
            rows.append(row)
        return rows
    finally:
        wb.close()


def load_table(path: str | Path) -> list[dict[str, Any]]:
    """Read the first sheet/CSV body into row dicts keyed by header, then validate."""
    path = Path(path)
    suffix = path.suffix.lower()
    log.info(f"Loading draw table {path}")

    if suffix in CSV_SUFFIXES:
        reader = _read_csv
    elif suffix in XLSX_SUFFIXES:
        reader = _read_xlsx
    else:
        raise InputRejectedError(f"Unsupported file type: {suffix or path.name}")

    try:
        rows = reader(path)
    except READ_ERRORS as exc:
        raise InputRejectedError(f"Cannot read {path.name}: {exc}") from exc

    validate_rows(rows)
    log.info(f"Read {len(rows)} rows from {path.name}")
    return rows
