"""Spreadsheet value parsing and CSV export reading."""

import csv
import io
import logging
import re
from pathlib import Path

log = logging.getLogger(__name__)

# Matches any sequence of whitespace (including Unicode whitespace like U+2006)
_WHITESPACE_RE = re.compile(r'\s+')

DELIMITERS = (',', ';', '\t')

_DATE_LIKE_RE = re.compile(r'^(\d{1,2}/\d{1,2}/\d{4}|\d{4}-\d{1,2}-\d{1,2})')
_INT_RE = re.compile(r'^[+-]?\d+$')
_FLOAT_RE = re.compile(r'^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$')


def detect_encoding(path: Path) -> str:
    """Detect file encoding by checking for BOM bytes.

    Args:
        path: Path to the CSV file.

    Returns:
        Encoding string suitable for open().
    """
    with open(path, 'rb') as f:
        bom = f.read(2)
    if bom == b'\xff\xfe':
        return 'utf-16-le'
    return 'utf-8-sig'


def normalize_whitespace(value: str) -> str:
    """Collapse whitespace runs into a single space and strip the ends."""
    return _WHITESPACE_RE.sub(' ', value).strip()


def parse_cell(header: str, value: str) -> str | int | float:
    """Convert a raw spreadsheet cell into a loosely typed value.

    Cells in date columns and date-like cells stay strings. Numeric
    strings, optionally with a trailing percent sign, become numbers.

    Args:
        header: Column header of the cell.
        value: Raw cell text.

    Returns:
        int, float or the unchanged string.
    """
    if 'date' in header.lower() or _DATE_LIKE_RE.match(value):
        return value

    text = value.strip()
    if text.endswith('%'):
        text = text[:-1].strip()
    if _INT_RE.match(text):
        return int(text)
    if _FLOAT_RE.match(text):
        return float(text)
    return value


def rows_from_values(values: list[list[str]]) -> list[dict]:
    """Turn a header row followed by data rows into dicts.

    Short rows are padded with empty strings, cells beyond the header
    are dropped.

    Args:
        values: Spreadsheet values, first row are the headers.

    Returns:
        One dict per data row.
    """
    if not values:
        return []

    headers = [str(h).strip() for h in values[0]]
    rows: list[dict] = []
    for raw in values[1:]:
        row = {}
        for index, header in enumerate(headers):
            if not header:
                continue
            cell = raw[index] if index < len(raw) else ''
            row[header] = parse_cell(header, '' if cell is None else str(cell))
        rows.append(row)
    return rows


def read_sheet_csv(path: str | Path) -> list[dict]:
    """Read a spreadsheet export from a CSV file.

    Handles UTF-16LE (with BOM) and UTF-8 encoded files and comma,
    semicolon or tab delimiters. Headers and cells are whitespace-normalized.

    Args:
        path: Path to the CSV file.

    Returns:
        Parsed rows, see rows_from_values().

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file has no header row.
    """
    path = Path(path)
    encoding = detect_encoding(path)

    with open(path, 'r', encoding=encoding) as f:
        content = f.read()

    # Strip BOM if present
    content = content.lstrip('\ufeff')
    if not content.strip():
        raise ValueError(f"Datei {path} ist leer oder hat keine Header-Zeile.")

    # Delimiter: whichever candidate occurs most often in the header line
    first_line = content.splitlines()[0]
    delimiter = max(DELIMITERS, key=first_line.count)

    reader = csv.reader(io.StringIO(content), delimiter=delimiter)
    values = [[normalize_whitespace(cell) for cell in line] for line in reader]
    # Drop fully empty lines
    values = [line for line in values if any(line)]

    rows = rows_from_values(values)
    log.info("%d Zeilen gelesen aus %s", len(rows), path)
    return rows
