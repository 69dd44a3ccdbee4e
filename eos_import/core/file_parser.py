"""File Parser — decodes an uploaded CSV or Excel file into raw records.

The first non-empty row is the header row. Every following row becomes an
ordered mapping of header → cell text. Rows whose shape does not match the
header are reported as row-level parse errors and skipped; only an empty
file or an undecodable stream fails the whole parse.
"""

import csv
import io
import logging
import zipfile
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from eos_import.core.errors import EmptyFileError, ParseError

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
CSV_SUFFIXES = {".csv", ".txt"}
SUPPORTED_SUFFIXES = EXCEL_SUFFIXES | CSV_SUFFIXES

CANDIDATE_DELIMITERS = ",;\t|"
SNIFF_SAMPLE_BYTES = 64 * 1024


@dataclass
class RowParseError:
    """A source row that could not be turned into a record.

    line is the physical line in the file; row is the 1-based data-row number
    the row would have had, the same numbering validation and import use.
    """
    line: int
    message: str
    row: int = 0

    def __str__(self) -> str:
        return f"Line {self.line}: {self.message}"


@dataclass
class ParsedFile:
    """Decoded file contents: header order, records, and skipped rows."""
    headers: list[str]
    records: list[dict[str, str]] = field(default_factory=list)
    row_numbers: list[int] = field(default_factory=list)
    errors: list[RowParseError] = field(default_factory=list)

    @property
    def record_count(self) -> int:
        return len(self.records)

    @property
    def total_rows(self) -> int:
        """Data rows in the file, including the ones skipped as malformed."""
        return len(self.records) + len(self.errors)

    def numbered_records(self) -> Iterator[tuple[int, dict[str, str]]]:
        """(data-row number, record) pairs in file order."""
        return zip(self.row_numbers, self.records)


def _stringify(value: Any) -> str:
    """Render a spreadsheet cell the way it would appear in a CSV export."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _is_empty_row(values: Iterable[Any]) -> bool:
    return all(v is None or str(v).strip() == "" for v in values)


def _build_records(rows: Iterable[tuple[int, list[str]]]) -> ParsedFile:
    """Turn (line number, cell list) pairs into a ParsedFile.

    The first non-empty row is taken as the header.
    """
    headers: Optional[list[str]] = None
    parsed: Optional[ParsedFile] = None
    data_row = 0

    for line, cells in rows:
        if _is_empty_row(cells):
            continue

        if headers is None:
            headers = [_stringify(h) for h in cells]
            # Trailing empty header cells come from ragged spreadsheet exports
            while headers and headers[-1] == "":
                headers.pop()
            parsed = ParsedFile(headers=headers)
            continue

        data_row += 1
        values = [c.strip() if isinstance(c, str) else _stringify(c) for c in cells]
        if len(values) > len(headers) and _is_empty_row(values[len(headers):]):
            values = values[:len(headers)]
        if len(values) != len(headers):
            parsed.errors.append(RowParseError(
                line=line,
                message=f"expected {len(headers)} columns, found {len(values)}",
                row=data_row,
            ))
            continue

        parsed.records.append(dict(zip(headers, values)))
        parsed.row_numbers.append(data_row)

    if parsed is None or not parsed.headers:
        raise EmptyFileError()
    return parsed


def _decode(raw: bytes) -> str:
    if raw.startswith(b"\xef\xbb\xbf"):
        raw = raw[3:]
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"File is not valid UTF-8 text: {e.reason} at byte {e.start}")


def _sniff_delimiter(text: str) -> str:
    sample = text[:SNIFF_SAMPLE_BYTES]
    try:
        return csv.Sniffer().sniff(sample, delimiters=CANDIDATE_DELIMITERS).delimiter
    except csv.Error:
        return ","


def parse_csv_text(text: str) -> ParsedFile:
    """Parse delimited text; the delimiter is sniffed from the content."""
    if text.startswith("\ufeff"):
        text = text[1:]
    if not text.strip():
        raise EmptyFileError()

    delimiter = _sniff_delimiter(text)
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)

    def _rows():
        try:
            for cells in reader:
                yield reader.line_num, cells
        except csv.Error as e:
            raise ParseError(f"Malformed CSV: {e}", line=reader.line_num)

    parsed = _build_records(_rows())
    logger.info(
        f"Parsed CSV (delimiter {delimiter!r}): {parsed.record_count} records, "
        f"{len(parsed.errors)} skipped rows"
    )
    return parsed


def parse_csv(file_path: Path) -> ParsedFile:
    return parse_csv_text(_decode(Path(file_path).read_bytes()))


def parse_excel(file_path: Path) -> ParsedFile:
    """Parse the first worksheet of an Excel workbook."""
    try:
        wb = openpyxl.load_workbook(file_path, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise ParseError(f"Could not open Excel workbook: {e}")

    try:
        if not wb.worksheets:
            raise EmptyFileError()
        ws = wb.worksheets[0]
        sheet_title = ws.title
        rows = (
            (idx, list(values))
            for idx, values in enumerate(ws.iter_rows(values_only=True), start=1)
        )
        parsed = _build_records(rows)
    finally:
        wb.close()

    logger.info(
        f"Parsed Excel sheet '{sheet_title}': {parsed.record_count} records, "
        f"{len(parsed.errors)} skipped rows"
    )
    return parsed


def parse_file(file_path: Path) -> ParsedFile:
    """Parse an uploaded file, choosing the decoder from its extension."""
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Uploaded file not found: {file_path}")
    if file_path.suffix.lower() in EXCEL_SUFFIXES:
        return parse_excel(file_path)
    return parse_csv(file_path)
