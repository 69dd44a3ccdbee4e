"""Tests for the file parser — CSV text and programmatic openpyxl workbooks."""

from datetime import datetime

import pytest

from eos_import.core.errors import EmptyFileError, ParseError
from eos_import.core.file_parser import parse_csv_text, parse_excel, parse_file
from conftest import create_test_workbook, make_csv_bytes


class TestParseCsvText:
    def test_basic_csv(self):
        parsed = parse_csv_text("title,priority\nCall client,high\nSend invoice,low\n")
        assert parsed.headers == ["title", "priority"]
        assert parsed.record_count == 2
        assert parsed.records[0] == {"title": "Call client", "priority": "high"}
        assert parsed.errors == []

    def test_bom_is_stripped(self):
        parsed = parse_csv_text("\ufefftitle\nA\n")
        assert parsed.headers == ["title"]

    def test_semicolon_delimiter_sniffed(self):
        parsed = parse_csv_text("title;priority\nA;high\nB;low\n")
        assert parsed.headers == ["title", "priority"]
        assert parsed.records[1]["priority"] == "low"

    def test_quoted_commas(self):
        parsed = parse_csv_text('title,description\nA,"one, two"\n')
        assert parsed.records[0]["description"] == "one, two"

    def test_cells_are_trimmed(self):
        parsed = parse_csv_text("title,priority\n  A  , high \n")
        assert parsed.records[0] == {"title": "A", "priority": "high"}

    def test_blank_lines_skipped(self):
        parsed = parse_csv_text("\n\ntitle\n\nA\n\nB\n")
        assert [r["title"] for r in parsed.records] == ["A", "B"]

    def test_short_row_is_reported_and_skipped(self):
        parsed = parse_csv_text("title,priority,status\nA,high,open\nB\nC,low,open\n")
        assert [r["title"] for r in parsed.records] == ["A", "C"]
        assert len(parsed.errors) == 1
        assert str(parsed.errors[0]) == "Line 3: expected 3 columns, found 1"

    def test_row_numbers_count_skipped_rows(self):
        parsed = parse_csv_text("title,priority\nA,high\nB\n\nC,low\n")
        assert parsed.row_numbers == [1, 3]
        assert parsed.errors[0].row == 2
        assert parsed.total_rows == 3
        assert list(parsed.numbered_records()) == [
            (1, {"title": "A", "priority": "high"}),
            (3, {"title": "C", "priority": "low"}),
        ]

    def test_trailing_empty_cells_tolerated(self):
        parsed = parse_csv_text("title,priority\nA,high,,\n")
        assert parsed.records == [{"title": "A", "priority": "high"}]

    def test_header_only(self):
        parsed = parse_csv_text("title,priority\n")
        assert parsed.headers == ["title", "priority"]
        assert parsed.record_count == 0

    @pytest.mark.parametrize("text", ["", "   \n\n", ",,,\n"])
    def test_empty_file_raises(self, text):
        with pytest.raises(EmptyFileError):
            parse_csv_text(text)


class TestParseFile:
    def test_csv_file(self, tmp_path):
        path = tmp_path / "todos.csv"
        path.write_bytes(make_csv_bytes([["title", "status"], ["A", "pending"]]))
        parsed = parse_file(path)
        assert parsed.records == [{"title": "A", "status": "pending"}]

    def test_non_utf8_raises_parse_error(self, tmp_path):
        path = tmp_path / "latin.csv"
        path.write_bytes("title\ncaf\xe9\n".encode("latin-1"))
        with pytest.raises(ParseError, match="UTF-8"):
            parse_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_file(tmp_path / "gone.csv")

    def test_xlsx_dispatch(self):
        path = create_test_workbook([["title"], ["From Excel"]])
        parsed = parse_file(path)
        assert parsed.records == [{"title": "From Excel"}]
        path.unlink()


class TestParseExcel:
    def test_values_are_stringified(self):
        path = create_test_workbook([
            ["title", "quarter", "year", "due_date", "is_active"],
            ["Grow", 1, 2024.0, datetime(2024, 3, 31), True],
        ])
        parsed = parse_excel(path)
        assert parsed.records[0] == {
            "title": "Grow",
            "quarter": "1",
            "year": "2024",
            "due_date": "2024-03-31",
            "is_active": "true",
        }
        path.unlink()

    def test_empty_cells_become_empty_strings(self):
        path = create_test_workbook([["title", "description"], ["A", None]])
        parsed = parse_excel(path)
        assert parsed.records[0]["description"] == ""
        path.unlink()

    def test_empty_sheet_raises(self):
        path = create_test_workbook([])
        with pytest.raises(EmptyFileError):
            parse_excel(path)
        path.unlink()

    def test_corrupt_workbook_raises_parse_error(self, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"this is not a zip archive")
        with pytest.raises(ParseError):
            parse_excel(path)
