"""Shared test fixtures for the EOS import test suite."""

import csv
import io
import tempfile
from pathlib import Path

import openpyxl
import pytest

from eos_import.core.import_engine import ImportOrchestrator
from eos_import.core.record_store import MemoryRecordStore
from eos_import.core.upload_store import MemoryTicketStore, UploadStore

ORG_ID = "11111111-1111-4111-8111-111111111111"
USER_ID = "22222222-2222-4222-8222-222222222222"
OTHER_USER_ID = "33333333-3333-4333-8333-333333333333"


def make_csv_bytes(rows: list[list[str]], delimiter: str = ",") -> bytes:
    """Render rows (first row is the header) as CSV bytes."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue().encode("utf-8")


def create_test_workbook(rows: list[list], sheet_name: str = "Data") -> Path:
    """Create a test Excel file with given rows. First row is headers."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = sheet_name
    for row in rows:
        ws.append(row)
    path = Path(tempfile.mktemp(suffix=".xlsx"))
    wb.save(path)
    wb.close()
    return path


@pytest.fixture
def upload_store(tmp_path) -> UploadStore:
    return UploadStore(
        upload_dir=tmp_path / "uploads",
        tickets=MemoryTicketStore(),
        ttl_seconds=3600,
        max_bytes=1024 * 1024,
    )


@pytest.fixture
def record_store() -> MemoryRecordStore:
    return MemoryRecordStore()


@pytest.fixture
def orchestrator(upload_store, record_store) -> ImportOrchestrator:
    return ImportOrchestrator(upload_store=upload_store, record_store=record_store)
