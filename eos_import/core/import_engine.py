"""Import Engine — orchestrates the upload → preview → import pipeline.

Two request/response steps make up one import:

1. preview_upload: store the file, parse it, validate every row, and hand
   back a preview. The file stays on disk, bound to the uploader by a ticket.
2. run_import: re-parse the same file, then transform and insert each row in
   file order. A failing row is recorded and skipped; it never stops the rest
   of the batch. The file is deleted when the import ends, whatever happened.

Runs synchronously: rows are processed one at a time inside the request,
so row numbers in error messages always match file order.
"""

import logging
from dataclasses import dataclass, field
from typing import BinaryIO, Optional

from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from eos_import.core.errors import EmptyFileError, InvalidUploadError
from eos_import.core.file_parser import RowParseError, parse_file
from eos_import.core.handlers import (
    MEMBERSHIP_TABLE,
    ImportHandler,
    get_handler,
    validate_records,
)
from eos_import.core.models import ImportState, ImportType, MembershipRecord
from eos_import.core.record_store import RecordStore
from eos_import.core.upload_store import UploadStore
from eos_import.core.validators import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_ROWS = 5


@dataclass
class UploadPreview:
    """What the client sees after an upload, before it confirms the import."""
    filename: str
    import_type: ImportType
    record_count: int
    preview: list[dict[str, str]]
    headers: list[str]
    validation_errors: list[ValidationError] = field(default_factory=list)
    parse_errors: list[RowParseError] = field(default_factory=list)
    state: ImportState = ImportState.PREVIEW_READY

    @property
    def is_valid(self) -> bool:
        # One bad row marks the whole upload invalid for preview purposes
        return not self.validation_errors and not self.parse_errors


@dataclass
class ImportReport:
    """Result of an import run, built up one row at a time."""
    total_rows: int = 0
    imported_count: int = 0
    errors: list[str] = field(default_factory=list)
    results: list[dict] = field(default_factory=list)
    state: ImportState = ImportState.IMPORTING

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def add_error(self, row_number: int, reason: str) -> None:
        self.errors.append(f"Row {row_number}: {reason}")


def describe_row_failure(exc: Exception) -> str:
    """Short, user-facing explanation of why a row could not be imported."""
    if isinstance(exc, KeyError):
        return f"missing column '{exc.args[0]}'"
    if isinstance(exc, ModelValidationError):
        parts = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()))
            parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
        return "; ".join(parts)
    return str(exc) or exc.__class__.__name__


class ImportOrchestrator:
    """Coordinates the File Parser, the per-type handlers and the stores."""

    def __init__(
        self,
        upload_store: UploadStore,
        record_store: RecordStore,
        preview_rows: int = DEFAULT_PREVIEW_ROWS,
        reject_invalid_imports: bool = False,
    ):
        self.upload_store = upload_store
        self.record_store = record_store
        self.preview_rows = preview_rows
        self.reject_invalid_imports = reject_invalid_imports

    # ------------------------------------------------------------------
    # Upload / preview
    # ------------------------------------------------------------------

    def preview_upload(
        self,
        source: BinaryIO,
        original_name: Optional[str],
        declared_type: str,
        user_id: str,
    ) -> UploadPreview:
        """Store an uploaded file, parse and validate it, and return a preview.

        The declared type is checked before anything touches the disk. When
        parsing fails the stored file is removed and the error re-raised.
        """
        handler = get_handler(declared_type)
        import_type = handler.descriptor.type
        logger.info(f"Upload started: type={import_type.value} file={original_name!r} user={user_id}")

        path = self.upload_store.save(source, original_name)
        try:
            parsed = parse_file(path)
            if parsed.total_rows == 0:
                raise EmptyFileError("File contains a header row but no data rows")
        except Exception as e:
            logger.warning(f"Upload {path.name} failed to parse: {e}")
            self.upload_store.discard(path.name)
            raise

        errors = validate_records(handler, parsed.records, parsed.row_numbers)
        self.upload_store.issue_ticket(path.name, user_id, import_type, original_name)

        logger.info(
            f"Upload {path.name} ready: {parsed.record_count} rows, "
            f"{len(errors)} validation errors, {len(parsed.errors)} parse errors"
        )
        return UploadPreview(
            filename=path.name,
            import_type=import_type,
            record_count=parsed.record_count,
            preview=parsed.records[:self.preview_rows],
            headers=parsed.headers,
            validation_errors=errors,
            parse_errors=parsed.errors,
        )

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def run_import(
        self,
        filename: str,
        declared_type: str,
        organization_id: str,
        user_id: str,
    ) -> ImportReport:
        """Import every row of a previously uploaded file.

        Steps:
        1. Resolve the handler (unsupported type fails before any file I/O)
        2. Claim the upload (must exist, belong to user_id, match the type)
        3. Re-parse the file
        4. For each row in order: transform, insert, record success or failure
        5. Delete the file and its ticket, even when a step above raised
        """
        handler = get_handler(declared_type)
        import_type = handler.descriptor.type

        with self.upload_store.consume(filename, user_id, import_type) as path:
            parsed = parse_file(path)

            if self.reject_invalid_imports:
                problems = [f"Row {e.row}: {e.message}" for e in parsed.errors]
                problems += [str(e) for e in validate_records(handler, parsed.records, parsed.row_numbers)]
                if problems:
                    logger.info(f"Refusing import of {filename}: {len(problems)} validation errors")
                    raise InvalidUploadError(problems)

            report = ImportReport(total_rows=parsed.total_rows)
            logger.info(
                f"Import started: {filename} type={import_type.value} "
                f"org={organization_id} rows={parsed.total_rows}"
            )

            malformed = {e.row: e for e in parsed.errors}
            records = dict(parsed.numbered_records())

            for row_number in range(1, parsed.total_rows + 1):
                if row_number in malformed:
                    report.add_error(row_number, malformed[row_number].message)
                    continue

                record = records[row_number]
                try:
                    stored = self._import_row(handler, record, organization_id, user_id)
                except Exception as e:
                    reason = describe_row_failure(e)
                    logger.warning(f"{filename} row {row_number} not imported: {reason}")
                    report.add_error(row_number, reason)
                    continue

                report.imported_count += 1
                report.results.append(stored)

                if import_type == ImportType.USERS:
                    self._add_membership(report, row_number, stored, organization_id)

        report.state = ImportState.COMPLETED
        logger.info(
            f"Import finished: {filename} imported={report.imported_count}/{report.total_rows} "
            f"errors={len(report.errors)}"
        )
        return report

    def _import_row(
        self,
        handler: ImportHandler,
        record: dict[str, str],
        organization_id: str,
        user_id: str,
    ) -> dict:
        typed: BaseModel = handler.transform(record, organization_id, user_id)
        return self.record_store.insert(handler.table, typed.model_dump(mode="json"))

    def _add_membership(
        self,
        report: ImportReport,
        row_number: int,
        user_row: dict,
        organization_id: str,
    ) -> None:
        membership = MembershipRecord(
            user_id=user_row["id"],
            organization_id=organization_id,
            role=user_row.get("role", "member"),
        )
        try:
            self.record_store.insert(MEMBERSHIP_TABLE, membership.model_dump(mode="json"))
        except Exception as e:
            # The user row is already stored; surface the membership failure only
            reason = describe_row_failure(e)
            logger.warning(f"Membership for user {user_row['id']} not created: {reason}")
            report.add_error(row_number, f"user imported but organization membership failed: {reason}")
