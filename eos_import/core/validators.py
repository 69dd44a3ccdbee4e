"""Row validators — one pure function per import type.

Each validator takes a raw record (column header → cell text) and the
1-based row number, and returns the list of problems found. Validators never
raise: an empty list means the row is importable.
"""

import re
from dataclasses import dataclass
from typing import Optional

from eos_import.core.import_types import IMPORT_TYPES
from eos_import.core.models import (
    Frequency,
    ImportType,
    IssuePriority,
    IssueStatus,
    MeetingType,
    RockStatus,
    TodoPriority,
    TodoStatus,
    UserRole,
)
from eos_import.core.values import is_blank, parse_bool, parse_date, parse_datetime, parse_int

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

RawRecord = dict[str, str]


@dataclass(frozen=True)
class ValidationError:
    row_index: int
    message: str

    def __str__(self) -> str:
        return f"Row {self.row_index}: {self.message}"


def _choices(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


def _join_choices(choices: list[str]) -> str:
    """["a", "b", "c"] -> "a, b, or c"."""
    if len(choices) < 2:
        return "".join(choices)
    return ", ".join(choices[:-1]) + f", or {choices[-1]}"


def _check_required(
    record: RawRecord, row_index: int, import_type: ImportType,
) -> list[ValidationError]:
    return [
        ValidationError(row_index, f"{field} is required")
        for field in IMPORT_TYPES[import_type].required_fields
        if is_blank(record.get(field))
    ]


def _check_choice(
    record: RawRecord, row_index: int, field: str, enum_cls,
) -> Optional[ValidationError]:
    value = record.get(field)
    if is_blank(value):
        return None
    choices = _choices(enum_cls)
    if value.strip().lower() not in choices:
        return ValidationError(
            row_index, f"Invalid {field}. Must be {_join_choices(choices)}",
        )
    return None


def _check_range(
    record: RawRecord, row_index: int, field: str, low: int, high: int, label: str,
) -> Optional[ValidationError]:
    value = record.get(field)
    if is_blank(value):
        return None
    number = parse_int(value)
    if number is None or number < low or number > high:
        return ValidationError(row_index, f"{label} must be between {low} and {high}")
    return None


def _check_date(record: RawRecord, row_index: int, field: str) -> Optional[ValidationError]:
    value = record.get(field)
    if is_blank(value) or parse_date(value) is not None:
        return None
    return ValidationError(row_index, f"Invalid {field}. Expected a date like YYYY-MM-DD")


def _check_bool(record: RawRecord, row_index: int, field: str) -> Optional[ValidationError]:
    value = record.get(field)
    if is_blank(value) or parse_bool(value) is not None:
        return None
    return ValidationError(row_index, f"Invalid {field}. Must be true or false")


def _collect(errors: list[ValidationError], *checks: Optional[ValidationError]) -> list[ValidationError]:
    errors.extend(check for check in checks if check is not None)
    return errors


def validate_user(record: RawRecord, row_index: int) -> list[ValidationError]:
    errors = _check_required(record, row_index, ImportType.USERS)
    email = record.get("email")
    if not is_blank(email) and not EMAIL_RE.match(email.strip()):
        errors.append(ValidationError(row_index, "Invalid email format"))
    return _collect(
        errors,
        _check_choice(record, row_index, "role", UserRole),
        _check_bool(record, row_index, "is_active"),
    )


def validate_scorecard(record: RawRecord, row_index: int) -> list[ValidationError]:
    errors = _check_required(record, row_index, ImportType.SCORECARDS)
    return _collect(
        errors,
        _check_choice(record, row_index, "frequency", Frequency),
        _check_bool(record, row_index, "is_active"),
    )


def validate_rock(record: RawRecord, row_index: int) -> list[ValidationError]:
    errors = _check_required(record, row_index, ImportType.ROCKS)
    priority = record.get("priority")
    priority_error = None
    if not is_blank(priority) and (parse_int(priority) is None or parse_int(priority) < 1):
        priority_error = ValidationError(row_index, "Priority must be a positive whole number")
    return _collect(
        errors,
        _check_range(record, row_index, "quarter", 1, 4, "Quarter"),
        _check_range(record, row_index, "year", 2020, 2030, "Year"),
        _check_range(record, row_index, "completion_percentage", 0, 100, "Completion percentage"),
        priority_error,
        _check_choice(record, row_index, "status", RockStatus),
        _check_date(record, row_index, "due_date"),
    )


def validate_todo(record: RawRecord, row_index: int) -> list[ValidationError]:
    errors = _check_required(record, row_index, ImportType.TODOS)
    return _collect(
        errors,
        _check_choice(record, row_index, "priority", TodoPriority),
        _check_choice(record, row_index, "status", TodoStatus),
        _check_date(record, row_index, "due_date"),
    )


def validate_issue(record: RawRecord, row_index: int) -> list[ValidationError]:
    errors = _check_required(record, row_index, ImportType.ISSUES)
    return _collect(
        errors,
        _check_choice(record, row_index, "priority", IssuePriority),
        _check_choice(record, row_index, "status", IssueStatus),
        _check_date(record, row_index, "due_date"),
    )


def validate_meeting(record: RawRecord, row_index: int) -> list[ValidationError]:
    errors = _check_required(record, row_index, ImportType.MEETINGS)
    scheduled_at = record.get("scheduled_at")
    scheduled_error = None
    if not is_blank(scheduled_at) and parse_datetime(scheduled_at) is None:
        scheduled_error = ValidationError(
            row_index, "Invalid scheduled_at. Expected an ISO-8601 date or timestamp",
        )
    return _collect(
        errors,
        scheduled_error,
        _check_choice(record, row_index, "meeting_type", MeetingType),
        _check_range(record, row_index, "duration_minutes", 15, 480, "Duration"),
    )


def validate_process(record: RawRecord, row_index: int) -> list[ValidationError]:
    return _check_required(record, row_index, ImportType.PROCESSES)
