"""Tests for the per-type row validators."""

import pytest

from eos_import.core.handlers import get_handler, validate_records
from eos_import.core.import_types import IMPORT_TYPES
from eos_import.core.models import ImportType
from eos_import.core.validators import (
    ValidationError,
    validate_issue,
    validate_meeting,
    validate_process,
    validate_rock,
    validate_scorecard,
    validate_todo,
    validate_user,
)


def _messages(errors: list[ValidationError]) -> list[str]:
    return [e.message for e in errors]


def _required_cases():
    for import_type, descriptor in IMPORT_TYPES.items():
        for field in descriptor.required_fields:
            yield import_type, field


class TestRequiredFields:
    @pytest.mark.parametrize("import_type,field", list(_required_cases()))
    def test_missing_required_field_reported(self, import_type, field):
        record = dict(IMPORT_TYPES[import_type].sample_row)
        record[field] = "   "
        errors = get_handler(import_type).validate(record, 7)
        assert errors
        assert all(e.row_index == 7 for e in errors)
        assert any(field in e.message for e in errors)

    def test_absent_column_counts_as_missing(self):
        errors = validate_todo({}, 1)
        assert _messages(errors) == ["title is required"]

    def test_blank_required_number_reports_only_required(self):
        errors = validate_rock({"title": "A", "quarter": "", "year": "2024"}, 1)
        assert _messages(errors) == ["quarter is required"]


class TestRocksScenario:
    def test_three_row_upload_yields_three_errors(self):
        records = [
            {"title": "A", "quarter": "1", "year": "2024"},
            {"title": "", "quarter": "5", "year": "2024"},
            {"title": "C", "quarter": "2", "year": "1999"},
        ]
        errors = validate_records(get_handler(ImportType.ROCKS), records)

        assert [str(e) for e in errors] == [
            "Row 2: title is required",
            "Row 2: Quarter must be between 1 and 4",
            "Row 3: Year must be between 2020 and 2030",
        ]

    def test_non_numeric_quarter(self):
        errors = validate_rock({"title": "A", "quarter": "Q1", "year": "2024"}, 1)
        assert _messages(errors) == ["Quarter must be between 1 and 4"]

    def test_completion_out_of_range(self):
        errors = validate_rock(
            {"title": "A", "quarter": "1", "year": "2024", "completion_percentage": "101"}, 1,
        )
        assert _messages(errors) == ["Completion percentage must be between 0 and 100"]

    def test_invalid_status_and_date(self):
        errors = validate_rock(
            {"title": "A", "quarter": "1", "year": "2024", "status": "done", "due_date": "soon"}, 1,
        )
        assert len(errors) == 2
        assert errors[0].message.startswith("Invalid status")

    @pytest.mark.parametrize("year", ["20_24", "\u0662\u0660\u0662\u0664", "2024.0"])
    def test_year_must_be_plain_digits(self, year):
        errors = validate_rock({"title": "A", "quarter": "1", "year": year}, 1)
        assert _messages(errors) == ["Year must be between 2020 and 2030"]

    def test_signed_quarter_accepted(self):
        assert validate_rock({"title": "A", "quarter": "+2", "year": "2024"}, 1) == []

    def test_status_limited_to_rock_lifecycle(self):
        errors = validate_rock({"title": "A", "quarter": "1", "year": "2024", "status": "at_risk"}, 1)
        assert _messages(errors) == [
            "Invalid status. Must be not_started, on_track, off_track, in_progress, or completed",
        ]

    def test_explicit_row_numbers_used(self):
        records = [{"title": "A", "quarter": "1", "year": "2024"}, {"title": "", "quarter": "1", "year": "2024"}]
        errors = validate_records(get_handler(ImportType.ROCKS), records, [1, 3])
        assert [str(e) for e in errors] == ["Row 3: title is required"]

    def test_priority_must_be_positive(self):
        errors = validate_rock({"title": "A", "quarter": "1", "year": "2024", "priority": "0"}, 1)
        assert _messages(errors) == ["Priority must be a positive whole number"]


class TestUserValidation:
    def test_valid_user(self):
        record = {"email": "a@b.co", "first_name": "A", "last_name": "B"}
        assert validate_user(record, 1) == []

    def test_bad_email(self):
        record = {"email": "not-an-email", "first_name": "A", "last_name": "B"}
        assert _messages(validate_user(record, 1)) == ["Invalid email format"]

    def test_bad_role_lists_choices(self):
        record = {"email": "a@b.co", "first_name": "A", "last_name": "B", "role": "owner"}
        assert _messages(validate_user(record, 1)) == ["Invalid role. Must be admin, manager, or member"]

    def test_role_is_case_insensitive(self):
        record = {"email": "a@b.co", "first_name": "A", "last_name": "B", "role": "Admin"}
        assert validate_user(record, 1) == []

    def test_bad_is_active(self):
        record = {"email": "a@b.co", "first_name": "A", "last_name": "B", "is_active": "maybe"}
        assert _messages(validate_user(record, 1)) == ["Invalid is_active. Must be true or false"]


class TestOtherTypes:
    def test_scorecard_frequency(self):
        errors = validate_scorecard({"name": "S", "frequency": "hourly"}, 3)
        assert str(errors[0]) == "Row 3: Invalid frequency. Must be daily, weekly, monthly, or quarterly"

    def test_todo_priority(self):
        errors = validate_todo({"title": "T", "priority": "whenever"}, 1)
        assert len(errors) == 1

    @pytest.mark.parametrize("priority", ["low", "medium", "high", "critical", "Critical", " HIGH "])
    def test_issue_priority_accepted(self, priority):
        assert validate_issue({"title": "I", "priority": priority}, 1) == []

    def test_issue_priority_rejected(self):
        errors = validate_issue({"title": "I", "priority": "urgent"}, 2)
        assert [str(e) for e in errors] == ["Row 2: Invalid priority. Must be low, medium, high, or critical"]

    @pytest.mark.parametrize("status", ["open", "In_Progress", "RESOLVED", "closed"])
    def test_issue_status_accepted(self, status):
        assert validate_issue({"title": "I", "status": status}, 1) == []

    def test_issue_status_rejected(self):
        errors = validate_issue({"title": "I", "status": "pending"}, 1)
        assert _messages(errors) == ["Invalid status. Must be open, in_progress, resolved, or closed"]

    @pytest.mark.parametrize("status", ["pending", "in_progress", "Completed", "CANCELLED"])
    def test_todo_status_accepted(self, status):
        assert validate_todo({"title": "T", "status": status}, 1) == []

    def test_todo_status_rejected(self):
        errors = validate_todo({"title": "T", "status": "open"}, 1)
        assert _messages(errors) == ["Invalid status. Must be pending, in_progress, completed, or cancelled"]

    def test_meeting_duration_bounds(self):
        base = {"title": "L10", "scheduled_at": "2024-01-08T09:00:00"}
        assert validate_meeting({**base, "duration_minutes": "15"}, 1) == []
        assert validate_meeting({**base, "duration_minutes": "480"}, 1) == []
        assert _messages(validate_meeting({**base, "duration_minutes": "10"}, 1)) == [
            "Duration must be between 15 and 480",
        ]

    def test_meeting_bad_timestamp(self):
        errors = validate_meeting({"title": "L10", "scheduled_at": "next tuesday"}, 1)
        assert len(errors) == 1
        assert "scheduled_at" in errors[0].message

    def test_process_only_needs_name(self):
        assert validate_process({"name": "Onboarding"}, 1) == []
        assert _messages(validate_process({"name": ""}, 1)) == ["name is required"]
