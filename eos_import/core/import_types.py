"""Import Type Registry — static descriptors for every importable entity type.

Each descriptor lists the required and optional columns of its type and one
illustrative sample row. The validators read their required-field lists from
here and the downloadable templates are generated from the same table, so the
three never drift apart.
"""

import csv
import io
from typing import Union

from pydantic import BaseModel

from eos_import.core.errors import UnsupportedTypeError
from eos_import.core.models import ImportType, ImportTypeInfo


class ImportTypeDef(BaseModel):
    type: ImportType
    name: str
    description: str
    required_fields: list[str]
    optional_fields: list[str] = []
    sample_row: dict[str, str]

    @property
    def fields(self) -> list[str]:
        """All known columns, required first, in template order."""
        return self.required_fields + self.optional_fields

    def to_info(self) -> ImportTypeInfo:
        return ImportTypeInfo(
            type=self.type,
            name=self.name,
            description=self.description,
            required_fields=list(self.required_fields),
            optional_fields=list(self.optional_fields),
            sample_data=dict(self.sample_row),
        )


IMPORT_TYPES: dict[ImportType, ImportTypeDef] = {
    ImportType.USERS: ImportTypeDef(
        type=ImportType.USERS,
        name="Users",
        description="Import user accounts and profiles",
        required_fields=["email", "first_name", "last_name"],
        optional_fields=["role", "department", "position", "phone", "is_active"],
        sample_row={
            "email": "john.doe@company.com",
            "first_name": "John",
            "last_name": "Doe",
            "role": "member",
            "department": "Sales",
            "position": "Sales Manager",
            "phone": "+1234567890",
            "is_active": "true",
        },
    ),
    ImportType.SCORECARDS: ImportTypeDef(
        type=ImportType.SCORECARDS,
        name="Scorecards",
        description="Import scorecards and KPI tracking data",
        required_fields=["name"],
        optional_fields=["description", "frequency", "is_active"],
        sample_row={
            "name": "Sales Scorecard",
            "description": "Track sales team performance",
            "frequency": "weekly",
            "is_active": "true",
        },
    ),
    ImportType.ROCKS: ImportTypeDef(
        type=ImportType.ROCKS,
        name="Rocks (Goals)",
        description="Import quarterly goals and objectives",
        required_fields=["title", "quarter", "year"],
        optional_fields=["description", "priority", "status", "completion_percentage", "due_date"],
        sample_row={
            "title": "Increase revenue by 20%",
            "quarter": "1",
            "year": "2024",
            "description": "Focus on new customer acquisition",
            "priority": "1",
            "status": "in_progress",
            "completion_percentage": "75",
            "due_date": "2024-03-31",
        },
    ),
    ImportType.TODOS: ImportTypeDef(
        type=ImportType.TODOS,
        name="To-Dos",
        description="Import tasks and action items",
        required_fields=["title"],
        optional_fields=["description", "priority", "status", "due_date"],
        sample_row={
            "title": "Complete quarterly review",
            "description": "Prepare presentation for board meeting",
            "priority": "high",
            "status": "pending",
            "due_date": "2024-01-31",
        },
    ),
    ImportType.ISSUES: ImportTypeDef(
        type=ImportType.ISSUES,
        name="Issues",
        description="Import business issues and problems",
        required_fields=["title"],
        optional_fields=["description", "priority", "status", "category", "due_date"],
        sample_row={
            "title": "System performance issues",
            "description": "Database queries are running slowly",
            "priority": "high",
            "status": "open",
            "category": "Technical",
            "due_date": "2024-02-15",
        },
    ),
    ImportType.MEETINGS: ImportTypeDef(
        type=ImportType.MEETINGS,
        name="Meetings",
        description="Import scheduled meetings",
        required_fields=["title", "scheduled_at"],
        optional_fields=["description", "meeting_type", "duration_minutes", "location", "meeting_url"],
        sample_row={
            "title": "Weekly Level 10",
            "scheduled_at": "2024-01-08T09:00:00",
            "description": "Leadership team weekly meeting",
            "meeting_type": "level_10",
            "duration_minutes": "90",
            "location": "Conference Room A",
            "meeting_url": "https://meet.example.com/l10",
        },
    ),
    ImportType.PROCESSES: ImportTypeDef(
        type=ImportType.PROCESSES,
        name="Processes",
        description="Import documented core processes",
        required_fields=["name"],
        optional_fields=["description", "department", "category", "version"],
        sample_row={
            "name": "Client Onboarding",
            "description": "Steps to bring a new client on board",
            "department": "Operations",
            "category": "Customer Success",
            "version": "1.0",
        },
    ),
}


def parse_import_type(value: Union[str, ImportType, None]) -> ImportType:
    """Resolve a declared type string to an ImportType.

    Raises UnsupportedTypeError for anything outside the supported set.
    """
    if isinstance(value, ImportType):
        return value
    try:
        return ImportType((value or "").strip())
    except ValueError:
        raise UnsupportedTypeError(value)


def get_import_type(value: Union[str, ImportType]) -> ImportTypeDef:
    """Get the descriptor for a type, validating the type name first."""
    return IMPORT_TYPES[parse_import_type(value)]


def list_types() -> list[ImportTypeInfo]:
    """Summaries of every supported type, for client-side pickers."""
    return [descriptor.to_info() for descriptor in IMPORT_TYPES.values()]


def template(value: Union[str, ImportType]) -> str:
    """Build the blank CSV template for a type: header row plus one sample row."""
    descriptor = get_import_type(value)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(descriptor.fields)
    writer.writerow([descriptor.sample_row.get(f, "") for f in descriptor.fields])
    return buffer.getvalue().rstrip("\n")
