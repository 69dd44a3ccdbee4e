"""Row transformers — turn a validated raw record into a typed record.

Transformers assume the row already passed its validator. Organization and
ownership fields always come from the caller's context, never from the file.
"""

from typing import Optional

from eos_import.core.id_gen import generate_id
from eos_import.core.models import (
    IssueRecord,
    MeetingRecord,
    ProcessRecord,
    RockRecord,
    ScorecardRecord,
    TodoRecord,
    UserRecord,
)
from eos_import.core.values import clean, parse_bool, parse_date, parse_datetime

RawRecord = dict[str, str]


def _text(record: RawRecord, field: str) -> Optional[str]:
    return clean(record.get(field))


def _lower(record: RawRecord, field: str, default: Optional[str] = None) -> Optional[str]:
    value = clean(record.get(field))
    return value.lower() if value else default


def _flag(record: RawRecord, field: str, default: bool = True) -> bool:
    value = parse_bool(record.get(field))
    return default if value is None else value


def _whole(record: RawRecord, field: str, default: int) -> int:
    value = clean(record.get(field))
    return int(value) if value else default


def transform_user(record: RawRecord, organization_id: str, user_id: str) -> UserRecord:
    # Users are tenant-less; organization membership is written separately.
    return UserRecord(
        id=generate_id(),
        email=record["email"].strip().lower(),
        first_name=record["first_name"].strip(),
        last_name=record["last_name"].strip(),
        role=_lower(record, "role", "member"),
        department=_text(record, "department"),
        position=_text(record, "position"),
        phone=_text(record, "phone"),
        is_active=_flag(record, "is_active"),
    )


def transform_scorecard(record: RawRecord, organization_id: str, user_id: str) -> ScorecardRecord:
    return ScorecardRecord(
        id=generate_id(),
        organization_id=organization_id,
        name=record["name"].strip(),
        description=_text(record, "description"),
        owner_id=user_id,
        frequency=_lower(record, "frequency", "weekly"),
        is_active=_flag(record, "is_active"),
    )


def transform_rock(record: RawRecord, organization_id: str, user_id: str) -> RockRecord:
    return RockRecord(
        id=generate_id(),
        organization_id=organization_id,
        title=record["title"].strip(),
        description=_text(record, "description"),
        owner_id=user_id,
        quarter=int(record["quarter"].strip()),
        year=int(record["year"].strip()),
        priority=_whole(record, "priority", 1),
        status=_lower(record, "status", "not_started"),
        completion_percentage=_whole(record, "completion_percentage", 0),
        due_date=parse_date(record.get("due_date")),
    )


def transform_todo(record: RawRecord, organization_id: str, user_id: str) -> TodoRecord:
    return TodoRecord(
        id=generate_id(),
        organization_id=organization_id,
        title=record["title"].strip(),
        description=_text(record, "description"),
        assignee_id=user_id,
        created_by=user_id,
        priority=_lower(record, "priority", "medium"),
        status=_lower(record, "status", "pending"),
        due_date=parse_date(record.get("due_date")),
    )


def transform_issue(record: RawRecord, organization_id: str, user_id: str) -> IssueRecord:
    return IssueRecord(
        id=generate_id(),
        organization_id=organization_id,
        title=record["title"].strip(),
        description=_text(record, "description"),
        reporter_id=user_id,
        assignee_id=user_id,
        priority=_lower(record, "priority", "medium"),
        status=_lower(record, "status", "open"),
        category=_text(record, "category"),
        due_date=parse_date(record.get("due_date")),
    )


def transform_meeting(record: RawRecord, organization_id: str, user_id: str) -> MeetingRecord:
    return MeetingRecord(
        id=generate_id(),
        organization_id=organization_id,
        title=record["title"].strip(),
        description=_text(record, "description"),
        meeting_type=_lower(record, "meeting_type", "level_10"),
        organizer_id=user_id,
        scheduled_at=parse_datetime(record["scheduled_at"]),
        duration_minutes=_whole(record, "duration_minutes", 90),
        location=_text(record, "location"),
        meeting_url=_text(record, "meeting_url"),
    )


def transform_process(record: RawRecord, organization_id: str, user_id: str) -> ProcessRecord:
    return ProcessRecord(
        id=generate_id(),
        organization_id=organization_id,
        name=record["name"].strip(),
        description=_text(record, "description"),
        department=_text(record, "department"),
        category=_text(record, "category"),
        version=_text(record, "version") or "1.0",
        owner_id=user_id,
    )
