"""Pydantic models for imported records and API request/response schemas."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ImportType(str, Enum):
    USERS = "users"
    SCORECARDS = "scorecards"
    ROCKS = "rocks"
    TODOS = "todos"
    ISSUES = "issues"
    MEETINGS = "meetings"
    PROCESSES = "processes"


class ImportState(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    PREVIEW_READY = "preview_ready"
    IMPORTING = "importing"
    COMPLETED = "completed"
    FAILED = "failed"


class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


class RockStatus(str, Enum):
    NOT_STARTED = "not_started"
    ON_TRACK = "on_track"
    OFF_TRACK = "off_track"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TodoPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TodoStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class IssuePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IssueStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class MeetingType(str, Enum):
    LEVEL_10 = "level_10"
    ONE_ON_ONE = "one_on_one"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"
    AD_HOC = "ad_hoc"


# --- Transformed records (one per importable table) ---


class UserRecord(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole = UserRole.MEMBER
    department: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True


class MembershipRecord(BaseModel):
    user_id: str
    organization_id: str
    role: UserRole


class ScorecardRecord(BaseModel):
    id: str
    organization_id: str
    name: str
    description: Optional[str] = None
    owner_id: str
    frequency: Frequency = Frequency.WEEKLY
    is_active: bool = True


class RockRecord(BaseModel):
    id: str
    organization_id: str
    title: str
    description: Optional[str] = None
    owner_id: str
    quarter: int = Field(ge=1, le=4)
    year: int = Field(ge=2020, le=2030)
    priority: int = 1
    status: RockStatus = RockStatus.NOT_STARTED
    completion_percentage: int = Field(default=0, ge=0, le=100)
    due_date: Optional[date] = None


class TodoRecord(BaseModel):
    id: str
    organization_id: str
    title: str
    description: Optional[str] = None
    assignee_id: str
    created_by: str
    priority: TodoPriority = TodoPriority.MEDIUM
    status: TodoStatus = TodoStatus.PENDING
    due_date: Optional[date] = None


class IssueRecord(BaseModel):
    id: str
    organization_id: str
    title: str
    description: Optional[str] = None
    reporter_id: str
    assignee_id: str
    priority: IssuePriority = IssuePriority.MEDIUM
    status: IssueStatus = IssueStatus.OPEN
    category: Optional[str] = None
    due_date: Optional[date] = None


class MeetingRecord(BaseModel):
    id: str
    organization_id: str
    title: str
    description: Optional[str] = None
    meeting_type: MeetingType = MeetingType.LEVEL_10
    organizer_id: str
    scheduled_at: datetime
    duration_minutes: int = Field(default=90, ge=15, le=480)
    location: Optional[str] = None
    meeting_url: Optional[str] = None


class ProcessRecord(BaseModel):
    id: str
    organization_id: str
    name: str
    description: Optional[str] = None
    department: Optional[str] = None
    category: Optional[str] = None
    version: str = "1.0"
    owner_id: str


# --- API request/response models ---


class CamelModel(BaseModel):
    """Transport model serialized with camelCase keys, accepting either form."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImportTypeInfo(CamelModel):
    type: ImportType
    name: str
    description: str
    required_fields: list[str]
    optional_fields: list[str]
    sample_data: dict[str, str]


class ImportTypesResponse(CamelModel):
    types: list[ImportTypeInfo]


class UploadResponse(CamelModel):
    message: str
    filename: str
    type: ImportType
    record_count: int
    preview: list[dict[str, str]]
    headers: list[str]
    validation_errors: list[str]
    parse_errors: list[str] = []
    is_valid: bool


class ImportRequest(CamelModel):
    filename: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    organization_id: Optional[str] = None


class ImportResponse(CamelModel):
    message: str
    imported_count: int
    total_rows: int
    errors: list[str]
    has_errors: bool
    results: list[dict]
