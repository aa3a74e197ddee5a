"""
Pydantic request and response models for the CommandStack API.

JSON field names are camelCase (``contextId``, ``startedAt``); Python
attributes stay snake_case. Datetimes are stored in UTC and rendered in
the configured local timezone. Naive datetimes sent by clients are read
as local time.
"""

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

from commandstack.models import WorkStatus, WorkType
from commandstack.time_utils import to_local, to_utc

LocalDateTime = Annotated[
    datetime,
    PlainSerializer(lambda v: to_local(v).isoformat(), return_type=str, when_used="json"),
]


class CamelModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# Request Models
# =============================================================================


class WorkItemRequest(CamelModel):
    """Fields shared by command and task create/update requests."""

    syntax: str = Field(..., min_length=1, max_length=500)
    details: Optional[str] = None
    type: WorkType = WorkType.TASK
    context_id: UUID
    deadline: Optional[datetime] = None

    @field_validator("syntax")
    @classmethod
    def validate_syntax_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("syntax cannot be blank")
        return v.strip()

    @field_validator("deadline")
    @classmethod
    def normalize_deadline(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_utc(v) if v is not None else None


class CommandRequest(WorkItemRequest):
    """Create or replace a command."""


class TaskRequest(WorkItemRequest):
    """Create or replace a task."""

    sync_to_google: Optional[bool] = Field(
        None,
        description="Mirror the task to Google Calendar (omit on update to keep the current setting)",
    )


class StatusUpdateRequest(CamelModel):
    status: WorkStatus


class ContextRequest(CamelModel):
    """Create or replace a context."""

    namespace: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")

    @field_validator("namespace")
    @classmethod
    def validate_namespace_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("namespace cannot be blank")
        return v.strip()


class TokenExchangeRequest(CamelModel):
    token: str


# =============================================================================
# Response Models
# =============================================================================


class WorkItemResponse(CamelModel):
    id: UUID
    syntax: str
    details: Optional[str] = None
    status: WorkStatus
    type: WorkType
    context_id: UUID
    deadline: Optional[LocalDateTime] = None
    started_at: Optional[LocalDateTime] = None
    completed_at: Optional[LocalDateTime] = None
    created_at: LocalDateTime
    updated_at: LocalDateTime


class CommandResponse(WorkItemResponse):
    """A command."""


class TaskResponse(WorkItemResponse):
    """A task, with its calendar link."""

    google_event_id: Optional[str] = None
    sync_to_google: bool = False
    user_id: Optional[UUID] = None


class ContextResponse(CamelModel):
    id: UUID
    namespace: str
    description: Optional[str] = None
    color: Optional[str] = None
    created_at: LocalDateTime
    updated_at: LocalDateTime


class UserResponse(CamelModel):
    """Signed-in user. OAuth tokens are never included."""

    id: UUID
    google_id: str
    email: str
    name: Optional[str] = None
    picture_url: Optional[str] = None
    has_calendar_access: bool


class AuthStatusResponse(CamelModel):
    authenticated: bool
    user: Optional[UserResponse] = None


class CalendarEventResponse(CamelModel):
    """A Google Calendar event as shown to clients."""

    id: str
    summary: Optional[str] = None
    description: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    html_link: Optional[str] = None
    is_all_day: bool = False


class SyncResponse(CamelModel):
    message: str
    created: int
    updated: int
    failed: int


class HealthResponse(CamelModel):
    """Health check response."""

    status: str = Field(..., description="healthy or unhealthy")
    version: str
    database_connected: bool
