from datetime import date, datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


class TaskStatus(str, Enum):
    ACTIVE = "Active"
    WAITING_ON = "WaitingOn"
    SOMEDAY_MAYBE = "SomedayMaybe"
    ARCHIVED = "Archived"


class DateScope(str, Enum):
    ALL = "All"
    TODAY = "Today"
    THIS_WEEK = "ThisWeek"
    OVERDUE = "Overdue"


class ScreenName(str, Enum):
    """Screen the user was on when submitting free text."""
    TODAY = "today"
    MASTER = "master"
    ROUTINES = "routines"
    TIMELINE = "timeline"
    LIBRARY = "library"
    ENTRIES = "entries"


SourceType = Literal["voice", "email", "transcript", "manual"]


def _unique(values: list[str]) -> list[str]:
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def _not_blank(value: str, field: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{field} must not be empty")
    return value


class Source(BaseModel):
    type: SourceType = "manual"
    id: Optional[str] = None


class Task(BaseModel):
    id: str
    title: str
    is_completed: bool = False
    status: TaskStatus = TaskStatus.ACTIVE
    created_at: datetime
    action_date: Optional[date] = None  # When to surface the task
    tags: list[str] = Field(default_factory=list)
    time_estimate: Optional[str] = None  # Free form, e.g. "30min", "2 hours"
    context: Optional[str] = None
    participants: list[str] = Field(default_factory=list)
    occurred_date: Optional[date] = None  # When the underlying event happened
    source: Optional[Source] = None
    linked_tasks: list[str] = Field(default_factory=list)
    parent_task_id: Optional[str] = None
    is_routine: bool = False

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        return _not_blank(value, "title")

    @field_validator("tags")
    @classmethod
    def tags_are_a_set(cls, value: list[str]) -> list[str]:
        return _unique(value)


class DateRange(BaseModel):
    start: Optional[date] = None
    end: Optional[date] = None


class FilterState(BaseModel):
    tags: list[str] = Field(default_factory=list)  # AND semantics
    status: list[TaskStatus] = Field(default_factory=list)
    date_scope: DateScope = DateScope.ALL
    action_date_range: Optional[DateRange] = None


# --- Commands produced by the normalizer ---

class CaptureTask(BaseModel):
    kind: Literal["capture_task"] = "capture_task"
    title: str
    tags: list[str] = Field(default_factory=list)
    status: TaskStatus = TaskStatus.ACTIVE
    action_date: Optional[date] = None
    time_estimate: Optional[str] = None
    context: Optional[str] = None
    participants: list[str] = Field(default_factory=list)
    occurred_date: Optional[date] = None
    source: Source = Field(default_factory=Source)
    is_routine: bool = False

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        return _not_blank(value, "title")

    def to_task(self, task_id: str, created_at: datetime) -> Task:
        """Materialize the command the way the create operation does."""
        return Task(
            id=task_id,
            title=self.title,
            status=self.status,
            created_at=created_at,
            action_date=self.action_date,
            tags=self.tags,
            time_estimate=self.time_estimate,
            context=self.context,
            participants=self.participants,
            occurred_date=self.occurred_date,
            source=self.source,
            is_routine=self.is_routine,
        )


class CaptureTaskBatch(BaseModel):
    kind: Literal["capture_task_batch"] = "capture_task_batch"
    items: list[CaptureTask] = Field(min_length=2)


class ApplyView(BaseModel):
    kind: Literal["apply_view"] = "apply_view"
    view_name: str
    description: str = ""
    filters: FilterState = Field(default_factory=FilterState)

    @field_validator("view_name")
    @classmethod
    def view_name_not_blank(cls, value: str) -> str:
        return _not_blank(value, "view_name")


Command = Annotated[
    Union[CaptureTask, CaptureTaskBatch, ApplyView],
    Field(discriminator="kind"),
]


class ServiceError(BaseModel):
    """Language-model call failed; returned, never raised."""
    kind: Literal["unavailable", "malformed"]
    message: str


# --- API payloads ---

class IntentRequest(BaseModel):
    free_text: str
    view_context: Optional[ScreenName] = None


class IntentResponse(BaseModel):
    command: Optional[Command] = None
    error: Optional[ServiceError] = None


class FilterRequest(BaseModel):
    tasks: list[Task]
    filters: FilterState = Field(default_factory=FilterState)
    now: Optional[datetime] = None
    search: Optional[str] = None
