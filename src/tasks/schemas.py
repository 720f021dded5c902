from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Server-assigned identifiers are opaque; the service may hand out integers or strings
TaskId = Union[int, str]
DueDateInput = Union[date, datetime, str]

NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


# PUBLIC_INTERFACE
class TaskStatus(str, Enum):
    """Completion state of a task."""

    PENDING = "Pending"
    COMPLETED = "Completed"


# PUBLIC_INTERFACE
class TaskPriority(str, Enum):
    """Priority levels, lowest first."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


def _parse_due_date(value: Optional[DueDateInput]) -> Optional[date]:
    """
    Normalize dueDate input into a date.
    - None and the empty string mean "no due date".
    - A datetime (or an ISO datetime string) is truncated to its date.
    - A date is returned as-is.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            return date.fromisoformat(s)
        except ValueError:
            # Full timestamps such as '2025-01-31T00:00:00.000Z'
            try:
                return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
            except ValueError as e:
                raise ValueError(
                    "Invalid dueDate format. Use an ISO8601 date or datetime string (e.g., '2025-01-31')."
                ) from e

    raise ValueError("Invalid type for dueDate; expected date, datetime, or ISO8601 string.")


def _validate_name(v: str) -> str:
    s = v.strip()
    if not (1 <= len(s) <= NAME_MAX_LENGTH):
        raise ValueError(f"name length must be between 1 and {NAME_MAX_LENGTH} characters")
    return s


# PUBLIC_INTERFACE
class Task(BaseModel):
    """
    A task record as returned by the remote task service.

    Instances are frozen: the server-assigned id, like every other field, is
    never modified locally. Updated state always arrives as a new record.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "id": 1,
                "name": "Buy milk",
                "description": "Semi-skimmed, two bottles",
                "status": "Pending",
                "priority": "Medium",
                "dueDate": "2025-02-01",
            }
        },
    )

    id: TaskId = Field(..., description="Opaque server-assigned identifier")
    name: str = Field(..., description="Short task name", min_length=1, max_length=NAME_MAX_LENGTH)
    description: Optional[str] = Field(
        default=None, description="Optional detailed description", max_length=DESCRIPTION_MAX_LENGTH
    )
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Completion status")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    due_date: Optional[date] = Field(default=None, alias="dueDate", description="Optional due date")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _validate_name(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[date]:
        return _parse_due_date(v)


# PUBLIC_INTERFACE
class TaskDraft(BaseModel):
    """
    Body for creating or replacing a task: the Task shape without an id.

    Only `name` is required; the remaining fields take the same defaults the
    service applies to a new task.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "name": "Write report",
                "description": "Quarterly numbers",
                "status": "Pending",
                "priority": "High",
                "dueDate": "2025-03-15",
            }
        },
    )

    name: str = Field(..., description="Short task name", min_length=1, max_length=NAME_MAX_LENGTH)
    description: Optional[str] = Field(
        default=None, description="Optional detailed description", max_length=DESCRIPTION_MAX_LENGTH
    )
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Completion status")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    due_date: Optional[date] = Field(default=None, alias="dueDate", description="Optional due date")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..100 length.
        """
        return _validate_name(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[date]:
        """
        Normalize dueDate from str/date/datetime to date.
        """
        return _parse_due_date(v)

    @classmethod
    def from_task(cls, task: Task) -> "TaskDraft":
        """Prefill a draft from an existing task, e.g. for an edit form."""
        return cls(
            name=task.name,
            description=task.description,
            status=task.status,
            priority=task.priority,
            due_date=task.due_date,
        )

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the JSON body expected by the remote service (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)
