"""
Task model for the Taskboard API
Defines the task entity with all required fields and relationships
"""
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field as PydanticField, field_validator, model_validator
from sqlalchemy import JSON, DateTime
from sqlmodel import Column, Field, SQLModel

from .base import CamelModel
from .category import Category, CategoryRef
from ..utils.timeutils import to_naive_utc, utcnow

DUE_SOON_WINDOW = timedelta(hours=24)


class Priority(str, Enum):
    """Task priority levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    """Derived task status options"""
    COMPLETED = "completed"
    OVERDUE = "overdue"
    DUE_SOON = "due-soon"
    PENDING = "pending"


class RecurrenceType(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Task(SQLModel, table=True):
    """Task model for database table"""
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    category_id: Optional[int] = Field(default=None, foreign_key="category.id", index=True)
    title: str = Field(max_length=100, nullable=False)
    description: Optional[str] = Field(default=None, max_length=500)
    completed: bool = Field(default=False, index=True)
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    priority: Priority = Field(default=Priority.MEDIUM)
    due_date: Optional[datetime] = Field(default=None, sa_type=DateTime, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, sa_column_kwargs={"onupdate": utcnow})

    # Opaque attached data, no cross-entity invariants
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    attachments: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    recurring: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    time_estimate: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    actual_time: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    notes: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))


def compute_status(completed: bool, due_date: Optional[datetime], now: Optional[datetime] = None) -> TaskStatus:
    """
    Derive a task's status from its stored attributes.

    completed wins; otherwise a past due date is overdue and a due date
    inside the next 24 hours is due-soon.
    """
    if completed:
        return TaskStatus.COMPLETED
    if due_date is None:
        return TaskStatus.PENDING
    now = now or utcnow()
    if now > due_date:
        return TaskStatus.OVERDUE
    if due_date - now < DUE_SOON_WINDOW:
        return TaskStatus.DUE_SOON
    return TaskStatus.PENDING


def duration_minutes(value: Optional[Dict[str, Any]]) -> int:
    """Total minutes of a stored {hours, minutes} duration."""
    if not value:
        return 0
    return (value.get("hours") or 0) * 60 + (value.get("minutes") or 0)


def _parse_due_date(v):
    # Accept bare calendar dates as midnight UTC
    if isinstance(v, str) and len(v) == 10:
        return datetime.combine(date.fromisoformat(v), datetime.min.time())
    if isinstance(v, date) and not isinstance(v, datetime):
        return datetime.combine(v, datetime.min.time())
    return v


# Extension schemas

class Duration(CamelModel):
    hours: Optional[int] = PydanticField(default=None, ge=0, le=24)
    minutes: Optional[int] = PydanticField(default=None, ge=0, le=59)


class Attachment(CamelModel):
    filename: str
    url: str
    type: Optional[str] = None
    size: Optional[int] = PydanticField(default=None, ge=0)


class Recurrence(CamelModel):
    type: RecurrenceType = RecurrenceType.NONE
    interval: int = PydanticField(default=1, ge=1)
    end_date: Optional[datetime] = None


class Note(CamelModel):
    id: str
    content: str
    created_at: datetime
    updated_at: datetime


class NoteContent(CamelModel):
    content: str = PydanticField(min_length=1, max_length=1000)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return v.strip() if isinstance(v, str) else v


class TaskFields(CamelModel):
    """Fields shared by create and update payloads"""
    description: Optional[str] = PydanticField(default=None, max_length=500)
    category_id: Optional[int] = PydanticField(default=None, ge=1)
    due_date: Optional[datetime] = None
    tags: Optional[List[str]] = None
    attachments: Optional[List[Attachment]] = None
    recurring: Optional[Recurrence] = None
    time_estimate: Optional[Duration] = None
    actual_time: Optional[Duration] = None

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v):
        return _parse_due_date(v)

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v) if v is not None else v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        tags = [tag.strip() for tag in v if tag.strip()]
        for tag in tags:
            if len(tag) > 20:
                raise ValueError("Tags cannot exceed 20 characters")
        return tags


class TaskCreate(TaskFields):
    """Schema for creating a new task"""
    title: str = PydanticField(min_length=1, max_length=100)
    priority: Priority = Priority.MEDIUM

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v


class TaskUpdate(TaskFields):
    """Schema for updating a task; only fields present in the payload change"""
    title: Optional[str] = PydanticField(default=None, min_length=1, max_length=100)
    priority: Optional[Priority] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode="after")
    def check_required_not_null(self):
        for name in ("title", "priority"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class TaskFilters(CamelModel):
    """Query filters for listing tasks"""
    completed: Optional[bool] = None
    priority: Optional[Priority] = None
    category_id: Optional[int] = None
    due_date: Optional[date] = None
    search: Optional[str] = None


class TaskPublic(CamelModel):
    """Public representation of task"""
    id: int
    title: str
    description: Optional[str] = None
    completed: bool
    completed_at: Optional[datetime] = None
    priority: Priority
    status: TaskStatus
    due_date: Optional[datetime] = None
    category_id: Optional[int] = None
    category: Optional[CategoryRef] = None
    tags: List[str] = []
    attachments: List[Attachment] = []
    recurring: Optional[Recurrence] = None
    time_estimate: Optional[Duration] = None
    actual_time: Optional[Duration] = None
    time_estimate_minutes: int = 0
    actual_time_minutes: int = 0
    notes: List[Note] = []
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_task(cls, task: Task, category: Optional[Category] = None, now: Optional[datetime] = None) -> "TaskPublic":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            completed=task.completed,
            completed_at=task.completed_at,
            priority=task.priority,
            status=compute_status(task.completed, task.due_date, now),
            due_date=task.due_date,
            category_id=task.category_id,
            category=CategoryRef(id=category.id, name=category.name, color=category.color) if category else None,
            tags=task.tags or [],
            attachments=task.attachments or [],
            recurring=task.recurring,
            time_estimate=task.time_estimate,
            actual_time=task.actual_time,
            time_estimate_minutes=duration_minutes(task.time_estimate),
            actual_time_minutes=duration_minutes(task.actual_time),
            notes=task.notes or [],
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class TaskStats(CamelModel):
    total: int
    completed: int
    pending: int
    overdue: int
    high_priority: int
    completion_rate: int
