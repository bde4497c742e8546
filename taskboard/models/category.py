"""
Category model for the Taskboard API
Per-user task categories with a denormalized task counter
"""
import re
from datetime import datetime
from typing import List, Optional

from pydantic import Field as PydanticField, field_validator
from sqlalchemy import DateTime, Index, func
from sqlmodel import Field, SQLModel

from .base import CamelModel
from ..utils.timeutils import utcnow

HEX_COLOR_PATTERN = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
DEFAULT_COLOR = "#3b82f6"
DEFAULT_ICON = "tag"

# name, color, icon, sort order
DEFAULT_CATEGORIES = [
    ("Work", "#3b82f6", "briefcase", 1),
    ("Personal", "#10b981", "heart", 2),
    ("Shopping", "#f59e0b", "cart", 3),
    ("Health", "#ef4444", "medical-bag", 4),
    ("Learning", "#8b5cf6", "book-open", 5),
    ("Travel", "#06b6d4", "airplane", 6),
]


class Category(SQLModel, table=True):
    """Category model for database table"""
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(max_length=30, nullable=False)
    color: str = Field(default=DEFAULT_COLOR, max_length=7, nullable=False)
    icon: str = Field(default=DEFAULT_ICON, max_length=50)
    description: Optional[str] = Field(default=None, max_length=100)
    is_default: bool = Field(default=False)
    is_active: bool = Field(default=True)
    task_count: int = Field(default=0, nullable=False)
    sort_order: int = Field(default=0)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime, sa_column_kwargs={"onupdate": utcnow})


Index(
    "uq_category_user_name_lower",
    Category.__table__.c.user_id,
    func.lower(Category.__table__.c.name),
    unique=True,
)


def display_name(name: str) -> str:
    """Category name with its first letter upper-cased."""
    return name[:1].upper() + name[1:]


def _validate_color(v: str) -> str:
    if not HEX_COLOR_PATTERN.match(v):
        raise ValueError("Color must be a valid hex color code")
    return v


def _strip(v):
    return v.strip() if isinstance(v, str) else v


class CategoryCreate(CamelModel):
    """Schema for creating a category"""
    name: str = PydanticField(min_length=1, max_length=30)
    color: str
    description: Optional[str] = PydanticField(default=None, max_length=100)
    icon: Optional[str] = PydanticField(default=None, max_length=50)

    @field_validator("name", "description", "icon", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator("color")
    @classmethod
    def check_color(cls, v: str) -> str:
        return _validate_color(v)


class CategoryUpdate(CamelModel):
    """Schema for updating a category; omitted fields are left unchanged"""
    name: Optional[str] = PydanticField(default=None, min_length=1, max_length=30)
    color: Optional[str] = None
    description: Optional[str] = PydanticField(default=None, max_length=100)
    icon: Optional[str] = PydanticField(default=None, max_length=50)

    @field_validator("name", "description", "icon", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator("color")
    @classmethod
    def check_color(cls, v: Optional[str]) -> Optional[str]:
        return _validate_color(v) if v is not None else v


class CategoryReorder(CamelModel):
    sort_order: int = PydanticField(ge=0)


class CategoryPublic(CamelModel):
    """Public representation of a category"""
    id: int
    name: str
    display_name: str
    color: str
    icon: str
    description: Optional[str] = None
    is_default: bool
    is_active: bool
    task_count: int
    sort_order: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_category(cls, category: Category) -> "CategoryPublic":
        return cls(
            id=category.id,
            name=category.name,
            display_name=display_name(category.name),
            color=category.color,
            icon=category.icon,
            description=category.description,
            is_default=category.is_default,
            is_active=category.is_active,
            task_count=category.task_count,
            sort_order=category.sort_order,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )


class CategoryRef(CamelModel):
    """Category summary embedded in task payloads"""
    id: int
    name: str
    color: str


class TopCategory(CategoryRef):
    task_count: int


class CategoryStats(CamelModel):
    total: int
    active: int
    default: int
    with_tasks: int
    top_categories: List[TopCategory]
