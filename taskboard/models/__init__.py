"""
Models module for the Taskboard API
Contains all database models and their API schemas
"""
from sqlmodel import SQLModel
from .user import User, UserCreate, UserLogin, UserPublic, PasswordChange, AuthPayload
from .category import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    CategoryReorder,
    CategoryPublic,
    CategoryRef,
    CategoryStats,
    DEFAULT_CATEGORIES,
)
from .task import (
    Task,
    TaskCreate,
    TaskUpdate,
    TaskFilters,
    TaskPublic,
    TaskStats,
    TaskStatus,
    Priority,
    NoteContent,
    compute_status,
)

__all__ = [
    "SQLModel",
    "User",
    "UserCreate",
    "UserLogin",
    "UserPublic",
    "PasswordChange",
    "AuthPayload",
    "Category",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryReorder",
    "CategoryPublic",
    "CategoryRef",
    "CategoryStats",
    "DEFAULT_CATEGORIES",
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskFilters",
    "TaskPublic",
    "TaskStats",
    "TaskStatus",
    "Priority",
    "NoteContent",
    "compute_status",
]
