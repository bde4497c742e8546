"""
Services module for the Taskboard API
Contains business logic layer for the application
"""
from .identity_service import IdentityService
from .category_service import CategoryService
from .task_service import TaskService

__all__ = [
    "IdentityService",
    "CategoryService",
    "TaskService",
]
