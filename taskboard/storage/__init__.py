"""
Storage module for the Taskboard API
Pluggable repositories: SQL for deployments, in-memory for tests
"""
from .base import Store, UserRepository, CategoryRepository, TaskRepository
from .sql import SqlStore
from .memory import MemoryStore

__all__ = [
    "Store",
    "UserRepository",
    "CategoryRepository",
    "TaskRepository",
    "SqlStore",
    "MemoryStore",
]
