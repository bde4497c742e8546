"""
Repository contract for the Taskboard API
Every category and task lookup is scoped by the owning user's id
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ..models.user import User
from ..models.category import Category
from ..models.task import Task, TaskFilters, Priority


class UserRepository(ABC):

    @abstractmethod
    def add(self, user: User) -> User:
        """Persist a new user and assign its id."""

    @abstractmethod
    def save(self, user: User) -> User:
        ...

    @abstractmethod
    def get(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup by email."""

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[User]:
        """Case-insensitive lookup by username."""


class CategoryRepository(ABC):

    @abstractmethod
    def add(self, category: Category) -> Category:
        ...

    @abstractmethod
    def save(self, category: Category) -> Category:
        ...

    @abstractmethod
    def delete(self, category: Category) -> None:
        ...

    @abstractmethod
    def get(self, user_id: int, category_id: int) -> Optional[Category]:
        ...

    @abstractmethod
    def get_many(self, user_id: int, category_ids: Iterable[int]) -> Dict[int, Category]:
        ...

    @abstractmethod
    def list(
        self,
        user_id: int,
        is_active: Optional[bool] = None,
        is_default: Optional[bool] = None,
    ) -> List[Category]:
        """Categories ordered by (sort_order, name)."""

    @abstractmethod
    def find_by_name(self, user_id: int, name: str) -> Optional[Category]:
        """Case-insensitive lookup by name within one owner."""

    @abstractmethod
    def max_sort_order(self, user_id: int) -> Optional[int]:
        ...

    @abstractmethod
    def adjust_task_count(self, user_id: int, category_id: int, delta: int) -> None:
        """
        Atomically add delta to a category's task count, clamping at zero.

        Must be a single storage-level mutation, never read-modify-write.
        """

    @abstractmethod
    def set_task_count(self, user_id: int, category_id: int, count: int) -> None:
        ...

    @abstractmethod
    def count(
        self,
        user_id: int,
        is_active: Optional[bool] = None,
        is_default: Optional[bool] = None,
        with_tasks: bool = False,
    ) -> int:
        ...

    @abstractmethod
    def top_by_task_count(self, user_id: int, limit: int = 5) -> List[Category]:
        """Categories with at least one task, busiest first."""


class TaskRepository(ABC):

    @abstractmethod
    def add(self, task: Task) -> Task:
        ...

    @abstractmethod
    def save(self, task: Task) -> Task:
        ...

    @abstractmethod
    def delete(self, task: Task) -> None:
        ...

    @abstractmethod
    def get(self, user_id: int, task_id: int) -> Optional[Task]:
        ...

    @abstractmethod
    def list(self, user_id: int, filters: Optional[TaskFilters] = None) -> List[Task]:
        """Tasks matching filters, newest first."""

    @abstractmethod
    def count(
        self,
        user_id: int,
        completed: Optional[bool] = None,
        priority: Optional[Priority] = None,
        due_before: Optional[datetime] = None,
        category_id: Optional[int] = None,
    ) -> int:
        ...

    @abstractmethod
    def count_by_category(self, user_id: int) -> Dict[int, int]:
        """Live number of tasks referencing each of the owner's categories."""


class Store(ABC):
    """Unit of work bundling the three repositories"""
    users: UserRepository
    categories: CategoryRepository
    tasks: TaskRepository

    @abstractmethod
    def commit(self) -> None:
        ...

    @abstractmethod
    def rollback(self) -> None:
        ...


__all__ = ["UserRepository", "CategoryRepository", "TaskRepository", "Store"]
