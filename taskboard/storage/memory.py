"""
In-memory storage for the Taskboard API
Dict-backed repositories for tests and demos; nothing is persisted
"""
import itertools
import threading
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from ..models.user import User
from ..models.category import Category
from ..models.task import Task, TaskFilters, Priority
from ..utils.errors import DuplicateIdentityException, DuplicateNameException
from .base import CategoryRepository, Store, TaskRepository, UserRepository


class MemoryUserRepository(UserRepository):
    """Users keyed by id; every access holds the store lock."""

    def __init__(self, store: "MemoryStore"):
        self._store = store
        self._rows: Dict[int, User] = {}
        self._ids = itertools.count(1)

    def _find(self, field: str, value: str) -> Optional[User]:
        value = value.lower()
        return next((u for u in self._rows.values() if getattr(u, field).lower() == value), None)

    def add(self, user: User) -> User:
        with self._store.lock:
            # Uniqueness is checked under the same lock as the insert
            if self._find("email", user.email) or self._find("username", user.username):
                raise DuplicateIdentityException()
            user.id = next(self._ids)
            self._rows[user.id] = user
        return user

    def save(self, user: User) -> User:
        with self._store.lock:
            self._rows[user.id] = user
        return user

    def get(self, user_id: int) -> Optional[User]:
        with self._store.lock:
            return self._rows.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        with self._store.lock:
            return self._find("email", email)

    def get_by_username(self, username: str) -> Optional[User]:
        with self._store.lock:
            return self._find("username", username)


class MemoryCategoryRepository(CategoryRepository):

    def __init__(self, store: "MemoryStore"):
        self._store = store
        self._rows: Dict[int, Category] = {}
        self._ids = itertools.count(1)

    def _owned(self, user_id: int) -> List[Category]:
        with self._store.lock:
            return [c for c in self._rows.values() if c.user_id == user_id]

    def _name_taken(self, category: Category) -> bool:
        name = category.name.lower()
        return any(
            c.name.lower() == name and c.id != category.id
            for c in self._owned(category.user_id)
        )

    def add(self, category: Category) -> Category:
        with self._store.lock:
            if self._name_taken(category):
                raise DuplicateNameException()
            category.id = next(self._ids)
            self._rows[category.id] = category
        return category

    def save(self, category: Category) -> Category:
        with self._store.lock:
            if self._name_taken(category):
                raise DuplicateNameException()
            self._rows[category.id] = category
        return category

    def delete(self, category: Category) -> None:
        with self._store.lock:
            self._rows.pop(category.id, None)

    def get(self, user_id: int, category_id: int) -> Optional[Category]:
        with self._store.lock:
            category = self._rows.get(category_id)
        if category is None or category.user_id != user_id:
            return None
        return category

    def get_many(self, user_id: int, category_ids: Iterable[int]) -> Dict[int, Category]:
        found = {}
        for category_id in set(category_ids):
            category = self.get(user_id, category_id)
            if category is not None:
                found[category_id] = category
        return found

    def list(
        self,
        user_id: int,
        is_active: Optional[bool] = None,
        is_default: Optional[bool] = None,
    ) -> List[Category]:
        rows = self._owned(user_id)
        if is_active is not None:
            rows = [c for c in rows if c.is_active == is_active]
        if is_default is not None:
            rows = [c for c in rows if c.is_default == is_default]
        return sorted(rows, key=lambda c: (c.sort_order, c.name))

    def find_by_name(self, user_id: int, name: str) -> Optional[Category]:
        name = name.lower()
        return next((c for c in self._owned(user_id) if c.name.lower() == name), None)

    def max_sort_order(self, user_id: int) -> Optional[int]:
        orders = [c.sort_order for c in self._owned(user_id)]
        return max(orders) if orders else None

    def adjust_task_count(self, user_id: int, category_id: int, delta: int) -> None:
        with self._store.lock:
            category = self.get(user_id, category_id)
            if category is not None:
                category.task_count = max(category.task_count + delta, 0)

    def set_task_count(self, user_id: int, category_id: int, count: int) -> None:
        with self._store.lock:
            category = self.get(user_id, category_id)
            if category is not None:
                category.task_count = max(count, 0)

    def count(
        self,
        user_id: int,
        is_active: Optional[bool] = None,
        is_default: Optional[bool] = None,
        with_tasks: bool = False,
    ) -> int:
        rows = self.list(user_id, is_active=is_active, is_default=is_default)
        if with_tasks:
            rows = [c for c in rows if c.task_count > 0]
        return len(rows)

    def top_by_task_count(self, user_id: int, limit: int = 5) -> List[Category]:
        rows = [c for c in self._owned(user_id) if c.task_count > 0]
        rows.sort(key=lambda c: (-c.task_count, c.sort_order))
        return rows[:limit]


class MemoryTaskRepository(TaskRepository):

    def __init__(self, store: "MemoryStore"):
        self._store = store
        self._rows: Dict[int, Task] = {}
        self._ids = itertools.count(1)

    def _owned(self, user_id: int) -> List[Task]:
        # Snapshot under the lock; callers filter the copy
        with self._store.lock:
            return [t for t in self._rows.values() if t.user_id == user_id]

    def add(self, task: Task) -> Task:
        with self._store.lock:
            task.id = next(self._ids)
            self._rows[task.id] = task
        return task

    def save(self, task: Task) -> Task:
        with self._store.lock:
            self._rows[task.id] = task
        return task

    def delete(self, task: Task) -> None:
        with self._store.lock:
            self._rows.pop(task.id, None)

    def get(self, user_id: int, task_id: int) -> Optional[Task]:
        with self._store.lock:
            task = self._rows.get(task_id)
        if task is None or task.user_id != user_id:
            return None
        return task

    @staticmethod
    def _matches(task: Task, filters: TaskFilters) -> bool:
        if filters.completed is not None and task.completed != filters.completed:
            return False
        if filters.priority is not None and task.priority != filters.priority:
            return False
        if filters.category_id is not None and task.category_id != filters.category_id:
            return False
        if filters.due_date is not None:
            if task.due_date is None:
                return False
            day_start = datetime.combine(filters.due_date, datetime.min.time())
            if not day_start <= task.due_date < day_start + timedelta(days=1):
                return False
        if filters.search:
            term = filters.search.lower()
            in_title = term in task.title.lower()
            in_description = bool(task.description) and term in task.description.lower()
            if not (in_title or in_description):
                return False
        return True

    def list(self, user_id: int, filters: Optional[TaskFilters] = None) -> List[Task]:
        rows = self._owned(user_id)
        if filters is not None:
            rows = [t for t in rows if self._matches(t, filters)]
        return sorted(rows, key=lambda t: (t.created_at, t.id), reverse=True)

    def count(
        self,
        user_id: int,
        completed: Optional[bool] = None,
        priority: Optional[Priority] = None,
        due_before: Optional[datetime] = None,
        category_id: Optional[int] = None,
    ) -> int:
        rows = self._owned(user_id)
        if completed is not None:
            rows = [t for t in rows if t.completed == completed]
        if priority is not None:
            rows = [t for t in rows if t.priority == priority]
        if due_before is not None:
            rows = [t for t in rows if t.due_date is not None and t.due_date < due_before]
        if category_id is not None:
            rows = [t for t in rows if t.category_id == category_id]
        return len(rows)

    def count_by_category(self, user_id: int) -> Dict[int, int]:
        counts: Dict[int, int] = {}
        for task in self._owned(user_id):
            if task.category_id is not None:
                counts[task.category_id] = counts.get(task.category_id, 0) + 1
        return counts


class MemoryStore(Store):
    """
    Process-local store shared across request threads.

    Every scan and mutation holds one re-entrant lock. Writes apply
    immediately, so commit and rollback are no-ops; the ledgers validate
    every precondition before mutating anything.
    """

    def __init__(self):
        self.lock = threading.RLock()
        self.users = MemoryUserRepository(self)
        self.categories = MemoryCategoryRepository(self)
        self.tasks = MemoryTaskRepository(self)

    def commit(self) -> None:
        pass

    def rollback(self) -> None:
        pass


__all__ = ["MemoryStore"]
