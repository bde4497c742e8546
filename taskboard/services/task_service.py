"""
Task service module for the Taskboard API
Handles business logic for task operations and keeps category counters in step
"""
import math
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from ..models.category import Category
from ..models.task import (
    Task,
    TaskCreate,
    TaskUpdate,
    TaskFilters,
    TaskStats,
    Priority,
)
from ..storage import Store
from ..utils.errors import (
    AppException,
    InvalidCategoryException,
    NoteNotFoundException,
    TaskNotFoundException,
)
from ..utils.logging import get_logger, log_error
from ..utils.timeutils import utcnow
from .category_service import CategoryService

logger = get_logger("services.task")

# Extension fields stored as JSON
_EXTENSION_FIELDS = ("tags", "attachments", "recurring", "time_estimate", "actual_time")


def _dump_extension(value):
    if value is None:
        return None
    if isinstance(value, list):
        return [_dump_extension(item) for item in value]
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    return value


def _completion_rate(completed: int, total: int) -> int:
    if total == 0:
        return 0
    # Round half up
    return int(math.floor(completed / total * 100 + 0.5))


class TaskService:
    """Service class for task operations"""

    @staticmethod
    def _require_category(store: Store, user_id: int, category_id: int) -> Category:
        category = store.categories.get(user_id, category_id)
        if category is None:
            raise InvalidCategoryException()
        return category

    @staticmethod
    def list_tasks(store: Store, user_id: int, filters: Optional[TaskFilters] = None) -> List[Task]:
        """
        Get a user's tasks, newest first.

        Args:
            store: Storage unit of work
            user_id: Owner to scope by
            filters: Optional completion/priority/category/due-day/search filters

        Returns:
            List of Task objects
        """
        try:
            return store.tasks.list(user_id, filters)
        except Exception as e:
            log_error(e, "TaskService.list_tasks", user_id)
            raise

    @staticmethod
    def resolve_categories(store: Store, user_id: int, tasks: List[Task]) -> Dict[int, Category]:
        """Load the categories referenced by a batch of tasks, keyed by id."""
        ids = {task.category_id for task in tasks if task.category_id is not None}
        return store.categories.get_many(user_id, ids)

    @staticmethod
    def get_task_by_id(store: Store, user_id: int, task_id: int) -> Task:
        """
        Get a task owned by the user.

        Raises:
            TaskNotFoundException: If missing or owned by someone else
        """
        task = store.tasks.get(user_id, task_id)
        if task is None:
            raise TaskNotFoundException(task_id)
        return task

    @staticmethod
    def create_task(store: Store, user_id: int, task_data: TaskCreate) -> Task:
        """
        Create a new task and count it against its category.

        Args:
            store: Storage unit of work
            user_id: Owner of the new task
            task_data: Validated task fields

        Returns:
            Created Task object

        Raises:
            InvalidCategoryException: If category_id is not one of the owner's categories
        """
        try:
            if task_data.category_id is not None:
                TaskService._require_category(store, user_id, task_data.category_id)

            task = Task(
                user_id=user_id,
                title=task_data.title,
                description=task_data.description,
                priority=task_data.priority,
                category_id=task_data.category_id,
                due_date=task_data.due_date,
                tags=task_data.tags or [],
                attachments=_dump_extension(task_data.attachments) or [],
                recurring=_dump_extension(task_data.recurring),
                time_estimate=_dump_extension(task_data.time_estimate),
                actual_time=_dump_extension(task_data.actual_time),
                notes=[],
            )
            store.tasks.add(task)
            CategoryService.adjust_task_count(store, user_id, task.category_id, 1)
            store.commit()
            return task
        except AppException:
            store.rollback()
            raise
        except Exception as e:
            log_error(e, "TaskService.create_task", user_id)
            store.rollback()
            raise

    @staticmethod
    def update_task(store: Store, user_id: int, task_id: int, task_data: TaskUpdate) -> Task:
        """
        Update the fields present in task_data.

        Moving a task between categories decrements the old counter and
        increments the new one in the same transaction. An explicit null
        category_id detaches the task.

        Raises:
            TaskNotFoundException: If missing or owned by someone else
            InvalidCategoryException: If the new category_id is not the owner's
        """
        try:
            task = TaskService.get_task_by_id(store, user_id, task_id)
            fields = task_data.model_fields_set

            old_category_id = task.category_id
            new_category_id = old_category_id
            if "category_id" in fields:
                new_category_id = task_data.category_id
                if new_category_id is not None and new_category_id != old_category_id:
                    TaskService._require_category(store, user_id, new_category_id)

            for name in ("title", "priority", "description", "due_date"):
                if name in fields:
                    setattr(task, name, getattr(task_data, name))
            for name in _EXTENSION_FIELDS:
                if name in fields:
                    value = _dump_extension(getattr(task_data, name))
                    if name in ("tags", "attachments") and value is None:
                        value = []
                    setattr(task, name, value)

            task.category_id = new_category_id
            task.updated_at = utcnow()
            store.tasks.save(task)

            if new_category_id != old_category_id:
                CategoryService.adjust_task_count(store, user_id, old_category_id, -1)
                CategoryService.adjust_task_count(store, user_id, new_category_id, 1)

            store.commit()
            return task
        except AppException:
            store.rollback()
            raise
        except Exception as e:
            log_error(e, f"TaskService.update_task (id={task_id})", user_id)
            store.rollback()
            raise

    @staticmethod
    def toggle_task_completion(store: Store, user_id: int, task_id: int) -> Task:
        """Flip completion; completed_at is stamped on completion and cleared on reopen."""
        try:
            task = TaskService.get_task_by_id(store, user_id, task_id)
            task.completed = not task.completed
            task.completed_at = utcnow() if task.completed else None
            task.updated_at = utcnow()
            store.tasks.save(task)
            store.commit()
            return task
        except AppException:
            store.rollback()
            raise
        except Exception as e:
            log_error(e, f"TaskService.toggle_task_completion (id={task_id})", user_id)
            store.rollback()
            raise

    @staticmethod
    def delete_task(store: Store, user_id: int, task_id: int) -> None:
        """
        Delete a task and release its category count.

        Raises:
            TaskNotFoundException: If missing or owned by someone else
        """
        try:
            task = TaskService.get_task_by_id(store, user_id, task_id)
            category_id = task.category_id
            store.tasks.delete(task)
            CategoryService.adjust_task_count(store, user_id, category_id, -1)
            store.commit()
            logger.info("Deleted task id=%s for user=%s", task_id, user_id)
        except AppException:
            store.rollback()
            raise
        except Exception as e:
            log_error(e, f"TaskService.delete_task (id={task_id})", user_id)
            store.rollback()
            raise

    @staticmethod
    def get_stats(store: Store, user_id: int, now: Optional[datetime] = None) -> TaskStats:
        """
        Aggregate counts for the user's tasks.

        overdue and high_priority only count open tasks.
        """
        now = now or utcnow()
        try:
            total = store.tasks.count(user_id)
            completed = store.tasks.count(user_id, completed=True)
            return TaskStats(
                total=total,
                completed=completed,
                pending=store.tasks.count(user_id, completed=False),
                overdue=store.tasks.count(user_id, completed=False, due_before=now),
                high_priority=store.tasks.count(user_id, completed=False, priority=Priority.HIGH),
                completion_rate=_completion_rate(completed, total),
            )
        except Exception as e:
            log_error(e, "TaskService.get_stats", user_id)
            raise

    # Note operations

    @staticmethod
    def add_note(store: Store, user_id: int, task_id: int, content: str) -> Task:
        """Append a note to a task."""
        try:
            task = TaskService.get_task_by_id(store, user_id, task_id)
            stamp = utcnow().isoformat()
            note = {
                "id": uuid.uuid4().hex,
                "content": content,
                "created_at": stamp,
                "updated_at": stamp,
            }
            # Reassign so the JSON column registers the change
            task.notes = [*(task.notes or []), note]
            task.updated_at = utcnow()
            store.tasks.save(task)
            store.commit()
            return task
        except AppException:
            store.rollback()
            raise
        except Exception as e:
            log_error(e, f"TaskService.add_note (task_id={task_id})", user_id)
            store.rollback()
            raise

    @staticmethod
    def update_note(store: Store, user_id: int, task_id: int, note_id: str, content: str) -> Task:
        """
        Replace a note's content.

        Raises:
            TaskNotFoundException: If the task is missing or not the user's
            NoteNotFoundException: If the task has no note with this id
        """
        try:
            task = TaskService.get_task_by_id(store, user_id, task_id)
            notes = [dict(note) for note in task.notes or []]
            for note in notes:
                if note.get("id") == note_id:
                    note["content"] = content
                    note["updated_at"] = utcnow().isoformat()
                    break
            else:
                raise NoteNotFoundException(note_id)

            task.notes = notes
            task.updated_at = utcnow()
            store.tasks.save(task)
            store.commit()
            return task
        except AppException:
            store.rollback()
            raise
        except Exception as e:
            log_error(e, f"TaskService.update_note (task_id={task_id})", user_id)
            store.rollback()
            raise

    @staticmethod
    def delete_note(store: Store, user_id: int, task_id: int, note_id: str) -> Task:
        """Remove a note from a task."""
        try:
            task = TaskService.get_task_by_id(store, user_id, task_id)
            notes = [note for note in task.notes or [] if note.get("id") != note_id]
            if len(notes) == len(task.notes or []):
                raise NoteNotFoundException(note_id)

            task.notes = notes
            task.updated_at = utcnow()
            store.tasks.save(task)
            store.commit()
            return task
        except AppException:
            store.rollback()
            raise
        except Exception as e:
            log_error(e, f"TaskService.delete_note (task_id={task_id})", user_id)
            store.rollback()
            raise


__all__ = ["TaskService"]
