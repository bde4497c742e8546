"""
Task API routes for the Taskboard API
All endpoints act on the authenticated user's tasks only
"""
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...models.task import (
    NoteContent,
    Priority,
    Task,
    TaskCreate,
    TaskFilters,
    TaskPublic,
    TaskStats,
    TaskUpdate,
)
from ...services.task_service import TaskService
from ...storage import Store
from ...utils.timeutils import to_naive_utc, utcnow
from ..deps import get_current_user_id, get_store
from ..responses import ApiResponse


router = APIRouter()

MAX_SEARCH_LENGTH = 100


def _parse_due_day(value: Optional[str]) -> Optional[date]:
    # Unparseable dates are ignored rather than rejected
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return to_naive_utc(parsed).date()


def _parse_completed(value: Optional[str]) -> Optional[bool]:
    # Any value other than "true" filters for open tasks
    if value is None:
        return None
    return value.strip().lower() == "true"


def _parse_priority(value: Optional[str]) -> Optional[Priority]:
    if not value:
        return None
    try:
        return Priority(value.strip().lower())
    except ValueError:
        return None


def _parse_category_id(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _present(store: Store, user_id: int, tasks: List[Task]) -> List[TaskPublic]:
    categories = TaskService.resolve_categories(store, user_id, tasks)
    now = utcnow()
    return [
        TaskPublic.from_task(task, categories.get(task.category_id), now)
        for task in tasks
    ]


def _present_one(store: Store, user_id: int, task: Task) -> TaskPublic:
    return _present(store, user_id, [task])[0]


@router.get("/stats/overview", response_model=ApiResponse[TaskStats])
def get_task_stats(
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    """Totals, overdue and high-priority counts, and completion rate."""
    return ApiResponse(data=TaskService.get_stats(store, user_id))


@router.get("", response_model=ApiResponse[List[TaskPublic]])
def list_tasks(
    completed: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    category_id: Optional[str] = Query(None, alias="categoryId"),
    due_date: Optional[str] = Query(None, alias="dueDate"),
    search: Optional[str] = Query(None),
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    """
    Get the user's tasks, newest first.

    Unrecognised filter values are ignored rather than rejected. search
    matches title or description, case-insensitively; dueDate matches tasks
    due on the same UTC day.
    """
    filters = TaskFilters(
        completed=_parse_completed(completed),
        priority=_parse_priority(priority),
        category_id=_parse_category_id(category_id),
        due_date=_parse_due_day(due_date),
        search=search.strip()[:MAX_SEARCH_LENGTH] if search else None,
    )
    tasks = TaskService.list_tasks(store, user_id, filters)
    return ApiResponse(data=_present(store, user_id, tasks))


@router.post("", response_model=ApiResponse[TaskPublic], status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    task = TaskService.create_task(store, user_id, payload)
    return ApiResponse(data=_present_one(store, user_id, task), message="Task created successfully")


@router.get("/{task_id}", response_model=ApiResponse[TaskPublic])
def get_task(
    task_id: int,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    task = TaskService.get_task_by_id(store, user_id, task_id)
    return ApiResponse(data=_present_one(store, user_id, task))


@router.put("/{task_id}", response_model=ApiResponse[TaskPublic])
def update_task(
    task_id: int,
    payload: TaskUpdate,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    task = TaskService.update_task(store, user_id, task_id, payload)
    return ApiResponse(data=_present_one(store, user_id, task), message="Task updated successfully")


@router.patch("/{task_id}/complete", response_model=ApiResponse[TaskPublic])
def toggle_task_completion(
    task_id: int,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    task = TaskService.toggle_task_completion(store, user_id, task_id)
    state = "complete" if task.completed else "incomplete"
    return ApiResponse(data=_present_one(store, user_id, task), message=f"Task marked as {state}")


@router.delete("/{task_id}", response_model=ApiResponse)
def delete_task(
    task_id: int,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    TaskService.delete_task(store, user_id, task_id)
    return ApiResponse(message="Task deleted successfully")


# Notes

@router.post("/{task_id}/notes", response_model=ApiResponse[TaskPublic], status_code=status.HTTP_201_CREATED)
def add_note(
    task_id: int,
    payload: NoteContent,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    task = TaskService.add_note(store, user_id, task_id, payload.content)
    return ApiResponse(data=_present_one(store, user_id, task), message="Note added successfully")


@router.put("/{task_id}/notes/{note_id}", response_model=ApiResponse[TaskPublic])
def update_note(
    task_id: int,
    note_id: str,
    payload: NoteContent,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    task = TaskService.update_note(store, user_id, task_id, note_id, payload.content)
    return ApiResponse(data=_present_one(store, user_id, task), message="Note updated successfully")


@router.delete("/{task_id}/notes/{note_id}", response_model=ApiResponse[TaskPublic])
def delete_note(
    task_id: int,
    note_id: str,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    task = TaskService.delete_note(store, user_id, task_id, note_id)
    return ApiResponse(data=_present_one(store, user_id, task), message="Note deleted successfully")
