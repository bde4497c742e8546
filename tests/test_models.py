from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError
from sqlalchemy import DateTime

from taskboard.models.category import Category, CategoryCreate, CategoryUpdate, display_name
from taskboard.models.task import (
    Priority,
    Task,
    TaskCreate,
    TaskStatus,
    TaskUpdate,
    compute_status,
    duration_minutes,
)
from taskboard.models.user import User, UserCreate

NOW = datetime(2026, 10, 19, 12, 0, 0)


@pytest.mark.parametrize("table,column", [
    (User, "last_login"),
    (User, "created_at"),
    (User, "updated_at"),
    (Category, "created_at"),
    (Category, "updated_at"),
    (Task, "completed_at"),
    (Task, "due_date"),
    (Task, "created_at"),
    (Task, "updated_at"),
])
def test_timestamp_columns_store_naive_utc(table, column):
    # Plain DateTime binds naive values; a timezone-enforcing type would reject them
    column_type = table.__table__.c[column].type
    assert type(column_type) is DateTime
    assert column_type.timezone is False


class TestComputeStatus:

    def test_completed_wins(self):
        assert compute_status(True, NOW - timedelta(days=3), NOW) == TaskStatus.COMPLETED

    def test_no_due_date_is_pending(self):
        assert compute_status(False, None, NOW) == TaskStatus.PENDING

    def test_past_due_is_overdue(self):
        assert compute_status(False, NOW - timedelta(minutes=1), NOW) == TaskStatus.OVERDUE

    def test_due_within_a_day_is_due_soon(self):
        assert compute_status(False, NOW + timedelta(hours=23), NOW) == TaskStatus.DUE_SOON

    def test_due_later_is_pending(self):
        assert compute_status(False, NOW + timedelta(hours=25), NOW) == TaskStatus.PENDING

    def test_exactly_24_hours_is_not_due_soon(self):
        assert compute_status(False, NOW + timedelta(hours=24), NOW) == TaskStatus.PENDING


def test_display_name_capitalizes_first_letter():
    assert display_name("groceries") == "Groceries"
    assert display_name("") == ""


def test_duration_minutes():
    assert duration_minutes(None) == 0
    assert duration_minutes({"hours": 1, "minutes": 30}) == 90
    assert duration_minutes({"minutes": 5}) == 5


class TestTaskCreate:

    def test_defaults_and_strip(self):
        task = TaskCreate(title="  Buy milk  ")
        assert task.title == "Buy milk"
        assert task.priority == Priority.MEDIUM
        assert task.category_id is None

    def test_accepts_camel_case_keys(self):
        task = TaskCreate.model_validate({"title": "x", "categoryId": 3, "dueDate": "2026-10-20"})
        assert task.category_id == 3
        assert task.due_date == datetime(2026, 10, 20)

    def test_aware_due_date_is_stored_as_naive_utc(self):
        task = TaskCreate(title="x", due_date="2026-10-20T10:00:00+02:00")
        assert task.due_date == datetime(2026, 10, 20, 8, 0)
        assert task.due_date.tzinfo is None

    @pytest.mark.parametrize("payload", [
        {"title": ""},
        {"title": "   "},
        {"title": "x" * 101},
        {"title": "x", "description": "d" * 501},
        {"title": "x", "priority": "urgent"},
        {"title": "x", "dueDate": "not-a-date"},
        {"title": "x", "categoryId": "abc"},
        {"title": "x", "categoryId": 0},
        {"title": "x", "tags": ["t" * 21]},
        {"title": "x", "timeEstimate": {"hours": 25}},
        {"title": "x", "recurring": {"type": "hourly"}},
    ])
    def test_rejects_invalid(self, payload):
        with pytest.raises(ValidationError):
            TaskCreate.model_validate(payload)


class TestTaskUpdate:

    def test_tracks_which_fields_were_sent(self):
        update = TaskUpdate.model_validate({"categoryId": None})
        assert update.model_fields_set == {"category_id"}

    def test_null_title_rejected(self):
        with pytest.raises(ValidationError):
            TaskUpdate.model_validate({"title": None})


class TestCategorySchemas:

    def test_valid(self):
        category = CategoryCreate(name=" Errands ", color="#abc")
        assert category.name == "Errands"

    @pytest.mark.parametrize("color", ["blue", "#12345", "123456", "#ggg"])
    def test_invalid_color(self, color):
        with pytest.raises(ValidationError):
            CategoryCreate(name="Errands", color=color)

    def test_name_too_long(self):
        with pytest.raises(ValidationError):
            CategoryCreate(name="n" * 31, color="#ffffff")

    def test_partial_update(self):
        update = CategoryUpdate(color="#000000")
        assert update.model_dump(exclude_unset=True) == {"color": "#000000"}


class TestUserCreate:

    def test_email_lower_cased(self):
        user = UserCreate(email="  Alice@Example.COM ", username="alice", password="secret123")
        assert user.email == "alice@example.com"

    @pytest.mark.parametrize("payload", [
        {"email": "not-an-email", "username": "alice", "password": "secret123"},
        {"email": "a@example.com", "username": "al", "password": "secret123"},
        {"email": "a@example.com", "username": "alice", "password": "short"},
    ])
    def test_rejects_invalid(self, payload):
        with pytest.raises(ValidationError):
            UserCreate.model_validate(payload)
