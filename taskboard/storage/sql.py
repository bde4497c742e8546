"""
SQL storage for the Taskboard API
Repositories backed by a SQLModel session
"""
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy import case, or_, update
from sqlmodel import Session, func, select

from ..models.user import User
from ..models.category import Category
from ..models.task import Task, TaskFilters, Priority
from .base import CategoryRepository, Store, TaskRepository, UserRepository


class SqlUserRepository(UserRepository):

    def __init__(self, session: Session):
        self.session = session

    def add(self, user: User) -> User:
        self.session.add(user)
        self.session.flush()
        return user

    def save(self, user: User) -> User:
        self.session.add(user)
        self.session.flush()
        return user

    def get(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        statement = select(User).where(func.lower(User.email) == email.lower())
        return self.session.exec(statement).first()

    def get_by_username(self, username: str) -> Optional[User]:
        statement = select(User).where(func.lower(User.username) == username.lower())
        return self.session.exec(statement).first()


class SqlCategoryRepository(CategoryRepository):

    def __init__(self, session: Session):
        self.session = session

    def add(self, category: Category) -> Category:
        self.session.add(category)
        self.session.flush()
        return category

    def save(self, category: Category) -> Category:
        self.session.add(category)
        self.session.flush()
        return category

    def delete(self, category: Category) -> None:
        self.session.delete(category)
        self.session.flush()

    def get(self, user_id: int, category_id: int) -> Optional[Category]:
        statement = select(Category).where(
            Category.id == category_id,
            Category.user_id == user_id
        )
        return self.session.exec(statement).first()

    def get_many(self, user_id: int, category_ids: Iterable[int]) -> Dict[int, Category]:
        ids = set(category_ids)
        if not ids:
            return {}
        statement = select(Category).where(
            Category.user_id == user_id,
            Category.id.in_(ids)
        )
        return {category.id: category for category in self.session.exec(statement).all()}

    def list(
        self,
        user_id: int,
        is_active: Optional[bool] = None,
        is_default: Optional[bool] = None,
    ) -> List[Category]:
        statement = select(Category).where(Category.user_id == user_id)
        if is_active is not None:
            statement = statement.where(Category.is_active == is_active)
        if is_default is not None:
            statement = statement.where(Category.is_default == is_default)
        statement = statement.order_by(Category.sort_order.asc(), Category.name.asc())
        return list(self.session.exec(statement).all())

    def find_by_name(self, user_id: int, name: str) -> Optional[Category]:
        statement = select(Category).where(
            Category.user_id == user_id,
            func.lower(Category.name) == name.lower()
        )
        return self.session.exec(statement).first()

    def max_sort_order(self, user_id: int) -> Optional[int]:
        statement = select(func.max(Category.sort_order)).where(Category.user_id == user_id)
        return self.session.exec(statement).one()

    def adjust_task_count(self, user_id: int, category_id: int, delta: int) -> None:
        new_count = Category.task_count + delta
        statement = (
            update(Category)
            .where(Category.id == category_id, Category.user_id == user_id)
            .values(task_count=case((new_count < 0, 0), else_=new_count))
            .execution_options(synchronize_session="fetch")
        )
        self.session.execute(statement)

    def set_task_count(self, user_id: int, category_id: int, count: int) -> None:
        statement = (
            update(Category)
            .where(Category.id == category_id, Category.user_id == user_id)
            .values(task_count=max(count, 0))
            .execution_options(synchronize_session="fetch")
        )
        self.session.execute(statement)

    def count(
        self,
        user_id: int,
        is_active: Optional[bool] = None,
        is_default: Optional[bool] = None,
        with_tasks: bool = False,
    ) -> int:
        statement = select(func.count(Category.id)).where(Category.user_id == user_id)
        if is_active is not None:
            statement = statement.where(Category.is_active == is_active)
        if is_default is not None:
            statement = statement.where(Category.is_default == is_default)
        if with_tasks:
            statement = statement.where(Category.task_count > 0)
        return self.session.exec(statement).one()

    def top_by_task_count(self, user_id: int, limit: int = 5) -> List[Category]:
        statement = (
            select(Category)
            .where(Category.user_id == user_id, Category.task_count > 0)
            .order_by(Category.task_count.desc(), Category.sort_order.asc())
            .limit(limit)
        )
        return list(self.session.exec(statement).all())


class SqlTaskRepository(TaskRepository):

    def __init__(self, session: Session):
        self.session = session

    def add(self, task: Task) -> Task:
        self.session.add(task)
        self.session.flush()
        return task

    def save(self, task: Task) -> Task:
        self.session.add(task)
        self.session.flush()
        return task

    def delete(self, task: Task) -> None:
        self.session.delete(task)
        self.session.flush()

    def get(self, user_id: int, task_id: int) -> Optional[Task]:
        statement = select(Task).where(
            Task.id == task_id,
            Task.user_id == user_id
        )
        return self.session.exec(statement).first()

    def list(self, user_id: int, filters: Optional[TaskFilters] = None) -> List[Task]:
        statement = select(Task).where(Task.user_id == user_id)

        if filters is not None:
            if filters.completed is not None:
                statement = statement.where(Task.completed == filters.completed)
            if filters.priority is not None:
                statement = statement.where(Task.priority == filters.priority)
            if filters.category_id is not None:
                statement = statement.where(Task.category_id == filters.category_id)
            if filters.due_date is not None:
                day_start = datetime.combine(filters.due_date, datetime.min.time())
                statement = statement.where(
                    Task.due_date >= day_start,
                    Task.due_date < day_start + timedelta(days=1)
                )
            if filters.search:
                term = filters.search.lower()
                statement = statement.where(or_(
                    func.lower(Task.title).contains(term, autoescape=True),
                    func.lower(Task.description).contains(term, autoescape=True),
                ))

        statement = statement.order_by(Task.created_at.desc(), Task.id.desc())
        return list(self.session.exec(statement).all())

    def count(
        self,
        user_id: int,
        completed: Optional[bool] = None,
        priority: Optional[Priority] = None,
        due_before: Optional[datetime] = None,
        category_id: Optional[int] = None,
    ) -> int:
        statement = select(func.count(Task.id)).where(Task.user_id == user_id)
        if completed is not None:
            statement = statement.where(Task.completed == completed)
        if priority is not None:
            statement = statement.where(Task.priority == priority)
        if due_before is not None:
            statement = statement.where(Task.due_date < due_before)
        if category_id is not None:
            statement = statement.where(Task.category_id == category_id)
        return self.session.exec(statement).one()

    def count_by_category(self, user_id: int) -> Dict[int, int]:
        statement = (
            select(Task.category_id, func.count(Task.id))
            .where(Task.user_id == user_id, Task.category_id.is_not(None))
            .group_by(Task.category_id)
        )
        return {category_id: count for category_id, count in self.session.exec(statement).all()}


class SqlStore(Store):
    """Store bound to one SQLModel session (one request)"""

    def __init__(self, session: Session):
        self.session = session
        self.users = SqlUserRepository(session)
        self.categories = SqlCategoryRepository(session)
        self.tasks = SqlTaskRepository(session)

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


__all__ = ["SqlStore"]
