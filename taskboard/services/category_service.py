"""
Category service module for the Taskboard API
Handles business logic for per-user categories and their task counters
"""
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from ..models.category import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    CategoryStats,
    TopCategory,
    DEFAULT_CATEGORIES,
    DEFAULT_ICON,
)
from ..storage import Store
from ..utils.errors import (
    AppException,
    CategoryInUseException,
    CategoryNotFoundException,
    DefaultCategoryProtectedException,
    DuplicateNameException,
)
from ..utils.logging import get_logger, log_error
from ..utils.timeutils import utcnow

logger = get_logger("services.category")

TOP_CATEGORIES_LIMIT = 5


class CategoryService:
    """Service class for category operations"""

    @staticmethod
    def list_categories(
        store: Store,
        user_id: int,
        is_active: Optional[bool] = None,
        is_default: Optional[bool] = None
    ) -> List[Category]:
        """
        Get a user's categories ordered by sort order, then name.

        Args:
            store: Storage unit of work
            user_id: Owner to scope by
            is_active: Only active (True) or inactive (False) categories
            is_default: Only default (True) or custom (False) categories

        Returns:
            List of Category objects
        """
        try:
            return store.categories.list(user_id, is_active=is_active, is_default=is_default)
        except Exception as e:
            log_error(e, "CategoryService.list_categories", user_id)
            raise

    @staticmethod
    def get_category(store: Store, user_id: int, category_id: int) -> Category:
        """
        Get a category owned by the user.

        Raises:
            CategoryNotFoundException: If missing or owned by someone else
        """
        category = store.categories.get(user_id, category_id)
        if category is None:
            raise CategoryNotFoundException(category_id)
        return category

    @staticmethod
    def create_category(store: Store, user_id: int, data: CategoryCreate) -> Category:
        """
        Create a new category at the end of the user's ordering.

        Args:
            store: Storage unit of work
            user_id: Owner of the new category
            data: Validated category fields

        Returns:
            Created Category object

        Raises:
            DuplicateNameException: If the owner already has a category with this name
        """
        try:
            if store.categories.find_by_name(user_id, data.name):
                raise DuplicateNameException()

            max_order = store.categories.max_sort_order(user_id)
            category = Category(
                user_id=user_id,
                name=data.name,
                color=data.color,
                description=data.description,
                icon=data.icon or DEFAULT_ICON,
                sort_order=max_order + 1 if max_order is not None else 0,
                task_count=0,
            )
            store.categories.add(category)
            store.commit()
            return category
        except IntegrityError:
            # Lost a race with a concurrent create of the same name
            store.rollback()
            raise DuplicateNameException()
        except AppException:
            store.rollback()
            raise
        except Exception as e:
            log_error(e, "CategoryService.create_category", user_id)
            store.rollback()
            raise

    @staticmethod
    def update_category(store: Store, user_id: int, category_id: int, data: CategoryUpdate) -> Category:
        """
        Update a category's name, color, description or icon.

        Raises:
            CategoryNotFoundException: If missing or owned by someone else
            DuplicateNameException: If renamed onto another category's name
        """
        try:
            category = CategoryService.get_category(store, user_id, category_id)
            changes = data.model_dump(exclude_unset=True)

            new_name = changes.get("name")
            if new_name is not None and new_name.lower() != category.name.lower():
                existing = store.categories.find_by_name(user_id, new_name)
                if existing is not None and existing.id != category.id:
                    raise DuplicateNameException()

            for field in ("name", "color", "icon"):
                if changes.get(field) is not None:
                    setattr(category, field, changes[field])
            if "description" in changes:
                category.description = changes["description"]
            category.updated_at = utcnow()

            store.categories.save(category)
            store.commit()
            return category
        except IntegrityError:
            store.rollback()
            raise DuplicateNameException()
        except AppException:
            store.rollback()
            raise
        except Exception as e:
            log_error(e, f"CategoryService.update_category (id={category_id})", user_id)
            store.rollback()
            raise

    @staticmethod
    def delete_category(store: Store, user_id: int, category_id: int) -> None:
        """
        Delete a custom category that no task references.

        Raises:
            CategoryNotFoundException: If missing or owned by someone else
            DefaultCategoryProtectedException: If the category is a seeded default
            CategoryInUseException: If tasks still reference the category
        """
        try:
            category = CategoryService.get_category(store, user_id, category_id)
            if category.is_default:
                raise DefaultCategoryProtectedException()

            task_count = store.tasks.count(user_id, category_id=category_id)
            if task_count > 0:
                raise CategoryInUseException(task_count)

            store.categories.delete(category)
            store.commit()
            logger.info("Deleted category id=%s for user=%s", category_id, user_id)
        except AppException:
            store.rollback()
            raise
        except Exception as e:
            log_error(e, f"CategoryService.delete_category (id={category_id})", user_id)
            store.rollback()
            raise

    @staticmethod
    def toggle_active(store: Store, user_id: int, category_id: int) -> Category:
        """Flip a category's active flag."""
        try:
            category = CategoryService.get_category(store, user_id, category_id)
            category.is_active = not category.is_active
            category.updated_at = utcnow()
            store.categories.save(category)
            store.commit()
            return category
        except AppException:
            store.rollback()
            raise
        except Exception as e:
            log_error(e, f"CategoryService.toggle_active (id={category_id})", user_id)
            store.rollback()
            raise

    @staticmethod
    def reorder(store: Store, user_id: int, category_id: int, sort_order: int) -> Category:
        """Set a category's display position."""
        try:
            category = CategoryService.get_category(store, user_id, category_id)
            category.sort_order = sort_order
            category.updated_at = utcnow()
            store.categories.save(category)
            store.commit()
            return category
        except AppException:
            store.rollback()
            raise
        except Exception as e:
            log_error(e, f"CategoryService.reorder (id={category_id})", user_id)
            store.rollback()
            raise

    @staticmethod
    def seed_defaults(store: Store, user_id: int, commit: bool = True) -> List[Category]:
        """
        Insert the default category set for a user.

        Defaults that already exist (by name) are skipped, so calling this
        twice is harmless.

        Args:
            store: Storage unit of work
            user_id: Owner of the defaults
            commit: Commit immediately; registration passes False to keep
                the user and the defaults in one transaction

        Returns:
            The categories that were created
        """
        created = []
        for name, color, icon, sort_order in DEFAULT_CATEGORIES:
            if store.categories.find_by_name(user_id, name):
                continue
            category = Category(
                user_id=user_id,
                name=name,
                color=color,
                icon=icon,
                sort_order=sort_order,
                description=f"{name} related tasks",
                is_default=True,
            )
            store.categories.add(category)
            created.append(category)
        if commit:
            store.commit()
        return created

    @staticmethod
    def adjust_task_count(store: Store, user_id: int, category_id: Optional[int], delta: int) -> None:
        """
        Shift a category's task counter, never below zero.

        Runs inside the caller's transaction; the caller commits.
        """
        if category_id is None or delta == 0:
            return
        store.categories.adjust_task_count(user_id, category_id, delta)

    @staticmethod
    def recount_task_counts(store: Store, user_id: int) -> Dict[int, int]:
        """
        Recompute every category's task counter from live task references.

        Returns:
            Mapping of category id to its corrected count
        """
        try:
            live = store.tasks.count_by_category(user_id)
            counts = {}
            for category in store.categories.list(user_id):
                count = live.get(category.id, 0)
                if category.task_count != count:
                    logger.warning(
                        "Category id=%s task count drifted (%s != %s), repairing",
                        category.id, category.task_count, count
                    )
                store.categories.set_task_count(user_id, category.id, count)
                counts[category.id] = count
            store.commit()
            return counts
        except Exception as e:
            log_error(e, "CategoryService.recount_task_counts", user_id)
            store.rollback()
            raise

    @staticmethod
    def get_stats(store: Store, user_id: int) -> CategoryStats:
        """Aggregate category counts plus the busiest categories."""
        try:
            top = store.categories.top_by_task_count(user_id, limit=TOP_CATEGORIES_LIMIT)
            return CategoryStats(
                total=store.categories.count(user_id),
                active=store.categories.count(user_id, is_active=True),
                default=store.categories.count(user_id, is_default=True),
                with_tasks=store.categories.count(user_id, with_tasks=True),
                top_categories=[
                    TopCategory(id=c.id, name=c.name, color=c.color, task_count=c.task_count)
                    for c in top
                ],
            )
        except Exception as e:
            log_error(e, "CategoryService.get_stats", user_id)
            raise


__all__ = ["CategoryService"]
