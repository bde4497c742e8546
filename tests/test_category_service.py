import pytest

from taskboard.models.category import CategoryCreate, CategoryUpdate
from taskboard.models.task import TaskCreate
from taskboard.models.user import User
from taskboard.services.category_service import CategoryService
from taskboard.services.task_service import TaskService
from taskboard.utils.errors import (
    CategoryInUseException,
    CategoryNotFoundException,
    DefaultCategoryProtectedException,
    DuplicateNameException,
)


def _create(store, user_id, name="Errands", color="#123456"):
    return CategoryService.create_category(store, user_id, CategoryCreate(name=name, color=color))


def test_create_appends_to_sort_order(store, make_user):
    user_id = make_user()
    category = _create(store, user_id)

    assert category.sort_order == 7
    assert category.task_count == 0
    assert category.icon == "tag"
    assert not category.is_default


def test_first_category_without_defaults_gets_sort_order_zero(store):
    user = store.users.add(User(email="bare@example.com", username="bare", hashed_password="x"))
    store.commit()

    assert _create(store, user.id).sort_order == 0


def test_duplicate_name_is_case_insensitive(store, make_user):
    user_id = make_user()
    _create(store, user_id, name="Errands")

    with pytest.raises(DuplicateNameException):
        _create(store, user_id, name="ERRANDS")
    with pytest.raises(DuplicateNameException):
        _create(store, user_id, name="work")


def test_same_name_for_different_users(store, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    a = _create(store, alice, name="X")
    b = _create(store, bob, name="X")

    assert a.id != b.id
    with pytest.raises(CategoryNotFoundException):
        CategoryService.get_category(store, alice, b.id)


def test_list_orders_by_sort_order_then_name(store, make_user):
    user_id = make_user()
    extra = _create(store, user_id, name="Alpha")
    CategoryService.reorder(store, user_id, extra.id, 1)

    names = [c.name for c in CategoryService.list_categories(store, user_id)]
    assert names[:2] == ["Alpha", "Work"]


def test_list_filters(store, make_user):
    user_id = make_user()
    custom = _create(store, user_id)
    CategoryService.toggle_active(store, user_id, custom.id)

    assert [c.name for c in CategoryService.list_categories(store, user_id, is_default=False)] == ["Errands"]
    assert len(CategoryService.list_categories(store, user_id, is_active=True)) == 6
    assert [c.id for c in CategoryService.list_categories(store, user_id, is_active=False)] == [custom.id]


def test_update_rechecks_name_excluding_self(store, make_user):
    user_id = make_user()
    category = _create(store, user_id, name="Errands")

    renamed = CategoryService.update_category(store, user_id, category.id, CategoryUpdate(name="errands"))
    assert renamed.name == "errands"

    with pytest.raises(DuplicateNameException):
        CategoryService.update_category(store, user_id, category.id, CategoryUpdate(name="Work"))


def test_update_leaves_unsent_fields(store, make_user):
    user_id = make_user()
    category = CategoryService.create_category(
        store, user_id, CategoryCreate(name="Errands", color="#123456", description="stuff")
    )

    updated = CategoryService.update_category(store, user_id, category.id, CategoryUpdate(color="#654321"))

    assert updated.color == "#654321"
    assert updated.name == "Errands"
    assert updated.description == "stuff"


def test_update_other_users_category_not_found(store, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    category = _create(store, bob)

    with pytest.raises(CategoryNotFoundException):
        CategoryService.update_category(store, alice, category.id, CategoryUpdate(name="Mine"))


def test_delete_empty_custom_category(store, make_user):
    user_id = make_user()
    category = _create(store, user_id)

    CategoryService.delete_category(store, user_id, category.id)

    with pytest.raises(CategoryNotFoundException):
        CategoryService.get_category(store, user_id, category.id)


def test_delete_default_category_is_protected(store, make_user):
    user_id = make_user()
    work = store.categories.find_by_name(user_id, "Work")

    with pytest.raises(DefaultCategoryProtectedException):
        CategoryService.delete_category(store, user_id, work.id)


def test_delete_category_in_use_is_blocked(store, make_user):
    user_id = make_user()
    category = _create(store, user_id)
    task = TaskService.create_task(store, user_id, TaskCreate(title="t", category_id=category.id))

    with pytest.raises(CategoryInUseException) as excinfo:
        CategoryService.delete_category(store, user_id, category.id)
    assert excinfo.value.task_count == 1

    TaskService.delete_task(store, user_id, task.id)
    CategoryService.delete_category(store, user_id, category.id)


def test_delete_missing_category(store, make_user):
    user_id = make_user()
    with pytest.raises(CategoryNotFoundException):
        CategoryService.delete_category(store, user_id, 9999)


def test_toggle_active_twice(store, make_user):
    user_id = make_user()
    category = _create(store, user_id)

    assert CategoryService.toggle_active(store, user_id, category.id).is_active is False
    assert CategoryService.toggle_active(store, user_id, category.id).is_active is True


def test_seed_defaults_is_idempotent(store, make_user):
    user_id = make_user()

    assert CategoryService.seed_defaults(store, user_id) == []
    assert len(CategoryService.list_categories(store, user_id)) == 6


def test_adjust_task_count_clamps_at_zero(store, make_user):
    user_id = make_user()
    category = _create(store, user_id)

    CategoryService.adjust_task_count(store, user_id, category.id, 2)
    CategoryService.adjust_task_count(store, user_id, category.id, -5)
    store.commit()

    assert CategoryService.get_category(store, user_id, category.id).task_count == 0


def test_adjust_task_count_is_owner_scoped(store, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    category = _create(store, bob)

    CategoryService.adjust_task_count(store, alice, category.id, 3)
    store.commit()

    assert CategoryService.get_category(store, bob, category.id).task_count == 0


def test_stats(store, make_user):
    user_id = make_user()
    errands = _create(store, user_id)
    work = store.categories.find_by_name(user_id, "Work")
    for _ in range(2):
        TaskService.create_task(store, user_id, TaskCreate(title="e", category_id=errands.id))
    TaskService.create_task(store, user_id, TaskCreate(title="w", category_id=work.id))
    CategoryService.toggle_active(store, user_id, errands.id)

    stats = CategoryService.get_stats(store, user_id)

    assert stats.total == 7
    assert stats.active == 6
    assert stats.default == 6
    assert stats.with_tasks == 2
    assert [(c.name, c.task_count) for c in stats.top_categories] == [("Errands", 2), ("Work", 1)]


def test_recount_repairs_drift(store, make_user):
    user_id = make_user()
    category = _create(store, user_id)
    TaskService.create_task(store, user_id, TaskCreate(title="t", category_id=category.id))
    store.categories.set_task_count(user_id, category.id, 10)
    store.commit()

    counts = CategoryService.recount_task_counts(store, user_id)

    assert counts[category.id] == 1
    assert CategoryService.get_category(store, user_id, category.id).task_count == 1
