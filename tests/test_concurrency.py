import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager

import pytest
from sqlalchemy import event
from sqlmodel import Session, SQLModel, create_engine

from taskboard.models.category import CategoryCreate
from taskboard.models.task import TaskCreate, TaskUpdate
from taskboard.models.user import UserCreate
from taskboard.services.category_service import CategoryService
from taskboard.services.identity_service import IdentityService
from taskboard.services.task_service import TaskService
from taskboard.storage import MemoryStore, SqlStore
from taskboard.utils.errors import DuplicateIdentityException, DuplicateNameException

WORKERS = 4


def _file_engine(path):
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    # Take the write lock when a transaction starts so concurrent
    # sessions queue on the busy timeout instead of failing to upgrade
    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture(params=["sql", "memory"])
def open_store(request, tmp_path):
    """Context manager factory handing each thread its own unit of work."""
    if request.param == "memory":
        shared = MemoryStore()

        @contextmanager
        def _open():
            yield shared
        yield _open
        return

    engine = _file_engine(tmp_path / "taskboard.db")

    @contextmanager
    def _open():
        with Session(engine) as session:
            yield SqlStore(session)
    yield _open
    engine.dispose()


def _register(open_store, name="alice"):
    with open_store() as store:
        user = IdentityService.register(
            store, UserCreate(email=f"{name}@example.com", username=name, password="secret123")
        )
        return user.id


def _run(worker, count=WORKERS):
    with ThreadPoolExecutor(max_workers=count) as pool:
        futures = [pool.submit(worker, index) for index in range(count)]
        return [future.result() for future in futures]


def test_concurrent_task_writes_keep_counts_exact(open_store):
    user_id = _register(open_store)
    with open_store() as store:
        work_id = store.categories.find_by_name(user_id, "Work").id
        home_id = store.categories.find_by_name(user_id, "Personal").id

    def worker(index):
        created = []
        for n in range(10):
            with open_store() as store:
                task = TaskService.create_task(
                    store, user_id, TaskCreate(title=f"{index}-{n}", category_id=work_id)
                )
                created.append(task.id)
        for n, task_id in enumerate(created):
            with open_store() as store:
                if n % 3 == 0:
                    TaskService.delete_task(store, user_id, task_id)
                elif n % 2:
                    TaskService.update_task(store, user_id, task_id, TaskUpdate(category_id=home_id))

    _run(worker)

    with open_store() as store:
        live = store.tasks.count_by_category(user_id)
        work = CategoryService.get_category(store, user_id, work_id)
        home = CategoryService.get_category(store, user_id, home_id)
        # Per worker: 4 deleted (n = 0, 3, 6, 9), 3 moved (n = 1, 5, 7), 3 kept
        assert live == {work_id: 3 * WORKERS, home_id: 3 * WORKERS}
        assert work.task_count == live[work_id]
        assert home.task_count == live[home_id]

        before = {c.id: c.task_count for c in CategoryService.list_categories(store, user_id)}
        assert CategoryService.recount_task_counts(store, user_id) == before


def test_concurrent_registration_of_one_email(open_store):
    barrier = threading.Barrier(WORKERS)

    def worker(index):
        barrier.wait()
        try:
            _register(open_store, "alice")
            return True
        except DuplicateIdentityException:
            return False

    assert sorted(_run(worker)) == [False] * (WORKERS - 1) + [True]


def test_concurrent_category_creates_with_one_name(open_store):
    user_id = _register(open_store)
    barrier = threading.Barrier(WORKERS)

    def worker(index):
        barrier.wait()
        with open_store() as store:
            try:
                CategoryService.create_category(store, user_id, CategoryCreate(name="Errands", color="#123456"))
                return True
            except DuplicateNameException:
                return False

    assert sorted(_run(worker)) == [False] * (WORKERS - 1) + [True]


def test_memory_reads_during_writes():
    store = MemoryStore()
    user_id = IdentityService.register(
        store, UserCreate(email="alice@example.com", username="alice", password="secret123")
    ).id
    work_id = store.categories.find_by_name(user_id, "Work").id
    writing = threading.Event()
    writing.set()

    def writer():
        try:
            for n in range(500):
                TaskService.create_task(store, user_id, TaskCreate(title=str(n), category_id=work_id))
        finally:
            writing.clear()

    def reader(index):
        reads = 0
        while writing.is_set():
            TaskService.list_tasks(store, user_id)
            CategoryService.get_stats(store, user_id)
            reads += 1
        return reads

    with ThreadPoolExecutor(max_workers=WORKERS + 1) as pool:
        write_future = pool.submit(writer)
        read_futures = [pool.submit(reader, index) for index in range(WORKERS)]
        write_future.result()
        for future in read_futures:
            future.result()

    assert len(TaskService.list_tasks(store, user_id)) == 500
    assert CategoryService.get_category(store, user_id, work_id).task_count == 500
