"""
Pytest configuration for ormbench tests

Unit tests run the harness against an in-memory fake backend and the ORM
backend against in-memory SQLite. PostgreSQL tests only run when
ORMBENCH_TEST_DATABASE_URL points at a disposable database.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List

import pytest
import structlog
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from ormbench.adapters.base import Backend
from ormbench.config import BackendKind
from ormbench.errors import SchemaMissingError
from ormbench.records import Post, User
from ormbench.schema import metadata

TEST_DATABASE_URL_ENV = "ORMBENCH_TEST_DATABASE_URL"


@dataclass
class FakeStorage:
    """Tables shared by every FakeBackend built from one factory"""
    users: List[Dict] = field(default_factory=list)
    posts: List[Dict] = field(default_factory=list)
    next_user_id: int = 1
    next_post_id: int = 1
    schema_present: bool = True


class FakeBackend(Backend):
    """
    In-memory backend with the same query semantics as the real ones.

    Args:
        insert_shortfall: Rows to under-report from user inserts
        post_insert_shortfall: Rows to under-report from post inserts
        extra_rows: Bogus rows appended to every query result
    """

    kind = BackendKind.RAW

    def __init__(self, database_url: str, storage: FakeStorage, insert_shortfall: int = 0,
                 post_insert_shortfall: int = 0, extra_rows: int = 0):
        super().__init__(database_url)
        self.storage = storage
        self.insert_shortfall = insert_shortfall
        self.post_insert_shortfall = post_insert_shortfall
        self.extra_rows = extra_rows
        self.connected = False
        self.closed = False
        self.query_calls = 0
        self.insert_calls = 0

    def connect(self):
        self.connected = True

    def close(self):
        self.connected = False
        self.closed = True

    def reset_schema(self):
        if not self.storage.schema_present:
            raise SchemaMissingError("Benchmark tables are not provisioned: users, posts")
        self.storage.users.clear()
        self.storage.posts.clear()
        self.storage.next_user_id = 1
        self.storage.next_post_id = 1

    def bulk_insert_users(self, users):
        self.insert_calls += 1
        for user in users:
            self.storage.users.append(
                {"id": self.storage.next_user_id, "name": user.name, "hair_color": user.hair_color}
            )
            self.storage.next_user_id += 1
        return max(len(users) - self.insert_shortfall, 0)

    def bulk_insert_posts(self, posts):
        self.insert_calls += 1
        for post in posts:
            self.storage.posts.append(
                {"id": self.storage.next_post_id, "user_id": post.user_id, "title": post.title, "body": post.body}
            )
            self.storage.next_post_id += 1
        return max(len(posts) - self.post_insert_shortfall, 0)

    def run_simple_query(self):
        self.query_calls += 1
        rows = [User(**user) for user in self.storage.users]
        rows.extend(User(id=0, name="extra", hair_color=None) for _ in range(self.extra_rows))
        return rows

    def run_complex_query(self):
        self.query_calls += 1
        posts_by_user = {post["user_id"]: post for post in self.storage.posts}
        black = [user for user in self.storage.users if user["hair_color"] == "black"]
        black.sort(key=lambda user: user["name"], reverse=True)

        rows = []
        for user in black:
            post = posts_by_user.get(user["id"])
            rows.append((User(**user), Post(**post) if post else None))
        rows.extend(
            (User(id=0, name="extra", hair_color="black"), None) for _ in range(self.extra_rows)
        )
        return rows


def pytest_configure(config):
    """Register ormbench markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests (no external dependencies)"
    )
    config.addinivalue_line(
        "markers", f"requires_postgres: Tests needing a disposable PostgreSQL database in {TEST_DATABASE_URL_ENV}"
    )


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo configure_logging() so no test logs into another test's captured stream"""
    yield
    structlog.reset_defaults()


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
def fake_backend_factory(fake_storage):
    """
    Backend factory for ScenarioRunner that builds FakeBackends.

    Every backend built is kept in factory.created. Set factory.options to
    pass keyword arguments (insert_shortfall, extra_rows, ...) to new backends.
    """
    def factory(kind, database_url):
        backend = FakeBackend(database_url, fake_storage, **factory.options)
        backend.kind = kind
        factory.created.append(backend)
        return backend

    factory.created = []
    factory.options = {}
    return factory


@pytest.fixture
def sqlite_engine():
    """In-memory SQLite engine with the benchmark schema, one shared connection"""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def postgres_url():
    """Disposable PostgreSQL database URL, or skip"""
    url = os.environ.get(TEST_DATABASE_URL_ENV)
    if not url:
        pytest.skip(f"{TEST_DATABASE_URL_ENV} not set")
    return url
