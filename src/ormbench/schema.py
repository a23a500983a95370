"""
Benchmark schema fixture.

The two tables are provisioned outside the timed harness (see
create_schema). Before each scenario the fixture is reset: both tables are
emptied and their identities restart at 1.
"""

from contextlib import contextmanager
from typing import List

import structlog
from sqlalchemy import create_engine, exc

from ormbench.config import orm_url
from ormbench.errors import StorageConnectionError, StorageError
from ormbench.models import Base, Post, User

logger = structlog.get_logger()

metadata = Base.metadata
users_table = User.__table__
posts_table = Post.__table__

TABLE_NAMES = (users_table.name, posts_table.name)

TRUNCATE_SQL = "TRUNCATE TABLE users, posts RESTART IDENTITY"


def reset_statements(dialect_name: str) -> List[str]:
    """
    Statements that empty both tables and restart identities.

    PostgreSQL uses a single TRUNCATE. SQLite has no TRUNCATE; deleting every
    row restarts INTEGER PRIMARY KEY rowids at 1.
    """
    if dialect_name == "postgresql":
        return [TRUNCATE_SQL]
    return ["DELETE FROM posts", "DELETE FROM users"]


@contextmanager
def _provisioning_errors():
    try:
        yield
    except exc.OperationalError as e:
        raise StorageConnectionError(f"Schema provisioning could not connect: {e.orig}") from e
    except exc.DBAPIError as e:
        raise StorageError(f"Schema provisioning failed: {e.orig}", statement=e.statement) from e


def create_schema(database_url: str, drop_existing: bool = False) -> None:
    """
    Provision the users and posts tables.

    Args:
        database_url: Connection URL (plain PostgreSQL URLs are accepted)
        drop_existing: Drop both tables first
    """
    engine = create_engine(orm_url(database_url))
    try:
        with _provisioning_errors():
            if drop_existing:
                logger.info("Dropping benchmark schema", tables=TABLE_NAMES)
                metadata.drop_all(engine)
            metadata.create_all(engine)
        logger.info("Benchmark schema ready", tables=TABLE_NAMES)
    finally:
        engine.dispose()


def drop_schema(database_url: str) -> None:
    engine = create_engine(orm_url(database_url))
    try:
        with _provisioning_errors():
            metadata.drop_all(engine)
        logger.info("Benchmark schema dropped", tables=TABLE_NAMES)
    finally:
        engine.dispose()
