"""
SQLAlchemy ORM backend.

Holds one Connection for the scenario. Every operation runs in a fresh
Session bound to that connection, so the identity map never hands back
objects loaded by an earlier iteration and every query pays the full
materialization cost.
"""

from contextlib import contextmanager
from typing import List, Optional, Sequence, Tuple

import structlog
from sqlalchemy import create_engine, exc, insert, inspect, select, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from ormbench.adapters.base import Backend
from ormbench.config import BackendKind, orm_url
from ormbench.errors import SchemaMissingError, StorageConnectionError, StorageError
from ormbench.models import Post, User
from ormbench.schema import TABLE_NAMES, reset_statements
from ormbench.seed import NewPost, NewUser

logger = structlog.get_logger()


class OrmBackend(Backend):
    """Run the benchmark queries through the SQLAlchemy ORM."""

    kind = BackendKind.ORM

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        """
        Initialize ORM backend.

        Args:
            database_url: Connection URL, used when no engine is given
            engine: Pre-built engine (tests inject in-memory SQLite this way).
                An injected engine is not disposed by close().
        """
        if engine is None and not database_url:
            raise ValueError("OrmBackend needs a database_url or an engine")

        super().__init__(database_url or "")
        self._engine = engine
        self._owns_engine = engine is None
        self._connection: Optional[Connection] = None

    def connect(self):
        if self._connection is not None:
            return

        if self._engine is None:
            # No pool: the scenario's one connection is opened and closed here
            self._engine = create_engine(orm_url(self.database_url), poolclass=NullPool)

        try:
            self._connection = self._engine.connect()
        except exc.DBAPIError as e:
            raise StorageConnectionError(f"ORM backend could not connect: {e.orig or e}") from e

        logger.debug("ORM backend connected", dialect=self._connection.dialect.name)

    def close(self):
        if self._connection is not None:
            self._connection.close()
            self._connection = None
        if self._owns_engine and self._engine is not None:
            self._engine.dispose()
            self._engine = None

    @property
    def connection(self) -> Connection:
        if self._connection is None:
            raise StorageConnectionError("ORM backend is not connected")
        return self._connection

    @contextmanager
    def _translate_errors(self, description: str):
        try:
            yield
        except exc.DBAPIError as e:
            if e.connection_invalidated:
                raise StorageConnectionError(f"Connection lost during {description}: {e.orig}") from e
            raise StorageError(f"{description} failed: {e.orig or e}", statement=e.statement) from e

    def reset_schema(self):
        conn = self.connection

        with self._translate_errors("schema reset"):
            inspector = inspect(conn)
            missing = [name for name in TABLE_NAMES if not inspector.has_table(name)]
            if missing:
                raise SchemaMissingError(
                    f"Benchmark tables are not provisioned: {', '.join(missing)}"
                )

            for statement in reset_statements(conn.dialect.name):
                conn.execute(text(statement))
            conn.commit()

    def _bulk_insert(self, model, rows: List[dict], description: str) -> int:
        if not rows:
            return 0

        with self._translate_errors(description):
            with Session(bind=self.connection) as session:
                # One multi-row INSERT ... VALUES statement
                result = session.execute(insert(model).values(rows))
                inserted = result.rowcount
                session.commit()

        return inserted

    def bulk_insert_users(self, users: Sequence[NewUser]) -> int:
        rows = [{"name": user.name, "hair_color": user.hair_color} for user in users]
        return self._bulk_insert(User, rows, "users insert")

    def bulk_insert_posts(self, posts: Sequence[NewPost]) -> int:
        rows = [
            {"user_id": post.user_id, "title": post.title, "body": post.body}
            for post in posts
        ]
        return self._bulk_insert(Post, rows, "posts insert")

    def run_simple_query(self) -> List[User]:
        with self._translate_errors("simple query"):
            with Session(bind=self.connection) as session:
                return list(session.scalars(select(User)).all())

    def run_complex_query(self) -> List[Tuple[User, Optional[Post]]]:
        query = (
            select(User, Post)
            .outerjoin(User.posts)
            .where(User.hair_color == "black")
            .order_by(User.name.desc())
        )

        with self._translate_errors("complex query"):
            with Session(bind=self.connection) as session:
                return [(user, post) for user, post in session.execute(query)]
