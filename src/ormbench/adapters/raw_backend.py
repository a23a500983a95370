"""
Hand-written SQL backend on psycopg 3.

Statements are built by hand and rows are mapped to plain records by
column name, the way an application without an ORM would do it.
"""

from typing import Any, List, Optional, Sequence, Tuple

import psycopg
import structlog
from psycopg.rows import dict_row

from ormbench.adapters.base import Backend
from ormbench.config import BackendKind, driver_url
from ormbench.errors import SchemaMissingError, StorageConnectionError, StorageError
from ormbench.records import Post, User
from ormbench.schema import TRUNCATE_SQL
from ormbench.seed import NewPost, NewUser

logger = structlog.get_logger()


SIMPLE_QUERY = "SELECT * FROM users"

COMPLEX_QUERY = """
    SELECT
        users.id AS user_id,
        users.name AS user_name,
        users.hair_color AS user_hair_color,
        posts.id AS post_id,
        posts.user_id AS post_user_id,
        posts.title AS post_title,
        posts.body AS post_body
    FROM users LEFT OUTER JOIN posts ON
        users.id = posts.user_id
    WHERE users.hair_color = %s
    ORDER BY name DESC
"""


def build_insert(table: str, columns: Sequence[str], row_count: int) -> str:
    """
    Build a multi-row INSERT with one placeholder group per row.

    Example:
        >>> build_insert("users", ["name"], 2)
        'INSERT INTO users (name) VALUES (%s), (%s)'
    """
    group = "(" + ", ".join(["%s"] * len(columns)) + ")"
    values = ", ".join([group] * row_count)
    return f"INSERT INTO {table} ({', '.join(columns)}) VALUES {values}"


class RawBackend(Backend):
    """Run the benchmark queries as hand-written SQL through psycopg."""

    kind = BackendKind.RAW

    def __init__(self, database_url: str, connect_timeout: int = 10):
        super().__init__(database_url)
        self.connect_timeout = connect_timeout
        self.connection: Optional[psycopg.Connection] = None

    def connect(self):
        if self.connection is not None:
            return

        try:
            # Autocommit: each statement stands alone, as with a bare driver
            self.connection = psycopg.connect(
                driver_url(self.database_url),
                autocommit=True,
                connect_timeout=self.connect_timeout,
                row_factory=dict_row,
            )
        except psycopg.OperationalError as e:
            raise StorageConnectionError(f"Raw backend could not connect: {e}") from e

        logger.debug("Raw backend connected")

    def close(self):
        if self.connection is not None:
            self.connection.close()
            self.connection = None

    def _execute(self, query: str, params: Optional[Sequence[Any]] = None) -> psycopg.Cursor:
        if self.connection is None:
            raise StorageConnectionError("Raw backend is not connected")

        try:
            return self.connection.execute(query, params)
        except psycopg.errors.UndefinedTable as e:
            raise SchemaMissingError(f"Benchmark tables are not provisioned: {e}", statement=query) from e
        except psycopg.OperationalError as e:
            raise StorageConnectionError(f"Connection lost: {e}") from e
        except psycopg.Error as e:
            raise StorageError(f"Statement rejected: {e}", statement=query) from e

    def reset_schema(self):
        self._execute(TRUNCATE_SQL)

    def bulk_insert_users(self, users: Sequence[NewUser]) -> int:
        if not users:
            return 0

        params: List[Any] = []
        for user in users:
            params.extend((user.name, user.hair_color))

        cursor = self._execute(build_insert("users", ["name", "hair_color"], len(users)), params)
        return cursor.rowcount

    def bulk_insert_posts(self, posts: Sequence[NewPost]) -> int:
        if not posts:
            return 0

        params: List[Any] = []
        for post in posts:
            params.extend((post.user_id, post.title, post.body))

        cursor = self._execute(build_insert("posts", ["user_id", "title", "body"], len(posts)), params)
        return cursor.rowcount

    def run_simple_query(self) -> List[User]:
        rows = self._execute(SIMPLE_QUERY).fetchall()
        return [
            User(id=row["id"], name=row["name"], hair_color=row["hair_color"])
            for row in rows
        ]

    def run_complex_query(self) -> List[Tuple[User, Optional[Post]]]:
        rows = self._execute(COMPLEX_QUERY, ("black",)).fetchall()

        data = []
        for row in rows:
            user = User(
                id=row["user_id"],
                name=row["user_name"],
                hair_color=row["user_hair_color"],
            )
            post = None
            if row["post_id"] is not None:
                post = Post(
                    id=row["post_id"],
                    user_id=row["post_user_id"],
                    title=row["post_title"],
                    body=row["post_body"],
                )
            data.append((user, post))
        return data
