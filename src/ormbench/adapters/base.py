"""
Backend capability interface.

A backend owns one exclusive connection for the lifetime of a scenario. Use
it as a context manager so the connection is released on every exit path.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence, Tuple

from ormbench.config import BackendKind
from ormbench.seed import NewPost, NewUser


class Backend(ABC):
    """Data-access strategy under benchmark."""

    kind: BackendKind

    def __init__(self, database_url: str):
        self.database_url = database_url

    @abstractmethod
    def connect(self) -> None:
        """
        Open the scenario's connection.

        Raises:
            StorageConnectionError: If the connection cannot be established
        """

    @abstractmethod
    def close(self) -> None:
        """Release the connection. Safe to call more than once."""

    @abstractmethod
    def reset_schema(self) -> None:
        """
        Empty users and posts and restart their identities.

        Raises:
            SchemaMissingError: If either table does not exist
        """

    @abstractmethod
    def bulk_insert_users(self, users: Sequence[NewUser]) -> int:
        """
        Insert all users with one statement.

        Returns:
            Number of rows storage reports as inserted (0 for an empty batch)

        Raises:
            StorageError: If storage rejects the statement
        """

    @abstractmethod
    def bulk_insert_posts(self, posts: Sequence[NewPost]) -> int:
        """Insert all posts with one statement. Same contract as bulk_insert_users."""

    @abstractmethod
    def run_simple_query(self) -> List[Any]:
        """Unfiltered, unordered scan of users, materialized as User rows."""

    @abstractmethod
    def run_complex_query(self) -> List[Tuple[Any, Optional[Any]]]:
        """
        Users left-outer-joined to posts, hair_color = 'black', name descending.

        Returns:
            List of (User, Post or None) pairs
        """

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
