"""
Error taxonomy for the benchmark harness.

Every error here is fatal for the scenario that raised it. Correctness
failures use the builtin AssertionError so they read like test failures.
"""

from typing import Optional


class HarnessError(Exception):
    """Base class for fatal benchmark harness errors."""


class StorageConnectionError(HarnessError, ConnectionError):
    """The storage connection could not be established or was lost."""


class StorageError(HarnessError):
    """A statement was rejected by storage."""

    def __init__(self, message: str, statement: Optional[str] = None):
        super().__init__(message)
        self.statement = statement

    def __str__(self) -> str:
        message = super().__str__()
        if self.statement:
            # Multi-row inserts get long; the head is enough to identify them
            statement = " ".join(self.statement.split())
            if len(statement) > 200:
                statement = statement[:200] + "..."
            return f"{message} [statement: {statement}]"
        return message


class SchemaMissingError(StorageError):
    """The users/posts tables are not provisioned."""


class SeedMismatchError(HarnessError):
    """Storage reported a different inserted row count than the batch size."""

    def __init__(self, table: str, expected: int, actual: int):
        super().__init__(
            f"Seeding {table} inserted {actual} rows, expected {expected}"
        )
        self.table = table
        self.expected = expected
        self.actual = actual
