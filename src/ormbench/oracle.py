"""
Correctness oracle for timed query results.

Every timed sample is checked against the row count predicted from the
seed parameters. A wrong result raises AssertionError and stops the run;
it is never recorded as a data point.
"""

from typing import Any, Optional, Sequence, Tuple

from ormbench.config import QueryShape


def ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def expected_row_count(shape: QueryShape, num_rows: int) -> int:
    """
    Rows a query of the given shape must return after seeding num_rows users.

    Simple: every user. Complex: users with even index (hair_color 'black'),
    i.e. ceil(num_rows / 2).
    """
    if shape is QueryShape.SIMPLE:
        return num_rows
    return ceil_div(num_rows, 2)


def expected_post_count(num_rows: int) -> int:
    """Posts seeded for num_rows users: indices 0, 3, 6, ... below num_rows."""
    return ceil_div(num_rows, 3)


def user_values(user: Any) -> Tuple[int, str, Optional[str]]:
    return (user.id, user.name, user.hair_color)


def post_values(post: Any) -> Optional[Tuple[int, int, str, Optional[str]]]:
    if post is None:
        return None
    return (post.id, post.user_id, post.title, post.body)


def row_values(row: Any) -> Tuple:
    """
    Normalise a result row from either backend into plain tuples.

    ORM objects and raw records expose the same attribute names, so equal
    values mean the backends returned the same data.
    """
    if isinstance(row, tuple):
        user, post = row
        return (user_values(user), post_values(post))
    return user_values(row)


def validate_result(shape: QueryShape, rows: Sequence[Any], num_rows: int) -> None:
    """
    Check one query result.

    Args:
        shape: Query shape that produced rows
        rows: Materialized query result
        num_rows: Users seeded for the scenario

    Raises:
        AssertionError: If the cardinality, row shape or complex-query
            name DESC order is wrong
    """
    expected = expected_row_count(shape, num_rows)
    if len(rows) != expected:
        raise AssertionError(
            f"{shape.value} query returned {len(rows)} rows, expected {expected} "
            f"(num_rows={num_rows})"
        )

    if shape is QueryShape.SIMPLE:
        return

    for row in rows:
        if not isinstance(row, tuple) or len(row) != 2:
            raise AssertionError(f"complex query row is not a (user, post) pair: {row!r}")
        user, post = row
        if user.hair_color != "black":
            raise AssertionError(f"complex query returned non-black user: {user!r}")
        if post is not None and post.user_id != user.id:
            raise AssertionError(f"post {post.id} paired with user {user.id} it does not belong to")

    # Seed names differ only in the digits after "User ", so str order matches the database collation
    names = [user.name for user, _ in rows]
    for earlier, later in zip(names, names[1:]):
        if later > earlier:
            raise AssertionError(
                f"complex query rows are not ordered by name descending: {later!r} after {earlier!r}"
            )
