"""
Unit Tests: Correctness Oracle
"""

import math

import pytest

from ormbench.config import QueryShape
from ormbench.oracle import (
    expected_post_count,
    expected_row_count,
    row_values,
    validate_result,
)
from ormbench.records import Post, User


def black_user(user_id):
    return User(id=user_id, name=f"User {user_id - 1}", hair_color="black")


@pytest.mark.unit
class TestExpectedCounts:

    @pytest.mark.parametrize("num_rows", [0, 1, 2, 9, 10, 1000, 10000])
    def test_simple_expects_every_row(self, num_rows):
        assert expected_row_count(QueryShape.SIMPLE, num_rows) == num_rows

    @pytest.mark.parametrize("num_rows", [0, 1, 2, 9, 10, 999, 1000])
    def test_complex_expects_ceil_half(self, num_rows):
        assert expected_row_count(QueryShape.COMPLEX, num_rows) == math.ceil(num_rows / 2)

    @pytest.mark.parametrize("num_rows,expected", [(0, 0), (1, 1), (3, 1), (4, 2), (10, 4), (1000, 334)])
    def test_post_count(self, num_rows, expected):
        assert expected_post_count(num_rows) == expected


@pytest.mark.unit
class TestValidateResult:

    def test_simple_correct_count_passes(self):
        rows = [User(id=i, name=f"User {i}", hair_color=None) for i in range(1, 4)]

        validate_result(QueryShape.SIMPLE, rows, 3)

    def test_simple_wrong_count_raises(self):
        rows = [User(id=1, name="User 0", hair_color=None)]

        with pytest.raises(AssertionError, match="returned 1 rows, expected 2"):
            validate_result(QueryShape.SIMPLE, rows, 2)

    def test_empty_result_for_zero_rows_passes(self):
        validate_result(QueryShape.SIMPLE, [], 0)
        validate_result(QueryShape.COMPLEX, [], 0)

    def test_complex_single_row_with_post_passes(self):
        rows = [(black_user(1), Post(id=1, user_id=1, title="t", body=None))]

        validate_result(QueryShape.COMPLEX, rows, 1)

    def test_complex_wrong_count_raises(self):
        rows = [(black_user(1), None)]

        with pytest.raises(AssertionError, match="expected 5"):
            validate_result(QueryShape.COMPLEX, rows, 10)

    def test_complex_rejects_non_black_user(self):
        rows = [(User(id=2, name="User 1", hair_color="brown"), None)]

        with pytest.raises(AssertionError, match="non-black"):
            validate_result(QueryShape.COMPLEX, rows, 1)

    def test_complex_rejects_post_of_another_user(self):
        rows = [(black_user(1), Post(id=1, user_id=4, title="t", body=None))]

        with pytest.raises(AssertionError, match="does not belong"):
            validate_result(QueryShape.COMPLEX, rows, 1)

    def test_complex_rejects_bare_user_rows(self):
        with pytest.raises(AssertionError, match="not a \\(user, post\\) pair"):
            validate_result(QueryShape.COMPLEX, [black_user(1)], 1)


@pytest.mark.unit
class TestRowValues:

    def test_user_row(self):
        assert row_values(User(id=1, name="User 0", hair_color=None)) == (1, "User 0", None)

    def test_pair_row_with_and_without_post(self):
        post = Post(id=3, user_id=1, title="t", body="b")

        assert row_values((black_user(1), post)) == ((1, "User 0", "black"), (3, 1, "t", "b"))
        assert row_values((black_user(1), None)) == ((1, "User 0", "black"), None)


@pytest.mark.unit
class TestComplexOrdering:

    def test_names_descending_pass(self):
        rows = [
            (User(id=9, name="User 8", hair_color="black"), None),
            (User(id=7, name="User 6", hair_color="black"), Post(id=3, user_id=7, title="t", body="b")),
            (User(id=1, name="User 0", hair_color="black"), Post(id=1, user_id=1, title="t", body="b")),
        ]

        validate_result(QueryShape.COMPLEX, rows, 5)

    def test_ascending_names_rejected(self):
        rows = [
            (User(id=1, name="User 0", hair_color="black"), None),
            (User(id=3, name="User 2", hair_color="black"), None),
        ]

        with pytest.raises(AssertionError, match="not ordered by name descending"):
            validate_result(QueryShape.COMPLEX, rows, 3)

    def test_multi_digit_names_compare_as_strings(self):
        """'User 8' sorts above 'User 10' under ORDER BY name DESC"""
        rows = [
            (User(id=9, name="User 8", hair_color="black"), None),
            (User(id=11, name="User 10", hair_color="black"), None),
            (User(id=1, name="User 0", hair_color="black"), None),
        ]

        validate_result(QueryShape.COMPLEX, rows, 5)
