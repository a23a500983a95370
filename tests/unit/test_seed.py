"""
Unit Tests: Dataset Generator

Covers batch sizes, post derivation, hair color parity and the intentional
simple/complex asymmetry.
"""

import math

import pytest

from ormbench.config import QueryShape
from ormbench.seed import POST_BODY, POST_TITLE, NewPost, NewUser, generate_seed_batch


ROW_COUNTS = [0, 1, 2, 3, 4, 10, 100, 1000]


@pytest.mark.unit
class TestGenerateSeedBatch:
    """Unit tests for generate_seed_batch()"""

    @pytest.mark.parametrize("num_rows", ROW_COUNTS)
    @pytest.mark.parametrize("shape", list(QueryShape))
    def test_user_count_matches_num_rows(self, num_rows, shape):
        batch = generate_seed_batch(num_rows, shape)

        assert len(batch.users) == num_rows
        assert len(batch) == num_rows

    @pytest.mark.parametrize("num_rows", ROW_COUNTS)
    def test_complex_post_count_is_ceil_third(self, num_rows):
        batch = generate_seed_batch(num_rows, QueryShape.COMPLEX)

        assert batch.post_count == math.ceil(num_rows / 3)

    def test_posts_belong_to_every_third_user(self):
        batch = generate_seed_batch(10, QueryShape.COMPLEX)

        assert [post.user_id for post in batch.posts] == [1, 4, 7, 10]
        assert all(post.title == POST_TITLE for post in batch.posts)
        assert all(post.body == POST_BODY for post in batch.posts)

    @pytest.mark.parametrize("num_rows", [1, 7, 100])
    def test_hair_color_black_iff_even_index(self, num_rows):
        batch = generate_seed_batch(num_rows, QueryShape.COMPLEX)

        for index, user in enumerate(batch.users):
            expected = "black" if index % 2 == 0 else "brown"
            assert user.hair_color == expected, f"index {index}"

    def test_names_follow_index(self):
        batch = generate_seed_batch(3, QueryShape.SIMPLE)

        assert [user.name for user in batch.users] == ["User 0", "User 1", "User 2"]

    def test_simple_batch_has_no_hair_color_and_no_posts(self):
        """Simple seeding leaves hair_color unset, unlike complex seeding"""
        batch = generate_seed_batch(10, QueryShape.SIMPLE)

        assert all(user.hair_color is None for user in batch.users)
        assert batch.posts == []

    def test_zero_rows_gives_empty_batch(self):
        batch = generate_seed_batch(0, QueryShape.COMPLEX)

        assert batch.users == []
        assert batch.posts == []

    def test_negative_rows_rejected(self):
        with pytest.raises(ValueError, match="num_rows must be >= 0"):
            generate_seed_batch(-1, QueryShape.SIMPLE)

    def test_repeated_generation_is_identical(self):
        first = generate_seed_batch(50, QueryShape.COMPLEX)
        second = generate_seed_batch(50, QueryShape.COMPLEX)

        assert first == second
        assert first.users[0] == NewUser(name="User 0", hair_color="black")
        assert first.posts[0] == NewPost(user_id=1, title=POST_TITLE, body=POST_BODY)
