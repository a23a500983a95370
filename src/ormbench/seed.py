"""
Deterministic seed data for benchmark scenarios.

Seed batches are a pure function of (num_rows, shape): no randomness and no
hidden state, so every run of a scenario inserts byte-identical data.

Simple-query seeding leaves hair_color unset while complex-query seeding
alternates it. Keep that asymmetry; batches are compared across runs.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ormbench.config import QueryShape


POST_TITLE = "My first post"
POST_BODY = "This is the body of my first post"


@dataclass(frozen=True)
class NewUser:
    name: str
    hair_color: Optional[str] = None


@dataclass(frozen=True)
class NewPost:
    user_id: int
    title: str
    body: Optional[str] = None


@dataclass
class SeedBatch:
    """Users and posts to insert once before a scenario's timed loop"""
    users: List[NewUser] = field(default_factory=list)
    posts: List[NewPost] = field(default_factory=list)

    @property
    def post_count(self) -> int:
        return len(self.posts)

    def __len__(self) -> int:
        return len(self.users)


def hair_color_for(index: int) -> str:
    return "black" if index % 2 == 0 else "brown"


def generate_seed_batch(num_rows: int, shape: QueryShape) -> SeedBatch:
    """
    Generate the seed batch for a scenario.

    Args:
        num_rows: Number of users to generate
        shape: Query shape the batch is seeded for

    Returns:
        SeedBatch with num_rows users. Complex batches also carry one post for
        every user whose 0-based index is a multiple of 3, owned by that user's
        1-based identity.

    Raises:
        ValueError: If num_rows is negative

    Example:
        >>> batch = generate_seed_batch(4, QueryShape.COMPLEX)
        >>> [u.hair_color for u in batch.users]
        ['black', 'brown', 'black', 'brown']
        >>> [p.user_id for p in batch.posts]
        [1, 4]
    """
    if num_rows < 0:
        raise ValueError(f"num_rows must be >= 0, got {num_rows}")

    batch = SeedBatch()

    if shape is QueryShape.SIMPLE:
        batch.users = [NewUser(name=f"User {i}") for i in range(num_rows)]
        return batch

    for i in range(num_rows):
        batch.users.append(NewUser(name=f"User {i}", hair_color=hair_color_for(i)))
        if i % 3 == 0:
            batch.posts.append(NewPost(user_id=i + 1, title=POST_TITLE, body=POST_BODY))

    return batch
