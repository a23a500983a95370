"""Plain row records materialized by the raw driver backend."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class User:
    id: int
    name: str
    hair_color: Optional[str]


@dataclass
class Post:
    id: int
    user_id: int
    title: str
    body: Optional[str]
