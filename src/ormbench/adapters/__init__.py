"""Backend adapters: the two data-access strategies under comparison."""

from ormbench.adapters.base import Backend
from ormbench.adapters.orm_backend import OrmBackend
from ormbench.adapters.raw_backend import RawBackend
from ormbench.config import BackendKind

BACKENDS = {
    BackendKind.ORM: OrmBackend,
    BackendKind.RAW: RawBackend,
}


def create_backend(kind: BackendKind, database_url: str) -> Backend:
    """Instantiate the backend for kind. The connection opens on enter."""
    return BACKENDS[kind](database_url)


__all__ = ["Backend", "OrmBackend", "RawBackend", "BACKENDS", "create_backend"]
