"""
ORM vs raw driver benchmark harness

Measures query latency of the SQLAlchemy ORM against hand-written SQL executed
through psycopg, over the same two-table schema and identical seed data.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
