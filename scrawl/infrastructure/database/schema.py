"""Database schema bootstrap helpers.

Production databases are managed with Alembic migrations.
For SQLite-based development and tests, tables are created at startup.
"""

from __future__ import annotations

from sqlalchemy import Engine

from scrawl.infrastructure.database.base import Base


def ensure_sqlite_schema(engine: Engine) -> None:
    """Best-effort schema creation for SQLite.

    Notes:
    - Only runs for SQLite URLs.
    - For other databases, migrations (Alembic) should be used.
    """

    # Ensure ORM models are imported so they are registered on Base.metadata
    from scrawl.infrastructure.database import models as _models  # noqa: F401

    if engine.url.get_backend_name() == "sqlite":
        Base.metadata.create_all(bind=engine)
