"""SQLite compilation shims for PostgreSQL-specific SQLAlchemy types.

Test runs substitute an in-memory SQLite database for PostgreSQL. This module
registers a compiler for JSONB on the SQLite dialect so that
`Base.metadata.create_all()` succeeds there. JSONB operators are not emulated;
the snapshot columns are only ever read back whole.

Usage: Imported for side-effects by franchisehub.db.models.
"""
from __future__ import annotations

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(element, compiler, **kw):  # pragma: no cover - trivial
    # Generic JSON is stored as TEXT by SQLite
    return "JSON"
