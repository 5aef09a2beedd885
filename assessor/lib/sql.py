"""Dialect-aware statement helpers.

Idempotent writes rely on `INSERT ... ON CONFLICT DO UPDATE`, which SQLAlchemy
exposes per dialect. Deployed environments run on PostgreSQL and the test
suite runs on SQLite; both constructs share the same interface.
"""

from __future__ import annotations

import typing as t

import sqlalchemy as sqla
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

Insert = postgresql.Insert | sqlite.Insert


def insert(session: Session, table: t.Any) -> Insert:
    name = session.get_bind().dialect.name
    match name:
        case "postgresql":
            return postgresql.insert(table)
        case "sqlite":
            return sqlite.insert(table)
        case _:
            raise NotImplementedError(f"upsert is not supported for dialect {name!r}")


def upsert(
    session: Session,
    table: t.Any,
    values: dict[str, t.Any],
    *,
    index_elements: t.Sequence[str],
    preserve: t.Collection[str] = (),
) -> sqla.CursorResult[t.Any]:
    """Insert `values`, replacing every non-key column on conflict.

    Columns named in `preserve` keep their stored value on conflict (e.g. the
    row's own primary key when the conflict target is a different unique
    column).
    """
    stmt = insert(session, table).values(**values)
    replaced = {k: stmt.excluded[k] for k in values if k not in index_elements and k not in preserve}
    stmt = stmt.on_conflict_do_update(index_elements=list(index_elements), set_=replaced)
    return t.cast(sqla.CursorResult[t.Any], session.execute(stmt))
