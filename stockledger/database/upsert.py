from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def upsert_row(db: Session, model, *, key: dict, values: dict, insert_only: Optional[dict] = None) -> None:
    """Insert ``key + values`` or overwrite ``values`` on the row matching ``key``.

    ``key`` columns must carry a unique constraint. PostgreSQL and SQLite use
    ``ON CONFLICT DO UPDATE``; other backends fall back to select-then-write.
    Does not commit.
    """
    insert_only = insert_only or {}
    insert_factory = _DIALECT_INSERTS.get(db.get_bind().dialect.name)
    if insert_factory is not None:
        stmt = insert_factory(model).values(**key, **values, **insert_only)
        stmt = stmt.on_conflict_do_update(
            index_elements=list(key),
            set_={name: stmt.excluded[name] for name in values},
        )
        db.execute(stmt)
        return

    query = select(model)
    for name, value in key.items():
        query = query.where(getattr(model, name) == value)
    existing = db.execute(query).scalars().first()
    if existing is None:
        db.add(model(**key, **values, **insert_only))
        return
    for name, value in values.items():
        setattr(existing, name, value)
