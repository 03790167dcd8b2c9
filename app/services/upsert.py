"""
Dialect-specific INSERT constructs.

Both supported backends (PostgreSQL in production, SQLite locally and in
tests) implement ``INSERT ... ON CONFLICT``; the statement classes just live
in different dialect modules.
"""
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def conflict_aware_insert(db: Session, table):
    dialect = db.get_bind().dialect.name
    try:
        return _INSERTS[dialect](table)
    except KeyError:
        raise RuntimeError(f"ON CONFLICT inserts are not supported for dialect '{dialect}'") from None
