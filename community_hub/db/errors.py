from sqlalchemy.exc import IntegrityError

from community_hub.db.models._base import Base

PG_UNIQUE_VIOLATION = "23505"


def _constraint_columns(constraint_name: str) -> list[str]:
    for table in Base.metadata.tables.values():
        for constraint in table.constraints:
            if constraint.name == constraint_name:
                return [f"{table.name}.{column.name}" for column in constraint.columns]
    return []


def is_unique_violation(error: BaseException, constraint_name: str) -> bool:
    """
    Tell whether ``error`` is a unique-constraint violation of ``constraint_name``.

    PostgreSQL (asyncpg) reports SQLSTATE 23505 together with the constraint name.
    SQLite only names the columns, so the constraint is looked up in the metadata
    and its columns are matched against the message.
    """
    if not isinstance(error, IntegrityError):
        return False

    orig = error.orig
    cause = getattr(orig, "__cause__", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(cause, "sqlstate", None)
    if sqlstate is not None:
        name = getattr(cause, "constraint_name", None) or getattr(orig, "constraint_name", None)
        if name is None:
            return sqlstate == PG_UNIQUE_VIOLATION and constraint_name in str(orig)
        return sqlstate == PG_UNIQUE_VIOLATION and name == constraint_name

    message = str(orig)
    if not message.startswith("UNIQUE constraint failed"):
        return False
    columns = _constraint_columns(constraint_name)
    return bool(columns) and all(column in message for column in columns)
