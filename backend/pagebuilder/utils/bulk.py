# pagebuilder/utils/bulk.py
from typing import Any, Dict, List

from sqlalchemy.dialects import mysql, postgresql, sqlite


def insert_ignore(session, model, rows: List[Dict[str, Any]]) -> int:
    """
    Insert all rows in one multi-VALUES statement, skipping rows that
    collide with an existing primary/unique key.

    Returns the number of rows the database reports as inserted.
    """
    if not rows:
        return 0

    table = getattr(model, "__table__", model)
    dialect = session.get_bind().dialect.name

    if dialect == "sqlite":
        stmt = sqlite.insert(table).values(rows).on_conflict_do_nothing()
    elif dialect == "postgresql":
        stmt = postgresql.insert(table).values(rows).on_conflict_do_nothing()
    elif dialect in ("mysql", "mariadb"):
        stmt = mysql.insert(table).values(rows).prefix_with("IGNORE")
    else:
        raise NotImplementedError(f"insert_ignore is not supported on {dialect}")

    result = session.execute(stmt)
    return result.rowcount
