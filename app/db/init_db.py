# app/db/init_db.py
from typing import List
from sqlalchemy import inspect, text
from app.db.base import Base
from app.db.session import engine
import logging

# columns introduced after the first release; older databases get them added in place
LATE_COLUMNS = {
    "cases": ("contact_email", "contact_phone", "escalated_at"),
    "chat_messages": (
        "sentiment_score",
        "sentiment_comparative",
        "sentiment_label",
        "sentiment_magnitude",
    ),
}


def ensure_schema(bind=None) -> List[str]:
    """
    Create missing tables and upgrade older ones to the current schema.

    Safe to call repeatedly. Returns "table.column" for every column it added.
    """
    bind = bind if bind is not None else engine
    from app import models  # noqa: F401  register every model on Base.metadata
    Base.metadata.create_all(bind=bind)

    inspector = inspect(bind)
    missing = []
    for table_name, column_names in LATE_COLUMNS.items():
        existing = {c["name"] for c in inspector.get_columns(table_name)}
        missing.extend((table_name, name) for name in column_names if name not in existing)

    added = []
    if not missing:
        return added
    with bind.begin() as conn:
        for table_name, name in missing:
            ddl_type = Base.metadata.tables[table_name].c[name].type.compile(dialect=bind.dialect)
            conn.execute(text(f"ALTER TABLE {table_name} ADD COLUMN {name} {ddl_type}"))
            added.append(f"{table_name}.{name}")
            logging.info(f"Schema upgrade: added column {table_name}.{name}")
    return added
