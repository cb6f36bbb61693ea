# tests/test_init_db.py
from sqlalchemy import inspect, text

from app.db.init_db import ensure_schema
from app.db.session import build_engine


def test_fresh_database_needs_no_upgrade():
    engine = build_engine("sqlite://")
    assert ensure_schema(bind=engine) == []
    tables = set(inspect(engine).get_table_names())
    assert {"cases", "case_messages", "chat_sessions", "chat_messages", "attachments"} <= tables


def test_legacy_tables_are_upgraded_in_place():
    engine = build_engine("sqlite://")
    with engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE cases (id VARCHAR(64) PRIMARY KEY, status VARCHAR(16) NOT NULL, "
            "summary TEXT, created_at DATETIME NOT NULL, updated_at DATETIME NOT NULL)"
        ))
        conn.execute(text(
            "CREATE TABLE chat_messages (id INTEGER PRIMARY KEY, session_id VARCHAR(64) NOT NULL, "
            "sender VARCHAR(8) NOT NULL, text TEXT, timestamp DATETIME NOT NULL)"
        ))
        conn.execute(text(
            "INSERT INTO cases (id, status, summary, created_at, updated_at) "
            "VALUES ('CASE-1-OLD', 'open', 'legacy', '2024-01-01 00:00:00', '2024-01-01 00:00:00')"
        ))

    added = ensure_schema(bind=engine)
    assert sorted(added) == sorted([
        "cases.contact_email",
        "cases.contact_phone",
        "cases.escalated_at",
        "chat_messages.sentiment_score",
        "chat_messages.sentiment_comparative",
        "chat_messages.sentiment_label",
        "chat_messages.sentiment_magnitude",
    ])

    columns = {c["name"] for c in inspect(engine).get_columns("chat_messages")}
    assert "sentiment_label" in columns
    with engine.connect() as conn:
        row = conn.execute(text("SELECT summary, contact_email FROM cases")).one()
    assert tuple(row) == ("legacy", None)

    # second run finds nothing to do
    assert ensure_schema(bind=engine) == []
