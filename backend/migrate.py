#!/usr/bin/env python3
"""
Bring an existing database up to the current schema.

Creates missing tables, adds the reset_token columns to account tables that
predate the password reset flow, and makes sure the unique indexes the
idempotent inserts depend on are present.
"""

import sys
from pathlib import Path

from sqlalchemy import inspect, text

# Allow `python backend/migrate.py` from the repo root.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from backend.skilltrials.database import engine, init_db

RESET_TOKEN_TABLES = ("companies", "candidates")

UNIQUE_INDEXES = {
    "uq_tests_job_candidate_email": ("tests", "job_post_id, candidate_email"),
    "uq_answers_test_question_candidate": ("answers", "test_id, question_id, candidate_id"),
}


def _add_reset_token_columns(inspector) -> None:
    for table in RESET_TOKEN_TABLES:
        existing = {c["name"] for c in inspector.get_columns(table)}
        if "reset_token" in existing:
            print(f"✓ {table}.reset_token already present")
            continue
        try:
            with engine.begin() as conn:
                conn.execute(text(f"ALTER TABLE {table} ADD COLUMN reset_token VARCHAR(1024)"))
            print(f"✓ Added {table}.reset_token")
        except Exception as e:
            print(f"✗ Failed to add {table}.reset_token: {e}")


def _ensure_unique_indexes(inspector) -> bool:
    ok = True
    for name, (table, columns) in UNIQUE_INDEXES.items():
        existing = {i.get("name") for i in inspector.get_indexes(table) if i.get("name")}
        existing |= {u.get("name") for u in inspector.get_unique_constraints(table) if u.get("name")}
        if name in existing:
            print(f"✓ Unique index already exists: {name}")
            continue
        # Fails if duplicate rows already exist; those must be cleaned up by hand.
        try:
            with engine.begin() as conn:
                conn.execute(text(f"CREATE UNIQUE INDEX {name} ON {table} ({columns})"))
            print(f"✓ Added unique index: {name}")
        except Exception as e:
            print(f"✗ Could not add unique index {name}: {e}")
            ok = False
    return ok


def migrate() -> bool:
    print("Initializing database with all models...")
    init_db()
    print("✓ Tables ensured")

    inspector = inspect(engine)
    _add_reset_token_columns(inspector)
    return _ensure_unique_indexes(inspect(engine))


if __name__ == "__main__":
    success = migrate()
    sys.exit(0 if success else 1)
