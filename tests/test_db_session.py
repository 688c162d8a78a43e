"""Tests for the application engine's transaction handling on SQLite."""

import pytest
from sqlalchemy import text

from casework.db import session as db_session

pytestmark = pytest.mark.skipif(
    db_session.backend != "sqlite", reason="DATABASE_URL is not SQLite"
)


def test_app_engine_rolls_back_savepoint_opened_first():
    with db_session.engine.connect() as conn:
        conn.exec_driver_sql("CREATE TEMP TABLE savepoint_check (n INTEGER)")
        conn.commit()

        try:
            with conn.begin():
                nested = conn.begin_nested()
                conn.execute(text("INSERT INTO savepoint_check (n) VALUES (2)"))
                nested.rollback()
                conn.execute(text("INSERT INTO savepoint_check (n) VALUES (1)"))

            rows = conn.execute(text("SELECT n FROM savepoint_check")).scalars().all()
            assert rows == [1]
        finally:
            conn.exec_driver_sql("DROP TABLE savepoint_check")
            conn.commit()


def test_app_session_keeps_outer_work_after_nested_rollback():
    db = db_session.SessionLocal()
    try:
        db.execute(text("CREATE TEMP TABLE nested_check (n INTEGER)"))
        db.commit()

        db.execute(text("INSERT INTO nested_check (n) VALUES (1)"))
        nested = db.begin_nested()
        db.execute(text("INSERT INTO nested_check (n) VALUES (2)"))
        nested.rollback()
        db.commit()

        assert db.execute(text("SELECT n FROM nested_check")).scalars().all() == [1]
    finally:
        db.rollback()
        db.execute(text("DROP TABLE nested_check"))
        db.commit()
        db.close()
