# tests/test_write_units.py

import pytest
from sqlalchemy import event, text

from fitstudy.db.unit_of_work import transactional_unit


@pytest.fixture
def begin_statements(engine):
    statements = []

    @event.listens_for(engine, "before_cursor_execute")
    def capture(conn, cursor, statement, parameters, context, executemany):
        if statement.startswith("BEGIN"):
            statements.append(statement)

    yield statements
    event.remove(engine, "before_cursor_execute", capture)


def test_plain_reads_use_deferred_begin(session_factory, begin_statements):
    db = session_factory()
    try:
        db.execute(text("SELECT 1"))
    finally:
        db.close()

    assert begin_statements == ["BEGIN"]


def test_unit_starts_its_own_immediate_transaction(session_factory, begin_statements):
    db = session_factory()
    try:
        db.execute(text("SELECT 1"))
        with transactional_unit(db):
            db.execute(text("SELECT 1"))
    finally:
        db.close()

    assert begin_statements == ["BEGIN", "BEGIN IMMEDIATE"]


def test_unit_rolls_back_on_error(session_factory):
    db = session_factory()
    try:
        with pytest.raises(RuntimeError):
            with transactional_unit(db):
                db.execute(text("CREATE TABLE scratch (id INTEGER)"))
                raise RuntimeError("abandon")
        tables = db.execute(
            text("SELECT name FROM sqlite_master WHERE name = 'scratch'")
        ).all()
    finally:
        db.close()

    assert tables == []
