# tests/conftest.py

import pytest
from sqlalchemy.orm import sessionmaker

from fitstudy.db.session import make_engine
from fitstudy.models import Base


# --- Test Database Setup ---
# Each test gets its own file-backed SQLite database built with the same
# engine factory production uses, so BEGIN IMMEDIATE locking is exercised.
@pytest.fixture(scope="function")
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'fitstudy_test.db'}", lock_timeout_ms=15000)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()
