# File: tests/conftest.py

import os
import sys
import pytest
from sqlalchemy import create_engine, text
from sqlalchemy_utils import database_exists, create_database, drop_database

# 1. Project root on the path
sys.path.append(os.getcwd())

# 2. Tests always run against a throwaway SQLite file, chosen before settings are read
os.environ.setdefault("USE_SQLITE", "true")
os.environ.setdefault("SQLITE_PATH", "./test_hearing_scribe.db")

from hearing_scribe.core.config.settings import settings  # noqa: E402

TEST_ENGINE = create_engine(settings.DATABASE_URL)


@pytest.fixture(scope="session", autouse=True)
def global_setup():
    """
    Runs once per test session: create the database and every table,
    drop the database file afterwards.
    """
    if not database_exists(TEST_ENGINE.url):
        create_database(TEST_ENGINE.url)

    from hearing_scribe.core.database.connection import init_db
    init_db()

    yield

    TEST_ENGINE.dispose()
    from hearing_scribe.core.database.connection import engine
    engine.dispose()
    if database_exists(TEST_ENGINE.url):
        drop_database(TEST_ENGINE.url)


@pytest.fixture(scope="function", autouse=True)
def clean_db(global_setup):
    """
    Runs before EVERY test.
    Empties every table, children first, so foreign keys never block the delete.
    """
    from hearing_scribe.core.database.base import Base

    with TEST_ENGINE.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(text(f'DELETE FROM "{table.name}";'))

    yield
