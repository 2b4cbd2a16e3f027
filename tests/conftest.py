"""
Pytest configuration and fixtures.

This file is automatically loaded by pytest and provides
shared fixtures for all tests.
"""

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from rugbylive.db.models import Base
from rugbylive.db.store import SqlCatalogStore
from rugbylive.entities import Country, Team


@pytest.fixture(scope="session")
def test_engine():
    """
    Create a test database engine.

    Uses SQLite in-memory for fast tests that don't need
    PostgreSQL-specific features. pysqlite's own transaction handling is
    switched off so that SAVEPOINTs (store.atomic) behave as on PostgreSQL.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
    )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


@pytest.fixture(scope="session")
def tables(test_engine):
    """
    Create all tables for testing.

    This fixture runs once per test session.
    """
    Base.metadata.create_all(test_engine)
    yield
    Base.metadata.drop_all(test_engine)


@pytest.fixture
def db_session(test_engine, tables):
    """
    Create a database session for a test.

    Each test gets its own session with automatic rollback,
    ensuring tests don't affect each other.
    """
    connection = test_engine.connect()
    transaction = connection.begin()

    Session = sessionmaker(bind=connection, join_transaction_mode="create_savepoint")
    session = Session()

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def store(db_session):
    """Catalog store over the test session."""
    return SqlCatalogStore(db_session)


@pytest.fixture
def seeded_store(store):
    """
    Store with a few countries and New Zealand teams:
    All Blacks, Crusaders, Crusaders Women, Northern Knights.
    """
    for code, name in [
        ("NZL", "New Zealand"),
        ("FRA", "France"),
        ("WAL", "Wales"),
        ("FJI", "Fiji"),
        ("WLD", "World"),
        ("EUR", "Europe"),
        ("OCE", "Oceania"),
    ]:
        store.upsert("country", Country(code=code, name=name))

    for team in [
        Team(id="NZL-ALL-BLACKS", name="All Blacks", country_code="NZL"),
        Team(id="NZL-CRUSADERS", name="Crusaders", country_code="NZL"),
        Team(id="NZL-CRUSADERS-WOMEN", name="Crusaders Women", country_code="NZL"),
        Team(id="NZL-NORTHERN-KNIGHTS", name="Northern Knights", country_code="NZL"),
    ]:
        store.upsert("team", team)
    return store
