"""
Shared fixtures: an in-memory SQLite database behind the SQL record store.
"""
import os

# Environment must be set before the package builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CRM_PROVIDER", "local")

import pytest
from unittest.mock import MagicMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from account_sync.database import Base, enforce_sqlite_foreign_keys
from account_sync.adapters.sql_store import SQLRecordStore


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enforce_sqlite_foreign_keys(test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def store(session_factory):
    return SQLRecordStore(session_factory)


@pytest.fixture
def spy_store(store):
    """SQL store wrapped in a mock so store calls can be counted."""
    return MagicMock(wraps=store)
