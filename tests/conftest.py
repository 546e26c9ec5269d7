"""Pytest configuration and fixtures."""

import pytest
import sqlalchemy as sa
from sqlalchemy.orm import Session

from tests.models import Base


@pytest.fixture
def engine():
    """In-memory SQLite engine with every test table created."""
    engine = sa.create_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session
