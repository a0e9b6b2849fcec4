"""
Shared fixtures: stores backed by a throwaway SQLite file
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from clubhouse.core.db import Base
from clubhouse.core.errors import RemoteError
from clubhouse.services.access_gate import SessionRegistry
from clubhouse.services.data_service import LocalObjectStorage, SqlDataService
from clubhouse.services.member_store import MemberStore
from clubhouse.services.reservation_store import ReservationStore

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_club.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture
def data_service(tmp_path):
    """SQL data service with uploads written under tmp_path"""
    Base.metadata.create_all(bind=engine)
    storage = LocalObjectStorage(str(tmp_path / "uploads"), "http://testserver")
    try:
        yield SqlDataService(TestingSessionLocal, storage)
    finally:
        Base.metadata.drop_all(bind=engine)

@pytest.fixture
def reservation_store(data_service):
    return ReservationStore(data_service)

@pytest.fixture
def member_store(data_service):
    return MemberStore(data_service)

@pytest.fixture
def registry(data_service):
    return SessionRegistry(data_service)

class FailingDataService:
    """Every call fails the way an unreachable backend does"""

    storage = None

    def __getattr__(self, name):
        def call(*args, **kwargs):
            raise RemoteError("connection refused")
        return call
