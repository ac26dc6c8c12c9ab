"""Shared pytest fixtures and configuration."""

import os
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Generator
from unittest.mock import MagicMock

import pytest

# Set test environment variables before any config is loaded
os.environ.setdefault("SUPABASE_URL", "")
os.environ.setdefault("SUPABASE_ANON_KEY", "")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "sitepass-tests.log"))

from sitepass.auth import SessionManager
from sitepass.database import DatabaseManager
from sitepass.logger import StructuredLogger
from sitepass.models.contractor import Contractor
from sitepass.models.enums import UserRole
from sitepass.models.user import User
from sitepass.repositories.contractor_repository import ContractorRepository
from sitepass.schema import initialize_schema


@pytest.fixture(autouse=True)
def utc_local_time(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Pin the process time zone so local-time formatting is deterministic."""
    monkeypatch.setenv("TZ", "UTC")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def logger() -> StructuredLogger:
    return StructuredLogger(name="sitepass.tests")


@pytest.fixture
def mock_supabase_client() -> MagicMock:
    """Mock Supabase client; query builders chain automatically."""
    return MagicMock()


@pytest.fixture
def db(logger: StructuredLogger, mock_supabase_client: MagicMock) -> Generator[DatabaseManager, None, None]:
    """In-memory database manager with the mock client attached."""
    manager = DatabaseManager(
        supabase_url="",
        supabase_key="",
        sqlite_path=Path(":memory:"),
        logger=logger,
    )
    manager._supabase = mock_supabase_client
    initialize_schema(manager.sqlite, logger)
    yield manager
    manager.close()


@pytest.fixture
def offline_db(logger: StructuredLogger) -> Generator[DatabaseManager, None, None]:
    """Database manager without a Supabase client."""
    manager = DatabaseManager(
        supabase_url="",
        supabase_key="",
        sqlite_path=Path(":memory:"),
        logger=logger,
    )
    initialize_schema(manager.sqlite, logger)
    yield manager
    manager.close()


@pytest.fixture
def contractor_repo(db: DatabaseManager, logger: StructuredLogger) -> ContractorRepository:
    return ContractorRepository(db=db, logger=logger)


def _session_for(role: UserRole, email: str) -> SessionManager:
    session = SessionManager()
    session.set_current_user(User(id=f"user-{role.value}", email=email, role=role))
    return session


@pytest.fixture
def anonymous_session() -> SessionManager:
    return SessionManager()


@pytest.fixture
def admin_session() -> SessionManager:
    return _session_for(UserRole.ADMIN, "admin@example.com")


@pytest.fixture
def teamleader_session() -> SessionManager:
    return _session_for(UserRole.TEAMLEADER, "lead@example.com")


@pytest.fixture
def display_session() -> SessionManager:
    return _session_for(UserRole.DISPLAY, "screen@example.com")


@pytest.fixture
def make_contractor() -> Callable[..., Contractor]:
    """Factory for contractor rows; keyword overrides win."""
    counter = {"next": 1}

    def _make(**overrides: Any) -> Contractor:
        data: dict[str, Any] = {
            "id": counter["next"],
            "first_name": "Jane",
            "surname": "Doe",
            "company": "Acme Rail",
            "phone": "07700900123",
            "areas": ["Maint-1"],
            "status": "pending",
            "signed_in_at": "2024-12-09T08:00:00+00:00",
        }
        data.update(overrides)
        counter["next"] += 1
        return Contractor.model_validate(data)

    return _make
