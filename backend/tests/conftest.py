"""
Test configuration and fixtures.

Each test gets its own in-memory SQLite database (foreign keys enforced) and
an upload directory under tmp_path.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.core.database import build_engine, get_db, init_db
from src.core.dependencies import get_file_store
from src.main import app
from src.schemas.report import ReportMetadata
from src.services.access_control import AccessControlEvaluator
from src.services.identity_service import IdentityService
from src.services.record_store import RecordStore
from src.services.report_service import ReportLifecycleManager
from src.services.sharing_service import SharingManager
from src.services.storage_service import LocalFileStore
from src.services.vitals_service import VitalsService


@pytest.fixture
def engine():
    test_engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def file_store(upload_dir):
    return LocalFileStore(str(upload_dir))


@pytest.fixture
def store(db_session):
    return RecordStore(db_session)


@pytest.fixture
def access(store):
    return AccessControlEvaluator(store)


@pytest.fixture
def identities(store):
    return IdentityService(store)


@pytest.fixture
def reports(store, access, file_store):
    return ReportLifecycleManager(store, access, file_store)


@pytest.fixture
def vitals(store, access):
    return VitalsService(store, access)


@pytest.fixture
def sharing(store, access, identities):
    return SharingManager(store, access, identities)


@pytest.fixture
def make_identity(store):
    """Create an account directly in the store and return its Identity."""

    def _make(email: str, full_name: str = "Test User"):
        user = store.create_user(email, "not-a-real-hash", full_name)
        return IdentityService.identity_for(user)

    return _make


@pytest.fixture
def upload(reports):
    """Upload a small PNG report for an identity and return the create result."""

    def _upload(identity, title="Chest X-Ray", report_type="X-Ray",
                report_date="2024-03-01", vitals=None, content=b"\x89PNG fake"):
        metadata = ReportMetadata(
            title=title, report_type=report_type, report_date=report_date
        )
        return asyncio.run(
            reports.upload_report(
                identity,
                metadata,
                content=content,
                filename="scan.png",
                content_type="image/png",
                vitals=vitals,
            )
        )

    return _upload


@pytest.fixture
def client(session_factory, file_store):
    """Test client with the database and file store swapped for test ones."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_store] = lambda: file_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def settings():
    """Settings fixture for testing."""
    from src.core.config import get_settings

    return get_settings()
