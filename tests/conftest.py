import threading
import uuid

import pytest
from fastapi.testclient import TestClient

from hostel_allocation.config.database import Database, build_engine
from hostel_allocation.config.settings import Settings
from hostel_allocation.main import create_app
from hostel_allocation.repositories.inventory.asset_registry import AssetRegistry
from hostel_allocation.repositories.resident.resident_directory import ResidentDirectory
from hostel_allocation.services.allocation.assignment_coordinator import AssignmentCoordinator
from hostel_allocation.services.allocation.side_effect_dispatcher import SideEffectDispatcher


class RecordingAuditSink:
    """In-memory audit sink that can be told to fail a number of times first."""

    def __init__(self, failures: int = 0):
        self.entries = []
        self.attempts = 0
        self.failures_left = failures
        self._lock = threading.Lock()

    def append(self, entry):
        with self._lock:
            self.attempts += 1
            if self.failures_left:
                self.failures_left -= 1
                raise RuntimeError("audit store unavailable")
            self.entries.append(entry)


class RecordingNotificationSink:

    def __init__(self, failures: int = 0):
        self.sent = []
        self.attempts = 0
        self.failures_left = failures
        self._lock = threading.Lock()

    def enqueue(self, notification):
        with self._lock:
            self.attempts += 1
            if self.failures_left:
                self.failures_left -= 1
                raise RuntimeError("notification queue unavailable")
            self.sent.append(notification)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'allocation.db'}",
        ENVIRONMENT="test",
        LOG_LEVEL="WARNING",
        SIDE_EFFECT_WORKERS=2,
        SIDE_EFFECT_MAX_RETRIES=3,
        SIDE_EFFECT_RETRY_DELAY=0,
        FRONTEND_BASE_URL="https://hostel.example",
    )


@pytest.fixture
def database(settings):
    db = Database(build_engine(settings))
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def session(database):
    s = database.session()
    yield s
    s.close()


@pytest.fixture
def audit_sink():
    return RecordingAuditSink()


@pytest.fixture
def notification_sink():
    return RecordingNotificationSink()


@pytest.fixture
def dispatcher(audit_sink, notification_sink, settings):
    d = SideEffectDispatcher(
        audit_sink,
        notification_sink,
        max_workers=2,
        max_retries=3,
        retry_delay=0,
        link_builder=settings.resident_room_url,
    )
    yield d
    d.shutdown()


@pytest.fixture
def coordinator(session, dispatcher):
    return AssignmentCoordinator(session, dispatcher)


@pytest.fixture
def make_asset(session):
    def _make(**overrides):
        data = {
            "category": "bed",
            "item_name": f"Bed {uuid.uuid4().hex[:4]}",
            "location": "Block A",
            "floor": "1",
            "room_label": "101",
        }
        data.update(overrides)
        asset = AssetRegistry(session).create_asset(data)
        session.commit()
        return asset

    return _make


@pytest.fixture
def make_resident(session):
    def _make(**overrides):
        data = {
            "external_resident_code": f"STU{uuid.uuid4().hex[:8].upper()}",
            "first_name": "Asha",
            "last_name": "Rao",
        }
        data.update(overrides)
        resident = ResidentDirectory(session).enroll(data)
        session.commit()
        return resident

    return _make


@pytest.fixture
def client(settings, database):
    app = create_app(settings, database, configure_logging=False)
    with TestClient(app) as c:
        yield c
