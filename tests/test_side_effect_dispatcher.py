import threading

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select

from hostel_allocation.core.monitoring import registry as metrics_registry
from hostel_allocation.models.audit.audit_log import AuditLog, AuditLogImmutableError
from hostel_allocation.models.base.enums import AllocationReason, AssetState
from hostel_allocation.models.notification.notification import Notification
from hostel_allocation.schemas.allocation.allocation import AllocationChange
from hostel_allocation.services.allocation.assignment_coordinator import AssignmentCoordinator
from hostel_allocation.services.allocation.side_effect_dispatcher import SideEffectDispatcher
from hostel_allocation.services.allocation.sinks import SqlAuditSink, SqlNotificationSink

from .conftest import RecordingAuditSink, RecordingNotificationSink


def counter(name):
    return metrics_registry.get_sample_value(name) or 0.0


def make_change(**overrides):
    data = {
        "resident_id": "resident-1",
        "previous_asset_id": None,
        "new_asset_id": "asset-1",
        "actor_id": "warden-1",
        "reason": AllocationReason.ASSIGN,
    }
    data.update(overrides)
    return AllocationChange(**data)


def build_dispatcher(audit_sink, notification_sink, **kwargs):
    kwargs.setdefault("max_retries", 3)
    kwargs.setdefault("retry_delay", 0)
    return SideEffectDispatcher(audit_sink, notification_sink, max_workers=2, **kwargs)


def test_change_action_names():
    assert make_change().action == "asset_assigned"
    assert make_change(previous_asset_id="asset-0").action == "asset_moved"
    assert make_change(previous_asset_id="asset-1", new_asset_id=None).action == "asset_released"


def test_allocation_change_is_immutable():
    change = make_change()

    with pytest.raises(PydanticValidationError):
        change.resident_id = "someone-else"


def test_transient_audit_failure_is_retried():
    audit_sink = RecordingAuditSink(failures=2)
    dispatcher = build_dispatcher(audit_sink, RecordingNotificationSink())
    try:
        outcome = dispatcher.dispatch(make_change()).result(timeout=5)
    finally:
        dispatcher.shutdown()

    assert outcome.audit_written
    assert audit_sink.attempts == 3
    assert len(audit_sink.entries) == 1


def test_audit_failure_is_counted_and_notifications_still_sent():
    audit_sink = RecordingAuditSink(failures=10)
    notification_sink = RecordingNotificationSink()
    dispatcher = build_dispatcher(audit_sink, notification_sink)
    before = counter("allocation_audit_failures_total")
    try:
        outcome = dispatcher.dispatch(make_change()).result(timeout=5)
    finally:
        dispatcher.shutdown()

    assert not outcome.audit_written
    assert audit_sink.attempts == 3
    assert outcome.notifications_sent == 1
    assert len(notification_sink.sent) == 1
    assert counter("allocation_audit_failures_total") == before + 1


def test_notification_failure_is_isolated():
    audit_sink = RecordingAuditSink()
    notification_sink = RecordingNotificationSink(failures=10)
    dispatcher = build_dispatcher(audit_sink, notification_sink)
    before = counter("allocation_notification_failures_total")
    try:
        outcome = dispatcher.dispatch(make_change()).result(timeout=5)
    finally:
        dispatcher.shutdown()

    assert outcome.audit_written
    assert outcome.notifications_failed == 1
    assert not outcome.succeeded
    assert counter("allocation_notification_failures_total") == before + 1


def test_notifications_can_be_disabled():
    notification_sink = RecordingNotificationSink()
    dispatcher = build_dispatcher(RecordingAuditSink(), notification_sink, notifications_enabled=False)
    try:
        outcome = dispatcher.dispatch(make_change()).result(timeout=5)
    finally:
        dispatcher.shutdown()

    assert outcome.audit_written
    assert notification_sink.attempts == 0


def test_dispatch_does_not_block_caller():
    release = threading.Event()

    class SlowAuditSink(RecordingAuditSink):
        def append(self, entry):
            release.wait(timeout=5)
            super().append(entry)

    audit_sink = SlowAuditSink()
    dispatcher = build_dispatcher(audit_sink, RecordingNotificationSink())
    try:
        future = dispatcher.dispatch(make_change())
        assert not future.done()
        assert dispatcher.pending_count == 1
        assert not dispatcher.flush(timeout=0.05)

        release.set()
        assert dispatcher.flush(timeout=5)
        assert len(audit_sink.entries) == 1
    finally:
        release.set()
        dispatcher.shutdown()


def test_failing_audit_never_rolls_back_allocation(session, make_asset, make_resident):
    dispatcher = build_dispatcher(RecordingAuditSink(failures=100), RecordingNotificationSink())
    coordinator = AssignmentCoordinator(session, dispatcher)
    asset = make_asset()
    resident = make_resident()
    try:
        result = coordinator.assign(resident.id, asset.id)
        assert dispatcher.flush(timeout=5)
    finally:
        dispatcher.shutdown()

    assert result.changed
    assert coordinator.assets.get(asset.id).state == AssetState.OCCUPIED
    assert coordinator.residents.get(resident.id).assigned_asset_id == asset.id


def test_sql_sinks_write_rows(database, session, make_asset, make_resident):
    dispatcher = build_dispatcher(
        SqlAuditSink(database),
        SqlNotificationSink(database),
        link_builder=lambda rid: f"https://hostel.example/residents/{rid}/room",
    )
    coordinator = AssignmentCoordinator(session, dispatcher)
    asset = make_asset()
    resident = make_resident()
    try:
        coordinator.assign(resident.id, asset.id, actor_id="warden-9")
        assert dispatcher.flush(timeout=5)
    finally:
        dispatcher.shutdown()

    with database.session_scope() as check:
        [log] = check.execute(select(AuditLog)).scalars().all()
        assert log.actor_id == "warden-9"
        assert log.target_type == "Resident"
        assert log.target_id == resident.id
        assert log.details["new_asset_id"] == asset.id

        [notification] = check.execute(select(Notification)).scalars().all()
        assert notification.recipient_id == resident.id
        assert notification.delivered
        assert notification.category == "allocation"
        assert notification.link == f"https://hostel.example/residents/{resident.id}/room"
        assert set(Notification.__table__.columns.keys()) == {
            "id", "created_at", "recipient_id", "message", "category", "link", "delivered",
        }


def test_audit_rows_are_append_only(database):
    dispatcher = build_dispatcher(SqlAuditSink(database), RecordingNotificationSink())
    try:
        dispatcher.dispatch(make_change()).result(timeout=5)
    finally:
        dispatcher.shutdown()

    s = database.session()
    try:
        log = s.execute(select(AuditLog)).scalar_one()
        log.description = "rewritten"
        with pytest.raises(AuditLogImmutableError):
            s.flush()
        s.rollback()

        log = s.execute(select(AuditLog)).scalar_one()
        s.delete(log)
        with pytest.raises(AuditLogImmutableError):
            s.flush()
    finally:
        s.rollback()
        s.close()
