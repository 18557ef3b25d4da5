import pytest
from loguru import logger

from app.config import settings
from app.core.exceptions import ImmutableRecordError
from app.models.audit_log import AuditAction, AuditLog
from app.services import audit_service


def test_record_appends_entry(db):
    entry = audit_service.record(
        db, AuditAction.USER_LOGGED_IN, "user-1", {"email": "a@example.com"}, ip_hash="abc"
    )

    assert entry is not None
    stored = db.query(AuditLog).one()
    assert stored.action == AuditAction.USER_LOGGED_IN
    assert stored.actor_id == "user-1"
    assert stored.details == {"email": "a@example.com"}
    assert stored.ip_hash == "abc"
    assert stored.created_at is not None


def test_record_swallows_and_logs_failure(db, monkeypatch):
    errors = []
    handler_id = logger.add(errors.append, level="ERROR")

    def broken(**kwargs):
        raise RuntimeError("storage unavailable")

    monkeypatch.setattr(audit_service, "AuditLog", broken)
    try:
        result = audit_service.record(db, AuditAction.VOTE_CAST, "user-1")
    finally:
        logger.remove(handler_id)

    assert result is None
    assert any("storage unavailable" in str(message) for message in errors)


def test_query_filters(db):
    audit_service.record(db, AuditAction.ELECTION_CREATED, "admin-1", election_id="e1")
    audit_service.record(db, AuditAction.VOTE_CAST, "user-1", election_id="e1")
    audit_service.record(db, AuditAction.VOTE_CAST, "user-2", election_id="e2")

    entries, total = audit_service.query(db, action=AuditAction.VOTE_CAST)
    assert total == 2
    assert {e.actor_id for e in entries} == {"user-1", "user-2"}

    entries, total = audit_service.query(db, election_id="e1")
    assert total == 2

    entries, total = audit_service.query(db, actor_id="user-2", election_id="e2")
    assert total == 1
    assert entries[0].action == AuditAction.VOTE_CAST


def test_query_is_newest_first_and_paginated(db):
    for i in range(5):
        audit_service.record(db, AuditAction.USER_LOGGED_IN, f"user-{i}")

    first_page, total = audit_service.query(db, page=1, limit=2)
    second_page, _ = audit_service.query(db, page=2, limit=2)
    last_page, _ = audit_service.query(db, page=3, limit=2)

    assert total == 5
    assert [e.actor_id for e in first_page] == ["user-4", "user-3"]
    assert [e.actor_id for e in second_page] == ["user-2", "user-1"]
    assert [e.actor_id for e in last_page] == ["user-0"]


def test_query_limit_is_capped(db, monkeypatch):
    monkeypatch.setattr(settings, "audit_page_limit_max", 3)
    for i in range(5):
        audit_service.record(db, AuditAction.USER_LOGGED_IN, f"user-{i}")

    entries, total = audit_service.query(db, limit=1000)
    assert len(entries) == 3
    assert total == 5
    assert audit_service.normalize_page(0, 0) == (1, 1)


def test_entries_are_append_only(db):
    entry = audit_service.record(db, AuditAction.USER_REGISTERED, "user-1")

    entry.actor_id = "someone-else"
    with pytest.raises(ImmutableRecordError):
        db.commit()
    db.rollback()

    db.delete(entry)
    with pytest.raises(ImmutableRecordError):
        db.commit()
    db.rollback()

    assert db.query(AuditLog).one().actor_id == "user-1"
