from datetime import datetime, timedelta, timezone

import pytest

from conftest import election_payload
from app.core.exceptions import StateConflictError, ValidationFailedError
from app.core.time_utils import ensure_aware
from app.models.audit_log import AuditAction, AuditLog
from app.models.election import Election, ElectionStatus
from app.schemas.election import CandidateIn, ElectionUpdate
from app.services import lifecycle_service

T0 = datetime(2030, 5, 1, 9, 0, tzinfo=timezone.utc)
START = T0 + timedelta(hours=1)
END = T0 + timedelta(days=1)


def transient_election(activated_at=T0, closed_at=None):
    return Election(
        title="Board vote",
        description="Quarterly board vote",
        start_at=START,
        end_at=END,
        candidates=[],
        status=ElectionStatus.DRAFT,
        activated_at=activated_at,
        closed_at=closed_at,
    )


def test_draft_never_auto_promotes():
    """An election that was never activated stays draft at any time."""
    election = transient_election(activated_at=None)
    for now in (T0, START, START + timedelta(hours=2), END + timedelta(days=30)):
        assert lifecycle_service.derive_status(election, now) == ElectionStatus.DRAFT


def test_activated_election_follows_schedule():
    election = transient_election()
    assert lifecycle_service.derive_status(election, START - timedelta(seconds=1)) == ElectionStatus.DRAFT
    assert lifecycle_service.derive_status(election, START) == ElectionStatus.ACTIVE
    assert lifecycle_service.derive_status(election, END - timedelta(microseconds=1)) == ElectionStatus.ACTIVE
    assert lifecycle_service.derive_status(election, END) == ElectionStatus.CLOSED


def test_status_is_monotonic_in_time():
    """draft -> active -> closed, never backwards."""
    election = transient_election()
    rank = {ElectionStatus.DRAFT: 0, ElectionStatus.ACTIVE: 1, ElectionStatus.CLOSED: 2}

    previous = -1
    now = T0
    while now <= END + timedelta(hours=2):
        current = rank[lifecycle_service.derive_status(election, now)]
        assert current >= previous
        previous = current
        now += timedelta(minutes=17)


def test_manual_closure_is_pinned():
    election = transient_election(closed_at=START + timedelta(minutes=5))
    assert lifecycle_service.derive_status(election, START) == ElectionStatus.CLOSED
    assert lifecycle_service.derive_status(election, START - timedelta(hours=1)) == ElectionStatus.CLOSED


def test_naive_datetimes_are_treated_as_utc():
    election = transient_election()
    election.start_at = START.replace(tzinfo=None)
    election.end_at = END.replace(tzinfo=None)
    assert lifecycle_service.derive_status(election, START + timedelta(minutes=1)) == ElectionStatus.ACTIVE


def test_accepting_votes_requires_active_window():
    election = transient_election()
    assert not lifecycle_service.is_accepting_votes(election, START - timedelta(seconds=1))
    assert lifecycle_service.is_accepting_votes(election, START)
    assert not lifecycle_service.is_accepting_votes(election, END)


def test_validate_schedule_rejects_past_start():
    with pytest.raises(ValidationFailedError) as exc_info:
        lifecycle_service.validate_schedule(T0 - timedelta(minutes=1), END, T0)
    assert exc_info.value.errors[0]["field"] == "start_at"


def test_validate_schedule_rejects_end_before_start():
    with pytest.raises(ValidationFailedError) as exc_info:
        lifecycle_service.validate_schedule(START, START, T0)
    assert exc_info.value.errors[0]["field"] == "end_at"


def test_build_candidates_assigns_ids_and_order():
    candidates = lifecycle_service.build_candidates([
        CandidateIn(name=" Alice "),
        CandidateIn(name="Bob", candidate_id="bob", order=7),
    ])
    assert candidates[0] == {
        "candidate_id": "candidate_1",
        "name": "Alice",
        "description": "",
        "image_url": "",
        "order": 0,
    }
    assert candidates[1]["candidate_id"] == "bob"
    assert candidates[1]["order"] == 7


def test_build_candidates_rejects_duplicates():
    with pytest.raises(ValidationFailedError):
        lifecycle_service.build_candidates([
            CandidateIn(name="Alice", candidate_id="x"),
            CandidateIn(name="Bob", candidate_id="x"),
        ])


def test_generated_ids_skip_supplied_ids():
    candidates = lifecycle_service.build_candidates([
        CandidateIn(name="Yuna"),
        CandidateIn(name="Xavier", candidate_id="candidate_2"),
        CandidateIn(name="Zoe"),
        CandidateIn(name="Walt", candidate_id="candidate_4"),
        CandidateIn(name="Vera"),
    ])

    ids = [c["candidate_id"] for c in candidates]
    assert ids == ["candidate_1", "candidate_2", "candidate_3", "candidate_4", "candidate_5"]

    swapped = lifecycle_service.build_candidates([
        CandidateIn(name="Xavier", candidate_id="candidate_2"),
        CandidateIn(name="Yuna"),
    ])
    assert [c["candidate_id"] for c in swapped] == ["candidate_2", "candidate_3"]


def test_build_candidates_requires_two():
    with pytest.raises(ValidationFailedError):
        lifecycle_service.build_candidates([CandidateIn(name="Alice")])


def test_create_election_starts_in_draft_and_is_audited(db, admin):
    election = lifecycle_service.create_election(db, election_payload(START, END), admin, T0)

    assert election.status == ElectionStatus.DRAFT
    assert election.activated_at is None
    assert election.candidate_ids() == ["A", "B"]

    entry = db.query(AuditLog).filter(AuditLog.action == AuditAction.ELECTION_CREATED).one()
    assert entry.election_id == election.id
    assert entry.actor_id == admin.id
    assert entry.election_title == "Student Council"


def test_refresh_status_persists_change(db, admin):
    election = lifecycle_service.create_election(db, election_payload(START, END), admin, T0)
    lifecycle_service.activate_election(db, election, admin, T0)

    status = lifecycle_service.refresh_status(db, election, START + timedelta(minutes=1))
    db.expire_all()

    assert status == ElectionStatus.ACTIVE
    assert db.get(Election, election.id).status == ElectionStatus.ACTIVE


def test_update_only_while_draft(db, admin):
    election = lifecycle_service.create_election(db, election_payload(START, END), admin, T0)

    updated = lifecycle_service.update_election(
        db, election, ElectionUpdate(title="Renamed election"), admin, T0
    )
    assert updated.title == "Renamed election"
    assert updated.candidate_ids() == ["A", "B"]

    lifecycle_service.activate_election(db, election, admin, T0)
    with pytest.raises(StateConflictError):
        lifecycle_service.update_election(
            db, election, ElectionUpdate(title="Too late now"), admin, START + timedelta(minutes=1)
        )


def test_update_revalidates_schedule(db, admin):
    election = lifecycle_service.create_election(db, election_payload(START, END), admin, T0)
    with pytest.raises(ValidationFailedError):
        lifecycle_service.update_election(
            db, election, ElectionUpdate(end_at=START - timedelta(minutes=1)), admin, T0
        )


def test_delete_only_while_draft(db, admin):
    election = lifecycle_service.create_election(db, election_payload(START, END), admin, T0)
    lifecycle_service.activate_election(db, election, admin, T0)

    with pytest.raises(StateConflictError):
        lifecycle_service.delete_election(db, election, admin, START + timedelta(minutes=1))

    other = lifecycle_service.create_election(db, election_payload(START, END, title="Other vote"), admin, T0)
    other_id = other.id
    lifecycle_service.delete_election(db, other, admin, T0)

    assert db.get(Election, other_id) is None
    entry = db.query(AuditLog).filter(AuditLog.action == AuditAction.ELECTION_DELETED).one()
    # 삭제 후에도 제목 스냅샷이 남음
    assert entry.election_id == other_id
    assert entry.election_title == "Other vote"


def test_activate_twice_is_a_conflict(db, admin):
    election = lifecycle_service.create_election(db, election_payload(START, END), admin, T0)
    lifecycle_service.activate_election(db, election, admin, T0)
    with pytest.raises(StateConflictError):
        lifecycle_service.activate_election(db, election, admin, T0)


def test_activate_after_end_is_a_conflict(db, admin):
    election = lifecycle_service.create_election(db, election_payload(START, END), admin, T0)
    with pytest.raises(StateConflictError):
        lifecycle_service.activate_election(db, election, admin, END)


def test_close_pins_end_at(db, admin):
    election = lifecycle_service.create_election(db, election_payload(START, END), admin, T0)
    lifecycle_service.activate_election(db, election, admin, T0)

    closed_at = START + timedelta(hours=2)
    lifecycle_service.close_election(db, election, admin, closed_at)

    assert election.status == ElectionStatus.CLOSED
    assert ensure_aware(election.end_at) == closed_at
    assert ensure_aware(election.closed_at) == closed_at
    assert lifecycle_service.derive_status(election, closed_at) == ElectionStatus.CLOSED

    with pytest.raises(StateConflictError):
        lifecycle_service.close_election(db, election, admin, closed_at + timedelta(minutes=1))


def test_close_requires_active(db, admin):
    election = lifecycle_service.create_election(db, election_payload(START, END), admin, T0)
    with pytest.raises(StateConflictError):
        lifecycle_service.close_election(db, election, admin, T0)


def test_list_elections_filters_by_derived_status(db, admin):
    running = lifecycle_service.create_election(db, election_payload(START, END, title="Running"), admin, T0)
    lifecycle_service.activate_election(db, running, admin, T0)
    lifecycle_service.create_election(db, election_payload(START, END, title="Unpublished"), admin, T0)

    now = START + timedelta(minutes=10)
    active = lifecycle_service.list_elections(db, now, status=ElectionStatus.ACTIVE)
    drafts = lifecycle_service.list_elections(db, now, status=ElectionStatus.DRAFT)

    assert [e.title for e in active] == ["Running"]
    assert [e.title for e in drafts] == ["Unpublished"]
    assert [e.title for e in lifecycle_service.list_elections(db, now, timeframe="active")] == ["Running"]
    assert lifecycle_service.list_elections(db, now, timeframe="past") == []
