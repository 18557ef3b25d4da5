# app/services/lifecycle_service.py
"""선거 생명주기 관리

status 컬럼은 시간으로부터 계산되는 캐시 값이다.
판단이 필요한 모든 경로는 refresh_status()로 다시 계산한 뒤 결정한다.
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, StateConflictError, ValidationFailedError
from app.core.logger import logger
from app.core.time_utils import ensure_aware
from app.models.audit_log import AuditAction
from app.models.election import Election, ElectionStatus
from app.models.user import User
from app.schemas.election import CandidateIn, ElectionCreate, ElectionUpdate
from app.services import audit_service


def derive_status(election: Election, now: datetime) -> ElectionStatus:
    """저장된 일정과 현재 시각으로 상태 계산 (순수 함수)"""
    # 수동 종료는 시간과 무관하게 고정
    if election.closed_at is not None:
        return ElectionStatus.CLOSED

    # 활성화 전 draft는 시간이 지나도 자동 승격되지 않음
    if election.activated_at is None:
        return ElectionStatus.DRAFT

    now = ensure_aware(now)
    if now < ensure_aware(election.start_at):
        return ElectionStatus.DRAFT
    if now < ensure_aware(election.end_at):
        return ElectionStatus.ACTIVE
    return ElectionStatus.CLOSED


def refresh_status(db: Session, election: Election, now: datetime) -> ElectionStatus:
    """상태 재계산 후 바뀌었으면 즉시 저장"""
    new_status = derive_status(election, now)
    if election.status != new_status:
        logger.info(f"선거 상태 변경: {election.id} {election.status} -> {new_status.value}")
        election.status = new_status
        db.commit()
    return new_status


def is_accepting_votes(election: Election, now: datetime) -> bool:
    """투표 가능 여부: 상태가 active이고 [start_at, end_at) 구간 안"""
    if derive_status(election, now) != ElectionStatus.ACTIVE:
        return False
    now = ensure_aware(now)
    return ensure_aware(election.start_at) <= now < ensure_aware(election.end_at)


def validate_schedule(start_at: datetime, end_at: datetime, now: datetime, require_future_start: bool = True) -> None:
    """일정 검증"""
    start_at, end_at, now = ensure_aware(start_at), ensure_aware(end_at), ensure_aware(now)

    errors = []
    if require_future_start and start_at < now:
        errors.append({"field": "start_at", "message": "시작 시각은 과거일 수 없습니다"})
    if end_at <= start_at:
        errors.append({"field": "end_at", "message": "종료 시각은 시작 시각 이후여야 합니다"})

    if errors:
        raise ValidationFailedError("선거 일정이 올바르지 않습니다", errors=errors)


def _generate_candidate_id(index: int, taken: set) -> str:
    """candidate_<순번>, 이미 쓰인 ID면 번호를 올림"""
    number = index + 1
    while f"candidate_{number}" in taken:
        number += 1
    return f"candidate_{number}"


def build_candidates(candidates: List[CandidateIn]) -> List[dict]:
    """후보 목록 검증 및 저장 형태로 변환"""
    if len(candidates) < 2:
        raise ValidationFailedError(
            "후보는 최소 2명이어야 합니다",
            errors=[{"field": "candidates", "message": "후보는 최소 2명이어야 합니다"}]
        )

    result = []
    seen = set()
    # 직접 지정한 ID는 자동 생성 ID보다 우선
    supplied = {c.candidate_id for c in candidates if c.candidate_id}
    for index, candidate in enumerate(candidates):
        name = candidate.name.strip()
        if not name:
            raise ValidationFailedError(
                "후보 이름은 필수입니다",
                errors=[{"field": f"candidates.{index}.name", "message": "후보 이름은 필수입니다"}]
            )

        candidate_id = candidate.candidate_id or _generate_candidate_id(index, supplied | seen)
        if candidate_id in seen:
            raise ValidationFailedError(
                "후보 ID가 중복되었습니다",
                errors=[{"field": f"candidates.{index}.candidate_id", "message": f"중복된 후보 ID: {candidate_id}"}]
            )
        seen.add(candidate_id)

        result.append({
            "candidate_id": candidate_id,
            "name": name,
            "description": candidate.description or "",
            "image_url": candidate.image_url or "",
            "order": candidate.order if candidate.order is not None else index,
        })

    return result


def get_election(db: Session, election_id: str) -> Election:
    """선거 조회 (없으면 NotFoundError)"""
    election = db.query(Election).filter(Election.id == election_id).first()
    if not election:
        raise NotFoundError("선거를 찾을 수 없습니다")
    return election


def list_elections(
    db: Session,
    now: datetime,
    status: Optional[ElectionStatus] = None,
    timeframe: Optional[str] = None
) -> List[Election]:
    """선거 목록 (상태 재계산 후 필터)"""
    elections = db.query(Election).order_by(Election.start_at.desc()).all()

    now_aware = ensure_aware(now)
    result = []
    for election in elections:
        current = refresh_status(db, election, now)

        if status and current != status:
            continue
        if timeframe == "upcoming" and not ensure_aware(election.start_at) > now_aware:
            continue
        if timeframe == "active" and not is_accepting_votes(election, now):
            continue
        if timeframe == "past" and not ensure_aware(election.end_at) <= now_aware:
            continue

        result.append(election)

    return result


def _ensure_draft(db: Session, election: Election, now: datetime, action: str) -> None:
    if refresh_status(db, election, now) != ElectionStatus.DRAFT:
        raise StateConflictError(f"시작되었거나 종료된 선거는 {action}할 수 없습니다")


def create_election(db: Session, data: ElectionCreate, creator: User, now: datetime) -> Election:
    """선거 생성 (draft 상태)"""
    validate_schedule(data.start_at, data.end_at, now, require_future_start=True)
    candidates = build_candidates(data.candidates)

    election = Election(
        title=data.title.strip(),
        description=data.description.strip(),
        start_at=ensure_aware(data.start_at),
        end_at=ensure_aware(data.end_at),
        candidates=candidates,
        is_public_results=data.is_public_results,
        status=ElectionStatus.DRAFT,
        created_by=creator.id
    )
    db.add(election)
    db.commit()
    db.refresh(election)

    logger.info(f"선거 생성: {election.id} ({election.title}) by {creator.id}")

    audit_service.record(
        db,
        AuditAction.ELECTION_CREATED,
        creator.id,
        {"title": election.title, "candidate_count": len(candidates)},
        election_id=election.id,
        election_title=election.title
    )
    return election


def update_election(db: Session, election: Election, data: ElectionUpdate, actor: User, now: datetime) -> Election:
    """선거 수정 (draft 상태에서만)"""
    _ensure_draft(db, election, now, "수정")

    changes = data.model_dump(exclude_unset=True)

    new_start = changes.get("start_at")
    new_end = changes.get("end_at")
    if new_start is not None or new_end is not None:
        # 새로 지정한 시작 시각만 미래여야 함
        validate_schedule(
            new_start or election.start_at,
            new_end or election.end_at,
            now,
            require_future_start=new_start is not None
        )

    if changes.get("title") is not None:
        election.title = data.title.strip()
    if changes.get("description") is not None:
        election.description = data.description.strip()
    if changes.get("start_at") is not None:
        election.start_at = ensure_aware(data.start_at)
    if changes.get("end_at") is not None:
        election.end_at = ensure_aware(data.end_at)
    if data.candidates is not None:
        election.candidates = build_candidates(data.candidates)
    if data.is_public_results is not None:
        election.is_public_results = data.is_public_results

    db.commit()
    db.refresh(election)

    logger.info(f"선거 수정: {election.id} fields={sorted(changes.keys())}")

    audit_service.record(
        db,
        AuditAction.ELECTION_UPDATED,
        actor.id,
        {"title": election.title, "fields": sorted(changes.keys())},
        election_id=election.id,
        election_title=election.title
    )
    return election


def delete_election(db: Session, election: Election, actor: User, now: datetime) -> None:
    """선거 삭제 (draft 상태에서만)"""
    _ensure_draft(db, election, now, "삭제")

    election_id, title = election.id, election.title
    db.delete(election)
    db.commit()

    logger.info(f"선거 삭제: {election_id} ({title}) by {actor.id}")

    audit_service.record(
        db,
        AuditAction.ELECTION_DELETED,
        actor.id,
        {"title": title},
        election_id=election_id,
        election_title=title
    )


def activate_election(db: Session, election: Election, actor: User, now: datetime) -> Election:
    """명시적 활성화 (draft -> 일정에 따라 active)"""
    if election.activated_at is not None or election.closed_at is not None:
        raise StateConflictError("이미 활성화되었거나 종료된 선거입니다")
    if ensure_aware(now) >= ensure_aware(election.end_at):
        raise StateConflictError("종료 시각이 지난 선거는 활성화할 수 없습니다")

    election.activated_at = ensure_aware(now)
    db.commit()
    status = refresh_status(db, election, now)
    db.refresh(election)

    logger.info(f"선거 활성화: {election.id} -> {status.value}")

    audit_service.record(
        db,
        AuditAction.ELECTION_ACTIVATED,
        actor.id,
        {"title": election.title, "status": status.value},
        election_id=election.id,
        election_title=election.title
    )
    return election


def close_election(db: Session, election: Election, actor: User, now: datetime) -> Election:
    """관리자 강제 종료 (end_at을 종료 시각으로 고정)"""
    current = refresh_status(db, election, now)
    if current == ElectionStatus.CLOSED:
        raise StateConflictError("이미 종료된 선거입니다")
    if current != ElectionStatus.ACTIVE:
        # 시작 전 선거는 종료 대신 수정/삭제
        raise StateConflictError("진행 중인 선거만 종료할 수 있습니다")

    now = ensure_aware(now)
    election.status = ElectionStatus.CLOSED
    election.closed_at = now
    # 종료 시각은 앞당기기만 함
    if now < ensure_aware(election.end_at):
        election.end_at = now
    db.commit()
    db.refresh(election)

    logger.info(f"선거 수동 종료: {election.id} by {actor.id}")

    audit_service.record(
        db,
        AuditAction.ELECTION_CLOSED,
        actor.id,
        {"title": election.title},
        election_id=election.id,
        election_title=election.title
    )
    return election
