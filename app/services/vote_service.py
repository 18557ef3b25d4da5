# app/services/vote_service.py
from datetime import datetime
from typing import Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import DuplicateVoteError, ElectionNotActiveError, InvalidCandidateError
from app.core.logger import logger
from app.core.time_utils import ensure_aware
from app.models.audit_log import AuditAction
from app.models.election import Election
from app.models.user import User
from app.models.vote import Vote
from app.services import audit_service, lifecycle_service


def find_existing_vote(db: Session, election_id: str, voter_id: str) -> Optional[Vote]:
    """기존 투표 조회"""
    return db.query(Vote)\
        .filter(Vote.election_id == election_id, Vote.voter_id == voter_id)\
        .first()


def cast_vote(
    db: Session,
    election: Election,
    voter: User,
    candidate_id: str,
    ip_hash: Optional[str],
    user_agent: Optional[str],
    now: datetime
) -> Vote:
    """
    투표
    1. 상태 재계산 및 저장
    2. 진행 중인지 확인
    3. 후보 ID 확인 (정확히 일치)
    4. 기존 투표 빠른 확인
    5. 저장 - (선거, 투표자) 유니크 제약이 최종 판정
    """
    lifecycle_service.refresh_status(db, election, now)

    if not lifecycle_service.is_accepting_votes(election, now):
        raise ElectionNotActiveError()

    if candidate_id not in election.candidate_ids():
        raise InvalidCandidateError()

    # 대부분의 중복은 여기서 걸러짐
    if find_existing_vote(db, election.id, voter.id):
        raise DuplicateVoteError()

    vote = Vote(
        election_id=election.id,
        voter_id=voter.id,
        candidate_id=candidate_id,
        ip_hash=ip_hash,
        user_agent=user_agent,
        submitted_at=ensure_aware(now)
    )
    db.add(vote)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # 동시 요청이 빠른 확인을 함께 통과한 경우만 중복으로 판정
        if find_existing_vote(db, election.id, voter.id) is None:
            raise
        logger.warning(f"중복 투표 경합 차단: election={election.id} voter={voter.id}")
        raise DuplicateVoteError()
    db.refresh(vote)

    logger.info(f"투표 완료: election={election.id} voter={voter.id}")

    # 감사 로그 실패는 투표 결과에 영향 없음
    audit_service.record(
        db,
        AuditAction.VOTE_CAST,
        voter.id,
        {"election_id": election.id, "candidate_id": candidate_id},
        election_id=election.id,
        ip_hash=ip_hash,
        election_title=election.title
    )
    return vote


def get_vote_status(db: Session, election_id: str, voter_id: str) -> Tuple[bool, Optional[datetime]]:
    """투표 여부 및 투표 시각"""
    vote = find_existing_vote(db, election_id, voter_id)
    if not vote:
        return False, None
    return True, vote.submitted_at
