# app/api/routes/elections.py
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.models.election import Election, ElectionStatus
from app.models.user import User
from app.schemas.election import (
    CandidateOut,
    ElectionResponse,
    ElectionListResponse,
    ElectionResultsResponse
)
from app.schemas.vote import VoteCreate, VoteCastResponse, VoteResponse, VoteStatusResponse
from app.api.deps import get_current_user, get_optional_user, get_client_ip_hash
from app.core.exceptions import ValidationFailedError
from app.core.time_utils import utcnow
from app.services import lifecycle_service, vote_service, results_service, rate_limit_service

router = APIRouter(prefix="/api/v1/elections", tags=["선거"])

TIMEFRAMES = {"upcoming", "active", "past"}

def election_to_response(election: Election) -> ElectionResponse:
    """선거 모델 -> 응답"""
    return ElectionResponse(
        id=election.id,
        title=election.title,
        description=election.description,
        start_at=election.start_at,
        end_at=election.end_at,
        candidates=[CandidateOut(**c) for c in election.ordered_candidates()],
        is_public_results=election.is_public_results,
        status=election.status.value,
        activated_at=election.activated_at,
        closed_at=election.closed_at,
        created_by=election.created_by,
        created_at=election.created_at
    )

@router.get("", response_model=ElectionListResponse)
def get_elections(
    status_filter: Optional[ElectionStatus] = Query(None, alias="status"),
    filter: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """선거 목록 조회 (인증 불필요)"""
    if filter and filter not in TIMEFRAMES:
        raise ValidationFailedError(
            "filter는 upcoming, active, past 중 하나여야 합니다",
            errors=[{"field": "filter", "message": f"허용: {', '.join(sorted(TIMEFRAMES))}"}]
        )

    elections = lifecycle_service.list_elections(db, utcnow(), status=status_filter, timeframe=filter)
    return ElectionListResponse(elections=[election_to_response(e) for e in elections])

@router.get("/{election_id}", response_model=ElectionResponse)
def get_election(election_id: str, db: Session = Depends(get_db)):
    """선거 상세 조회 (상태 재계산)"""
    election = lifecycle_service.get_election(db, election_id)
    lifecycle_service.refresh_status(db, election, utcnow())
    return election_to_response(election)

@router.post("/{election_id}/vote", response_model=VoteCastResponse, status_code=status.HTTP_201_CREATED)
def cast_vote(
    election_id: str,
    data: VoteCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    ip_hash: Optional[str] = Depends(get_client_ip_hash),
    db: Session = Depends(get_db)
):
    """투표 (로그인 필요, 선거당 1표)"""
    now = utcnow()

    # 클라이언트별 요청 제한
    rate_limit_service.check_vote_limit(db, ip_hash or "unknown", now)

    election = lifecycle_service.get_election(db, election_id)

    vote = vote_service.cast_vote(
        db,
        election,
        current_user,
        data.candidate_id,
        ip_hash=ip_hash,
        user_agent=request.headers.get("user-agent"),
        now=now
    )

    return VoteCastResponse(
        message="투표 완료",
        vote=VoteResponse(
            id=vote.id,
            election_id=vote.election_id,
            candidate_id=vote.candidate_id,
            submitted_at=vote.submitted_at
        )
    )

@router.get("/{election_id}/results", response_model=ElectionResultsResponse)
def get_results(
    election_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """선거 결과 조회 (공개 설정 / 종료 / 관리자)"""
    election = lifecycle_service.get_election(db, election_id)
    return results_service.compute_results(db, election, current_user, utcnow())

@router.get("/{election_id}/vote-status", response_model=VoteStatusResponse)
def get_vote_status(
    election_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """내 투표 여부 조회"""
    has_voted, voted_at = vote_service.get_vote_status(db, election_id, current_user.id)
    return VoteStatusResponse(has_voted=has_voted, voted_at=voted_at)
