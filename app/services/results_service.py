# app/services/results_service.py
from datetime import datetime
from typing import Dict, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import AccessDeniedError
from app.models.election import Election, ElectionStatus
from app.models.user import User
from app.models.vote import Vote
from app.services import lifecycle_service


def can_view_results(election: Election, status: ElectionStatus, requester: Optional[User]) -> bool:
    """결과 공개 여부: 공개 설정 / 종료 / 관리자"""
    if election.is_public_results:
        return True
    if status == ElectionStatus.CLOSED:
        return True
    return requester is not None and requester.is_admin


def tally_votes(db: Session, election_id: str) -> Dict[str, int]:
    """후보별 득표 수 (GROUP BY)"""
    rows = db.query(Vote.candidate_id, func.count(Vote.id))\
        .filter(Vote.election_id == election_id)\
        .group_by(Vote.candidate_id)\
        .all()
    return {candidate_id: count for candidate_id, count in rows}


def compute_results(db: Session, election: Election, requester: Optional[User], now: datetime) -> dict:
    """
    선거 결과 집계
    - 모든 후보를 표시 순서대로 포함 (득표 없으면 0)
    - 득표순 정렬은 호출하는 쪽에서
    """
    status = lifecycle_service.refresh_status(db, election, now)

    if not can_view_results(election, status, requester):
        raise AccessDeniedError("아직 결과를 볼 수 없습니다. 선거 종료 후 공개됩니다")

    tally = tally_votes(db, election.id)

    results = [
        {
            "candidate_id": candidate["candidate_id"],
            "name": candidate["name"],
            "description": candidate.get("description", ""),
            "image_url": candidate.get("image_url", ""),
            "votes": tally.get(candidate["candidate_id"], 0)
        }
        for candidate in election.ordered_candidates()
    ]

    return {
        "election": {
            "id": election.id,
            "title": election.title,
            "status": status.value
        },
        "results": results,
        "total_votes": sum(r["votes"] for r in results),
        "last_updated": now
    }
