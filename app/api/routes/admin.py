# app/api/routes/admin.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.models.audit_log import AuditAction
from app.models.user import User
from app.schemas.election import ElectionCreate, ElectionUpdate, ElectionMessageResponse
from app.schemas.audit import AuditLogPage, AuditLogResponse, Pagination
from app.api.deps import require_admin
from app.api.routes.elections import election_to_response
from app.core.time_utils import utcnow
from app.services import lifecycle_service, audit_service

router = APIRouter(prefix="/api/v1/admin", tags=["관리자"])

@router.post("/elections", response_model=ElectionMessageResponse, status_code=status.HTTP_201_CREATED)
def create_election(
    data: ElectionCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """선거 생성 (draft)"""
    election = lifecycle_service.create_election(db, data, current_user, utcnow())
    return ElectionMessageResponse(message="선거가 생성되었습니다", election=election_to_response(election))

@router.put("/elections/{election_id}", response_model=ElectionMessageResponse)
def update_election(
    election_id: str,
    data: ElectionUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """선거 수정 (시작 전만 가능)"""
    election = lifecycle_service.get_election(db, election_id)
    election = lifecycle_service.update_election(db, election, data, current_user, utcnow())
    return ElectionMessageResponse(message="선거가 수정되었습니다", election=election_to_response(election))

@router.delete("/elections/{election_id}", response_model=ElectionMessageResponse)
def delete_election(
    election_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """선거 삭제 (시작 전만 가능)"""
    election = lifecycle_service.get_election(db, election_id)
    lifecycle_service.delete_election(db, election, current_user, utcnow())
    return ElectionMessageResponse(message="선거가 삭제되었습니다")

@router.post("/elections/{election_id}/activate", response_model=ElectionMessageResponse)
def activate_election(
    election_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """선거 활성화 (시작 시각이 되면 투표 시작)"""
    election = lifecycle_service.get_election(db, election_id)
    election = lifecycle_service.activate_election(db, election, current_user, utcnow())
    return ElectionMessageResponse(message="선거가 활성화되었습니다", election=election_to_response(election))

@router.post("/elections/{election_id}/close", response_model=ElectionMessageResponse)
def close_election(
    election_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """선거 강제 종료"""
    election = lifecycle_service.get_election(db, election_id)
    election = lifecycle_service.close_election(db, election, current_user, utcnow())
    return ElectionMessageResponse(message="선거가 종료되었습니다", election=election_to_response(election))

@router.get("/audit", response_model=AuditLogPage)
def get_audit_logs(
    action: Optional[AuditAction] = None,
    election_id: Optional[str] = None,
    actor_id: Optional[str] = None,
    page: int = 1,
    limit: int = 50,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """감사 로그 조회 (최신순)"""
    entries, total = audit_service.query(
        db,
        action=action,
        election_id=election_id,
        actor_id=actor_id,
        page=page,
        limit=limit
    )

    # 서비스에서 보정된 값 기준
    page, limit = audit_service.normalize_page(page, limit)
    return AuditLogPage(
        logs=[
            AuditLogResponse(
                id=entry.id,
                action=entry.action.value,
                actor_id=entry.actor_id,
                election_id=entry.election_id,
                election_title=entry.election_title,
                details=entry.details or {},
                ip_hash=entry.ip_hash,
                created_at=entry.created_at
            )
            for entry in entries
        ],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            pages=(total + limit - 1) // limit
        )
    )
