# app/services/audit_service.py
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from app.config import settings
from app.core.logger import logger
from app.models.audit_log import AuditAction, AuditLog


def record(
    db: Session,
    action: AuditAction,
    actor_id: str,
    details: Optional[dict] = None,
    election_id: Optional[str] = None,
    ip_hash: Optional[str] = None,
    election_title: Optional[str] = None
) -> Optional[AuditLog]:
    """
    감사 로그 추가 (fire-and-forget)
    - 실패해도 호출한 작업의 결과에 영향 없음
    - 실패는 에러 로그(운영 채널)로 남김
    """
    try:
        entry = AuditLog(
            action=action,
            actor_id=actor_id,
            election_id=election_id,
            election_title=election_title,
            details=details or {},
            ip_hash=ip_hash
        )
        db.add(entry)
        db.commit()
        return entry
    except Exception:
        db.rollback()
        logger.exception(
            f"감사 로그 기록 실패: action={action.value} actor={actor_id} election={election_id}"
        )
        return None


def normalize_page(page: int, limit: int) -> Tuple[int, int]:
    """page는 1 이상, limit은 1 ~ audit_page_limit_max"""
    return max(page, 1), min(max(limit, 1), settings.audit_page_limit_max)


def query(
    db: Session,
    action: Optional[AuditAction] = None,
    election_id: Optional[str] = None,
    actor_id: Optional[str] = None,
    page: int = 1,
    limit: int = 50
) -> Tuple[List[AuditLog], int]:
    """감사 로그 조회 (필터 + 최신순 + 페이지네이션)"""
    page, limit = normalize_page(page, limit)

    base = db.query(AuditLog)
    if action:
        base = base.filter(AuditLog.action == action)
    if election_id:
        base = base.filter(AuditLog.election_id == election_id)
    if actor_id:
        base = base.filter(AuditLog.actor_id == actor_id)

    total = base.count()

    # 페이지네이션 계산
    offset = (page - 1) * limit

    entries = base\
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())\
        .offset(offset)\
        .limit(limit)\
        .all()

    return entries, total
