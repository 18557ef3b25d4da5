# app/models/audit_log.py
from sqlalchemy import Column, String, Integer, DateTime, Index, Enum as SQLEnum, JSON, event
from sqlalchemy.sql import func
from app.database import Base
from app.core.exceptions import ImmutableRecordError
import enum

class AuditAction(str, enum.Enum):
    """감사 대상 작업 (닫힌 목록)"""
    ELECTION_CREATED = "election_created"
    ELECTION_UPDATED = "election_updated"
    ELECTION_DELETED = "election_deleted"
    ELECTION_ACTIVATED = "election_activated"
    ELECTION_CLOSED = "election_closed"
    VOTE_CAST = "vote_cast"
    USER_REGISTERED = "user_registered"
    USER_LOGGED_IN = "user_logged_in"

class AuditLog(Base):
    """감사 로그 모델 (추가만 가능)"""
    __tablename__ = "audit_logs"

    # 기본 필드
    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(SQLEnum(AuditAction), nullable=False)
    actor_id = Column(String, nullable=False)

    # 관련 선거 (삭제된 선거도 남도록 FK 없이 저장 + 제목 스냅샷)
    election_id = Column(String, nullable=True)
    election_title = Column(String(200), nullable=True)

    # 상세 정보
    details = Column(JSON, nullable=False, default=dict)
    ip_hash = Column(String(64), nullable=True)

    # 타임스탬프 (서버에서 할당)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_audit_logs_actor_created", "actor_id", "created_at"),
        Index("idx_audit_logs_election_created", "election_id", "created_at"),
        Index("idx_audit_logs_action_created", "action", "created_at"),
    )

    def __repr__(self):
        return f"<AuditLog {self.action} by {self.actor_id}>"


@event.listens_for(AuditLog, "before_update")
def _reject_audit_update(mapper, connection, target):
    raise ImmutableRecordError("감사 로그는 수정할 수 없습니다")


@event.listens_for(AuditLog, "before_delete")
def _reject_audit_delete(mapper, connection, target):
    raise ImmutableRecordError("감사 로그는 삭제할 수 없습니다")
