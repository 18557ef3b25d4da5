# app/models/election.py
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Index, Enum as SQLEnum, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import uuid
import enum

class ElectionStatus(str, enum.Enum):
    """선거 상태 (시간으로부터 계산되는 캐시 값)"""
    DRAFT = "draft"     # 준비 중 / 시작 전
    ACTIVE = "active"   # 투표 진행 중
    CLOSED = "closed"   # 종료

class Election(Base):
    """선거 모델"""
    __tablename__ = "elections"

    # 기본 필드
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")

    # 일정
    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=False)

    # 후보 목록 (선거에 종속된 값)
    # [{"candidate_id": "...", "name": "...", "description": "", "image_url": "", "order": 0}, ...]
    candidates = Column(JSON, nullable=False, default=list)

    # 결과 공개 설정
    is_public_results = Column(Boolean, nullable=False, default=False)

    # 상태 (lifecycle_service.refresh_status로만 갱신)
    status = Column(SQLEnum(ElectionStatus), nullable=False, default=ElectionStatus.DRAFT)
    activated_at = Column(DateTime(timezone=True), nullable=True)  # 명시적 활성화 시각
    closed_at = Column(DateTime(timezone=True), nullable=True)     # 수동 종료 시각

    # 생성자
    created_by = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # 타임스탬프
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # 관계
    creator = relationship("User", backref="elections")

    __table_args__ = (
        Index("idx_elections_status_schedule", "status", "start_at", "end_at"),
        Index("idx_elections_created_by", "created_by"),
    )

    def candidate_ids(self) -> list:
        return [c["candidate_id"] for c in self.candidates or []]

    def ordered_candidates(self) -> list:
        """표시 순서대로 정렬된 후보"""
        return sorted(self.candidates or [], key=lambda c: c.get("order", 0))

    def __repr__(self):
        return f"<Election {self.title} - {self.status}>"
