# app/models/vote.py
from sqlalchemy import Column, String, DateTime, ForeignKey, Index, UniqueConstraint, event
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from app.core.exceptions import ImmutableRecordError
import uuid

class Vote(Base):
    """투표 모델 (생성 후 수정/삭제 불가)"""
    __tablename__ = "votes"

    # 기본 필드
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    election_id = Column(String, ForeignKey("elections.id"), nullable=False)
    voter_id = Column(String, ForeignKey("users.id"), nullable=False)

    # 선택한 후보
    candidate_id = Column(String, nullable=False)

    # 제출 정보 (IP는 해시만 저장)
    ip_hash = Column(String(64), nullable=True)
    user_agent = Column(String, nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=False)

    # 타임스탬프
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # 관계
    election = relationship("Election", backref="votes")
    voter = relationship("User", backref="votes")

    __table_args__ = (
        # 선거당 1인 1표 (최종 방어선)
        UniqueConstraint("election_id", "voter_id", name="uq_votes_election_voter"),
        Index("idx_votes_election_candidate", "election_id", "candidate_id"),
    )

    def __repr__(self):
        return f"<Vote {self.id} for Election {self.election_id}>"


@event.listens_for(Vote, "before_update")
def _reject_vote_update(mapper, connection, target):
    raise ImmutableRecordError("투표는 생성 후 수정할 수 없습니다")


@event.listens_for(Vote, "before_delete")
def _reject_vote_delete(mapper, connection, target):
    raise ImmutableRecordError("투표는 삭제할 수 없습니다")
