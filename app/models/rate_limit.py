# app/models/rate_limit.py
from sqlalchemy import Column, String, Integer, DateTime, UniqueConstraint
from app.database import Base

class RateLimitCounter(Base):
    """고정 윈도우 요청 카운터 (프로세스 간 공유)"""
    __tablename__ = "rate_limit_counters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    scope = Column(String(50), nullable=False)         # 예: "vote"
    client_key = Column(String(64), nullable=False)    # 해시된 클라이언트 IP
    window_start = Column(DateTime(timezone=True), nullable=False)
    count = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("scope", "client_key", "window_start", name="uq_rate_limit_window"),
    )

    def __repr__(self):
        return f"<RateLimitCounter {self.scope}:{self.client_key} {self.count}>"
