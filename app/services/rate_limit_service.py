# app/services/rate_limit_service.py
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from datetime import datetime, timedelta, timezone
from tenacity import retry, stop_after_attempt, retry_if_exception_type

from app.config import settings
from app.core.exceptions import RateLimitExceededError
from app.core.logger import logger
from app.core.time_utils import ensure_aware
from app.models.rate_limit import RateLimitCounter

# 제한 범위
VOTE_SCOPE = "vote"

def window_start_for(now: datetime, window_seconds: int) -> datetime:
    """고정 윈도우 시작 시각"""
    epoch = int(ensure_aware(now).timestamp())
    return datetime.fromtimestamp(epoch - epoch % window_seconds, tz=timezone.utc)

@retry(
    stop=stop_after_attempt(3),  # 동시 첫 요청 경합만 재시도
    retry=retry_if_exception_type(IntegrityError),
    reraise=True
)
def _increment(db: Session, scope: str, client_key: str, window_start: datetime) -> int:
    """카운터 증가 후 현재 값 반환"""
    updated = db.query(RateLimitCounter)\
        .filter(
            RateLimitCounter.scope == scope,
            RateLimitCounter.client_key == client_key,
            RateLimitCounter.window_start == window_start
        )\
        .update({RateLimitCounter.count: RateLimitCounter.count + 1}, synchronize_session=False)

    if not updated:
        # 이 윈도우의 첫 요청 (다른 요청이 먼저 생성했으면 재시도 시 증가)
        try:
            db.add(RateLimitCounter(scope=scope, client_key=client_key, window_start=window_start, count=1))
            db.commit()
            return 1
        except IntegrityError:
            db.rollback()
            raise

    db.commit()
    counter = db.query(RateLimitCounter.count)\
        .filter(
            RateLimitCounter.scope == scope,
            RateLimitCounter.client_key == client_key,
            RateLimitCounter.window_start == window_start
        )\
        .scalar()
    return counter or 0

def check_vote_limit(db: Session, client_key: str, now: datetime) -> dict:
    """
    투표 요청 제한 체크
    - 클라이언트(해시된 IP)당 윈도우마다 vote_rate_limit회
    - 초과 시 429
    """
    limit = settings.vote_rate_limit
    window_seconds = settings.vote_rate_window_seconds
    window_start = window_start_for(now, window_seconds)

    used = _increment(db, VOTE_SCOPE, client_key, window_start)

    if used > limit:
        reset_at = window_start + timedelta(seconds=window_seconds)
        retry_after = max(int((reset_at - ensure_aware(now)).total_seconds()), 1)
        logger.warning(f"투표 요청 제한 초과: client={client_key[:12]} used={used}/{limit}")
        raise RateLimitExceededError(
            "투표 시도가 너무 많습니다. 잠시 후 다시 시도해주세요",
            retry_after=retry_after
        )

    return {
        "limit": limit,
        "used": used,
        "remaining": limit - used,
        "window_seconds": window_seconds
    }
