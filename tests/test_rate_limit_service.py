from datetime import datetime, timedelta, timezone

import pytest

from app.config import settings
from app.core.exceptions import RateLimitExceededError
from app.models.rate_limit import RateLimitCounter
from app.services import rate_limit_service

NOW = datetime(2030, 1, 1, 12, 30, 15, tzinfo=timezone.utc)


def test_window_start_is_aligned():
    assert rate_limit_service.window_start_for(NOW, 3600) == datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert rate_limit_service.window_start_for(NOW, 60) == datetime(2030, 1, 1, 12, 30, tzinfo=timezone.utc)


def test_limit_per_client_and_window(db, monkeypatch):
    monkeypatch.setattr(settings, "vote_rate_limit", 2)

    assert rate_limit_service.check_vote_limit(db, "client-a", NOW)["remaining"] == 1
    assert rate_limit_service.check_vote_limit(db, "client-a", NOW)["remaining"] == 0

    with pytest.raises(RateLimitExceededError) as exc_info:
        rate_limit_service.check_vote_limit(db, "client-a", NOW)
    assert 0 < exc_info.value.retry_after <= settings.vote_rate_window_seconds

    # 다른 클라이언트 / 다음 윈도우는 별도 카운트
    assert rate_limit_service.check_vote_limit(db, "client-b", NOW)["used"] == 1
    next_window = NOW + timedelta(seconds=settings.vote_rate_window_seconds)
    assert rate_limit_service.check_vote_limit(db, "client-a", next_window)["used"] == 1

    assert db.query(RateLimitCounter).count() == 3
