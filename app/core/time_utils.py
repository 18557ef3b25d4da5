# app/core/time_utils.py
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """현재 UTC 시각"""
    return datetime.now(timezone.utc)


def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    """naive datetime은 UTC로 간주 (SQLite는 tzinfo를 저장하지 않음)"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
