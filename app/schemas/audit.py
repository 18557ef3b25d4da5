# app/schemas/audit.py
from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional

class AuditLogResponse(BaseModel):
    """감사 로그 항목"""
    id: int
    action: str
    actor_id: str
    election_id: Optional[str] = None
    election_title: Optional[str] = None
    details: dict
    ip_hash: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

class AuditLogPage(BaseModel):
    """감사 로그 페이지 응답"""
    logs: List[AuditLogResponse]
    pagination: Pagination
