# app/schemas/election.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

class CandidateIn(BaseModel):
    """후보 입력"""
    candidate_id: Optional[str] = Field(None, min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    image_url: str = ""
    order: Optional[int] = None

class CandidateOut(BaseModel):
    """후보 응답"""
    candidate_id: str
    name: str
    description: str = ""
    image_url: str = ""
    order: int = 0

class ElectionCreate(BaseModel):
    """선거 생성 요청"""
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=10, max_length=2000)
    start_at: datetime
    end_at: datetime
    candidates: List[CandidateIn] = Field(..., min_length=2)
    is_public_results: bool = False

class ElectionUpdate(BaseModel):
    """선거 수정 요청 (보낸 필드만 변경)"""
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, min_length=10, max_length=2000)
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    candidates: Optional[List[CandidateIn]] = Field(None, min_length=2)
    is_public_results: Optional[bool] = None

class ElectionResponse(BaseModel):
    """선거 응답"""
    id: str
    title: str
    description: str
    start_at: datetime
    end_at: datetime
    candidates: List[CandidateOut]
    is_public_results: bool
    status: str
    activated_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ElectionListResponse(BaseModel):
    """선거 목록 응답"""
    elections: List[ElectionResponse]

class ElectionMessageResponse(BaseModel):
    """관리자 작업 응답"""
    message: str
    election: Optional[ElectionResponse] = None

class CandidateResult(BaseModel):
    """후보별 득표"""
    candidate_id: str
    name: str
    description: str = ""
    image_url: str = ""
    votes: int

class ElectionSummary(BaseModel):
    id: str
    title: str
    status: str

class ElectionResultsResponse(BaseModel):
    """선거 결과 응답"""
    election: ElectionSummary
    results: List[CandidateResult]
    total_votes: int
    last_updated: datetime
