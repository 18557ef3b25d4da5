# app/schemas/vote.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

class VoteCreate(BaseModel):
    """투표 요청"""
    candidate_id: str = Field(..., min_length=1, max_length=100)

class VoteResponse(BaseModel):
    """투표 응답"""
    id: str
    election_id: str
    candidate_id: str
    submitted_at: datetime

    class Config:
        from_attributes = True

class VoteCastResponse(BaseModel):
    message: str
    vote: VoteResponse

class VoteStatusResponse(BaseModel):
    """투표 여부 응답"""
    has_voted: bool
    voted_at: Optional[datetime] = None
