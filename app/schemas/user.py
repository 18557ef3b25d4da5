# app/schemas/user.py
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime

class UserCreate(BaseModel):
    """회원가입 요청"""
    email: EmailStr
    name: str = Field(..., min_length=2, max_length=50)
    password: str = Field(..., min_length=8, max_length=100)

class UserLogin(BaseModel):
    """로그인 요청"""
    email: EmailStr
    password: str

class UserResponse(BaseModel):
    """유저 응답"""
    id: str
    email: str
    name: str
    role: str
    is_active: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True

class AuthResponse(BaseModel):
    """가입/로그인 응답 (유저 + JWT)"""
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
    expires_in: int
