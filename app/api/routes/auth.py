# app/api/routes/auth.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from datetime import timedelta
from typing import Optional

from app.database import get_db
from app.models.audit_log import AuditAction
from app.models.user import User, UserRole
from app.schemas.user import UserCreate, UserLogin, UserResponse, AuthResponse
from app.core.exceptions import AuthenticationError, DuplicateAccountError
from app.core.logger import logger
from app.core.security import hash_password, verify_password, create_access_token
from app.api.deps import get_current_user, get_client_ip_hash
from app.services import audit_service
from app.config import settings

router = APIRouter(prefix="/api/v1/auth", tags=["인증"])

def _auth_response(user: User) -> AuthResponse:
    """JWT 토큰 생성 후 응답"""
    access_token_expires = timedelta(minutes=settings.access_token_expire_minutes)
    access_token = create_access_token(
        data={"sub": user.id, "role": user.role.value},
        expires_delta=access_token_expires
    )
    return AuthResponse(
        user=user_to_response(user),
        access_token=access_token,
        expires_in=settings.access_token_expire_minutes * 60
    )

def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role.value,
        is_active=user.is_active,
        created_at=user.created_at
    )

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserCreate,
    ip_hash: Optional[str] = Depends(get_client_ip_hash),
    db: Session = Depends(get_db)
):
    """회원가입 (일반 유저 권한만 부여)"""
    # 이메일 중복 체크
    existing_user = db.query(User).filter(User.email == user_data.email).first()
    if existing_user:
        raise DuplicateAccountError()

    # 새 유저 생성
    new_user = User(
        email=user_data.email,
        name=user_data.name,
        hashed_password=hash_password(user_data.password),
        role=UserRole.USER
    )

    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateAccountError()
    db.refresh(new_user)

    logger.info(f"회원가입: {new_user.id}")

    audit_service.record(db, AuditAction.USER_REGISTERED, new_user.id, {"email": new_user.email}, ip_hash=ip_hash)

    return _auth_response(new_user)

@router.post("/login", response_model=AuthResponse)
def login(
    user_data: UserLogin,
    ip_hash: Optional[str] = Depends(get_client_ip_hash),
    db: Session = Depends(get_db)
):
    """로그인"""
    # 유저 조회
    user = db.query(User).filter(User.email == user_data.email).first()

    # 비밀번호 검증
    if not user or not user.is_active or not verify_password(user_data.password, user.hashed_password):
        raise AuthenticationError("이메일 또는 비밀번호가 올바르지 않습니다")

    audit_service.record(db, AuditAction.USER_LOGGED_IN, user.id, {"email": user.email}, ip_hash=ip_hash)

    return _auth_response(user)

@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """현재 유저 정보"""
    return user_to_response(current_user)
