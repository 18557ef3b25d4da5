# app/api/deps.py
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.core.exceptions import AccessDeniedError, AuthenticationError
from app.core.security import decode_access_token, hash_ip

# JWT Bearer 토큰 스킴 (토큰 없으면 None, 인증 필수 여부는 의존성에서 판단)
security = HTTPBearer(auto_error=False)

def _user_from_token(token: Optional[HTTPAuthorizationCredentials], db: Session) -> Optional[User]:
    if token is None:
        return None

    # 토큰 디코드
    payload = decode_access_token(token.credentials)
    if payload is None:
        raise AuthenticationError()

    user_id: str = payload.get("sub")
    if user_id is None:
        raise AuthenticationError()

    # DB에서 유저 조회
    user = db.query(User).filter(User.id == user_id).first()
    if user is None or not user.is_active:
        raise AuthenticationError()

    return user

def get_current_user(
    token: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """JWT 토큰으로 현재 유저 가져오기"""
    user = _user_from_token(token, db)
    if user is None:
        raise AuthenticationError("로그인이 필요합니다")
    return user

def get_optional_user(
    token: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """토큰이 있으면 유저, 없으면 None (결과 조회 등)"""
    return _user_from_token(token, db)

def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """관리자 전용"""
    if not current_user.is_admin:
        raise AccessDeniedError("관리자 권한이 필요합니다")
    return current_user

def get_client_ip_hash(request: Request) -> Optional[str]:
    """요청 IP 해시"""
    ip_address = request.client.host if request.client else None
    return hash_ip(ip_address)
