# app/core/security.py
import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, InvalidHashError
from jose import jwt, JWTError

from app.config import settings

# Argon2id 해시
password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """비밀번호 해시"""
    return password_hasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """비밀번호 검증"""
    try:
        return password_hasher.verify(hashed_password, plain_password)
    except (VerifyMismatchError, InvalidHashError):
        return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """JWT 액세스 토큰 생성"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[dict]:
    """JWT 토큰 디코드 (실패 시 None)"""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None


def hash_ip(ip_address: Optional[str]) -> Optional[str]:
    """IP 단방향 해시 (HMAC-SHA256, 원본 IP는 저장하지 않음)"""
    if not ip_address:
        return None
    return hmac.new(settings.ip_hash_salt.encode(), ip_address.encode(), hashlib.sha256).hexdigest()
