# app/config.py
from typing import List
from pydantic_settings import BaseSettings
from pydantic import field_validator

class Settings(BaseSettings):
    """환경변수 설정"""

    # API 기본 설정
    app_name: str = "Ballot API"
    debug: bool = False

    # Database
    database_url: str

    # JWT
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # 투표 제한 (고정 윈도우)
    vote_rate_limit: int = 20
    vote_rate_window_seconds: int = 3600

    # IP 해시 키 (필수, 없으면 IPv4 전체 대입으로 역산 가능)
    ip_hash_salt: str

    # 감사 로그 페이지 크기 상한
    audit_page_limit_max: int = 200

    # 로그 디렉토리
    log_dir: str = "logs"

    @field_validator('secret_key')
    def validate_secret_key(cls, v):
        if len(v) < 32:
            raise ValueError('SECRET_KEY는 최소 32자 이상이어야 합니다')
        return v

    @field_validator('ip_hash_salt')
    def validate_ip_hash_salt(cls, v):
        if len(v) < 16:
            raise ValueError('IP_HASH_SALT는 최소 16자 이상이어야 합니다')
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False

# 싱글톤 인스턴스
settings = Settings()
