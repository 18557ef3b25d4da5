# app/core/exceptions.py
"""도메인 예외 정의

모든 비즈니스 규칙 위반은 여기 정의된 예외로 발생시키고,
main.py에 등록된 핸들러가 HTTP 응답으로 변환한다.
"""
from typing import List, Optional
from fastapi import status


class ElectionPlatformError(Exception):
    """애플리케이션 예외의 기본 클래스"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "요청을 처리할 수 없습니다"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message}


# --- 검증 ---

class ValidationFailedError(ElectionPlatformError):
    """입력값이 형식/범위를 벗어남 (필드 단위 상세 포함)"""
    default_message = "입력값 검증에 실패했습니다"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[dict]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        return body


class InvalidCandidateError(ValidationFailedError):
    """선거에 존재하지 않는 후보 ID"""
    default_message = "유효하지 않은 후보입니다"


# --- 상태 충돌 ---

class StateConflictError(ElectionPlatformError):
    """현재 선거 상태에서 허용되지 않는 작업"""
    default_message = "현재 선거 상태에서는 허용되지 않는 작업입니다"


class ElectionNotActiveError(StateConflictError):
    """진행 중이 아닌 선거에 투표 시도"""
    default_message = "현재 진행 중인 선거가 아닙니다"


# --- 조회 / 중복 / 권한 ---

class NotFoundError(ElectionPlatformError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "리소스를 찾을 수 없습니다"


class DuplicateVoteError(ElectionPlatformError):
    """(선거, 투표자) 유니크 제약 위반"""
    status_code = status.HTTP_409_CONFLICT
    default_message = "이미 투표한 선거입니다"


class DuplicateAccountError(ElectionPlatformError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "이미 사용 중인 이메일입니다"


class AuthenticationError(ElectionPlatformError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "인증 정보가 올바르지 않습니다"


class AccessDeniedError(ElectionPlatformError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "권한이 없습니다"


class RateLimitExceededError(ElectionPlatformError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "요청이 너무 많습니다. 잠시 후 다시 시도해주세요"

    def __init__(self, message: Optional[str] = None, retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after


# --- 불변 레코드 ---

class ImmutableRecordError(ElectionPlatformError):
    """투표/감사 로그 수정·삭제 시도 (프로그래밍 오류)"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "생성 후 수정할 수 없는 레코드입니다"
