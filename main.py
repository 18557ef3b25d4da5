# main.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.api.routes import auth, elections, admin
from app.core.exceptions import AuthenticationError, ElectionPlatformError, RateLimitExceededError
from app.core.logging_middleware import log_requests
from app.core.logger import logger

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug
)

# ===== 로깅 미들웨어 추가 (가장 먼저) =====
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    return await log_requests(request, call_next)
# ==========================================

# 요청 크기 제한 미들웨어
MAX_REQUEST_SIZE = 1 * 1024 * 1024

@app.middleware("http")
async def limit_request_size(request: Request, call_next):
    """요청 크기 제한"""
    if request.method in ["POST", "PUT", "PATCH"]:
        content_length = request.headers.get("content-length")
        if content_length and int(content_length) > MAX_REQUEST_SIZE:
            return JSONResponse(
                status_code=413,
                content={"detail": f"요청 크기가 너무 큽니다. 최대: {MAX_REQUEST_SIZE // 1024 // 1024}MB"}
            )
    return await call_next(request)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ===== 예외 핸들러 =====
@app.exception_handler(ElectionPlatformError)
async def election_platform_error_handler(request: Request, exc: ElectionPlatformError):
    """도메인 예외 -> JSON 응답"""
    if exc.status_code >= 500:
        logger.opt(exception=exc).error(f"서버 오류: {request.method} {request.url.path}")
        return JSONResponse(status_code=exc.status_code, content={"detail": "서버 오류가 발생했습니다"})

    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(exc, RateLimitExceededError) and exc.retry_after:
        headers = {"Retry-After": str(exc.retry_after)}

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """요청 검증 실패 -> 400 + 필드별 상세"""
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"][1:]) or str(error["loc"][0]),
            "message": error["msg"]
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"detail": "입력값 검증에 실패했습니다", "errors": errors}
    )

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    """예상치 못한 오류 (상세는 서버 로그에만)"""
    logger.opt(exception=exc).error(f"처리되지 않은 오류: {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "서버 오류가 발생했습니다"})
# ======================

# 라우터 등록
app.include_router(auth.router)
app.include_router(elections.router)
app.include_router(admin.router)

# ===== 시작 로그 추가 =====
@app.on_event("startup")
async def startup_event():
    logger.info(f"{settings.app_name} 서버 시작")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"{settings.app_name} 서버 종료")
# ==========================

@app.get("/health")
def health_check():
    """헬스체크"""
    return {
        "status": "healthy",
        "service": settings.app_name
    }
