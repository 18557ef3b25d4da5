from fastapi import Request
from app.core.logger import logger
import time
import uuid

# 헬스체크는 로그를 남기지 않음
QUIET_PATHS = {"/health"}

async def log_requests(request: Request, call_next):
    """요청 단위 로깅 (X-Request-ID로 로그 묶기)"""
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
    quiet = request.url.path in QUIET_PATHS
    start_time = time.perf_counter()

    with logger.contextualize(request_id=request_id):
        if not quiet:
            logger.info(f"{request.method} {request.url.path}")

        try:
            response = await call_next(request)
        except Exception:
            elapsed = (time.perf_counter() - start_time) * 1000
            logger.exception(f"{request.method} {request.url.path} 처리 실패 - {elapsed:.2f}ms")
            raise

        elapsed = (time.perf_counter() - start_time) * 1000
        if not quiet:
            # 4xx는 경고, 5xx는 에러
            if response.status_code >= 500:
                log = logger.error
            elif response.status_code >= 400:
                log = logger.warning
            else:
                log = logger.info
            log(f"{request.method} {request.url.path} - {response.status_code} - {elapsed:.2f}ms")

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.2f}"
        return response
