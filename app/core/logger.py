from loguru import logger
import sys
import os

from app.config import settings

# 로그 디렉토리 생성
LOG_DIR = settings.log_dir
os.makedirs(LOG_DIR, exist_ok=True)

# 요청 밖(CLI, 시작 로그)에서도 포맷이 깨지지 않도록 기본값
logger.configure(extra={"request_id": "-"})

# 기본 로거 제거
logger.remove()

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[request_id]}</magenta> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[request_id]} | {name}:{function}:{line} - {message}"

# 콘솔 출력
logger.add(
    sys.stdout,
    colorize=True,
    format=CONSOLE_FORMAT,
    level="DEBUG" if settings.debug else "INFO"
)

# 전체 로그
logger.add(
    f"{LOG_DIR}/ballot.log",
    rotation="10 MB",
    retention="30 days",
    compression="zip",
    format=FILE_FORMAT,
    level="DEBUG" if settings.debug else "INFO"
)

# 운영 채널: 에러만 (감사 로그 기록 실패, 5xx)
logger.add(
    f"{LOG_DIR}/error.log",
    rotation="10 MB",
    retention="90 days",
    compression="zip",
    format=FILE_FORMAT,
    level="ERROR",
    backtrace=True,
    diagnose=settings.debug
)
