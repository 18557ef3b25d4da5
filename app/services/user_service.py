# app/services/user_service.py
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationFailedError
from app.core.logger import logger
from app.core.security import hash_password
from app.models.user import User, UserRole


def provision_admin(db: Session, email: str, name: Optional[str] = None, password: Optional[str] = None) -> Tuple[User, bool]:
    """
    관리자 계정 부트스트랩 (요청 경로 밖에서만 호출)
    - 기존 유저면 admin으로 승격
    - 없으면 새로 생성 (비밀번호 필수)
    반환: (유저, 새로 생성 여부)
    """
    user = db.query(User).filter(User.email == email).first()

    if user:
        user.role = UserRole.ADMIN
        if password:
            user.hashed_password = hash_password(password)
        db.commit()
        logger.info(f"관리자 승격: {user.id}")
        return user, False

    if not password or len(password) < 8:
        raise ValidationFailedError("새 관리자 계정은 8자 이상의 비밀번호가 필요합니다")

    user = User(
        email=email,
        name=name or email.split("@")[0],
        hashed_password=hash_password(password),
        role=UserRole.ADMIN
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"관리자 생성: {user.id}")
    return user, True
