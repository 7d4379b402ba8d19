# synergysphere/dependencies.py

from typing import Generator, Optional
from fastapi import Depends
from sqlalchemy.orm import Session
from synergysphere.core.security import oauth2_scheme, verify_access_token
from synergysphere.core.exceptions import UnauthenticatedError
from synergysphere.core.policy import Principal
from synergysphere.models.user import User
from synergysphere.database import SessionLocal

def get_db() -> Generator[Session, None, None]:
    """
    Создает и возвращает сессию базы данных, гарантирует закрытие после использования.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Декодирует access-токен и получает пользователя из базы.
    """
    if not token:
        raise UnauthenticatedError("Not authorized to access this route")
    payload = verify_access_token(token)
    if payload is None:
        raise UnauthenticatedError("Not authorized, token failed")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise UnauthenticatedError("Not authorized, token failed")
    user = db.get(User, user_id)
    if user is None:
        raise UnauthenticatedError("Not authorized, user not found")
    return user

def get_principal(current_user: User = Depends(get_current_user)) -> Principal:
    """
    Principal для политики доступа; обработчики передают его в CRUD явно.
    """
    return Principal(id=current_user.id, role=current_user.role)
