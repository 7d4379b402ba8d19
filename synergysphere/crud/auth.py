#synergysphere/crud/auth.py
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from synergysphere.models.user import User
from synergysphere.core.security import (
    create_access_token,
    create_refresh_token,
    verify_refresh_token,
    generate_reset_token,
    get_password_hash,
)
from synergysphere.core.exceptions import InternalError
from synergysphere.core.settings import settings
from typing import Optional, Tuple
from datetime import timedelta, datetime, timezone

import logging

logger = logging.getLogger("SynergySphere.Auth")

def _as_utc(value: datetime) -> datetime:
    # SQLite возвращает naive datetime даже для DateTime(timezone=True)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

def issue_tokens(db: Session, user: User) -> Tuple[str, str]:
    """
    Выдаёт пару (access, refresh). Refresh сохраняется на пользователе,
    предыдущий перестаёт действовать.
    """
    access_token, _ = create_access_token(data={"sub": str(user.id), "role": user.role})
    refresh_token, _ = create_refresh_token(data={"sub": str(user.id)})
    user.refresh_token = refresh_token
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to store refresh token for user {user.id}: {e}")
        raise InternalError("Database error while issuing tokens.")
    logger.info(f"Issued tokens for user {user.id}")
    return access_token, refresh_token

def get_user_by_refresh_token(db: Session, token: str) -> Optional[User]:
    """
    Пользователь по refresh-токену: подпись валидна и токен совпадает с сохранённым.
    """
    payload = verify_refresh_token(token)
    if not payload:
        return None
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None
    user = db.get(User, user_id)
    if not user or user.refresh_token != token:
        return None
    return user

def revoke_refresh_token(db: Session, user: User) -> None:
    user.refresh_token = None
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to revoke refresh token for user {user.id}: {e}")
        raise InternalError("Database error while logging out.")
    logger.info(f"Revoked refresh token for user {user.id}")

def create_password_reset_token(db: Session, user: User) -> str:
    token = generate_reset_token()
    user.password_reset_token = token
    user.password_reset_token_expires_at = datetime.now(timezone.utc) + timedelta(
        minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES
    )
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to store password reset token for user {user.id}: {e}")
        raise InternalError("Database error while creating password reset token.")
    return token

def get_user_by_password_reset_token(db: Session, token: str) -> Optional[User]:
    """
    Пользователь по действующему токену сброса пароля; просроченный токен не подходит.
    """
    if not token:
        return None
    user = db.query(User).filter(User.password_reset_token == token).first()
    if not user or not user.password_reset_token_expires_at:
        return None
    if _as_utc(user.password_reset_token_expires_at) < datetime.now(timezone.utc):
        logger.info(f"Expired password reset token used for user {user.id}")
        return None
    return user

def reset_password(db: Session, user: User, new_password: str) -> None:
    """
    Устанавливает новый пароль и очищает токен сброса и refresh-токен.
    """
    user.password_hash = get_password_hash(new_password)
    user.password_reset_token = None
    user.password_reset_token_expires_at = None
    user.refresh_token = None
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to reset password for user {user.id}: {e}")
        raise InternalError("Database error while resetting password.")
    logger.info(f"Password reset for user {user.id}")
