# synergysphere/crud/user.py
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import func, or_
from synergysphere.models.user import User
from synergysphere.core.security import get_password_hash, verify_password
from synergysphere.core.exceptions import (
    UserNotFound,
    UserValidationError,
    UserAlreadyExists,
    InternalError,
)
import logging
from typing import Optional, List

logger = logging.getLogger("SynergySphere.Users")

def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()

def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise UserNotFound("User not found")
    return user

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == _normalize_email(email)).first()

def list_users(db: Session, search: Optional[str] = None, limit: int = 100) -> List[User]:
    """
    Список пользователей (для выбора участников), поиск по имени или email.
    """
    query = db.query(User)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
    return query.order_by(User.name.asc(), User.id.asc()).limit(limit).all()

def create_user(db: Session, data: dict) -> User:
    """
    Создаёт пользователя. Пароль хешируется, email приводится к нижнему регистру.
    """
    email = _normalize_email(data.get("email"))
    name = (data.get("name") or "").strip()
    password = data.get("password") or ""
    if not name or not email or not password:
        raise UserValidationError("Please provide name, email and password")
    if get_user_by_email(db, email):
        raise UserAlreadyExists("User already exists")

    user = User(
        name=name,
        email=email,
        password_hash=get_password_hash(password),
        role=data.get("role") or "user",
        avatar_url=data.get("avatar_url"),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Duplicate email on user insert '{email}': {e}")
        raise UserAlreadyExists("User already exists")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create user '{email}': {e}")
        raise InternalError("Database error while creating user.")
    db.refresh(user)
    logger.info(f"Created user {user.id} ({user.email})")
    return user

def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user

def update_profile(db: Session, user: User, data: dict) -> User:
    """
    Обновляет имя, email и аватар. Email должен оставаться уникальным.
    """
    if "name" in data and data["name"] is not None:
        name = data["name"].strip()
        if not name:
            raise UserValidationError("Name cannot be empty")
        user.name = name
    if "email" in data and data["email"] is not None:
        email = _normalize_email(data["email"])
        existing = get_user_by_email(db, email)
        if existing and existing.id != user.id:
            raise UserValidationError("Email is already in use")
        user.email = email
    if "avatar_url" in data:
        user.avatar_url = data["avatar_url"]
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update profile of user {user.id}: {e}")
        raise InternalError("Database error while updating profile.")
    db.refresh(user)
    logger.info(f"Updated profile of user {user.id}")
    return user

def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.password_hash):
        raise UserValidationError("Current password is incorrect")
    user.password_hash = get_password_hash(new_password)
    # старые refresh-токены больше не действуют
    user.refresh_token = None
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to change password of user {user.id}: {e}")
        raise InternalError("Database error while changing password.")
    logger.info(f"Password changed for user {user.id}")
