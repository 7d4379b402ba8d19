#synergysphere/api/auth.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from synergysphere.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    AuthResponse,
    TokenRefreshRequest,
    TokenRefreshResponse,
    ForgotPasswordRequest,
    PasswordReset,
)
from synergysphere.schemas.user import UserRead
from synergysphere.schemas.response import MessageResponse
from synergysphere.crud.user import create_user, authenticate_user, get_user_by_email
from synergysphere.crud import auth as crud_auth
from synergysphere.core.exceptions import (
    UnauthenticatedError,
    ForbiddenError,
    ValidationError,
)
from synergysphere.dependencies import get_db, get_current_user
from synergysphere.models.user import User as DBUser
import logging

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger("SynergySphere.Auth")

RESET_REQUESTED_MESSAGE = "If an account with this email exists, a password reset link has been sent."

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """
    Регистрация нового пользователя; сразу выдаёт пару токенов.
    """
    user = create_user(db, data.model_dump())
    token, refresh_token = crud_auth.issue_tokens(db, user)
    return AuthResponse(token=token, refresh_token=refresh_token, user=UserRead.model_validate(user))

@router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """
    Логин по email + password.
    """
    user = authenticate_user(db, data.email, data.password)
    if not user:
        logger.info(f"Failed login attempt for {data.email}")
        raise UnauthenticatedError("Invalid credentials")
    token, refresh_token = crud_auth.issue_tokens(db, user)
    return AuthResponse(token=token, refresh_token=refresh_token, user=UserRead.model_validate(user))

@router.post("/refresh-token", response_model=TokenRefreshResponse)
def refresh_token(data: TokenRefreshRequest, db: Session = Depends(get_db)):
    """
    Ротация: старый refresh-токен перестаёт действовать, выдаётся новая пара.
    """
    if not data.refresh_token:
        raise UnauthenticatedError("Refresh token is required")
    user = crud_auth.get_user_by_refresh_token(db, data.refresh_token)
    if not user:
        raise ForbiddenError("Invalid refresh token")
    token, new_refresh_token = crud_auth.issue_tokens(db, user)
    return TokenRefreshResponse(token=token, refresh_token=new_refresh_token)

@router.get("/me", response_model=UserRead)
def get_me(current_user: DBUser = Depends(get_current_user)):
    return current_user

@router.post("/logout", response_model=MessageResponse)
def logout(db: Session = Depends(get_db), current_user: DBUser = Depends(get_current_user)):
    crud_auth.revoke_refresh_token(db, current_user)
    return MessageResponse(message="Logged out successfully")

@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(data: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """
    Запрос на сброс пароля. Ответ не раскрывает, существует ли email.
    """
    user = get_user_by_email(db, data.email)
    if not user:
        logger.info(f"Password reset requested for non-existent email: {data.email}")
        return MessageResponse(message=RESET_REQUESTED_MESSAGE)

    token = crud_auth.create_password_reset_token(db, user)
    # TODO: отправлять ссылку письмом, когда появится почтовый сервис
    logger.info(f"Password reset token generated for user {user.id}: {token}")
    return MessageResponse(message=RESET_REQUESTED_MESSAGE)

@router.post("/reset-password/{token}", response_model=MessageResponse)
def reset_password(token: str, data: PasswordReset, db: Session = Depends(get_db)):
    user = crud_auth.get_user_by_password_reset_token(db, token)
    if not user:
        raise ValidationError("Invalid or expired password reset token.")
    crud_auth.reset_password(db, user, data.password)
    return MessageResponse(message="Your password has been successfully reset.")
