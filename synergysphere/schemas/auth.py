#synergysphere/schemas/auth.py
from pydantic import BaseModel, Field, EmailStr
from typing import Optional

from synergysphere.schemas.user import UserRead

class RegisterRequest(BaseModel):
    """
    RegisterRequest — тело запроса регистрации.
    """
    name: str = Field(..., min_length=1, max_length=128, description="Имя")
    email: EmailStr = Field(..., description="Email")
    password: str = Field(..., min_length=6, description="Пароль")

class LoginRequest(BaseModel):
    """
    LoginRequest — тело запроса для входа по email + пароль.
    """
    email: EmailStr = Field(..., description="Email")
    password: str = Field(..., description="Пароль")

class AuthResponse(BaseModel):
    """
    AuthResponse — ответ на логин/регистрацию: access + refresh токены и пользователь.
    """
    token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field("bearer", description="Тип токена")
    user: UserRead

class TokenRefreshRequest(BaseModel):
    refresh_token: Optional[str] = Field(None, description="JWT refresh token")

class TokenRefreshResponse(BaseModel):
    """
    TokenRefreshResponse — новый access-токен и ротированный refresh-токен.
    """
    token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field("bearer", description="Тип токена")

class ForgotPasswordRequest(BaseModel):
    email: EmailStr

class PasswordReset(BaseModel):
    password: str = Field(..., min_length=6, description="Новый пароль")
