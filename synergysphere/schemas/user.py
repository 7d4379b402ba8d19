#synergysphere/schemas/user.py
from pydantic import BaseModel, Field, EmailStr, ConfigDict
from typing import Optional
from datetime import datetime

class UserShort(BaseModel):
    """
    UserShort — краткая карточка пользователя (для вложения в проекты/задачи).
    """
    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)

class UserRead(UserShort):
    """
    UserRead — схема для выдачи пользователя (response). Хеш пароля и токены не отдаются.
    """
    role: str = Field("user", description="Глобальная роль: admin, user")
    avatar_url: Optional[str] = Field(None, description="URL аватара")
    created_at: datetime

class UserProfileUpdate(BaseModel):
    """
    UserProfileUpdate — обновление профиля (все поля опциональны).
    """
    name: Optional[str] = Field(None, min_length=1, max_length=128, description="Имя")
    email: Optional[EmailStr] = Field(None, description="Email")
    avatar_url: Optional[str] = Field(None, max_length=255, description="URL аватара")

class PasswordChange(BaseModel):
    current_password: str = Field(..., description="Текущий пароль")
    new_password: str = Field(..., min_length=6, description="Новый пароль")
