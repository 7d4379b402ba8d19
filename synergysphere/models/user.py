#synergysphere/models/user.py
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, DateTime, func
)
from sqlalchemy.orm import relationship
from synergysphere.models.base import Base

class User(Base):
    """
    User — аккаунт пользователя. Глобальная роль (admin/user) на права в проектах не влияет.
    """
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)
    name: str = Column(String(128), nullable=False, doc="Имя пользователя")
    email: str = Column(String(255), unique=True, nullable=False, index=True, doc="Email (уникальный)")
    password_hash: str = Column(String(128), nullable=False, doc="bcrypt-хеш пароля")
    role: str = Column(String(16), nullable=False, default="user", doc="Глобальная роль: admin, user")
    avatar_url: str = Column(String(255), nullable=True, doc="URL аватара")
    refresh_token: str = Column(String(512), nullable=True, doc="Текущий refresh-токен (ротируется)")
    password_reset_token: str = Column(String(255), nullable=True, index=True, doc="Токен для сброса пароля")
    password_reset_token_expires_at: datetime = Column(DateTime(timezone=True), nullable=True, doc="Время истечения токена сброса")
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, doc="Дата создания")
    updated_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, doc="Дата обновления")

    # --- Связи ---
    managed_projects = relationship("Project", back_populates="manager")
    memberships = relationship("ProjectMember", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
