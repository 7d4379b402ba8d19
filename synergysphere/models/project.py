#synergysphere/models/project.py
from datetime import datetime, date
from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Text, ForeignKey, Table, Index, func
)
from sqlalchemy.orm import relationship
from synergysphere.models.base import Base

# many-to-many: проекты <-> теги
project_tags = Table(
    "project_tags",
    Base.metadata,
    Column("project_id", Integer, ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)

class Tag(Base):
    """
    Tag — метка проекта, уникальна по имени (connect-or-create).
    """
    __tablename__ = "tags"

    id: int = Column(Integer, primary_key=True)
    name: str = Column(String(64), unique=True, nullable=False, index=True)

    def __repr__(self):
        return f"<Tag(id={self.id}, name='{self.name}')>"

class Project(Base):
    """
    Project — проект команды. У проекта ровно один менеджер, назначаемый при создании.
    """
    __tablename__ = "projects"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    name: str = Column(String(128), nullable=False, index=True, doc="Название проекта")
    description: str = Column(Text, nullable=True, doc="Описание")
    status: str = Column(String(16), nullable=False, default="active", index=True, doc="Статус: active, archived, completed")
    deadline: date = Column(Date, nullable=True, doc="Дедлайн")
    manager_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True, doc="Менеджер проекта")
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, doc="Дата создания")
    updated_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, doc="Дата изменения")

    manager = relationship("User", back_populates="managed_projects", lazy="joined", innerjoin=True)
    members = relationship(
        "ProjectMember",
        back_populates="project",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ProjectMember.id",
    )
    tags = relationship("Tag", secondary=project_tags, lazy="selectin", order_by="Tag.name")
    tasks = relationship("Task", back_populates="project", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_projects_deadline", "deadline"),
    )

    def __repr__(self):
        return f"<Project(id={self.id}, name='{self.name}', status='{self.status}', manager_id={self.manager_id})>"
