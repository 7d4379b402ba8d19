#synergysphere/models/task.py
from datetime import datetime, date
from sqlalchemy import (
    Column, Integer, String, Text, Date, DateTime, ForeignKey, Index, func
)
from sqlalchemy.orm import relationship
from synergysphere.models.base import Base

class Task(Base):
    """
    Task — задача проекта. Автор (created_by) неизменен, исполнитель — участник проекта.
    """
    __tablename__ = "tasks"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    project_id: int = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True, doc="ID проекта")
    title: str = Column(String(160), nullable=False, doc="Название задачи")
    description: str = Column(Text, nullable=True, doc="Описание")
    status: str = Column(String(16), nullable=False, default="TODO", doc="Статус: TODO, IN_PROGRESS, DONE")
    priority: str = Column(String(8), nullable=False, default="medium", doc="Приоритет: low, medium, high")
    due_date: date = Column(Date, nullable=True, doc="Срок")
    created_by_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True, doc="Автор задачи")
    assignee_id: int = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True, doc="Исполнитель")
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, doc="Дата создания")
    updated_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, doc="Дата изменения")

    project = relationship("Project", back_populates="tasks")
    created_by = relationship("User", foreign_keys=[created_by_id], lazy="joined")
    assignee = relationship("User", foreign_keys=[assignee_id], lazy="joined")
    comments = relationship(
        "Comment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="Comment.id.desc()",
    )

    __table_args__ = (
        Index("ix_tasks_status", "status"),
        Index("ix_tasks_due_date", "due_date"),
    )

    def __repr__(self):
        return (
            f"<Task(id={self.id}, title='{self.title}', status={self.status}, "
            f"project_id={self.project_id}, assignee_id={self.assignee_id})>"
        )
