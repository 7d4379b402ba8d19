#synergysphere/models/comment.py
from datetime import datetime
from sqlalchemy import (
    Column, Integer, Text, DateTime, ForeignKey, func
)
from sqlalchemy.orm import relationship
from synergysphere.models.base import Base

class Comment(Base):
    """
    Comment — комментарий к задаче. После публикации не редактируется.
    """
    __tablename__ = "comments"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    task_id: int = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: int = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content: str = Column(Text, nullable=False)
    created_at: datetime = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    task = relationship("Task", back_populates="comments")
    user = relationship("User", lazy="joined")

    def __repr__(self):
        return f"<Comment(id={self.id}, task_id={self.task_id}, user_id={self.user_id})>"
