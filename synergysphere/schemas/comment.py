#synergysphere/schemas/comment.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime

from synergysphere.schemas.user import UserShort

class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000, description="Текст комментария")

class CommentRead(BaseModel):
    """
    CommentRead — комментарий к задаче с автором.
    """
    id: int
    task_id: int
    user_id: int
    content: str
    created_at: datetime
    user: UserShort

    model_config = ConfigDict(from_attributes=True)
