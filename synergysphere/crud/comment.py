#synergysphere/crud/comment.py
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from synergysphere.models.comment import Comment
from synergysphere.crud.task import get_task_for
from synergysphere.core.exceptions import TaskValidationError, InternalError
from synergysphere.core.policy import Action, Principal
import logging
from typing import List

logger = logging.getLogger("SynergySphere.Comments")

def list_comments(db: Session, principal: Principal, task_id: int) -> List[Comment]:
    """
    Комментарии задачи, новые первыми.
    """
    get_task_for(db, principal, task_id, Action.VIEW_COMMENTS)
    return (
        db.query(Comment)
        .filter(Comment.task_id == task_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .all()
    )

def add_comment(db: Session, principal: Principal, task_id: int, content: str) -> Comment:
    text = (content or "").strip()
    if not text:
        raise TaskValidationError("Comment content is required.")
    task = get_task_for(db, principal, task_id, Action.COMMENT_TASK)

    comment = Comment(task=task, user_id=principal.id, content=text)
    db.add(comment)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to add comment to task {task.id}: {e}")
        raise InternalError("Database error while adding comment.")
    db.refresh(comment)
    logger.info(f"User {principal.id} commented on task {task.id}")
    return comment
