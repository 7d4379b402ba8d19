#synergysphere/api/task.py
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional
from synergysphere.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskRead,
    TaskAssign,
    TaskStatusUpdate,
)
from synergysphere.schemas.comment import CommentCreate, CommentRead
from synergysphere.schemas.enums import TaskStatus, TaskPriority
from synergysphere.crud import task as crud_task
from synergysphere.crud.comment import list_comments, add_comment
from synergysphere.core.exceptions import TaskValidationError
from synergysphere.core.policy import Principal
from synergysphere.dependencies import get_db, get_principal

router = APIRouter(prefix="/tasks", tags=["Tasks"])

def _parse_assignee(value: Optional[str], principal: Principal) -> Optional[int]:
    # assignee_id=me: задачи текущего пользователя
    if value is None or value == "":
        return None
    if value == "me":
        return principal.id
    try:
        return int(value)
    except ValueError:
        raise TaskValidationError("assignee_id must be an integer or 'me'")

@router.get("", response_model=List[TaskRead])
def list_all_tasks(
    project_id: Optional[int] = Query(None),
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = Query(None),
    assignee_id: Optional[str] = Query(None, description="ID исполнителя или 'me'"),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """
    Задачи из проектов пользователя с фильтрами.
    """
    filters = {
        "project_id": project_id,
        "status": task_status.value if task_status else None,
        "priority": priority.value if priority else None,
        "assignee_id": _parse_assignee(assignee_id, principal),
        "search": search,
    }
    return crud_task.list_tasks(db, principal, filters)

@router.get("/me", response_model=List[TaskRead])
def list_my_tasks(
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """
    Мои задачи: назначенные на меня и из проектов, которыми я управляю.
    """
    return crud_task.list_my_tasks(db, principal, task_status.value if task_status else None)

@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_new_task(
    data: TaskCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return crud_task.create_task(db, principal, data.model_dump())

@router.get("/{task_id}", response_model=TaskRead)
def get_one_task(
    task_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return crud_task.get_task_for(db, principal, task_id)

@router.put("/{task_id}", response_model=TaskRead)
def update_existing_task(
    task_id: int,
    data: TaskUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """
    Обновить задачу; смена исполнителя доступна только менеджеру и ADMIN.
    """
    return crud_task.update_task(db, principal, task_id, data.model_dump(exclude_unset=True))

@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_existing_task(
    task_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    crud_task.delete_task(db, principal, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.api_route("/{task_id}/assign", methods=["PUT", "PATCH"], response_model=TaskRead)
def assign_existing_task(
    task_id: int,
    data: TaskAssign,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return crud_task.assign_task(db, principal, task_id, data.assignee_id)

@router.api_route("/{task_id}/status", methods=["PUT", "PATCH"], response_model=TaskRead)
def change_task_status(
    task_id: int,
    data: TaskStatusUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return crud_task.update_task_status(db, principal, task_id, data.status)

# ==== Комментарии ====

@router.get("/{task_id}/comments", response_model=List[CommentRead])
def get_task_comments(
    task_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return list_comments(db, principal, task_id)

@router.post("/{task_id}/comments", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
def comment_task(
    task_id: int,
    data: CommentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return add_comment(db, principal, task_id, data.content)
