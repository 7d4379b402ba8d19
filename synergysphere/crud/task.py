#synergysphere/crud/task.py
from datetime import date, datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import or_
from synergysphere.models.task import Task
from synergysphere.models.project import Project
from synergysphere.models.project_member import ProjectMember
from synergysphere.crud.project import get_project
from synergysphere.core.exceptions import (
    TaskNotFound,
    TaskValidationError,
    InternalError,
)
from synergysphere.core.policy import (
    Action,
    Principal,
    authorize,
    ensure_assignable,
)
import logging
from typing import List, Dict, Any, Optional

logger = logging.getLogger("SynergySphere.Tasks")

TASK_STATUSES = ("TODO", "IN_PROGRESS", "DONE")
TASK_PRIORITIES = ("low", "medium", "high")

def _commit(db: Session, failure_message: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{failure_message}: {e}")
        raise InternalError(failure_message)

def _validate_fields(data: dict) -> None:
    if "status" in data and data["status"] not in TASK_STATUSES:
        raise TaskValidationError(f"Invalid task status: {data['status']}")
    if "priority" in data and data["priority"] not in TASK_PRIORITIES:
        raise TaskValidationError(f"Invalid task priority: {data['priority']}")

def get_task(db: Session, task_id: int, lock: bool = False) -> Task:
    """
    Получить задачу по ID. lock=True блокирует задачу и её проект до конца транзакции.
    """
    query = db.query(Task).filter(Task.id == task_id)
    if lock:
        query = query.with_for_update(of=Task).populate_existing()
    task = query.first()
    if not task:
        raise TaskNotFound("Task not found")
    if lock:
        # участники проекта не должны меняться между проверкой и записью
        get_project(db, task.project_id, lock=True)
    return task

def get_task_for(
    db: Session,
    principal: Principal,
    task_id: int,
    action: Action = Action.VIEW_TASK,
    lock: bool = False,
) -> Task:
    task = get_task(db, task_id, lock=lock)
    authorize(principal, task, action)
    return task

def _participant_project_ids(db: Session, user_id: int):
    member_of = db.query(ProjectMember.project_id).filter(ProjectMember.user_id == user_id)
    return db.query(Project.id).filter(or_(Project.manager_id == user_id, Project.id.in_(member_of)))

def _apply_filters(query, filters: Dict[str, Any]):
    if filters.get("status"):
        query = query.filter(Task.status == filters["status"])
    if filters.get("priority"):
        query = query.filter(Task.priority == filters["priority"])
    if filters.get("assignee_id") is not None:
        query = query.filter(Task.assignee_id == filters["assignee_id"])
    if filters.get("search"):
        pattern = f"%{filters['search']}%"
        query = query.filter(or_(Task.title.ilike(pattern), Task.description.ilike(pattern)))
    return query

def create_task(db: Session, principal: Principal, data: dict) -> Task:
    """
    Создать задачу в проекте. Автор: principal, исполнитель должен быть участником.
    """
    title = (data.get("title") or "").strip()
    if not title:
        raise TaskValidationError("Title is required.")
    if data.get("project_id") is None:
        raise TaskValidationError("Project ID is required.")
    _validate_fields({k: v for k, v in data.items() if k in ("status", "priority") and v is not None})

    due_date = data.get("due_date")
    if due_date and due_date < date.today():
        raise TaskValidationError("Due date cannot be in the past.")

    project = get_project(db, data["project_id"], lock=True)
    authorize(principal, project, Action.CREATE_TASK)
    ensure_assignable(project, data.get("assignee_id"))

    task = Task(
        title=title,
        description=data.get("description"),
        status=data.get("status") or "TODO",
        priority=data.get("priority") or "medium",
        due_date=due_date,
        project=project,
        created_by_id=principal.id,
        assignee_id=data.get("assignee_id"),
    )
    db.add(task)
    _commit(db, "Database error while creating task.")
    db.refresh(task)
    logger.info(f"Created task {task.id} in project {project.id} by user {principal.id}")
    return task

def list_tasks(db: Session, principal: Principal, filters: Optional[Dict[str, Any]] = None) -> List[Task]:
    """
    Задачи из проектов, где principal менеджер или участник.
    Явный project_id вне этого множества даёт отказ политики.
    """
    filters = filters or {}
    query = db.query(Task)
    if filters.get("project_id") is not None:
        project = get_project(db, filters["project_id"])
        authorize(principal, project, Action.LIST_TASKS)
        query = query.filter(Task.project_id == project.id)
    else:
        query = query.filter(Task.project_id.in_(_participant_project_ids(db, principal.id)))
    query = _apply_filters(query, filters)
    return query.order_by(Task.created_at.desc(), Task.id.desc()).all()

def list_my_tasks(db: Session, principal: Principal, status: Optional[str] = None) -> List[Task]:
    """
    Задачи, назначенные на principal, и задачи проектов, которыми он управляет.
    """
    managed = db.query(Project.id).filter(Project.manager_id == principal.id)
    query = db.query(Task).filter(
        or_(Task.assignee_id == principal.id, Task.project_id.in_(managed))
    )
    if status:
        query = query.filter(Task.status == status)
    return query.order_by(Task.due_date.is_(None), Task.due_date.asc(), Task.id.desc()).all()

def update_task(db: Session, principal: Principal, task_id: int, data: dict) -> Task:
    """
    Обновить задачу. Смена исполнителя дополнительно требует прав менеджера/ADMIN.
    """
    task = get_task_for(db, principal, task_id, Action.UPDATE_TASK, lock=True)

    # значения проверяются до первой записи в задачу
    if "title" in data and not (data["title"] or "").strip():
        raise TaskValidationError("Title is required.")
    _validate_fields({k: v for k, v in data.items() if k in ("status", "priority") and v is not None})
    if data.get("due_date") and data["due_date"] < date.today():
        raise TaskValidationError("Due date cannot be in the past.")

    if "assignee_id" in data and data["assignee_id"] != task.assignee_id:
        authorize(principal, task, Action.CHANGE_ASSIGNEE)
        ensure_assignable(task.project, data["assignee_id"])
        task.assignee_id = data["assignee_id"]

    if "title" in data:
        task.title = data["title"].strip()
    if "description" in data:
        task.description = data["description"]
    for field in ("status", "priority"):
        if field in data and data[field] is not None:
            setattr(task, field, data[field])
    if "due_date" in data:
        task.due_date = data["due_date"]

    task.updated_at = datetime.now(timezone.utc)
    _commit(db, "Database error while updating task.")
    db.refresh(task)
    logger.info(f"Updated task {task.id} by user {principal.id}: {sorted(data.keys())}")
    return task

def delete_task(db: Session, principal: Principal, task_id: int) -> None:
    task = get_task_for(db, principal, task_id, Action.DELETE_TASK, lock=True)
    db.delete(task)
    _commit(db, "Database error while deleting task.")
    logger.info(f"Deleted task {task_id} by user {principal.id}")

def assign_task(db: Session, principal: Principal, task_id: int, assignee_id: Optional[int]) -> Task:
    """
    Назначить (или снять при None) исполнителя задачи.
    """
    task = get_task_for(db, principal, task_id, Action.ASSIGN_TASK, lock=True)
    ensure_assignable(task.project, assignee_id)
    previous = task.assignee_id
    task.assignee_id = assignee_id
    task.updated_at = datetime.now(timezone.utc)
    _commit(db, "Database error while assigning task.")
    db.refresh(task)
    logger.info(f"Task {task.id} assignee changed {previous} -> {assignee_id} by user {principal.id}")
    return task

def update_task_status(db: Session, principal: Principal, task_id: int, status: str) -> Task:
    _validate_fields({"status": status})
    task = get_task_for(db, principal, task_id, Action.UPDATE_TASK_STATUS, lock=True)
    task.status = status
    task.updated_at = datetime.now(timezone.utc)
    _commit(db, "Database error while updating task status.")
    db.refresh(task)
    logger.info(f"Task {task.id} status set to {status} by user {principal.id}")
    return task
