# synergysphere/crud/project.py
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import func, or_
from datetime import date, datetime, timezone
from synergysphere.models.project import Project, Tag
from synergysphere.models.project_member import ProjectMember
from synergysphere.models.task import Task
from synergysphere.crud.user import get_user_by_email
from synergysphere.core.exceptions import (
    ProjectNotFound,
    ProjectValidationError,
    UserNotFound,
    MemberNotFound,
    DuplicateMembership,
    InternalError,
)
from synergysphere.core.policy import (
    Action,
    Principal,
    MEMBER_ROLE_ADMIN,
    MEMBER_ROLE_MEMBER,
    authorize,
    ensure_not_manager,
)
import logging
from typing import Optional, List, Dict, Any, Iterable, Tuple

logger = logging.getLogger("SynergySphere.Projects")

PROJECT_STATUSES = ("active", "archived", "completed")
MEMBER_ROLES = (MEMBER_ROLE_ADMIN, MEMBER_ROLE_MEMBER)

def _commit(db: Session, failure_message: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{failure_message}: {e}")
        raise InternalError(failure_message)

def resolve_tags(db: Session, names: Iterable[str]) -> List[Tag]:
    """
    Connect-or-create тегов по имени, без дубликатов.
    """
    unique_names: List[str] = []
    for name in names or []:
        cleaned = (name or "").strip()
        if cleaned and cleaned not in unique_names:
            unique_names.append(cleaned)
    if not unique_names:
        return []
    existing = {tag.name: tag for tag in db.query(Tag).filter(Tag.name.in_(unique_names)).all()}
    tags = []
    for name in unique_names:
        tag = existing.get(name)
        if tag is None:
            tag = Tag(name=name)
            db.add(tag)
        tags.append(tag)
    return tags

def get_project(db: Session, project_id: int, lock: bool = False) -> Project:
    """
    Возвращает проект по ID. lock=True: SELECT ... FOR UPDATE для check-then-write.
    """
    query = db.query(Project).filter(Project.id == project_id)
    if lock:
        query = query.with_for_update(of=Project).populate_existing()
    project = query.first()
    if not project:
        raise ProjectNotFound("Project not found")
    return project

def get_project_for(
    db: Session,
    principal: Principal,
    project_id: int,
    action: Action = Action.VIEW_PROJECT,
    lock: bool = False,
) -> Project:
    """
    Загружает проект и проверяет право principal на действие.
    """
    project = get_project(db, project_id, lock=lock)
    authorize(principal, project, action)
    return project

def create_project(db: Session, principal: Principal, data: dict) -> Project:
    """
    Создаёт проект. Создатель становится менеджером и ADMIN-участником.
    """
    name = (data.get("name") or "").strip()
    if not name:
        raise ProjectValidationError("Project name is required.")
    deadline = data.get("deadline")
    if deadline and deadline < date.today():
        raise ProjectValidationError("Deadline cannot be in the past.")

    project = Project(
        name=name,
        description=data.get("description"),
        deadline=deadline,
        status="active",
        manager_id=principal.id,
    )
    project.tags = resolve_tags(db, data.get("tags") or [])
    project.members.append(ProjectMember(user_id=principal.id, role=MEMBER_ROLE_ADMIN))
    db.add(project)
    _commit(db, "Database error while creating project.")
    db.refresh(project)
    logger.info(f"Created project '{project.name}' (ID: {project.id}) by user {principal.id}")
    return project

def list_projects(
    db: Session,
    principal: Principal,
    filters: Optional[Dict[str, Any]] = None,
) -> List[Tuple[Project, int, int]]:
    """
    Проекты, где пользователь менеджер или участник: (project, task_count, member_count).
    """
    filters = filters or {}
    member_of = db.query(ProjectMember.project_id).filter(ProjectMember.user_id == principal.id)
    query = db.query(Project).filter(
        or_(Project.manager_id == principal.id, Project.id.in_(member_of))
    )
    if filters.get("status"):
        query = query.filter(Project.status == filters["status"])
    if filters.get("search"):
        search = f"%{filters['search']}%"
        query = query.filter(or_(Project.name.ilike(search), Project.description.ilike(search)))
    projects = query.order_by(Project.created_at.desc(), Project.id.desc()).all()
    if not projects:
        return []

    ids = [p.id for p in projects]
    task_counts = dict(
        db.query(Task.project_id, func.count(Task.id))
        .filter(Task.project_id.in_(ids))
        .group_by(Task.project_id)
        .all()
    )
    return [(p, task_counts.get(p.id, 0), len(p.members)) for p in projects]

def update_project(db: Session, principal: Principal, project_id: int, data: dict) -> Project:
    """
    Обновляет поля проекта (name/description/deadline/status/tags). Менеджер не меняется.
    """
    project = get_project_for(db, principal, project_id, Action.UPDATE_PROJECT, lock=True)

    # значения проверяются до первой записи в проект
    if "name" in data and not (data["name"] or "").strip():
        raise ProjectValidationError("Project name is required.")
    if data.get("deadline") and data["deadline"] < date.today():
        raise ProjectValidationError("Deadline cannot be in the past.")
    if data.get("status") is not None and data["status"] not in PROJECT_STATUSES:
        raise ProjectValidationError(f"Invalid project status: {data['status']}")

    if "name" in data:
        project.name = data["name"].strip()
    if "description" in data:
        project.description = data["description"]
    if "deadline" in data:
        project.deadline = data["deadline"]
    if data.get("status") is not None:
        project.status = data["status"]
    if "tags" in data and data["tags"] is not None:
        project.tags = resolve_tags(db, data["tags"])

    project.updated_at = datetime.now(timezone.utc)
    _commit(db, "Database error while updating project.")
    db.refresh(project)
    logger.info(f"Updated project {project.id} by user {principal.id}: {sorted(data.keys())}")
    return project

def delete_project(db: Session, principal: Principal, project_id: int) -> None:
    """
    Удаляет проект вместе с участниками, задачами и комментариями. Только менеджер.
    """
    project = get_project_for(db, principal, project_id, Action.DELETE_PROJECT, lock=True)
    db.delete(project)
    _commit(db, "Database error while deleting project.")
    logger.info(f"Deleted project {project_id} by user {principal.id}")

def list_members(db: Session, principal: Principal, project_id: int) -> List[ProjectMember]:
    project = get_project_for(db, principal, project_id, Action.VIEW_PROJECT)
    return list(project.members)

def add_member(db: Session, principal: Principal, project_id: int, email: str, role: str = MEMBER_ROLE_MEMBER) -> ProjectMember:
    """
    Добавляет пользователя (по email) в проект. Повторное добавление даёт конфликт.
    """
    if role not in MEMBER_ROLES:
        raise ProjectValidationError(f"Invalid member role: {role}")
    project = get_project_for(db, principal, project_id, Action.ADD_MEMBER, lock=True)

    user = get_user_by_email(db, email)
    if not user:
        raise UserNotFound("User not found")
    if any(m.user_id == user.id for m in project.members):
        raise DuplicateMembership("User is already a member of this project")

    member = ProjectMember(user_id=user.id, role=role)
    project.members.append(member)
    try:
        db.commit()
    except IntegrityError as e:
        # параллельная вставка той же пары (project_id, user_id)
        db.rollback()
        logger.warning(f"Duplicate membership insert for project {project.id}, user {user.id}: {e}")
        raise DuplicateMembership("User is already a member of this project")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to add member to project {project.id}: {e}")
        raise InternalError("Database error while adding project member.")
    db.refresh(member)
    logger.info(f"Added user {user.id} to project {project.id} as {role}")
    return member

def update_member_role(db: Session, principal: Principal, project_id: int, user_id: int, role: str) -> ProjectMember:
    """
    Меняет роль участника. Только менеджер; роль менеджера неизменна.
    """
    if role not in MEMBER_ROLES:
        raise ProjectValidationError(f"Invalid member role: {role}")
    project = get_project_for(db, principal, project_id, Action.CHANGE_MEMBER_ROLE, lock=True)
    ensure_not_manager(project, user_id, Action.CHANGE_MEMBER_ROLE)

    member = next((m for m in project.members if m.user_id == user_id), None)
    if member is None:
        raise MemberNotFound("Member not found in this project")
    previous = member.role
    member.role = role
    _commit(db, "Database error while updating member role.")
    db.refresh(member)
    logger.info(f"Changed role of user {user_id} in project {project.id}: {previous} -> {role}")
    return member

def remove_member(db: Session, principal: Principal, project_id: int, user_id: int) -> None:
    """
    Удаляет участника из проекта. Менеджера удалить нельзя.
    Задачи проекта, назначенные на удаляемого, остаются без исполнителя.
    """
    project = get_project_for(db, principal, project_id, Action.REMOVE_MEMBER, lock=True)
    ensure_not_manager(project, user_id, Action.REMOVE_MEMBER)

    member = next((m for m in project.members if m.user_id == user_id), None)
    if member is None:
        raise ProjectValidationError("User is not a member of this project")

    project.members.remove(member)
    unassigned = (
        db.query(Task)
        .filter(Task.project_id == project.id, Task.assignee_id == user_id)
        .update({Task.assignee_id: None}, synchronize_session="fetch")
    )
    _commit(db, "Database error while removing project member.")
    logger.info(f"Removed user {user_id} from project {project.id} (unassigned {unassigned} tasks)")

def summarize_project(db: Session, principal: Principal, project_id: int) -> Dict[str, Any]:
    """
    Сводка по задачам проекта: количество по статусам, просроченные, участники.
    """
    project = get_project_for(db, principal, project_id, Action.VIEW_PROJECT)
    rows = (
        db.query(Task.status, func.count(Task.id))
        .filter(Task.project_id == project.id)
        .group_by(Task.status)
        .all()
    )
    by_status = {"TODO": 0, "IN_PROGRESS": 0, "DONE": 0}
    by_status.update({status: count for status, count in rows})
    overdue = (
        db.query(func.count(Task.id))
        .filter(
            Task.project_id == project.id,
            Task.due_date.isnot(None),
            Task.due_date < date.today(),
            Task.status != "DONE",
        )
        .scalar()
    )
    return {
        "project_id": project.id,
        "total_tasks": sum(by_status.values()),
        "by_status": by_status,
        "overdue": overdue or 0,
        "member_count": len(project.members),
    }
