#synergysphere/api/project.py
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional
from synergysphere.schemas.project import (
    ProjectCreate,
    ProjectRead,
    ProjectUpdate,
    ProjectShort,
    ProjectSummary,
    MemberRead,
    MemberAdd,
    MemberRoleUpdate,
)
from synergysphere.schemas.enums import ProjectStatus, TaskStatus, TaskPriority
from synergysphere.schemas.task import TaskRead
from synergysphere.crud import project as crud_project
from synergysphere.crud.task import list_tasks
from synergysphere.core.policy import Principal
from synergysphere.dependencies import get_db, get_principal

import logging

router = APIRouter(prefix="/projects", tags=["Projects"])
logger = logging.getLogger("SynergySphere.ProjectsAPI")

@router.get("", response_model=List[ProjectShort])
def list_projects(
    search: Optional[str] = Query(None),
    project_status: Optional[ProjectStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """
    Проекты, где пользователь менеджер или участник (новые первыми).
    """
    filters = {
        "search": search,
        "status": project_status.value if project_status else None,
    }
    rows = crud_project.list_projects(db, principal, filters)
    return [
        ProjectShort.model_validate(project).model_copy(
            update={"task_count": task_count, "member_count": member_count}
        )
        for project, task_count, member_count in rows
    ]

@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create_new_project(
    data: ProjectCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """
    Создать проект; создатель становится менеджером.
    """
    return crud_project.create_project(db, principal, data.model_dump())

@router.get("/{project_id}", response_model=ProjectRead)
def get_one_project(
    project_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return crud_project.get_project_for(db, principal, project_id)

@router.put("/{project_id}", response_model=ProjectRead)
def update_existing_project(
    project_id: int,
    data: ProjectUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return crud_project.update_project(db, principal, project_id, data.model_dump(exclude_unset=True))

@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_existing_project(
    project_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    crud_project.delete_project(db, principal, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get("/{project_id}/summary", response_model=ProjectSummary)
def project_summary(
    project_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return crud_project.summarize_project(db, principal, project_id)

# ==== Участники ====

@router.get("/{project_id}/members", response_model=List[MemberRead])
def list_project_members(
    project_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return crud_project.list_members(db, principal, project_id)

@router.post("/{project_id}/members", response_model=MemberRead, status_code=status.HTTP_201_CREATED)
def add_project_member(
    project_id: int,
    data: MemberAdd,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """
    Добавить пользователя в проект по email (менеджер или ADMIN).
    """
    return crud_project.add_member(db, principal, project_id, data.email, data.role)

@router.put("/{project_id}/members/{user_id}", response_model=MemberRead)
def change_member_role(
    project_id: int,
    user_id: int,
    data: MemberRoleUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return crud_project.update_member_role(db, principal, project_id, user_id, data.role)

@router.delete("/{project_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_project_member(
    project_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    crud_project.remove_member(db, principal, project_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# ==== Задачи проекта ====

@router.get("/{project_id}/tasks", response_model=List[TaskRead])
def list_project_tasks(
    project_id: int,
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = Query(None),
    assignee_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    filters = {
        "project_id": project_id,
        "status": task_status.value if task_status else None,
        "priority": priority.value if priority else None,
        "assignee_id": assignee_id,
        "search": search,
    }
    return list_tasks(db, principal, filters)
