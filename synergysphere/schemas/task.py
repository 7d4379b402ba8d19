#synergysphere/schemas/task.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import date, datetime

from synergysphere.schemas.enums import TaskStatus, TaskPriority
from synergysphere.schemas.user import UserShort

class TaskCreate(BaseModel):
    """
    TaskCreate — создание новой задачи. Автором становится текущий пользователь.
    """
    title: str = Field(..., min_length=1, max_length=160, description="Название задачи")
    description: Optional[str] = Field(None, description="Описание задачи")
    status: TaskStatus = Field(TaskStatus.TODO, description="Статус: TODO, IN_PROGRESS, DONE")
    priority: TaskPriority = Field(TaskPriority.medium, description="Приоритет: low, medium, high")
    due_date: Optional[date] = Field(None, description="Срок")
    project_id: int = Field(..., description="ID проекта")
    assignee_id: Optional[int] = Field(None, description="ID исполнителя (участник проекта)")

    model_config = ConfigDict(use_enum_values=True)

class TaskUpdate(BaseModel):
    """
    TaskUpdate — обновление задачи (все поля опциональны).
    """
    title: Optional[str] = Field(None, min_length=1, max_length=160)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None
    assignee_id: Optional[int] = None

    model_config = ConfigDict(use_enum_values=True)

class TaskAssign(BaseModel):
    assignee_id: Optional[int] = Field(None, description="Новый исполнитель; null снимает назначение")

class TaskStatusUpdate(BaseModel):
    status: TaskStatus

    model_config = ConfigDict(use_enum_values=True)

class ProjectRef(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)

class TaskRead(BaseModel):
    """
    TaskRead — полная схема задачи для ответа (response).
    """
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[date] = None
    project_id: int
    project: ProjectRef
    created_by_id: int
    created_by: UserShort
    assignee_id: Optional[int] = None
    assignee: Optional[UserShort] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
