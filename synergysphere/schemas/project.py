#synergysphere/schemas/project.py
from pydantic import BaseModel, Field, EmailStr, ConfigDict, field_validator
from typing import Optional, List, Dict
from datetime import date, datetime

from synergysphere.schemas.enums import ProjectStatus, MemberRole
from synergysphere.schemas.user import UserShort

def _tag_names(value):
    # ORM отдаёт объекты Tag, API — список имён
    if value is None:
        return []
    return [getattr(tag, "name", tag) for tag in value]

class ProjectBase(BaseModel):
    """
    ProjectBase — базовая схема проекта.
    """
    name: str = Field(..., min_length=1, max_length=128, description="Название проекта")
    description: Optional[str] = Field(None, description="Описание")
    deadline: Optional[date] = Field(None, description="Дедлайн")
    tags: List[str] = Field(default_factory=list, description="Теги проекта")

class ProjectCreate(ProjectBase):
    """
    ProjectCreate — схема для создания проекта (менеджер выставляется на сервере).
    """
    model_config = ConfigDict(use_enum_values=True)

class ProjectUpdate(BaseModel):
    """
    ProjectUpdate — схема для обновления проекта (все поля опциональны, менеджер не меняется).
    """
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    description: Optional[str] = None
    deadline: Optional[date] = None
    status: Optional[ProjectStatus] = None
    tags: Optional[List[str]] = None

    model_config = ConfigDict(use_enum_values=True)

class MemberRead(BaseModel):
    """
    MemberRead — участник проекта с ролью.
    """
    id: int
    project_id: int
    user_id: int
    role: MemberRole
    joined_at: datetime
    user: UserShort

    model_config = ConfigDict(from_attributes=True)

class MemberAdd(BaseModel):
    email: EmailStr = Field(..., description="Email добавляемого пользователя")
    role: MemberRole = Field(MemberRole.MEMBER, description="Роль в проекте")

    model_config = ConfigDict(use_enum_values=True)

class MemberRoleUpdate(BaseModel):
    role: MemberRole

    model_config = ConfigDict(use_enum_values=True)

class ProjectRead(BaseModel):
    """
    ProjectRead — схема полного вывода проекта (response).
    """
    id: int
    name: str
    description: Optional[str] = None
    deadline: Optional[date] = None
    status: ProjectStatus
    manager_id: int
    manager: UserShort
    tags: List[str] = Field(default_factory=list)
    members: List[MemberRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v):
        return _tag_names(v)

class ProjectShort(BaseModel):
    """
    ProjectShort — сокращённая схема для списка проектов (дашборд).
    """
    id: int
    name: str
    description: Optional[str] = None
    deadline: Optional[date] = None
    status: ProjectStatus
    manager: UserShort
    tags: List[str] = Field(default_factory=list)
    task_count: int = 0
    member_count: int = 0
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v):
        return _tag_names(v)

class ProjectSummary(BaseModel):
    """
    ProjectSummary — сводка по задачам проекта для kanban/дашборда.
    """
    project_id: int
    total_tasks: int
    by_status: Dict[str, int]
    overdue: int
    member_count: int
