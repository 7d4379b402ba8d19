# synergysphere/core/policy.py
"""
Политика доступа к проектам и задачам.

Единая таблица решений: для тройки (principal, ресурс, действие) возвращает
allow/deny. Роли (manager/admin/member/creator/assignee) не хранятся, а
вычисляются при каждой проверке из связей ресурса. Модуль не обращается к БД:
ресурс должен прийти с уже загруженными ``manager_id`` и ``members``
(для задачи: с ``project``).

Использование в CRUD:
    project = get_project(db, project_id, lock=True)
    authorize(principal, project, Action.UPDATE_PROJECT)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from synergysphere.core.exceptions import (
    AssigneeNotMember,
    ForbiddenError,
    ManagerProtected,
)

MEMBER_ROLE_ADMIN = "ADMIN"
MEMBER_ROLE_MEMBER = "MEMBER"


@dataclass(frozen=True)
class Principal:
    """Аутентифицированный вызывающий (передаётся в обработчики явно)."""
    id: int
    role: str = "user"


@dataclass(frozen=True)
class Roles:
    """Роли principal относительно конкретного проекта/задачи."""
    is_manager: bool = False
    is_admin: bool = False
    is_member: bool = False
    is_creator: bool = False
    is_assignee: bool = False

    def any_of(self, names: FrozenSet[str]) -> bool:
        return any(getattr(self, f"is_{name}") for name in names)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed


class Action(str, Enum):
    VIEW_PROJECT = "view_project"
    UPDATE_PROJECT = "update_project"
    DELETE_PROJECT = "delete_project"
    ADD_MEMBER = "add_member"
    REMOVE_MEMBER = "remove_member"
    CHANGE_MEMBER_ROLE = "change_member_role"
    CREATE_TASK = "create_task"
    LIST_TASKS = "list_tasks"
    VIEW_TASK = "view_task"
    UPDATE_TASK = "update_task"
    CHANGE_ASSIGNEE = "change_assignee"
    DELETE_TASK = "delete_task"
    UPDATE_TASK_STATUS = "update_task_status"
    ASSIGN_TASK = "assign_task"
    COMMENT_TASK = "comment_task"
    VIEW_COMMENTS = "view_comments"


@dataclass(frozen=True)
class Rule:
    allowed_roles: FrozenSet[str]
    denial: str
    on_task: bool = False


def _rule(roles: str, denial: str, on_task: bool = False) -> Rule:
    return Rule(frozenset(roles.split()), denial, on_task)


# Таблица решений: deny, если ни одна из перечисленных ролей не выполнена
RULES: Dict[Action, Rule] = {
    Action.VIEW_PROJECT: _rule("member", "Not authorized to access this project"),
    Action.UPDATE_PROJECT: _rule("manager admin", "Not authorized to update this project"),
    Action.DELETE_PROJECT: _rule("manager", "Not authorized to delete this project"),
    Action.ADD_MEMBER: _rule("manager admin", "Not authorized to add members to this project"),
    Action.REMOVE_MEMBER: _rule("manager admin", "Not authorized to remove members from this project"),
    Action.CHANGE_MEMBER_ROLE: _rule("manager", "Not authorized to update member roles"),
    Action.CREATE_TASK: _rule("member", "Not authorized to create tasks in this project"),
    Action.LIST_TASKS: _rule("member", "Not authorized to access tasks in this project"),
    Action.VIEW_TASK: _rule("manager member assignee creator", "Not authorized to access this task", on_task=True),
    Action.UPDATE_TASK: _rule("manager admin creator assignee", "Not authorized to update this task", on_task=True),
    Action.CHANGE_ASSIGNEE: _rule("manager admin", "Not authorized to change task assignee", on_task=True),
    Action.DELETE_TASK: _rule("manager admin creator", "Not authorized to delete this task", on_task=True),
    Action.UPDATE_TASK_STATUS: _rule("manager admin creator assignee", "Not authorized to update this task status", on_task=True),
    Action.ASSIGN_TASK: _rule("manager admin assignee", "Not authorized to assign this task", on_task=True),
    Action.COMMENT_TASK: _rule("manager member assignee creator", "Not authorized to comment on this task", on_task=True),
    Action.VIEW_COMMENTS: _rule("manager member assignee creator", "Not authorized to view comments for this task", on_task=True),
}


def _membership(project: Any, user_id: Optional[int]) -> Optional[Any]:
    if user_id is None:
        return None
    for member in project.members or []:
        if member.user_id == user_id:
            return member
    return None


def is_project_participant(project: Any, user_id: Optional[int]) -> bool:
    """Менеджер проекта или владелец строки ProjectMember."""
    if user_id is None:
        return False
    return project.manager_id == user_id or _membership(project, user_id) is not None


def resolve_roles(principal: Principal, project: Any, task: Any = None) -> Roles:
    """
    Вычисляет роли principal относительно проекта (и задачи, если передана).
    """
    membership = _membership(project, principal.id)
    is_manager = project.manager_id == principal.id
    return Roles(
        is_manager=is_manager,
        is_admin=membership is not None and membership.role == MEMBER_ROLE_ADMIN,
        is_member=membership is not None or is_manager,
        is_creator=task is not None and task.created_by_id == principal.id,
        is_assignee=task is not None and task.assignee_id is not None and task.assignee_id == principal.id,
    )


def evaluate(principal: Optional[Principal], resource: Any, action: Action) -> Decision:
    """
    Чистая функция решения: (principal, проект|задача, действие) -> Decision.

    Для действий над задачей ресурс: задача с загруженным ``project``,
    для остальных: проект.
    """
    rule = RULES[Action(action)]
    if principal is None:
        return Decision(False, rule.denial)
    if rule.on_task:
        roles = resolve_roles(principal, resource.project, resource)
    else:
        roles = resolve_roles(principal, resource)
    if roles.any_of(rule.allowed_roles):
        return Decision(True)
    return Decision(False, rule.denial)


def authorize(principal: Optional[Principal], resource: Any, action: Action) -> None:
    """
    То же, что evaluate, но при отказе бросает ForbiddenError с текстом для клиента.
    """
    decision = evaluate(principal, resource, action)
    if not decision.allowed:
        raise ForbiddenError(decision.reason)


def ensure_not_manager(project: Any, user_id: int, action: Action) -> None:
    """
    Менеджера нельзя удалить из проекта или сменить ему роль, кто бы ни вызывал.
    """
    if project.manager_id != user_id:
        return
    if action == Action.REMOVE_MEMBER:
        raise ManagerProtected("Cannot remove the project manager")
    raise ManagerProtected("Cannot change the role of the project manager")


def ensure_assignable(project: Any, user_id: Optional[int]) -> None:
    """
    Исполнитель задачи должен быть участником или менеджером проекта.
    None означает снятие исполнителя и всегда допустим.
    """
    if user_id is None:
        return
    if not is_project_participant(project, user_id):
        raise AssigneeNotMember("Cannot assign task to a non-member")
