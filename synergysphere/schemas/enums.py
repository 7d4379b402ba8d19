#synergysphere/schemas/enums.py
from enum import Enum

class UserRole(str, Enum):
    admin = "admin"
    user = "user"

class ProjectStatus(str, Enum):
    active = "active"
    archived = "archived"
    completed = "completed"

class MemberRole(str, Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"

class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"

class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
