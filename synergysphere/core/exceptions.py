# synergysphere/core/exceptions.py

class BaseAppException(Exception):
    """Базовый класс для всех кастомных исключений приложения."""
    status_code: int = 500

    def __init__(self, message: str = "App exception"):
        super().__init__(message)
        self.message = message

# ==== Аутентификация ====

class UnauthenticatedError(BaseAppException):
    """Нет валидного principal (токен отсутствует, просрочен или пользователь не найден)."""
    status_code = 401

    def __init__(self, message: str = "Not authorized to access this route"):
        super().__init__(message)

# ==== Авторизация ====

class ForbiddenError(BaseAppException):
    """Отказ политики доступа."""
    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)

# ==== NotFound ====

class NotFoundError(BaseAppException):
    """Ошибка отсутствия ресурса."""
    status_code = 404

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)

class ProjectNotFound(NotFoundError):
    """Ошибка: проект не найден."""
    def __init__(self, message: str = "Project not found"):
        super().__init__(message)

class TaskNotFound(NotFoundError):
    """Ошибка: задача не найдена."""
    def __init__(self, message: str = "Task not found"):
        super().__init__(message)

class UserNotFound(NotFoundError):
    """Ошибка: пользователь не найден."""
    def __init__(self, message: str = "User not found"):
        super().__init__(message)

class MemberNotFound(NotFoundError):
    """Ошибка: участник не найден в проекте."""
    def __init__(self, message: str = "Member not found in this project"):
        super().__init__(message)

# ==== Валидация ====

class ValidationError(BaseAppException):
    """Общая ошибка валидации."""
    status_code = 400

    def __init__(self, message: str = "Validation error"):
        super().__init__(message)

class ProjectValidationError(ValidationError):
    """Ошибка валидации проекта."""
    def __init__(self, message: str = "Project validation error"):
        super().__init__(message)

class TaskValidationError(ValidationError):
    """Ошибка валидации задачи."""
    def __init__(self, message: str = "Task validation error"):
        super().__init__(message)

class UserValidationError(ValidationError):
    """Ошибка валидации пользователя."""
    def __init__(self, message: str = "User validation error"):
        super().__init__(message)

# ==== Конфликты (400, не 403) ====

class ConflictError(ValidationError):
    """Нарушение инварианта данных: дубликаты, защита менеджера, назначение не-участника."""
    def __init__(self, message: str = "Conflict"):
        super().__init__(message)

class DuplicateMembership(ConflictError):
    def __init__(self, message: str = "User is already a member of this project"):
        super().__init__(message)

class ManagerProtected(ConflictError):
    def __init__(self, message: str = "Cannot modify the project manager"):
        super().__init__(message)

class AssigneeNotMember(ConflictError):
    def __init__(self, message: str = "Cannot assign task to a non-member"):
        super().__init__(message)

class UserAlreadyExists(ConflictError):
    def __init__(self, message: str = "User already exists"):
        super().__init__(message)

# ==== Store/transport ====

class InternalError(BaseAppException):
    """Сбой хранилища; исходная ошибка логируется, клиенту уходит общее сообщение."""
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
