from .user import User
from .project import Project, Tag, project_tags
from .project_member import ProjectMember
from .task import Task
from .comment import Comment

# все модели должны быть импортированы здесь, иначе Base.metadata их не увидит
