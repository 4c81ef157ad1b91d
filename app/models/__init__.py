from app.models.auth_magic_link import AuthMagicLink
from app.models.automation import Automation
from app.models.membership import ProjectMember
from app.models.notification import Notification
from app.models.project import Project
from app.models.task import Task, TaskComment
from app.models.user import User, UserBadge

__all__ = [
    "User",
    "UserBadge",
    "Project",
    "ProjectMember",
    "Task",
    "TaskComment",
    "Automation",
    "Notification",
    "AuthMagicLink",
]
