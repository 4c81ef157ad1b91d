# Re-evaluated on every call, so a role change applies to the next request.
import uuid
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.models.enums import Resource, Role
from app.models.project import Project
from app.rbac import perms
from app.rbac.resolver import role_in_project

NOT_A_MEMBER = "not a project member"
INSUFFICIENT = "insufficient permissions"

class ProjectNotFound(Exception):
    def __init__(self, project_id: uuid.UUID):
        super().__init__(f"project {project_id} not found")
        self.project_id = project_id

@dataclass(frozen=True)
class Authorized:
    role: Role
    project: Project

    allowed = True

@dataclass(frozen=True)
class Denied:
    reason: str

    allowed = False

def decide(
    project: Project, user_id: uuid.UUID, resource: Resource | str, action: str
) -> Authorized | Denied:
    role = role_in_project(project, user_id)
    if role is None:
        return Denied(NOT_A_MEMBER)
    if not perms.allows(role, resource, action):
        return Denied(INSUFFICIENT)
    return Authorized(role=role, project=project)

def authorize(
    db: Session,
    user_id: uuid.UUID,
    project_id: uuid.UUID,
    resource: Resource | str,
    action: str,
) -> Authorized | Denied:
    # populate_existing: never trust a membership list cached in the session
    project = db.get(Project, project_id, populate_existing=True)
    if project is None:
        raise ProjectNotFound(project_id)
    return decide(project, user_id, resource, action)
