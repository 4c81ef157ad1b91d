import uuid

from sqlalchemy.orm import Session

from app.models.enums import Role
from app.models.project import Project

def role_in_project(project: Project, user_id: uuid.UUID) -> Role | None:
    # ownership wins over any (stale) membership row
    if project.owner_id == user_id:
        return Role.admin

    for m in project.members:
        if m.user_id == user_id:
            return Role(m.role)
    return None

def resolve_role(db: Session, user_id: uuid.UUID, project_id: uuid.UUID) -> Role | None:
    project = db.get(Project, project_id, populate_existing=True)
    if project is None:
        return None
    return role_in_project(project, user_id)
