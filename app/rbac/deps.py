import uuid

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from app.auth.deps import get_current_user
from app.db import get_db
from app.models.enums import Resource, Role
from app.models.project import Project
from app.models.user import User
from app.rbac import perms
from app.rbac.gate import Denied, ProjectNotFound, authorize, decide

class ProjectContext:
    def __init__(self, project: Project, role: Role, user: User):
        self.project = project
        self.role = role
        self.user = user

    def can(self, resource: Resource | str, action: str) -> bool:
        return decide(self.project, self.user.id, resource, action).allowed

def require_perm(resource: Resource, action: str):
    if not any(perms.allows(role, resource, action) for role in Role):
        raise RuntimeError(f"unknown permission action: {resource.value}:{action}")

    def _checker(
        project_id: uuid.UUID,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> ProjectContext:
        try:
            decision = authorize(db, user.id, project_id, resource, action)
        except ProjectNotFound:
            raise HTTPException(status_code=404, detail="project not found")

        if isinstance(decision, Denied):
            raise HTTPException(status_code=403, detail=decision.reason)
        return ProjectContext(project=decision.project, role=decision.role, user=user)

    return _checker
