import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.auth.deps import get_current_user
from app.db import get_db
from app.models.enums import Resource
from app.models.membership import ProjectMember
from app.models.project import Project, default_statuses
from app.models.user import User
from app.notifications import service as notifications
from app.rbac.deps import ProjectContext, require_perm
from app.schemas.projects import (
    MemberIn,
    MemberOut,
    MemberRoleIn,
    ProjectCreateIn,
    ProjectOut,
    ProjectUpdateIn,
    StatusOut,
)

router = APIRouter(prefix="/projects", tags=["projects"])

def _statuses(names: list[str]) -> list[dict]:
    return [{"name": n, "order": i} for i, n in enumerate(names, start=1)]

def project_out(p: Project) -> ProjectOut:
    return ProjectOut(
        id=p.id,
        owner_id=p.owner_id,
        name=p.name,
        description=p.description,
        statuses=[StatusOut(**s) for s in sorted(p.statuses, key=lambda s: s["order"])],
        members=[MemberOut(user_id=m.user_id, project_id=m.project_id, role=m.role) for m in p.members],
    )

@router.post("", response_model=ProjectOut)
def create_project(
    payload: ProjectCreateIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProjectOut:
    # creator owns the project: implicit Admin, no membership row
    p = Project(
        owner_id=user.id,
        name=payload.name,
        description=payload.description,
        statuses=_statuses(payload.statuses) if payload.statuses else default_statuses(),
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    return project_out(p)

@router.get("", response_model=list[ProjectOut])
def list_projects(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ProjectOut]:
    member_of = select(ProjectMember.project_id).where(ProjectMember.user_id == user.id)
    q = (
        select(Project)
        .where(or_(Project.owner_id == user.id, Project.id.in_(member_of)))
        .order_by(Project.created_at.desc())
    )
    return [project_out(p) for p in db.scalars(q).all()]

@router.get("/{project_id}", response_model=ProjectOut)
def get_project(ctx: ProjectContext = Depends(require_perm(Resource.project, "view"))) -> ProjectOut:
    return project_out(ctx.project)

@router.patch("/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: uuid.UUID,
    payload: ProjectUpdateIn,
    ctx: ProjectContext = Depends(require_perm(Resource.project, "edit")),
    db: Session = Depends(get_db),
) -> ProjectOut:
    p = ctx.project
    if payload.statuses is not None:
        if not ctx.can(Resource.project, "manage-statuses"):
            raise HTTPException(status_code=403, detail="insufficient permissions")
        # existing tasks and rules keep whatever status they hold
        p.statuses = _statuses(payload.statuses)

    if payload.name is not None:
        p.name = payload.name
    if "description" in payload.model_fields_set:
        p.description = payload.description

    db.add(p)
    db.commit()
    db.refresh(p)
    return project_out(p)

@router.delete("/{project_id}")
def delete_project(
    project_id: uuid.UUID,
    ctx: ProjectContext = Depends(require_perm(Resource.project, "delete")),
    db: Session = Depends(get_db),
) -> dict:
    db.delete(ctx.project)
    db.commit()
    return {"deleted": True}

@router.post("/{project_id}/members", response_model=MemberOut)
def invite_member(
    project_id: uuid.UUID,
    payload: MemberIn,
    ctx: ProjectContext = Depends(require_perm(Resource.project, "invite")),
    db: Session = Depends(get_db),
) -> MemberOut:
    email = payload.email.lower().strip()
    invited = db.scalar(select(User).where(User.email == email))
    if invited is None:
        invited = User(email=email)
        db.add(invited)
        db.flush()

    if invited.id == ctx.project.owner_id:
        raise HTTPException(status_code=400, detail="owner is already a member")

    existing = db.get(ProjectMember, {"project_id": project_id, "user_id": invited.id})
    if existing is not None:
        return MemberOut(user_id=existing.user_id, project_id=existing.project_id, role=existing.role)

    m = ProjectMember(project_id=project_id, user_id=invited.id, role=payload.role)
    db.add(m)
    notifications.project_invitation(db, ctx.project, invited.id)
    db.commit()
    return MemberOut(user_id=m.user_id, project_id=m.project_id, role=m.role)

@router.patch("/{project_id}/members/{user_id}", response_model=MemberOut)
def change_member_role(
    project_id: uuid.UUID,
    user_id: uuid.UUID,
    payload: MemberRoleIn,
    ctx: ProjectContext = Depends(require_perm(Resource.project, "manage-roles")),
    db: Session = Depends(get_db),
) -> MemberOut:
    m = db.get(ProjectMember, {"project_id": project_id, "user_id": user_id})
    if m is None:
        raise HTTPException(status_code=404, detail="member not found")
    m.role = payload.role
    db.add(m)
    db.commit()
    return MemberOut(user_id=m.user_id, project_id=m.project_id, role=m.role)

@router.delete("/{project_id}/members/{user_id}")
def remove_member(
    project_id: uuid.UUID,
    user_id: uuid.UUID,
    ctx: ProjectContext = Depends(require_perm(Resource.project, "manage-roles")),
    db: Session = Depends(get_db),
) -> dict:
    m = db.get(ProjectMember, {"project_id": project_id, "user_id": user_id})
    if m is None:
        raise HTTPException(status_code=404, detail="member not found")
    db.delete(m)
    db.commit()
    return {"deleted": True}
