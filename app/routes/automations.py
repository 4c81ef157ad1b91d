import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.automation import store
from app.db import get_db
from app.models.automation import Automation
from app.models.enums import Resource
from app.rbac.deps import ProjectContext, require_perm
from app.schemas.automations import AutomationIn, AutomationOut, AutomationUpdateIn

router = APIRouter(prefix="/projects/{project_id}/automations", tags=["automations"])

def automation_out(a: Automation) -> AutomationOut:
    return AutomationOut(
        id=a.id,
        project_id=a.project_id,
        name=a.name,
        trigger=a.trigger,
        actions=a.actions,
        active=a.active,
        created_by=a.created_by,
        created_at=a.created_at,
        updated_at=a.updated_at,
    )

def _get_rule(db: Session, project_id: uuid.UUID, automation_id: uuid.UUID) -> Automation:
    rule = store.get(db, project_id, automation_id)
    if rule is None:
        raise HTTPException(status_code=404, detail="automation not found")
    return rule

@router.get("", response_model=list[AutomationOut])
def list_automations(
    project_id: uuid.UUID,
    ctx: ProjectContext = Depends(require_perm(Resource.automation, "view")),
    db: Session = Depends(get_db),
) -> list[AutomationOut]:
    return [automation_out(a) for a in store.list_for_project(db, project_id)]

@router.post("", response_model=AutomationOut, status_code=201)
def create_automation(
    project_id: uuid.UUID,
    payload: AutomationIn,
    ctx: ProjectContext = Depends(require_perm(Resource.automation, "create")),
    db: Session = Depends(get_db),
) -> AutomationOut:
    try:
        rule = store.create(
            db,
            ctx.project,
            created_by=ctx.user.id,
            name=payload.name,
            trigger=payload.trigger,
            actions=payload.actions,
            active=payload.active,
        )
    except store.RuleValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return automation_out(rule)

@router.patch("/{automation_id}", response_model=AutomationOut)
def update_automation(
    project_id: uuid.UUID,
    automation_id: uuid.UUID,
    payload: AutomationUpdateIn,
    ctx: ProjectContext = Depends(require_perm(Resource.automation, "view")),
    db: Session = Depends(get_db),
) -> AutomationOut:
    # toggling needs enable/disable, anything else needs edit
    if payload.only_toggles_active():
        needed = "enable" if payload.active else "disable"
    else:
        needed = "edit"
    if not ctx.can(Resource.automation, needed):
        raise HTTPException(status_code=403, detail="insufficient permissions")

    rule = _get_rule(db, project_id, automation_id)
    try:
        rule = store.update(
            db,
            ctx.project,
            rule,
            name=payload.name,
            trigger=payload.trigger,
            actions=payload.actions,
            active=payload.active,
        )
    except store.RuleValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return automation_out(rule)

@router.delete("/{automation_id}")
def delete_automation(
    project_id: uuid.UUID,
    automation_id: uuid.UUID,
    ctx: ProjectContext = Depends(require_perm(Resource.automation, "delete")),
    db: Session = Depends(get_db),
) -> dict:
    store.delete(db, _get_rule(db, project_id, automation_id))
    return {"deleted": True}
