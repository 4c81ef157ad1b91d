import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.automation.rules import ChangeStatusAction, ReassignTaskAction
from app.models.automation import Automation
from app.models.enums import TriggerType
from app.models.project import Project

class RuleValidationError(ValueError):
    pass

def list_active(db: Session, project_id: uuid.UUID, trigger_type: TriggerType | str) -> list[Automation]:
    q = (
        select(Automation)
        .where(
            Automation.project_id == project_id,
            Automation.trigger_type == TriggerType(trigger_type).value,
            Automation.active.is_(True),
        )
        .order_by(Automation.created_at, Automation.id)
    )
    return list(db.scalars(q).all())

def list_for_project(db: Session, project_id: uuid.UUID) -> list[Automation]:
    q = select(Automation).where(Automation.project_id == project_id).order_by(Automation.created_at)
    return list(db.scalars(q).all())

def get(db: Session, project_id: uuid.UUID, automation_id: uuid.UUID) -> Automation | None:
    return db.scalar(
        select(Automation).where(Automation.id == automation_id, Automation.project_id == project_id)
    )

def validate_actions(project: Project, actions: list) -> None:
    for action in actions:
        if isinstance(action, ChangeStatusAction) and not project.has_status(action.params.status):
            raise RuleValidationError("invalid status in automation action")

        if isinstance(action, ReassignTaskAction):
            try:
                target = uuid.UUID(action.params.assignee_id)
            except ValueError:
                raise RuleValidationError("invalid assignee in automation action")
            if not project.is_participant(target):
                raise RuleValidationError("reassign target must be a project member")

def create(
    db: Session,
    project: Project,
    created_by: uuid.UUID,
    name: str,
    trigger,
    actions: list,
    active: bool = True,
) -> Automation:
    validate_actions(project, actions)

    rule = Automation(
        project_id=project.id,
        name=name,
        trigger_type=trigger.type,
        trigger=trigger.to_json(),
        actions=[a.to_json() for a in actions],
        active=active,
        created_by=created_by,
    )
    db.add(rule)
    db.commit()
    db.refresh(rule)
    return rule

def update(
    db: Session,
    project: Project,
    rule: Automation,
    name: str | None = None,
    trigger=None,
    actions: list | None = None,
    active: bool | None = None,
) -> Automation:
    if actions is not None:
        validate_actions(project, actions)
        rule.actions = [a.to_json() for a in actions]

    if name is not None:
        rule.name = name
    if trigger is not None:
        rule.trigger = trigger.to_json()
        rule.trigger_type = trigger.type
    if active is not None:
        rule.active = active

    db.add(rule)
    db.commit()
    db.refresh(rule)
    return rule

def delete(db: Session, rule: Automation) -> None:
    db.delete(rule)
    db.commit()
