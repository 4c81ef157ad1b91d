# Executors mutate the caller's session and return an outcome tag; the engine
# commits or rolls back.
import uuid
from datetime import datetime, timezone

import structlog
from sqlalchemy.orm import Session

from app.automation.rules import (
    KNOWN_ACTION_TYPES,
    AddCommentAction,
    ApplyLabelAction,
    AssignBadgeAction,
    ChangePriorityAction,
    ChangeStatusAction,
    ReassignTaskAction,
    RemoveLabelAction,
    SendNotificationAction,
    parse_action,
)
from app.models.automation import Automation
from app.models.enums import NotificationCategory, Priority
from app.models.project import Project
from app.models.task import Task, TaskComment
from app.models.user import User, UserBadge
from app.notifications import service as notifications

log = structlog.get_logger(__name__)

DEFAULT_NOTIFICATION = "Automated notification"

UNSUPPORTED = "unsupported"

def change_status(db: Session, rule: Automation, action: ChangeStatusAction, task: Task) -> str:
    target = action.params.status

    # validated when the rule was saved, not now
    project = db.get(Project, task.project_id)
    if project is not None and not project.has_status(target):
        log.warning(
            "automation_orphan_status",
            rule_id=str(rule.id),
            task_id=str(task.id),
            status=target,
        )

    task.status = target
    db.add(task)
    log.info("automation_status_changed", task_id=str(task.id), status=target)
    return "status_changed"

def assign_badge(db: Session, rule: Automation, action: AssignBadgeAction, task: Task) -> str:
    if task.assignee_id is None:
        return "no_assignee"

    user = db.get(User, task.assignee_id)
    if user is None:
        return "assignee_missing"

    name = action.params.badge_name
    if user.has_badge(name):
        return "badge_already_held"

    user.badges.append(
        UserBadge(name=name, awarded_at=datetime.now(timezone.utc), project_id=task.project_id)
    )
    db.add(user)
    notifications.badge_awarded(db, user.id, name, task.project_id)
    log.info("automation_badge_awarded", user_id=str(user.id), badge=name)
    return "badge_awarded"

def send_notification(db: Session, rule: Automation, action: SendNotificationAction, task: Task) -> str:
    if task.assignee_id is None:
        return "no_assignee"

    notifications.enqueue(
        db,
        task.assignee_id,
        action.params.message or DEFAULT_NOTIFICATION,
        NotificationCategory.automation,
        project_id=task.project_id,
        task_id=task.id,
    )
    log.info("automation_notification_sent", user_id=str(task.assignee_id), task_id=str(task.id))
    return "notified"

def reassign_task(db: Session, rule: Automation, action: ReassignTaskAction, task: Task) -> str:
    task.assignee_id = uuid.UUID(action.params.assignee_id)
    db.add(task)
    return "reassigned"

def add_comment(db: Session, rule: Automation, action: AddCommentAction, task: Task) -> str:
    db.add(TaskComment(task_id=task.id, author_id=rule.created_by, body=action.params.text))
    return "commented"

def change_priority(db: Session, rule: Automation, action: ChangePriorityAction, task: Task) -> str:
    task.priority = Priority(action.params.priority)
    db.add(task)
    return "priority_changed"

def apply_label(db: Session, rule: Automation, action: ApplyLabelAction, task: Task) -> str:
    tags = list(task.tags or [])
    if action.params.label in tags:
        return "label_present"
    # reassign, JSON columns do not track in-place mutation
    task.tags = tags + [action.params.label]
    db.add(task)
    return "label_applied"

def remove_label(db: Session, rule: Automation, action: RemoveLabelAction, task: Task) -> str:
    tags = list(task.tags or [])
    if action.params.label not in tags:
        return "label_absent"
    task.tags = [t for t in tags if t != action.params.label]
    db.add(task)
    return "label_removed"

EXECUTORS = {
    ChangeStatusAction: change_status,
    AssignBadgeAction: assign_badge,
    SendNotificationAction: send_notification,
    ReassignTaskAction: reassign_task,
    AddCommentAction: add_comment,
    ChangePriorityAction: change_priority,
    ApplyLabelAction: apply_label,
    RemoveLabelAction: remove_label,
}

def execute(db: Session, rule: Automation, raw_action: dict, task: Task) -> str:
    action_type = raw_action.get("type") if isinstance(raw_action, dict) else None
    if action_type not in KNOWN_ACTION_TYPES:
        log.warning("automation_action_unsupported", rule_id=str(rule.id), action_type=action_type)
        return UNSUPPORTED

    action = parse_action(raw_action)
    return EXECUTORS[type(action)](db, rule, action, task)
