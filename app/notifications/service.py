import uuid

import structlog
from sqlalchemy.orm import Session

from app.models.enums import NotificationCategory
from app.models.notification import Notification

log = structlog.get_logger(__name__)

def enqueue(
    db: Session,
    recipient_id: uuid.UUID,
    message: str,
    category: NotificationCategory | str,
    project_id: uuid.UUID | None = None,
    task_id: uuid.UUID | None = None,
) -> Notification:
    # joins the caller's unit of work; delivery happens on commit
    n = Notification(
        recipient_id=recipient_id,
        content=message,
        category=NotificationCategory(category).value,
        related_project_id=project_id,
        related_task_id=task_id,
    )
    db.add(n)
    log.debug("notification_enqueued", recipient_id=str(recipient_id), category=n.category)
    return n

def badge_awarded(
    db: Session, user_id: uuid.UUID, badge_name: str, project_id: uuid.UUID | None
) -> Notification:
    return enqueue(
        db,
        user_id,
        f'Congratulations! You\'ve earned the "{badge_name}" badge',
        NotificationCategory.badge,
        project_id=project_id,
    )

def task_assigned(db: Session, task, assigner_id: uuid.UUID) -> Notification | None:
    if task.assignee_id is None or task.assignee_id == assigner_id:
        return None
    return enqueue(
        db,
        task.assignee_id,
        f'You have been assigned to the task "{task.title}"',
        NotificationCategory.task_assignment,
        project_id=task.project_id,
        task_id=task.id,
    )

def status_changed(db: Session, task, previous_status: str) -> Notification | None:
    if task.assignee_id is None:
        return None
    return enqueue(
        db,
        task.assignee_id,
        f'Task "{task.title}" has been moved from "{previous_status}" to "{task.status}"',
        NotificationCategory.status_change,
        project_id=task.project_id,
        task_id=task.id,
    )

def project_invitation(db: Session, project, user_id: uuid.UUID) -> Notification:
    return enqueue(
        db,
        user_id,
        f'You have been invited to join the project "{project.name}"',
        NotificationCategory.project_invitation,
        project_id=project.id,
    )
