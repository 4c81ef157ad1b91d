import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.auth.deps import get_current_user
from app.db import get_db
from app.models.notification import Notification
from app.models.user import User
from app.schemas.notifications import NotificationOut

router = APIRouter(prefix="/notifications", tags=["notifications"])

def notification_out(n: Notification) -> NotificationOut:
    return NotificationOut(
        id=n.id,
        content=n.content,
        category=n.category,
        is_read=n.is_read,
        related_project_id=n.related_project_id,
        related_task_id=n.related_task_id,
        created_at=n.created_at,
    )

@router.get("", response_model=list[NotificationOut])
def list_notifications(
    unread_only: bool = False,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[NotificationOut]:
    q = select(Notification).where(Notification.recipient_id == user.id)
    if unread_only:
        q = q.where(Notification.is_read.is_(False))
    q = q.order_by(Notification.created_at.desc()).limit(100)
    return [notification_out(n) for n in db.scalars(q).all()]

@router.post("/read-all")
def mark_all_read(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    result = db.execute(
        update(Notification)
        .where(Notification.recipient_id == user.id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    db.commit()
    return {"updated": result.rowcount}

@router.post("/{notification_id}/read", response_model=NotificationOut)
def mark_read(
    notification_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> NotificationOut:
    n = db.scalar(
        select(Notification).where(Notification.id == notification_id, Notification.recipient_id == user.id)
    )
    if n is None:
        raise HTTPException(status_code=404, detail="notification not found")
    n.is_read = True
    db.add(n)
    db.commit()
    db.refresh(n)
    return notification_out(n)
