import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from app import realtime
from app.automation import engine
from app.db import get_db
from app.models.enums import Resource
from app.models.project import Project
from app.models.task import Task, TaskComment
from app.notifications import service as notifications
from app.rbac.deps import ProjectContext, require_perm
from app.schemas.tasks import CommentIn, CommentOut, TaskCreateIn, TaskOut, TaskUpdateIn

router = APIRouter(prefix="/projects/{project_id}/tasks", tags=["tasks"])

def task_out(t: Task) -> TaskOut:
    return TaskOut(
        id=t.id,
        project_id=t.project_id,
        title=t.title,
        description=t.description,
        status=t.status,
        priority=t.priority,
        tags=list(t.tags or []),
        due_date=t.due_date,
        created_by=t.created_by,
        assignee_id=t.assignee_id,
    )

def _check_status(project: Project, status: str) -> None:
    if not project.has_status(status):
        raise HTTPException(status_code=400, detail="invalid status for this project")

def _check_assignee(project: Project, assignee_id: uuid.UUID | None) -> None:
    if assignee_id is not None and not project.is_participant(assignee_id):
        raise HTTPException(status_code=400, detail="assignee must be a project member")

def _get_task(db: Session, project_id: uuid.UUID, task_id: uuid.UUID) -> Task:
    t = db.scalar(select(Task).where(Task.id == task_id, Task.project_id == project_id))
    if t is None:
        raise HTTPException(status_code=404, detail="task not found")
    return t

def _publish(event: str, t: Task) -> None:
    payload = {"event": event, "task": task_out(t).model_dump(mode="json")}
    realtime.publish(realtime.project_topic(t.project_id), payload)

@router.post("", response_model=TaskOut)
def create_task(
    project_id: uuid.UUID,
    payload: TaskCreateIn,
    ctx: ProjectContext = Depends(require_perm(Resource.task, "create")),
    db: Session = Depends(get_db),
) -> TaskOut:
    project = ctx.project
    status = payload.status or project.status_names[0]
    _check_status(project, status)
    _check_assignee(project, payload.assignee_id)

    t = Task(
        project_id=project_id,
        title=payload.title,
        description=payload.description,
        status=status,
        priority=payload.priority,
        tags=list(payload.tags),
        due_date=payload.due_date,
        created_by=ctx.user.id,
        assignee_id=payload.assignee_id,
    )
    db.add(t)
    db.flush()
    notifications.task_assigned(db, t, ctx.user.id)
    db.commit()

    # automations never fail the caller's request
    engine.on_creation(db, t)
    if t.assignee_id is not None:
        engine.on_assignment(db, t)

    db.refresh(t)
    _publish("task_created", t)
    return task_out(t)

@router.get("", response_model=list[TaskOut])
def list_tasks(
    project_id: uuid.UUID,
    ctx: ProjectContext = Depends(require_perm(Resource.task, "view")),
    db: Session = Depends(get_db),
) -> list[TaskOut]:
    q = select(Task).where(Task.project_id == project_id).order_by(Task.created_at.desc())
    return [task_out(t) for t in db.scalars(q).all()]

@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    ctx: ProjectContext = Depends(require_perm(Resource.task, "view")),
    db: Session = Depends(get_db),
) -> TaskOut:
    return task_out(_get_task(db, project_id, task_id))

@router.patch("/{task_id}", response_model=TaskOut)
def update_task(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    payload: TaskUpdateIn,
    ctx: ProjectContext = Depends(require_perm(Resource.task, "edit")),
    db: Session = Depends(get_db),
) -> TaskOut:
    project = ctx.project
    t = _get_task(db, project_id, task_id)
    fields = payload.model_fields_set

    previous_status = t.status
    previous_priority = t.priority
    previous_assignee = t.assignee_id

    status_changed = payload.status is not None and payload.status != t.status
    if status_changed:
        if not ctx.can(Resource.task, "move"):
            raise HTTPException(status_code=403, detail="insufficient permissions")
        _check_status(project, payload.status)
        t.status = payload.status

    # explicit null unassigns
    if "assignee_id" in fields and payload.assignee_id != t.assignee_id:
        if not ctx.can(Resource.task, "assign"):
            raise HTTPException(status_code=403, detail="insufficient permissions")
        _check_assignee(project, payload.assignee_id)
        t.assignee_id = payload.assignee_id

    if payload.priority is not None:
        t.priority = payload.priority
    if payload.title is not None:
        t.title = payload.title
    if "description" in fields:
        t.description = payload.description
    if payload.tags is not None:
        t.tags = list(payload.tags)
    if "due_date" in fields:
        t.due_date = payload.due_date

    assignee_changed = t.assignee_id != previous_assignee
    priority_changed = t.priority != previous_priority

    db.add(t)
    if status_changed:
        notifications.status_changed(db, t, previous_status)
    if assignee_changed:
        notifications.task_assigned(db, t, ctx.user.id)
    db.commit()

    if status_changed:
        engine.on_status_change(db, t, previous_status)
    if assignee_changed:
        engine.on_assignment(db, t)
    if priority_changed:
        engine.on_priority_change(db, t, previous_priority)

    db.refresh(t)
    _publish("task_updated", t)
    return task_out(t)

@router.delete("/{task_id}")
def delete_task(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    ctx: ProjectContext = Depends(require_perm(Resource.task, "delete")),
    db: Session = Depends(get_db),
) -> dict:
    t = _get_task(db, project_id, task_id)
    db.delete(t)
    db.commit()
    payload = {"event": "task_deleted", "task_id": str(task_id)}
    realtime.publish(realtime.project_topic(project_id), payload)
    return {"deleted": True}

@router.post("/{task_id}/comments", response_model=CommentOut)
def add_comment(
    project_id: uuid.UUID,
    task_id: uuid.UUID,
    payload: CommentIn,
    ctx: ProjectContext = Depends(require_perm(Resource.task, "comment")),
    db: Session = Depends(get_db),
) -> CommentOut:
    t = _get_task(db, project_id, task_id)
    c = TaskComment(task_id=t.id, author_id=ctx.user.id, body=payload.body)
    db.add(c)
    db.commit()

    engine.on_comment(db, t, c)

    db.refresh(c)
    return CommentOut(id=c.id, task_id=c.task_id, author_id=c.author_id, body=c.body, created_at=c.created_at)
