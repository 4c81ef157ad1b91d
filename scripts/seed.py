import uuid
from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.auth.magic_links import find_or_create_user
from app.automation import store
from app.automation.rules import parse_action, parse_trigger
from app.db import SessionLocal
from app.models.automation import Automation
from app.models.enums import Role
from app.models.membership import ProjectMember
from app.models.project import Project, default_statuses
from app.models.task import Task

@dataclass
class SeedResult:
    owner_email: str
    editor_email: str
    viewer_email: str
    project_id: uuid.UUID
    task_id: uuid.UUID
    automation_id: uuid.UUID

def get_or_create_member(db: Session, project_id: uuid.UUID, user_id: uuid.UUID, role: Role) -> ProjectMember:
    m = db.get(ProjectMember, {"project_id": project_id, "user_id": user_id})
    if m is None:
        m = ProjectMember(project_id=project_id, user_id=user_id, role=role)
        db.add(m)
        db.flush()
    elif m.role != role:
        m.role = role
        db.add(m)
        db.flush()
    return m

def get_or_create_project(db: Session, owner_id: uuid.UUID, name: str) -> Project:
    p = db.scalar(select(Project).where(Project.owner_id == owner_id, Project.name == name))
    if p is None:
        p = Project(owner_id=owner_id, name=name, statuses=default_statuses())
        db.add(p)
        db.flush()
    return p

def get_or_create_task(
    db: Session,
    project_id: uuid.UUID,
    title: str,
    created_by: uuid.UUID,
    assignee_id: uuid.UUID | None,
    due_date: date | None = None,
) -> Task:
    t = db.scalar(select(Task).where(Task.project_id == project_id, Task.title == title))
    if t is None:
        t = Task(
            project_id=project_id,
            title=title,
            created_by=created_by,
            assignee_id=assignee_id,
            due_date=due_date,
            tags=[],
        )
        db.add(t)
        db.flush()
    elif t.assignee_id != assignee_id:
        # keep it stable if you re-run seed
        t.assignee_id = assignee_id
        db.add(t)
        db.flush()
    return t

def get_or_create_automation(db: Session, project: Project, created_by: uuid.UUID) -> Automation:
    name = "Finisher badge"
    a = db.scalar(select(Automation).where(Automation.project_id == project.id, Automation.name == name))
    if a is None:
        a = store.create(
            db,
            project,
            created_by=created_by,
            name=name,
            trigger=parse_trigger({"type": "task_status_change", "condition": {"toStatus": "Done"}}),
            actions=[parse_action({"type": "assign_badge", "params": {"badgeName": "Finisher"}})],
        )
    return a

def seed() -> SeedResult:
    db = SessionLocal()
    try:
        owner = find_or_create_user(db, "owner@example.com", "owner")
        editor = find_or_create_user(db, "editor@example.com", "editor")
        viewer = find_or_create_user(db, "viewer@example.com", "viewer")

        project = get_or_create_project(db, owner.id, "seeded project")

        get_or_create_member(db, project.id, editor.id, Role.editor)
        get_or_create_member(db, project.id, viewer.id, Role.viewer)

        task = get_or_create_task(
            db,
            project.id,
            "seeded task",
            created_by=owner.id,
            assignee_id=editor.id,
            due_date=date.today() + timedelta(days=3),
        )

        db.commit()
        db.refresh(project)

        automation = get_or_create_automation(db, project, owner.id)

        return SeedResult(
            owner_email=owner.email,
            editor_email=editor.email,
            viewer_email=viewer.email,
            project_id=project.id,
            task_id=task.id,
            automation_id=automation.id,
        )
    finally:
        db.close()

if __name__ == "__main__":
    r = seed()
    print("seed complete")
    print(f"project_id={r.project_id}")
    print(f"task_id={r.task_id}")
    print(f"automation_id={r.automation_id}")
    print("users:")
    print(f"  owner:  {r.owner_email}")
    print(f"  editor: {r.editor_email}")
    print(f"  viewer: {r.viewer_email}")
