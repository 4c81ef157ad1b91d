import os

# must be set before app.config is imported
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["REALTIME_ENABLED"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"

import uuid
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  registers every table on Base.metadata
from app.db import get_db
from app.main import create_app
from app.models.automation import Automation
from app.models.base import Base
from app.models.enums import Role
from app.models.membership import ProjectMember
from app.models.project import Project, default_statuses
from app.models.task import Task
from app.models.user import User

@pytest.fixture()
def db_session() -> Session:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session: Session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()

@pytest.fixture()
def client(db_session: Session) -> TestClient:
    app = create_app()

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    return TestClient(app)

class Factory:
    """Direct-to-db builders for engine and rbac tests."""

    def __init__(self, db: Session):
        self.db = db

    def user(self, email: str | None = None) -> User:
        u = User(email=email or f"user+{uuid.uuid4().hex[:10]}@example.com")
        self.db.add(u)
        self.db.commit()
        return u

    def project(
        self,
        owner: User,
        members: dict[User, Role] | None = None,
        statuses: list[str] | None = None,
    ) -> Project:
        p = Project(
            owner_id=owner.id,
            name=f"project-{uuid.uuid4().hex[:6]}",
            statuses=(
                [{"name": n, "order": i} for i, n in enumerate(statuses, start=1)]
                if statuses
                else default_statuses()
            ),
        )
        self.db.add(p)
        self.db.flush()
        for user, role in (members or {}).items():
            self.db.add(ProjectMember(project_id=p.id, user_id=user.id, role=role))
        self.db.commit()
        return p

    def task(
        self,
        project: Project,
        creator: User,
        status: str = "To Do",
        assignee: User | None = None,
        due_date: date | None = None,
        tags: list[str] | None = None,
    ) -> Task:
        t = Task(
            project_id=project.id,
            title=f"task-{uuid.uuid4().hex[:6]}",
            status=status,
            created_by=creator.id,
            assignee_id=assignee.id if assignee else None,
            due_date=due_date,
            tags=tags or [],
        )
        self.db.add(t)
        self.db.commit()
        return t

    def rule(
        self,
        project: Project,
        creator: User,
        trigger: dict,
        actions: list[dict],
        active: bool = True,
        name: str | None = None,
    ) -> Automation:
        a = Automation(
            project_id=project.id,
            name=name or f"rule-{uuid.uuid4().hex[:6]}",
            trigger_type=trigger["type"],
            trigger=trigger,
            actions=actions,
            active=active,
            created_by=creator.id,
        )
        self.db.add(a)
        self.db.commit()
        return a

@pytest.fixture()
def make(db_session: Session) -> Factory:
    return Factory(db_session)
