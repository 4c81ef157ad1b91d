import uuid
from datetime import date, datetime
from pydantic import BaseModel, Field

from app.models.enums import Priority

class TaskCreateIn(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    description: str | None = None
    status: str | None = None
    priority: Priority = Priority.medium
    tags: list[str] = []
    due_date: date | None = None
    assignee_id: uuid.UUID | None = None

class TaskUpdateIn(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = None
    status: str | None = None
    priority: Priority | None = None
    tags: list[str] | None = None
    due_date: date | None = None
    assignee_id: uuid.UUID | None = None

class TaskOut(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    title: str
    description: str | None
    status: str
    priority: Priority
    tags: list[str]
    due_date: date | None
    created_by: uuid.UUID
    assignee_id: uuid.UUID | None

class CommentIn(BaseModel):
    body: str = Field(min_length=1)

class CommentOut(BaseModel):
    id: uuid.UUID
    task_id: uuid.UUID
    author_id: uuid.UUID
    body: str
    created_at: datetime
