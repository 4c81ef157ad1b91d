import uuid
from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.enums import Role

def _unique_names(v: list[str] | None) -> list[str] | None:
    if v is None:
        return v
    names = [s.strip() for s in v]
    if any(not s for s in names):
        raise ValueError("status names must not be empty")
    if len(set(names)) != len(names):
        raise ValueError("status names must be unique")
    return names

class ProjectCreateIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    statuses: list[str] | None = Field(default=None, min_length=1)

    @field_validator("statuses")
    @classmethod
    def check_statuses(cls, v: list[str] | None) -> list[str] | None:
        return _unique_names(v)

class ProjectUpdateIn(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    statuses: list[str] | None = Field(default=None, min_length=1)

    @field_validator("statuses")
    @classmethod
    def check_statuses(cls, v: list[str] | None) -> list[str] | None:
        return _unique_names(v)

class StatusOut(BaseModel):
    name: str
    order: int

class MemberIn(BaseModel):
    email: EmailStr
    role: Role = Role.viewer

class MemberRoleIn(BaseModel):
    role: Role

class MemberOut(BaseModel):
    user_id: uuid.UUID
    project_id: uuid.UUID
    role: Role

class ProjectOut(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    description: str | None
    statuses: list[StatusOut]
    members: list[MemberOut] = []
