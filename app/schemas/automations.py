import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator

from app.automation.rules import Action, Trigger

def _single_action(data: Any) -> Any:
    # {"action": {...}} is shorthand for {"actions": [{...}]}
    if isinstance(data, dict) and "action" in data and "actions" not in data:
        data = dict(data)
        data["actions"] = [data.pop("action")]
    return data

class AutomationIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    trigger: Trigger
    actions: list[Action] = Field(min_length=1)
    active: bool = True

    @model_validator(mode="before")
    @classmethod
    def normalise_action(cls, data: Any) -> Any:
        return _single_action(data)

class AutomationUpdateIn(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    trigger: Trigger | None = None
    actions: list[Action] | None = Field(default=None, min_length=1)
    active: bool | None = None

    @model_validator(mode="before")
    @classmethod
    def normalise_action(cls, data: Any) -> Any:
        return _single_action(data)

    def only_toggles_active(self) -> bool:
        return self.model_fields_set == {"active"}

class AutomationOut(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    name: str
    trigger: dict
    actions: list[dict]
    active: bool
    created_by: uuid.UUID
    created_at: datetime
    updated_at: datetime
