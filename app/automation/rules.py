# Rule wire format: camelCase JSON tagged by "type". An empty condition
# string is a wildcard, same as an absent field.
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from app.models.enums import ActionType, Priority

class _Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

class Match(str, Enum):
    all = "all"
    any = "any"

# trigger conditions

class StatusChangeCondition(_Wire):
    from_status: str | None = None
    to_status: str | None = None

class AssignmentCondition(_Wire):
    assignee_id: str | None = None

class DueDatePassedCondition(_Wire):
    pass

class CreationCondition(_Wire):
    assignee_id: str | None = None
    tags: list[str] | None = None

class CommentCondition(_Wire):
    author_id: str | None = None
    contains: str | None = None

class PriorityChangeCondition(_Wire):
    from_priority: str | None = None
    to_priority: str | None = None

class _Trigger(_Wire):
    match: Match = Match.all

class StatusChangeTrigger(_Trigger):
    type: Literal["task_status_change"]
    condition: StatusChangeCondition = Field(default_factory=StatusChangeCondition)
    conditions: list[StatusChangeCondition] = Field(default_factory=list)

class AssignmentTrigger(_Trigger):
    type: Literal["task_assignment"]
    condition: AssignmentCondition = Field(default_factory=AssignmentCondition)
    conditions: list[AssignmentCondition] = Field(default_factory=list)

class DueDatePassedTrigger(_Trigger):
    type: Literal["due_date_passed"]
    condition: DueDatePassedCondition = Field(default_factory=DueDatePassedCondition)
    conditions: list[DueDatePassedCondition] = Field(default_factory=list)

class CreationTrigger(_Trigger):
    type: Literal["task_creation"]
    condition: CreationCondition = Field(default_factory=CreationCondition)
    conditions: list[CreationCondition] = Field(default_factory=list)

class CommentTrigger(_Trigger):
    type: Literal["comment_added"]
    condition: CommentCondition = Field(default_factory=CommentCondition)
    conditions: list[CommentCondition] = Field(default_factory=list)

class PriorityChangeTrigger(_Trigger):
    type: Literal["priority_change"]
    condition: PriorityChangeCondition = Field(default_factory=PriorityChangeCondition)
    conditions: list[PriorityChangeCondition] = Field(default_factory=list)

Trigger = Annotated[
    Union[
        StatusChangeTrigger,
        AssignmentTrigger,
        DueDatePassedTrigger,
        CreationTrigger,
        CommentTrigger,
        PriorityChangeTrigger,
    ],
    Field(discriminator="type"),
]

# actions

class ChangeStatusParams(_Wire):
    status: str = Field(min_length=1)

class AssignBadgeParams(_Wire):
    badge_name: str = Field(min_length=1, max_length=200)

class SendNotificationParams(_Wire):
    message: str | None = None

class ReassignTaskParams(_Wire):
    assignee_id: str = Field(min_length=1)

class AddCommentParams(_Wire):
    text: str = Field(min_length=1)

class ChangePriorityParams(_Wire):
    priority: Priority

class LabelParams(_Wire):
    label: str = Field(min_length=1, max_length=100)

class ChangeStatusAction(_Wire):
    type: Literal["change_status"]
    params: ChangeStatusParams

class AssignBadgeAction(_Wire):
    type: Literal["assign_badge"]
    params: AssignBadgeParams

class SendNotificationAction(_Wire):
    type: Literal["send_notification"]
    params: SendNotificationParams = Field(default_factory=SendNotificationParams)

class ReassignTaskAction(_Wire):
    type: Literal["reassign_task"]
    params: ReassignTaskParams

class AddCommentAction(_Wire):
    type: Literal["add_comment"]
    params: AddCommentParams

class ChangePriorityAction(_Wire):
    type: Literal["change_priority"]
    params: ChangePriorityParams

class ApplyLabelAction(_Wire):
    type: Literal["apply_label"]
    params: LabelParams

class RemoveLabelAction(_Wire):
    type: Literal["remove_label"]
    params: LabelParams

Action = Annotated[
    Union[
        ChangeStatusAction,
        AssignBadgeAction,
        SendNotificationAction,
        ReassignTaskAction,
        AddCommentAction,
        ChangePriorityAction,
        ApplyLabelAction,
        RemoveLabelAction,
    ],
    Field(discriminator="type"),
]

trigger_adapter: TypeAdapter = TypeAdapter(Trigger)
action_adapter: TypeAdapter = TypeAdapter(Action)

KNOWN_ACTION_TYPES = frozenset(a.value for a in ActionType)

def parse_trigger(raw: dict):
    return trigger_adapter.validate_python(raw)

def parse_action(raw: dict):
    return action_adapter.validate_python(raw)
