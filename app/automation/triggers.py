# Events are snapshots taken at mutation time; rules that mutate the task do
# not change what later rules in the same loop see.
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field

from app.automation.rules import (
    AssignmentCondition,
    AssignmentTrigger,
    CommentCondition,
    CommentTrigger,
    CreationCondition,
    CreationTrigger,
    DueDatePassedTrigger,
    Match,
    PriorityChangeCondition,
    PriorityChangeTrigger,
    StatusChangeCondition,
    StatusChangeTrigger,
)
from app.models.enums import TriggerType
from app.models.task import Task, TaskComment

def _str(value) -> str | None:
    if value is None:
        return None
    return getattr(value, "value", None) or str(value)

@dataclass(frozen=True)
class TaskEvent:
    trigger_type: TriggerType
    task: Task
    status: str | None = None
    previous_status: str | None = None
    priority: str | None = None
    previous_priority: str | None = None
    assignee_id: str | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)
    comment_author_id: str | None = None
    comment_body: str | None = None

    @classmethod
    def of(cls, trigger_type: TriggerType, task: Task, **extra) -> "TaskEvent":
        return cls(
            trigger_type=trigger_type,
            task=task,
            status=task.status,
            priority=_str(task.priority),
            assignee_id=_str(task.assignee_id),
            tags=tuple(task.tags or ()),
            **extra,
        )

    @classmethod
    def status_change(cls, task: Task, previous_status: str | None) -> "TaskEvent":
        return cls.of(TriggerType.task_status_change, task, previous_status=previous_status)

    @classmethod
    def assignment(cls, task: Task) -> "TaskEvent":
        return cls.of(TriggerType.task_assignment, task)

    @classmethod
    def creation(cls, task: Task) -> "TaskEvent":
        return cls.of(TriggerType.task_creation, task)

    @classmethod
    def due_date_passed(cls, task: Task) -> "TaskEvent":
        return cls.of(TriggerType.due_date_passed, task)

    @classmethod
    def comment_added(cls, task: Task, comment: TaskComment) -> "TaskEvent":
        return cls.of(
            TriggerType.comment_added,
            task,
            comment_author_id=_str(comment.author_id),
            comment_body=comment.body,
        )

    @classmethod
    def priority_change(cls, task: Task, previous_priority) -> "TaskEvent":
        return cls.of(TriggerType.priority_change, task, previous_priority=_str(previous_priority))

def _wild_or_equal(expected: str | None, actual: str | None) -> bool:
    # "" and None are both wildcards
    return not expected or expected == actual

def _same_id(expected: str | None, actual: str | None) -> bool:
    if not expected:
        return True
    if actual is None:
        return False
    try:
        return uuid.UUID(expected) == uuid.UUID(actual)
    except ValueError:
        return expected == actual

def _status_change(c: StatusChangeCondition, e: TaskEvent) -> bool:
    return _wild_or_equal(c.from_status, e.previous_status) and _wild_or_equal(c.to_status, e.status)

def _assignment(c: AssignmentCondition, e: TaskEvent) -> bool:
    if e.assignee_id is None:
        return False
    return _same_id(c.assignee_id, e.assignee_id)

def _creation(c: CreationCondition, e: TaskEvent) -> bool:
    if not _same_id(c.assignee_id, e.assignee_id):
        return False
    if c.tags:
        return set(c.tags).issubset(e.tags)
    return True

def _comment(c: CommentCondition, e: TaskEvent) -> bool:
    if not _same_id(c.author_id, e.comment_author_id):
        return False
    if c.contains:
        return c.contains.lower() in (e.comment_body or "").lower()
    return True

def _priority_change(c: PriorityChangeCondition, e: TaskEvent) -> bool:
    return _wild_or_equal(c.from_priority, e.previous_priority) and _wild_or_equal(c.to_priority, e.priority)

def _combine(match: Match, results: Iterable[bool]) -> bool:
    results = list(results)
    if not results:
        return True
    return all(results) if match == Match.all else any(results)

def matches(trigger, event: TaskEvent) -> bool:
    if trigger.type != event.trigger_type.value:
        return False

    if isinstance(trigger, DueDatePassedTrigger):
        # the sweep already selected overdue, unfinished tasks
        return True

    if isinstance(trigger, StatusChangeTrigger):
        check = _status_change
    elif isinstance(trigger, AssignmentTrigger):
        check = _assignment
    elif isinstance(trigger, CreationTrigger):
        check = _creation
    elif isinstance(trigger, CommentTrigger):
        check = _comment
    elif isinstance(trigger, PriorityChangeTrigger):
        check = _priority_change
    else:
        raise TypeError(f"unhandled trigger type: {trigger.type}")

    if not check(trigger.condition, event):
        return False
    return _combine(trigger.match, (check(c, event) for c in trigger.conditions))
