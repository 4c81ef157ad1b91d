# Per-rule units of work: a failing rule is rolled back, logged and reported
# as failed; nothing reaches the caller. No firing history is kept, so rules
# re-fire whenever their trigger matches again.
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.automation import actions, store
from app.automation.rules import parse_trigger
from app.automation.triggers import TaskEvent, matches
from app.models.automation import Automation
from app.models.enums import DONE_STATUS, TriggerType
from app.models.task import Task, TaskComment

log = structlog.get_logger(__name__)

APPLIED = "applied"
SKIPPED = "skipped"
FAILED = "failed"

@dataclass(frozen=True)
class RuleOutcome:
    rule_id: uuid.UUID
    rule_name: str
    task_id: uuid.UUID
    status: str
    detail: str = ""

def _run_rule(db: Session, rule: Automation, event: TaskEvent) -> RuleOutcome:
    # read before anything can expire them
    rule_id, rule_name, task_id = rule.id, rule.name, event.task.id
    bound = log.bind(rule_id=str(rule_id), task_id=str(task_id), trigger=event.trigger_type.value)

    try:
        if not matches(parse_trigger(rule.trigger), event):
            return RuleOutcome(rule_id, rule_name, task_id, SKIPPED, "condition not met")

        results = [actions.execute(db, rule, raw, event.task) for raw in rule.actions or []]
        db.commit()
    except Exception as e:
        db.rollback()
        bound.exception("automation_rule_failed")
        return RuleOutcome(rule_id, rule_name, task_id, FAILED, f"{e.__class__.__name__}: {e}")

    detail = ",".join(results)
    if not results or all(r == actions.UNSUPPORTED for r in results):
        bound.info("automation_rule_noop", detail=detail)
        return RuleOutcome(rule_id, rule_name, task_id, SKIPPED, detail)

    bound.info("automation_rule_applied", detail=detail)
    return RuleOutcome(rule_id, rule_name, task_id, APPLIED, detail)

def process(db: Session, event: TaskEvent) -> list[RuleOutcome]:
    try:
        rules = store.list_active(db, event.task.project_id, event.trigger_type)
    except Exception:
        db.rollback()
        log.exception("automation_rules_load_failed", trigger=event.trigger_type.value)
        return []
    return [_run_rule(db, rule, event) for rule in rules]

def _fire(db: Session, trigger: TriggerType, build: Callable[[], TaskEvent | None]) -> list[RuleOutcome]:
    # building the event reloads the committed task, which can fail too
    try:
        event = build()
    except Exception:
        db.rollback()
        log.exception("automation_event_failed", trigger=trigger.value)
        return []
    if event is None:
        return []
    return process(db, event)

def on_status_change(db: Session, task: Task, previous_status: str) -> list[RuleOutcome]:
    return _fire(db, TriggerType.task_status_change, lambda: TaskEvent.status_change(task, previous_status))

def on_assignment(db: Session, task: Task) -> list[RuleOutcome]:
    def build():
        return TaskEvent.assignment(task) if task.assignee_id is not None else None

    return _fire(db, TriggerType.task_assignment, build)

def on_creation(db: Session, task: Task) -> list[RuleOutcome]:
    return _fire(db, TriggerType.task_creation, lambda: TaskEvent.creation(task))

def on_comment(db: Session, task: Task, comment: TaskComment) -> list[RuleOutcome]:
    return _fire(db, TriggerType.comment_added, lambda: TaskEvent.comment_added(task, comment))

def on_priority_change(db: Session, task: Task, previous_priority) -> list[RuleOutcome]:
    return _fire(db, TriggerType.priority_change, lambda: TaskEvent.priority_change(task, previous_priority))

def overdue_task_ids(db: Session, now: datetime) -> list[uuid.UUID]:
    # date-only: anything due today is not overdue yet
    today = now.date()
    q = (
        select(Task.id)
        .where(
            Task.due_date.is_not(None),
            Task.due_date < today,
            Task.status != DONE_STATUS,
        )
        .order_by(Task.due_date, Task.id)
    )
    return list(db.scalars(q).all())

def sweep_due_passed(db: Session, now: datetime | None = None) -> list[RuleOutcome]:
    now = now or datetime.now(timezone.utc)
    task_ids = overdue_task_ids(db, now)
    log.info("automation_sweep_started", tasks=len(task_ids), as_of=now.date().isoformat())

    outcomes: list[RuleOutcome] = []
    for task_id in task_ids:
        try:
            task = db.get(Task, task_id)
            if task is None:
                continue
            outcomes.extend(process(db, TaskEvent.due_date_passed(task)))
        except Exception:
            db.rollback()
            log.exception("automation_sweep_task_failed", task_id=str(task_id))

    log.info(
        "automation_sweep_finished",
        tasks=len(task_ids),
        applied=sum(1 for o in outcomes if o.status == APPLIED),
        failed=sum(1 for o in outcomes if o.status == FAILED),
    )
    return outcomes
