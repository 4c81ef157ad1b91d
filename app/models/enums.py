from enum import Enum

class Role(str, Enum):
    admin = "Admin"
    editor = "Editor"
    viewer = "Viewer"

class Resource(str, Enum):
    project = "project"
    task = "task"
    automation = "automation"

class Priority(str, Enum):
    low = "Low"
    medium = "Medium"
    high = "High"
    urgent = "Urgent"

class TriggerType(str, Enum):
    task_status_change = "task_status_change"
    task_assignment = "task_assignment"
    due_date_passed = "due_date_passed"
    task_creation = "task_creation"
    comment_added = "comment_added"
    priority_change = "priority_change"

class ActionType(str, Enum):
    change_status = "change_status"
    assign_badge = "assign_badge"
    send_notification = "send_notification"
    reassign_task = "reassign_task"
    add_comment = "add_comment"
    change_priority = "change_priority"
    apply_label = "apply_label"
    remove_label = "remove_label"

class NotificationCategory(str, Enum):
    task_assignment = "task_assignment"
    status_change = "status_change"
    automation = "automation"
    project_invitation = "project_invitation"
    badge = "badge"

# terminal status excluded from the due-date sweep
DONE_STATUS = "Done"

DEFAULT_STATUSES = ("To Do", "In Progress", DONE_STATUS)
