import pytest

from app.models.enums import Resource, Role
from app.rbac.perms import PERMS, allows

@pytest.mark.parametrize(
    "role,resource,action,expected",
    [
        (Role.admin, Resource.project, "manage-roles", True),
        (Role.admin, Resource.project, "invite", True),
        (Role.editor, Resource.project, "invite", False),
        (Role.editor, Resource.project, "view", True),
        (Role.editor, Resource.task, "delete", True),
        (Role.editor, Resource.automation, "disable", True),
        (Role.viewer, Resource.task, "edit", False),
        (Role.viewer, Resource.task, "view", True),
        (Role.viewer, Resource.automation, "create", False),
    ],
)
def test_policy_table(role, resource, action, expected):
    assert allows(role, resource, action) is expected

def test_accepts_plain_strings():
    assert allows("Admin", "project", "edit") is True
    assert allows("Viewer", "task", "edit") is False

@pytest.mark.parametrize(
    "role,resource,action",
    [
        ("Owner", "project", "view"),
        ("Admin", "billing", "view"),
        ("Admin", "project", "teleport"),
        (None, "project", "view"),
        ("Admin", None, "view"),
        ("Admin", "project", None),
        ("", "", ""),
    ],
)
def test_unknown_inputs_are_denied_not_errors(role, resource, action):
    assert allows(role, resource, action) is False

def test_table_is_read_only():
    with pytest.raises(TypeError):
        PERMS[Role.viewer] = {}
    with pytest.raises(TypeError):
        PERMS[Role.viewer][Resource.task] = ("view", "edit")
