from types import MappingProxyType

from app.models.enums import Resource, Role

_ALL_TASK = ("view", "create", "edit", "delete", "assign", "move", "comment")
_ALL_AUTOMATION = ("view", "create", "edit", "delete", "enable", "disable")

PERMS: MappingProxyType = MappingProxyType({
    Role.admin: MappingProxyType({
        Resource.project: ("view", "edit", "delete", "invite", "manage-statuses", "manage-roles"),
        Resource.task: _ALL_TASK,
        Resource.automation: _ALL_AUTOMATION,
    }),
    Role.editor: MappingProxyType({
        Resource.project: ("view",),
        Resource.task: _ALL_TASK,
        Resource.automation: _ALL_AUTOMATION,
    }),
    Role.viewer: MappingProxyType({
        Resource.project: ("view",),
        Resource.task: ("view",),
        Resource.automation: ("view",),
    }),
})

def allows(role: Role | str | None, resource: Resource | str | None, action: str | None) -> bool:
    # anything unknown is a plain "no"
    if not role or not resource or not action:
        return False
    try:
        role = Role(role)
        resource = Resource(resource)
    except ValueError:
        return False
    return action in PERMS[role].get(resource, ())
