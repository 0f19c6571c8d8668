"""
Permission system for organization-scoped role-based access control (RBAC).

Roles are per organization (stored on Membership). The organization owner is
treated as ADMIN regardless of the role on their membership row.
"""

from enum import Enum
from typing import Dict, Set, Tuple


class Role(str, Enum):
    """Roles a user can hold inside an organization"""
    ADMIN = "ADMIN"      # Manages the organization, its members and invitations
    MEMBER = "MEMBER"    # Standard access


class Resource(str, Enum):
    """Organization-scoped resources"""
    ORGANIZATION = "organization"
    MEMBERSHIP = "membership"
    INVITATION = "invitation"


class Action(str, Enum):
    """Actions that can be performed on resources"""
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    LIST = "list"


ROLE_PERMISSIONS: Dict[Role, Set[Tuple[Resource, Action]]] = {
    Role.ADMIN: {
        (Resource.ORGANIZATION, Action.READ),
        (Resource.ORGANIZATION, Action.UPDATE),
        (Resource.ORGANIZATION, Action.DELETE),
        (Resource.MEMBERSHIP, Action.READ),
        (Resource.MEMBERSHIP, Action.LIST),
        (Resource.MEMBERSHIP, Action.UPDATE),
        (Resource.MEMBERSHIP, Action.DELETE),
        (Resource.INVITATION, Action.CREATE),
        (Resource.INVITATION, Action.LIST),
        (Resource.INVITATION, Action.DELETE),
    },
    Role.MEMBER: {
        (Resource.ORGANIZATION, Action.READ),
        (Resource.MEMBERSHIP, Action.READ),
        (Resource.MEMBERSHIP, Action.LIST),
    },
}

ROLE_RANK: Dict[Role, int] = {
    Role.MEMBER: 1,
    Role.ADMIN: 2,
}


def has_permission(role: Role, resource: Resource, action: Action) -> bool:
    """
    Check if a role has permission to perform an action on a resource.

    Args:
        role: Membership role (ADMIN, MEMBER)
        resource: Resource being accessed
        action: Action being performed

    Returns:
        True if permission is granted, False otherwise
    """
    return (resource, action) in ROLE_PERMISSIONS.get(role, set())


def role_satisfies(role: Role, required: Role) -> bool:
    """True when `role` is at least as privileged as `required`."""
    return ROLE_RANK[Role(role)] >= ROLE_RANK[Role(required)]


def get_role_permissions(role: Role) -> Set[Tuple[Resource, Action]]:
    return ROLE_PERMISSIONS.get(role, set())
