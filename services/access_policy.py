"""
Role-based access policy.

Every permission check and every lead visibility rule goes through this
module; callers never compare role strings themselves.
"""
import logging
from enum import Enum
from typing import Dict, FrozenSet

from django.db.models import Q

from authentication.models import Role
from authentication.session import Session
from services.exceptions import AuthorizationError

logger = logging.getLogger(__name__)


class Permission(str, Enum):
    VIEW_ALL_LEADS = "view_all_leads"
    EDIT_LEADS = "edit_leads"
    ADD_LEADS = "add_leads"
    DELETE_LEADS = "delete_leads"
    VIEW_ANALYTICS = "view_analytics"
    EXPORT_LEADS = "export_leads"
    MANAGE_USERS = "manage_users"
    IMPORT_LEADS = "import_leads"
    ASSIGN_LEADS = "assign_leads"
    MANAGE_SERVICES = "manage_services"
    MANAGE_ADS = "manage_ads"
    VIEW_ACTIVITY = "view_activity"


ROLE_PERMISSIONS: Dict[Role, FrozenSet[Permission]] = {
    Role.ADMIN: frozenset(Permission),
    Role.SALES: frozenset({
        Permission.EDIT_LEADS,
        Permission.ADD_LEADS,
        Permission.EXPORT_LEADS,
        Permission.IMPORT_LEADS,
    }),
    Role.MARKETING: frozenset({
        Permission.VIEW_ALL_LEADS,
        Permission.VIEW_ANALYTICS,
        Permission.EXPORT_LEADS,
        Permission.MANAGE_ADS,
        Permission.VIEW_ACTIVITY,
    }),
}


def _as_role(role) -> "Role | None":
    try:
        return Role(role)
    except ValueError:
        return None


def can(role, permission: Permission) -> bool:
    """Check whether a role holds a permission. Unknown roles hold nothing."""
    known_role = _as_role(role)
    if known_role is None:
        return False
    return Permission(permission) in ROLE_PERMISSIONS[known_role]


def require(session: Session, permission: Permission, message: str = None) -> None:
    """Raise AuthorizationError unless the session's role holds the permission"""
    if not can(session.role, permission):
        logger.warning(
            "Denied %s to user %s (role=%s)", permission.value, session.user_id, session.role
        )
        raise AuthorizationError(message)


def is_admin(session: Session) -> bool:
    return _as_role(session.role) == Role.ADMIN


def visible_leads_predicate(session: Session) -> Q:
    """
    Row filter for the leads a session may see or act on.

    Admin and marketing see every lead, sales only the leads assigned to
    them, and any other role sees nothing.
    """
    if can(session.role, Permission.VIEW_ALL_LEADS):
        return Q()
    if _as_role(session.role) == Role.SALES:
        return Q(assigned_to_id=session.user_id)
    return Q(pk__in=[])
