"""Centralized Role-Based Access Control logic."""

import logging
from typing import Optional

from use_cases.session_models import Identity, is_admin

log = logging.getLogger(__name__)

ACTIONS_BY_ROLE = {
    "attendee": {"VIEW_DASHBOARD"},
    "organizer": {"VIEW_DASHBOARD", "CREATE_EVENT"},
}


def enforce(identity: Optional[Identity], action: str) -> bool:
    """
    Evaluates if the identity is authorized to perform the action.
    Returns True if authorized, False otherwise.
    """
    authorized = False

    if identity is not None:
        # Admins get overarching rights to everything
        if is_admin(identity):
            authorized = True
        elif action in ACTIONS_BY_ROLE.get(identity.role, set()):
            authorized = True

    if not authorized:
        log.warning(
            f"RBAC denied: action={action} user={identity.id if identity else None} "
            f"role={identity.role if identity else None}"
        )

    return authorized
