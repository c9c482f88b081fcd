"""Authentication gate orchestration (application layer)."""

from dataclasses import dataclass
from typing import Literal, Optional

from use_cases import rbac_policy
from utils import session_manager

AuthFlowStatus = Literal["CONTINUE", "STOP"]


@dataclass(frozen=True)
class AuthFlowResult:
    """Result contract for auth flow orchestration."""

    status: AuthFlowStatus
    reason: str
    user_id: Optional[str] = None


def ensure_authenticated_session(action: Optional[str] = None) -> AuthFlowResult:
    """Run the auth gate, optionally checking `action` against the RBAC policy."""
    session_manager.init_session_state()
    controller = session_manager.get_session_controller()

    if controller is None or not controller.store.is_authenticated:
        return AuthFlowResult(status="STOP", reason="auth_required")

    identity = controller.identity
    if action is not None and not rbac_policy.enforce(identity, action):
        return AuthFlowResult(status="STOP", reason="forbidden", user_id=identity.id)

    return AuthFlowResult(status="CONTINUE", reason="authenticated", user_id=identity.id)
