"""Application layer contracts for orchestrating high-level flows."""

from .auth_flow import AuthFlowResult, AuthFlowStatus, ensure_authenticated_session
from .authoring_workflow import STEPS, AuthoringWorkflow, SubmissionResult, WorkflowState, WorkflowStep
from .bootstrap import StartupResult, StartupStatus, build_session_controller, run_startup
from .draft_models import CATEGORIES, DraftEvent, Location, PendingMedia, TicketTier
from .session_flow import SessionController
from .session_models import Identity, Role, SessionState, is_admin
from .session_store import SessionStore

__all__ = [
    "AuthFlowResult",
    "AuthFlowStatus",
    "AuthoringWorkflow",
    "CATEGORIES",
    "DraftEvent",
    "Identity",
    "Location",
    "PendingMedia",
    "Role",
    "STEPS",
    "SessionController",
    "SessionState",
    "SessionStore",
    "StartupResult",
    "StartupStatus",
    "SubmissionResult",
    "TicketTier",
    "WorkflowState",
    "WorkflowStep",
    "build_session_controller",
    "ensure_authenticated_session",
    "is_admin",
    "run_startup",
]
