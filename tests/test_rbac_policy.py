import pytest

from use_cases import rbac_policy
from use_cases.session_models import identity_from_payload


@pytest.mark.parametrize("role,action,allowed", [
    ("attendee", "VIEW_DASHBOARD", True),
    ("attendee", "CREATE_EVENT", False),
    ("organizer", "CREATE_EVENT", True),
    ("organizer", "MANAGE_USERS", False),
    ("admin", "MANAGE_USERS", True),
])
def test_enforce(role, action, allowed) -> None:
    identity = identity_from_payload({"id": "1", "role": role})
    assert rbac_policy.enforce(identity, action) is allowed


def test_enforce_without_identity_denies() -> None:
    assert rbac_policy.enforce(None, "VIEW_DASHBOARD") is False
