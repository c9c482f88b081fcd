"""Session DTOs shared across application layers."""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Literal, Optional

log = logging.getLogger(__name__)

Role = Literal["attendee", "organizer", "admin"]
SessionState = Literal["UNAUTHENTICATED", "RESTORING", "AUTHENTICATED", "FAILED"]

ROLES = ("attendee", "organizer", "admin")

# Identity attributes a profile edit may change; id and role are server-owned.
MUTABLE_IDENTITY_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "phoneNumber": "phone_number",
    "profileImage": "profile_image_ref",
}


@dataclass(frozen=True)
class Identity:
    id: str
    first_name: str
    last_name: str
    email: str
    role: Role
    profile_image_ref: Optional[str] = None
    phone_number: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


def _normalize_role(raw: Any) -> Role:
    role = str(raw or "").strip().lower()
    if role not in ROLES:
        log.warning(f"Unknown role {raw!r} in identity payload, treating as attendee")
        return "attendee"
    return role  # type: ignore[return-value]


def identity_from_payload(payload: Dict[str, Any]) -> Identity:
    """Build an Identity from a `/auth/*` or `/users/profile` response body."""
    user_id = payload.get("_id") or payload.get("id")
    if user_id is None:
        raise ValueError("Identity payload has no id")
    return Identity(
        id=str(user_id),
        first_name=payload.get("firstName") or "",
        last_name=payload.get("lastName") or "",
        email=payload.get("email") or "",
        role=_normalize_role(payload.get("role") or payload.get("userType")),
        profile_image_ref=payload.get("profileImage") or payload.get("profileImageRef"),
        phone_number=payload.get("phoneNumber"),
    )


def merge_identity(current: Identity, patch: Dict[str, Any]) -> Identity:
    changes = {attr: patch[key] for key, attr in MUTABLE_IDENTITY_FIELDS.items() if key in patch}
    if "profileImageRef" in patch:
        changes["profile_image_ref"] = patch["profileImageRef"]
    return replace(current, **changes)


def is_admin(identity: Identity) -> bool:
    return identity.role == "admin"
