"""Session lifecycle: restore on load, login, signup, logout and identity updates."""

import logging
import sqlite3
from typing import Any, Dict, Optional, Tuple

from infrastructure.api.errors import (
    ClientError,
    ServiceError,
    SessionExpiredError,
    ValidationError,
)
from infrastructure.api.gateway import RemoteServiceGateway
from use_cases.session_models import Identity, SessionState, identity_from_payload, merge_identity
from use_cases.session_store import SessionStore

log = logging.getLogger(__name__)

PASSWORD_FIELDS = ("password", "currentPassword", "newPassword", "confirmPassword")


def _identity(payload: Dict[str, Any]) -> Identity:
    try:
        return identity_from_payload(payload)
    except ValueError as e:
        raise ServiceError(f"Malformed identity from service: {e}") from e


class SessionController:
    """
    Drives the session state machine over a SessionStore.

    States: UNAUTHENTICATED, RESTORING, AUTHENTICATED, FAILED. The credential
    is persisted on login/signup success, read once by initialize(), and
    destroyed on logout or when the service rejects it during restore.
    """

    def __init__(self, store: SessionStore, gateway: RemoteServiceGateway):
        self.store = store
        self.gateway = gateway

    @property
    def state(self) -> SessionState:
        return self.store.state

    @property
    def identity(self) -> Optional[Identity]:
        return self.store.identity

    def initialize(self) -> SessionState:
        credential = self.store.read_persisted_credential()
        if not credential:
            log.info("No persisted credential, starting unauthenticated")
            self.store.mark_unauthenticated()
            return self.store.state

        self.store.mark_restoring()
        self.gateway.attach_credential(credential)
        try:
            identity = _identity(self.gateway.fetch_identity())
        except (SessionExpiredError, ValidationError):
            # Expected steady state for an old credential; never surfaced.
            log.info("Persisted credential rejected by the service, clearing it")
            self.gateway.detach_credential()
            self.store.destroy_persisted_credential()
            self.store.mark_unauthenticated()
            return self.store.state
        except ClientError as e:
            # Transport failure, not a rejection: the credential stays persisted
            # so the next start retries the restore (FAILED state, see DESIGN.md).
            log.warning(f"⚠️ Session restore failed, keeping credential for the next start: {e}")
            self.gateway.detach_credential()
            self.store.mark_failed(e)
            return self.store.state

        self.store.mark_authenticated(identity)
        log.info(f"✅ Session restored for user {identity.id} ({identity.role})")
        return self.store.state

    def _establish(self, credential: str, identity: Identity) -> None:
        self.store.persist_credential(credential)
        self.gateway.attach_credential(credential)
        self.store.mark_authenticated(identity)

    def login(self, email: str, password: str) -> Identity:
        """Raises InvalidCredentialsError or ServiceError; prior state survives a failure."""
        credential, payload = self.gateway.login(email.strip().lower(), password)
        identity = _identity(payload)
        self._establish(credential, identity)
        log.info(f"✅ Logged in user {identity.id} ({identity.role})")
        return identity

    def signup(self, fields: Dict[str, Any]) -> Identity:
        registration = dict(fields)
        confirm = registration.pop("confirmPassword", None)
        if confirm is not None and confirm != registration.get("password"):
            raise ValidationError(
                "Passwords do not match",
                details={"confirmPassword": "Passwords do not match"},
            )
        if isinstance(registration.get("email"), str):
            registration["email"] = registration["email"].strip().lower()

        log.info(f"Signing up {registration.get('email')} as {registration.get('userType', 'attendee')}")
        credential, payload = self.gateway.signup(registration)
        identity = _identity(payload)
        self._establish(credential, identity)
        return identity

    def logout(self) -> None:
        self.gateway.detach_credential()
        try:
            self.store.destroy_persisted_credential()
        except sqlite3.Error as e:
            log.error(f"❌ Could not clear persisted credential on logout: {e}")
        self.store.mark_unauthenticated()
        log.info("Logged out")

    def _require_identity(self) -> Identity:
        if self.store.identity is None:
            raise SessionExpiredError("No authenticated session")
        return self.store.identity

    def update_identity(self, patch: Dict[str, Any]) -> Identity:
        """Adopt a server-confirmed profile; id and role are never taken from the patch."""
        updated = merge_identity(self._require_identity(), patch)
        self.store.replace_identity(updated)
        return updated

    def update_profile(self, fields: Dict[str, Any],
                       image: Optional[Tuple[str, bytes, str]] = None) -> Identity:
        self._require_identity()
        body = {k: v for k, v in fields.items() if k not in PASSWORD_FIELDS}
        if image is not None:
            filename, content, content_type = image
            body["profileImage"] = self.gateway.upload_profile_image(filename, content, content_type)
        confirmed = self.gateway.update_profile(body)
        return self.update_identity(confirmed)

    def change_password(self, current_password: str, new_password: str, confirm_password: str) -> None:
        self._require_identity()
        if new_password != confirm_password:
            raise ValidationError(
                "New passwords do not match",
                details={"confirmPassword": "New passwords do not match"},
            )
        self.gateway.change_password(current_password, new_password)
