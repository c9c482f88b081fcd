"""Process-scoped session store: current identity, state and the persisted credential."""

import logging
from typing import Callable, List, Optional

from infrastructure.api.errors import ClientError
from infrastructure.repositories.sqlite_credential_repository import SQLiteCredentialRepository
from use_cases.session_models import Identity, SessionState

log = logging.getLogger(__name__)

SessionListener = Callable[["SessionStore"], None]


class SessionStore:
    """
    Holds the authenticated identity and owns credential persistence.

    Only the session controller mutates it. Views subscribe to be told about
    every state transition.
    """

    def __init__(self, repository: SQLiteCredentialRepository):
        self._repository = repository
        self._listeners: List[SessionListener] = []
        self.state: SessionState = "UNAUTHENTICATED"
        self.identity: Optional[Identity] = None
        self.last_error: Optional[ClientError] = None

    @property
    def is_authenticated(self) -> bool:
        return self.state == "AUTHENTICATED" and self.identity is not None

    # --- persisted credential ---

    def read_persisted_credential(self) -> Optional[str]:
        return self._repository.load()

    def persist_credential(self, credential: str) -> None:
        self._repository.save(credential)

    def destroy_persisted_credential(self) -> None:
        self._repository.clear()

    # --- transitions ---

    def mark_restoring(self) -> None:
        self.state = "RESTORING"
        self.last_error = None
        self._notify()

    def mark_authenticated(self, identity: Identity) -> None:
        self.state = "AUTHENTICATED"
        self.identity = identity
        self.last_error = None
        self._notify()

    def mark_unauthenticated(self) -> None:
        self.state = "UNAUTHENTICATED"
        self.identity = None
        self.last_error = None
        self._notify()

    def mark_failed(self, error: ClientError) -> None:
        self.state = "FAILED"
        self.identity = None
        self.last_error = error
        self._notify()

    def replace_identity(self, identity: Identity) -> None:
        self.identity = identity
        self._notify()

    # --- observers ---

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                # Listeners never abort a transition
                log.exception(f"Session listener {listener!r} failed on {self.state}")
