"""Startup orchestration: credential store, gateway and session restore."""

import logging
import sqlite3
from dataclasses import dataclass
from typing import Literal, Optional, Tuple

import config
from infrastructure.api.gateway import RemoteServiceGateway
from infrastructure.repositories.sqlite_credential_repository import SQLiteCredentialRepository
from use_cases.session_flow import SessionController
from use_cases.session_store import SessionStore
from utils import session_manager

log = logging.getLogger(__name__)

StartupStatus = Literal["CONTINUE", "STOP"]


@dataclass(frozen=True)
class StartupResult:
    """Result contract for startup/bootstrap orchestration."""

    status: StartupStatus
    planned_steps: Tuple[str, ...]


def build_session_controller(db_path: Optional[str] = None, base_url: Optional[str] = None) -> SessionController:
    repository = SQLiteCredentialRepository(db_path or config.CREDENTIAL_DB)
    repository.init_db()
    gateway = RemoteServiceGateway(base_url=base_url)
    return SessionController(SessionStore(repository), gateway)


def run_startup() -> StartupResult:
    """Build the session controller once per browser session and restore any persisted login."""
    executed_steps = []

    session_manager.init_session_state()
    executed_steps.append("init_session_state")

    if session_manager.st.session_state.session_controller is None:
        try:
            controller = build_session_controller()
        except (sqlite3.Error, RuntimeError) as e:
            log.error(f"❌ Credential store unavailable: {e}")
            return StartupResult(status="STOP", planned_steps=tuple(executed_steps))
        session_manager.st.session_state.session_controller = controller
        executed_steps.append("build_session_controller")

        controller.initialize()
        executed_steps.append("restore_session")

    return StartupResult(status="CONTINUE", planned_steps=tuple(executed_steps))
