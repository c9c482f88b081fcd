from typing import Optional

import streamlit as st

from use_cases.authoring_workflow import AuthoringWorkflow
from use_cases.session_flow import SessionController

"""
SESSION STATE CONTRACT

This module owns the Streamlit session-state keys of the client.

st.session_state keys:

session_controller: SessionController | None
    session lifecycle controller (identity, state, gateway)
    default: None
    owner: bootstrap/session_manager

authoring_workflow: AuthoringWorkflow | None
    create-event wizard and its draft; dropped when the user leaves it
    default: None
    owner: create_event_view/session_manager

last_created_event_id: str | None
    id of the most recently created event, shown once as confirmation
    default: None
    owner: create_event_view
"""


def init_session_state():
    if "session_controller" not in st.session_state:
        st.session_state.session_controller = None
    if "authoring_workflow" not in st.session_state:
        st.session_state.authoring_workflow = None
    if "last_created_event_id" not in st.session_state:
        st.session_state.last_created_event_id = None


def get_session_controller() -> Optional[SessionController]:
    return st.session_state.get("session_controller")


def get_authoring_workflow() -> AuthoringWorkflow:
    """Return the active wizard, starting a fresh draft when none exists."""
    workflow = st.session_state.get("authoring_workflow")
    if workflow is None or workflow.is_complete:
        controller = get_session_controller()
        if controller is None:
            raise RuntimeError("Session controller is not initialized; run startup first")
        workflow = AuthoringWorkflow(controller.gateway)
        st.session_state.authoring_workflow = workflow
    return workflow


def discard_authoring_workflow():
    # Navigating away drops the draft; nothing is in flight before submit().
    st.session_state.authoring_workflow = None


def logout():
    controller = get_session_controller()
    if controller is not None:
        controller.logout()
    discard_authoring_workflow()
    st.session_state.last_created_event_id = None
    st.rerun()
