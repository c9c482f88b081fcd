import streamlit as st
import sentry_sdk

from infrastructure.observability import setup_observability
from use_cases import auth_flow, bootstrap
from use_cases import rbac_policy
from utils import session_manager
from views import create_event_view, login_view


def main():
    setup_observability()
    st.set_page_config(page_title="Event Studio", layout="centered")

    # --- STARTUP ORCHESTRATION ---
    startup_result = bootstrap.run_startup()
    if startup_result.status == "STOP":
        st.error("🚨 The local session store could not be opened. Check CREDENTIAL_DB.")
        st.stop()
        return

    # --- AUTH GATE ---
    auth_result = auth_flow.ensure_authenticated_session("VIEW_DASHBOARD")
    controller = session_manager.get_session_controller()
    if auth_result.reason == "forbidden":
        st.error("🚫 Your account has no access to this dashboard.")
        st.stop()
        return
    if auth_result.status == "STOP":
        login_view.render_auth_screen(controller)
        st.stop()
        return

    identity = controller.identity
    if sentry_sdk.is_initialized():
        sentry_sdk.set_user({"id": identity.id, "role": identity.role})

    with st.sidebar:
        st.markdown(f"**{identity.full_name}**  \n{identity.email} · {identity.role}")
        if st.button("Log out"):
            session_manager.logout()

    if st.session_state.last_created_event_id:
        st.success(f"✅ Event created (id {st.session_state.last_created_event_id})")
        st.session_state.last_created_event_id = None

    if not rbac_policy.enforce(identity, "CREATE_EVENT"):
        st.info("Only organizers can create events. Browse and book events from your dashboard.")
        session_manager.discard_authoring_workflow()
        return

    workflow = session_manager.get_authoring_workflow()
    if st.sidebar.button("Discard draft"):
        session_manager.discard_authoring_workflow()
        st.rerun()
    create_event_view.render_create_event(workflow)


if __name__ == "__main__":
    main()
