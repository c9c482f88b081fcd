import streamlit as st

from infrastructure.api.errors import ClientError, ValidationError
from use_cases.session_flow import SessionController


def _show_error(error: ClientError):
    st.error(str(error))
    if isinstance(error, ValidationError):
        for field_name, message in error.details.items():
            st.caption(f"• {field_name}: {message}")


def render_auth_screen(controller: SessionController):
    st.title("🎟️ Event Studio")
    if controller.state == "FAILED" and controller.store.last_error is not None:
        st.warning(f"Could not restore your session: {controller.store.last_error}")

    tab_login, tab_register = st.tabs(["Sign in", "Create account"])

    with tab_login:
        with st.form("login_form", clear_on_submit=False):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign in")
            if submitted:
                try:
                    controller.login(email, password)
                    st.rerun()
                except ClientError as e:
                    _show_error(e)

    with tab_register:
        with st.form("register_form", clear_on_submit=False):
            first_name = st.text_input("First name *")
            last_name = st.text_input("Last name *")
            email = st.text_input("Email *")
            phone = st.text_input("Phone number")
            user_type = st.selectbox("I want to", ["attendee", "organizer"],
                                     format_func=lambda t: "Attend events" if t == "attendee" else "Organize events")
            password = st.text_input("Password *", type="password")
            password_confirm = st.text_input("Confirm password *", type="password")
            submitted = st.form_submit_button("Create account")
            if submitted:
                try:
                    controller.signup({
                        "firstName": first_name.strip(),
                        "lastName": last_name.strip(),
                        "email": email,
                        "phoneNumber": phone.strip(),
                        "userType": user_type,
                        "password": password,
                        "confirmPassword": password_confirm,
                    })
                    st.rerun()
                except ClientError as e:
                    _show_error(e)
