"""Runtime configuration resolved from Streamlit secrets, then the environment."""

import os

import streamlit as st
from streamlit.errors import StreamlitAPIException


def get_secret(key, default=None):
    try:
        value = st.secrets.get(key)
    except (FileNotFoundError, StreamlitAPIException):
        # No secrets.toml outside `streamlit run` (tests, scripts)
        value = None
    if value is None:
        value = os.getenv(key)
    return value if value is not None else default


API_BASE_URL = str(get_secret("API_BASE_URL", "http://localhost:5000/api")).rstrip("/")
REQUEST_TIMEOUT = float(get_secret("REQUEST_TIMEOUT", "15"))
CREDENTIAL_DB = str(get_secret("CREDENTIAL_DB", "session.db"))
