"""
Centralized Observability Infrastructure.
Provides structured logging setup and Sentry SDK initialization
governed by secrets/environment variables.
"""

import logging
import re
from typing import Any, Dict

import sentry_sdk

from config import get_secret

log = logging.getLogger(__name__)

REDACTED = "[REDACTED]"
SENSITIVE_KEY_FRAGMENTS = ("password", "token", "credential", "authorization")

# Patterns to scrub in free-form strings of Sentry events
SENSITIVE_PATTERNS = [
    re.compile(r"(Bearer\s+)[A-Za-z0-9_\-\.=]+", re.IGNORECASE),
    re.compile(r"\beyJ[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+"),  # JWTs
]


def _mask_string(val: str) -> str:
    for pattern in SENSITIVE_PATTERNS:
        val = pattern.sub(lambda m: (m.group(1) if m.groups() else "") + REDACTED, val)
    return val


def _scrub(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {
            k: REDACTED if any(f in str(k).lower() for f in SENSITIVE_KEY_FRAGMENTS) else _scrub(v)
            for k, v in obj.items()
        }
    if isinstance(obj, list):
        return [_scrub(i) for i in obj]
    if isinstance(obj, str):
        return _mask_string(obj)
    return obj


def _scrub_sensitive_data(event: Dict[str, Any], hint: Dict[str, Any]) -> Dict[str, Any]:
    """
    Sentry before_send hook. Scrubs credentials and passwords from request
    data, breadcrumbs and stack-frame locals before the event leaves the client.
    """
    for exc in event.get("exception", {}).get("values", []):
        for frame in exc.get("stacktrace", {}).get("frames", []):
            if "vars" in frame:
                frame["vars"] = _scrub(frame["vars"])
    if "request" in event:
        event["request"] = _scrub(event["request"])
    if "breadcrumbs" in event:
        event["breadcrumbs"] = _scrub(event["breadcrumbs"])
    return event


def setup_observability() -> None:
    """
    Initializes global system logging and Sentry (if DSN is present).
    Should be called once at application startup.
    """
    log_level_str = str(get_secret("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    sentry_dsn = get_secret("SENTRY_DSN")
    if sentry_dsn and not sentry_sdk.is_initialized():
        sentry_env = get_secret("SENTRY_ENV", "development")
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=sentry_env,
            traces_sample_rate=1.0,
            send_default_pii=False,
            before_send=_scrub_sensitive_data
        )
        log.info(f"Sentry SDK initialized (env: {sentry_env})")
    elif not sentry_dsn:
        log.debug("SENTRY_DSN not provided. Running without Sentry.")

    # Quiet down noisy third-party loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
