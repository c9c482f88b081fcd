import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

import config
from infrastructure.api.errors import (
    ClientError,
    InvalidCredentialsError,
    ServiceError,
    SessionExpiredError,
    UploadFailedError,
    ValidationError,
)

log = logging.getLogger(__name__)

AUTH_REJECTED_STATUSES = {401, 403}
VALIDATION_STATUSES = {400, 409, 422}


def resource_id(body: Dict[str, Any]) -> Optional[str]:
    """Server-assigned identifier; the backend uses Mongo-style `_id`."""
    value = body.get("_id") or body.get("id")
    return str(value) if value is not None else None


def _field_errors(raw: Any) -> Dict[str, str]:
    if isinstance(raw, dict):
        return {str(k): str(v) for k, v in raw.items()}
    if isinstance(raw, list):
        errors = {}
        for item in raw:
            if not isinstance(item, dict):
                continue
            field = item.get("path") or item.get("param") or item.get("field")
            message = item.get("msg") or item.get("message")
            if field and message:
                errors[str(field)] = str(message)
        return errors
    return {}


class RemoteServiceGateway:
    """Single chokepoint for backend calls. Never retries."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self._credential: Optional[str] = None

    # --- credential policy ---

    def attach_credential(self, credential: str) -> None:
        self._credential = credential

    def detach_credential(self) -> None:
        self._credential = None

    @property
    def has_credential(self) -> bool:
        return self._credential is not None

    def _headers(self) -> Dict[str, str]:
        if self._credential:
            return {"Authorization": f"Bearer {self._credential}"}
        return {}

    # --- transport ---

    def _request(self, method: str, path: str, json: Optional[dict] = None,
                 params: Optional[dict] = None, files: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = requests.request(
                method,
                url,
                headers=self._headers(),
                json=json,
                params=params,
                files=files,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.error(f"❌ Network error on {method} {path}: {e}")
            raise ServiceError(f"Service unreachable: {e}") from e

        if resp.status_code >= 400:
            raise self._error_for(resp, method, path)

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            log.error(f"❌ Non-JSON response from {method} {path} (HTTP {resp.status_code})")
            raise ServiceError(f"Malformed response from {path}", status_code=resp.status_code) from e

    def _error_for(self, resp, method: str, path: str) -> ClientError:
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        status = resp.status_code
        message = body.get("message") or body.get("error") or f"HTTP {status}"
        log.warning(f"⚠️ {method} {path} rejected: HTTP {status} {message}")

        if status in AUTH_REJECTED_STATUSES:
            return SessionExpiredError(str(message), status_code=status)
        if status in VALIDATION_STATUSES:
            return ValidationError(str(message), status_code=status, details=_field_errors(body.get("errors")))
        return ServiceError(str(message), status_code=status)

    @staticmethod
    def _auth_result(body: Any) -> Tuple[str, Dict[str, Any]]:
        if not isinstance(body, dict):
            raise ServiceError("Authentication response is not an object")
        credential = body.get("token") or body.get("credential")
        identity = body.get("user") or body.get("identity")
        if not credential or not isinstance(identity, dict):
            raise ServiceError("Authentication response is missing the token or user")
        return str(credential), identity

    # --- session endpoints ---

    def login(self, email: str, password: str) -> Tuple[str, Dict[str, Any]]:
        try:
            body = self._request("POST", "/auth/login", json={"email": email, "password": password})
        except (SessionExpiredError, ValidationError) as e:
            raise InvalidCredentialsError(e.message, status_code=e.status_code) from e
        return self._auth_result(body)

    def signup(self, fields: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
        body = self._request("POST", "/auth/signup", json=fields)
        return self._auth_result(body)

    def fetch_identity(self) -> Dict[str, Any]:
        body = self._request("GET", "/auth/me")
        if isinstance(body, dict) and isinstance(body.get("user"), dict):
            return body["user"]
        if not isinstance(body, dict):
            raise ServiceError("Identity response is not an object")
        return body

    # --- authoring endpoints ---

    def upload_media(self, filename: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        try:
            body = self._request("POST", "/upload", files={"image": (filename, content, content_type)})
        except ClientError as e:
            raise UploadFailedError(f"Upload of {filename} failed: {e.message}", status_code=e.status_code) from e

        remote_ref = (body.get("url") or body.get("remoteRef")) if isinstance(body, dict) else None
        if not remote_ref:
            raise UploadFailedError(f"Upload of {filename} returned no reference")
        log.info(f"✅ Uploaded {filename} ({len(content)} bytes)")
        return str(remote_ref)

    def create_event(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = self._request("POST", "/events", json=payload)
        if not isinstance(body, dict) or resource_id(body) is None:
            raise ServiceError("Event creation response carries no identifier")
        return body

    # --- boundary endpoints used by display views ---

    def list_events(self, params: Optional[dict] = None) -> List[Dict[str, Any]]:
        body = self._request("GET", "/events", params=params)
        if isinstance(body, list):
            return body
        return body.get("events", []) if isinstance(body, dict) else []

    def get_event(self, event_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/events/{event_id}")

    def upload_profile_image(self, filename: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        body = self._request("POST", "/users/upload-image", files={"image": (filename, content, content_type)})
        remote_ref = body.get("url") if isinstance(body, dict) else None
        if not remote_ref:
            raise ServiceError("Profile image upload returned no reference")
        return str(remote_ref)

    def update_profile(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        body = self._request("PUT", "/users/profile", json=fields)
        if isinstance(body, dict) and isinstance(body.get("user"), dict):
            return body["user"]
        return body

    def change_password(self, current_password: str, new_password: str) -> None:
        self._request(
            "PUT",
            "/users/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )
