"""Failure taxonomy surfaced by the remote service gateway."""

from typing import Dict, Optional


class ClientError(Exception):
    """Base class for every failure the gateway reports to callers."""

    kind = "ServiceError"

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = dict(details or {})

    def __str__(self) -> str:
        return self.message


class InvalidCredentialsError(ClientError):
    kind = "InvalidCredentials"


class ValidationError(ClientError):
    """Payload rejected; `details` maps field names to messages."""

    kind = "ValidationError"


class SessionExpiredError(ClientError):
    kind = "SessionExpired"


class UploadFailedError(ClientError):
    kind = "UploadFailed"


class ServiceError(ClientError):
    kind = "ServiceError"
