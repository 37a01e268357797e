"""
Failure taxonomy for the onboarding engine.
Each error carries the HTTP status and a machine-readable reason; main.py renders them.
"""
from __future__ import annotations

from typing import Any, Optional


class OnboardingError(Exception):
    status_code: int = 400
    reason: str = "OnboardingError"

    def __init__(self, message: str, details: Optional[list[dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": False,
            "reason": self.reason,
            "message": self.message,
        }
        if self.details is not None:
            body["details"] = self.details
        return body


class UnknownApplication(OnboardingError):
    reason = "UnknownApplication"


class InvalidStep(OnboardingError):
    reason = "InvalidStep"


class ValidationFailed(OnboardingError):
    reason = "ValidationFailed"


class FileRejected(OnboardingError):
    reason = "FileRejected"


class NotFound(OnboardingError):
    status_code = 404
    reason = "NotFound"


class ApplicationCompleted(OnboardingError):
    status_code = 409
    reason = "ApplicationCompleted"


class PersistenceFailed(OnboardingError):
    status_code = 500
    reason = "PersistenceFailed"


class StorageUnavailable(OnboardingError):
    """Pool acquisition timed out or the database is unreachable; safe to retry."""

    status_code = 503
    reason = "StorageUnavailable"
