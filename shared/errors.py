"""
Error taxonomy shared by the tailoring and compilation pipelines.

Every error carries the HTTP status the API layer should answer with, so
routes never have to map exceptions by hand.
"""
from typing import Any, Dict, List, Optional


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(ServiceError):
    """Client input fails a precondition. Never retried."""

    status_code = 400


class PayloadTooLarge(ValidationError):
    """Uploaded file exceeds the configured size ceiling."""

    status_code = 413


class ConfigurationError(ServiceError):
    """Required credentials or settings are missing."""

    status_code = 400


class RateLimited(ServiceError):
    """Client exceeded its request budget for the current window."""

    status_code = 429

    def __init__(self, message: str = "Too many requests"):
        super().__init__(message)


class UpstreamError(ServiceError):
    """An external service (Gemini, compilation service, mirror) failed."""

    status_code = 502


class UpstreamCallError(UpstreamError):
    """A single upstream call failed with an HTTP status (or none for transport errors)."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class UpstreamExhausted(UpstreamError):
    """Every model / engine permutation was tried and none succeeded."""

    def __init__(
        self,
        message: str,
        tried: Optional[List[Any]] = None,
        log: Optional[str] = None,
        status: Optional[int] = None,
    ):
        super().__init__(message)
        self.tried = list(tried or [])
        self.log = log
        self.status = status

    def to_dict(self) -> Dict[str, Any]:
        tried = [t.model_dump(exclude_none=True) if hasattr(t, "model_dump") else t for t in self.tried]
        return {"error": self.message, "tried": tried}
