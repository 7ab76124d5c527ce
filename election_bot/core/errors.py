"""Error taxonomy for the chat pipeline.

Every error the pipeline raises on purpose derives from ``ElectionBotError``
and carries the HTTP status the API layer should answer with.
"""

from typing import Any, Dict, Optional

from ..common.enums import ErrorType


class ElectionBotError(Exception):
    """Base exception for Election Bot"""

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.INTERNAL,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_type = error_type
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class RequestValidationError(ElectionBotError):
    """Malformed or missing input. Rejected before any upstream call."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_type=ErrorType.VALIDATION,
            status_code=400,
            details=details
        )


class ConfigurationError(ElectionBotError):
    """No credential is configured for any usable provider."""

    def __init__(self, message: str = "No API keys configured"):
        super().__init__(
            message=message,
            error_type=ErrorType.CONFIGURATION,
            status_code=503,
        )


class ProviderUnavailableError(ElectionBotError):
    """The primary provider failed and no fallback provider is configured."""

    def __init__(self, message: str = "Both OpenAI and Claude APIs unavailable"):
        super().__init__(
            message=message,
            error_type=ErrorType.UNAVAILABLE,
            status_code=503,
        )


class UpstreamError(ElectionBotError):
    """A single provider call failed (HTTP status, network or body error)."""

    def __init__(
        self,
        provider: str,
        message: str,
        status: Optional[int] = None,
        transient: bool = True,
    ):
        self.provider = provider
        self.status = status
        self.transient = transient
        super().__init__(
            message=message,
            error_type=ErrorType.UPSTREAM,
            status_code=500,
            details={"provider": provider, "status": status},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"error": "Internal server error", "details": self.message}


class ConversationBusyError(ElectionBotError):
    """A completion is already in flight for this conversation."""

    def __init__(self, message: str = "A response is already in progress"):
        super().__init__(
            message=message,
            error_type=ErrorType.BUSY,
            status_code=409,
        )
