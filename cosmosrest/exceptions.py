"""
cosmosrest Exception Hierarchy.

Exception types raised by the request pipeline, the transport executor and
the response decoders. Every error carries a machine-readable error code and
optional details, matching the Cosmos DB REST error shape where one exists.

Author: cosmosrest contributors
"""

from typing import Any, Dict, Optional


class CosmosError(Exception):
    """
    Base exception for all cosmosrest errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code (e.g., 'NotFound')
        details: Additional context (resource_id, resource_type, etc.)
    """

    error_code: str = "CosmosError"
    is_transient: bool = False

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


# ========== Transport Errors ==========

class TransportError(CosmosError):
    """
    Network-level failure while talking to the service.

    Carries the resource the request was aimed at so failures can be traced
    back to a logical operation.
    """

    error_code = "TransportError"
    is_transient = True

    def __init__(
        self,
        message: str,
        resource_id: str = "",
        resource_type: str = "",
        request: Optional[Any] = None,
        error_code: Optional[str] = None,
    ):
        details = {"resource_id": resource_id, "resource_type": resource_type}
        super().__init__(message, error_code=error_code, details=details)
        self.resource_id = resource_id
        self.resource_type = resource_type
        self.request = request


class ContextDoneError(TransportError):
    """Raised when the request context was canceled or its deadline passed."""

    error_code = "ContextDone"
    is_transient = False


class RequestCanceledError(ContextDoneError):
    """The request context was canceled by the caller."""

    error_code = "Canceled"

    def __init__(self, message: str = "context canceled", **kwargs: Any):
        super().__init__(message, **kwargs)


class DeadlineExceededError(ContextDoneError):
    """The request context deadline passed before the request completed."""

    error_code = "DeadlineExceeded"

    def __init__(self, message: str = "context deadline exceeded", **kwargs: Any):
        super().__init__(message, **kwargs)


class RetriesExhaustedError(TransportError):
    """All retry attempts failed with a transient error."""

    error_code = "RetriesExhausted"
    is_transient = False

    def __init__(
        self,
        attempts: int,
        method: str = "",
        url: str = "",
        last_error: Optional[str] = None,
        **kwargs: Any
    ):
        message = f"{method} {url} giving up after {attempts} attempts"
        if last_error:
            message = f"{message}: {last_error}"
        super().__init__(message.strip(), **kwargs)
        self.attempts = attempts
        self.last_error = last_error


# ========== Logical Errors ==========

class RequestError(CosmosError):
    """
    The service answered, but not with the status the operation expects.

    Decoded from the response body (``code`` and ``message``) and enriched
    with the client-side resource id, type and the originating request.
    """

    error_code = "RequestError"

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int,
        resource_id: str = "",
        resource_type: str = "",
        request: Optional[Any] = None,
    ):
        details = {
            "status_code": status_code,
            "resource_id": resource_id,
            "resource_type": resource_type,
        }
        super().__init__(message, error_code=code or str(status_code), details=details)
        self.code = code
        self.status_code = status_code
        self.resource_id = resource_id
        self.resource_type = resource_type
        self.request = request

    def __str__(self) -> str:
        return f"{self.code}, {self.message}"


# ========== Decode / Usage Errors ==========

class ParseError(CosmosError):
    """Malformed JSON body or malformed metrics header."""

    error_code = "ParseError"


class NoMetricsError(ParseError):
    """The response carries no query metrics header."""

    error_code = "NoMetrics"

    def __init__(self, message: str = "no metrics in response"):
        super().__init__(message)


class UsageError(CosmosError):
    """A required argument was missing or unusable."""

    error_code = "UsageError"


# ========== Utility Functions ==========

def is_transient_error(error: Exception) -> bool:
    """
    Determine if an error is transient and the request can be retried.

    Args:
        error: Exception to check

    Returns:
        True if error is transient and the request should be retried
    """
    if isinstance(error, CosmosError):
        return getattr(error, "is_transient", False)

    if isinstance(error, (
        ConnectionError,
        ConnectionRefusedError,
        ConnectionResetError,
        TimeoutError,
    )):
        return True

    return False
