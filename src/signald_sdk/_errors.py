"""Error types for signald SDK."""

from collections.abc import Mapping
from typing import Any


class SignaldSDKError(Exception):
    """Base exception for all signald SDK errors."""


class SignaldConnectionError(SignaldSDKError):
    """Raised when the daemon socket cannot be opened, written or read."""


class SocketNotFoundError(SignaldConnectionError):
    """Raised when the daemon socket does not exist."""

    def __init__(
        self, message: str = "signald socket not found", socket_path: str | None = None
    ):
        if socket_path:
            message = f"{message}: {socket_path}"
        self.socket_path = socket_path
        super().__init__(message)


class FramingError(SignaldSDKError):
    """Raised when an inbound line is not a routable JSON frame."""

    def __init__(
        self, message: str, line: str | bytes, original_error: Exception | None = None
    ):
        self.line = line
        self.original_error = original_error
        super().__init__(f"{message}: {line[:100]!r}")


class FrameEncodeError(SignaldSDKError):
    """Raised when an outbound message cannot be serialized."""

    def __init__(self, payload: Any, original_error: Exception):
        self.original_error = original_error
        super().__init__(f"Failed to encode message: {original_error}")
        self.payload = payload


class CorrelationError(SignaldSDKError):
    """Raised on misuse of a correlation id (duplicate register, double take)."""

    def __init__(self, message: str, correlation_id: str):
        self.correlation_id = correlation_id
        super().__init__(f"{message}: {correlation_id}")


class RequestTimeoutError(SignaldSDKError, TimeoutError):
    """Raised when a response does not arrive within the request timeout."""

    def __init__(self, correlation_id: str, timeout: float):
        self.correlation_id = correlation_id
        self.timeout = timeout
        super().__init__(
            f"No response for request {correlation_id} within {timeout} seconds"
        )


class DaemonError(SignaldSDKError):
    """Application error reported by the daemon inside a response payload."""

    def __init__(
        self,
        error_type: str | None,
        error: Any,
        response: Mapping[str, Any] | None = None,
    ):
        self.error_type = error_type
        self.error = error
        self.response = response or {}
        message = error.get("message") if isinstance(error, dict) else None
        detail = message or error
        super().__init__(f"{error_type or 'Error'}: {detail}")
