"""signald SDK for Python."""

from ._errors import (
    CorrelationError,
    DaemonError,
    FrameEncodeError,
    FramingError,
    RequestTimeoutError,
    SignaldConnectionError,
    SignaldSDKError,
    SocketNotFoundError,
)
from ._internal.transport import Transport
from ._internal.transport.stream import StreamTransport
from ._internal.transport.unix_socket import UnixSocketTransport
from .client import SignaldClient
from .responses import is_error_response, raise_for_error, response_data
from .send import send_request
from .types import (
    DEFAULT_EVENT_TYPES,
    DEFAULT_SOCKET_PATH,
    ConnectionState,
    EventFrameDict,
    RequestFrame,
    ResponseFrameDict,
    SignaldOptions,
)

__version__ = "0.1.0"

__all__ = [
    # Main exports
    "send_request",
    "SignaldClient",
    # Transport
    "Transport",
    "StreamTransport",
    "UnixSocketTransport",
    # Types
    "SignaldOptions",
    "ConnectionState",
    "DEFAULT_EVENT_TYPES",
    "DEFAULT_SOCKET_PATH",
    "RequestFrame",
    "ResponseFrameDict",
    "EventFrameDict",
    # Responses
    "is_error_response",
    "raise_for_error",
    "response_data",
    # Errors
    "SignaldSDKError",
    "SignaldConnectionError",
    "SocketNotFoundError",
    "FramingError",
    "FrameEncodeError",
    "CorrelationError",
    "RequestTimeoutError",
    "DaemonError",
]
