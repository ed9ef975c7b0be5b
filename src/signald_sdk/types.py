"""Type definitions for signald SDK."""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Literal, TypedDict

from typing_extensions import NotRequired

DEFAULT_SOCKET_PATH = "/var/run/signald/signald.sock"
SOCKET_PATH_ENV = "SIGNALD_SOCKET"

# Push events arrive as {"type": <tag>, "data": {...}}
DEFAULT_EVENT_TYPES = ("IncomingMessage", "event")

DEFAULT_EVENT_BUFFER_SIZE = 32
DEFAULT_MAX_FRAME_SIZE = 1024 * 1024  # 1MB line limit

ProtocolVersion = Literal["v0", "v1"]


def _default_socket_path() -> str:
    return os.environ.get(SOCKET_PATH_ENV, DEFAULT_SOCKET_PATH)


class ConnectionState(str, Enum):
    """Lifecycle of a single daemon connection."""

    IDLE = "idle"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class SignaldOptions:
    """Options for connecting to signald."""

    socket_path: str | Path = field(default_factory=_default_socket_path)
    event_types: tuple[str, ...] = DEFAULT_EVENT_TYPES
    event_buffer_size: int = DEFAULT_EVENT_BUFFER_SIZE
    max_frame_size: int = DEFAULT_MAX_FRAME_SIZE
    request_timeout: float | None = None
    version: ProtocolVersion | str | None = None


# Wire frames
class RequestFrame(TypedDict):
    """Outbound request as written to the socket."""

    type: str
    id: str
    version: NotRequired[str]


class ErrorPayload(TypedDict):
    """Error object embedded in a failed response."""

    message: NotRequired[str]


class ResponseFrameDict(TypedDict):
    """Inbound response echoing a request id."""

    id: str
    type: NotRequired[str]
    data: NotRequired[Any]
    error: NotRequired[ErrorPayload | str]
    error_type: NotRequired[str]


class EventFrameDict(TypedDict):
    """Inbound push event."""

    type: str
    data: dict[str, Any]
    version: NotRequired[str]


# Routed frames produced by the listener
@dataclass(frozen=True)
class ResponseFrame:
    """A decoded frame carrying a correlation id."""

    correlation_id: str
    raw: ResponseFrameDict


@dataclass(frozen=True)
class EventFrame:
    """A decoded unsolicited push event."""

    event_type: str
    data: dict[str, Any]
    raw: EventFrameDict


RoutedFrame = ResponseFrame | EventFrame
