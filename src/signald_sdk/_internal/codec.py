"""Newline-delimited JSON framing for the signald socket protocol."""

import json
from collections.abc import Iterable
from typing import Any, cast

from .._errors import FrameEncodeError, FramingError
from ..types import (
    EventFrame,
    EventFrameDict,
    RequestFrame,
    ResponseFrame,
    ResponseFrameDict,
    RoutedFrame,
)

DELIMITER = b"\n"


def encode_frame(message: RequestFrame) -> bytes:
    """Serialize a message as one compact JSON line."""
    try:
        text = json.dumps(message, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise FrameEncodeError(message, e) from e
    return text.encode("utf-8") + DELIMITER


def decode_frame(line: bytes | str) -> dict[str, Any]:
    """Parse one line into a JSON object.

    Raises:
        FramingError: If the line is not UTF-8, not JSON, or not a JSON object.
    """
    try:
        text = line.decode("utf-8") if isinstance(line, bytes) else line
        data = json.loads(text.strip())
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise FramingError("Failed to decode JSON", line, e) from e

    if not isinstance(data, dict):
        raise FramingError("Frame is not a JSON object", line)
    return data


def classify_frame(frame: dict[str, Any], event_types: Iterable[str]) -> RoutedFrame:
    """Route a decoded frame by its ``id`` and ``type`` fields.

    A frame with ``id`` is a response. Otherwise a ``type`` listed in
    ``event_types`` marks a push event whose payload is the nested ``data``
    object. Anything else is a framing violation.
    """
    if "id" in frame:
        correlation_id = frame["id"]
        if not isinstance(correlation_id, str):
            raise FramingError("Response id is not a string", json.dumps(frame))
        return ResponseFrame(
            correlation_id=correlation_id, raw=cast(ResponseFrameDict, frame)
        )

    frame_type = frame.get("type")
    if isinstance(frame_type, str) and frame_type in event_types:
        data = frame.get("data")
        if not isinstance(data, dict):
            raise FramingError(
                f"Event {frame_type} has no data object", json.dumps(frame)
            )
        return EventFrame(
            event_type=frame_type, data=data, raw=cast(EventFrameDict, frame)
        )

    raise FramingError("Unrecognized frame shape", json.dumps(frame))
