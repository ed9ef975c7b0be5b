"""Helpers for inspecting response frames."""

from typing import Any

from ._errors import DaemonError
from .types import ResponseFrameDict


def is_error_response(response: ResponseFrameDict) -> bool:
    """Check whether the daemon reported a failure in ``response``."""
    return response.get("error") is not None


def response_data(response: ResponseFrameDict) -> Any:
    """Unwrap the ``data`` payload of a successful response.

    Error responses, and responses without a ``data`` field, are returned
    whole so the caller can inspect them.
    """
    if "data" in response and not is_error_response(response):
        return response["data"]
    return response


def raise_for_error(response: ResponseFrameDict) -> ResponseFrameDict:
    """Raise DaemonError if ``response`` carries an application error.

    Example:
        ```python
        response = raise_for_error(await client.request_raw(payload))
        ```
    """
    if is_error_response(response):
        raise DaemonError(response.get("error_type"), response["error"], response)
    return response
