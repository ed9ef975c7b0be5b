"""One-shot request function for signald SDK."""

from typing import Any

from ._internal.transport import Transport
from .client import SignaldClient
from .types import SignaldOptions


async def send_request(
    payload: dict[str, Any],
    options: SignaldOptions | None = None,
    transport: Transport | None = None,
) -> Any:
    """
    Send a single request to signald and return its response.

    Opens a connection, sends the request, waits for the response and closes
    the connection again. Push events arriving meanwhile are discarded. Use
    SignaldClient to issue several requests or to receive events.

    Args:
        payload: Request body including its ``type`` field
        options: Optional configuration (defaults to SignaldOptions() if None)
        transport: Optional transport implementation. If provided, it is used
            instead of the default Unix socket transport.

    Returns:
        The response ``data``, or the whole response frame on error

    Example:
        ```python
        version = await send_request({"type": "version"})
        ```
    """
    async with SignaldClient(options=options, transport=transport) as client:
        return await client.request(payload)
