"""signald SDK Client for talking to a running signald daemon."""

from collections.abc import AsyncIterator
from typing import Any

from ._errors import SignaldConnectionError
from ._internal.transport import Transport
from .responses import response_data
from .types import ConnectionState, ResponseFrameDict, SignaldOptions


class SignaldClient:
    """
    Client for a long-lived connection to the signald daemon.

    Requests and push events share a single socket. Each request carries a
    fresh correlation id and waits for the response echoing it, while a
    background listener forwards unsolicited events (incoming messages,
    receipts, and the like) to ``events()``.

    Key behaviours:
    - **Concurrent**: Any number of tasks may await requests at once
    - **Ordered events**: Events are yielded in the order the daemon wrote them
    - **Terminal failures**: A lost connection is not re-established; create
      a new client instead
    - **No implicit timeout**: A request never answered waits forever unless
      ``SignaldOptions.request_timeout`` is set or the caller applies one

    Caveat: the listener runs in an anyio task group entered by connect(),
    so connect() and disconnect() must be called from the same task.

    Example:
        ```python
        async with SignaldClient() as client:
            accounts = await client.request({"type": "list_accounts", "version": "v1"})
            async for event in client.events():
                print(event)
        ```
    """

    def __init__(
        self,
        options: SignaldOptions | None = None,
        transport: Transport | None = None,
    ):
        """Initialize signald client."""
        if options is None:
            options = SignaldOptions()
        self.options = options
        self._custom_transport = transport
        self._transport: Transport | None = None
        self._connection: Any | None = None

    @property
    def state(self) -> ConnectionState:
        if not self._connection:
            return ConnectionState.IDLE
        state: ConnectionState = self._connection.state
        return state

    async def connect(self) -> None:
        """Open the daemon socket and start listening."""
        if self._connection:
            return

        from ._internal.connection import Connection
        from ._internal.transport.unix_socket import UnixSocketTransport

        if self._custom_transport is not None:
            transport = self._custom_transport
        else:
            transport = UnixSocketTransport(
                self.options.socket_path,
                max_frame_size=self.options.max_frame_size,
            )
        await transport.connect()
        self._transport = transport

        self._connection = Connection(
            transport=transport,
            event_types=self.options.event_types,
            event_buffer_size=self.options.event_buffer_size,
            request_timeout=self.options.request_timeout,
            version=self.options.version,
        )
        await self._connection.start()

    async def request(self, payload: dict[str, Any]) -> Any:
        """
        Send a request and wait for its response.

        Args:
            payload: Request body; must include the string ``type`` naming
                the operation. Any ``id`` field is replaced.

        Returns:
            The response ``data`` on success. If the daemon reported an error,
            or the response has no ``data``, the whole response frame.
        """
        return response_data(await self.request_raw(payload))

    async def request_raw(self, payload: dict[str, Any]) -> ResponseFrameDict:
        """Send a request and return the full response frame."""
        if not self._connection:
            raise SignaldConnectionError("Not connected. Call connect() first.")
        if not isinstance(payload.get("type"), str):
            raise ValueError("Request payload must include a string 'type' field")

        return await self._connection.request(payload)

    def events(self) -> AsyncIterator[dict[str, Any]]:
        """
        Iterate push event payloads as the daemon sends them.

        The iterator can be consumed once and ends when the connection closes.
        """
        if not self._connection:
            raise SignaldConnectionError("Not connected. Call connect() first.")
        events: AsyncIterator[dict[str, Any]] = self._connection.events()
        return events

    async def disconnect(self) -> None:
        """Disconnect from signald."""
        if self._connection:
            await self._connection.close()
            self._connection = None
        self._transport = None

    async def __aenter__(self) -> "SignaldClient":
        """Enter async context - automatically connects."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        """Exit async context - always disconnects."""
        await self.disconnect()
        return False
