"""Connection class for multiplexing requests and push events."""

import logging
import uuid
from collections.abc import AsyncIterator, Iterable
from contextlib import suppress
from typing import Any, cast

import anyio

from .._errors import (
    FramingError,
    RequestTimeoutError,
    SignaldConnectionError,
    SignaldSDKError,
)
from ..types import (
    DEFAULT_EVENT_BUFFER_SIZE,
    DEFAULT_EVENT_TYPES,
    ConnectionState,
    EventFrame,
    RequestFrame,
    ResponseFrame,
    ResponseFrameDict,
)
from .codec import classify_frame, decode_frame, encode_frame
from .registry import ResponseRegistry
from .transport import Transport

logger = logging.getLogger(__name__)


class Connection:
    """Request/response correlation and event routing on top of Transport.

    This class manages:
    - Writing requests, each tagged with a fresh correlation id
    - A background listener that reads every inbound line
    - Delivering responses to the waiting caller by id
    - Forwarding push events to a bounded queue with a single subscriber
    """

    def __init__(
        self,
        transport: Transport,
        event_types: Iterable[str] = DEFAULT_EVENT_TYPES,
        event_buffer_size: int = DEFAULT_EVENT_BUFFER_SIZE,
        request_timeout: float | None = None,
        version: str | None = None,
    ):
        """Initialize Connection with transport and routing settings.

        Args:
            transport: Connected low-level transport
            event_types: ``type`` tags of frames routed as push events
            event_buffer_size: Capacity of the event queue
            request_timeout: Optional limit in seconds on each request() wait
            version: Default ``version`` field for outbound requests
        """
        self.transport = transport
        self.event_types = frozenset(event_types)
        self.request_timeout = request_timeout
        self.version = version

        self.registry = ResponseRegistry()
        self._write_lock = anyio.Lock()

        # Event stream
        self._event_send, self._event_receive = anyio.create_memory_object_stream[
            dict[str, Any]
        ](max_buffer_size=event_buffer_size)
        self._events_claimed = False

        self._tg: anyio.abc.TaskGroup | None = None
        self._state = ConnectionState.IDLE

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is ConnectionState.OPEN

    @property
    def pending_requests(self) -> int:
        """Number of requests still holding a delivery slot."""
        return len(self.registry)

    async def start(self) -> None:
        """Start the listener task."""
        if self._tg is not None:
            return
        if not self.transport.is_ready():
            raise SignaldConnectionError("Transport is not connected")

        self._state = ConnectionState.OPEN
        self._tg = anyio.create_task_group()
        await self._tg.__aenter__()
        self._tg.start_soon(self._listen)

    async def _listen(self) -> None:
        """Read frames from transport and route them."""
        try:
            async for line in self.transport.read_lines():
                if self._state is not ConnectionState.OPEN:
                    break
                self._dispatch(line)

        except anyio.get_cancelled_exc_class():
            logger.debug("Listener cancelled")
            raise
        except Exception as e:
            logger.error(f"Listener stopped on read failure: {e}")
        finally:
            # Subscribers see end of stream; pending requests stay unanswered
            self._event_send.close()
            if self._state is ConnectionState.OPEN:
                self._state = ConnectionState.CLOSED
            logger.debug(
                f"Listener exited with {self.pending_requests} request(s) pending"
            )

    def _dispatch(self, line: bytes) -> None:
        """Route one inbound line."""
        try:
            routed = classify_frame(decode_frame(line), self.event_types)
        except FramingError as e:
            logger.warning(f"Discarding frame: {e}")
            return

        if isinstance(routed, ResponseFrame):
            self.registry.fulfill(routed.correlation_id, routed.raw)
        elif isinstance(routed, EventFrame):
            self._forward_event(routed)

    def _forward_event(self, event: EventFrame) -> None:
        try:
            self._event_send.send_nowait(event.data)
        except anyio.WouldBlock:
            logger.warning(f"Event queue full, dropping {event.event_type} event")
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            logger.warning(f"No event subscriber, dropping {event.event_type} event")
        else:
            logger.debug(f"Queued {event.event_type} event")

    async def send(self, correlation_id: str, message: dict[str, Any]) -> None:
        """Register a slot for ``correlation_id`` and write the request.

        The slot exists before any byte reaches the daemon, so the response
        can never arrive ahead of its registration.
        """
        if self._state is not ConnectionState.OPEN:
            raise SignaldConnectionError(f"Connection is {self._state.value}")

        data = encode_frame(cast(RequestFrame, {**message, "id": correlation_id}))
        self.registry.register(correlation_id)
        try:
            async with self._write_lock:
                await self.transport.write(data)
        except BaseException:
            self.registry.discard(correlation_id)
            raise

    async def request(self, message: dict[str, Any]) -> ResponseFrameDict:
        """Send a request and wait for the matching response frame.

        Returns:
            The full decoded response, which may describe an application error
        """
        correlation_id = str(uuid.uuid4())
        outbound = dict(message)
        if self.version and "version" not in outbound:
            outbound["version"] = self.version

        await self.send(correlation_id, outbound)
        slot = self.registry.take(correlation_id)

        try:
            if self.request_timeout is None:
                return await slot.wait()
            try:
                with anyio.fail_after(self.request_timeout):
                    return await slot.wait()
            except TimeoutError as e:
                raise RequestTimeoutError(correlation_id, self.request_timeout) from e
        finally:
            # A late response for an abandoned request is dropped by the listener
            self.registry.discard(correlation_id)

    def events(self) -> AsyncIterator[dict[str, Any]]:
        """Iterate push event payloads in arrival order.

        The iterator is single-pass and ends when the listener stops.
        """
        if self._events_claimed:
            raise SignaldSDKError("Event stream already has a subscriber")
        self._events_claimed = True
        return self._events_impl()

    async def _events_impl(self) -> AsyncIterator[dict[str, Any]]:
        with self._event_receive:
            async for event in self._event_receive:
                yield event

    async def close(self) -> None:
        """Stop the listener and close the transport."""
        if self._state is ConnectionState.OPEN:
            self._state = ConnectionState.CLOSING
        if self._tg:
            self._tg.cancel_scope.cancel()
            with suppress(anyio.get_cancelled_exc_class()):
                await self._tg.__aexit__(None, None, None)
            self._tg = None
        self._event_send.close()
        await self.transport.close()
        self._state = ConnectionState.CLOSED
