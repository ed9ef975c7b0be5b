"""Correlation of outstanding requests with their responses."""

import logging
import threading
from typing import Any

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from .._errors import CorrelationError
from ..types import ResponseFrameDict

logger = logging.getLogger(__name__)


class DeliverySlot:
    """One-shot handoff of a single response to a single waiter."""

    def __init__(
        self, correlation_id: str, receive_stream: MemoryObjectReceiveStream[Any]
    ):
        self.correlation_id = correlation_id
        self._receive_stream = receive_stream

    async def wait(self) -> ResponseFrameDict:
        """Wait for the response and release the slot."""
        with self._receive_stream:
            try:
                return await self._receive_stream.receive()
            except anyio.EndOfStream as e:
                raise CorrelationError(
                    "Slot discarded before a response arrived", self.correlation_id
                ) from e

    def close(self) -> None:
        """Abandon the slot; a late response is dropped."""
        self._receive_stream.close()


class ResponseRegistry:
    """Arena of delivery slots indexed by correlation id.

    The registry keeps the send half of each slot until the listener fulfills
    it, and the receive half until a caller takes it. All mutations happen
    under a lock that is never held across an await.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._senders: dict[str, MemoryObjectSendStream[Any]] = {}
        self._receivers: dict[str, MemoryObjectReceiveStream[Any]] = {}

    def register(self, correlation_id: str) -> None:
        """Insert a fresh slot for ``correlation_id``.

        Raises:
            CorrelationError: If the id already has a live slot.
        """
        with self._lock:
            if correlation_id in self._senders or correlation_id in self._receivers:
                raise CorrelationError("Correlation id already registered", correlation_id)
            send_stream, receive_stream = anyio.create_memory_object_stream[Any](
                max_buffer_size=1
            )
            self._senders[correlation_id] = send_stream
            self._receivers[correlation_id] = receive_stream

    def fulfill(self, correlation_id: str, value: ResponseFrameDict) -> bool:
        """Deliver ``value`` to the slot registered under ``correlation_id``.

        Returns:
            True if the value was handed to a slot, False if it was dropped
        """
        with self._lock:
            send_stream = self._senders.pop(correlation_id, None)

        if send_stream is None:
            logger.warning(f"Dropping response for unknown request id {correlation_id}")
            return False

        with send_stream:
            try:
                send_stream.send_nowait(value)
            except (anyio.BrokenResourceError, anyio.ClosedResourceError):
                logger.debug(f"Dropping response for abandoned request {correlation_id}")
                with self._lock:
                    self._receivers.pop(correlation_id, None)
                return False

        logger.debug(f"Delivered response for request {correlation_id}")
        return True

    def take(self, correlation_id: str) -> DeliverySlot:
        """Transfer ownership of the waiting side of a slot to the caller.

        Raises:
            CorrelationError: If the id is unknown or was already taken.
        """
        with self._lock:
            receive_stream = self._receivers.pop(correlation_id, None)

        if receive_stream is None:
            raise CorrelationError("No slot to take for request id", correlation_id)
        return DeliverySlot(correlation_id, receive_stream)

    def discard(self, correlation_id: str) -> None:
        """Drop whatever remains of the entry for ``correlation_id``."""
        with self._lock:
            send_stream = self._senders.pop(correlation_id, None)
            receive_stream = self._receivers.pop(correlation_id, None)

        if send_stream is not None:
            send_stream.close()
        if receive_stream is not None:
            receive_stream.close()

    def pending_ids(self) -> list[str]:
        """Ids still waiting for a response."""
        with self._lock:
            return list(self._senders)

    def __contains__(self, correlation_id: object) -> bool:
        with self._lock:
            return correlation_id in self._senders or correlation_id in self._receivers

    def __len__(self) -> int:
        with self._lock:
            return len(self._senders.keys() | self._receivers.keys())
