"""Transport implementations for signald SDK."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator


class Transport(ABC):
    """Abstract byte transport to the signald daemon.

    This is a low-level interface that handles raw I/O with the daemon: it
    writes already-framed bytes and yields inbound lines undecoded. The
    Connection class builds on top of this to correlate responses and route
    push events.

    A transport is a single bidirectional stream. Implementations may assume
    that at most one task iterates ``read_lines()`` and that writes are
    serialized by the caller.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open the underlying stream.

        For socket transports, this establishes the connection.
        """
        pass

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """Write raw bytes to the transport.

        Args:
            data: One or more newline-terminated JSON documents
        """
        pass

    @abstractmethod
    def read_lines(self) -> AsyncIterator[bytes]:
        """Read newline-delimited lines from the transport.

        Yields:
            Each non-blank inbound line, without decoding
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the transport connection and clean up resources."""
        pass

    @abstractmethod
    def is_ready(self) -> bool:
        """Check if transport is ready for communication.

        Returns:
            True if transport is ready to send/receive messages
        """
        pass


__all__ = ["Transport"]
