"""Abstract base transport and error types."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any

from quill.lsp.transport.types import TransportConfig

# Marks the end of the inbound stream in the inbox queue
_EOF = object()


class TransportError(Exception):
    """Base exception for transport errors."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class ConnectionClosedError(TransportError):
    """The channel closed, or was used after close()."""

    pass


class TransportTimeoutError(TransportError):
    """No message arrived within the requested time."""

    pass


class Transport(ABC):
    """
    Abstract base class for message transports.

    A transport turns a duplex channel into discrete JSON-RPC message
    dicts. Inbound messages are queued in arrival order and handed out by
    recv(); implementations push them with _deliver() and signal the end
    of the stream with _finish().
    """

    def __init__(self, config: TransportConfig | None = None):
        self.config = config or TransportConfig()
        self._inbox: asyncio.Queue[Any] = asyncio.Queue()
        self._failure: TransportError | None = None

    @property
    def failure(self) -> TransportError | None:
        """The first fatal error the transport hit, if any."""
        return self._failure

    def _deliver(self, message: dict[str, Any]) -> None:
        self._inbox.put_nowait(message)

    def _finish(self, error: TransportError | None = None) -> None:
        """Mark the inbound stream as ended, optionally because of an error."""
        if error is not None:
            self._fail(error)
        self._inbox.put_nowait(_EOF)

    def _fail(self, error: TransportError) -> None:
        if self._failure is None:
            self._failure = error

    async def recv(self, timeout: float | None = None) -> dict[str, Any] | None:
        """
        Wait for the next inbound message.

        Args:
            timeout: Seconds to wait, or None to wait indefinitely.

        Returns:
            The message dict, or None once the channel has closed.

        Raises:
            TransportTimeoutError: If timeout elapsed first.
            TransportError: If the inbound stream ended because of a failure.
        """
        try:
            if timeout is None:
                item = await self._inbox.get()
            else:
                item = await asyncio.wait_for(self._inbox.get(), timeout)
        except asyncio.TimeoutError:
            raise TransportTimeoutError(f"no message within {timeout}s")

        if item is _EOF:
            # Keep the end marker for any later caller
            self._inbox.put_nowait(_EOF)
            if self._failure is not None:
                raise self._failure
            return None
        return item

    @abstractmethod
    async def start(self) -> None:
        """
        Start moving messages between the channel and the queues.

        Safe to call more than once.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Flush outbound messages and release all resources.

        This method should be safe to call multiple times.
        """
        pass

    @abstractmethod
    async def send(self, message: dict[str, Any]) -> None:
        """
        Queue a JSON-RPC message for the peer.

        Raises:
            ConnectionClosedError: If the transport has been closed.
            TransportError: If an earlier write failed.
        """
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """
        Check if transport is currently connected.

        Returns:
            True if started and not yet closed.
        """
        pass

    async def __aenter__(self) -> "Transport":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
