"""In-process transport for embedding the server and for tests."""

from typing import Any

from quill.lib import oj
from quill.lsp.transport.base import ConnectionClosedError, Transport, TransportError
from quill.lsp.transport.types import TransportConfig


class MemoryTransport(Transport):
    """
    Transport whose peer is the calling code.

    Inbound messages are pushed with feed() and the stream is ended with
    feed_eof(). Outbound messages go through a JSON round trip, so
    ``sent`` holds exactly what a client would have decoded.
    """

    def __init__(self, config: TransportConfig | None = None):
        super().__init__(config)
        self.sent: list[dict[str, Any]] = []
        self._started = False
        self._closing = False

    def is_connected(self) -> bool:
        return self._started and not self._closing

    async def start(self) -> None:
        if self._started:
            return
        self._started = True

    async def close(self) -> None:
        if self._closing:
            return
        self._closing = True

    async def send(self, message: dict[str, Any]) -> None:
        if self._closing:
            raise ConnectionClosedError("transport is closed")
        if not self._started:
            raise TransportError("transport not started")
        self.sent.append(oj.loads(oj.dumps(message)))

    def feed(self, *messages: dict[str, Any]) -> None:
        """Queue inbound messages in order."""
        for message in messages:
            self._deliver(message)

    def feed_eof(self, error: TransportError | None = None) -> None:
        """End the inbound stream, optionally as a failure."""
        self._finish(error)
