"""Content-Length framed transport over a pair of binary streams."""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
from typing import Any, BinaryIO

from lsprotocol.types import EXIT
from pygls.protocol import JsonRPCProtocol, default_converter
from pygls.server import StdOutTransportAdapter, aio_readline

from quill.lsp.transport.base import ConnectionClosedError, Transport, TransportError
from quill.lsp.transport.types import TransportConfig

logger = logging.getLogger(__name__)


class FramingProtocol(JsonRPCProtocol):
    """
    pygls JSON-RPC protocol used for framing only.

    pygls splits the byte stream on Content-Length headers and decodes
    each body; instead of dispatching to pygls features the decoded
    message is handed to the owning transport as a plain dict.
    """

    def __init__(self, transport: StreamTransport):
        super().__init__(transport, default_converter())
        self._stream = transport

    def _deserialize_message(self, data: Any) -> Any:
        # Classification happens in the server, not here
        return data

    def handle_message(self, message: Any) -> None:
        if not isinstance(message, dict):
            logger.warning(f"dropping non-object message: {message!r}")
            return
        self._stream._on_message(message)

    @property
    def has_partial_message(self) -> bool:
        return bool(self._message_buf)


class StreamTransport(Transport):
    """
    Language server transport over a readable and a writable binary stream.

    Each message is a header block (``Content-Length: N``, optionally
    other headers, then a blank line) followed by N bytes of UTF-8 JSON.
    Reading runs pygls's ``aio_readline`` in a background task, with the
    blocking reads on an executor thread. Writes go through pygls and are
    flushed before send() returns.
    """

    def __init__(
        self,
        rfile: BinaryIO,
        wfile: BinaryIO,
        config: TransportConfig | None = None,
    ):
        super().__init__(config)
        self._rfile = rfile
        self._wfile = wfile
        self._protocol = FramingProtocol(self)
        self._stop_event = threading.Event()
        self._reader_task: asyncio.Task | None = None
        self._closing = False
        self._protocol_error: Exception | None = None
        self._write_failure: TransportError | None = None

    @classmethod
    def stdio(cls, config: TransportConfig | None = None) -> StreamTransport:
        """Create a transport reading stdin and writing stdout."""
        return cls(sys.stdin.buffer, sys.stdout.buffer, config)

    def is_connected(self) -> bool:
        return self._reader_task is not None and not self._closing

    async def start(self) -> None:
        if self._reader_task is not None:
            return
        if self._closing:
            raise ConnectionClosedError("transport is closed")

        self._protocol.connection_made(StdOutTransportAdapter(self._rfile, self._wfile))
        self._reader_task = asyncio.create_task(self._read_loop(), name="lsp-reader")

    async def send(self, message: dict[str, Any]) -> None:
        if self._closing:
            raise ConnectionClosedError("transport is closed")
        if self._reader_task is None:
            raise TransportError("transport not started")
        if self._write_failure is not None:
            raise self._write_failure

        self._protocol_error = None
        self._protocol._send_data(message)
        if self._protocol_error is None:
            return

        error = TransportError(
            f"could not send message: {self._protocol_error}",
            cause=self._protocol_error,
        )
        if isinstance(self._protocol_error, OSError):
            self._write_failure = error
            self._fail(error)
        raise error

    async def close(self) -> None:
        if self._closing:
            return
        self._closing = True
        self._stop_event.set()

        if self._reader_task is not None and not self._reader_task.done():
            # A read already blocked on the executor thread finishes on its own
            self._reader_task.cancel()
            try:
                await self._reader_task
            except asyncio.CancelledError:
                pass

    def _on_message(self, message: dict[str, Any]) -> None:
        self._deliver(message)
        if self.config.stop_on_exit and message.get("method") == EXIT:
            logger.debug("exit notification received, reader stopping")
            self._stop_event.set()

    def _report_server_error(self, error: Exception, source: Any) -> None:
        """Called by pygls when it cannot decode or write a message."""
        logger.warning(f"protocol error ({getattr(source, '__name__', source)}): {error}")
        self._protocol_error = error

    async def _read_loop(self) -> None:
        """Reader pump: feed frames to the protocol until EOF or exit."""
        loop = asyncio.get_running_loop()
        try:
            await aio_readline(
                loop,
                None,
                self._stop_event,
                self._rfile,
                self._protocol.data_received,
            )
        except asyncio.CancelledError:
            self._finish()
            raise
        except (ConnectionError, OSError, ValueError) as e:
            logger.error(f"transport read failed: {e}")
            self._finish(TransportError(f"read failed: {e}", cause=e))
            return

        if self._protocol.has_partial_message and not self._stop_event.is_set():
            error = ConnectionClosedError("stream closed inside a message")
            logger.error(str(error))
            self._finish(error)
            return
        logger.debug("input stream closed")
        self._finish()
