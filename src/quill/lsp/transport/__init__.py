"""
Language server transport layer.

Moves JSON-RPC message dicts over a duplex channel: Content-Length
framed byte streams (stdio, framed by pygls) or an in-process queue.
"""

from quill.lsp.transport.types import TransportConfig
from quill.lsp.transport.base import (
    Transport,
    TransportError,
    ConnectionClosedError,
    TransportTimeoutError,
)
from quill.lsp.transport.stream import StreamTransport
from quill.lsp.transport.memory import MemoryTransport

__all__ = [
    "Transport",
    "TransportConfig",
    "TransportError",
    "ConnectionClosedError",
    "TransportTimeoutError",
    "StreamTransport",
    "MemoryTransport",
]
