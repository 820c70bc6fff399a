"""Pytest configuration and fixtures."""

from typing import Any

import orjson
import pytest

from quill.lsp.transport import MemoryTransport

# Enable async tests without marking each one
pytest_plugins = ["pytest_asyncio"]


class ClientScript:
    """Builds the raw messages an editor would send."""

    def initialize(self, id: int | str = 1, params: Any = None) -> dict:
        if params is None:
            params = {
                "processId": 4242,
                "rootUri": "file:///workspace",
                "capabilities": {},
                "clientInfo": {"name": "test-editor", "version": "1.0"},
            }
        return {"jsonrpc": "2.0", "id": id, "method": "initialize", "params": params}

    def initialized(self) -> dict:
        return {"jsonrpc": "2.0", "method": "initialized", "params": {}}

    def did_change(self, uri: str, version: int, *texts: str) -> dict:
        return {
            "jsonrpc": "2.0",
            "method": "textDocument/didChange",
            "params": {
                "textDocument": {"uri": uri, "version": version},
                "contentChanges": [{"text": text} for text in texts],
            },
        }

    def did_open(self, uri: str, version: int, text: str, language_id: str = "python") -> dict:
        return {
            "jsonrpc": "2.0",
            "method": "textDocument/didOpen",
            "params": {
                "textDocument": {
                    "uri": uri,
                    "languageId": language_id,
                    "version": version,
                    "text": text,
                },
            },
        }

    def request(self, id: int | str, method: str, params: Any = None) -> dict:
        msg = {"jsonrpc": "2.0", "id": id, "method": method}
        if params is not None:
            msg["params"] = params
        return msg

    def shutdown(self, id: int | str = 99) -> dict:
        return {"jsonrpc": "2.0", "id": id, "method": "shutdown", "params": None}

    def exit(self) -> dict:
        return {"jsonrpc": "2.0", "method": "exit", "params": None}

    def handshake(self) -> list[dict]:
        return [self.initialize(1), self.initialized()]


@pytest.fixture
def client():
    """Factory for client-side protocol messages."""
    return ClientScript()


@pytest.fixture
def memory_transport():
    """Unstarted in-memory transport."""
    return MemoryTransport()


@pytest.fixture
def decode_frames():
    """Split a Content-Length framed byte buffer back into message dicts."""

    def decode(buffer: bytes) -> list[dict]:
        messages = []
        pos = 0
        while pos < len(buffer):
            header_end = buffer.index(b"\r\n\r\n", pos)
            headers = dict(
                line.split(": ", 1)
                for line in buffer[pos:header_end].decode("ascii").split("\r\n")
            )
            length = int(headers["Content-Length"])
            body_start = header_end + 4
            messages.append(orjson.loads(buffer[body_start:body_start + length]))
            pos = body_start + length
        return messages

    return decode
