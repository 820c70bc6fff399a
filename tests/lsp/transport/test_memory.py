"""Tests for the in-process transport."""

import pytest

from quill.lsp.transport import (
    ConnectionClosedError,
    MemoryTransport,
    TransportError,
)


class TestMemoryTransport:
    """Tests for MemoryTransport."""

    @pytest.mark.asyncio
    async def test_fed_messages_received_in_order(self, memory_transport):
        memory_transport.feed({"id": 1, "method": "a"}, {"method": "b"})
        memory_transport.feed_eof()

        async with memory_transport:
            assert (await memory_transport.recv())["method"] == "a"
            assert (await memory_transport.recv())["method"] == "b"
            assert await memory_transport.recv() is None

    @pytest.mark.asyncio
    async def test_sent_messages_are_decoded_json(self, memory_transport):
        async with memory_transport:
            await memory_transport.send({"jsonrpc": "2.0", "id": 1, "result": {"items": (1, 2)}})

        assert memory_transport.sent == [{"jsonrpc": "2.0", "id": 1, "result": {"items": [1, 2]}}]

    @pytest.mark.asyncio
    async def test_send_requires_start(self, memory_transport):
        with pytest.raises(TransportError, match="not started"):
            await memory_transport.send({"method": "x"})

    @pytest.mark.asyncio
    async def test_send_after_close(self, memory_transport):
        await memory_transport.start()
        await memory_transport.close()

        with pytest.raises(ConnectionClosedError):
            await memory_transport.send({"method": "x"})
        assert not memory_transport.is_connected()

    @pytest.mark.asyncio
    async def test_failed_stream_raises(self, memory_transport):
        memory_transport.feed({"method": "a"})
        memory_transport.feed_eof(ConnectionClosedError("stream closed inside a message"))

        async with memory_transport:
            assert (await memory_transport.recv())["method"] == "a"
            with pytest.raises(ConnectionClosedError, match="inside a message"):
                await memory_transport.recv()
            assert isinstance(memory_transport.failure, ConnectionClosedError)

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, memory_transport):
        memory_transport.feed({"method": "a"})

        await memory_transport.start()
        await memory_transport.start()

        assert (await memory_transport.recv())["method"] == "a"
        assert memory_transport.is_connected()
