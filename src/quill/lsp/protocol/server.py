"""Language server main loop."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum, auto
from typing import Any, Awaitable, Callable

from lsprotocol import types

from quill.lsp.capabilities.server import initialize_result, server_capabilities
from quill.lsp.config import ServerConfig
from quill.lsp.features.diagnostics import diagnostics_for
from quill.lsp.protocol.dispatch import (
    DID_CHANGE,
    DID_OPEN,
    EXIT,
    INITIALIZE,
    INITIALIZED,
    PUBLISH_DIAGNOSTICS,
    SHUTDOWN,
    Classified,
    MethodRegistry,
    converter,
)
from quill.lsp.protocol.errors import HandshakeError, InvalidMessage, LSPError
from quill.lsp.protocol.messages import Notification, Request, Response
from quill.lsp.protocol.state import Session, SessionState
from quill.lsp.transport.base import Transport, TransportError, TransportTimeoutError
from quill.lsp.validation.base import Validator

logger = logging.getLogger(__name__)

NotificationHandler = Callable[[Any], Awaitable[None]]


class LoopOutcome(Enum):
    """How the message loop ended."""

    SHUTDOWN = auto()
    """A shutdown request was answered."""

    DISCONNECTED = auto()
    """The channel closed (or exit arrived) before any shutdown request."""


class LanguageServer:
    """
    Protocol driver for one client session.

    Pulls messages from the transport one at a time, runs the
    initialize/initialized handshake, validates document text on every
    change and publishes the resulting diagnostics. Everything happens in
    the calling coroutine: a message is fully handled, validation
    included, before the next one is received.
    """

    def __init__(
        self,
        transport: Transport,
        validator: Validator,
        config: ServerConfig | None = None,
        registry: MethodRegistry | None = None,
    ):
        self.transport = transport
        self.validator = validator
        self.config = config or ServerConfig()
        self.session = Session()
        self.capabilities = server_capabilities()
        self.initialize_params: types.InitializeParams | None = None

        self._registry = registry or MethodRegistry()
        self._notification_handlers: dict[str, NotificationHandler] = {
            DID_CHANGE: self._on_did_change,
            DID_OPEN: self._on_did_open,
        }

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self.session.state

    async def run(self) -> LoopOutcome:
        """Perform the handshake, then run the main loop."""
        if await self.initialize() is None:
            return LoopOutcome.DISCONNECTED
        return await self.main_loop()

    async def initialize(self) -> types.InitializeParams | None:
        """
        Run the initialize/initialized handshake.

        Returns:
            The client's InitializeParams, or None if the channel closed
            (or exit arrived) before the handshake finished.

        Raises:
            HandshakeError: If the initialize params cannot be decoded.
            TransportError: If the transport fails.
        """
        while not self.session.initialized:
            raw = await self.transport.recv()
            if raw is None:
                logger.warning("connection closed during initialization")
                self.session.transition(SessionState.DISCONNECTED)
                return None

            classified = self._classify(raw)
            if classified is None:
                continue

            if classified.method == EXIT and classified.is_notification:
                logger.warning("exit received during initialization")
                self.session.transition(SessionState.DISCONNECTED)
                return None

            if self.session.state is SessionState.AWAITING_INITIALIZE:
                await self._handle_before_initialize(classified)
            else:
                await self._handle_before_initialized(classified)

        logger.info("initialization complete")
        return self.initialize_params

    async def main_loop(self) -> LoopOutcome:
        """
        Dispatch messages until shutdown or disconnect.

        Raises:
            TransportError: If the transport fails.
        """
        if self.session.state is not SessionState.INITIALIZED:
            raise LSPError.internal_error(f"main loop started in state {self.session.state}")

        logger.info("starting main loop")
        while True:
            raw = await self.transport.recv()
            if raw is None:
                logger.warning("connection dropped before shutdown")
                self.session.transition(SessionState.DISCONNECTED)
                return LoopOutcome.DISCONNECTED

            logger.debug(f"got msg: {raw}")
            classified = self._classify(raw)
            if classified is None:
                continue

            if classified.is_request:
                if await self._handle_request(classified):
                    return LoopOutcome.SHUTDOWN
            elif classified.is_response:
                logger.debug(f"ignoring response: {classified.message}")
            elif classified.method == EXIT:
                logger.warning("exit received before shutdown")
                self.session.transition(SessionState.DISCONNECTED)
                return LoopOutcome.DISCONNECTED
            else:
                await self._handle_notification(classified)

    async def wait_for_exit(self, timeout: float) -> bool:
        """
        After shutdown, wait for the client's exit notification.

        Requests arriving in the meantime are answered with InvalidRequest;
        other notifications are dropped.

        Returns:
            True if exit arrived in time.
        """
        if not self.session.shutdown_requested:
            raise LSPError.internal_error("wait_for_exit called before shutdown")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            try:
                raw = await self.transport.recv(timeout=max(deadline - loop.time(), 0))
            except TransportTimeoutError:
                return False
            if raw is None:
                self.session.transition(SessionState.DISCONNECTED)
                return False

            classified = self._classify(raw)
            if classified is None:
                continue
            if classified.is_notification and classified.method == EXIT:
                self.session.transition(SessionState.TERMINATED)
                return True
            if classified.is_request:
                await self._reply_error(
                    classified.message, LSPError.invalid_request("server is shutting down")
                )

    async def publish_diagnostics(
        self,
        document: types.VersionedTextDocumentIdentifier,
        diagnostics: list[types.Diagnostic],
    ) -> None:
        """Send one diagnostics batch tagged with the document's URI and version."""
        params = types.PublishDiagnosticsParams(
            uri=document.uri,
            version=document.version,
            diagnostics=diagnostics,
        )
        notification = Notification(method=PUBLISH_DIAGNOSTICS, params=converter.unstructure(params))
        await self.transport.send(notification.to_dict())

    def _classify(self, raw: Any) -> Classified | None:
        try:
            return self._registry.classify(raw)
        except InvalidMessage as e:
            logger.warning(f"dropping invalid message: {e.message}")
            return None

    async def _handle_before_initialize(self, classified: Classified) -> None:
        message = classified.message
        if not classified.is_request:
            logger.debug(f"dropping {message} before initialize")
            return

        if message.method != INITIALIZE:
            await self._reply_error(message, LSPError.server_not_initialized(message.method))
            return

        if not classified.recognized:
            await self._reply_error(message, LSPError.invalid_params(classified.decode_error))
            raise HandshakeError(f"invalid initialize params: {classified.decode_error}")

        self.initialize_params = classified.params
        client = classified.params.client_info
        logger.info(f"initialize from {client.name if client else 'unknown client'}")

        result = converter.unstructure(initialize_result(self.capabilities))
        await self.transport.send(Response.success(message.id, result).to_dict())
        self.session.transition(SessionState.AWAITING_INITIALIZED)

    async def _handle_before_initialized(self, classified: Classified) -> None:
        message = classified.message
        if classified.is_notification and message.method == INITIALIZED:
            self.session.transition(SessionState.INITIALIZED)
            return

        logger.warning(f"expected initialized notification, dropping {message}")
        if classified.is_request and self.config.strict_requests:
            await self._reply_error(
                message, LSPError.invalid_request("expected initialized notification")
            )

    async def _handle_request(self, classified: Classified) -> bool:
        """Handle a request; True when it was shutdown and the loop must end."""
        request = classified.message
        if request.method == SHUTDOWN:
            await self.transport.send(Response.success(request.id, None).to_dict())
            self.session.transition(SessionState.SHUTTING_DOWN)
            logger.info("shutdown requested")
            return True

        if request.method == INITIALIZE:
            logger.warning(f"ignoring repeated initialize request (id={request.id})")
            if self.config.strict_requests:
                await self._reply_error(request, LSPError.invalid_request("server already initialized"))
            return False

        if self.config.strict_requests:
            await self._reply_error(request, LSPError.method_not_found(request.method))
        else:
            logger.debug(f"dropping unhandled request: {request}")
        return False

    async def _handle_notification(self, classified: Classified) -> None:
        method = classified.method
        handler = self._notification_handlers.get(method)
        if handler is None:
            logger.debug(f"ignoring notification: {method}")
            return
        if not classified.recognized:
            logger.warning(f"could not decode params of {method}: {classified.decode_error}")
            return

        try:
            await handler(classified.params)
        except TransportError:
            raise
        except Exception:
            logger.exception(f"notification handler error for {method}")

    async def _on_did_change(self, params: types.DidChangeTextDocumentParams) -> None:
        document = params.text_document
        changes = params.content_changes
        if len(changes) != 1 or not _is_full(changes[0]):
            logger.warning(
                f"rejecting didChange for {document.uri} v{document.version}: "
                f"expected one full-text change, got {len(changes)} "
                f"({sum(1 for c in changes if not _is_full(c))} ranged)"
            )
            return
        await self._validate_and_publish(document, changes[0].text)

    async def _on_did_open(self, params: types.DidOpenTextDocumentParams) -> None:
        item = params.text_document
        document = types.VersionedTextDocumentIdentifier(uri=item.uri, version=item.version)
        await self._validate_and_publish(document, item.text)

    async def _validate_and_publish(
        self,
        document: types.VersionedTextDocumentIdentifier,
        text: str,
    ) -> None:
        error = self.validator.validate(text)
        if error is not None:
            logger.info(f"{document.uri} v{document.version}: {error}")
        diagnostics = diagnostics_for(error, text, source=self.config.diagnostic_source)
        await self.publish_diagnostics(document, diagnostics)

    async def _reply_error(self, request: Request, error: LSPError) -> None:
        await self.transport.send(Response.from_error(request.id, error).to_dict())


def _is_full(change: Any) -> bool:
    # Ranged changes carry a range; full-text changes only carry text
    return getattr(change, "range", None) is None


async def serve(
    transport: Transport,
    validator: Validator,
    config: ServerConfig | None = None,
) -> int:
    """
    Run a full server lifecycle on a transport and return the exit code.

    0 after a shutdown request was answered; 1 when the connection dropped
    first, the handshake failed, or the transport failed.
    """
    config = config or ServerConfig()
    server = LanguageServer(transport, validator, config)
    outcome = LoopOutcome.DISCONNECTED

    logger.info(f"starting language server ({validator.name})")
    await transport.start()
    try:
        outcome = await server.run()
        if outcome is LoopOutcome.SHUTDOWN:
            if not await server.wait_for_exit(config.exit_timeout):
                logger.warning("no exit notification after shutdown")
    except HandshakeError as e:
        logger.error(f"initialization failed: {e}")
        return 1
    except TransportError as e:
        logger.error(f"transport failure: {e}")
        return 1
    finally:
        await transport.close()

    if transport.failure is not None:
        logger.error(f"transport failure: {transport.failure}")
        return 1

    logger.info("shutting down server")
    return 0 if outcome is LoopOutcome.SHUTDOWN else 1
