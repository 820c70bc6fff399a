"""
Language Server Protocol core.

Implements JSON-RPC 2.0 message classification, the session state
machine and the message loop that drives a client session.
"""

from quill.lsp.protocol.messages import (
    Message,
    Request,
    Response,
    Notification,
    parse_message,
)
from quill.lsp.protocol.errors import (
    LSPError,
    InvalidMessage,
    HandshakeError,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
    INTERNAL_ERROR,
    SERVER_NOT_INITIALIZED,
)
from quill.lsp.protocol.state import (
    Session,
    SessionState,
    InvalidStateTransition,
)
from quill.lsp.protocol.dispatch import (
    Classified,
    MethodRegistry,
    MethodSpec,
    classify,
)
from quill.lsp.protocol.server import LanguageServer, LoopOutcome, serve

__all__ = [
    # Messages
    "Message",
    "Request",
    "Response",
    "Notification",
    "parse_message",
    # Errors
    "LSPError",
    "InvalidMessage",
    "HandshakeError",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "SERVER_NOT_INITIALIZED",
    # State
    "Session",
    "SessionState",
    "InvalidStateTransition",
    # Classification
    "Classified",
    "MethodRegistry",
    "MethodSpec",
    "classify",
    # Server
    "LanguageServer",
    "LoopOutcome",
    "serve",
]
