"""
Language Server Protocol implementation for quill.

Submodules:
- transport: Content-Length framed stdio transport (pygls) and in-memory transport
- protocol: JSON-RPC 2.0 messages, session state machine, main loop
- capabilities: initialize handshake payloads
- features: diagnostics translation
- validation: pluggable document validators
"""

# Transport layer
from quill.lsp.transport import (
    Transport,
    TransportConfig,
    TransportError,
    StreamTransport,
    MemoryTransport,
)

# Protocol layer
from quill.lsp.protocol import (
    LanguageServer,
    LoopOutcome,
    LSPError,
    Session,
    SessionState,
    serve,
)

# Capabilities
from quill.lsp.capabilities import initialize_result, server_capabilities

# Validation
from quill.lsp.validation import Validator, ValidatorError, get_validator

from quill.lsp.config import ServerConfig, load_server_config

__all__ = [
    # Transport
    "Transport",
    "TransportConfig",
    "TransportError",
    "StreamTransport",
    "MemoryTransport",
    # Protocol
    "LanguageServer",
    "LoopOutcome",
    "LSPError",
    "Session",
    "SessionState",
    "serve",
    # Capabilities
    "initialize_result",
    "server_capabilities",
    # Validation
    "Validator",
    "ValidatorError",
    "get_validator",
    # Config
    "ServerConfig",
    "load_server_config",
]
