"""
Capability declarations exchanged during the initialize handshake.
"""

from quill.lsp.capabilities.server import SERVER_NAME, initialize_result, server_capabilities

__all__ = [
    "SERVER_NAME",
    "initialize_result",
    "server_capabilities",
]
