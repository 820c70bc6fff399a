"""Server capability declarations sent in the initialize result."""

from lsprotocol import types

from quill import __version__

SERVER_NAME = "quill"


def server_capabilities() -> types.ServerCapabilities:
    """
    Features this server supports.

    Only full document synchronization is declared: every change carries
    the complete text. Navigation features are not provided.
    """
    return types.ServerCapabilities(text_document_sync=types.TextDocumentSyncKind.Full)


def initialize_result(capabilities: types.ServerCapabilities) -> types.InitializeResult:
    """Build the result of the initialize request."""
    return types.InitializeResult(
        capabilities=capabilities,
        server_info=types.InitializeResultServerInfoType(name=SERVER_NAME, version=__version__),
    )
