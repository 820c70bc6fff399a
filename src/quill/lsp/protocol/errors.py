"""Protocol error types and error codes."""

from dataclasses import dataclass
from typing import Any

# JSON-RPC 2.0 error codes the server answers with
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# LSP-specific codes
SERVER_NOT_INITIALIZED = -32002

# Error code to message mapping
ERROR_MESSAGES = {
    INVALID_REQUEST: "Invalid Request",
    METHOD_NOT_FOUND: "Method not found",
    INVALID_PARAMS: "Invalid params",
    INTERNAL_ERROR: "Internal error",
    SERVER_NOT_INITIALIZED: "Server not initialized",
}


@dataclass
class LSPError(Exception):
    """
    Language server protocol error.

    Represents errors from the JSON-RPC layer or the LSP lifecycle.
    Can be converted to/from JSON-RPC error objects.
    """

    code: int
    message: str
    data: dict[str, Any] | None = None

    def __post_init__(self):
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-RPC error object."""
        error = {
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            error["data"] = self.data
        return error

    @classmethod
    def from_dict(cls, error: dict[str, Any]) -> "LSPError":
        """Create from JSON-RPC error object."""
        return cls(
            code=error.get("code", INTERNAL_ERROR),
            message=error.get("message", ERROR_MESSAGES[INTERNAL_ERROR]),
            data=error.get("data"),
        )

    @classmethod
    def invalid_request(cls, details: str | None = None) -> "LSPError":
        """Create an invalid request error."""
        return cls(
            code=INVALID_REQUEST,
            message=ERROR_MESSAGES[INVALID_REQUEST],
            data={"details": details} if details else None,
        )

    @classmethod
    def method_not_found(cls, method: str) -> "LSPError":
        """Create a method not found error."""
        return cls(
            code=METHOD_NOT_FOUND,
            message=f"Method not found: {method}",
            data={"method": method},
        )

    @classmethod
    def invalid_params(cls, details: str | None = None) -> "LSPError":
        """Create an invalid params error."""
        return cls(
            code=INVALID_PARAMS,
            message=ERROR_MESSAGES[INVALID_PARAMS],
            data={"details": details} if details else None,
        )

    @classmethod
    def internal_error(cls, details: str | None = None) -> "LSPError":
        """Create an internal error."""
        return cls(
            code=INTERNAL_ERROR,
            message=details or ERROR_MESSAGES[INTERNAL_ERROR],
        )

    @classmethod
    def server_not_initialized(cls, method: str) -> "LSPError":
        """Create the error returned for requests received before initialize."""
        return cls(
            code=SERVER_NOT_INITIALIZED,
            message=f"Server not initialized, cannot handle {method}",
            data={"method": method},
        )

    def __str__(self) -> str:
        base = f"LSPError({self.code}): {self.message}"
        if self.data:
            base += f" {self.data}"
        return base

    def __repr__(self) -> str:
        return f"LSPError(code={self.code}, message={self.message!r}, data={self.data})"


class InvalidMessage(LSPError):
    """Raw message does not have the shape of any JSON-RPC message."""

    def __init__(self, details: str, raw: Any = None):
        super().__init__(
            code=INVALID_REQUEST,
            message=f"Invalid message: {details}",
            data={"details": details},
        )
        self.raw = raw


class HandshakeError(Exception):
    """The initialize handshake could not be completed."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause
