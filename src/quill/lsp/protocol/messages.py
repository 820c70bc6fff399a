"""JSON-RPC 2.0 message types for the language server protocol."""

from dataclasses import dataclass, field
from typing import Any

from quill.lsp.protocol.errors import InvalidMessage, LSPError

RequestId = str | int


@dataclass
class Request:
    """
    JSON-RPC 2.0 request message.

    Requests expect a response from the recipient.
    """

    id: RequestId
    method: str
    params: Any = None
    jsonrpc: str = field(default="2.0", init=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        msg: dict[str, Any] = {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
            "method": self.method,
        }
        if self.params is not None:
            msg["params"] = self.params
        return msg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Request":
        """Create from JSON dict."""
        return cls(
            id=data["id"],
            method=data["method"],
            params=data.get("params"),
        )

    def __str__(self) -> str:
        return f"Request({self.method}, id={self.id})"


@dataclass
class Response:
    """
    JSON-RPC 2.0 response message.

    Either result or error is present, never both. A successful response
    always serializes its result, even when it is None.
    """

    id: RequestId | None
    result: Any = None
    error: LSPError | None = None
    jsonrpc: str = field(default="2.0", init=False)

    @property
    def is_error(self) -> bool:
        """Check if this is an error response."""
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        msg: dict[str, Any] = {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
        }
        if self.error is not None:
            msg["error"] = self.error.to_dict()
        else:
            msg["result"] = self.result
        return msg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Response":
        """Create from JSON dict."""
        error = None
        if data.get("error") is not None:
            error = LSPError.from_dict(data["error"])
        return cls(
            id=data.get("id"),
            result=data.get("result"),
            error=error,
        )

    @classmethod
    def success(cls, id: RequestId | None, result: Any = None) -> "Response":
        """Create a success response."""
        return cls(id=id, result=result)

    @classmethod
    def from_error(cls, id: RequestId | None, error: LSPError) -> "Response":
        """Create an error response."""
        return cls(id=id, error=error)

    def __str__(self) -> str:
        if self.is_error:
            return f"Response(id={self.id}, error={self.error.code})"
        return f"Response(id={self.id}, success)"


@dataclass
class Notification:
    """
    JSON-RPC 2.0 notification message.

    Notifications do not expect a response (no id field).
    """

    method: str
    params: Any = None
    jsonrpc: str = field(default="2.0", init=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        msg: dict[str, Any] = {
            "jsonrpc": self.jsonrpc,
            "method": self.method,
        }
        if self.params is not None:
            msg["params"] = self.params
        return msg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Notification":
        """Create from JSON dict."""
        return cls(
            method=data["method"],
            params=data.get("params"),
        )

    def __str__(self) -> str:
        return f"Notification({self.method})"


Message = Request | Response | Notification


def parse_message(data: Any) -> Message:
    """
    Tag a raw JSON value as a request, response or notification.

    An id without a result/error field makes a request, an id with one of
    them makes a response, and no id at all makes a notification.

    Raises:
        InvalidMessage: If the value has none of these shapes.
    """
    if not isinstance(data, dict):
        raise InvalidMessage("message is not a JSON object", raw=data)

    has_id = "id" in data
    has_method = isinstance(data.get("method"), str)
    has_result = "result" in data or "error" in data

    if has_id and has_result:
        if data["id"] is not None and not isinstance(data["id"], (str, int)):
            raise InvalidMessage("response id must be a string or integer", raw=data)
        if data.get("error") is not None and not isinstance(data["error"], dict):
            raise InvalidMessage("response error must be an object", raw=data)
        return Response.from_dict(data)
    if has_id:
        if not has_method:
            raise InvalidMessage("request without a method", raw=data)
        if isinstance(data["id"], bool) or not isinstance(data["id"], (str, int)):
            raise InvalidMessage("request id must be a string or integer", raw=data)
        return Request.from_dict(data)
    if has_method:
        return Notification.from_dict(data)
    raise InvalidMessage("cannot determine message type", raw=data)
