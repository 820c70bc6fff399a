"""Method registry and message classification."""

from dataclasses import dataclass
from typing import Any, Callable

from cattrs import transform_error
from cattrs.errors import BaseValidationError
from lsprotocol import types
from pygls.protocol import default_converter

from quill.lsp.protocol.messages import Message, Notification, Request, Response, parse_message

# Method names
INITIALIZE = types.INITIALIZE
INITIALIZED = types.INITIALIZED
SHUTDOWN = types.SHUTDOWN
EXIT = types.EXIT
DID_OPEN = types.TEXT_DOCUMENT_DID_OPEN
DID_CHANGE = types.TEXT_DOCUMENT_DID_CHANGE
PUBLISH_DIAGNOSTICS = types.TEXT_DOCUMENT_PUBLISH_DIAGNOSTICS

# Structures params into lsprotocol types and unstructures results back to
# camelCase dicts
converter = default_converter()

ParamsDecoder = Callable[[Any], Any]


def _no_params(params: Any) -> None:
    if params not in (None, {}, []):
        raise TypeError(f"expected no params, got {type(params).__name__}")
    return None


def _structure(cls: type) -> ParamsDecoder:
    def decode(params: Any) -> Any:
        return converter.structure(params, cls)

    return decode


@dataclass(frozen=True)
class MethodSpec:
    """A method this server understands and how to decode its params."""

    method: str
    decoder: ParamsDecoder
    is_request: bool


DEFAULT_METHODS: dict[str, MethodSpec] = {
    spec.method: spec
    for spec in (
        MethodSpec(INITIALIZE, _structure(types.InitializeParams), is_request=True),
        MethodSpec(SHUTDOWN, _no_params, is_request=True),
        MethodSpec(INITIALIZED, _no_params, is_request=False),
        MethodSpec(EXIT, _no_params, is_request=False),
        MethodSpec(DID_OPEN, _structure(types.DidOpenTextDocumentParams), is_request=False),
        MethodSpec(DID_CHANGE, _structure(types.DidChangeTextDocumentParams), is_request=False),
    )
}


@dataclass(frozen=True)
class Classified:
    """
    A message tagged with its kind and, if recognized, its decoded params.

    ``recognized`` is False for responses, unknown methods and params that
    failed to decode; ``decode_error`` explains the last case.
    """

    message: Message
    params: Any = None
    recognized: bool = False
    decode_error: str | None = None

    @property
    def method(self) -> str | None:
        if isinstance(self.message, Response):
            return None
        return self.message.method

    @property
    def is_request(self) -> bool:
        return isinstance(self.message, Request)

    @property
    def is_response(self) -> bool:
        return isinstance(self.message, Response)

    @property
    def is_notification(self) -> bool:
        return isinstance(self.message, Notification)


class MethodRegistry:
    """
    Lookup table from method name to MethodSpec.

    Classification is pure: it never touches session state and never
    raises for a recognized shape with bad params.
    """

    def __init__(self, methods: dict[str, MethodSpec] | None = None):
        self._methods = dict(DEFAULT_METHODS if methods is None else methods)

    def classify(self, raw: Any) -> Classified:
        """
        Tag a raw message and decode its params.

        Raises:
            InvalidMessage: If the raw value is not a JSON-RPC message at all.
        """
        message = parse_message(raw)
        if isinstance(message, Response):
            return Classified(message=message)

        spec = self._methods.get(message.method)
        if spec is None or spec.is_request != isinstance(message, Request):
            return Classified(message=message)

        try:
            params = spec.decoder(message.params)
        except BaseValidationError as e:
            return Classified(message=message, decode_error="; ".join(transform_error(e)))
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            return Classified(message=message, decode_error=str(e))
        return Classified(message=message, params=params, recognized=True)


def classify(raw: Any) -> Classified:
    """Classify against the default method table."""
    return _DEFAULT_REGISTRY.classify(raw)


_DEFAULT_REGISTRY = MethodRegistry()
