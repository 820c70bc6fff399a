"""Validator interface and error type."""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class ValidatorError:
    """
    The primary problem a validator found in a document.

    ``line`` and ``column`` are 1-based, as most parsers report them.
    """

    line: int
    column: int
    description: str

    @property
    def position(self) -> tuple[int, int]:
        return (self.line, self.column)

    def __str__(self) -> str:
        return f"{self.line}:{self.column}: {self.description}"


@runtime_checkable
class Validator(Protocol):
    """
    Checks whether document text is well-formed.

    ``validate`` is synchronous and may block; it returns None when the
    text is accepted and the first error otherwise.
    """

    name: str

    def validate(self, text: str) -> ValidatorError | None: ...
