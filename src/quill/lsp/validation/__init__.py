"""
Document validators.

A validator turns document text into either nothing (accepted) or one
ValidatorError. Validators are looked up by language name.
"""

from typing import Callable

from quill.lsp.validation.base import Validator, ValidatorError
from quill.lsp.validation.json import JSONValidator
from quill.lsp.validation.python import PythonValidator

VALIDATORS: dict[str, Callable[[], Validator]] = {
    PythonValidator.name: PythonValidator,
    JSONValidator.name: JSONValidator,
}


def get_validator(name: str) -> Validator:
    """
    Create the validator registered for a language.

    Raises:
        ValueError: If no validator is registered under that name.
    """
    factory = VALIDATORS.get(name.lower())
    if factory is None:
        known = ", ".join(sorted(VALIDATORS))
        raise ValueError(f"Unknown language: {name} (expected one of: {known})")
    return factory()


__all__ = [
    "Validator",
    "ValidatorError",
    "PythonValidator",
    "JSONValidator",
    "VALIDATORS",
    "get_validator",
]
