"""Python syntax validator backed by the ast module."""

import ast
import logging

from quill.lsp.validation.base import ValidatorError

logger = logging.getLogger(__name__)


class PythonValidator:
    """Reports the first syntax error ``ast.parse`` finds."""

    name = "python"

    def __init__(self, filename: str = "<document>"):
        self.filename = filename

    def validate(self, text: str) -> ValidatorError | None:
        try:
            ast.parse(text, filename=self.filename)
        except SyntaxError as e:
            # IndentationError and TabError are SyntaxError subclasses
            return ValidatorError(
                line=e.lineno or 1,
                column=e.offset or 1,
                description=f"{type(e).__name__}: {e.msg}",
            )
        except (ValueError, RecursionError, MemoryError) as e:
            # null bytes on older interpreters, or nesting too deep to parse
            logger.debug(f"parser rejected document without a position: {e!r}")
            return ValidatorError(line=1, column=1, description=f"{type(e).__name__}: {e}")
        return None
