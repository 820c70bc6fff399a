"""JSON validator backed by orjson."""

from quill.lib import oj
from quill.lsp.validation.base import ValidatorError


class JSONValidator:
    """Reports the first decode error orjson raises."""

    name = "json"

    def validate(self, text: str) -> ValidatorError | None:
        try:
            oj.loads(text)
        except oj.JSONDecodeError as e:
            return ValidatorError(
                line=e.lineno or 1,
                column=e.colno or 1,
                description=f"JSONDecodeError: {e.msg}",
            )
        return None
