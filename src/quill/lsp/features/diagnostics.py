"""Translation of validator errors into protocol diagnostics."""

import re

from lsprotocol.types import Diagnostic, DiagnosticSeverity, Position, Range

from quill.lsp.validation.base import ValidatorError

# Validators only report where an error starts. When no token can be found
# at that position the end is placed this many characters further along.
FALLBACK_SPAN = 100

_TOKEN = re.compile(r"\w+|[^\w\s]")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def translate(
    err: ValidatorError,
    text: str | None = None,
    source: str | None = None,
) -> Diagnostic:
    """
    Convert a 1-based validator error into a 0-based Error diagnostic.

    The start of the range is exactly the reported position. Validators
    count columns in code points while clients count UTF-16 code units, so
    when ``text`` is given the column is converted. The end is an
    approximation: the length of the token found at the start when
    ``text`` is given, otherwise a fixed span.
    """
    line = max(err.line - 1, 0)
    column = max(err.column - 1, 0)

    line_text = _line_at(text, line) if text is not None else None
    if line_text is None:
        character, span = column, None
    else:
        character = _utf16_len(line_text[:column]) + max(column - len(line_text), 0)
        span = _token_length(line_text, column)

    start = Position(line=line, character=character)
    end = Position(line=line, character=character + (span or FALLBACK_SPAN))

    return Diagnostic(
        range=Range(start=start, end=end),
        message=err.description,
        severity=DiagnosticSeverity.Error,
        source=source,
    )


def diagnostics_for(
    err: ValidatorError | None,
    text: str | None = None,
    source: str | None = None,
) -> list[Diagnostic]:
    """Build the diagnostics batch for one validation: empty on success."""
    if err is None:
        return []
    return [translate(err, text, source)]


def _line_at(text: str, line: int) -> str | None:
    lines = _LINE_BREAK.split(text)
    if line >= len(lines):
        return None
    return lines[line]


def _token_length(line_text: str, column: int) -> int | None:
    match = _TOKEN.match(line_text, column)
    if match is None:
        return None
    return _utf16_len(match.group())


def _utf16_len(s: str) -> int:
    # Characters outside the BMP take two UTF-16 code units
    return len(s) + sum(1 for ch in s if ord(ch) > 0xFFFF)
