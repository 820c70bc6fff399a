"""
Text document features: diagnostics translation.
"""

from quill.lsp.features.diagnostics import FALLBACK_SPAN, diagnostics_for, translate

__all__ = [
    "FALLBACK_SPAN",
    "diagnostics_for",
    "translate",
]
