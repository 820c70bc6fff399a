"""quill: a language server that validates documents as they are edited."""

__version__ = "0.1.0"
