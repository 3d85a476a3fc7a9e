"""Exceptions raised inside the chunking engine.

Malformed source is an expected input, so none of these escape
``ChunkingService.chunk``: they are routing signals between the
structural path and the fallback splitter.
"""

from typing import Optional

from .constants import ErrorMessage


class ChunkingError(Exception):
    """Base class for chunking engine errors."""


class ParseUnavailableError(ChunkingError):
    """The grammar produced no usable syntax tree for the source."""

    def __init__(self, language: str, reason: str):
        self.language = language
        self.reason = reason
        super().__init__(ErrorMessage.PARSE_UNAVAILABLE.format(language=language, reason=reason))


class SymbolExtractionError(ChunkingError):
    """Extraction of one symbol field failed."""

    def __init__(self, field_name: str, node_kind: Optional[str] = None):
        self.field_name = field_name
        self.node_kind = node_kind
        message = f"Failed to extract {field_name}"
        if node_kind:
            message += f" for {node_kind}"
        super().__init__(message)


class UnsupportedLanguageError(ChunkingError):
    """No grammar is registered for the requested language."""

    def __init__(self, language: str):
        self.language = language
        super().__init__(ErrorMessage.UNSUPPORTED_LANGUAGE.format(language=language))
