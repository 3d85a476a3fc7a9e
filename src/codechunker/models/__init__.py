"""
Data models for CodeChunker.

Provides the core data structures used throughout the engine:

- **SourceUnit**: Immutable chunking input (text, language, optional path).
- **RawChunk**: Splitter output tied to a syntax node, before refinement.
- **CodeChunk**: A refined chunk with its line range and symbols.
- **SymbolInfo**: A named, kinded, ranged declaration with usages,
  documentation and signature metadata.
- **SymbolKind** / **SymbolScope**: Symbol kind and member access enums.
"""

from .chunk import (
    CodeChunk,
    RawChunk,
    SourcePosition,
    SourceUnit,
    SymbolInfo,
    SymbolKind,
    SymbolParameter,
    SymbolRange,
    SymbolScope,
    count_lines,
)

__all__ = [
    "CodeChunk",
    "RawChunk",
    "SourcePosition",
    "SourceUnit",
    "SymbolInfo",
    "SymbolKind",
    "SymbolParameter",
    "SymbolRange",
    "SymbolScope",
    "count_lines",
]
