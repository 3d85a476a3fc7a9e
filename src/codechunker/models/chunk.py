"""
Code Chunk Model - The Unit Handed to the Indexing Pipeline.

This module defines the data models produced by the chunking engine:

1. **SourceUnit**: The immutable input (text, language, optional path)

2. **RawChunk**: A chunk straight out of the structural splitter
   - Still tied to one syntax-tree node by arena index
   - Never leaves the chunking call

3. **CodeChunk**: A final, refined chunk
   - Content plus its 1-indexed line range
   - Optional symbol metadata for languages with an extractor

4. **SymbolInfo**: A named, kinded, ranged declaration found in a chunk
   - Usage sites, documentation, signature, scope, parent, base classes

Data Flow:
    SourceUnit → StructuralSplitter → RawChunks → SymbolExtractor
                        ↓ (miss / parse failure)         ↓
                 FallbackSplitter  ───────────→  ChunkRefiner → CodeChunks

Example:
    # A parsed C++ function becomes a CodeChunk:
    chunk = CodeChunk(
        content="int add(int a, int b) { return a + b; }",
        start_line=1,
        end_line=1,
        language="cpp",
        file_path="math.cpp",
        node_kind="function_definition",
        symbols=[add_symbol],
    )

Author: CodeChunker Team
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


def count_lines(text: str) -> int:
    """Number of lines in ``text``; a trailing newline does not open a new line.

    Empty text still counts as one (empty) line.
    """
    if not text:
        return 1
    lines = text.count("\n") + 1
    if text.endswith("\n"):
        lines -= 1
    return max(lines, 1)


@dataclass(frozen=True)
class SourceUnit:
    """
    Immutable chunking input.

    Attributes:
        text: Full source text of the file
        language: Language identifier or alias as given by the caller
        file_path: Optional path, copied onto every chunk
    """

    text: str
    language: str
    file_path: Optional[str] = None

    @property
    def line_count(self) -> int:
        return count_lines(self.text)

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n")


@dataclass
class RawChunk:
    """
    A chunk emitted by the structural splitter, before refinement.

    Attributes:
        content: Source text of the node (or of an uncovered line run)
        start_line: 1-indexed first line
        end_line: 1-indexed last line
        node_kind: Boundary node kind, None for gap chunks
        node_index: Arena index of the node in the SyntaxTree, None for gap chunks
        symbols: Symbols extracted from the node's subtree
    """

    content: str
    start_line: int
    end_line: int
    node_kind: Optional[str] = None
    node_index: Optional[int] = None
    symbols: list["SymbolInfo"] = field(default_factory=list)


class SymbolKind(str, Enum):
    """
    Kinds of symbols the extractors report.

    Values follow the LSP SymbolKind vocabulary, lower-cased.
    """

    FUNCTION = "function"
    METHOD = "method"
    CONSTRUCTOR = "constructor"
    CLASS = "class"
    STRUCT = "struct"
    UNION = "union"
    ENUM = "enum"
    NAMESPACE = "namespace"
    FIELD = "field"


class SymbolScope(str, Enum):
    """Access level of a class or struct member."""

    PUBLIC = "public"
    PRIVATE = "private"
    PROTECTED = "protected"


class SourcePosition(BaseModel):
    """A 1-indexed line and 0-indexed (byte) column."""

    line: int = Field(ge=1, description="1-indexed line number")
    column: int = Field(ge=0, description="0-indexed byte column")


class SymbolRange(BaseModel):
    """Line/column span of a symbol's defining node."""

    start_line: int = Field(ge=1)
    end_line: int = Field(ge=1)
    start_column: int = Field(default=0, ge=0)
    end_column: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> "SymbolRange":
        if self.end_line < self.start_line:
            raise ValueError(
                f"end_line ({self.end_line}) precedes start_line ({self.start_line})"
            )
        return self


class SymbolParameter(BaseModel):
    """One (name, type) pair from a function's parameter list."""

    name: str
    type: Optional[str] = None


class SymbolInfo(BaseModel):
    """
    A declaration found in one chunk's syntax tree.

    Symbols are never merged across chunks: two chunks mentioning the same
    name each carry their own SymbolInfo.

    Attributes:
        name: Simple (unqualified) name
        kind: Symbol kind
        range: Span of the defining node
        definition: Position where the definition starts
        usages: Positions of identifier references with the same name
        documentation: Comment text found directly above the definition
        signature: Declaration text up to the body (functions only)
        return_type: Declared return type (functions only)
        parameters: Ordered (name, type) pairs (functions only)
        parent_symbol: Name of the enclosing class, struct or namespace
        scope: Access level (class/struct members only)
        is_static: Declared static
        is_virtual: Declared virtual
        is_const: const-qualified
        base_classes: Base classes in declaration order (classes/structs only)
    """

    name: str
    kind: SymbolKind
    range: SymbolRange
    definition: Optional[SourcePosition] = None
    usages: list[SourcePosition] = Field(default_factory=list)
    documentation: Optional[str] = None

    # LSP-like metadata
    signature: Optional[str] = None
    return_type: Optional[str] = None
    parameters: list[SymbolParameter] = Field(default_factory=list)
    parent_symbol: Optional[str] = None
    scope: Optional[SymbolScope] = None
    is_static: Optional[bool] = None
    is_virtual: Optional[bool] = None
    is_const: Optional[bool] = None
    base_classes: list[str] = Field(default_factory=list)

    def get_qualified_name(self) -> str:
        """Get qualified name (e.g., Calculator::getValue)."""
        if self.parent_symbol:
            return f"{self.parent_symbol}::{self.name}"
        return self.name


class CodeChunk(BaseModel):
    """
    A refined chunk of source code, ready for embedding and indexing.

    Invariants:
        - ``1 <= start_line <= end_line``
        - every symbol's range lies within ``[start_line, end_line]``

    Attributes:
        content: Chunk text (possibly prefixed with overlap from the previous chunk)
        start_line: 1-indexed first line
        end_line: 1-indexed last line
        language: Language identifier the chunk was produced for
        file_path: Path of the source file, if known
        node_kind: Syntax node kind that produced the chunk, None for text chunks
        symbols: Symbols defined inside the chunk
    """

    content: str = Field(description="Chunk text")
    start_line: int = Field(ge=1, description="1-indexed line where the chunk starts")
    end_line: int = Field(ge=1, description="1-indexed line where the chunk ends")
    language: str = Field(description="Language identifier")
    file_path: Optional[str] = Field(default=None, description="Source file path")
    node_kind: Optional[str] = Field(
        default=None,
        description="Boundary node kind (e.g. function_definition), None for text chunks",
    )
    symbols: list[SymbolInfo] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_ranges(self) -> "CodeChunk":
        if self.end_line < self.start_line:
            raise ValueError(
                f"end_line ({self.end_line}) precedes start_line ({self.start_line})"
            )
        for symbol in self.symbols:
            if not self.contains_range(symbol.range):
                raise ValueError(
                    f"Symbol {symbol.name!r} at lines "
                    f"{symbol.range.start_line}-{symbol.range.end_line} lies outside "
                    f"chunk lines {self.start_line}-{self.end_line}"
                )
        return self

    @property
    def has_symbols(self) -> bool:
        return bool(self.symbols)

    @property
    def line_span(self) -> int:
        """Number of source lines the chunk covers."""
        return self.end_line - self.start_line + 1

    def contains_range(self, symbol_range: SymbolRange) -> bool:
        """Whether a symbol range lies inside this chunk's line range."""
        return (
            self.start_line <= symbol_range.start_line
            and symbol_range.end_line <= self.end_line
        )

    def get_symbol(self, name: str) -> Optional[SymbolInfo]:
        """First symbol with the given name, if any."""
        return next((s for s in self.symbols if s.name == name), None)
