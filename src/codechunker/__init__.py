"""
CodeChunker - Syntax-Aware Code Chunking for Code Retrieval.

This package turns source files into stable, size-bounded, overlap-aware
chunks whose boundaries follow the language's syntax (functions, classes,
namespaces), ready for embedding and indexing by a retrieval pipeline.

Key Features:
    - **Multi-Grammar Dispatch**: tree-sitter grammars for JavaScript,
      TypeScript, Python, Java, C/C++, Go, Rust, C#, Scala and Perl
    - **Atomic Boundaries**: one chunk per outermost function/class/namespace
    - **Size Budget and Overlap**: oversized chunks re-split on whole lines,
      trailing context carried into the next chunk
    - **Symbol Metadata**: definitions, usages, documentation, signatures,
      scopes and base classes for C and C++
    - **Never Fails on Source**: unknown languages and broken code fall back
      to text splitting

Quick Start:
    from codechunker import ChunkingService

    service = ChunkingService()
    for chunk in service.chunk(source, "cpp", file_path="src/math.cpp"):
        print(chunk.start_line, chunk.end_line, chunk.node_kind)

Architecture:
    - parsers/: grammar registry, syntax arena, structural splitter, symbol extractors
    - services/: chunking entry point, chunk refiner, fallback splitter
    - models/: SourceUnit, CodeChunk and SymbolInfo
    - config.py: size budget, overlap and worker settings
    - cli.py: developer CLI (chunk, languages, benchmark)

Author: CodeChunker Team
"""

__version__ = "1.0.0"
__author__ = "CodeChunker Team"
__description__ = "Syntax-aware code chunking and symbol extraction for code retrieval"

# Public API
from codechunker.config import ChunkingConfig, Config, get_config, set_config
from codechunker.constants import (
    APPLICATION_NAME,
    APPLICATION_VERSION,
    DEFAULT_MAX_CHUNK_SIZE,
    DEFAULT_OVERLAP_SIZE,
    SupportedLanguage,
)
from codechunker.exceptions import (
    ChunkingError,
    ParseUnavailableError,
    SymbolExtractionError,
    UnsupportedLanguageError,
)
from codechunker.logging import (
    get_logger,
    setup_logging,
)
from codechunker.models import CodeChunk, SourceUnit, SymbolInfo, SymbolKind, SymbolScope
from codechunker.services import ChunkingService, chunk_source

__all__ = [
    # Metadata
    "__version__",
    "__author__",
    "__description__",

    # Constants
    "APPLICATION_NAME",
    "APPLICATION_VERSION",
    "DEFAULT_MAX_CHUNK_SIZE",
    "DEFAULT_OVERLAP_SIZE",
    "SupportedLanguage",

    # Configuration
    "ChunkingConfig",
    "Config",
    "get_config",
    "set_config",

    # Errors
    "ChunkingError",
    "ParseUnavailableError",
    "SymbolExtractionError",
    "UnsupportedLanguageError",

    # Models
    "CodeChunk",
    "SourceUnit",
    "SymbolInfo",
    "SymbolKind",
    "SymbolScope",

    # Chunking
    "ChunkingService",
    "chunk_source",

    # Logging
    "get_logger",
    "setup_logging",
]
