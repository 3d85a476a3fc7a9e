"""
Constants and Configuration Values for CodeChunker.

This module centralizes the magic strings and numbers used by the chunking
engine: default size budgets, the closed set of supported languages, the
file-extension table and standardized error messages.

Usage:
    from codechunker.constants import (
        DEFAULT_MAX_CHUNK_SIZE,
        SupportedLanguage,
    )

Naming Conventions:
    - ALL_CAPS for constants
    - Grouped by category with clear section headers

Author: CodeChunker Team
"""

from enum import Enum
from pathlib import Path


# ============================================================================
# Application Metadata
# ============================================================================

APPLICATION_NAME = "CodeChunker"
APPLICATION_VERSION = "1.0.0"


# ============================================================================
# File System Paths
# ============================================================================

DEFAULT_DATA_DIRECTORY = Path.home() / ".codechunker"
DEFAULT_LOG_DIRECTORY = DEFAULT_DATA_DIRECTORY / "logs"


# ============================================================================
# Chunk Size Budgets
# ============================================================================

# Maximum characters per chunk before the refiner re-splits it
DEFAULT_MAX_CHUNK_SIZE = 2500

# Trailing characters of the previous chunk copied into the next one
DEFAULT_OVERLAP_SIZE = 300


# ============================================================================
# Symbol Extraction
# ============================================================================

# How many lines above a definition are scanned for a doc comment
DOC_COMMENT_LOOKBACK_LINES = 5

# Parameter name used when a parameter declaration has no identifier
UNNAMED_PARAMETER = "unnamed"


# ============================================================================
# Supported Languages
# ============================================================================

class SupportedLanguage(str, Enum):
    """
    Languages with a registered tree-sitter grammar.

    Each language requires:
    1. A tree-sitter grammar wheel (tree-sitter-<name>)
    2. A GrammarSpec entry in parsers/grammars.py

    Anything outside this set is chunked by the fallback splitter.
    """

    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    TSX = "tsx"
    PYTHON = "python"
    JAVA = "java"
    CPP = "cpp"
    GO = "go"
    RUST = "rust"
    CSHARP = "csharp"
    SCALA = "scala"
    PERL = "perl"


# File extensions mapped to language identifiers
FILE_EXTENSION_TO_LANGUAGE = {
    ".js": SupportedLanguage.JAVASCRIPT.value,
    ".jsx": SupportedLanguage.JAVASCRIPT.value,
    ".mjs": SupportedLanguage.JAVASCRIPT.value,
    ".cjs": SupportedLanguage.JAVASCRIPT.value,
    ".ts": SupportedLanguage.TYPESCRIPT.value,
    ".mts": SupportedLanguage.TYPESCRIPT.value,
    ".tsx": SupportedLanguage.TSX.value,
    ".py": SupportedLanguage.PYTHON.value,
    ".java": SupportedLanguage.JAVA.value,
    ".c": SupportedLanguage.CPP.value,
    ".h": SupportedLanguage.CPP.value,
    ".cc": SupportedLanguage.CPP.value,
    ".cpp": SupportedLanguage.CPP.value,
    ".cxx": SupportedLanguage.CPP.value,
    ".c++": SupportedLanguage.CPP.value,
    ".hh": SupportedLanguage.CPP.value,
    ".hpp": SupportedLanguage.CPP.value,
    ".hxx": SupportedLanguage.CPP.value,
    ".go": SupportedLanguage.GO.value,
    ".rs": SupportedLanguage.RUST.value,
    ".cs": SupportedLanguage.CSHARP.value,
    ".scala": SupportedLanguage.SCALA.value,
    ".sc": SupportedLanguage.SCALA.value,
    ".pl": SupportedLanguage.PERL.value,
    ".pm": SupportedLanguage.PERL.value,
    ".thpl": SupportedLanguage.PERL.value,
}


# ============================================================================
# Performance Tuning
# ============================================================================

# Default worker threads for chunking many files at once
MAX_CONCURRENT_FILE_OPERATIONS = 4


# ============================================================================
# Error Messages
# ============================================================================

class ErrorMessage:
    """
    Standardized error messages for consistent user experience.

    Using a class instead of a dict provides:
    - IDE autocomplete
    - Easy documentation
    """

    INVALID_MAX_CHUNK_SIZE = "max_chunk_size must be at least 1, got {value}"
    INVALID_OVERLAP_SIZE = "overlap_size must be non-negative, got {value}"
    PARSE_UNAVAILABLE = "No usable syntax tree for {language} source: {reason}"
    UNSUPPORTED_LANGUAGE = "No grammar registered for language: {language}"
    GRAMMAR_NOT_INSTALLED = (
        "{module} is required for {language} parsing. "
        "Install with: pip install {package}"
    )
