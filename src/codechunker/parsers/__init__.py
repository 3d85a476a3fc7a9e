"""Syntax-aware parsing: grammar registry, structural splitter and symbol extractors."""

from .base import BaseSymbolExtractor
from .cpp_extractor import CppSymbolExtractor
from .grammars import (
    GRAMMARS,
    GrammarSpec,
    ResolvedGrammar,
    get_language_for_file,
    is_language_supported,
    list_grammars,
    normalize_language,
    resolve,
    supports_symbols,
)
from .splitter import SplitResult, StructuralSplitter, fill_gaps
from .syntax import SyntaxNode, SyntaxTree

__all__ = [
    "BaseSymbolExtractor",
    "CppSymbolExtractor",
    "GRAMMARS",
    "GrammarSpec",
    "ResolvedGrammar",
    "SplitResult",
    "StructuralSplitter",
    "SyntaxNode",
    "SyntaxTree",
    "fill_gaps",
    "get_language_for_file",
    "is_language_supported",
    "list_grammars",
    "normalize_language",
    "resolve",
    "supports_symbols",
]
