"""
Grammar Registry.

Maps a language identifier (or one of its aliases) to a tree-sitter grammar
and the set of syntax-node kinds that become chunk boundaries for it.

The registry is a closed table: one ``GrammarSpec`` per ``SupportedLanguage``.
Adding a language means adding an enum member and one entry here. Grammars
are imported lazily on first use and cached for the life of the process;
``tree_sitter.Language`` objects are immutable, so the cache is shared by all
threads without locking. Parsers are *not* cached: every chunking call builds
its own with ``ResolvedGrammar.create_parser()``.

Lookup never raises. An unknown identifier, or a grammar wheel that is not
installed, resolves to ``None`` and the caller routes to the fallback splitter.

Example:
    grammar = resolve("c++")
    if grammar is None:
        ...  # fallback splitter
    parser = grammar.create_parser()
"""

import importlib
from dataclasses import dataclass
from functools import lru_cache
from pathlib import PurePath
from typing import Any, Optional

from ..constants import FILE_EXTENSION_TO_LANGUAGE, ErrorMessage, SupportedLanguage
from ..logging import get_logger
from .base import BaseSymbolExtractor
from .cpp_extractor import CppSymbolExtractor


logger = get_logger(__name__)


@dataclass(frozen=True)
class GrammarSpec:
    """
    Static description of one supported language.

    Attributes:
        language: The language this entry describes
        module: Import name of the grammar wheel (e.g. tree_sitter_cpp)
        package: Distribution name of the grammar wheel (for error messages)
        boundary_kinds: Node kinds emitted as chunks
        aliases: Extra identifiers that resolve to this language
        loader: Function in ``module`` returning the grammar pointer
        extractor: Symbol extractor class, if the language has one
    """

    language: SupportedLanguage
    module: str
    package: str
    boundary_kinds: frozenset[str]
    aliases: tuple[str, ...] = ()
    loader: str = "language"
    extractor: Optional[type[BaseSymbolExtractor]] = None

    @property
    def identifiers(self) -> tuple[str, ...]:
        return (self.language.value, *self.aliases)


@dataclass(frozen=True)
class ResolvedGrammar:
    """A grammar spec paired with its loaded ``tree_sitter.Language``."""

    spec: GrammarSpec
    language: Any

    @property
    def name(self) -> str:
        return self.spec.language.value

    @property
    def boundary_kinds(self) -> frozenset[str]:
        return self.spec.boundary_kinds

    @property
    def has_symbol_extractor(self) -> bool:
        return self.spec.extractor is not None

    def create_parser(self):
        """Build a new parser bound to this grammar.

        Parsers are stateful; callers own the returned instance and must
        not share it between threads.
        """
        from tree_sitter import Parser

        return Parser(self.language)

    def create_extractor(self) -> Optional[BaseSymbolExtractor]:
        if self.spec.extractor is None:
            return None
        return self.spec.extractor()


# ============================================================================
# Grammar Table
# ============================================================================

_JAVASCRIPT_BOUNDARIES = frozenset({
    "function_declaration",
    "arrow_function",
    "class_declaration",
    "method_definition",
    "export_statement",
})

_TYPESCRIPT_BOUNDARIES = _JAVASCRIPT_BOUNDARIES | {
    "interface_declaration",
    "type_alias_declaration",
}

GRAMMARS: dict[SupportedLanguage, GrammarSpec] = {
    SupportedLanguage.JAVASCRIPT: GrammarSpec(
        language=SupportedLanguage.JAVASCRIPT,
        module="tree_sitter_javascript",
        package="tree-sitter-javascript",
        boundary_kinds=_JAVASCRIPT_BOUNDARIES,
        aliases=("js", "jsx", "mjs", "cjs"),
    ),
    SupportedLanguage.TYPESCRIPT: GrammarSpec(
        language=SupportedLanguage.TYPESCRIPT,
        module="tree_sitter_typescript",
        package="tree-sitter-typescript",
        boundary_kinds=_TYPESCRIPT_BOUNDARIES,
        aliases=("ts", "mts"),
        loader="language_typescript",
    ),
    SupportedLanguage.TSX: GrammarSpec(
        language=SupportedLanguage.TSX,
        module="tree_sitter_typescript",
        package="tree-sitter-typescript",
        boundary_kinds=_TYPESCRIPT_BOUNDARIES,
        loader="language_tsx",
    ),
    SupportedLanguage.PYTHON: GrammarSpec(
        language=SupportedLanguage.PYTHON,
        module="tree_sitter_python",
        package="tree-sitter-python",
        boundary_kinds=frozenset({
            "function_definition",
            "class_definition",
            "decorated_definition",
        }),
        aliases=("py",),
    ),
    SupportedLanguage.JAVA: GrammarSpec(
        language=SupportedLanguage.JAVA,
        module="tree_sitter_java",
        package="tree-sitter-java",
        boundary_kinds=frozenset({
            "method_declaration",
            "class_declaration",
            "interface_declaration",
            "constructor_declaration",
            "enum_declaration",
        }),
    ),
    SupportedLanguage.CPP: GrammarSpec(
        language=SupportedLanguage.CPP,
        module="tree_sitter_cpp",
        package="tree-sitter-cpp",
        boundary_kinds=frozenset({
            "function_definition",
            "class_specifier",
            "struct_specifier",
            "enum_specifier",
            "namespace_definition",
            "template_declaration",
            "type_definition",
            "union_specifier",
        }),
        aliases=("c++", "cc", "cxx", "c", "h", "hh", "hpp", "hxx"),
        extractor=CppSymbolExtractor,
    ),
    SupportedLanguage.GO: GrammarSpec(
        language=SupportedLanguage.GO,
        module="tree_sitter_go",
        package="tree-sitter-go",
        boundary_kinds=frozenset({
            "function_declaration",
            "method_declaration",
            "type_declaration",
            "var_declaration",
            "const_declaration",
        }),
        aliases=("golang",),
    ),
    SupportedLanguage.RUST: GrammarSpec(
        language=SupportedLanguage.RUST,
        module="tree_sitter_rust",
        package="tree-sitter-rust",
        boundary_kinds=frozenset({
            "function_item",
            "impl_item",
            "struct_item",
            "enum_item",
            "trait_item",
            "mod_item",
        }),
        aliases=("rs",),
    ),
    SupportedLanguage.CSHARP: GrammarSpec(
        language=SupportedLanguage.CSHARP,
        module="tree_sitter_c_sharp",
        package="tree-sitter-c-sharp",
        boundary_kinds=frozenset({
            "method_declaration",
            "class_declaration",
            "interface_declaration",
            "struct_declaration",
            "enum_declaration",
        }),
        aliases=("cs", "c#", "c_sharp"),
    ),
    SupportedLanguage.SCALA: GrammarSpec(
        language=SupportedLanguage.SCALA,
        module="tree_sitter_scala",
        package="tree-sitter-scala",
        boundary_kinds=frozenset({
            "function_definition",
            "class_definition",
            "object_definition",
            "trait_definition",
        }),
        aliases=("sc",),
    ),
    # Subroutines are function_definition in older grammar releases and
    # subroutine_declaration_statement in current ones.
    SupportedLanguage.PERL: GrammarSpec(
        language=SupportedLanguage.PERL,
        module="tree_sitter_perl",
        package="tree-sitter-perl",
        boundary_kinds=frozenset({
            "function_definition",
            "subroutine_declaration_statement",
            "method_declaration_statement",
            "package_statement",
        }),
        aliases=("pl", "pm"),
    ),
}

_ALIASES: dict[str, SupportedLanguage] = {
    identifier: spec.language
    for spec in GRAMMARS.values()
    for identifier in spec.identifiers
}


# ============================================================================
# Lookup
# ============================================================================

def normalize_language(language_id: str) -> Optional[SupportedLanguage]:
    """Map an identifier or alias to its ``SupportedLanguage``, case-insensitively."""
    if not language_id:
        return None
    return _ALIASES.get(language_id.strip().lower())


def is_language_supported(language_id: str) -> bool:
    """Whether a grammar is registered for ``language_id``."""
    return normalize_language(language_id) is not None


def supports_symbols(language_id: str) -> bool:
    """Whether chunks for ``language_id`` carry symbol metadata."""
    language = normalize_language(language_id)
    return language is not None and GRAMMARS[language].extractor is not None


def list_grammars() -> list[GrammarSpec]:
    """All registered grammar specs, in enum order."""
    return [GRAMMARS[language] for language in SupportedLanguage]


def get_language_for_file(file_path: str) -> Optional[str]:
    """Determine language from file extension."""
    suffix = PurePath(file_path).suffix.lower()
    return FILE_EXTENSION_TO_LANGUAGE.get(suffix)


@lru_cache(maxsize=None)
def _load_language(language: SupportedLanguage) -> Optional[Any]:
    """Import a grammar wheel and build its ``Language``, once per process."""
    spec = GRAMMARS[language]
    try:
        from tree_sitter import Language

        module = importlib.import_module(spec.module)
    except ImportError:
        logger.warning(
            ErrorMessage.GRAMMAR_NOT_INSTALLED.format(
                module=spec.module, language=language.value, package=spec.package
            )
        )
        return None

    return Language(getattr(module, spec.loader)())


def resolve(language_id: str) -> Optional[ResolvedGrammar]:
    """
    Look up the grammar and boundary kinds for a language.

    Args:
        language_id: Language identifier or alias, any case (e.g. "C++", "ts")

    Returns:
        ResolvedGrammar, or None when the language is not registered or its
        grammar cannot be loaded. None means "use the fallback splitter".
    """
    language = normalize_language(language_id)
    if language is None:
        return None

    ts_language = _load_language(language)
    if ts_language is None:
        return None

    return ResolvedGrammar(spec=GRAMMARS[language], language=ts_language)
