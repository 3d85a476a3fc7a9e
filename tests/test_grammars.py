"""
Tests for the grammar registry.

Tests cover:
- Alias and case-insensitive language lookup
- resolve() hits, misses and missing grammar wheels
- Boundary kind tables per language
- File extension detection
- Per-call parser construction

Author: CodeChunker Team
"""

import logging

import pytest

from codechunker.constants import SupportedLanguage
from codechunker.parsers import grammars
from codechunker.parsers.cpp_extractor import CppSymbolExtractor
from codechunker.parsers.grammars import (
    GRAMMARS,
    get_language_for_file,
    is_language_supported,
    list_grammars,
    normalize_language,
    resolve,
    supports_symbols,
)


class TestNormalizeLanguage:
    """Tests for identifier and alias normalization."""

    @pytest.mark.parametrize(
        "language_id",
        ["cpp", "CPP", "c++", "C++", "cc", "cxx", "c", "h", "hpp", " cpp "],
    )
    def test_c_family_aliases(self, language_id):
        """Test every C-family alias resolves to cpp."""
        assert normalize_language(language_id) == SupportedLanguage.CPP

    @pytest.mark.parametrize(
        "language_id,expected",
        [
            ("ts", SupportedLanguage.TYPESCRIPT),
            ("TypeScript", SupportedLanguage.TYPESCRIPT),
            ("tsx", SupportedLanguage.TSX),
            ("js", SupportedLanguage.JAVASCRIPT),
            ("jsx", SupportedLanguage.JAVASCRIPT),
            ("py", SupportedLanguage.PYTHON),
            ("rs", SupportedLanguage.RUST),
            ("cs", SupportedLanguage.CSHARP),
            ("c#", SupportedLanguage.CSHARP),
            ("golang", SupportedLanguage.GO),
            ("scala", SupportedLanguage.SCALA),
            ("java", SupportedLanguage.JAVA),
            ("pl", SupportedLanguage.PERL),
            ("PM", SupportedLanguage.PERL),
        ],
    )
    def test_other_aliases(self, language_id, expected):
        """Test aliases of the other registered languages."""
        assert normalize_language(language_id) == expected

    @pytest.mark.parametrize("language_id", ["lua", "rb", "cobol", "", "c+++"])
    def test_unknown_identifiers(self, language_id):
        """Test unregistered identifiers normalize to None."""
        assert normalize_language(language_id) is None
        assert not is_language_supported(language_id)


class TestResolve:
    """Tests for resolve()."""

    def test_resolve_cpp(self):
        """Test resolving C++ yields its grammar and boundary kinds."""
        grammar = resolve("C++")

        assert grammar is not None
        assert grammar.name == "cpp"
        assert "function_definition" in grammar.boundary_kinds
        assert "namespace_definition" in grammar.boundary_kinds
        assert "class_specifier" in grammar.boundary_kinds
        assert grammar.has_symbol_extractor
        assert isinstance(grammar.create_extractor(), CppSymbolExtractor)

    def test_resolve_unknown_returns_none(self):
        """Test unknown languages route to the fallback (None), not an error."""
        assert resolve("lua") is None
        assert resolve("") is None

    @pytest.mark.parametrize("language", list(SupportedLanguage))
    def test_every_registered_language_loads(self, language):
        """Test each registered grammar wheel loads and parses."""
        grammar = resolve(language.value)

        assert grammar is not None
        tree = grammar.create_parser().parse(b"")
        assert tree.root_node is not None

    def test_parser_per_call(self):
        """Test create_parser never hands out a shared instance."""
        grammar = resolve("cpp")

        assert grammar.create_parser() is not grammar.create_parser()

    def test_language_objects_are_cached(self):
        """Test grammar Language objects are loaded once and shared."""
        assert resolve("cpp").language is resolve("cc").language

    def test_typescript_and_tsx_use_distinct_grammars(self):
        """Test tsx loads the TSX dialect rather than plain TypeScript."""
        assert resolve("ts").language is not resolve("tsx").language

    def test_missing_grammar_wheel_returns_none(self, monkeypatch, caplog):
        """Test a grammar that cannot be imported resolves to None with a warning."""
        caplog.set_level(logging.WARNING, logger="codechunker")

        def failing_import(name):
            raise ImportError(f"No module named {name!r}")

        grammars._load_language.cache_clear()
        monkeypatch.setattr(grammars.importlib, "import_module", failing_import)
        try:
            assert resolve("go") is None
            assert "pip install tree-sitter-go" in caplog.text
        finally:
            grammars._load_language.cache_clear()

    def test_no_grammar_has_no_extractor_except_cpp(self):
        """Test only the C family carries a symbol extractor."""
        with_extractor = {spec.language for spec in list_grammars() if spec.extractor}

        assert with_extractor == {SupportedLanguage.CPP}


class TestBoundaryKinds:
    """Tests for the per-language boundary tables."""

    def test_every_language_registered(self):
        """Test the table covers exactly the supported languages."""
        assert set(GRAMMARS) == set(SupportedLanguage)
        assert [spec.language for spec in list_grammars()] == list(SupportedLanguage)

    def test_python_kinds(self):
        """Test Python boundaries include decorated definitions."""
        kinds = GRAMMARS[SupportedLanguage.PYTHON].boundary_kinds

        assert kinds == {"function_definition", "class_definition", "decorated_definition"}

    def test_scala_kinds_are_scala_nodes(self):
        """Test Scala boundaries use Scala node kinds."""
        kinds = GRAMMARS[SupportedLanguage.SCALA].boundary_kinds

        assert {"class_definition", "object_definition", "trait_definition"} <= kinds

    def test_typescript_extends_javascript(self):
        """Test TypeScript adds interfaces and type aliases to the JS kinds."""
        js = GRAMMARS[SupportedLanguage.JAVASCRIPT].boundary_kinds
        ts = GRAMMARS[SupportedLanguage.TYPESCRIPT].boundary_kinds

        assert js < ts
        assert {"interface_declaration", "type_alias_declaration"} <= ts


class TestLanguageQueries:
    """Tests for is_language_supported, supports_symbols and extension lookup."""

    def test_supports_symbols(self):
        """Test symbol support is limited to the C family."""
        assert supports_symbols("cpp")
        assert supports_symbols("c")
        assert not supports_symbols("python")
        assert not supports_symbols("perl")

    @pytest.mark.parametrize(
        "file_path,expected",
        [
            ("src/math.cpp", "cpp"),
            ("include/math.HPP", "cpp"),
            ("legacy/driver.c", "cpp"),
            ("app/main.py", "python"),
            ("web/index.tsx", "tsx"),
            ("web/util.ts", "typescript"),
            ("web/util.mjs", "javascript"),
            ("svc/Main.java", "java"),
            ("cmd/main.go", "go"),
            ("src/lib.rs", "rust"),
            ("App/Program.cs", "csharp"),
            ("core/Main.scala", "scala"),
            ("lib/App.pm", "perl"),
            ("bin/report.pl", "perl"),
            ("templates/page.thpl", "perl"),
            ("Makefile", None),
        ],
    )
    def test_get_language_for_file(self, file_path, expected):
        """Test extension-based language detection."""
        assert get_language_for_file(file_path) == expected
