"""
Tests for the chunking service.

Tests cover:
- Structural chunking with symbol metadata
- Coverage, symbol containment, size bound and idempotence
- Gap chunks for code between boundaries
- Fallback routing (unknown languages, parse failures, missing grammars)
- Configuration changes between calls
- File and batch entry points

Author: CodeChunker Team
"""

import logging
from pathlib import Path
from textwrap import dedent

import pytest
from pydantic import ValidationError

from codechunker.config import ChunkingConfig, get_config, reset_config
from codechunker.exceptions import ParseUnavailableError
from codechunker.models.chunk import SourceUnit, SymbolKind, SymbolScope, count_lines
from codechunker.parsers.splitter import StructuralSplitter
from codechunker.services import chunking
from codechunker.services.chunking import ChunkingService, chunk_source


SAMPLE_CPP = Path(__file__).parent / "fixtures" / "sample.cpp"


@pytest.fixture(autouse=True)
def reset_config_fixture():
    """Reset config before and after each test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def service():
    """Service without overlap, so contents and ranges are exact."""
    return ChunkingService(ChunkingConfig(overlap_size=0))


@pytest.fixture
def sample_source():
    return SAMPLE_CPP.read_text(encoding="utf-8")


def covered_lines(chunks) -> set[int]:
    return {line for c in chunks for line in range(c.start_line, c.end_line + 1)}


class TestStructuralChunking:
    """Tests for the syntax-aware path."""

    def test_two_functions(self, service):
        """Test each function becomes its own chunk with a function symbol."""
        code = "int add(int a,int b){return a+b;}\nint mul(int x,int y){return x*y;}"

        chunks = service.chunk(code, "cpp", file_path="math.cpp")

        assert len(chunks) == 2
        assert [c.node_kind for c in chunks] == ["function_definition", "function_definition"]
        assert [[s.name for s in c.symbols] for c in chunks] == [["add"], ["mul"]]
        assert all(c.symbols[0].kind == SymbolKind.FUNCTION for c in chunks)
        assert all(c.language == "cpp" and c.file_path == "math.cpp" for c in chunks)

    def test_namespace_chunk_holds_function_symbol(self, service):
        """Test a namespace chunk carries symbols for everything inside it."""
        code = dedent('''
            namespace math {
            int add(int a, int b) {
                return a + b;
            }
            }
        ''').strip()

        chunks = service.chunk(code, "c++")

        assert len(chunks) == 1
        assert chunks[0].node_kind == "namespace_definition"
        assert (chunks[0].start_line, chunks[0].end_line) == (1, 5)
        assert [(s.name, s.parent_symbol) for s in chunks[0].symbols] == [
            ("math", None),
            ("add", "math"),
        ]

    def test_public_and_private_fields(self, service):
        """Test field scopes come through the service."""
        code = dedent('''
            class Account {
            public:
                int id;
            private:
                int balance;
            };
        ''').strip()

        chunk = service.chunk(code, "cpp")[0]

        assert chunk.get_symbol("id").scope == SymbolScope.PUBLIC
        assert chunk.get_symbol("balance").scope == SymbolScope.PRIVATE

    def test_gap_chunk_for_top_level_code(self, service):
        """Test includes and globals between boundaries get their own chunk."""
        code = "#include <vector>\n\nint x = 1;\n\nint f() { return x; }\n"

        chunks = service.chunk(code, "cpp")

        assert [(c.start_line, c.end_line, c.node_kind) for c in chunks] == [
            (1, 4, None),
            (5, 5, "function_definition"),
        ]
        assert chunks[0].symbols == []
        assert chunks[1].get_symbol("f") is not None

    def test_canonical_language_on_chunks(self, service):
        """Test chunks carry the canonical language name, not the alias."""
        chunks = service.chunk("def f():\n    return 1\n", "py")

        assert chunks[0].language == "python"
        assert chunks[0].node_kind == "function_definition"

    def test_no_symbols_without_extractor(self, service):
        """Test languages without an extractor produce chunks without symbols."""
        code = "class A:\n    def run(self):\n        pass\n"

        chunks = service.chunk(code, "python")

        assert not any(c.has_symbols for c in chunks)

    def test_symbol_extraction_disabled(self):
        """Test extract_symbols=False skips symbol metadata."""
        service = ChunkingService(ChunkingConfig(overlap_size=0, extract_symbols=False))

        chunks = service.chunk("int f() { return 0; }", "cpp")

        assert chunks[0].symbols == []
        assert not service.supports_symbols("cpp")


class TestChunkingProperties:
    """Tests for properties that hold for every chunk sequence."""

    @pytest.mark.parametrize("language", ["cpp", "lua"])
    def test_coverage(self, service, sample_source, language):
        """Test every source line is covered on both paths."""
        chunks = service.chunk(sample_source, language)

        assert covered_lines(chunks) == set(range(1, count_lines(sample_source) + 1))

    def test_symbol_containment(self, sample_source):
        """Test every symbol lies inside its chunk, even after re-splitting."""
        service = ChunkingService(ChunkingConfig(max_chunk_size=200, overlap_size=50))

        chunks = service.chunk(sample_source, "cpp")

        assert len(chunks) > 1
        for chunk in chunks:
            for symbol in chunk.symbols:
                assert chunk.start_line <= symbol.range.start_line
                assert symbol.range.end_line <= chunk.end_line

    def test_size_bound(self, sample_source):
        """Test refined chunks respect the budget plus overlap."""
        service = ChunkingService(ChunkingConfig(max_chunk_size=120, overlap_size=40))

        chunks = service.chunk(sample_source, "cpp")

        assert all(len(c.content) <= 120 + 40 + 1 for c in chunks)

    def test_idempotent(self, sample_source):
        """Test chunking twice yields identical sequences."""
        service = ChunkingService()

        first = service.chunk(sample_source, "cpp", "sample.cpp")
        second = service.chunk(sample_source, "cpp", "sample.cpp")

        assert [c.model_dump() for c in first] == [c.model_dump() for c in second]

    def test_overlap_applied(self):
        """Test the tail of each chunk is prepended to the next one."""
        code = "int a() { return 1; }\nint b() { return 2; }"

        chunks = ChunkingService(ChunkingConfig(overlap_size=5)).chunk(code, "cpp")

        assert chunks[0].content == "int a() { return 1; }"
        assert chunks[1].content == " 1; }\nint b() { return 2; }"
        assert chunks[1].start_line == 1
        assert chunks[1].end_line == 2

    @pytest.mark.parametrize("language", ["cpp", "python", "lua", ""])
    def test_empty_input(self, service, language):
        """Test empty text yields one empty chunk on line 1, whatever the path."""
        chunks = service.chunk("", language)

        assert len(chunks) == 1
        assert chunks[0].content == ""
        assert (chunks[0].start_line, chunks[0].end_line) == (1, 1)

    @pytest.mark.parametrize("language", ["cpp", "lua"])
    def test_whitespace_only_input(self, service, language):
        """Test whitespace-only text yields one chunk."""
        chunks = service.chunk("\n\n   \n", language)

        assert len(chunks) == 1
        assert chunks[0].start_line == 1


class TestFallbackRouting:
    """Tests for routing to the fallback splitter."""

    def test_unknown_language(self, service):
        """Test an unregistered language never raises and yields chunks."""
        code = "function greet()\n    print('hi')\nend\n"

        chunks = service.chunk(code, "lua", file_path="greet.lua")

        assert len(chunks) >= 1
        assert all(c.node_kind is None and c.symbols == [] for c in chunks)
        assert chunks[0].language == "lua"
        assert chunks[0].file_path == "greet.lua"

    def test_fallback_uses_canonical_name(self, service, monkeypatch):
        """Test a registered alias keeps its canonical name on the fallback path."""
        monkeypatch.setattr(chunking.grammars, "resolve", lambda language: None)

        chunks = service.chunk("int f() { return 0; }", "c++")

        assert chunks[0].language == "cpp"
        assert chunks[0].node_kind is None

    def test_parse_failure_falls_back(self, service, monkeypatch, caplog):
        """Test ParseUnavailableError routes to the fallback splitter."""
        caplog.set_level(logging.WARNING, logger="codechunker")

        def unusable(self, text):
            raise ParseUnavailableError("cpp", "root node is an ERROR node")

        monkeypatch.setattr(StructuralSplitter, "split", unusable)

        chunks = service.chunk("int f() { return 0; }\n", "cpp")

        assert len(chunks) == 1
        assert chunks[0].content == "int f() { return 0; }"
        assert chunks[0].symbols == []
        assert "Falling back to text splitting" in caplog.text

    def test_missing_grammar_falls_back(self, service, monkeypatch):
        """Test a grammar that cannot be loaded behaves like an unknown language."""
        monkeypatch.setattr(chunking.grammars, "resolve", lambda language: None)

        chunks = service.chunk("func main() {}\n", "go")

        assert len(chunks) == 1
        assert chunks[0].language == "go"

    @pytest.mark.parametrize(
        "text",
        ["}}}} ((((", "class {{{ int (;", "\x00\x01 binary", "int main( {\n  return\n"],
    )
    def test_malformed_source_never_raises(self, service, text):
        """Test broken source still yields a covering chunk sequence."""
        chunks = service.chunk(text, "cpp")

        assert len(chunks) >= 1
        assert covered_lines(chunks) >= set(range(1, count_lines(text) + 1))

    @pytest.mark.parametrize("language", ["cpp", "python", "lua"])
    def test_lone_surrogate_never_raises(self, service, language):
        """Test text holding an unpaired surrogate is chunked on every path."""
        text = 'int f(){return 0;}\nchar* s = "\ud800";\n'

        chunks = service.chunk(text, language)

        assert "int f()" in chunks[0].content
        assert covered_lines(chunks) == {1, 2}


class TestConfiguration:
    """Tests for configuration between calls."""

    def test_set_max_chunk_size_affects_next_call(self, service, sample_source):
        """Test a smaller budget produces more chunks on the next call."""
        before = service.chunk(sample_source, "cpp")

        service.set_max_chunk_size(100)
        after = service.chunk(sample_source, "cpp")

        assert len(after) > len(before)
        assert all(len(c.content) <= 100 for c in after)

    def test_set_overlap_size(self, service):
        """Test overlap can be switched on between calls."""
        code = "int a() { return 1; }\nint b() { return 2; }"

        service.set_overlap_size(4)
        chunks = service.chunk(code, "cpp")

        assert chunks[1].content == "1; }\nint b() { return 2; }"

    def test_invalid_sizes_rejected(self, service):
        """Test invalid values fail at configuration time and change nothing."""
        with pytest.raises(ValidationError):
            service.set_max_chunk_size(0)
        with pytest.raises(ValidationError):
            service.set_overlap_size(-1)

        assert service.config.max_chunk_size == 2500
        assert service.config.overlap_size == 0

    def test_changes_do_not_leak_into_global_config(self):
        """Test a service's settings are its own."""
        service = ChunkingService()

        service.set_max_chunk_size(10)

        assert get_config().chunking.max_chunk_size == 2500

    def test_defaults_from_global_config(self):
        """Test a service without config uses the global defaults."""
        service = ChunkingService()

        assert service.config.max_chunk_size == 2500
        assert service.config.overlap_size == 300

    def test_language_queries(self, service):
        """Test language support queries."""
        assert service.is_language_supported("cpp")
        assert service.is_language_supported("TSX")
        assert not service.is_language_supported("lua")
        assert service.supports_symbols("c++")
        assert not service.supports_symbols("java")


class TestEntryPoints:
    """Tests for chunk_file, chunk_many and chunk_source."""

    def test_chunk_file_detects_language(self, service, tmp_path):
        """Test the extension selects the grammar."""
        file_path = tmp_path / "math.cpp"
        file_path.write_text("int add(int a, int b) { return a + b; }\n")

        chunks = service.chunk_file(file_path)

        assert chunks[0].language == "cpp"
        assert chunks[0].file_path == str(file_path)
        assert chunks[0].get_symbol("add") is not None

    def test_chunk_file_unknown_extension(self, service, tmp_path):
        """Test unknown extensions go through the fallback splitter."""
        file_path = tmp_path / "script.lua"
        file_path.write_text("print('hello')\n")

        chunks = service.chunk_file(file_path)

        assert chunks[0].language == "lua"
        assert chunks[0].content == "print('hello')"

    def test_chunk_file_language_override(self, service, tmp_path):
        """Test an explicit language wins over the extension."""
        file_path = tmp_path / "header.inc"
        file_path.write_text("struct S { int x; };\n")

        chunks = service.chunk_file(file_path, language="cpp")

        assert chunks[0].node_kind == "struct_specifier"

    def test_chunk_file_invalid_utf8(self, service, tmp_path):
        """Test undecodable bytes are replaced rather than raising."""
        file_path = tmp_path / "latin1.cpp"
        file_path.write_bytes(b"// caf\xe9\nint x = 1;\n")

        chunks = service.chunk_file(file_path)

        assert len(chunks) == 1
        assert "\ufffd" in chunks[0].content

    def test_chunk_many_matches_sequential(self, service, sample_source):
        """Test concurrent chunking returns the sequential results in input order."""
        units = [
            SourceUnit(text=sample_source, language="cpp", file_path="sample.cpp"),
            SourceUnit(text="def f():\n    pass\n", language="python", file_path="f.py"),
            SourceUnit(text="print('x')\n", language="lua", file_path="x.lua"),
        ] * 4

        results = service.chunk_many(units, max_workers=4)

        assert len(results) == len(units)
        for unit, chunks in zip(units, results):
            assert chunks == service.chunk_unit(unit)

    def test_chunk_many_empty(self, service):
        """Test no units yields no results."""
        assert service.chunk_many([]) == []

    def test_chunk_source(self):
        """Test the one-off helper."""
        chunks = chunk_source(
            "int f() { return 0; }", "cpp", "f.cpp", ChunkingConfig(overlap_size=0)
        )

        assert len(chunks) == 1
        assert chunks[0].file_path == "f.cpp"
        assert chunks[0].get_symbol("f").kind == SymbolKind.FUNCTION
