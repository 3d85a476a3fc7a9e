"""Chunking service: the entry point that turns source text into CodeChunks.

Pipeline per source unit:

    resolve(language) ── hit ──> StructuralSplitter ─> symbol extraction ─> fill_gaps ─┐
          │                           │ ParseUnavailableError                           ├─> ChunkRefiner
          └──── miss ─────────────────┴──────────────> FallbackSplitter ───────────────┘

Every call owns its own parser and syntax tree; nothing but the immutable
grammar registry is shared between calls, so units can be chunked from any
number of threads.
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Optional

from ..config import ChunkingConfig, get_config
from ..exceptions import ChunkingError
from ..logging import get_logger
from ..models.chunk import CodeChunk, RawChunk, SourceUnit, SymbolInfo
from ..parsers import grammars
from ..parsers.grammars import ResolvedGrammar
from ..parsers.splitter import StructuralSplitter, fill_gaps
from .fallback import FallbackSplitter
from .refiner import ChunkRefiner


logger = get_logger(__name__)


class ChunkingService:
    """Service for splitting source files into syntax-aware, size-bounded chunks.

    Example:
        service = ChunkingService()
        chunks = service.chunk(source, "cpp", file_path="src/math.cpp")
        for chunk in chunks:
            print(chunk.start_line, chunk.end_line, [s.name for s in chunk.symbols])
    """

    def __init__(self, config: ChunkingConfig | None = None):
        # Private copy: set_max_chunk_size() must not leak into the global config
        self.config = (config or get_config().chunking).model_copy()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_max_chunk_size(self, max_chunk_size: int) -> None:
        """Change the size budget for subsequent calls.

        Raises:
            pydantic.ValidationError: If ``max_chunk_size`` is below 1
        """
        self.config.max_chunk_size = max_chunk_size

    def set_overlap_size(self, overlap_size: int) -> None:
        """Change the overlap for subsequent calls.

        Raises:
            pydantic.ValidationError: If ``overlap_size`` is negative
        """
        self.config.overlap_size = overlap_size

    def is_language_supported(self, language: str) -> bool:
        """Whether ``language`` is chunked along syntax boundaries."""
        return grammars.is_language_supported(language)

    def supports_symbols(self, language: str) -> bool:
        """Whether chunks for ``language`` carry symbol metadata."""
        return self.config.extract_symbols and grammars.supports_symbols(language)

    # ------------------------------------------------------------------
    # Chunking
    # ------------------------------------------------------------------

    def chunk(self, text: str, language: str, file_path: str | None = None) -> list[CodeChunk]:
        """Split source text into chunks.

        Never raises on source content: unsupported languages and unparseable
        text go through the fallback splitter.

        Args:
            text: Full source text
            language: Language identifier or alias (e.g. "cpp", "ts", "c++")
            file_path: Optional path copied onto every chunk

        Returns:
            At least one chunk, in source order
        """
        return self.chunk_unit(SourceUnit(text=text, language=language, file_path=file_path))

    def chunk_unit(self, unit: SourceUnit) -> list[CodeChunk]:
        """Split one SourceUnit into chunks (see ``chunk``)."""
        max_chunk_size = self.config.max_chunk_size
        overlap_size = self.config.overlap_size
        extract_symbols = self.config.extract_symbols

        chunks: Optional[list[CodeChunk]] = None
        grammar = grammars.resolve(unit.language)
        if grammar is not None:
            try:
                chunks = self._structural_chunks(unit, grammar, extract_symbols)
            except ChunkingError as e:
                logger.warning(
                    f"{e}. Falling back to text splitting.",
                    extra={"file_path": unit.file_path, "language": unit.language},
                )
        else:
            logger.debug(f"No grammar for {unit.language!r}, using fallback splitter")

        if chunks is None:
            chunks = FallbackSplitter(max_chunk_size).split(
                unit.text, self._language_name(unit.language), unit.file_path
            )

        refined = ChunkRefiner(max_chunk_size, overlap_size).refine(chunks)
        logger.debug(
            f"Chunked {unit.file_path or '<text>'} into {len(refined)} chunks",
            extra={"language": unit.language, "chunks": len(refined)},
        )
        return refined

    def chunk_file(self, file_path: Path | str, language: str | None = None) -> list[CodeChunk]:
        """Read a UTF-8 file and chunk it.

        Args:
            file_path: Path to the source file
            language: Language override; detected from the extension when omitted

        Returns:
            Chunks for the file; unknown extensions use the fallback splitter
        """
        path = Path(file_path)
        if language is None:
            language = grammars.get_language_for_file(str(path)) or path.suffix.lstrip(".").lower()

        text = path.read_text(encoding="utf-8", errors="replace")
        return self.chunk(text, language or "text", file_path=str(path))

    def chunk_many(
        self, units: Iterable[SourceUnit], max_workers: int | None = None
    ) -> list[list[CodeChunk]]:
        """Chunk many units concurrently, one parser per call.

        Args:
            units: Source units to chunk
            max_workers: Worker threads (defaults to ``config.max_workers``)

        Returns:
            One chunk list per unit, in input order
        """
        units = list(units)
        if not units:
            return []

        with ThreadPoolExecutor(max_workers=max_workers or self.config.max_workers) as executor:
            return list(executor.map(self.chunk_unit, units))

    # ------------------------------------------------------------------
    # Structural path
    # ------------------------------------------------------------------

    def _structural_chunks(
        self, unit: SourceUnit, grammar: ResolvedGrammar, extract_symbols: bool
    ) -> list[CodeChunk]:
        result = StructuralSplitter(grammar).split(unit.text)

        extractor = grammar.create_extractor() if extract_symbols else None
        if extractor is not None:
            for raw_chunk in result.chunks:
                if raw_chunk.node_index is not None:
                    node = result.tree.node(raw_chunk.node_index)
                    raw_chunk.symbols = extractor.extract(result.tree, node)

        return [
            self._to_code_chunk(raw_chunk, grammar.name, unit.file_path)
            for raw_chunk in fill_gaps(result.chunks, unit.text)
        ]

    def _to_code_chunk(
        self, raw_chunk: RawChunk, language: str, file_path: str | None
    ) -> CodeChunk:
        symbols = [
            symbol
            for symbol in raw_chunk.symbols
            if self._within(symbol, raw_chunk.start_line, raw_chunk.end_line)
        ]
        return CodeChunk(
            content=raw_chunk.content,
            start_line=raw_chunk.start_line,
            end_line=raw_chunk.end_line,
            language=language,
            file_path=file_path,
            node_kind=raw_chunk.node_kind,
            symbols=symbols,
        )

    def _within(self, symbol: SymbolInfo, start_line: int, end_line: int) -> bool:
        if start_line <= symbol.range.start_line and symbol.range.end_line <= end_line:
            return True
        logger.debug(f"Dropping symbol {symbol.name!r} outside lines {start_line}-{end_line}")
        return False

    def _language_name(self, language: str) -> str:
        normalized = grammars.normalize_language(language)
        return normalized.value if normalized is not None else language


def chunk_source(
    text: str,
    language: str,
    file_path: str | None = None,
    config: ChunkingConfig | None = None,
) -> list[CodeChunk]:
    """Chunk source text with a one-off ChunkingService."""
    return ChunkingService(config).chunk(text, language, file_path)
