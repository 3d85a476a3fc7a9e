"""
Fallback Splitter.

Language-agnostic chunking for sources the structural path cannot handle:
unregistered languages, missing grammar wheels, and unparseable text.

LangChain's ``RecursiveCharacterTextSplitter`` picks the cut points, using
language-specific separators where LangChain knows the language. Its pieces
are then re-anchored to the source so that consecutive chunks are contiguous
slices of the text with exact line ranges; LangChain's own overlap is
disabled because the ChunkRefiner applies overlap the same way on both paths.

Author: CodeChunker Team
"""

from typing import Optional

from langchain_text_splitters import Language, RecursiveCharacterTextSplitter

from ..logging import get_logger
from ..models.chunk import CodeChunk, count_lines


logger = get_logger(__name__)


# Language identifiers and aliases mapped to LangChain Language values
LANGCHAIN_LANGUAGE_IDS = {
    "python": "python",
    "py": "python",
    "java": "java",
    "javascript": "js",
    "js": "js",
    "jsx": "js",
    "mjs": "js",
    "typescript": "ts",
    "ts": "ts",
    "tsx": "ts",
    "cpp": "cpp",
    "c++": "cpp",
    "cc": "cpp",
    "cxx": "cpp",
    "hpp": "cpp",
    "c": "c",
    "h": "c",
    "go": "go",
    "golang": "go",
    "rust": "rust",
    "rs": "rust",
    "scala": "scala",
    "ruby": "ruby",
    "rb": "ruby",
    "php": "php",
    "swift": "swift",
    "kotlin": "kotlin",
    "kt": "kotlin",
    "csharp": "csharp",
    "cs": "csharp",
    "c#": "csharp",
    "lua": "lua",
    "perl": "perl",
    "pl": "perl",
    "pm": "perl",
    "haskell": "haskell",
    "hs": "haskell",
    "elixir": "elixir",
    "ex": "elixir",
    "proto": "proto",
    "markdown": "markdown",
    "md": "markdown",
    "html": "html",
    "latex": "latex",
    "tex": "latex",
    "rst": "rst",
    "sol": "sol",
    "cobol": "cobol",
    "powershell": "powershell",
    "ps1": "powershell",
}


def get_langchain_language(language_id: str) -> Optional[Language]:
    """Map a language identifier to a LangChain ``Language``, if it has one."""
    value = LANGCHAIN_LANGUAGE_IDS.get((language_id or "").strip().lower())
    if value is None:
        return None
    try:
        return Language(value)
    except ValueError:
        return None


class FallbackSplitter:
    """
    Text splitter used when no syntax tree is available.

    Example:
        splitter = FallbackSplitter(chunk_size=2500)
        chunks = splitter.split(text, "perl", "lib/App.pm")
    """

    def __init__(self, chunk_size: int):
        self.chunk_size = chunk_size

    def split(self, text: str, language: str, file_path: Optional[str] = None) -> list[CodeChunk]:
        """
        Split ``text`` into contiguous chunks.

        Always returns at least one chunk; empty or whitespace-only text
        becomes a single chunk holding the text as-is.

        Args:
            text: Full source text
            language: Language identifier, used for separators and copied onto chunks
            file_path: Optional source path copied onto chunks

        Returns:
            Chunks in source order, with no symbols
        """
        if not text.strip():
            return [self._chunk(text, 1, count_lines(text), language, file_path)]

        try:
            pieces = self._text_splitter(language).split_text(text)
        except Exception as e:
            logger.warning(
                f"Text splitter failed for {language}: {e}. Using a single chunk.",
                extra={"language": language, "file_path": file_path},
            )
            pieces = []

        starts = self._anchor(text, pieces)
        if not starts:
            return [self._chunk(text, 1, count_lines(text), language, file_path)]

        # Each chunk runs from its anchor to the next one, so the chunks
        # partition the text, whitespace between pieces included.
        bounds = [0, *starts[1:], len(text)]
        chunks = []
        for begin, end in zip(bounds, bounds[1:]):
            content = text[begin:end]
            if content.endswith("\n"):
                content = content[:-1]
            start_line = text.count("\n", 0, begin) + 1
            end_line = start_line + content.count("\n")
            chunks.append(self._chunk(content, start_line, end_line, language, file_path))

        logger.debug(
            f"Fallback split {language} source into {len(chunks)} chunks",
            extra={"language": language, "chunks": len(chunks)},
        )
        return chunks

    def _text_splitter(self, language: str) -> RecursiveCharacterTextSplitter:
        langchain_language = get_langchain_language(language)
        if langchain_language is not None:
            try:
                return RecursiveCharacterTextSplitter.from_language(
                    language=langchain_language,
                    chunk_size=self.chunk_size,
                    chunk_overlap=0,
                )
            except ValueError:
                logger.debug(f"No LangChain separators for {language}, using generic splitter")

        return RecursiveCharacterTextSplitter(chunk_size=self.chunk_size, chunk_overlap=0)

    def _anchor(self, text: str, pieces: list[str]) -> list[int]:
        """Offsets in ``text`` where each piece starts, strictly increasing."""
        starts = []
        position = 0
        for piece in pieces:
            if not piece:
                continue
            index = text.find(piece, position)
            if index == -1:
                continue
            if not starts or index > starts[-1]:
                starts.append(index)
            position = index + len(piece)
        return starts

    def _chunk(
        self,
        content: str,
        start_line: int,
        end_line: int,
        language: str,
        file_path: Optional[str],
    ) -> CodeChunk:
        return CodeChunk(
            content=content,
            start_line=start_line,
            end_line=end_line,
            language=language,
            file_path=file_path,
        )
