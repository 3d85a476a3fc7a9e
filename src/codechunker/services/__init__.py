"""
Services Layer for CodeChunker.

**ChunkingService**:
    The entry point. Resolves the grammar, runs the structural splitter
    and symbol extraction, and falls back to text splitting when no
    syntax tree is available.

**ChunkRefiner**:
    Re-splits oversized chunks on line boundaries and injects overlap
    between neighbouring chunks.

**FallbackSplitter**:
    Language-agnostic text splitting backed by LangChain's recursive
    character splitter.
"""

from .chunking import ChunkingService, chunk_source
from .fallback import FallbackSplitter
from .refiner import ChunkRefiner

__all__ = [
    "ChunkRefiner",
    "ChunkingService",
    "FallbackSplitter",
    "chunk_source",
]
