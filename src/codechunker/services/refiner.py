"""
Chunk Refiner.

Post-processes a chunk sequence in two steps:

1. **Size splitting**: a chunk longer than ``max_chunk_size`` characters is
   cut into sub-chunks by greedily packing whole lines. Lines are never cut;
   a single line longer than the budget becomes a sub-chunk on its own.
2. **Overlap**: every chunk after the first gets the last ``overlap_size``
   characters of the previous (already size-split) chunk prepended, followed
   by a newline, and its ``start_line`` moved back by the lines that text
   spans.

Example:
    refiner = ChunkRefiner(max_chunk_size=2500, overlap_size=300)
    final_chunks = refiner.refine(chunks)

Author: CodeChunker Team
"""

from ..constants import ErrorMessage
from ..logging import get_logger
from ..models.chunk import CodeChunk


logger = get_logger(__name__)


class ChunkRefiner:
    """
    Size-bounds and overlaps a chunk sequence.

    After refinement every chunk is at most
    ``max_chunk_size + overlap_size + 1`` characters long (the ``+ 1`` is the
    separator newline), unless one source line alone exceeds the budget.
    """

    def __init__(self, max_chunk_size: int, overlap_size: int):
        if max_chunk_size < 1:
            raise ValueError(ErrorMessage.INVALID_MAX_CHUNK_SIZE.format(value=max_chunk_size))
        if overlap_size < 0:
            raise ValueError(ErrorMessage.INVALID_OVERLAP_SIZE.format(value=overlap_size))
        self.max_chunk_size = max_chunk_size
        self.overlap_size = overlap_size

    def refine(self, chunks: list[CodeChunk]) -> list[CodeChunk]:
        """Split oversized chunks, then inject overlap."""
        sized = [piece for chunk in chunks for piece in self.split_chunk(chunk)]
        if len(sized) != len(chunks):
            logger.debug(f"Re-split {len(chunks)} chunks into {len(sized)}")
        return self.add_overlap(sized)

    def split_chunk(self, chunk: CodeChunk) -> list[CodeChunk]:
        """
        Split one chunk into whole-line sub-chunks of at most ``max_chunk_size``.

        Sub-chunk line ranges come from the number of lines packed so far.
        Each sub-chunk keeps the symbols whose range it fully contains.
        """
        if len(chunk.content) <= self.max_chunk_size:
            return [chunk]

        pieces = chunk.content.split("\n")
        lines = [piece + "\n" for piece in pieces[:-1]]
        if pieces[-1]:
            lines.append(pieces[-1])

        # (first line offset, last line offset) of each sub-chunk
        spans: list[tuple[int, int]] = []
        buffer_start = 0
        buffer_length = 0
        for offset, line in enumerate(lines):
            if buffer_length and buffer_length + len(line) > self.max_chunk_size:
                spans.append((buffer_start, offset - 1))
                buffer_start = offset
                buffer_length = 0
            buffer_length += len(line)
        spans.append((buffer_start, len(lines) - 1))

        sub_chunks = []
        for index, (first, last) in enumerate(spans):
            content = "".join(lines[first:last + 1])
            if content.endswith("\n"):
                content = content[:-1]

            start_line = chunk.start_line + first
            end_line = chunk.start_line + last
            if index == len(spans) - 1:
                end_line = max(end_line, chunk.end_line)

            sub_chunks.append(
                CodeChunk(
                    content=content,
                    start_line=start_line,
                    end_line=end_line,
                    language=chunk.language,
                    file_path=chunk.file_path,
                    node_kind=chunk.node_kind,
                    symbols=[
                        symbol
                        for symbol in chunk.symbols
                        if start_line <= symbol.range.start_line
                        and symbol.range.end_line <= end_line
                    ],
                )
            )
        return sub_chunks

    def add_overlap(self, chunks: list[CodeChunk]) -> list[CodeChunk]:
        """Prepend the tail of each chunk to the chunk that follows it."""
        if self.overlap_size == 0 or len(chunks) <= 1:
            return list(chunks)

        overlapped = [chunks[0]]
        for previous, chunk in zip(chunks, chunks[1:]):
            overlap_text = previous.content[-self.overlap_size:]
            if not overlap_text:
                overlapped.append(chunk)
                continue

            start_line = max(1, chunk.start_line - (overlap_text.count("\n") + 1))
            overlapped.append(
                chunk.model_copy(
                    update={
                        "content": overlap_text + "\n" + chunk.content,
                        "start_line": start_line,
                    }
                )
            )
        return overlapped
