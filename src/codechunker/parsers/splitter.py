"""
Structural Splitter.

Parses source with a registered grammar and emits one raw chunk per
boundary node, in source order.

How It Works:
    1. Build a fresh tree-sitter parser for the grammar (never shared)
    2. Parse the source and copy the tree into a SyntaxTree arena
    3. Walk the arena pre-order; a boundary node becomes one RawChunk and
       its subtree is skipped, so a method inside a class is part of the
       class chunk, not a chunk of its own
    4. If nothing matched, emit the whole file as one chunk

``fill_gaps`` then closes the holes between boundary chunks (imports,
globals, top-level statements) so that every source line belongs to some
chunk.

Example:
    grammar = resolve("cpp")
    result = StructuralSplitter(grammar).split(source)
    for chunk in fill_gaps(result.chunks, source):
        print(chunk.node_kind, chunk.start_line, chunk.end_line)

Author: CodeChunker Team
"""

from dataclasses import dataclass, replace

from ..exceptions import ParseUnavailableError
from ..logging import get_logger
from ..models.chunk import RawChunk, count_lines
from .grammars import ResolvedGrammar
from .syntax import SyntaxTree


logger = get_logger(__name__)


@dataclass
class SplitResult:
    """Raw chunks plus the arena they point into.

    The tree lives only as long as the chunking call that produced it.
    """

    tree: SyntaxTree
    chunks: list[RawChunk]


class StructuralSplitter:
    """Splits source text at the boundary node kinds of one grammar."""

    def __init__(self, grammar: ResolvedGrammar):
        self.grammar = grammar

    def split(self, text: str) -> SplitResult:
        """
        Split source text into raw chunks along syntax boundaries.

        Args:
            text: Full source text

        Returns:
            SplitResult with at least one chunk

        Raises:
            ParseUnavailableError: If the grammar yields no usable tree
        """
        tree = self.parse(text)
        chunks = self._collect_boundaries(tree)

        if not chunks:
            chunks = [
                RawChunk(
                    content=text,
                    start_line=1,
                    end_line=count_lines(text),
                    node_index=tree.root.index,
                )
            ]

        logger.debug(
            f"Split {self.grammar.name} source into {len(chunks)} raw chunks",
            extra={"language": self.grammar.name, "chunks": len(chunks)},
        )
        return SplitResult(tree=tree, chunks=chunks)

    def parse(self, text: str) -> SyntaxTree:
        """Parse ``text`` into an arena, or raise ParseUnavailableError."""
        # Lone surrogates (e.g. from surrogateescape decoding) become invalid
        # bytes for the parser instead of an encode error.
        source = text.encode("utf-8", errors="surrogatepass")
        parser = self.grammar.create_parser()
        try:
            ts_tree = parser.parse(source)
        except Exception as e:
            raise ParseUnavailableError(self.grammar.name, str(e)) from e

        if ts_tree is None or ts_tree.root_node is None:
            raise ParseUnavailableError(self.grammar.name, "parser returned no tree")
        if ts_tree.root_node.type == "ERROR":
            raise ParseUnavailableError(self.grammar.name, "root node is an ERROR node")

        return SyntaxTree.from_tree_sitter(ts_tree, source)

    def _collect_boundaries(self, tree: SyntaxTree) -> list[RawChunk]:
        boundary_kinds = self.grammar.boundary_kinds
        chunks = []

        stack = [tree.root.index]
        while stack:
            node = tree.node(stack.pop())
            if node.kind in boundary_kinds:
                content = tree.text(node)
                if content.strip():
                    chunks.append(
                        RawChunk(
                            content=content,
                            start_line=node.start_line,
                            end_line=node.end_line,
                            node_kind=node.kind,
                            node_index=node.index,
                        )
                    )
                continue
            stack.extend(reversed(node.children))

        return chunks


def fill_gaps(chunks: list[RawChunk], text: str) -> list[RawChunk]:
    """
    Cover the source lines that no raw chunk spans.

    Each maximal run of uncovered lines is handled on its own:

    - if it holds any non-whitespace text it becomes a chunk with
      ``node_kind=None``
    - otherwise it is absorbed into the preceding chunk, or into the
      following one when the run opens the file

    Args:
        chunks: Raw chunks in source order
        text: The full source the chunks were cut from

    Returns:
        New list of chunks, in source order, covering lines 1..line_count
    """
    line_count = count_lines(text)
    if not chunks:
        return [RawChunk(content=text, start_line=1, end_line=line_count)]

    lines = text.split("\n")
    result: list[RawChunk] = []
    leading_blank: str | None = None
    next_line = 1

    def take_gap(start: int, end: int) -> None:
        nonlocal leading_blank
        gap_text = "\n".join(lines[start - 1:end])
        if gap_text.strip():
            result.append(RawChunk(content=gap_text, start_line=start, end_line=end))
        elif result:
            previous = result[-1]
            separator = "" if previous.content.endswith("\n") else "\n"
            result[-1] = replace(
                previous,
                content=previous.content + separator + gap_text,
                end_line=end,
            )
        else:
            leading_blank = gap_text

    for chunk in sorted(chunks, key=lambda c: (c.start_line, c.end_line)):
        if chunk.start_line > next_line:
            take_gap(next_line, chunk.start_line - 1)

        if leading_blank is not None:
            chunk = replace(chunk, content=leading_blank + "\n" + chunk.content, start_line=1)
            leading_blank = None

        result.append(chunk)
        next_line = max(next_line, chunk.end_line + 1)

    if next_line <= line_count:
        take_gap(next_line, line_count)

    return result
