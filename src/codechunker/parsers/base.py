"""Base symbol extractor interface.

Symbol extraction is two passes over one syntax (sub)tree:

1. **Usage collection**: every identifier-like leaf whose parent is not a
   declaration context is recorded by name with its position.
2. **Definitions**: every node with a known definition shape becomes a
   ``SymbolInfo`` whose ``usages`` come from the first pass.

Subclasses describe the language: which leaves are identifiers, which
parents are declaration contexts, and how to build a symbol from a node.
Optional metadata (documentation, signature, scope, ...) is gathered one
field at a time through ``_enrich`` so that one bad field costs only that
field, never the symbol.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from ..constants import DOC_COMMENT_LOOKBACK_LINES
from ..exceptions import SymbolExtractionError
from ..logging import get_logger
from ..models.chunk import SourcePosition, SymbolInfo, SymbolKind, SymbolRange, SymbolScope
from .syntax import SyntaxNode, SyntaxTree


logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class ExtractionContext:
    """State owned by a single ``extract`` call.

    Attributes:
        tree: The arena being read
        usages: Identifier name -> usage positions, filled by the first pass
        scopes: Member-list index -> {child index: access level}, filled lazily
    """

    tree: SyntaxTree
    usages: dict[str, list[SourcePosition]] = field(default_factory=dict)
    scopes: dict[int, dict[int, Optional[SymbolScope]]] = field(default_factory=dict)


class BaseSymbolExtractor(ABC):
    """Abstract base class for language-specific symbol extractors.

    Extractors hold no per-call state; one instance may serve many trees,
    including from several threads.
    """

    #: Leaf kinds counted as identifier usages
    usage_kinds: frozenset[str] = frozenset({"identifier"})

    #: Parent kinds whose identifier children are declarations, not usages
    declaration_contexts: frozenset[str] = frozenset()

    line_comment_prefix: str = "//"
    block_comment_delimiters: tuple[str, str] = ("/*", "*/")

    @property
    @abstractmethod
    def language(self) -> str:
        """The language this extractor handles."""
        pass

    @abstractmethod
    def build_symbol(self, context: ExtractionContext, node: SyntaxNode) -> Optional[SymbolInfo]:
        """Build a symbol for ``node``, or None if it is not a named definition.

        Args:
            context: Per-call extraction state
            node: Node visited by the definition pass

        Returns:
            SymbolInfo, or None for nodes that define nothing
        """
        pass

    def extract(self, tree: SyntaxTree, node: Optional[SyntaxNode] = None) -> list[SymbolInfo]:
        """
        Extract symbols from a whole tree or from one node's subtree.

        Never raises: node-local failures drop that node, and a failure of the
        whole pass (or a missing root) yields an empty list.

        Args:
            tree: Arena produced by the structural splitter
            node: Subtree root (a chunk's boundary node); defaults to the tree root

        Returns:
            Symbols in source order
        """
        root = node if node is not None else tree.root
        if root is None:
            return []

        try:
            context = ExtractionContext(tree=tree)
            self._collect_usages(context, root)
            return self._collect_definitions(context, root)
        except Exception as e:
            logger.warning(
                f"Symbol extraction failed for {self.language} subtree: {e}",
                extra={"node_kind": root.kind, "start_line": root.start_line},
            )
            return []

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def _collect_usages(self, context: ExtractionContext, root: SyntaxNode) -> None:
        tree = context.tree
        for node in tree.walk(root):
            if node.kind not in self.usage_kinds:
                continue
            parent = tree.parent(node)
            if parent is None or parent.kind in self.declaration_contexts:
                continue
            context.usages.setdefault(tree.text(node), []).append(
                SourcePosition(line=node.start_line, column=node.start_column)
            )

    def _collect_definitions(self, context: ExtractionContext, root: SyntaxNode) -> list[SymbolInfo]:
        symbols = []
        for node in context.tree.walk(root):
            try:
                symbol = self.build_symbol(context, node)
            except Exception as e:
                logger.warning(
                    f"Skipping {node.kind} at line {node.start_line}: {e}",
                    extra={"node_kind": node.kind, "start_line": node.start_line},
                )
                continue
            if symbol is not None:
                symbols.append(symbol)
        return symbols

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    def _new_symbol(
        self,
        context: ExtractionContext,
        node: SyntaxNode,
        name: str,
        kind: SymbolKind,
        **metadata,
    ) -> SymbolInfo:
        """Create a symbol ranged on ``node`` with usages from the first pass."""
        return SymbolInfo(
            name=name,
            kind=kind,
            range=SymbolRange(
                start_line=node.start_line,
                end_line=node.end_line,
                start_column=node.start_column,
                end_column=node.end_column,
            ),
            definition=SourcePosition(line=node.start_line, column=node.start_column),
            usages=list(context.usages.get(name, [])),
            **metadata,
        )

    def _enrich(
        self,
        field_name: str,
        node: SyntaxNode,
        extractor: Callable[..., T],
        *args,
    ) -> Optional[T]:
        """Run one field extractor, turning a failure into a logged None."""
        try:
            return extractor(*args)
        except Exception as e:
            error = SymbolExtractionError(field_name, node.kind)
            logger.warning(
                f"{error} at line {node.start_line}: {e}",
                extra={"field": field_name, "node_kind": node.kind},
            )
            return None

    def extract_documentation(self, lines: list[str], start_row: int) -> Optional[str]:
        """
        Collect the comment block directly above a definition.

        Scans up to ``DOC_COMMENT_LOOKBACK_LINES`` lines upward from
        ``start_row`` (0-based). Line comments and single-line block comments
        are accumulated; the scan stops at the first blank or code line.

        Returns:
            Comment texts joined with spaces, or None if there are none
        """
        doc_lines = []
        lowest_row = max(start_row - DOC_COMMENT_LOOKBACK_LINES, 0)
        for row in range(start_row - 1, lowest_row - 1, -1):
            if row >= len(lines):
                continue
            text = self._comment_text(lines[row].strip())
            if text is None:
                break
            if text:
                doc_lines.append(text)

        if not doc_lines:
            return None
        return " ".join(reversed(doc_lines))

    def _comment_text(self, line: str) -> Optional[str]:
        """Text of a one-line comment, or None if ``line`` is blank or code."""
        if not line:
            return None
        if line.startswith(self.line_comment_prefix):
            return line.lstrip(self.line_comment_prefix[0]).strip()

        opener, closer = self.block_comment_delimiters
        if line.startswith(opener):
            end = line.find(closer, len(opener))
            if end == -1:
                return None
            return line[len(opener):end].strip().lstrip("*").strip()

        return None
