"""
Arena-backed syntax tree.

tree-sitter trees are copied into a flat list of ``SyntaxNode`` records that
refer to each other by index (children lists and a parent index). The copy
has no reference cycles, exposes the parent links the symbol extractor needs
for ancestor walks, and is freed as a whole once a chunking call returns.

Chunks and symbols never hold nodes; they hold line ranges into the source.

Example:
    tree = SyntaxTree.from_tree_sitter(ts_tree, source_bytes)
    for node in tree.walk():
        if node.kind == "function_definition":
            print(node.start_line, tree.text(node))
"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import Iterable, Iterator, Optional


@dataclass
class SyntaxNode:
    """One node of the arena.

    Points are tree-sitter's 0-based (row, byte column) pairs.
    """

    index: int
    kind: str
    start_byte: int
    end_byte: int
    start_point: tuple[int, int]
    end_point: tuple[int, int]
    is_named: bool = True
    field_name: Optional[str] = None
    parent: Optional[int] = None
    children: list[int] = field(default_factory=list)

    @property
    def start_line(self) -> int:
        return self.start_point[0] + 1

    @property
    def end_line(self) -> int:
        """1-indexed last line holding any of the node's text.

        Nodes that swallow their trailing newline (preprocessor lines, for
        instance) end at column 0 of the next row; that row is not counted.
        """
        row, column = self.end_point
        if column == 0 and row > self.start_point[0]:
            return row
        return row + 1

    @property
    def start_column(self) -> int:
        return self.start_point[1]

    @property
    def end_column(self) -> int:
        return self.end_point[1]


class SyntaxTree:
    """Flat, index-linked copy of a parse tree plus the source it spans."""

    def __init__(self, source: bytes, nodes: list[SyntaxNode]):
        self.source = source
        self.nodes = nodes

    @classmethod
    def from_tree_sitter(cls, tree, source: bytes) -> "SyntaxTree":
        """Copy a tree-sitter ``Tree`` into an arena.

        Uses a ``TreeCursor`` so field names come along and deep trees do
        not hit the recursion limit.
        """
        nodes: list[SyntaxNode] = []

        def append(ts_node, parent: Optional[int], field_name: Optional[str]) -> int:
            index = len(nodes)
            nodes.append(
                SyntaxNode(
                    index=index,
                    kind=ts_node.type,
                    start_byte=ts_node.start_byte,
                    end_byte=ts_node.end_byte,
                    start_point=(ts_node.start_point[0], ts_node.start_point[1]),
                    end_point=(ts_node.end_point[0], ts_node.end_point[1]),
                    is_named=ts_node.is_named,
                    field_name=field_name,
                    parent=parent,
                )
            )
            if parent is not None:
                nodes[parent].children.append(index)
            return index

        cursor = tree.walk()
        path = [append(cursor.node, None, None)]

        while True:
            if cursor.goto_first_child():
                path.append(append(cursor.node, path[-1], cursor.field_name))
                continue

            # Leaf: climb until a sibling is found or the root is left
            while True:
                path.pop()
                if cursor.goto_next_sibling():
                    path.append(append(cursor.node, path[-1], cursor.field_name))
                    break
                if not cursor.goto_parent():
                    return cls(source, nodes)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @property
    def root(self) -> Optional[SyntaxNode]:
        return self.nodes[0] if self.nodes else None

    def node(self, index: int) -> SyntaxNode:
        return self.nodes[index]

    def children(self, node: SyntaxNode) -> list[SyntaxNode]:
        return [self.nodes[i] for i in node.children]

    def named_children(self, node: SyntaxNode) -> list[SyntaxNode]:
        return [self.nodes[i] for i in node.children if self.nodes[i].is_named]

    def parent(self, node: SyntaxNode) -> Optional[SyntaxNode]:
        if node.parent is None:
            return None
        return self.nodes[node.parent]

    def ancestors(self, node: SyntaxNode) -> Iterator[SyntaxNode]:
        """Yield the parent, grandparent, ... up to the root."""
        current = self.parent(node)
        while current is not None:
            yield current
            current = self.parent(current)

    def child_by_field(self, node: SyntaxNode, field_name: str) -> Optional[SyntaxNode]:
        for index in node.children:
            if self.nodes[index].field_name == field_name:
                return self.nodes[index]
        return None

    def first_child_of_kind(
        self, node: SyntaxNode, kinds: Iterable[str]
    ) -> Optional[SyntaxNode]:
        kinds = frozenset(kinds)
        for index in node.children:
            if self.nodes[index].kind in kinds:
                return self.nodes[index]
        return None

    def find_child(self, node: SyntaxNode, kinds: Iterable[str]) -> Optional[SyntaxNode]:
        """Find a child of one of ``kinds``, looking at children then grandchildren."""
        kinds = frozenset(kinds)
        direct = self.first_child_of_kind(node, kinds)
        if direct is not None:
            return direct
        for index in node.children:
            grandchild = self.first_child_of_kind(self.nodes[index], kinds)
            if grandchild is not None:
                return grandchild
        return None

    def walk(self, node: Optional[SyntaxNode] = None) -> Iterator[SyntaxNode]:
        """Pre-order, source-order traversal of ``node``'s subtree."""
        start = node if node is not None else self.root
        if start is None:
            return
        stack = [start.index]
        while stack:
            current = self.nodes[stack.pop()]
            yield current
            stack.extend(reversed(current.children))

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def text(self, node: SyntaxNode) -> str:
        return self.slice(node.start_byte, node.end_byte)

    def slice(self, start_byte: int, end_byte: int) -> str:
        return self.source[start_byte:end_byte].decode("utf-8", errors="replace")

    @cached_property
    def lines(self) -> list[str]:
        """Source split on newlines, indexed by 0-based row."""
        return self.source.decode("utf-8", errors="replace").split("\n")
