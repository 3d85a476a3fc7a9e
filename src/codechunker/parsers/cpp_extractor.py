"""
C and C++ Symbol Extractor.

This module extracts LSP-style symbol metadata from tree-sitter-cpp syntax
trees without needing a language server. It runs on the arena copy of the
tree, either on a whole file or on a single chunk's boundary node.

What Gets Extracted:
    - **Functions**: Free function definitions (kind ``function``)
    - **Methods**: Member function definitions and prototypes in class bodies
    - **Constructors**: Member functions named after their class
    - **Types**: class / struct / union / enum specifiers that have a body
    - **Namespaces**: Named namespace definitions
    - **Fields**: Data member declarations

Metadata Per Symbol (each best-effort):
    - documentation: ``//`` or one-line ``/* */`` comments directly above
    - signature, return_type, parameters: functions only
    - is_const / is_virtual / is_static: functions and fields
    - base_classes: classes and structs
    - scope: members of a class, struct or union body
    - parent_symbol: enclosing class/struct/union/namespace, or the
      qualifier of an out-of-class definition such as ``Foo::bar``

Tree-Sitter Grammar Reference:
    - function_definition: type, declarator (function_declarator), body
    - function_declarator: declarator (name), parameters (parameter_list)
    - class_specifier / struct_specifier: name, base_class_clause, body
    - field_declaration: type, declarator (field_identifier or function_declarator)
    - access_specifier: public / private / protected inside field_declaration_list

Author: CodeChunker Team
"""

import re
from typing import Optional

from ..constants import UNNAMED_PARAMETER, SupportedLanguage
from ..logging import get_logger
from ..models.chunk import SymbolInfo, SymbolKind, SymbolParameter, SymbolScope
from .base import BaseSymbolExtractor, ExtractionContext
from .syntax import SyntaxNode, SyntaxTree


logger = get_logger(__name__)


TYPE_SPECIFIER_KINDS = {
    "class_specifier": SymbolKind.CLASS,
    "struct_specifier": SymbolKind.STRUCT,
    "union_specifier": SymbolKind.UNION,
    "enum_specifier": SymbolKind.ENUM,
}

# Enclosing nodes that name a parent symbol
PARENT_KINDS = frozenset({
    "class_specifier",
    "struct_specifier",
    "union_specifier",
    "namespace_definition",
})

NAME_KINDS = frozenset({
    "identifier",
    "field_identifier",
    "type_identifier",
    "namespace_identifier",
    "operator_name",
    "destructor_name",
})

RETURN_TYPE_KINDS = frozenset({
    "primitive_type",
    "type_identifier",
    "qualified_identifier",
    "template_type",
    "sized_type_specifier",
    "placeholder_type_specifier",
})

BASE_CLASS_KINDS = frozenset({"type_identifier", "qualified_identifier", "template_type"})

PARAMETER_KINDS = frozenset({"parameter_declaration", "optional_parameter_declaration"})

POINTER_DECLARATOR_KINDS = frozenset({"pointer_declarator", "abstract_pointer_declarator"})
REFERENCE_DECLARATOR_KINDS = frozenset({"reference_declarator", "abstract_reference_declarator"})
WRAPPER_DECLARATOR_KINDS = POINTER_DECLARATOR_KINDS | REFERENCE_DECLARATOR_KINDS
# Declarators that put the parameter name inside the type: void (*cb)(int), int v[]
NESTED_DECLARATOR_KINDS = frozenset({
    "function_declarator",
    "parenthesized_declarator",
    "array_declarator",
})

_CONST = re.compile(r"\bconst\b")
_VIRTUAL = re.compile(r"\bvirtual\b")
_STATIC = re.compile(r"\bstatic\b")


class CppSymbolExtractor(BaseSymbolExtractor):
    """
    Symbol extractor for C and C++ using the tree-sitter-cpp grammar.

    Example:
        extractor = CppSymbolExtractor()
        for symbol in extractor.extract(tree):
            print(symbol.kind.value, symbol.get_qualified_name(), symbol.scope)
    """

    usage_kinds = frozenset({
        "identifier",
        "field_identifier",
        "type_identifier",
        "namespace_identifier",
    })

    declaration_contexts = frozenset({
        "function_declarator",
        "type_identifier",
        "field_declaration",
        "parameter_declaration",
        "optional_parameter_declaration",
        "class_specifier",
        "struct_specifier",
        "enum_specifier",
        "union_specifier",
        "namespace_definition",
    })

    @property
    def language(self) -> str:
        return SupportedLanguage.CPP.value

    def build_symbol(self, context: ExtractionContext, node: SyntaxNode) -> Optional[SymbolInfo]:
        if node.kind == "function_definition":
            return self._build_function(context, node)
        if node.kind in TYPE_SPECIFIER_KINDS:
            return self._build_type(context, node)
        if node.kind == "namespace_definition":
            return self._build_namespace(context, node)
        if node.kind == "field_declaration":
            return self._build_field(context, node)
        if node.kind == "declaration" and self._member_list(context.tree, node) is not None:
            # Constructor and destructor prototypes have no return type and
            # parse as plain declarations inside a class body.
            return self._build_prototype(context, node)
        return None

    # ------------------------------------------------------------------
    # Symbol builders
    # ------------------------------------------------------------------

    def _build_function(self, context: ExtractionContext, node: SyntaxNode) -> Optional[SymbolInfo]:
        tree = context.tree
        declarator, _ = self._unwrap_declarator(tree, tree.child_by_field(node, "declarator"))
        if declarator is None or declarator.kind != "function_declarator":
            return None

        name, qualifier = self._resolve_name(tree, tree.child_by_field(declarator, "declarator"))
        if not name:
            return None

        member_list = self._member_list(tree, node)
        kind = self._function_kind(tree, name, qualifier, member_list)
        return self._function_symbol(context, node, declarator, name, qualifier, kind, member_list)

    def _build_prototype(self, context: ExtractionContext, node: SyntaxNode) -> Optional[SymbolInfo]:
        """Member function declared (not defined) inside a class body."""
        tree = context.tree
        declarator, _ = self._unwrap_declarator(tree, tree.child_by_field(node, "declarator"))
        if declarator is None or declarator.kind != "function_declarator":
            return None

        name, qualifier = self._resolve_name(tree, tree.child_by_field(declarator, "declarator"))
        if not name:
            return None

        member_list = self._member_list(tree, node)
        kind = self._function_kind(tree, name, qualifier, member_list)
        return self._function_symbol(context, node, declarator, name, qualifier, kind, member_list)

    def _function_symbol(
        self,
        context: ExtractionContext,
        node: SyntaxNode,
        declarator: SyntaxNode,
        name: str,
        qualifier: Optional[str],
        kind: SymbolKind,
        member_list: Optional[SyntaxNode],
    ) -> SymbolInfo:
        tree = context.tree
        prefix = tree.slice(node.start_byte, declarator.start_byte)

        return self._new_symbol(
            context,
            node,
            name,
            kind,
            documentation=self._enrich("documentation", node, self._documentation, tree, node),
            signature=self._enrich("signature", node, self._signature, tree, node),
            return_type=self._enrich("return_type", node, self._return_type, tree, node),
            parameters=self._enrich("parameters", node, self._parameters, tree, declarator) or [],
            parent_symbol=self._enrich("parent_symbol", node, self._parent_symbol, tree, node, qualifier),
            scope=self._enrich("scope", node, self._scope, context, node, member_list),
            is_static=self._enrich("is_static", node, self._has_word, _STATIC, prefix),
            is_virtual=self._enrich("is_virtual", node, self._has_word, _VIRTUAL, prefix),
            is_const=self._enrich("is_const", node, self._is_const_method, tree, declarator),
        )

    def _build_type(self, context: ExtractionContext, node: SyntaxNode) -> Optional[SymbolInfo]:
        tree = context.tree
        # Forward declarations and elaborated type uses have no body
        if tree.child_by_field(node, "body") is None:
            return None

        name, _ = self._resolve_name(tree, tree.child_by_field(node, "name"))
        if not name:
            return None

        kind = TYPE_SPECIFIER_KINDS[node.kind]
        member_list = self._member_list(tree, node)
        base_classes = None
        if kind in (SymbolKind.CLASS, SymbolKind.STRUCT):
            base_classes = self._enrich("base_classes", node, self._base_classes, tree, node)

        return self._new_symbol(
            context,
            node,
            name,
            kind,
            documentation=self._enrich("documentation", node, self._documentation, tree, node),
            parent_symbol=self._enrich("parent_symbol", node, self._parent_symbol, tree, node, None),
            scope=self._enrich("scope", node, self._scope, context, node, member_list),
            base_classes=base_classes or [],
        )

    def _build_namespace(self, context: ExtractionContext, node: SyntaxNode) -> Optional[SymbolInfo]:
        tree = context.tree
        name_node = tree.child_by_field(node, "name")
        if name_node is None:
            return None  # anonymous namespace

        name = tree.text(name_node).strip()
        if not name:
            return None

        return self._new_symbol(
            context,
            node,
            name,
            SymbolKind.NAMESPACE,
            documentation=self._enrich("documentation", node, self._documentation, tree, node),
            parent_symbol=self._enrich("parent_symbol", node, self._parent_symbol, tree, node, None),
        )

    def _build_field(self, context: ExtractionContext, node: SyntaxNode) -> Optional[SymbolInfo]:
        tree = context.tree
        declarator_root = tree.child_by_field(node, "declarator")
        declarator, _ = self._unwrap_declarator(tree, declarator_root)
        if declarator is None:
            return None

        if declarator.kind == "function_declarator":
            return self._build_prototype(context, node)

        # int x = 1; int values[8];
        while declarator is not None and declarator.kind in ("init_declarator", "array_declarator"):
            declarator, _ = self._unwrap_declarator(tree, tree.child_by_field(declarator, "declarator"))
        if declarator is None:
            return None

        name, _ = self._resolve_name(tree, declarator)
        if not name:
            return None

        member_list = self._member_list(tree, node)
        prefix = tree.slice(node.start_byte, declarator_root.start_byte)

        return self._new_symbol(
            context,
            node,
            name,
            SymbolKind.FIELD,
            documentation=self._enrich("documentation", node, self._documentation, tree, node),
            parent_symbol=self._enrich("parent_symbol", node, self._parent_symbol, tree, node, None),
            scope=self._enrich("scope", node, self._scope, context, node, member_list),
            is_static=self._enrich("is_static", node, self._has_word, _STATIC, prefix),
            is_virtual=False,
            is_const=self._enrich("is_const", node, self._has_word, _CONST, prefix),
        )

    # ------------------------------------------------------------------
    # Names and declarators
    # ------------------------------------------------------------------

    def _resolve_name(
        self, tree: SyntaxTree, node: Optional[SyntaxNode]
    ) -> tuple[Optional[str], Optional[str]]:
        """
        Resolve a declarator or name node to (simple name, qualifier).

        ``Foo::Bar::baz`` resolves to ("baz", "Foo::Bar"); ``Foo<int>``
        resolves to ("Foo", None).
        """
        qualifiers = []
        while node is not None and node.kind == "qualified_identifier":
            scope = tree.child_by_field(node, "scope")
            if scope is not None:
                qualifiers.append(tree.text(scope))
            node = tree.child_by_field(node, "name")

        if node is not None and node.kind in ("template_type", "template_function"):
            node = tree.child_by_field(node, "name")

        if node is None or node.kind not in NAME_KINDS:
            return None, None

        return tree.text(node), "::".join(qualifiers) or None

    def _unwrap_declarator(
        self, tree: SyntaxTree, declarator: Optional[SyntaxNode]
    ) -> tuple[Optional[SyntaxNode], str]:
        """Strip pointer/reference declarators, returning the inner node and its ``*``/``&`` suffix."""
        suffix = ""
        while declarator is not None and declarator.kind in WRAPPER_DECLARATOR_KINDS:
            if declarator.kind in POINTER_DECLARATOR_KINDS:
                suffix += "*"
            else:
                children = tree.children(declarator)
                suffix += tree.text(children[0]) if children else "&"

            inner = tree.child_by_field(declarator, "declarator")
            if inner is None:
                named = tree.named_children(declarator)
                inner = named[-1] if named else None
            declarator = inner
        return declarator, suffix

    def _function_kind(
        self,
        tree: SyntaxTree,
        name: str,
        qualifier: Optional[str],
        member_list: Optional[SyntaxNode],
    ) -> SymbolKind:
        if member_list is not None:
            owner = tree.parent(member_list)
            owner_name = None
            if owner is not None:
                owner_name, _ = self._resolve_name(tree, tree.child_by_field(owner, "name"))
            if owner_name and name == owner_name:
                return SymbolKind.CONSTRUCTOR
            return SymbolKind.METHOD

        if qualifier:
            # Out-of-class constructor definition: Foo::Foo()
            owner_name = qualifier.rsplit("::", 1)[-1].split("<", 1)[0]
            if name == owner_name:
                return SymbolKind.CONSTRUCTOR

        return SymbolKind.FUNCTION

    def _member_list(self, tree: SyntaxTree, node: SyntaxNode) -> Optional[SyntaxNode]:
        """Nearest enclosing class body, unless a function body comes first."""
        for ancestor in tree.ancestors(node):
            if ancestor.kind == "field_declaration_list":
                return ancestor
            if ancestor.kind == "compound_statement":
                return None
        return None

    # ------------------------------------------------------------------
    # Field extractors (run through _enrich)
    # ------------------------------------------------------------------

    def _documentation(self, tree: SyntaxTree, node: SyntaxNode) -> Optional[str]:
        anchor = node
        parent = tree.parent(node)
        if parent is not None and parent.kind == "template_declaration":
            anchor = parent
        return self.extract_documentation(tree.lines, anchor.start_point[0])

    def _signature(self, tree: SyntaxTree, node: SyntaxNode) -> str:
        end_byte = node.end_byte
        stop = tree.child_by_field(node, "body")
        initializers = tree.first_child_of_kind(node, ("field_initializer_list",))
        if initializers is not None:
            stop = initializers
        if stop is not None:
            end_byte = stop.start_byte

        signature = " ".join(tree.slice(node.start_byte, end_byte).split())
        return signature.rstrip(";").rstrip()

    def _return_type(self, tree: SyntaxTree, node: SyntaxNode) -> Optional[str]:
        type_node = tree.child_by_field(node, "type")
        if type_node is None or type_node.kind not in RETURN_TYPE_KINDS:
            return None

        qualifiers = [
            tree.text(child)
            for child in tree.children(node)
            if child.kind == "type_qualifier" and child.end_byte <= type_node.start_byte
        ]
        _, suffix = self._unwrap_declarator(tree, tree.child_by_field(node, "declarator"))
        return " ".join([*qualifiers, tree.text(type_node)]) + suffix

    def _parameters(self, tree: SyntaxTree, declarator: SyntaxNode) -> list[SymbolParameter]:
        parameter_list = tree.child_by_field(declarator, "parameters")
        if parameter_list is None:
            return []

        declarations = [
            child for child in tree.named_children(parameter_list) if child.kind in PARAMETER_KINDS
        ]

        # f(void) declares no parameters
        if len(declarations) == 1 and tree.child_by_field(declarations[0], "declarator") is None:
            type_node = tree.child_by_field(declarations[0], "type")
            if type_node is not None and tree.text(type_node) == "void":
                return []

        return [self._parameter(tree, declaration) for declaration in declarations]

    def _parameter(self, tree: SyntaxTree, declaration: SyntaxNode) -> SymbolParameter:
        type_node = tree.child_by_field(declaration, "type")
        inner, suffix = self._unwrap_declarator(tree, tree.child_by_field(declaration, "declarator"))

        nested = False
        while inner is not None and inner.kind in NESTED_DECLARATOR_KINDS:
            nested = True
            child = tree.child_by_field(inner, "declarator")
            if child is None:
                named = tree.named_children(inner)
                child = named[-1] if named else None
            inner, _ = self._unwrap_declarator(tree, child)

        name, _ = self._resolve_name(tree, inner)

        if nested:
            # The type is the declaration with the name cut out: void (*)(int)
            text = tree.text(declaration)
            if name is not None:
                text = tree.slice(declaration.start_byte, inner.start_byte) + tree.slice(
                    inner.end_byte, declaration.end_byte
                )
            return SymbolParameter(name=name or UNNAMED_PARAMETER, type=" ".join(text.split()))

        param_type = None
        if type_node is not None:
            qualifiers = [
                tree.text(child)
                for child in tree.children(declaration)
                if child.kind == "type_qualifier" and child.end_byte <= type_node.start_byte
            ]
            param_type = " ".join([*qualifiers, tree.text(type_node)]) + suffix

        return SymbolParameter(name=name or UNNAMED_PARAMETER, type=param_type)

    def _is_const_method(self, tree: SyntaxTree, declarator: SyntaxNode) -> bool:
        parameter_list = tree.child_by_field(declarator, "parameters")
        start = parameter_list.end_byte if parameter_list is not None else declarator.start_byte
        return bool(_CONST.search(tree.slice(start, declarator.end_byte)))

    def _has_word(self, pattern: re.Pattern, text: str) -> bool:
        return bool(pattern.search(text))

    def _base_classes(self, tree: SyntaxTree, node: SyntaxNode) -> list[str]:
        clause = tree.first_child_of_kind(node, ("base_class_clause",))
        if clause is None:
            return []
        return [
            tree.text(child)
            for child in tree.named_children(clause)
            if child.kind in BASE_CLASS_KINDS
        ]

    def _scope(
        self,
        context: ExtractionContext,
        node: SyntaxNode,
        member_list: Optional[SyntaxNode],
    ) -> Optional[SymbolScope]:
        """Access level in effect for ``node`` inside ``member_list``."""
        if member_list is None:
            return None

        tree = context.tree
        scopes = context.scopes.get(member_list.index)
        if scopes is None:
            scopes = self._member_scopes(tree, member_list)
            context.scopes[member_list.index] = scopes

        # The direct child of the member list that holds the node
        item = node
        while item.parent is not None and item.parent != member_list.index:
            item = tree.node(item.parent)
        return scopes.get(item.index)

    def _member_scopes(
        self, tree: SyntaxTree, member_list: SyntaxNode
    ) -> dict[int, Optional[SymbolScope]]:
        """Map each item of a class body to the access level in effect for it."""
        owner = tree.parent(member_list)
        if owner is not None and owner.kind == "class_specifier":
            current = SymbolScope.PRIVATE
        else:
            current = SymbolScope.PUBLIC

        scopes: dict[int, Optional[SymbolScope]] = {}
        for child in tree.children(member_list):
            if child.kind == "access_specifier":
                keyword = tree.text(child).split(":", 1)[0].strip()
                try:
                    current = SymbolScope(keyword)
                except ValueError:
                    logger.debug(f"Unknown access specifier: {keyword!r}")
                continue
            scopes[child.index] = current
        return scopes

    def _parent_symbol(
        self, tree: SyntaxTree, node: SyntaxNode, qualifier: Optional[str]
    ) -> Optional[str]:
        for ancestor in tree.ancestors(node):
            if ancestor.kind not in PARENT_KINDS:
                continue
            name_node = tree.child_by_field(ancestor, "name")
            if name_node is None:
                continue
            if ancestor.kind == "namespace_definition":
                name = tree.text(name_node).strip()
            else:
                name, _ = self._resolve_name(tree, name_node)
            if name:
                return name
        return qualifier
