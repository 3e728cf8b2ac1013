"""
SourceIR Builder. Parses contract source into the unified contract IR.

Two tree-sitter grammars are tried in a fixed order: the Solidity grammar
first, then the Rust grammar used by Stylus contracts. The first grammar
that parses the whole file without syntax errors decides the dialect; if
neither does, a ParseError is raised and no IR is produced.
"""

import logging
import re
from typing import Iterator, List, Optional, Tuple

from tree_sitter_language_pack import get_parser

from sentinel.contract_ir import (
    Dialect,
    FunctionDef,
    FunctionParam,
    ParsedContract,
    StructDef,
    StructField,
    Visibility,
)
from sentinel.exceptions import ParseError

logger = logging.getLogger(__name__)


_SOLIDITY_CONTAINERS = ("contract_declaration", "interface_declaration", "library_declaration")
_RECEIVE_RE = re.compile(r"^\s*(?:function\s+)?receive\b")


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

class SourceIRBuilder:
    """Build a ParsedContract from raw source text.

    Grammar parsers are created lazily and reused across calls. Tests may
    inject their own parser objects; anything exposing tree-sitter's
    ``parse(bytes)`` works.
    """

    def __init__(self, solidity_parser=None, rust_parser=None):
        self._solidity_parser = solidity_parser
        self._rust_parser = rust_parser

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, source: str, label: Optional[str] = None) -> ParsedContract:
        """Parse ``source`` and return its IR.

        Args:
            source: Full contract text.
            label: Optional file name or path used in diagnostics.

        Returns:
            ParsedContract tagged with exactly one dialect.

        Raises:
            ParseError: if the text is valid in neither grammar.
        """
        data = source.encode("utf-8")
        causes: List[str] = []

        tree = self._get_solidity_parser().parse(data)
        if not tree.root_node.has_error:
            logger.debug("Parsed %s as Solidity", label or "<source>")
            return self._build_solidity(tree.root_node, data, source, label)
        causes.append(f"solidity: {self._describe_error(tree.root_node)}")

        tree = self._get_rust_parser().parse(data)
        if not tree.root_node.has_error:
            logger.debug("Parsed %s as Rust", label or "<source>")
            return self._build_rust(tree.root_node, data, source, label)
        causes.append(f"rust: {self._describe_error(tree.root_node)}")

        raise ParseError(
            "Unrecognized or invalid contract source (" + "; ".join(causes) + ")",
            label=label,
            causes=causes,
        )

    # ------------------------------------------------------------------
    # Parser management
    # ------------------------------------------------------------------

    def _get_solidity_parser(self):
        if self._solidity_parser is None:
            self._solidity_parser = get_parser("solidity")
        return self._solidity_parser

    def _get_rust_parser(self):
        if self._rust_parser is None:
            self._rust_parser = get_parser("rust")
        return self._rust_parser

    # ------------------------------------------------------------------
    # Solidity walking
    # ------------------------------------------------------------------

    def _build_solidity(self, root, data: bytes, source: str, label: Optional[str]) -> ParsedContract:
        functions: List[FunctionDef] = []
        structures: List[StructDef] = []

        def visit_member(node):
            nt = node.type
            if nt == "function_definition":
                functions.append(self._parse_solidity_function(node, data))
            elif nt == "constructor_definition":
                functions.append(self._parse_solidity_special(node, data, "constructor"))
            elif nt == "fallback_receive_definition":
                kind = "receive" if _RECEIVE_RE.match(_text(node, data)) else "fallback"
                functions.append(self._parse_solidity_special(node, data, kind))
            elif nt == "struct_declaration":
                structures.append(self._parse_solidity_struct(node, data))

        for node in root.named_children:
            if node.type in _SOLIDITY_CONTAINERS:
                body = _field_or_child(node, "body", "contract_body")
                if body is None:
                    body = node
                for member in body.named_children:
                    visit_member(member)
            else:
                visit_member(node)

        return ParsedContract(
            dialect=Dialect.SOLIDITY,
            functions=tuple(functions),
            structures=tuple(structures),
            raw_source=source,
            label=label,
        )

    def _parse_solidity_function(self, node, data: bytes) -> FunctionDef:
        name_node = _field_or_child(node, "name", "identifier")
        name = _text(name_node, data) if name_node is not None else ""

        vis_node = _first_child(node, "visibility")
        visibility = _to_visibility(_text(vis_node, data) if vis_node is not None else "public")

        returns = _field_or_child(node, "return_type", "return_type_definition")
        return_type = None
        if returns is not None:
            return_types = [p.type_name for p in self._parse_solidity_params(returns, data)]
            return_type = ", ".join(return_types) if return_types else None

        body_node = _field_or_child(node, "body", "function_body")

        return FunctionDef(
            name=name,
            visibility=visibility,
            params=tuple(self._parse_solidity_params(node, data)),
            return_type=return_type,
            body=_text(body_node, data) if body_node is not None else "",
        )

    def _parse_solidity_special(self, node, data: bytes, name: str) -> FunctionDef:
        """Constructors, fallback and receive functions carry no identifier."""
        vis_node = _first_child(node, "visibility")
        default = "external" if name in ("fallback", "receive") else "public"
        visibility = _to_visibility(_text(vis_node, data) if vis_node is not None else default)
        body_node = _field_or_child(node, "body", "function_body")
        return FunctionDef(
            name=name,
            visibility=visibility,
            params=tuple(self._parse_solidity_params(node, data)),
            body=_text(body_node, data) if body_node is not None else "",
        )

    def _parse_solidity_params(self, node, data: bytes) -> List[FunctionParam]:
        params: List[FunctionParam] = []
        for p in _children_of_type(node, "parameter"):
            type_node = _field_or_child(p, "type", "type_name")
            name_node = _field_or_child(p, "name", "identifier", last=True)
            params.append(FunctionParam(
                name=_text(name_node, data) if name_node is not None else "",
                type_name=_text(type_node, data) if type_node is not None else _text(p, data),
            ))
        return params

    def _parse_solidity_struct(self, node, data: bytes) -> StructDef:
        name_node = _field_or_child(node, "name", "identifier")
        # older grammar releases put members directly under the declaration
        body = _field_or_child(node, "body", "struct_body")
        if body is None:
            body = node
        fields: List[StructField] = []
        for member in _children_of_type(body, "struct_member"):
            type_node = _field_or_child(member, "type", "type_name")
            field_name = _field_or_child(member, "name", "identifier", last=True)
            fields.append(StructField(
                name=_text(field_name, data) if field_name is not None else "",
                type_name=_text(type_node, data) if type_node is not None else "",
            ))
        return StructDef(
            name=_text(name_node, data) if name_node is not None else "",
            fields=tuple(fields),
        )

    # ------------------------------------------------------------------
    # Rust walking
    # ------------------------------------------------------------------

    def _build_rust(self, root, data: bytes, source: str, label: Optional[str]) -> ParsedContract:
        functions: List[FunctionDef] = []
        structures: List[StructDef] = []

        def visit_items(container):
            for item in container.named_children:
                nt = item.type
                if nt == "function_item":
                    functions.append(self._parse_rust_function(item, data))
                elif nt == "struct_item":
                    structures.append(self._parse_rust_struct(item, data))
                elif nt in ("impl_item", "mod_item"):
                    body = item.child_by_field_name("body")
                    if body is not None:
                        visit_items(body)

        visit_items(root)

        return ParsedContract(
            dialect=Dialect.RUST,
            functions=tuple(functions),
            structures=tuple(structures),
            raw_source=source,
            label=label,
        )

    def _parse_rust_function(self, node, data: bytes) -> FunctionDef:
        name_node = node.child_by_field_name("name")
        visibility = Visibility.PUBLIC if _first_child(node, "visibility_modifier") is not None else Visibility.PRIVATE

        params: List[FunctionParam] = []
        params_node = node.child_by_field_name("parameters")
        if params_node is not None:
            for p in params_node.named_children:
                if p.type == "self_parameter":
                    params.append(FunctionParam(name="self", type_name=_text(p, data)))
                elif p.type == "parameter":
                    pattern = p.child_by_field_name("pattern")
                    ptype = p.child_by_field_name("type")
                    params.append(FunctionParam(
                        name=_text(pattern, data) if pattern is not None else "",
                        type_name=_text(ptype, data) if ptype is not None else "",
                    ))

        return_node = node.child_by_field_name("return_type")
        body_node = node.child_by_field_name("body")

        return FunctionDef(
            name=_text(name_node, data) if name_node is not None else "",
            visibility=visibility,
            params=tuple(params),
            return_type=_text(return_node, data) if return_node is not None else None,
            body=_text(body_node, data) if body_node is not None else "",
        )

    def _parse_rust_struct(self, node, data: bytes) -> StructDef:
        name_node = node.child_by_field_name("name")
        body = node.child_by_field_name("body")
        fields: List[StructField] = []
        if body is not None:
            if body.type == "field_declaration_list":
                for decl in _children_of_type(body, "field_declaration"):
                    fname = decl.child_by_field_name("name")
                    ftype = decl.child_by_field_name("type")
                    fields.append(StructField(
                        name=_text(fname, data) if fname is not None else "",
                        type_name=_text(ftype, data) if ftype is not None else "",
                    ))
            else:
                # tuple struct: positional fields are named by index
                types = [c for c in body.named_children if c.type not in ("visibility_modifier", "attribute_item")]
                for idx, ftype in enumerate(types):
                    fields.append(StructField(name=str(idx), type_name=_text(ftype, data)))
        return StructDef(
            name=_text(name_node, data) if name_node is not None else "",
            fields=tuple(fields),
        )

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def _describe_error(self, root) -> str:
        node = _first_error_node(root)
        if node is None:
            return "syntax error"
        row, col = node.start_point[0], node.start_point[1]
        kind = "missing token" if node.is_missing else "syntax error"
        return f"{kind} at line {row + 1}, column {col + 1}"


# ---------------------------------------------------------------------------
# Node helpers
# ---------------------------------------------------------------------------

def _text(node, data: bytes) -> str:
    return data[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def _children_of_type(node, node_type: str) -> Iterator:
    return (c for c in node.named_children if c.type == node_type)


def _first_child(node, node_type: str):
    return next(_children_of_type(node, node_type), None)


def _last_child(node, node_type: str):
    found = None
    for child in _children_of_type(node, node_type):
        found = child
    return found


def _field_or_child(node, field_name: str, node_type: str, last: bool = False):
    """Field lookup with a fallback to the first (or last) child of a type."""
    found = node.child_by_field_name(field_name)
    if found is not None:
        return found
    return _last_child(node, node_type) if last else _first_child(node, node_type)


def _first_error_node(root):
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


def _to_visibility(vis_str: str) -> Visibility:
    try:
        return Visibility(vis_str.strip())
    except ValueError:
        return Visibility.PUBLIC


# ---------------------------------------------------------------------------
# Convenience
# ---------------------------------------------------------------------------

_default_builder: Optional[SourceIRBuilder] = None


def build_contract(source: str, label: Optional[str] = None) -> ParsedContract:
    """Parse ``source`` with a shared builder instance."""
    global _default_builder
    if _default_builder is None:
        _default_builder = SourceIRBuilder()
    return _default_builder.build(source, label)


def detect_dialect(source: str) -> Tuple[Optional[Dialect], Optional[str]]:
    """Return ``(dialect, None)`` or ``(None, error message)`` without raising."""
    try:
        return build_contract(source).dialect, None
    except ParseError as exc:
        return None, str(exc)
