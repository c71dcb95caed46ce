"""Anchor locator.

Finds the four places in `container.go` that every module is registered in:

- the import block,
- the fields of the container struct,
- the keyed literal returned by the container constructor,
- the statement list of the route registration method.

Only top-level declarations are searched and method bodies are treated as a
flat statement list. Lookups raise AnchorNotFound / AnchorShapeMismatch; the
import block is the exception and is reported as `None` when absent, because
the mutator knows how to create one.
"""

import enum
from dataclasses import dataclass

from tree_sitter import Node

from gozilla.exceptions import AnchorNotFound, AnchorShapeMismatch
from gozilla.wiring.source import SourceDocument


class AnchorKind(str, enum.Enum):
    IMPORTS = "imports"
    TYPE = "type"
    CONSTRUCTOR = "constructor"
    METHOD = "method"


def _named(node: Node, *types: str) -> list[Node]:
    return [c for c in node.named_children if c.type != "comment" and (not types or c.type in types)]


def _statements(block: Node) -> list[Node]:
    # Newer grammars wrap block contents in a statement_list node.
    for child in block.named_children:
        if child.type == "statement_list":
            return _named(child)
    return _named(block)


def delimiter(node: Node, token: str, last: bool = False) -> Node | None:
    found = [c for c in node.children if c.type == token]
    if not found:
        return None
    return found[-1] if last else found[0]


def _unquote(literal: str) -> str:
    if len(literal) >= 2 and literal[0] == literal[-1] and literal[0] in "\"`":
        return literal[1:-1]
    return literal


# --- Imports ---


@dataclass
class ImportBlock:
    declaration: Node
    spec_list: Node | None
    """`import_spec_list` of a grouped declaration, None for `import "x"`."""
    specs: list[Node]


def import_path(doc: SourceDocument, spec: Node) -> str:
    path_node = spec.child_by_field_name("path")
    return _unquote(doc.text(path_node if path_node is not None else spec))


def _import_specs(declaration: Node) -> tuple[Node | None, list[Node]]:
    spec_list = next((c for c in declaration.named_children if c.type == "import_spec_list"), None)
    if spec_list is not None:
        return spec_list, _named(spec_list, "import_spec")
    return None, _named(declaration, "import_spec")


def import_name(doc: SourceDocument, spec: Node) -> str | None:
    """Alias of an import spec (`web`, `_`, `.`), None when it has none."""
    name_node = spec.child_by_field_name("name")
    return doc.text(name_node) if name_node is not None else None


def all_import_specs(doc: SourceDocument) -> list[Node]:
    specs = []
    for declaration in doc.top_level("import_declaration"):
        specs.extend(_import_specs(declaration)[1])
    return specs


def all_import_paths(doc: SourceDocument) -> list[str]:
    return [import_path(doc, spec) for spec in all_import_specs(doc)]


def import_qualifier(doc: SourceDocument, path: str, default: str) -> str | None:
    """Name the file uses for the package at `path`.

    That is the alias of its import, `default` for a plain import and `""` for a
    dot import. None when `path` is not imported, or only as a blank `_` import.
    """
    for spec in all_import_specs(doc):
        if import_path(doc, spec) != path:
            continue
        name = import_name(doc, spec)
        if name is None:
            return default
        if name != "_":
            return "" if name == "." else name
    return None


def locate_imports(doc: SourceDocument) -> ImportBlock | None:
    """First top-level import declaration, skipping a lone cgo `import "C"`."""
    for declaration in doc.top_level("import_declaration"):
        spec_list, specs = _import_specs(declaration)
        if spec_list is None and len(specs) == 1 and import_path(doc, specs[0]) == "C":
            continue
        return ImportBlock(declaration=declaration, spec_list=spec_list, specs=specs)
    return None


# --- Aggregate type ---


@dataclass
class StructAnchor:
    spec: Node
    field_list: Node
    fields: list[Node]


def field_names(doc: SourceDocument, field: Node) -> list[str]:
    """Names declared by one field_declaration, embedded fields included."""
    names = [doc.text(n) for n in field.children_by_field_name("name")]
    if names:
        return names
    type_node = field.child_by_field_name("type")
    if type_node is None:
        return []
    embedded = doc.text(type_node).lstrip("*").split("[", 1)[0]
    return [embedded.rsplit(".", 1)[-1]]


def locate_struct(doc: SourceDocument, name: str) -> StructAnchor:
    for declaration in doc.top_level("type_declaration"):
        for spec in _named(declaration, "type_spec", "type_alias"):
            name_node = spec.child_by_field_name("name")
            if name_node is None or doc.text(name_node) != name:
                continue
            type_node = spec.child_by_field_name("type")
            if spec.type != "type_spec" or type_node is None or type_node.type != "struct_type":
                found = type_node.type if type_node is not None else spec.type
                raise AnchorShapeMismatch(AnchorKind.TYPE, name, f"type {name} is not a struct ({found})")
            field_list = next(c for c in type_node.named_children if c.type == "field_declaration_list")
            return StructAnchor(spec=spec, field_list=field_list, fields=_named(field_list, "field_declaration"))
    raise AnchorNotFound(AnchorKind.TYPE, name, f"type {name} not found")


# --- Constructor result ---


@dataclass
class LiteralAnchor:
    function: Node
    literal: Node
    """The `literal_value` node, braces included."""
    elements: list[Node]


def element_key(doc: SourceDocument, element: Node) -> str | None:
    if element.type != "keyed_element":
        return None
    key = element.child_by_field_name("key")
    if key is None:
        key = _named(element)[0]
    return doc.text(key).strip()


def element_value(element: Node) -> Node:
    value = element.child_by_field_name("value")
    return value if value is not None else _named(element)[-1]


def _composite_literal(expression: Node) -> Node | None:
    if expression.type == "unary_expression":
        operator = expression.child_by_field_name("operator")
        if operator is None or operator.type != "&":
            return None
        expression = expression.child_by_field_name("operand")
    if expression is None or expression.type != "composite_literal":
        return None
    return expression.child_by_field_name("body")


def locate_constructor_literal(doc: SourceDocument, name: str) -> LiteralAnchor:
    for function in doc.top_level("function_declaration"):
        name_node = function.child_by_field_name("name")
        if name_node is None or doc.text(name_node) != name:
            continue
        body = function.child_by_field_name("body")
        statements = _statements(body) if body is not None else []
        returns = [s for s in statements if s.type == "return_statement"]
        if len(returns) != 1:
            raise AnchorShapeMismatch(
                AnchorKind.CONSTRUCTOR, name, f"func {name} has {len(returns)} top-level return statements, expected 1"
            )
        # First composite literal among the values, as in `return &Container{...}, nil`.
        values = []
        for node in _named(returns[0]):
            values.extend(_named(node) if node.type == "expression_list" else [node])
        literal = next((lit for lit in map(_composite_literal, values) if lit is not None), None)
        if literal is None:
            raise AnchorShapeMismatch(
                AnchorKind.CONSTRUCTOR, name, f"func {name} does not return a composite literal"
            )
        elements = _named(literal)
        if any(e.type != "keyed_element" for e in elements):
            raise AnchorShapeMismatch(
                AnchorKind.CONSTRUCTOR, name, f"func {name} returns a literal with positional elements"
            )
        return LiteralAnchor(function=function, literal=literal, elements=elements)
    raise AnchorNotFound(AnchorKind.CONSTRUCTOR, name, f"func {name} not found")


# --- Registration method ---


@dataclass
class MethodAnchor:
    method: Node
    body: Node
    statements: list[Node]
    receiver: str | None


def _receiver(doc: SourceDocument, method: Node) -> tuple[str | None, str]:
    """(receiver variable, receiver base type) of a method declaration."""
    params = method.child_by_field_name("receiver")
    declaration = _named(params, "parameter_declaration")[0] if params is not None and _named(params) else None
    if declaration is None:
        return None, ""
    name_node = declaration.child_by_field_name("name")
    type_node = declaration.child_by_field_name("type")
    type_name = doc.text(type_node).lstrip("*").split("[", 1)[0] if type_node is not None else ""
    return (doc.text(name_node) if name_node is not None else None), type_name


def locate_method(doc: SourceDocument, name: str, receiver_type: str | None = None) -> MethodAnchor:
    for method in doc.top_level("method_declaration"):
        name_node = method.child_by_field_name("name")
        if name_node is None or doc.text(name_node) != name:
            continue
        receiver, type_name = _receiver(doc, method)
        if receiver_type and type_name != receiver_type:
            continue
        body = method.child_by_field_name("body")
        if body is None:
            raise AnchorShapeMismatch(AnchorKind.METHOD, name, f"method {name} has no body")
        return MethodAnchor(method=method, body=body, statements=_statements(body), receiver=receiver)
    owner = f"({receiver_type}) " if receiver_type else ""
    raise AnchorNotFound(AnchorKind.METHOD, name, f"method {owner}{name} not found")


def registration_target(doc: SourceDocument, statement: Node) -> tuple[str, str] | None:
    """For `x.Field.Method(...)` return (Field, Method), otherwise None."""
    if statement.type != "expression_statement":
        return None
    call = _named(statement)[0] if _named(statement) else None
    if call is None or call.type != "call_expression":
        return None
    function = call.child_by_field_name("function")
    if function is None or function.type != "selector_expression":
        return None
    operand = function.child_by_field_name("operand")
    if operand is None or operand.type != "selector_expression":
        return None
    return doc.text(operand.child_by_field_name("field")), doc.text(function.child_by_field_name("field"))

