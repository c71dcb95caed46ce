"""Idempotent mutator.

Every `ensure_*` function checks whether its entry is already present (by an
identity key) and otherwise returns the edit that appends it. Nothing is
applied here: edits are computed against the tree they were located on and
handed to `gozilla.wiring.render`.
"""

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from tree_sitter import Node

from gozilla.exceptions import AnchorError, AnchorNotFound
from gozilla.wiring.anchors import (
    AnchorKind,
    all_import_specs,
    delimiter,
    element_key,
    element_value,
    field_names,
    import_name,
    import_path,
    locate_constructor_literal,
    locate_imports,
    locate_method,
    locate_struct,
    registration_target,
)
from gozilla.wiring.exprs import Expr
from gozilla.wiring.render import Edit
from gozilla.wiring.source import SourceDocument

logger = logging.getLogger("gozilla.wiring.mutations")


class Outcome(str, enum.Enum):
    INSERTED = "inserted"
    ALREADY_PRESENT = "already_present"
    ANCHOR_NOT_FOUND = "anchor_not_found"
    SHAPE_MISMATCH = "shape_mismatch"


@dataclass
class AnchorResult:
    anchor: AnchorKind
    outcome: Outcome
    key: str
    edits: list[Edit] = field(default_factory=list)
    error: AnchorError | None = None

    @property
    def ok(self) -> bool:
        return self.outcome in (Outcome.INSERTED, Outcome.ALREADY_PRESENT)


def _failed(kind: AnchorKind, key: str, error: AnchorError) -> AnchorResult:
    outcome = Outcome.ANCHOR_NOT_FOUND if isinstance(error, AnchorNotFound) else Outcome.SHAPE_MISMATCH
    return AnchorResult(kind, outcome, key, error=error)


# --- Layout helpers ---


def _line_start(source: bytes, offset: int) -> int:
    return source.rfind(b"\n", 0, offset) + 1


def indent_at(source: bytes, offset: int) -> str:
    """Leading whitespace of the line containing `offset`."""
    start = _line_start(source, offset)
    indent = b""
    for b_val in source[start:offset]:
        if b_val in (32, 9):
            indent += bytes([b_val])
        else:
            break
    return indent.decode("utf-8")


def newline(source: bytes) -> str:
    """Line ending used by the file: CRLF when it has any, LF otherwise."""
    return "\r\n" if b"\r\n" in source else "\n"


def _starts_line(source: bytes, offset: int) -> bool:
    return not source[_line_start(source, offset) : offset].strip()


def _append_entry(source: bytes, opener: Node, closer: Node, last: Node | None, entry: str) -> Edit:
    """Put `entry` on its own line right before `closer`."""
    nl = newline(source)
    outer = indent_at(source, opener.start_byte)
    if last is not None and _starts_line(source, last.start_byte):
        inner = indent_at(source, last.start_byte)
    else:
        inner = outer + "\t"
    if _starts_line(source, closer.start_byte):
        start = _line_start(source, closer.start_byte)
        return Edit(start, start, f"{inner}{entry}{nl}")
    # Closer shares its line with content: move it onto a line of its own.
    start = closer.start_byte
    while start > 0 and source[start - 1] in (32, 9):
        start -= 1
    return Edit(start, closer.start_byte, f"{nl}{inner}{entry}{nl}{outer}")


def _aligned(label: str, name: Node | None, value: Node | None) -> str:
    """`label` padded to the column the previous entry aligned its value to."""
    if name is None or value is None or name.start_point[0] != value.start_point[0]:
        return f"{label} "
    gap = value.start_point[1] - name.start_point[1]
    return label + " " * max(1, gap - len(label))


# --- Mutations ---


def ensure_import(doc: SourceDocument, path: str) -> AnchorResult:
    """Import `path` unless it already is. A blank `_` import does not count."""
    if any(import_path(doc, s) == path and import_name(doc, s) != "_" for s in all_import_specs(doc)):
        return AnchorResult(AnchorKind.IMPORTS, Outcome.ALREADY_PRESENT, path)
    entry = f'"{path}"'
    nl = newline(doc.source)
    block = locate_imports(doc)
    if block is None:
        package = next(doc.top_level("package_clause"), None)
        if package is None:
            edit = Edit(0, 0, f"import ({nl}\t{entry}{nl}){nl}{nl}")
        else:
            edit = Edit(package.end_byte, package.end_byte, f"{nl}{nl}import ({nl}\t{entry}{nl})")
    elif block.spec_list is None:
        specs = "".join(f"\t{doc.text(spec)}{nl}" for spec in block.specs)
        edit = Edit(block.declaration.start_byte, block.declaration.end_byte, f"import ({nl}{specs}\t{entry}{nl})")
    else:
        edit = _append_entry(
            doc.source,
            delimiter(block.spec_list, "("),
            delimiter(block.spec_list, ")", last=True),
            block.specs[-1] if block.specs else None,
            entry,
        )
    logger.debug("import %s -> %s", path, edit)
    return AnchorResult(AnchorKind.IMPORTS, Outcome.INSERTED, path, [edit])


def ensure_struct_field(doc: SourceDocument, struct_name: str, name: str, type_expr: Expr) -> AnchorResult:
    try:
        anchor = locate_struct(doc, struct_name)
    except AnchorError as e:
        return _failed(AnchorKind.TYPE, name, e)
    if any(name in field_names(doc, f) for f in anchor.fields):
        return AnchorResult(AnchorKind.TYPE, Outcome.ALREADY_PRESENT, name)

    last = anchor.fields[-1] if anchor.fields else None
    label = f"{name} "
    if last is not None:
        last_names = last.children_by_field_name("name")
        if len(last_names) == 1:
            label = _aligned(name, last_names[0], last.child_by_field_name("type"))
    edit = _append_entry(
        doc.source,
        delimiter(anchor.field_list, "{"),
        delimiter(anchor.field_list, "}", last=True),
        last,
        f"{label}{type_expr.render()}",
    )
    logger.debug("field %s.%s -> %s", struct_name, name, edit)
    return AnchorResult(AnchorKind.TYPE, Outcome.INSERTED, name, [edit])


def ensure_keyed_element(doc: SourceDocument, func_name: str, key: str, value: Expr) -> AnchorResult:
    try:
        anchor = locate_constructor_literal(doc, func_name)
    except AnchorError as e:
        return _failed(AnchorKind.CONSTRUCTOR, key, e)
    if any(element_key(doc, e) == key for e in anchor.elements):
        return AnchorResult(AnchorKind.CONSTRUCTOR, Outcome.ALREADY_PRESENT, key)

    edits = []
    last = anchor.elements[-1] if anchor.elements else None
    label = f"{key}: "
    if last is not None:
        if not any(c.type == "," and c.start_byte >= last.end_byte for c in anchor.literal.children):
            edits.append(Edit(last.end_byte, last.end_byte, ","))
        label = _aligned(f"{key}:", last, element_value(last))
    edits.append(
        _append_entry(
            doc.source,
            delimiter(anchor.literal, "{"),
            delimiter(anchor.literal, "}", last=True),
            last,
            f"{label}{value.render()},",
        )
    )
    logger.debug("element %s in %s -> %s", key, func_name, edits)
    return AnchorResult(AnchorKind.CONSTRUCTOR, Outcome.INSERTED, key, edits)


def ensure_registration(
    doc: SourceDocument,
    method_name: str,
    field_name: str,
    module_method: str,
    make_call: Callable[[str], Expr],
    *,
    receiver_type: str | None = None,
    default_receiver: str = "c",
) -> AnchorResult:
    """Append `<recv>.<field_name>.<module_method>(...)` to a method body.

    Any existing call on `<field_name>.<module_method>` counts as present,
    whatever its receiver or arguments.
    """
    try:
        anchor = locate_method(doc, method_name, receiver_type)
    except AnchorError as e:
        return _failed(AnchorKind.METHOD, field_name, e)
    if any(registration_target(doc, s) == (field_name, module_method) for s in anchor.statements):
        return AnchorResult(AnchorKind.METHOD, Outcome.ALREADY_PRESENT, field_name)

    call = make_call(anchor.receiver or default_receiver)
    edit = _append_entry(
        doc.source,
        delimiter(anchor.body, "{"),
        delimiter(anchor.body, "}", last=True),
        anchor.statements[-1] if anchor.statements else None,
        call.render(),
    )
    logger.debug("registration %s in %s -> %s", field_name, method_name, edit)
    return AnchorResult(AnchorKind.METHOD, Outcome.INSERTED, field_name, [edit])
