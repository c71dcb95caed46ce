"""Source loader: Go text in, tree-sitter concrete syntax tree out."""

import threading
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from tree_sitter import Node, Parser, Tree
from tree_sitter_language_pack import get_parser

from gozilla.exceptions import ParseError

LANGUAGE = "go"

_local = threading.local()


def _go_parser() -> Parser:
    """One parser per thread; tree-sitter parsers must not be shared."""
    parser = getattr(_local, "parser", None)
    if parser is None:
        parser = _local.parser = get_parser(LANGUAGE)
    return parser


def first_error_node(node: Node) -> Node | None:
    """Depth-first search for an ERROR or MISSING node."""
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = first_error_node(child)
        if found is not None:
            return found
    return node


@dataclass
class SourceDocument:
    """One parsed file. Lives for a single augmentation; the file is the durable copy."""

    source: bytes
    tree: Tree
    path: Path | None = None

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8")

    def top_level(self, *types: str) -> Iterator[Node]:
        for child in self.root.named_children:
            if not types or child.type in types:
                yield child


def parse_source(source: str | bytes, path: Path | str | None = None) -> SourceDocument:
    """Parse Go source, raising ParseError when the tree contains errors."""
    data = source.encode("utf-8") if isinstance(source, str) else bytes(source)
    tree = _go_parser().parse(data)
    error = first_error_node(tree.root_node)
    if error is not None:
        row, column = error.start_point
        snippet = data[error.start_byte : error.start_byte + 40].decode("utf-8", errors="replace").split("\n")[0]
        reason = f"missing {error.type}" if error.is_missing else f"syntax error near {snippet!r}"
        raise ParseError(reason, path=path, line=row + 1, column=column + 1)
    return SourceDocument(source=data, tree=tree, path=Path(path) if path is not None else None)


def load_document(path: Path | str) -> SourceDocument:
    path = Path(path)
    return parse_source(path.read_bytes(), path)
