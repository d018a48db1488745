"""Python parser using tree-sitter.

Produces one ``SourceUnit`` per file: the source bytes, the syntax tree and
helpers to turn node positions into diagnostics positions.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

import tree_sitter_python as tspython
from tree_sitter import Language, Node, Parser, Tree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Position:
    """Location in a source file: 1-based line, 0-based character column."""

    line: int
    column: int
    offset: int  # byte offset into the UTF-8 source


@dataclass
class SourceUnit:
    """A parsed compilation unit (one Python file)."""

    file_path: str
    source: bytes
    tree: Tree
    errors: list[str] = field(default_factory=list)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def has_error(self) -> bool:
        return self.root.has_error

    def text(self, node: Optional[Node]) -> str:
        """Get the text content of a node."""
        if node is None:
            return ""
        return self.source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def start_position(self, node: Node) -> Position:
        return self._position(node.start_byte, node.start_point[0], node.start_point[1])

    def end_position(self, node: Node) -> Position:
        return self._position(node.end_byte, node.end_point[0], node.end_point[1])

    def _position(self, offset: int, row: int, byte_column: int) -> Position:
        # tree-sitter columns count bytes; report characters instead
        line_prefix = self.source[offset - byte_column:offset]
        column = len(line_prefix.decode("utf-8", errors="replace"))
        return Position(line=row + 1, column=column, offset=offset)


class PythonParser:
    """Parser for Python code using tree-sitter."""

    def __init__(self):
        self._language = Language(tspython.language())
        self._parser = Parser(self._language)
        logger.debug("Initialized tree-sitter Python parser")

    def parse(self, code: str | bytes, file_path: str = "<string>") -> SourceUnit:
        """
        Parse Python code into a syntax tree.

        tree-sitter recovers from syntax errors, so a broken file still yields
        a usable tree; the error is recorded on the unit.

        Args:
            code: Python source code
            file_path: Path to the file (for diagnostics)

        Returns:
            SourceUnit with the tree and source bytes
        """
        source = code.encode("utf-8") if isinstance(code, str) else code
        tree = self._parser.parse(source)
        unit = SourceUnit(file_path=file_path, source=source, tree=tree)

        if unit.has_error:
            logger.warning(f"Syntax errors in {file_path}, analysing recovered tree")
            unit.errors.append(f"{file_path}: syntax error")

        return unit


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and its descendants in document (pre-)order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def iter_calls(unit: SourceUnit) -> Iterator[Node]:
    for node in walk(unit.root):
        if node.type == "call":
            yield node


def strip_parens(node: Node) -> Node:
    """Unwrap any number of enclosing parentheses."""
    while node.type == "parenthesized_expression":
        inner = [child for child in node.named_children if child.type != "comment"]
        if len(inner) != 1:
            return node
        node = inner[0]
    return node
