"""Literal text extraction from log message expressions."""

import ast
import logging
import warnings
from typing import Optional

from tree_sitter import Node

from logmsglint.parsers.python_parser import strip_parens

logger = logging.getLogger(__name__)

STRING_NODE_TYPES = frozenset({"string", "concatenated_string"})


def string_prefix(node: Node) -> str:
    """Return the lowercased prefix of a ``string`` node (``""``, ``"r"``, ``"f"``, ...)."""
    start = node.child(0)
    if start is None or start.type != "string_start":
        return ""
    return start.text.decode("utf-8").rstrip("'\"").lower()


def is_plain_string(node: Node) -> bool:
    """True for ``str`` literals with no interpolation (not f-strings, not bytes)."""
    if node.type == "string":
        prefix = string_prefix(node)
        return not any(marker in prefix for marker in "fbt")
    if node.type == "concatenated_string":
        parts = [child for child in node.named_children if child.type != "comment"]
        return bool(parts) and all(
            part.type == "string" and is_plain_string(part) for part in parts
        )
    return False


def is_string_literal(node: Node) -> bool:
    """True when ``node``, ignoring parentheses, is one ``str`` literal.

    Adjacent literals (``"a" "b"``) are a single literal to Python, so they
    count as one too.
    """
    return is_plain_string(strip_parens(node))


def decode_literal(node: Node) -> Optional[str]:
    """Decode a plain string literal node; ``None`` if it cannot be decoded."""
    if not is_plain_string(node):
        return None

    if node.type == "concatenated_string":
        parts = [decode_literal(child) for child in node.named_children if child.type == "string"]
        if any(part is None for part in parts):
            return None
        return "".join(parts)

    try:
        source = node.text.decode("utf-8")
        with warnings.catch_warnings():
            # invalid escape sequences only warn; the value is still usable
            warnings.simplefilter("ignore")
            value = ast.literal_eval(source)
    except (UnicodeDecodeError, SyntaxError, ValueError, MemoryError) as e:
        logger.debug(f"Skipping undecodable literal at byte {node.start_byte}: {e}")
        return None

    return value if isinstance(value, str) else None


def is_concatenation(node: Node) -> bool:
    if node.type != "binary_operator":
        return False
    operator = node.child_by_field_name("operator")
    return operator is not None and operator.type == "+"


def extract_literals(node: Node) -> list[str]:
    """Collect every statically known text fragment, left to right.

    Only literals and ``+`` concatenations are understood. Anything else
    (names, calls, f-strings, ``%`` formatting) contributes nothing but does
    not stop the walk, so literals elsewhere in the tree are still found.
    """
    node = strip_parens(node)

    if node.type in STRING_NODE_TYPES:
        text = decode_literal(node)
        return [] if text is None else [text]

    if is_concatenation(node):
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        fragments: list[str] = []
        for operand in (left, right):
            if operand is not None:
                fragments.extend(extract_literals(operand))
        return fragments

    return []
