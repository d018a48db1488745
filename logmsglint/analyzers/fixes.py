"""Diagnostic construction and suggested-fix handling."""

import json
import logging
from typing import Iterable

from tree_sitter import Node

from logmsglint.analyzers.base import (
    FIX_MESSAGE,
    Diagnostic,
    Rule,
    SuggestedFix,
    TextEdit,
)

logger = logging.getLogger(__name__)


def _escape_code_point(ch: str) -> str:
    cp = ord(ch)
    if cp <= 0xFFFF:
        return f"\\u{cp:04x}"
    return f"\\U{cp:08x}"


def quote_literal(text: str) -> str:
    """Encode ``text`` as a double-quoted Python string literal.

    JSON string escapes are a subset of Python's, and with ``ensure_ascii``
    off non-ASCII characters stay as they are. Unprintable code points,
    lone surrogates included, are written as ``\\u``/``\\U`` escapes so the
    literal always encodes to UTF-8.
    """
    quoted = json.dumps(text, ensure_ascii=False)
    return "".join(ch if ch.isprintable() else _escape_code_point(ch) for ch in quoted)


def build_diagnostic(
    unit,
    message_node: Node,
    rule: Rule,
    original: str,
    fixed: str,
    rewrite_allowed: bool,
) -> Diagnostic:
    """Turn a violation into a diagnostic anchored on the whole message argument.

    A fix is attached only when the argument is a single literal and the fixed
    text is a real, non-empty change.
    """
    diagnostic = Diagnostic(
        rule=rule,
        message=rule.message,
        file_path=unit.file_path,
        start=unit.start_position(message_node),
        end=unit.end_position(message_node),
    )

    if rewrite_allowed and fixed and fixed != original:
        diagnostic.fix = SuggestedFix(
            message=FIX_MESSAGE,
            edits=(
                TextEdit(
                    start=message_node.start_byte,
                    end=message_node.end_byte,
                    new_text=quote_literal(fixed),
                ),
            ),
        )

    return diagnostic


def apply_fixes(source: bytes, diagnostics: Iterable[Diagnostic]) -> tuple[bytes, int]:
    """Apply suggested fixes to ``source``.

    Edits are taken in document order; an edit overlapping one already taken
    is dropped, so several rules firing on the same literal apply only the
    first fix. Run the analyzer again to pick up the rest.

    Returns:
        The rewritten source and the number of edits applied
    """
    edits = sorted(
        (edit for d in diagnostics if d.fix is not None for edit in d.fix.edits),
        key=lambda e: (e.start, e.end),
    )

    accepted: list[TextEdit] = []
    for edit in edits:
        if accepted and edit.start < accepted[-1].end:
            logger.debug(f"Skipping overlapping edit at byte {edit.start}")
            continue
        accepted.append(edit)

    result = source
    for edit in reversed(accepted):
        result = result[:edit.start] + edit.new_text.encode("utf-8") + result[edit.end:]

    return result, len(accepted)
