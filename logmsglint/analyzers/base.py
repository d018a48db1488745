"""Base analyzer interfaces and diagnostic types."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from logmsglint.parsers.python_parser import Position


class Rule(str, Enum):
    """Message rules, valued by their diagnostic code."""

    LOWERCASE_START = "LML001"
    ENGLISH_ONLY = "LML002"
    NO_SPECIAL_SYMBOLS = "LML003"
    SENSITIVE_DATA = "LML004"

    @property
    def message(self) -> str:
        return RULE_MESSAGES[self]


RULE_MESSAGES = {
    Rule.LOWERCASE_START: "log message should start with a lowercase English letter",
    Rule.ENGLISH_ONLY: "log message should contain English text only (non-Latin alphabets are not allowed)",
    Rule.NO_SPECIAL_SYMBOLS: "log message should not contain special symbols (!, ?, ...) or emoji",
    Rule.SENSITIVE_DATA: "log message may contain sensitive data",
}

FIX_MESSAGE = "rewrite log message"


@dataclass(frozen=True)
class TextEdit:
    """Replace source bytes ``[start, end)`` with ``new_text``."""

    start: int
    end: int
    new_text: str


@dataclass(frozen=True)
class SuggestedFix:
    message: str
    edits: tuple[TextEdit, ...]


@dataclass(frozen=True)
class Violation:
    """A rule that fired on one literal fragment."""

    rule: Rule
    text: str
    fixed: str = ""


@dataclass
class Diagnostic:
    """Diagnostic emitted by analyzers."""

    rule: Rule
    message: str
    file_path: str
    start: Position
    end: Position
    fix: Optional[SuggestedFix] = None

    @property
    def code(self) -> str:
        return self.rule.value

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "file_path": self.file_path,
            "start_line": self.start.line,
            "start_column": self.start.column,
            "end_line": self.end.line,
            "end_column": self.end.column,
            "fix": None,
        }
        if self.fix is not None:
            data["fix"] = {
                "message": self.fix.message,
                "edits": [
                    {"start": e.start, "end": e.end, "new_text": e.new_text}
                    for e in self.fix.edits
                ],
            }
        return data


class Analyzer:
    """Base class for analyzers."""

    name: str = "base"

    def analyze(self, unit) -> list[Diagnostic]:
        raise NotImplementedError
