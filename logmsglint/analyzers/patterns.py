"""Sensitive-data pattern helpers."""

from dataclasses import dataclass
import logging
import re
from typing import Iterable

from logmsglint.errors import InvalidPatternError

logger = logging.getLogger(__name__)

REDACTION_TOKEN = "[redacted]"

DEFAULT_SENSITIVE_PATTERNS = (
    r"\bpassword\b",
    r"\bpasswd\b",
    r"\btoken\b",
    r"\bapi[_-]?key\b",
    r"\bsecret\b",
    r"\bauthorization\b",
    r"\baccess[_-]?key\b",
)


@dataclass(frozen=True)
class SensitivePattern:
    source: str
    compiled: re.Pattern
    replacement: str = REDACTION_TOKEN

    def search(self, text: str) -> bool:
        return self.compiled.search(text) is not None

    def redact(self, text: str) -> str:
        return self.compiled.sub(lambda m: self.replacement, text)


def compile_sensitive_patterns(
    custom: Iterable[str] = (),
    builtins: Iterable[str] = DEFAULT_SENSITIVE_PATTERNS,
) -> tuple[SensitivePattern, ...]:
    """Compile built-in and user patterns into one ordered, de-duplicated set.

    Args:
        custom: User-supplied regular expressions, appended after the built-ins
        builtins: Built-in regular expressions

    Returns:
        Compiled patterns in first-seen order

    Raises:
        InvalidPatternError: If any pattern fails to compile. Nothing is
            returned in that case, so a typo can never silently shrink coverage.
    """
    seen: set[str] = set()
    patterns: list[SensitivePattern] = []

    for raw in [*builtins, *custom]:
        pattern = raw.strip()
        if not pattern or pattern in seen:
            continue
        seen.add(pattern)

        try:
            compiled = re.compile(pattern, re.IGNORECASE)
        except re.error as e:
            raise InvalidPatternError(pattern, e) from e
        patterns.append(SensitivePattern(source=pattern, compiled=compiled))

    logger.debug(f"Compiled {len(patterns)} sensitive-data patterns")
    return tuple(patterns)


def contains_sensitive_data(text: str, patterns: Iterable[SensitivePattern]) -> bool:
    return any(pattern.search(text) for pattern in patterns)


def redact_sensitive_data(text: str, patterns: Iterable[SensitivePattern]) -> str:
    """Replace every match with the redaction token, one pattern after another."""
    redacted = text
    for pattern in patterns:
        redacted = pattern.redact(redacted)
    return redacted
