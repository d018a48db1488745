"""Text rules applied to literal log message fragments.

Each rule looks at one fragment in isolation:

- lowercase start: the first visible character must not be an uppercase
  ASCII letter
- English only: no letters from non-Latin scripts
- no special symbols: no ``!``, ``?``, ellipsis or emoji
- sensitive data: no match for any compiled sensitive-data pattern
"""

import re
import unicodedata
from typing import Iterable, Optional

from logmsglint.analyzers.base import Rule, Violation
from logmsglint.analyzers.patterns import (
    SensitivePattern,
    contains_sensitive_data,
    redact_sensitive_data,
)

ELLIPSIS_RUN = "..."
FORBIDDEN_PUNCTUATION = frozenset("!?…")

_WHITESPACE_RUN = re.compile(r"\s+")


def first_visible_char(text: str) -> Optional[tuple[int, str]]:
    for idx, ch in enumerate(text):
        if not ch.isspace():
            return idx, ch
    return None


def check_lowercase_start(text: str) -> Optional[Violation]:
    """Flag a fragment whose first visible character is an uppercase ASCII letter."""
    found = first_visible_char(text)
    if found is None:
        return None

    idx, ch = found
    if not ("A" <= ch <= "Z"):
        return None

    fixed = text[:idx] + ch.lower() + text[idx + 1:]
    return Violation(Rule.LOWERCASE_START, text, fixed)


def _compatibility_base(ch: str) -> Optional[str]:
    """Base letter of a ``<super>``/``<sub>``/``<compat>`` single-character decomposition."""
    parts = unicodedata.decomposition(ch).split()
    if len(parts) != 2 or not parts[0].startswith("<"):
        return None
    return chr(int(parts[1], 16))


def is_latin_letter(ch: str) -> bool:
    if "LATIN" in unicodedata.name(ch, "").split():
        return True
    # modifier letters (ª, ʰ, ᵃ) name their script only through the decomposition
    base = _compatibility_base(ch)
    return base is not None and base != ch and is_latin_letter(base)


def contains_non_english_letters(text: str) -> bool:
    return any(ch.isalpha() and not is_latin_letter(ch) for ch in text)


def check_english_only(text: str) -> Optional[Violation]:
    if not contains_non_english_letters(text):
        return None
    return Violation(Rule.ENGLISH_ONLY, text)


def is_emoji(ch: str) -> bool:
    cp = ord(ch)
    return 0x1F300 <= cp <= 0x1FAFF or 0x2600 <= cp <= 0x27BF or cp == 0xFE0F


def is_forbidden_symbol(ch: str) -> bool:
    return ch in FORBIDDEN_PUNCTUATION or is_emoji(ch)


def contains_special_symbols_or_emoji(text: str) -> bool:
    if ELLIPSIS_RUN in text:
        return True
    return any(is_forbidden_symbol(ch) for ch in text)


def strip_special_symbols_and_emoji(text: str) -> str:
    text = text.replace(ELLIPSIS_RUN, "")
    text = "".join(ch for ch in text if not is_forbidden_symbol(ch))
    return _WHITESPACE_RUN.sub(" ", text).strip()


def check_special_symbols(text: str) -> Optional[Violation]:
    if not contains_special_symbols_or_emoji(text):
        return None
    return Violation(Rule.NO_SPECIAL_SYMBOLS, text, strip_special_symbols_and_emoji(text))


def check_sensitive_data(
    text: str, patterns: Iterable[SensitivePattern]
) -> Optional[Violation]:
    patterns = tuple(patterns)
    if not contains_sensitive_data(text, patterns):
        return None
    return Violation(Rule.SENSITIVE_DATA, text, redact_sensitive_data(text, patterns))


def check_fragment(
    text: str,
    patterns: Iterable[SensitivePattern],
    check_case: bool = True,
) -> list[Violation]:
    """Run every rule over one fragment, in rule order.

    The case rule only makes sense for the leading fragment of a message, so
    callers pass ``check_case=False`` for the rest.
    """
    checks = [
        check_lowercase_start(text) if check_case else None,
        check_english_only(text),
        check_special_symbols(text),
        check_sensitive_data(text, patterns),
    ]
    return [violation for violation in checks if violation is not None]
