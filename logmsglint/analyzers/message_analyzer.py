"""Log message analyzer.

Finds logging calls in a parsed unit and checks the literal text of their
messages. Code it cannot understand statically is left alone: a dynamic
message, an unresolvable receiver or a same-named method on some other type
produces no diagnostic at all.
"""

import logging
from typing import Iterable, Optional

from logmsglint.analyzers.api_spec import DEFAULT_API_SPEC, LoggingAPISpec
from logmsglint.analyzers.base import Analyzer, Diagnostic
from logmsglint.analyzers.extractor import extract_literals, is_string_literal
from logmsglint.analyzers.fixes import build_diagnostic
from logmsglint.analyzers.patterns import SensitivePattern, compile_sensitive_patterns
from logmsglint.analyzers.resolver import TypeInfo, resolve_message_expr
from logmsglint.analyzers.rules import check_fragment
from logmsglint.parsers.python_parser import SourceUnit, iter_calls

logger = logging.getLogger(__name__)


class LogMessageAnalyzer(Analyzer):
    """Checks log message literals passed to ``logging`` and ``structlog``.

    Instances hold only immutable state and can be shared between threads
    analysing different units.
    """

    name = "log_messages"

    def __init__(
        self,
        sensitive_patterns: Iterable[str] = (),
        api_spec: LoggingAPISpec = DEFAULT_API_SPEC,
    ):
        # raises InvalidPatternError before any unit is analysed
        self._patterns = compile_sensitive_patterns(sensitive_patterns)
        self._api_spec = api_spec
        logger.info(
            f"Log message analyzer ready: {len(self._patterns)} sensitive patterns, "
            f"{len(api_spec)} logging APIs"
        )

    @property
    def patterns(self) -> tuple[SensitivePattern, ...]:
        return self._patterns

    @property
    def api_spec(self) -> LoggingAPISpec:
        return self._api_spec

    def analyze(self, unit: SourceUnit, type_info: Optional[TypeInfo] = None) -> list[Diagnostic]:
        """Analyze one unit.

        Args:
            unit: Parsed source file
            type_info: Type-resolution table for ``unit``; built from the unit
                itself when omitted

        Returns:
            Diagnostics in document order
        """
        if type_info is None:
            from logmsglint.parsers.type_resolver import resolve_types

            type_info = resolve_types(unit)

        diagnostics: list[Diagnostic] = []
        for call in iter_calls(unit):
            message_node = resolve_message_expr(call, type_info, self._api_spec)
            if message_node is None:
                continue

            fragments = extract_literals(message_node)
            if not fragments:
                continue

            rewrite_allowed = is_string_literal(message_node)

            for index, fragment in enumerate(fragments):
                for violation in check_fragment(fragment, self._patterns, check_case=index == 0):
                    diagnostics.append(
                        build_diagnostic(
                            unit,
                            message_node,
                            violation.rule,
                            violation.text,
                            violation.fixed,
                            rewrite_allowed,
                        )
                    )

        return diagnostics
