"""Exceptions raised while building the analyzer or reading its configuration."""


class LogMsgLintError(Exception):
    """Base class for logmsglint errors."""


class InvalidPatternError(LogMsgLintError):
    """A sensitive-data pattern failed to compile."""

    def __init__(self, pattern: str, cause: Exception):
        self.pattern = pattern
        self.cause = cause
        super().__init__(f"invalid sensitive-data pattern {pattern!r}: {cause}")


class InvalidConfigurationError(LogMsgLintError):
    """Raw configuration has a shape the analyzer does not understand."""
