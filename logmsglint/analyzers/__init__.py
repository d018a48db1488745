"""Analyzer registry."""

from logmsglint.analyzers.base import Analyzer, Diagnostic, Rule, SuggestedFix, TextEdit
from logmsglint.analyzers.message_analyzer import LogMessageAnalyzer

__all__ = [
    "Analyzer",
    "Diagnostic",
    "LogMessageAnalyzer",
    "Rule",
    "SuggestedFix",
    "TextEdit",
]
