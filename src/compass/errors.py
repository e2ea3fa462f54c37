from __future__ import annotations


class CompassError(Exception):
    """Base class for errors that abort an analysis run."""


class ConfigParseError(CompassError, ValueError):
    """Raised when a rule-set configuration file is invalid."""


class EmptyRuleSetError(CompassError):
    """Raised when a rule set contains no enabled rules for the target language."""


class PatternCompileError(CompassError):
    """Raised when a rule's pattern query is not valid for the grammar."""

    def __init__(self, rule_name: str, grammar: str, detail: str) -> None:
        super().__init__(f"rule {rule_name!r}: invalid pattern for {grammar}: {detail}")
        self.rule_name = rule_name
        self.grammar = grammar
        self.detail = detail


class SourceReadError(CompassError, OSError):
    """Raised when a source or configuration file cannot be read."""


class UnsupportedLanguageError(CompassError):
    """Raised when no grammar is available for a file or language name."""
