from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from compass.engine.tree_sitter import Capture, Match
from compass.engine.types import Issue, Rule, Severity
from compass.errors import PatternCompileError


class FakeEngine:
    """In-memory PatternEngine: each pattern maps to a fixed list of matches."""

    def __init__(self, results: dict[str, list[Match]] | None = None, *, broken: Sequence[str] = ()) -> None:
        self.results = dict(results or {})
        self.broken = set(broken)
        self.evaluated: list[str] = []
        self.parsed: list[bytes] = []

    def parse(self, grammar: str, source: bytes) -> Any:
        self.parsed.append(source)
        return ("tree", grammar, source)

    def evaluate(self, grammar: str, pattern: str, tree: Any, source: bytes) -> Sequence[Match]:
        self.evaluated.append(pattern)
        if pattern in self.broken:
            raise PatternCompileError("", grammar, "Invalid node type")
        return self.results.get(pattern, [])


def capture(row: int, col: int, text: str = "x", name: str = "hit") -> Capture:
    return Capture(name=name, start_point=(row, col), text=text)


def match(*captures: Capture, index: int = 0) -> Match:
    return Match(pattern_index=index, captures=tuple(captures))


def make_rule(name: str = "r", *, severity: Severity = Severity.INFO, weight: float = 1.0, pattern: str | None = None) -> Rule:
    return Rule(
        name=name,
        pattern=pattern if pattern is not None else f"({name}) @hit",
        severity=severity,
        message_template=f"{name} message",
        suggestion=f"fix {name}",
        weight=weight,
    )


def make_issue(severity: Severity, *, weight: float = 1.0, line: int = 1) -> Issue:
    return Issue(
        rule_name=f"{severity.value}_rule",
        severity=severity,
        message="m",
        line=line,
        column=1,
        matched_text="x",
        suggestion=None,
        score_impact=-(severity.base_magnitude * weight),
    )
