from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from compass.engine.tree_sitter import Capture, PatternEngine
from compass.engine.types import Issue, Rule
from compass.errors import PatternCompileError

logger = logging.getLogger(__name__)


def issue_from_capture(rule: Rule, capture: Capture) -> Issue:
    row, col = capture.start_point
    return Issue(
        rule_name=rule.name,
        severity=rule.severity,
        # Message templates are reported verbatim; no placeholder interpolation.
        message=rule.message_template,
        line=row + 1,
        column=col + 1,
        matched_text=capture.text,
        suggestion=rule.suggestion,
        score_impact=rule.score_impact,
    )


def match_rules(
    rules: Sequence[Rule],
    *,
    engine: PatternEngine,
    grammar: str,
    tree: Any,
    source: bytes,
) -> list[Issue]:
    """
    Run every rule's pattern against `tree` and return one Issue per captured node.

    Issues are ordered by rule, then by the order the engine yields matches and
    captures. Nothing is deduplicated or sorted. The first rule whose pattern
    does not compile aborts the whole run with PatternCompileError.
    """

    issues: list[Issue] = []
    for rule in rules:
        try:
            matches = engine.evaluate(grammar, rule.pattern, tree, source)
        except PatternCompileError as exc:
            raise PatternCompileError(rule.name, grammar, exc.detail) from exc

        before = len(issues)
        for match in matches:
            for capture in match.captures:
                issues.append(issue_from_capture(rule, capture))
        logger.debug("rule %s: %d issue(s)", rule.name, len(issues) - before)
    return issues
