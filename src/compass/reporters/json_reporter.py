from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from compass import __version__
from compass.engine.analyzer import AnalysisResult
from compass.engine.types import Issue, Score


def score_document(issues: Sequence[Issue], score: Score) -> dict[str, Any]:
    """Structured {score, breakdown, issues} document for one analyzed file."""

    breakdown = score.breakdown
    return {
        "score": score.overall_score,
        "max_score": score.max_score,
        "rating": score.rating.value,
        "summary": score.summary,
        "total_issues": score.total_issues,
        "breakdown": {
            "errors": breakdown.errors,
            "warnings": breakdown.warnings,
            "info_issues": breakdown.info_issues,
            "style_issues": breakdown.style_issues,
            "deductions": {
                "from_errors": breakdown.error_deduction,
                "from_warnings": breakdown.warning_deduction,
                "from_info": breakdown.info_deduction,
                "from_style": breakdown.style_deduction,
            },
            "size_bonus": breakdown.size_bonus,
        },
        "issues": [_issue_to_dict(issue) for issue in issues],
    }


def _issue_to_dict(issue: Issue) -> dict[str, Any]:
    return {
        "rule": issue.rule_name,
        "severity": issue.severity.label,
        "message": issue.message,
        "line": issue.line,
        "column": issue.column,
        "text": issue.matched_text,
        "suggestion": issue.suggestion,
        "score_impact": issue.score_impact,
    }


def render_json(result: AnalysisResult, *, config_label: str | None = None) -> str:
    payload: dict[str, Any] = {
        "tool": {"name": "compass", "version": __version__},
        "path": _display_path(result.path),
        "language": result.language.name,
        "config": config_label,
    }
    payload.update(score_document(result.issues, result.score))
    return json.dumps(payload, indent=2, sort_keys=False, ensure_ascii=False)


def _display_path(path: Path | None) -> str | None:
    return path.as_posix() if path is not None else None
