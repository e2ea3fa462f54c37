from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import replace

from compass.engine.types import Issue, Rating, Score, ScoreBreakdown, Severity

logger = logging.getLogger(__name__)

BASE_SCORE = 10.0

# Files above this many lines earn leniency on low-severity noise.
LARGE_FILE_LINES = 200
LENIENCY_SCALE = 1000.0
MAX_LENIENCY = 0.3

# Files below this many lines are held to a stricter standard.
SMALL_FILE_LINES = 50
SMALL_FILE_FACTOR = 0.9

# Inclusive lower bounds, checked top-down; anything below the last is Critical.
RATING_BANDS: tuple[tuple[float, Rating], ...] = (
    (9.0, Rating.EXCELLENT),
    (7.5, Rating.GOOD),
    (6.0, Rating.FAIR),
    (4.0, Rating.POOR),
)

MANY_WARNINGS = 5
MANY_INFO_ISSUES = 10


def count_lines(text: str) -> int:
    """Count newline-terminated lines; a final unterminated line counts, a trailing newline adds none."""

    if not text:
        return 0
    return text.count("\n") + (0 if text.endswith("\n") else 1)


def tally(issues: Sequence[Issue]) -> ScoreBreakdown:
    counts = {sev: 0 for sev in Severity}
    deductions = {sev: 0.0 for sev in Severity}
    for issue in issues:
        counts[issue.severity] += 1
        deductions[issue.severity] += abs(issue.score_impact)

    return ScoreBreakdown(
        errors=counts[Severity.ERROR],
        warnings=counts[Severity.WARNING],
        info_issues=counts[Severity.INFO],
        style_issues=counts[Severity.STYLE],
        error_deduction=deductions[Severity.ERROR],
        warning_deduction=deductions[Severity.WARNING],
        info_deduction=deductions[Severity.INFO],
        style_deduction=deductions[Severity.STYLE],
    )


def size_factor(line_count: int, breakdown: ScoreBreakdown) -> tuple[float, float]:
    """
    Return (size_factor, size_bonus) for a file of `line_count` lines.

    Total deductions are divided by the factor. Large files get up to 30%
    leniency, and the share of that leniency attributable to info/style
    deductions is recorded as the bonus. Very small files get a factor below 1.
    """

    if line_count > LARGE_FILE_LINES:
        leniency = min((line_count - LARGE_FILE_LINES) / LENIENCY_SCALE, MAX_LENIENCY)
        bonus = leniency * (breakdown.info_deduction + breakdown.style_deduction)
        return 1.0 + leniency, bonus
    if line_count < SMALL_FILE_LINES:
        return SMALL_FILE_FACTOR, 0.0
    return 1.0, 0.0


def round_score(value: float) -> float:
    # Half away from zero, to the nearest tenth (value is never negative).
    return math.floor(value * 10.0 + 0.5) / 10.0


def rating_for(score: float) -> Rating:
    for lower, rating in RATING_BANDS:
        if score >= lower:
            return rating
    return Rating.CRITICAL


def summary_for(score: float, breakdown: ScoreBreakdown) -> str:
    # Severity takes priority over the numeric score, so the summary can
    # disagree with the rating near band edges.
    if breakdown.errors > 0:
        return f"Code has {breakdown.errors} critical errors that need immediate attention"
    if breakdown.warnings > MANY_WARNINGS:
        return "Multiple warnings detected - consider addressing them"
    if breakdown.info_issues > MANY_INFO_ISSUES:
        return "Many minor issues found - good opportunity for cleanup"
    if score >= 9.0:
        return "Excellent code quality with minimal issues"
    if score >= 7.5:
        return "Good code quality with room for minor improvements"
    return "Code needs improvement in several areas"


def calculate_score(issues: Sequence[Issue], line_count: int) -> Score:
    breakdown = tally(issues)
    factor, bonus = size_factor(line_count, breakdown)
    if bonus:
        breakdown = replace(breakdown, size_bonus=bonus)

    adjusted = breakdown.total_deduction / factor
    overall = round_score(max(0.0, BASE_SCORE - adjusted))
    logger.debug(
        "score: lines=%d deduction=%.3f factor=%.3f adjusted=%.3f -> %.1f",
        line_count,
        breakdown.total_deduction,
        factor,
        adjusted,
        overall,
    )

    return Score(
        overall_score=overall,
        max_score=BASE_SCORE,
        total_issues=len(issues),
        breakdown=breakdown,
        rating=rating_for(overall),
        summary=summary_for(overall, breakdown),
    )
