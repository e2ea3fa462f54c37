from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    STYLE = "style"

    @property
    def base_magnitude(self) -> float:
        """Points removed from the base score for one issue at weight 1.0."""

        return _BASE_MAGNITUDE[self]

    @property
    def label(self) -> str:
        return self.value.title()

    @classmethod
    def parse(cls, value: str) -> Severity | None:
        """Return the severity named by `value` (case-insensitive), or None."""

        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


_BASE_MAGNITUDE: dict[Severity, float] = {
    Severity.ERROR: 3.0,
    Severity.WARNING: 1.5,
    Severity.INFO: 0.4,
    Severity.STYLE: 0.2,
}

# Most severe first; the order reports list severities in.
SEVERITY_ORDER = (Severity.ERROR, Severity.WARNING, Severity.INFO, Severity.STYLE)


class Rating(Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    CRITICAL = "Critical"


@dataclass(frozen=True, slots=True)
class Rule:
    name: str
    pattern: str  # tree-sitter query source
    severity: Severity
    message_template: str
    suggestion: str | None = None
    weight: float = 1.0

    def __post_init__(self) -> None:
        # Keeps score_impact <= 0 for every rule.
        if not math.isfinite(self.weight) or self.weight < 0:
            raise ValueError(f"rule {self.name!r}: weight must be a finite, non-negative number, got {self.weight!r}")

    def with_weight(self, weight: float) -> Rule:
        return Rule(
            name=self.name,
            pattern=self.pattern,
            severity=self.severity,
            message_template=self.message_template,
            suggestion=self.suggestion,
            weight=weight,
        )

    @property
    def score_impact(self) -> float:
        return -(self.severity.base_magnitude * self.weight)


@dataclass(frozen=True, slots=True)
class Issue:
    rule_name: str
    severity: Severity
    message: str
    line: int  # 1-based
    column: int  # 1-based
    matched_text: str
    suggestion: str | None
    score_impact: float


@dataclass(frozen=True, slots=True)
class ScoreBreakdown:
    errors: int = 0
    warnings: int = 0
    info_issues: int = 0
    style_issues: int = 0
    error_deduction: float = 0.0
    warning_deduction: float = 0.0
    info_deduction: float = 0.0
    style_deduction: float = 0.0
    size_bonus: float = 0.0

    @property
    def total_count(self) -> int:
        return self.errors + self.warnings + self.info_issues + self.style_issues

    @property
    def total_deduction(self) -> float:
        return self.error_deduction + self.warning_deduction + self.info_deduction + self.style_deduction


@dataclass(frozen=True, slots=True)
class Score:
    overall_score: float
    max_score: float
    total_issues: int
    breakdown: ScoreBreakdown
    rating: Rating
    summary: str
