from __future__ import annotations

import dataclasses

import pytest
from helpers import make_rule

from compass.engine.types import SEVERITY_ORDER, Severity


@pytest.mark.parametrize(
    ("severity", "magnitude"),
    [
        (Severity.ERROR, 3.0),
        (Severity.WARNING, 1.5),
        (Severity.INFO, 0.4),
        (Severity.STYLE, 0.2),
    ],
)
def test_severity_base_magnitude(severity: Severity, magnitude: float) -> None:
    assert severity.base_magnitude == magnitude


def test_severity_order_is_most_severe_first() -> None:
    magnitudes = [sev.base_magnitude for sev in SEVERITY_ORDER]
    assert magnitudes == sorted(magnitudes, reverse=True)
    assert set(SEVERITY_ORDER) == set(Severity)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("error", Severity.ERROR),
        ("WARNING", Severity.WARNING),
        (" Info ", Severity.INFO),
        ("style", Severity.STYLE),
        ("warn", None),
        ("", None),
    ],
)
def test_severity_parse(raw: str, expected: Severity | None) -> None:
    assert Severity.parse(raw) is expected


def test_severity_label() -> None:
    assert [sev.label for sev in SEVERITY_ORDER] == ["Error", "Warning", "Info", "Style"]


def test_rule_defaults_and_weighted_impact() -> None:
    rule = make_rule("unwrap", severity=Severity.WARNING)
    assert rule.weight == 1.0
    assert rule.score_impact == -1.5

    heavy = rule.with_weight(2.0)
    assert heavy.score_impact == -3.0
    assert heavy.name == rule.name and heavy.pattern == rule.pattern
    assert rule.weight == 1.0


def test_zero_weight_rule_has_no_impact() -> None:
    assert make_rule(severity=Severity.ERROR, weight=0.0).score_impact == 0.0


def test_rule_is_immutable() -> None:
    rule = make_rule()
    with pytest.raises(dataclasses.FrozenInstanceError):
        rule.weight = 3.0  # type: ignore[misc]


@pytest.mark.parametrize("weight", [-1.0, float("inf"), float("nan")])
def test_rule_rejects_weights_that_would_raise_the_score(weight: float) -> None:
    with pytest.raises(ValueError, match="weight"):
        make_rule(weight=weight)
    with pytest.raises(ValueError, match="weight"):
        make_rule().with_weight(weight)
