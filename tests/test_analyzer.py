from __future__ import annotations

from pathlib import Path

import pytest
from helpers import FakeEngine, capture, make_rule, match

from compass.engine.analyzer import Analyzer
from compass.engine.types import Rating, Severity
from compass.errors import SourceReadError
from compass.languages.registry import language_by_name


def _analyzer() -> tuple[Analyzer, FakeEngine]:
    rule = make_rule("panic", severity=Severity.ERROR)
    engine = FakeEngine({rule.pattern: [match(capture(2, 4, "panic"))]})
    return Analyzer([rule], engine=engine), engine


def test_analyze_with_score_uses_source_line_count() -> None:
    analyzer, _engine = _analyzer()
    source = "\n".join(f"line {i}" for i in range(100)) + "\n"

    issues, score = analyzer.analyze_with_score(source, "go")

    assert len(issues) == 1
    assert score.overall_score == 7.0
    assert score.rating is Rating.FAIR


def test_small_source_is_scored_strictly() -> None:
    analyzer, _engine = _analyzer()

    _issues, score = analyzer.analyze_with_score("package main\n", "go")

    assert score.overall_score == 6.7


def test_analysis_is_deterministic() -> None:
    analyzer, _engine = _analyzer()
    assert analyzer.analyze_with_score("x\n", "go") == analyzer.analyze_with_score("x\n", "go")


def test_rules_are_a_read_only_snapshot() -> None:
    rules = [make_rule("a")]
    analyzer = Analyzer(rules, engine=FakeEngine())
    rules.append(make_rule("b"))
    assert [r.name for r in analyzer.rules] == ["a"]
    assert analyzer.has_rules()
    assert not Analyzer([], engine=FakeEngine()).has_rules()


def test_analyze_file_reads_and_scores(tmp_path: Path) -> None:
    analyzer, _engine = _analyzer()
    path = tmp_path / "main.go"
    path.write_text("package main\n\nfunc main() {\n    panic(1)\n}\n", encoding="utf-8")

    result = analyzer.analyze_file(path, language_by_name("go"))

    assert result.path == path
    assert result.language.name == "go"
    assert result.issues[0].line == 3
    assert result.score.total_issues == 1


def test_analyze_file_reports_unreadable_source(tmp_path: Path) -> None:
    analyzer, _engine = _analyzer()
    path = tmp_path / "binary.go"
    path.write_bytes(b"\xff\xfe\x00bad")

    with pytest.raises(SourceReadError):
        analyzer.analyze_file(path, language_by_name("go"))

    with pytest.raises(SourceReadError):
        analyzer.analyze_file(tmp_path / "missing.go", language_by_name("go"))


def test_analyze_file_keeps_carriage_returns(tmp_path: Path) -> None:
    analyzer, engine = _analyzer()
    path = tmp_path / "main.go"
    path.write_bytes(b"package main\r\n\r\nfunc main() {\rpanic(1) }\r\n")

    result = analyzer.analyze_file(path, language_by_name("go"))

    assert engine.parsed == [b"package main\r\n\r\nfunc main() {\rpanic(1) }\r\n"]
    assert result.issues[0].line == 3
