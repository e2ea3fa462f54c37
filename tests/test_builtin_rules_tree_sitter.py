from __future__ import annotations

from pathlib import Path

import pytest

pytest.importorskip("tree_sitter")
pytest.importorskip("tree_sitter_languages")

from compass.config import builtin_rule_set  # noqa: E402
from compass.engine.analyzer import Analyzer  # noqa: E402
from compass.engine.types import Rule, Severity  # noqa: E402
from compass.errors import PatternCompileError  # noqa: E402
from compass.languages.registry import LANGUAGES, language_for_path  # noqa: E402

FIXTURES = Path(__file__).parent / "fixtures"


def _analyze(filename: str):  # type: ignore[no-untyped-def]
    path = FIXTURES / filename
    language = language_for_path(path)
    return Analyzer(builtin_rule_set(language.name).to_rules()).analyze_file(path, language)


@pytest.mark.parametrize(
    ("filename", "expected_rules"),
    [
        ("sample.rs", {"unwrap_usage", "panic_macro", "debug_print", "todo_comment"}),
        ("sample.go", {"unchecked_error", "panic_usage", "fmt_print", "todo_comment"}),
        ("sample.js", {"no_var", "loose_equality", "console_usage", "eval_usage", "todo_comment"}),
        (
            "sample.cpp",
            {"prefer_smart_pointers", "manual_delete", "cout_cerr_usage", "c_style_cast", "throw_statement", "magic_numbers"},
        ),
        ("Sample.java", {"system_out_println", "magic_numbers", "return_null", "print_stack_trace"}),
        ("sample.py", {"wildcard_import", "global_statement", "print_call", "eval_exec", "todo_comment"}),
    ],
)
def test_builtin_rules_flag_known_problems(filename: str, expected_rules: set[str]) -> None:
    result = _analyze(filename)

    found = {issue.rule_name for issue in result.issues}
    assert expected_rules <= found
    assert result.score.overall_score < 10.0
    assert result.score.total_issues == len(result.issues)


@pytest.mark.parametrize("language", [spec for spec in LANGUAGES], ids=lambda spec: spec.name)
def test_every_builtin_query_compiles(language) -> None:  # type: ignore[no-untyped-def]
    rules = tuple(rc.to_rule() for rc in builtin_rule_set(language.name).rules)
    Analyzer(rules).analyze("", language.grammar)


def test_issue_positions_point_at_the_capture() -> None:
    result = _analyze("sample.rs")

    (unwrap,) = [i for i in result.issues if i.rule_name == "unwrap_usage"]
    assert (unwrap.line, unwrap.column) == (5, 10)
    assert unwrap.matched_text == "unwrap"
    assert unwrap.severity is Severity.WARNING


def test_invalid_query_aborts_analysis() -> None:
    rules = [
        Rule(name="fine", pattern="(line_comment) @c", severity=Severity.INFO, message_template="c"),
        Rule(name="broken", pattern="(no_such_node_type) @x", severity=Severity.INFO, message_template="x"),
    ]

    with pytest.raises(PatternCompileError) as excinfo:
        Analyzer(rules).analyze("// hi\nfn main() {}\n", "rust")

    assert excinfo.value.rule_name == "broken"


def test_analysis_is_repeatable() -> None:
    first = _analyze("sample.go")
    second = _analyze("sample.go")
    assert first == second
