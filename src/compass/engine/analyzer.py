from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from compass.engine.matcher import match_rules
from compass.engine.scoring import calculate_score, count_lines
from compass.engine.tree_sitter import PatternEngine, TreeSitterEngine
from compass.engine.types import Issue, Rule, Score
from compass.errors import SourceReadError
from compass.languages.registry import LanguageSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    path: Path | None
    language: LanguageSpec
    issues: tuple[Issue, ...]
    score: Score


class Analyzer:
    """An immutable, ordered rule set bound to a pattern engine."""

    def __init__(self, rules: Iterable[Rule], *, engine: PatternEngine | None = None) -> None:
        self._rules: tuple[Rule, ...] = tuple(rules)
        self._engine: PatternEngine = engine if engine is not None else TreeSitterEngine()

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def has_rules(self) -> bool:
        return bool(self._rules)

    def analyze(self, source: str, grammar: str) -> list[Issue]:
        source_bytes = source.encode("utf-8", errors="replace")
        tree = self._engine.parse(grammar, source_bytes)
        return match_rules(self._rules, engine=self._engine, grammar=grammar, tree=tree, source=source_bytes)

    def analyze_with_score(self, source: str, grammar: str) -> tuple[list[Issue], Score]:
        issues = self.analyze(source, grammar)
        return issues, calculate_score(issues, count_lines(source))

    def analyze_file(self, path: Path, language: LanguageSpec) -> AnalysisResult:
        try:
            with path.open(encoding="utf-8", newline="") as fh:
                source = fh.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceReadError(f"failed to read '{path}': {exc}") from exc

        logger.debug("analyzing %s as %s with %d rule(s)", path, language.name, len(self._rules))
        issues, score = self.analyze_with_score(source, language.grammar)
        return AnalysisResult(path=path, language=language, issues=tuple(issues), score=score)
