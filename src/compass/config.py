from __future__ import annotations

import json
import logging
import math
import tomllib
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

from compass.engine.types import Rule, Severity
from compass.errors import ConfigParseError, EmptyRuleSetError, SourceReadError
from compass.languages.registry import LanguageSpec

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 1.0
DEFAULT_ENABLED = False

_RULE_KEYS = {"name", "query", "severity", "message", "suggestion", "weight", "enabled"}


@dataclass(frozen=True, slots=True)
class RuleConfig:
    """One `[[rules]]` entry as written in a rule-set file."""

    name: str
    query: str
    severity: str
    message: str
    suggestion: str | None = None
    weight: float = DEFAULT_WEIGHT
    enabled: bool = DEFAULT_ENABLED

    def to_rule(self) -> Rule:
        severity = Severity.parse(self.severity)
        if severity is None:
            logger.warning("rule %s: unknown severity %r, using info", self.name, self.severity)
            severity = Severity.INFO
        return Rule(
            name=self.name,
            pattern=self.query,
            severity=severity,
            message_template=self.message,
            suggestion=self.suggestion,
        ).with_weight(self.weight)


@dataclass(frozen=True, slots=True)
class RuleSetConfig:
    """
    A per-language rule set.

    Each language has its own file, so rules carry no `language` field.
    """

    rules: tuple[RuleConfig, ...] = ()

    def to_rules(self) -> tuple[Rule, ...]:
        """Return the enabled rules in file order."""

        return tuple(rc.to_rule() for rc in self.rules if rc.enabled)

    def dump(self) -> str:
        chunks: list[str] = []
        for rc in self.rules:
            lines = [
                "[[rules]]",
                f"name = {_toml_str(rc.name)}",
                f"query = {_toml_str(rc.query)}",
                f"severity = {_toml_str(rc.severity)}",
                f"message = {_toml_str(rc.message)}",
            ]
            if rc.suggestion is not None:
                lines.append(f"suggestion = {_toml_str(rc.suggestion)}")
            lines.append(f"weight = {float(rc.weight)!r}")
            lines.append(f"enabled = {'true' if rc.enabled else 'false'}")
            chunks.append("\n".join(lines))
        return "\n\n".join(chunks) + "\n"


def _toml_str(value: str) -> str:
    # JSON string escapes are a subset of TOML basic-string escapes.
    return json.dumps(value, ensure_ascii=False)


def parse_rule_set(text: str, *, source: str = "<string>") -> RuleSetConfig:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigParseError(f"Invalid TOML in {source}: {exc}") from exc

    raw_rules = data.get("rules", [])
    if not isinstance(raw_rules, list):
        raise ConfigParseError(f"{source}: `rules` must be an array of tables.")

    rules = tuple(_parse_rule(item, index=i, source=source) for i, item in enumerate(raw_rules))
    return RuleSetConfig(rules=rules)


def _parse_rule(item: Any, *, index: int, source: str) -> RuleConfig:
    where = f"{source}: rules[{index}]"
    if not isinstance(item, dict):
        raise ConfigParseError(f"{where} must be a table.")
    if "language" in item:
        raise ConfigParseError(
            f"{where}: `language` is not supported; rule sets are one file per language."
        )

    unknown = sorted(set(item) - _RULE_KEYS)
    for key in unknown:
        logger.warning("%s: ignoring unknown key %r", where, key)

    name = _require_str(item, "name", where=where)
    where = f"{source}: rule {name!r}"
    query = _require_str(item, "query", where=where)
    severity = _require_str(item, "severity", where=where)
    message = _require_str(item, "message", where=where)

    suggestion = item.get("suggestion")
    if suggestion is not None and not isinstance(suggestion, str):
        raise ConfigParseError(f"{where}: `suggestion` must be a string.")

    weight = item.get("weight", DEFAULT_WEIGHT)
    if isinstance(weight, bool) or not isinstance(weight, int | float):
        raise ConfigParseError(f"{where}: `weight` must be a number.")
    if not math.isfinite(weight):
        raise ConfigParseError(f"{where}: `weight` must be a finite number.")
    if weight < 0:
        raise ConfigParseError(f"{where}: `weight` must not be negative.")

    enabled = item.get("enabled", DEFAULT_ENABLED)
    if not isinstance(enabled, bool):
        raise ConfigParseError(f"{where}: `enabled` must be a boolean.")

    return RuleConfig(
        name=name,
        query=query,
        severity=severity,
        message=message,
        suggestion=suggestion,
        weight=float(weight),
        enabled=enabled,
    )


def _require_str(item: dict[str, Any], key: str, *, where: str) -> str:
    value = item.get(key)
    if not isinstance(value, str):
        raise ConfigParseError(f"{where}: `{key}` must be a string.")
    return value


def load_rule_set(path: Path | str) -> RuleSetConfig:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SourceReadError(f"failed to read config '{path}': {exc}") from exc
    return parse_rule_set(text, source=str(path))


def save_rule_set(config: RuleSetConfig, path: Path | str) -> None:
    Path(path).write_text(config.dump(), encoding="utf-8")


@lru_cache(maxsize=None)
def builtin_rule_set(language: str) -> RuleSetConfig:
    """Load the rule set bundled for `language` (parsed once per process)."""

    resource = resources.files("compass.rulesets").joinpath(f"{language}.toml")
    try:
        text = resource.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise SourceReadError(f"no built-in rule set for language {language!r}") from exc
    return parse_rule_set(text, source=f"built-in {language}")


def resolve_rules(language: LanguageSpec, config_path: Path | None = None) -> tuple[tuple[Rule, ...], str]:
    """
    Return (enabled rules, config label) for `language`.

    Uses `config_path` when given, otherwise the built-in rule set. Raises
    EmptyRuleSetError when nothing is enabled.
    """

    if config_path is not None:
        label = str(config_path)
        config = load_rule_set(config_path)
    else:
        label = f"built-in {language.name}"
        config = builtin_rule_set(language.name)

    rules = config.to_rules()
    if not rules:
        raise EmptyRuleSetError(f"config '{label}' contains no enabled rules for language '{language.name}'")
    logger.debug("loaded %d enabled rule(s) from %s", len(rules), label)
    return rules, label
