from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from compass.errors import UnsupportedLanguageError


@dataclass(frozen=True, slots=True)
class LanguageSpec:
    name: str
    display_name: str
    extensions: tuple[str, ...]
    grammar: str  # tree-sitter grammar name


LANGUAGES: tuple[LanguageSpec, ...] = (
    LanguageSpec("rust", "Rust", (".rs",), "rust"),
    LanguageSpec("go", "Go", (".go",), "go"),
    LanguageSpec("javascript", "JavaScript", (".js", ".jsx", ".mjs", ".cjs"), "javascript"),
    LanguageSpec("java", "Java", (".java",), "java"),
    LanguageSpec("cpp", "C++", (".cpp", ".cc", ".cxx", ".hpp", ".hh", ".h"), "cpp"),
    LanguageSpec("python", "Python", (".py",), "python"),
)

_BY_NAME = {spec.name: spec for spec in LANGUAGES}
_EXT_TO_LANG = {ext: spec for spec in LANGUAGES for ext in spec.extensions}


def detect_language(path: Path) -> LanguageSpec | None:
    """
    Language detection based on file extension (case-insensitive).

    Returns None if the extension is not supported.
    """

    return _EXT_TO_LANG.get(path.suffix.lower())


def language_for_path(path: Path) -> LanguageSpec:
    spec = detect_language(path)
    if spec is None:
        raise UnsupportedLanguageError(
            f"unsupported file extension for '{path}'. Supported extensions: {', '.join(supported_extensions())}"
        )
    return spec


def language_by_name(name: str) -> LanguageSpec:
    spec = _BY_NAME.get(name.strip().lower())
    if spec is None:
        raise UnsupportedLanguageError(
            f"unsupported language {name!r}. Supported languages: {', '.join(s.name for s in LANGUAGES)}"
        )
    return spec


def supported_extensions() -> tuple[str, ...]:
    return tuple(ext for spec in LANGUAGES for ext in spec.extensions)
