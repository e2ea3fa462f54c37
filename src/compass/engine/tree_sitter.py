from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Protocol, cast

from compass.errors import PatternCompileError, UnsupportedLanguageError

logger = logging.getLogger(__name__)


class _ParserLike(Protocol):
    def set_language(self, language: object) -> None: ...

    def parse(self, source: bytes) -> object: ...


_parser_cls: type[_ParserLike] | None
_get_language_func: Callable[[str], object] | None

try:  # pragma: no cover
    from tree_sitter import Parser as _TreeSitterParser
    from tree_sitter_languages import get_language as _tree_sitter_get_language
except (ImportError, OSError):  # pragma: no cover
    _parser_cls = None
    _get_language_func = None
else:  # pragma: no cover (depends on installed grammars)
    _parser_cls = cast(type[_ParserLike], _TreeSitterParser)
    _get_language_func = cast(Callable[[str], object], _tree_sitter_get_language)

_TREE_SITTER_AVAILABLE = _parser_cls is not None and _get_language_func is not None

# Exposed for tests and light monkeypatching.
Parser: type[_ParserLike] | None = _parser_cls
get_language: Callable[[str], object] | None = _get_language_func

_MISSING_DEPS = (
    "tree-sitter dependencies are not installed. Install `compass[treesitter]` (or add "
    "`tree-sitter` + `tree-sitter-languages`) to analyze source files."
)

# Errors raised by the tree-sitter binding when a query does not compile.
_QUERY_ERRORS = (SyntaxError, NameError, ValueError, RuntimeError, TypeError)


@dataclass(frozen=True, slots=True)
class Capture:
    name: str
    start_point: tuple[int, int]  # 0-based (row, column)
    text: str


@dataclass(frozen=True, slots=True)
class Match:
    pattern_index: int
    captures: tuple[Capture, ...]


class PatternEngine(Protocol):
    """Structural pattern matching over a parsed syntax tree."""

    def parse(self, grammar: str, source: bytes) -> Any: ...

    def evaluate(self, grammar: str, pattern: str, tree: Any, source: bytes) -> Sequence[Match]: ...


@lru_cache(maxsize=32)
def _get_language(grammar: str) -> object:
    if not _TREE_SITTER_AVAILABLE:  # pragma: no cover
        raise UnsupportedLanguageError(_MISSING_DEPS)
    try:
        assert get_language is not None
        return get_language(grammar)
    except (AttributeError, KeyError, ValueError, RuntimeError) as exc:  # pragma: no cover (depends on installed grammars)
        raise UnsupportedLanguageError(f"tree-sitter grammar not available: {grammar!r}") from exc


_PARSER_LOCAL = threading.local()


def _get_parser(grammar: str) -> _ParserLike:
    """
    Return a per-thread Parser instance for the requested grammar.

    tree-sitter Parser objects are not thread-safe.
    """

    if not _TREE_SITTER_AVAILABLE:  # pragma: no cover
        raise UnsupportedLanguageError(_MISSING_DEPS)

    parsers: dict[str, _ParserLike] | None = getattr(_PARSER_LOCAL, "parsers", None)
    if parsers is None:
        parsers = {}
        _PARSER_LOCAL.parsers = parsers

    parser = parsers.get(grammar)
    if parser is not None:
        return parser

    lang = _get_language(grammar)
    assert Parser is not None
    parser = Parser()
    parser.set_language(lang)
    parsers[grammar] = parser
    return parser


@lru_cache(maxsize=256)
def _compile_query(grammar: str, pattern: str) -> Any:
    lang: Any = _get_language(grammar)
    return lang.query(pattern)


def node_text(node: Any, source: bytes) -> str:
    """Return the exact source slice under `node`, or "" when it is not valid UTF-8."""

    try:
        return source[node.start_byte : node.end_byte].decode("utf-8")
    except UnicodeDecodeError:
        return ""


def _as_nodes(value: Any) -> Iterable[Any]:
    # Captures under a quantifier are reported as a list of nodes.
    if isinstance(value, list | tuple):
        return value
    return (value,)


def _to_match(pattern_index: int, captures: dict[str, Any], source: bytes) -> Match:
    out: list[Capture] = []
    for name, value in captures.items():
        for node in _as_nodes(value):
            row, col = node.start_point
            out.append(Capture(name=name, start_point=(int(row), int(col)), text=node_text(node, source)))
    return Match(pattern_index=pattern_index, captures=tuple(out))


class TreeSitterEngine:
    """`PatternEngine` backed by tree-sitter and the bundled grammars."""

    def parse(self, grammar: str, source: bytes) -> Any:
        return _get_parser(grammar).parse(source)

    def compile(self, grammar: str, pattern: str) -> Any:
        """
        Compile `pattern` for `grammar`.

        Raises PatternCompileError (with an empty rule name) on invalid queries;
        callers that know the rule re-raise with its name.
        """

        try:
            return _compile_query(grammar, pattern)
        except UnsupportedLanguageError:
            raise
        except _QUERY_ERRORS as exc:
            raise PatternCompileError("", grammar, str(exc)) from exc

    def evaluate(self, grammar: str, pattern: str, tree: Any, source: bytes) -> Sequence[Match]:
        query = self.compile(grammar, pattern)
        return [_to_match(int(index), captures, source) for index, captures in query.matches(tree.root_node)]


def is_available() -> bool:
    return _TREE_SITTER_AVAILABLE
