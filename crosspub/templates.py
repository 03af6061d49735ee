"""Template engine for crosspub.

This module implements the small directive language shared by the HTML and
Gemini templates, and the loader that finds templates on a search path.

Grammar:
- ``{name}`` / ``{obj.field}``: variable reference by dotted path.
- ``{{ if cond }} ... {{ endif }}``: render the block when ``cond`` is truthy.
  ``{{ if not cond }}`` negates the test. There is no ``else``.
- ``{{ for item in seq }} ... {{ endfor }}``: render the block once per
  element of ``seq`` with ``item`` bound to that element.

Missing variables never raise: they render as an empty string and test as
false, and a missing sequence loops zero times. Only the template source
itself can be wrong, which is reported as TemplateSyntaxError.

Key classes:
- Template: A compiled template, rendered against a context mapping.
- TemplateLoader: Finds and compiles named templates on an ordered search path.
"""

from __future__ import annotations

import logging
import re
from collections import ChainMap
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import TemplateNotFound, TemplateSyntaxError

__all__ = [
    "DEFAULT_TEMPLATES_DIR",
    "PAGE_TEMPLATES",
    "Template",
    "TemplateLoader",
    "TemplateNotFound",
    "TemplateSyntaxError",
    "compile_template",
    "render_string",
]

logger = logging.getLogger(__name__)

# Bundled templates, one subdirectory per output format
DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "templates" / "default"

PAGE_TEMPLATES = ("index", "post", "topic", "postlist", "about")

_NAME = r"[A-Za-z_][A-Za-z0-9_]*"
_PATH = rf"{_NAME}(?:\.{_NAME})*"
_PATH_RE = re.compile(rf"^{_PATH}$")
_NAME_RE = re.compile(rf"^{_NAME}$")

_TOKEN_RE = re.compile(
    r"(?P<directive>\{\{(?P<body>.*?)\}\})"
    rf"|(?P<variable>\{{(?P<path>{_PATH})\}})"
    r"|(?P<unclosed>\{\{)"
)

_MISSING = object()


@dataclass
class _Token:
    kind: str  # "text" | "variable" | "directive"
    value: str
    raw: str = ""
    lineno: int = 0
    column: int = 0


def _location(source: str, offset: int) -> tuple[int, int]:
    lineno = source.count("\n", 0, offset) + 1
    column = offset - (source.rfind("\n", 0, offset) + 1) + 1
    return lineno, column


def _tokenize(source: str, name: str) -> list[_Token]:
    """Split template source into text, variable and directive tokens.

    A directive that is the only thing on its line swallows that whole
    line, including the line break, so block tags leave no blank lines.

    Args:
        source: Template source.
        name: Template name for error messages.

    Returns:
        List of tokens in source order.
    """
    tokens: list[_Token] = []
    pos = 0
    while True:
        match = _TOKEN_RE.search(source, pos)
        if match is None:
            break
        start, end = match.span()
        lineno, column = _location(source, start)

        if match.group("unclosed"):
            line_end = source.find("\n", start)
            fragment = source[start:] if line_end == -1 else source[start:line_end]
            raise TemplateSyntaxError(
                "unclosed directive, expected '}}'", fragment, lineno, column, name
            )

        if match.group("variable"):
            if start > pos:
                tokens.append(_Token("text", source[pos:start]))
            tokens.append(
                _Token("variable", match.group("path"), match.group(0), lineno, column)
            )
            pos = end
            continue

        text_end = start
        line_start = source.rfind("\n", 0, start) + 1
        line_end = source.find("\n", end)
        tail_end = len(source) if line_end == -1 else line_end
        if (
            line_start >= pos
            and not source[line_start:start].strip()
            and not source[end:tail_end].strip()
        ):
            text_end = line_start
            end = len(source) if line_end == -1 else line_end + 1

        if text_end > pos:
            tokens.append(_Token("text", source[pos:text_end]))
        tokens.append(
            _Token(
                "directive", match.group("body").strip(), match.group(0), lineno, column
            )
        )
        pos = end

    if pos < len(source):
        tokens.append(_Token("text", source[pos:]))
    return tokens


def _lookup(scope: Mapping[str, Any], path: tuple[str, ...]) -> Any:
    value: Any = scope
    for part in path:
        if not isinstance(value, Mapping):
            return _MISSING
        value = value.get(part, _MISSING)
        if value is _MISSING:
            return _MISSING
    return value


def _to_text(value: Any) -> str:
    if value is _MISSING or value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (Mapping, list, tuple)):
        return ""
    return str(value)


def _is_truthy(value: Any) -> bool:
    if value is _MISSING or value is None:
        return False
    return bool(value)


@dataclass
class _Text:
    text: str

    def render(self, scope: ChainMap, out: list[str]) -> None:
        out.append(self.text)


@dataclass
class _Variable:
    path: tuple[str, ...]

    def render(self, scope: ChainMap, out: list[str]) -> None:
        out.append(_to_text(_lookup(scope, self.path)))


@dataclass
class _Conditional:
    path: tuple[str, ...]
    negate: bool = False
    body: list = field(default_factory=list)

    def render(self, scope: ChainMap, out: list[str]) -> None:
        if _is_truthy(_lookup(scope, self.path)) != self.negate:
            for node in self.body:
                node.render(scope, out)


@dataclass
class _Loop:
    target: str
    path: tuple[str, ...]
    body: list = field(default_factory=list)

    def render(self, scope: ChainMap, out: list[str]) -> None:
        items = _lookup(scope, self.path)
        if not isinstance(items, (list, tuple)):
            return
        for item in items:
            frame = scope.new_child({self.target: item})
            for node in self.body:
                node.render(frame, out)


class _Parser:
    """Recursive-descent parser from tokens to a node tree."""

    def __init__(self, tokens: list[_Token], name: str):
        self.tokens = tokens
        self.name = name
        self.index = 0

    def parse(self) -> list:
        nodes, _ = self._parse_block(None)
        return nodes

    def _error(self, message: str, token: _Token) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            message, token.raw, token.lineno, token.column, self.name
        )

    def _parse_block(self, terminator: str | None) -> tuple[list, _Token | None]:
        nodes: list = []
        while self.index < len(self.tokens):
            token = self.tokens[self.index]
            self.index += 1
            if token.kind == "text":
                nodes.append(_Text(token.value))
                continue
            if token.kind == "variable":
                nodes.append(_Variable(tuple(token.value.split("."))))
                continue

            words = token.value.split()
            keyword = words[0] if words else ""
            if keyword in ("endif", "endfor"):
                if keyword != terminator:
                    expected = (
                        f", expected '{terminator}'" if terminator else " with no open block"
                    )
                    raise self._error(f"unexpected '{keyword}'{expected}", token)
                if len(words) != 1:
                    raise self._error(f"'{keyword}' takes no arguments", token)
                return nodes, token
            if keyword == "if":
                nodes.append(self._parse_if(token, words))
            elif keyword == "for":
                nodes.append(self._parse_for(token, words))
            elif not keyword:
                raise self._error("empty directive", token)
            else:
                raise self._error(f"unknown directive '{keyword}'", token)
        return nodes, None

    def _path(self, text: str, token: _Token) -> tuple[str, ...]:
        if not _PATH_RE.match(text):
            raise self._error(f"invalid variable path {text!r}", token)
        return tuple(text.split("."))

    def _parse_if(self, token: _Token, words: list[str]) -> _Conditional:
        if len(words) == 2:
            node = _Conditional(self._path(words[1], token))
        elif len(words) == 3 and words[1] == "not":
            node = _Conditional(self._path(words[2], token), negate=True)
        else:
            raise self._error("expected '{{ if name }}' or '{{ if not name }}'", token)
        node.body, end = self._parse_block("endif")
        if end is None:
            raise self._error("'if' block is never closed with '{{ endif }}'", token)
        return node

    def _parse_for(self, token: _Token, words: list[str]) -> _Loop:
        if len(words) != 4 or words[2] != "in":
            raise self._error("expected '{{ for item in sequence }}'", token)
        if not _NAME_RE.match(words[1]):
            raise self._error(f"invalid loop variable {words[1]!r}", token)
        node = _Loop(words[1], self._path(words[3], token))
        node.body, end = self._parse_block("endfor")
        if end is None:
            raise self._error("'for' block is never closed with '{{ endfor }}'", token)
        return node


class Template:
    """A compiled template.

    Attributes:
        name: Template name or source path, used in error messages.
    """

    def __init__(self, nodes: list, name: str = "<string>"):
        self._nodes = nodes
        self.name = name

    def render(self, context: Mapping[str, Any] | None = None) -> str:
        """Render the template.

        Args:
            context: Variables available to the template. Values may be
                scalars, booleans, lists and nested mappings.

        Returns:
            Rendered text.
        """
        scope = ChainMap(dict(context or {}))
        out: list[str] = []
        for node in self._nodes:
            node.render(scope, out)
        return "".join(out)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"Template({self.name!r})"


def compile_template(source: str, name: str = "<string>") -> Template:
    """Compile template source into a reusable Template.

    Args:
        source: Template text.
        name: Name used in error messages.

    Returns:
        Compiled Template.

    Raises:
        TemplateSyntaxError: If a directive is malformed or unbalanced.
    """
    tokens = _tokenize(source, name)
    return Template(_Parser(tokens, name).parse(), name)


def render_string(source: str, context: Mapping[str, Any] | None = None) -> str:
    """Compile and render a template string in one step."""
    return compile_template(source).render(context)


class TemplateLoader:
    """Loads named templates from an ordered list of directories.

    The first directory that contains ``{name}{extension}`` wins, so a user
    override directory placed before the bundled defaults replaces
    individual templates. Directories that do not exist are skipped.

    Attributes:
        search_path: Directories to search, highest priority first.
        extension: File extension of templates, e.g. ``.html``.
    """

    def __init__(self, search_path: Iterable[Path], extension: str):
        self.search_path = [Path(p) for p in search_path]
        self.extension = extension
        self._cache: dict[str, Template] = {}

    def find(self, name: str) -> Path:
        """Return the path of the highest-priority template file.

        Raises:
            TemplateNotFound: If no directory holds the template.
        """
        for directory in self.search_path:
            candidate = directory / f"{name}{self.extension}"
            if candidate.is_file():
                return candidate
        raise TemplateNotFound(f"{name}{self.extension}", self.search_path)

    def load(self, name: str) -> Template:
        """Find, read and compile a template, caching the result.

        Args:
            name: Template name without extension.

        Returns:
            Compiled Template.
        """
        if name not in self._cache:
            path = self.find(name)
            logger.debug("Using template %s", path)
            source = path.read_text(encoding="utf-8")
            self._cache[name] = compile_template(source, name=str(path))
        return self._cache[name]

    def load_all(self, names: Iterable[str] = PAGE_TEMPLATES) -> dict[str, Template]:
        """Load several templates, failing on the first missing one."""
        return {name: self.load(name) for name in names}
