"""Gemtext parsing and HTML conversion.

Gemtext is line oriented: the first characters of a line decide its type.
This module tokenizes a Gemtext body and can turn the tokens into plain HTML
for sites that enable ``html_gemtext``.

Line types:
- ``=> url [label]``: link
- ``* item``: unordered list item
- ``> quote``: blockquote
- ``#``, ``##``, ``###``: headings
- a line starting with three backticks toggles a preformatted block
- anything else: text
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass

from markupsafe import escape

PREFORMAT_TOGGLE = "```"


class TokenKind(enum.Enum):
    TEXT = "text"
    LINK = "link"
    LIST_ITEM = "list_item"
    QUOTE = "quote"
    HEADING = "heading"
    SUBHEADING = "subheading"
    SUBSUBHEADING = "subsubheading"
    PREFORMATTED = "preformatted"


@dataclass(frozen=True)
class GemtextToken:
    """One logical Gemtext line (or a whole preformatted block).

    Attributes:
        kind: Line type.
        text: Line content without its prefix; for links, the URL.
        label: Link label, or alt text of a preformatted block.
    """

    kind: TokenKind
    text: str
    label: str = ""


_PREFIXES = (
    ("=>", TokenKind.LINK),
    ("###", TokenKind.SUBSUBHEADING),
    ("##", TokenKind.SUBHEADING),
    ("#", TokenKind.HEADING),
    ("* ", TokenKind.LIST_ITEM),
    (">", TokenKind.QUOTE),
)


def _parse_line(line: str) -> GemtextToken:
    for prefix, kind in _PREFIXES:
        if not line.startswith(prefix):
            continue
        rest = line[len(prefix) :].strip()
        if kind is TokenKind.LINK:
            # any run of whitespace separates the url from its label
            parts = rest.split(None, 1) or [""]
            label = parts[1].strip() if len(parts) > 1 else ""
            return GemtextToken(kind, parts[0], label)
        return GemtextToken(kind, rest)
    return GemtextToken(TokenKind.TEXT, line)


def parse_gemtext(text: str) -> list[GemtextToken]:
    """Tokenize a Gemtext document.

    Args:
        text: Gemtext source.

    Returns:
        List of tokens. Lines inside a preformatted block are joined into a
        single PREFORMATTED token, newlines kept. An unterminated block runs
        to the end of the document.
    """
    tokens: list[GemtextToken] = []
    block: list[str] | None = None
    alt_text = ""
    for line in text.splitlines():
        if line.startswith(PREFORMAT_TOGGLE):
            if block is None:
                block = []
                alt_text = line[len(PREFORMAT_TOGGLE) :].strip()
            else:
                tokens.append(
                    GemtextToken(TokenKind.PREFORMATTED, "\n".join(block), alt_text)
                )
                block = None
            continue
        if block is not None:
            block.append(line)
            continue
        tokens.append(_parse_line(line))
    if block is not None:
        tokens.append(GemtextToken(TokenKind.PREFORMATTED, "\n".join(block), alt_text))
    return tokens


def _token_html(token: GemtextToken) -> str:
    text = escape(token.text)
    if token.kind is TokenKind.LINK:
        label = escape(token.label) if token.label else text
        return f'<p><a href="{text}">{label}</a></p>'
    if token.kind is TokenKind.HEADING:
        return f"<h1>{text}</h1>"
    if token.kind is TokenKind.SUBHEADING:
        return f"<h2>{text}</h2>"
    if token.kind is TokenKind.SUBSUBHEADING:
        return f"<h3>{text}</h3>"
    if token.kind is TokenKind.QUOTE:
        return f"<blockquote>{text}</blockquote>"
    if token.kind is TokenKind.PREFORMATTED:
        if token.label:
            return f'<pre aria-label="{escape(token.label)}">{text}</pre>'
        return f"<pre>{text}</pre>"
    if token.kind is TokenKind.LIST_ITEM:
        return f"<li>{text}</li>"
    return f"<p>{text}</p>"


def tokens_to_html(tokens: Iterable[GemtextToken]) -> str:
    """Render Gemtext tokens as HTML.

    Consecutive list items share one ``<ul>``. Blank text lines are dropped.

    Args:
        tokens: Tokens from parse_gemtext.

    Returns:
        HTML fragment, one element per line.
    """
    lines: list[str] = []
    in_list = False
    for token in tokens:
        if token.kind is not TokenKind.LIST_ITEM and in_list:
            lines.append("</ul>")
            in_list = False
        if token.kind is TokenKind.TEXT and not token.text.strip():
            continue
        if token.kind is TokenKind.LIST_ITEM and not in_list:
            lines.append("<ul>")
            in_list = True
        lines.append(_token_html(token))
    if in_list:
        lines.append("</ul>")
    return "\n".join(lines) + "\n" if lines else ""


def to_html(text: str) -> str:
    """Convert a Gemtext document to an HTML fragment."""
    return tokens_to_html(parse_gemtext(text))
