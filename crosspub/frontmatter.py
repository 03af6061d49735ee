"""Frontmatter parsing for crosspub source documents.

A source document starts with a header delimited by two lines containing
exactly ``---``. The header is a TOML block::

    ---
    title = "Hello, Gemini"
    slug = "hello-gemini"
    date = "2024-03-01"
    ---
    # Hello
    Body text in Gemtext.

A ``date`` key makes the document a Post; without it the document is a Topic.
Everything after the closing delimiter line is the body, untouched.
"""

from __future__ import annotations

import logging
import re
import tomllib
from datetime import date, datetime
from pathlib import Path
from typing import Any

from .document import Document, DocumentKind, is_safe_slug
from .errors import MalformedFrontmatter

logger = logging.getLogger(__name__)

DELIMITER = "---"
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def split_frontmatter(
    text: str, source_path: Path | None = None
) -> tuple[str, str]:
    """Split raw document text into its header and body.

    Args:
        text: Raw file content.
        source_path: Path used in error messages.

    Returns:
        Tuple of (header text, body text).

    Raises:
        MalformedFrontmatter: If either delimiter is missing.
    """
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n") != DELIMITER:
        raise MalformedFrontmatter(
            "document must start with a '---' frontmatter delimiter", source_path
        )
    for index in range(1, len(lines)):
        if lines[index].rstrip("\r\n") == DELIMITER:
            header = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return header, body
    raise MalformedFrontmatter(
        "frontmatter is missing its closing '---' delimiter", source_path
    )


def parse_date(value: Any, source_path: Path | None = None) -> date:
    """Parse a frontmatter ``date`` value.

    Accepts a ``YYYY-MM-DD`` string or an unquoted TOML local date.

    Args:
        value: Value read from the TOML header.
        source_path: Path used in error messages.

    Returns:
        The parsed date.

    Raises:
        MalformedFrontmatter: If the value is not a valid calendar date.
    """
    # datetime is a date subclass; a full timestamp is not accepted
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, str) and DATE_RE.match(value):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise MalformedFrontmatter(
        f"date {value!r} is not formatted as YYYY-MM-DD", source_path
    )


def _require_string(
    meta: dict[str, Any], key: str, source_path: Path | None
) -> str:
    if key not in meta:
        raise MalformedFrontmatter(f"missing required key {key!r}", source_path)
    value = meta[key]
    if not isinstance(value, str) or not value.strip():
        raise MalformedFrontmatter(
            f"key {key!r} must be a non-empty string", source_path
        )
    return value


def parse_document(
    text: str,
    source_path: Path | None = None,
    expected_kind: DocumentKind | None = None,
) -> Document:
    """Parse raw document text into a Document.

    Args:
        text: Raw file content, frontmatter first.
        source_path: Path of the source file, kept on the Document and used
            in error messages.
        expected_kind: Kind implied by the source directory. When given, a
            post without a date or a topic with one is rejected.

    Returns:
        The parsed Document.

    Raises:
        MalformedFrontmatter: If the header is missing, unterminated, not
            valid TOML, lacks a required key, has an unsafe slug or a badly
            formatted date.
    """
    header, body = split_frontmatter(text, source_path)
    try:
        meta = tomllib.loads(header)
    except tomllib.TOMLDecodeError as exc:
        raise MalformedFrontmatter(
            f"frontmatter is not valid TOML ({exc})", source_path
        ) from exc

    title = _require_string(meta, "title", source_path)
    slug = _require_string(meta, "slug", source_path)
    if not is_safe_slug(slug):
        raise MalformedFrontmatter(
            f"slug {slug!r} is not safe to use as a file name", source_path
        )

    has_date = "date" in meta
    if expected_kind is DocumentKind.POST and not has_date:
        raise MalformedFrontmatter("missing required key 'date'", source_path)
    if expected_kind is DocumentKind.TOPIC and has_date:
        raise MalformedFrontmatter("topics must not declare a date", source_path)

    if has_date:
        kind = DocumentKind.POST
        doc_date: date | None = parse_date(meta["date"], source_path)
    else:
        kind = DocumentKind.TOPIC
        doc_date = None

    return Document(
        kind=kind,
        title=title,
        slug=slug,
        date=doc_date,
        body=body,
        source_path=source_path,
    )


def load_document(
    path: Path, expected_kind: DocumentKind | None = None
) -> Document:
    """Read and parse a source file.

    Args:
        path: Path to a UTF-8 source file.
        expected_kind: Kind implied by the directory the file lives in.

    Returns:
        The parsed Document.
    """
    logger.debug("Parsing %s", path)
    text = path.read_text(encoding="utf-8")
    return parse_document(text, source_path=path, expected_kind=expected_kind)
