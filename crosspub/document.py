"""Document model for crosspub.

A Document is one parsed source file: either a dated Post or an undated
Topic. Documents are created by the frontmatter parser and never change
afterwards.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path

SAFE_SLUG_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class DocumentKind(enum.Enum):
    """Kind of source document."""

    POST = "post"
    TOPIC = "topic"


def is_safe_slug(slug: str) -> bool:
    """Check that a slug can be used as a file name on any platform.

    Args:
        slug: Candidate slug.

    Returns:
        True if the slug is non-empty, starts with a letter or digit and
        only contains letters, digits, dots, dashes and underscores.

    Examples:
        >>> is_safe_slug("hello-world")
        True

        >>> is_safe_slug("../etc/passwd")
        False
    """
    return bool(SAFE_SLUG_RE.match(slug))


@dataclass(frozen=True)
class Document:
    """A parsed post or topic.

    Attributes:
        kind: Post or Topic.
        title: Human-readable title from the frontmatter.
        slug: File-name-safe identifier used for output paths.
        date: Publication date; set for posts, None for topics.
        body: Gemtext body exactly as written after the frontmatter.
        source_path: File the document was parsed from, if any.
    """

    kind: DocumentKind
    title: str
    slug: str
    date: date | None
    body: str
    source_path: Path | None = None

    @property
    def is_post(self) -> bool:
        return self.kind is DocumentKind.POST

    @property
    def is_topic(self) -> bool:
        return self.kind is DocumentKind.TOPIC
