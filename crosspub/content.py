"""Content loading for crosspub.

This module discovers source files on disk and turns them into Document
objects. Posts and topics live in separate source directories; each file is
parsed with the kind its directory implies.

Key classes:
- ContentLoader: Loads all posts and topics from their source directories.

Key functions:
- iter_source_files: List the Gemtext files in a directory.
- read_about_source: Read the bio text used for the about page.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .document import Document, DocumentKind
from .errors import AboutSourceMissing, MalformedFrontmatter
from .frontmatter import load_document

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".gmi"


def iter_source_files(directory: Path) -> list[Path]:
    """List Gemtext source files in a directory.

    Hidden files are skipped. A missing directory yields no files.

    Args:
        directory: Directory to scan (not recursive).

    Returns:
        Sorted list of ``*.gmi`` paths.
    """
    if not directory.is_dir():
        return []
    return sorted(
        path
        for path in directory.iterdir()
        if path.is_file()
        and path.suffix.lower() == SOURCE_SUFFIX
        and not path.name.startswith(".")
    )


def read_about_source(path: Path) -> str:
    """Read the about page bio.

    The bio is plain Gemtext with no frontmatter and is used as-is.

    Args:
        path: Path to the bio file.

    Returns:
        The file content.

    Raises:
        AboutSourceMissing: If the file does not exist.
    """
    if not path.is_file():
        raise AboutSourceMissing(path)
    return path.read_text(encoding="utf-8")


class ContentLoader:
    """Loads posts and topics from their source directories.

    Attributes:
        posts_dir: Directory holding post sources.
        topics_dir: Directory holding topic sources.
    """

    def __init__(self, posts_dir: Path, topics_dir: Path):
        self.posts_dir = posts_dir
        self.topics_dir = topics_dir

    def load(self) -> list[Document]:
        """Load every post and topic.

        Returns:
            Posts followed by topics, each in file name order.

        Raises:
            MalformedFrontmatter: If a file cannot be parsed or two documents
                of the same kind share a slug.
        """
        posts = self._load_kind(self.posts_dir, DocumentKind.POST)
        topics = self._load_kind(self.topics_dir, DocumentKind.TOPIC)
        logger.debug("Loaded %d posts and %d topics", len(posts), len(topics))
        return posts + topics

    def _load_kind(self, directory: Path, kind: DocumentKind) -> list[Document]:
        documents: list[Document] = []
        seen: dict[str, Path] = {}
        for path in iter_source_files(directory):
            document = load_document(path, expected_kind=kind)
            if document.slug in seen:
                raise MalformedFrontmatter(
                    f"slug {document.slug!r} is already used by {seen[document.slug]}",
                    path,
                )
            seen[document.slug] = path
            documents.append(document)
        return documents
