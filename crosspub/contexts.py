"""Render contexts for crosspub pages.

Every page is rendered from a plain mapping. All contexts share the same
base keys so templates can draw the same navigation everywhere:

- ``site``: ``name``, ``url``, ``username``
- ``has_about``, ``has_posts``, ``has_topics``, ``post_list``, ``has_feed``:
  booleans; ``has_feed`` is true when the HTML tree gets an ``atom.xml``

Document entries (``post``, ``topic`` and the items of ``posts`` and
``topics``) carry ``title``, ``slug``, ``filename`` (relative to the output
root), ``link`` (root-absolute), ``date`` and ``long_date``. Page contexts
additionally carry ``body`` (the Gemtext source, verbatim) and ``content``
(the body as prepared for the output format).
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from .config import SiteConfig
from .document import Document
from .utils import long_date

POSTS_SUBDIR = "posts"


def _verbatim(text: str) -> str:
    return text


def document_filename(document: Document, extension: str) -> str:
    """Output path of a document relative to the format root.

    Posts live under ``posts/``; topics sit at the root.

    Args:
        document: Post or topic.
        extension: Output extension including the dot.

    Returns:
        Relative path using forward slashes.
    """
    if document.is_post:
        return f"{POSTS_SUBDIR}/{document.slug}{extension}"
    return f"{document.slug}{extension}"


class ContextBuilder:
    """Builds render contexts for one output format.

    Attributes:
        config: Site configuration.
        extension: Output file extension including the dot.
        posts: Sorted posts.
        topics: Sorted topics.
        render_body: Turns a Gemtext body into the format's ``content``.
    """

    def __init__(
        self,
        config: SiteConfig,
        extension: str,
        posts: Sequence[Document],
        topics: Sequence[Document],
        render_body: Callable[[str], str] | None = None,
    ):
        self.config = config
        self.extension = extension
        self.posts = posts
        self.topics = topics
        self.render_body = render_body or _verbatim

    def base(self) -> dict[str, Any]:
        return {
            "site": self.config.site_context(),
            "has_about": self.config.use_about_page,
            "has_posts": bool(self.posts),
            "has_topics": bool(self.topics),
            "post_list": self.config.post_list,
            "has_feed": self.config.feed and bool(self.config.url) and bool(self.posts),
        }

    def item(self, document: Document) -> dict[str, Any]:
        filename = document_filename(document, self.extension)
        return {
            "title": document.title,
            "slug": document.slug,
            "filename": filename,
            "link": f"/{filename}",
            "date": document.date.isoformat() if document.date else "",
            "long_date": long_date(document.date),
        }

    def page(self, document: Document) -> dict[str, Any]:
        entry = self.item(document)
        entry["body"] = document.body
        entry["content"] = self.render_body(document.body)
        return entry

    def post(self, document: Document) -> dict[str, Any]:
        context = self.base()
        context["post"] = self.page(document)
        return context

    def topic(self, document: Document) -> dict[str, Any]:
        context = self.base()
        context["topic"] = self.page(document)
        return context

    def index(self) -> dict[str, Any]:
        context = self.base()
        context["posts"] = [self.item(p) for p in self.posts]
        context["topics"] = [self.item(t) for t in self.topics]
        if self.posts:
            context["latest_post"] = self.item(self.posts[0])
        return context

    def postlist(self) -> dict[str, Any]:
        context = self.base()
        context["posts"] = [self.item(p) for p in self.posts]
        return context

    def about(self, bio: str) -> dict[str, Any]:
        context = self.base()
        context["about"] = {"body": bio, "content": self.render_body(bio)}
        return context
