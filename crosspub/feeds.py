"""Atom feed generation for crosspub.

The HTML tree gets an ``atom.xml`` listing every post, newest first. The
feed timestamp is the date of the newest post, never the build time, so
rebuilding unchanged content produces an identical file.

Classes:
    AtomFeedGenerator: Generates the Atom feed for the HTML tree.
"""

from __future__ import annotations

from collections.abc import Sequence

from markupsafe import escape

from .config import SiteConfig
from .contexts import document_filename
from .document import Document

ATOM_NS = "http://www.w3.org/2005/Atom"


def _timestamp(document: Document) -> str:
    return f"{document.date.isoformat()}T00:00:00Z" if document.date else ""


class AtomFeedGenerator:
    """Generates an Atom 1.0 feed of posts.

    Requires ``url`` in the site configuration to build absolute links.
    """

    filename = "atom.xml"

    def __init__(self, extension: str = ".html"):
        self.extension = extension

    def generate(self, config: SiteConfig, posts: Sequence[Document]) -> str | None:
        """Generate feed content.

        Args:
            config: Site configuration providing name, url and username.
            posts: Posts sorted newest first.

        Returns:
            Atom XML, or None when there is no base URL or no posts.
        """
        base_url = config.url.rstrip("/")
        if not base_url or not posts:
            return None

        lines = [
            '<?xml version="1.0" encoding="utf-8"?>',
            f'<feed xmlns="{ATOM_NS}">',
            f"  <title>{escape(config.name)}</title>",
            f'  <link href="{escape(base_url)}/"/>',
            f'  <link rel="self" href="{escape(base_url)}/{self.filename}"/>',
            f"  <id>{escape(base_url)}/</id>",
            f"  <updated>{_timestamp(posts[0])}</updated>",
        ]
        # Atom requires an author; fall back to the site name
        author = config.username or config.name or base_url
        lines.append(f"  <author><name>{escape(author)}</name></author>")
        for post in posts:
            link = escape(f"{base_url}/{document_filename(post, self.extension)}")
            lines.extend(
                [
                    "  <entry>",
                    f"    <title>{escape(post.title)}</title>",
                    f'    <link href="{link}"/>',
                    f"    <id>{link}</id>",
                    f"    <updated>{_timestamp(post)}</updated>",
                    f'    <content type="text">{escape(post.body)}</content>',
                    "  </entry>",
                ]
            )
        lines.append("</feed>")
        return "\n".join(lines) + "\n"
