"""Site building functionality for crosspub.

This module turns a set of Documents into the two published trees. Both
output formats run the same pipeline with their own template set and file
extension:

1. Sort posts (newest first) and topics (by slug).
2. Resolve the five page templates, user overrides before bundled defaults.
3. Render one page per post and topic, then the index, the optional about
   page and the optional post listing.
4. Write everything under the format's output root.

Every page of both formats is rendered before the first file is written, so
template and content errors stop the run with nothing written. A write
failure stops the run immediately; files already written are left in place.

Key functions:
- build_site: Build both output trees.
- render_format: Render all files of one output format in memory.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .collections import DocumentCollection
from .config import SiteConfig
from .content import ContentLoader, read_about_source
from .contexts import POSTS_SUBDIR, ContextBuilder, document_filename
from .document import Document
from .errors import ConfigError, MalformedFrontmatter, OutputWriteError
from .feeds import AtomFeedGenerator
from .gemtext import to_html
from .templates import DEFAULT_TEMPLATES_DIR, PAGE_TEMPLATES, TemplateLoader

logger = logging.getLogger(__name__)

POST_LIST_NAME = "posts"
RESERVED_TOPIC_SLUGS = frozenset({"index", "about"})


@dataclass(frozen=True)
class OutputFormat:
    """One published output tree.

    Attributes:
        name: ``html`` or ``gemini``; also the bundled template subdirectory.
        extension: File extension of pages and templates.
        root: Output root directory.
        template_dirs: Template search path, highest priority first.
        render_body: Turns a Gemtext body into the page ``content``.
    """

    name: str
    extension: str
    root: Path
    template_dirs: tuple[Path, ...]
    render_body: Callable[[str], str] | None = None


@dataclass(frozen=True)
class OutputFile:
    """A rendered file waiting to be written.

    Attributes:
        path: Destination path.
        content: Rendered text.
        title: What the file is, for progress messages.
    """

    path: Path
    content: str
    title: str


@dataclass
class BuildResult:
    """Result of a site build.

    Attributes:
        documents: All documents that were published.
        files: Every file written, in write order.
    """

    documents: list[Document]
    files: list[OutputFile] = field(default_factory=list)


def output_formats(config: SiteConfig) -> list[OutputFormat]:
    """Describe the HTML and Gemini trees for a configuration.

    Args:
        config: Site configuration.

    Returns:
        The HTML format followed by the Gemini format.
    """

    def search_path(override: Path | None, name: str) -> tuple[Path, ...]:
        dirs = [override] if override is not None else []
        dirs.append(DEFAULT_TEMPLATES_DIR / name)
        return tuple(dirs)

    return [
        OutputFormat(
            name="html",
            extension=".html",
            root=config.html_root,
            template_dirs=search_path(config.html_templates, "html"),
            render_body=to_html if config.html_gemtext else None,
        ),
        OutputFormat(
            name="gemini",
            extension=".gmi",
            root=config.gemini_root,
            template_dirs=search_path(config.gemini_templates, "gemini"),
        ),
    ]


def check_output_names(config: SiteConfig, documents: Sequence[Document]) -> None:
    """Reject slugs whose output file would collide with a generated page.

    Raises:
        MalformedFrontmatter: If a topic is named like the index or about
            page, or a post is named like the post listing.
    """
    for document in documents:
        if document.is_topic and document.slug in RESERVED_TOPIC_SLUGS:
            raise MalformedFrontmatter(
                f"topic slug {document.slug!r} is reserved for a generated page",
                document.source_path,
            )
        if document.is_post and config.post_list and document.slug == POST_LIST_NAME:
            raise MalformedFrontmatter(
                f"post slug {POST_LIST_NAME!r} is reserved for the post listing",
                document.source_path,
            )


def _stylesheet(config: SiteConfig, fmt: OutputFormat) -> OutputFile:
    if config.stylesheet is not None:
        if not config.stylesheet.is_file():
            raise ConfigError(f"Stylesheet {config.stylesheet} does not exist")
        source = config.stylesheet
    else:
        source = TemplateLoader(fmt.template_dirs, ".css").find("style")
    return OutputFile(
        fmt.root / "style.css", source.read_text(encoding="utf-8"), "stylesheet"
    )


def render_format(
    config: SiteConfig,
    fmt: OutputFormat,
    posts: Sequence[Document],
    topics: Sequence[Document],
    bio: str | None = None,
) -> list[OutputFile]:
    """Render every file of one output format.

    Args:
        config: Site configuration.
        fmt: Output format to render.
        posts: Posts, newest first.
        topics: Topics, by slug.
        bio: About page source; None when the about page is disabled.

    Returns:
        Files in write order: posts, topics, index, about, post listing,
        then format-specific extras.

    Raises:
        TemplateNotFound: If a bundled template is missing.
        TemplateSyntaxError: If a template cannot be parsed.
    """
    loader = TemplateLoader(fmt.template_dirs, fmt.extension)
    templates = loader.load_all(PAGE_TEMPLATES)
    builder = ContextBuilder(config, fmt.extension, posts, topics, fmt.render_body)
    ext = fmt.extension

    files: list[OutputFile] = []
    for post in posts:
        files.append(
            OutputFile(
                fmt.root / document_filename(post, ext),
                templates["post"].render(builder.post(post)),
                post.title,
            )
        )
    for topic in topics:
        files.append(
            OutputFile(
                fmt.root / document_filename(topic, ext),
                templates["topic"].render(builder.topic(topic)),
                topic.title,
            )
        )
    files.append(
        OutputFile(
            fmt.root / f"index{ext}", templates["index"].render(builder.index()), "index"
        )
    )
    if bio is not None:
        files.append(
            OutputFile(
                fmt.root / f"about{ext}",
                templates["about"].render(builder.about(bio)),
                "about",
            )
        )
    if config.post_list:
        files.append(
            OutputFile(
                fmt.root / POSTS_SUBDIR / f"{POST_LIST_NAME}{ext}",
                templates["postlist"].render(builder.postlist()),
                "post list",
            )
        )

    if fmt.name == "html":
        files.append(_stylesheet(config, fmt))
        if config.feed:
            feed = AtomFeedGenerator(ext).generate(config, posts)
            if feed is not None:
                files.append(
                    OutputFile(fmt.root / AtomFeedGenerator.filename, feed, "feed")
                )
    return files


def write_output(output: OutputFile) -> None:
    """Write one file, creating parent directories.

    Raises:
        OutputWriteError: If the directory or file cannot be written.
    """
    logger.debug('Writing "%s" to %s', output.title, output.path)
    try:
        output.path.parent.mkdir(parents=True, exist_ok=True)
        with open(output.path, "w", encoding="utf-8") as f:
            f.write(output.content)
    except OSError as exc:
        raise OutputWriteError(output.path, exc) from exc


def build_site(
    config: SiteConfig, documents: Sequence[Document] | None = None
) -> BuildResult:
    """Build the HTML and Gemini trees.

    Args:
        config: Site configuration.
        documents: Documents to publish. Loaded from the configured source
            directories when omitted.

    Returns:
        BuildResult listing the documents and every written file.

    Raises:
        MalformedFrontmatter: If a source document is invalid.
        AboutSourceMissing: If the about page is enabled without a bio.
        TemplateNotFound: If a bundled template is missing.
        TemplateSyntaxError: If a template cannot be parsed.
        OutputWriteError: If an output file cannot be written.
    """
    if documents is None:
        documents = ContentLoader(config.posts_dir, config.topics_dir).load()
    check_output_names(config, documents)

    collection = DocumentCollection(documents)
    posts = collection.posts()
    topics = collection.topics()
    bio = read_about_source(config.about_path) if config.use_about_page else None

    rendered = [
        render_format(config, fmt, posts, topics, bio)
        for fmt in output_formats(config)
    ]

    result = BuildResult(documents=list(documents))
    for files in rendered:
        for output in files:
            write_output(output)
            result.files.append(output)
    logger.debug("Wrote %d files", len(result.files))
    return result
