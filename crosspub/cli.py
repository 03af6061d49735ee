"""Command-line interface for crosspub.

This module defines the CLI commands using Click framework.

Commands:
- build: Build the HTML and Gemini trees.
- init: Set up a new crosspub project directory.
- new: Create a new post or topic interactively.
"""

from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime
from pathlib import Path

import click
import questionary

from . import __version__
from .build import POST_LIST_NAME, RESERVED_TOPIC_SLUGS, build_site
from .config import CONFIG_FILENAME, DEFAULT_CONFIG, load_config
from .content import iter_source_files
from .document import DocumentKind, is_safe_slug
from .errors import CrosspubError
from .frontmatter import load_document
from .utils import slugify

# Files copied into a new project by `crosspub init`
_SCAFFOLD_DIR = Path(__file__).parent / "templates" / "scaffold"

_KIND_CHOICES = ["Post", "Topic"]


@click.group()
@click.version_option(version=__version__, prog_name="crosspub")
def cli():
    """Publish Gemtext posts and topics to HTML and Gemini."""


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file to use instead of crosspub.yaml",
)
@click.option(
    "--dir",
    "project_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Project directory; relative paths in the config resolve against it",
)
@click.option("-v", "--verbose", is_flag=True, help="List every file written")
@click.option("--debug", is_flag=True, help="Show debug logging")
def build(config_path: Path | None, project_dir: Path, verbose: bool, debug: bool):
    """Build the HTML and Gemini trees."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    project_root = project_dir.resolve()

    try:
        config = load_config(project_root, config_path)
        result = build_site(config)
    except CrosspubError as exc:
        _report_failure(exc, project_root)
        raise SystemExit(1) from None

    if verbose:
        for output in result.files:
            click.echo(f'Writing "{output.title}" to {output.path}')
    posts = sum(1 for d in result.documents if d.is_post)
    topics = len(result.documents) - posts
    click.echo(
        f"Published {posts} posts and {topics} topics "
        f"to {config.html_root} and {config.gemini_root}"
    )


def _report_failure(exc: CrosspubError, project_root: Path) -> None:
    """Print a build error in a readable form."""
    click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
    source_path = getattr(exc, "source_path", None)
    if source_path is not None:
        try:
            shown = source_path.relative_to(project_root)
        except ValueError:
            shown = source_path
        click.echo(click.style(f"  File: {shown}", fg="yellow"), err=True)
        message = getattr(exc, "message", str(exc))
    else:
        message = str(exc)
    click.echo(click.style(f"  Error: {message}", fg="white"), err=True)


@cli.command()
@click.argument(
    "directory", default=".", type=click.Path(file_okay=False, path_type=Path)
)
def init(directory: Path):
    """Set up a crosspub project with a config and source directories."""
    target = directory.resolve()
    if (target / CONFIG_FILENAME).exists():
        raise click.ClickException(
            f"Refusing to overwrite existing config: {target / CONFIG_FILENAME}"
        )
    _scaffold(target)
    click.echo(f"Initialized crosspub project in {target}")
    click.echo("Blog posts go in posts/, wiki and garden pages go in topics/.")


def _scaffold(root: Path) -> None:
    """Create the config, the about stub and the source directories.

    Existing files other than the config are left untouched.

    Args:
        root: Project directory, created if needed.
    """
    for src_path in _SCAFFOLD_DIR.rglob("*"):
        if src_path.is_dir():
            continue
        dest_path = root / src_path.relative_to(_SCAFFOLD_DIR)
        if dest_path.exists():
            continue
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src_path, dest_path)
    for key in ("posts_dir", "topics_dir"):
        (root / DEFAULT_CONFIG[key]).mkdir(parents=True, exist_ok=True)


@cli.command()
@click.option(
    "--dir",
    "project_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Project directory",
)
def new(project_dir: Path):
    """Create a new post or topic interactively."""
    project_root = project_dir.resolve()
    try:
        config = load_config(project_root)
    except CrosspubError as exc:
        raise click.ClickException(f"{exc}. Run `crosspub init` first.") from None

    kind = questionary.select(
        "What do you want to write?",
        choices=_KIND_CHOICES,
        style=_questionary_style(),
    ).ask()
    if kind is None:
        raise click.Abort()

    title = questionary.text(
        "Title:",
        validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
        style=_questionary_style(),
    ).ask()
    if title is None:
        raise click.Abort()
    title = title.strip()

    is_post = kind == "Post"
    doc_kind = DocumentKind.POST if is_post else DocumentKind.TOPIC
    target_dir = config.posts_dir if is_post else config.topics_dir

    def slug_problem(value: str) -> str | None:
        if not is_safe_slug(value):
            return "Use letters, digits, dots, dashes and underscores"
        if not is_post and value in RESERVED_TOPIC_SLUGS:
            return f"'{value}' is reserved for a generated page"
        if is_post and config.post_list and value == POST_LIST_NAME:
            return f"'{value}' is reserved for the post listing"
        return None

    slug = questionary.text(
        "Slug:",
        default=slugify(title),
        validate=lambda x: slug_problem(x.strip()) or True,
        style=_questionary_style(),
    ).ask()
    if slug is None:
        raise click.Abort()
    slug = slug.strip()
    problem = slug_problem(slug)
    if problem is not None:
        raise click.ClickException(problem)

    target_path = target_dir / f"{slug}.gmi"
    existing = _get_existing_slugs(target_dir, doc_kind)
    if slug in existing:
        raise click.ClickException(
            f"A {kind.lower()} with slug '{slug}' already exists: {existing[slug]}"
        )
    if target_path.exists():
        raise click.ClickException(f"File already exists: {target_path}")

    date = datetime.now().strftime("%Y-%m-%d") if is_post else None
    target_dir.mkdir(parents=True, exist_ok=True)
    target_path.write_text(_new_document(title, slug, date), encoding="utf-8")
    click.echo(f"Created {target_path}")


def _get_existing_slugs(folder: Path, kind: DocumentKind) -> dict[str, Path]:
    """Map the frontmatter slugs already used in a folder to their files."""
    try:
        return {
            load_document(path, expected_kind=kind).slug: path
            for path in iter_source_files(folder)
        }
    except CrosspubError as exc:
        raise click.ClickException(str(exc)) from None


def _toml_string(value: str) -> str:
    """Quote a value as a TOML basic string."""
    # JSON string escapes are a subset of TOML basic string escapes
    return json.dumps(value, ensure_ascii=False)


def _new_document(title: str, slug: str, date: str | None) -> str:
    """Build the source text of a new document."""
    header = [
        "---",
        f"title = {_toml_string(title)}",
        f"slug = {_toml_string(slug)}",
    ]
    if date is not None:
        header.append(f"date = {_toml_string(date)}")
    header.append("---")
    return "\n".join(header) + f"\n# {title}\n\n"


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()
