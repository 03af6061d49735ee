"""Error taxonomy for crosspub.

Every failure the build can report derives from CrosspubError, so the CLI can
catch a single type and print a readable message. Each error keeps the
context a user needs to fix the problem (the offending file, template or
directive).
"""

from __future__ import annotations

from pathlib import Path


class CrosspubError(Exception):
    """Base class for all errors raised by crosspub."""


class ConfigError(CrosspubError):
    """Configuration file is missing or cannot be interpreted."""


class MalformedFrontmatter(CrosspubError):
    """A source document has a missing or invalid frontmatter header.

    Attributes:
        source_path: Path of the offending file, if known.
        message: Human-readable reason.
    """

    def __init__(self, message: str, source_path: Path | None = None):
        self.source_path = source_path
        self.message = message
        where = f"{source_path}: " if source_path else ""
        super().__init__(f"{where}{message}")


class TemplateSyntaxError(CrosspubError):
    """A template contains an unbalanced or malformed directive.

    Attributes:
        message: Human-readable reason.
        directive: The directive text as written, e.g. ``{{ endif }}``.
        lineno: 1-based line of the directive.
        column: 1-based column of the directive.
        name: Template name or path.
    """

    def __init__(
        self,
        message: str,
        directive: str = "",
        lineno: int = 0,
        column: int = 0,
        name: str = "<string>",
    ):
        self.message = message
        self.directive = directive
        self.lineno = lineno
        self.column = column
        self.name = name
        location = f"{name}:{lineno}:{column}"
        detail = f" near {directive!r}" if directive else ""
        super().__init__(f"{location}: {message}{detail}")


class TemplateNotFound(CrosspubError):
    """No template with the given name exists on the search path."""

    def __init__(self, name: str, searched: list[Path]):
        self.name = name
        self.searched = searched
        dirs = ", ".join(str(p) for p in searched) or "<empty search path>"
        super().__init__(f"Template {name!r} not found (searched: {dirs})")


class AboutSourceMissing(CrosspubError):
    """The about page is enabled but its bio source file does not exist."""

    def __init__(self, source_path: Path):
        self.source_path = source_path
        super().__init__(f"About page enabled but {source_path} does not exist")


class OutputWriteError(CrosspubError):
    """Writing an output file failed."""

    def __init__(self, path: Path, original_error: OSError):
        self.path = path
        self.original_error = original_error
        reason = original_error.strerror or str(original_error)
        super().__init__(f"Could not write {path}: {reason}")
