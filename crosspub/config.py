"""Site configuration for crosspub.

Configuration is a flat YAML mapping, usually ``crosspub.yaml`` in the
project directory. Values are merged over DEFAULT_CONFIG and turned into a
SiteConfig whose paths are resolved against the project root.

Key functions:
- find_config: Locate the configuration file.
- load_config: Load and validate configuration into a SiteConfig.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click
import yaml

from .errors import ConfigError

CONFIG_FILENAME = "crosspub.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "name": "",
    "url": "",
    "username": "",
    "html_root": "public_html",
    "gemini_root": "public_gemini",
    "posts_dir": "posts",
    "topics_dir": "topics",
    "use_about_page": False,
    "about_path": "about.gmi",
    "post_list": False,
    "html_templates": None,
    "gemini_templates": None,
    "stylesheet": None,
    "html_gemtext": False,
    "feed": True,
}

_BOOL_KEYS = ("use_about_page", "post_list", "html_gemtext", "feed")
_STRING_KEYS = ("name", "url", "username")
_PATH_KEYS = ("html_root", "gemini_root", "posts_dir", "topics_dir", "about_path")
_OPTIONAL_PATH_KEYS = ("html_templates", "gemini_templates", "stylesheet")


@dataclass(frozen=True)
class SiteConfig:
    """Fully resolved configuration for one build.

    Attributes:
        name: Site name.
        url: Base URL of the HTML site, without trailing slash.
        username: Author name.
        html_root: Output root of the HTML tree.
        gemini_root: Output root of the Gemini tree.
        posts_dir: Source directory of posts.
        topics_dir: Source directory of topics.
        use_about_page: Whether to render the about page.
        about_path: Bio source for the about page.
        post_list: Whether to render the standalone post listing.
        html_templates: Optional directory overriding HTML templates.
        gemini_templates: Optional directory overriding Gemini templates.
        stylesheet: Optional CSS file copied into the HTML tree.
        html_gemtext: Convert Gemtext bodies to HTML markup in the HTML tree.
        feed: Write an Atom feed into the HTML tree.
    """

    name: str
    url: str
    username: str
    html_root: Path
    gemini_root: Path
    posts_dir: Path = Path("posts")
    topics_dir: Path = Path("topics")
    use_about_page: bool = False
    about_path: Path = Path("about.gmi")
    post_list: bool = False
    html_templates: Path | None = None
    gemini_templates: Path | None = None
    stylesheet: Path | None = None
    html_gemtext: bool = False
    feed: bool = True

    def site_context(self) -> dict[str, str]:
        """Site fields exposed to templates as ``site``."""
        return {"name": self.name, "url": self.url, "username": self.username}


def find_config(project_root: Path, config_path: Path | None = None) -> Path:
    """Locate the configuration file.

    Search order: the explicit path, ``crosspub.yaml`` in the project root,
    then ``config.yaml`` in the per-user application directory.

    Args:
        project_root: Project directory.
        config_path: Explicit path given by the user.

    Returns:
        Path of the configuration file.

    Raises:
        ConfigError: If no configuration file exists.
    """
    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError(f"Config file {config_path} does not exist")
        return config_path
    candidates = [
        project_root / CONFIG_FILENAME,
        Path(click.get_app_dir("crosspub")) / "config.yaml",
    ]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    searched = ", ".join(str(c) for c in candidates)
    raise ConfigError(f"Could not find a config file (searched: {searched})")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Could not parse {path}: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path} must contain a mapping of settings")
    return loaded


def _resolve(project_root: Path, value: Any, key: str) -> Path:
    if not isinstance(value, (str, Path)) or not str(value):
        raise ConfigError(f"Setting {key!r} must be a path")
    path = Path(value).expanduser()
    return path if path.is_absolute() else project_root / path


def config_from_mapping(
    values: dict[str, Any], project_root: Path
) -> SiteConfig:
    """Build a SiteConfig from raw settings.

    Args:
        values: Settings, merged over DEFAULT_CONFIG.
        project_root: Directory relative paths are resolved against.

    Returns:
        Validated SiteConfig.

    Raises:
        ConfigError: If a setting has the wrong type.
    """
    config = DEFAULT_CONFIG.copy()
    config.update(values)

    for key in _BOOL_KEYS:
        if not isinstance(config[key], bool):
            raise ConfigError(f"Setting {key!r} must be true or false")
    for key in _STRING_KEYS:
        value = config[key]
        if value is None:
            config[key] = ""
        elif not isinstance(value, str):
            raise ConfigError(f"Setting {key!r} must be a string")

    paths = {key: _resolve(project_root, config[key], key) for key in _PATH_KEYS}
    optional = {
        key: _resolve(project_root, config[key], key) if config[key] else None
        for key in _OPTIONAL_PATH_KEYS
    }

    return SiteConfig(
        name=config["name"],
        url=config["url"].rstrip("/"),
        username=config["username"],
        use_about_page=config["use_about_page"],
        post_list=config["post_list"],
        html_gemtext=config["html_gemtext"],
        feed=config["feed"],
        **paths,
        **optional,
    )


def load_config(project_root: Path, config_path: Path | None = None) -> SiteConfig:
    """Load site configuration.

    Args:
        project_root: Project directory; relative paths resolve against it.
        config_path: Optional explicit configuration file.

    Returns:
        SiteConfig with defaults applied.
    """
    path = find_config(project_root, config_path)
    return config_from_mapping(_read_yaml(path), project_root)
