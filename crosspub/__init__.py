"""crosspub: publish one set of Gemtext sources as an HTML site and a Gemini capsule.

Posts (dated) and topics (undated) are written in Gemtext with a small TOML
frontmatter header. Every document is rendered twice through a minimal
template language, once into an HTML tree and once into a Gemini tree, along
with an index page, an optional about page and an optional post listing.

The main entry point is the CLI module, which provides commands for setting
up a project, creating documents and building both trees.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
