"""
obsidian2web - Turn an Obsidian vault into a static website

Walks the vault, and runs every note (markdown or canvas) through a
pipeline of regex rewrite passes around a markdown to HTML render, with:
- Cross-page [[links]] and attachment embeds
- Inline #tags, tag pages and a tag index
- A navigation tree of the whole vault on every page
- Code highlighting, heading anchors and an optional RSS feed
"""

from obsidian2web.core.models import (
    BuildError,
    BuildResult,
    ConfigError,
    MalformedInputError,
    Page,
    PageState,
    PageType,
    SequencingError,
    UnresolvedLinkError,
)
from obsidian2web.core.config import BuildConfig, load_config
from obsidian2web.core.context import BuildContext
from obsidian2web.core.pipeline import Pipeline
from obsidian2web.core.rewrite import rewrite
from obsidian2web.core.scanner import scan

__version__ = "0.1.0"

__all__ = [
    "BuildError",
    "BuildResult",
    "ConfigError",
    "MalformedInputError",
    "Page",
    "PageState",
    "PageType",
    "SequencingError",
    "UnresolvedLinkError",
    "BuildConfig",
    "load_config",
    "BuildContext",
    "Pipeline",
    "rewrite",
    "scan",
]
