"""Core components for obsidian2web."""

from obsidian2web.core.models import BuildError, BuildResult, Page, PageState, PageType, SequencingError
from obsidian2web.core.scanner import Capture, Match, scan
from obsidian2web.core.rewrite import rewrite
from obsidian2web.core.path_tree import PageFile, PathTree
from obsidian2web.core.config import BuildConfig, load_config
from obsidian2web.core.context import BuildContext
from obsidian2web.core.discovery import VaultDiscovery
from obsidian2web.core.pipeline import Pipeline, default_processors

__all__ = [
    "BuildError",
    "BuildResult",
    "Page",
    "PageState",
    "PageType",
    "SequencingError",
    "Capture",
    "Match",
    "scan",
    "rewrite",
    "PageFile",
    "PathTree",
    "BuildConfig",
    "load_config",
    "BuildContext",
    "VaultDiscovery",
    "Pipeline",
    "default_processors",
]
