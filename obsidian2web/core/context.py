"""Shared state of a build: registered pages, the title index and the path tree."""

import logging
import os
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

from obsidian2web.core.config import BuildConfig
from obsidian2web.core.models import Page, PageType
from obsidian2web.core.path_tree import PathTree

logger = logging.getLogger(__name__)


class BuildContext:
    """Everything a build knows about the vault.

    ``titles`` maps a page title to its path, and the basename of every
    other file (images and attachments) to that file's path. Both maps and
    the path tree are filled during discovery and only read afterwards.
    """

    def __init__(self, config: BuildConfig):
        self.config = config
        self.vault_path = Path(os.path.abspath(config.vault))
        self.pages: Dict[str, Page] = {}
        self.titles: Dict[str, str] = {}
        self.tree = PathTree()

    def add_page(self, path: Union[str, Path]) -> Optional[Page]:
        """Register a file of the vault.

        Files with a page extension become pages, registered under their
        title (a later page with the same title replaces the earlier one).
        Anything else is only recorded in the title index under its
        basename, first one wins.

        Returns:
            The page for the path, None for non-page files
        """
        fspath = os.path.abspath(path)

        if PageType.from_path(Path(fspath)) is None:
            self.titles.setdefault(os.path.basename(fspath), fspath)
            return None

        page = self.pages.get(fspath)
        if page is None:
            page = Page.from_path(Path(fspath), self.vault_path)
            self.pages[fspath] = page
            self.titles[page.title] = fspath
            self.tree.add_path(fspath)
            logger.debug("registered page '%s' as '%s'", fspath, page.title)
        return page

    def page_from_path(self, path: Union[str, Path]) -> Optional[Page]:
        return self.pages.get(os.path.abspath(path))

    def page_from_title(self, title: str) -> Optional[Page]:
        """Look a page up by title, None if there is no such page."""
        path = self.titles.get(title)
        if path is None:
            return None
        return self.pages.get(path)

    def asset_from_name(self, name: str) -> Optional[str]:
        """Path of a non-page file registered under the given basename."""
        path = self.titles.get(os.path.basename(name))
        if path is None or path in self.pages:
            return None
        return path

    def assets(self) -> Iterator[str]:
        """Paths of every registered file that is not a page."""
        for path in self.titles.values():
            if path not in self.pages:
                yield path

    def web_path(self, path: str) -> str:
        """Prefix an absolute site path ("/x/y.html") with the webroot."""
        if not path.startswith('/'):
            raise ValueError(f"web paths must start with '/': {path!r}")
        return f"{self.config.webroot}{path}"
