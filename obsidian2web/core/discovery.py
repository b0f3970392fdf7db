"""Vault discovery: registers every included file with the build context."""

import logging
import os
from pathlib import Path
from typing import Dict, List

from obsidian2web.core.context import BuildContext
from obsidian2web.core.models import Page

logger = logging.getLogger(__name__)


class VaultDiscovery:
    """Walks the include paths of a build and registers what it finds."""

    def __init__(self, ctx: BuildContext):
        """Initialize VaultDiscovery.

        Args:
            ctx: Build context receiving the pages and title index entries
        """
        self.ctx = ctx
        self.include_paths = [
            Path(os.path.normpath(ctx.vault_path / p)) for p in ctx.config.include
        ]

    def discover_all(self) -> List[Page]:
        """Register every file under the include paths.

        A path naming a file registers just that file; a directory is
        walked recursively, in sorted order.

        Returns:
            The pages found, in registration order

        Raises:
            FileNotFoundError: if none of the include paths exist
        """
        existing = [p for p in self.include_paths if p.exists()]

        for p in self.include_paths:
            if not p.exists():
                logger.warning("include path not found: %s", p)

        if not existing:
            paths = ', '.join(str(p) for p in self.include_paths)
            raise FileNotFoundError(f"No include paths found: {paths}")

        pages: Dict[Path, Page] = {}
        for include_path in existing:
            logger.info("including given path: '%s'", include_path)
            for file_path in self._walk(include_path):
                page = self.ctx.add_page(file_path)
                if page is not None:
                    pages.setdefault(page.path, page)

        return list(pages.values())

    def _walk(self, include_path: Path) -> List[Path]:
        if include_path.is_file():
            return [include_path]

        found = []
        for dirpath, dirnames, filenames in os.walk(include_path):
            dirnames.sort()
            for filename in sorted(filenames):
                found.append(Path(dirpath) / filename)
        return found
