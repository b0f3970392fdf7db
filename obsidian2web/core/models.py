"""Data models for obsidian2web."""

import enum
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from obsidian2web.transforms.frontmatter import extract_tags, get_timestamp, parse_frontmatter


class BuildError(Exception):
    """Base class for every fatal build error."""


class SequencingError(BuildError):
    """A pass was run against a page in the wrong state."""


class ConfigError(BuildError):
    """The build file is missing a setting or holds an invalid one."""


class MalformedInputError(BuildError):
    """Input that cannot be processed: bad canvas JSON, a match without group 0."""


class UnresolvedLinkError(BuildError):
    """A cross-page link that points at nothing, raised in strict mode."""

    def __init__(self, target: str, page_path: Path):
        super().__init__(f"Unresolved link [[{target}]] in {page_path}")
        self.target = target
        self.page_path = page_path


class PageType(enum.Enum):
    MARKDOWN = ".md"
    CANVAS = ".canvas"

    @classmethod
    def from_path(cls, path: Path) -> Optional["PageType"]:
        """Page type for a path, None if the file is not a renderable page."""
        suffix = Path(path).suffix
        for page_type in cls:
            if page_type.value == suffix:
                return page_type
        return None


class PageState(enum.Enum):
    """Build state of a page. Only ever advances, in declaration order."""
    UNBUILT = "unbuilt"
    PRE = "pre"
    MAIN = "main"
    POST = "post"


_WHITESPACE = re.compile(r'\s+')
# {{...}} markers are expanded by end-processors, not part of the text
_TEMPLATE_MARKER = re.compile(r'\{\{.*?\}\}')


@dataclass
class Page:
    """A renderable document of the vault, keyed by its filesystem path.

    Carries the metadata gathered at discovery (title, tags, creation time)
    and the metadata processors discover while rewriting the document
    (inline tags, headings, first image), plus the build state machine.
    """
    path: Path
    page_type: PageType
    title: str
    ctime: float
    web_path: str
    tags: List[str] = field(default_factory=list)
    titles: List[str] = field(default_factory=list)
    first_image: Optional[str] = None
    frontmatter: Dict[str, Any] = field(default_factory=dict)
    state: PageState = PageState.UNBUILT
    scratch_path: Optional[Path] = None

    @classmethod
    def from_path(cls, path: Path, vault_path: Path) -> "Page":
        """Create an unbuilt page for a file under the vault.

        Raises:
            ValueError: if the path has no page extension
        """
        path = Path(path)
        page_type = PageType.from_path(path)
        if page_type is None:
            raise ValueError(f"Not a page: {path}")

        frontmatter: Dict[str, Any] = {}
        if page_type is PageType.MARKDOWN:
            frontmatter, _ = parse_frontmatter(path.read_text(encoding='utf-8'), source=path)

        title = str(frontmatter.get('title') or path.stem)
        ctime = get_timestamp(frontmatter.get('created'))
        if ctime is None:
            ctime = path.stat().st_ctime

        web_path = Path(os.path.relpath(path, vault_path)).with_suffix('.html').as_posix()

        return cls(
            path=path,
            page_type=page_type,
            title=title,
            ctime=ctime,
            web_path=web_path,
            tags=extract_tags(frontmatter),
            frontmatter=frontmatter,
        )

    def read_raw(self) -> str:
        """Read the source document."""
        return self.path.read_text(encoding='utf-8')

    def html_path(self, output_dir: Path) -> Path:
        return Path(output_dir) / self.web_path

    def add_tag(self, tag: str) -> None:
        if tag not in self.tags:
            self.tags.append(tag)

    def preview(self, limit: int = 256) -> str:
        """Plain text excerpt of the page, used for descriptions and feeds.

        Raises:
            MalformedInputError: if a canvas page is not a valid canvas document
        """
        # render.canvas imports this module
        from obsidian2web.render.canvas import parse_canvas

        raw = self.read_raw()
        if self.page_type is PageType.CANVAS:
            text = ' '.join(node.text for node in parse_canvas(raw).nodes)
        else:
            _, text = parse_frontmatter(raw, source=self.path)

        text = _TEMPLATE_MARKER.sub('', text)
        return _WHITESPACE.sub(' ', text).strip()[:limit]


@dataclass
class BuildResult:
    """Result of a full build."""
    pages: List[Page] = field(default_factory=list)
    tags: Dict[str, List[Page]] = field(default_factory=dict)
    copied_assets: List[Path] = field(default_factory=list)
    output_dir: Optional[Path] = None
