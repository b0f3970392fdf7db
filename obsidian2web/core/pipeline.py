"""Build pipeline: runs every page through its passes, then the site-wide steps.

Each page goes through three passes, strictly in order:

1. pre-processors rewrite a scratch copy of the source,
2. the main render turns it into an HTML document in the output tree,
3. post-processors rewrite that HTML file in place.

Only once every page has passed step 3 do the end-processors run over
all pages, followed by the index page, tag pages and feed.
"""

import functools
import hashlib
import io
import logging
import shutil
import tempfile
from importlib import resources
from pathlib import Path
from typing import Iterable, List, Optional

from pygments.formatters import HtmlFormatter

from obsidian2web.core.context import BuildContext
from obsidian2web.core.discovery import VaultDiscovery
from obsidian2web.core.models import BuildResult, Page, PageState, PageType, SequencingError
from obsidian2web.core.rewrite import rewrite
from obsidian2web.render.canvas import write_canvas
from obsidian2web.render.html import create_markdown, unsafe_html, write_footer, write_head, write_page_tree
from obsidian2web.render.pages import generate_index_page, generate_rss_feed, generate_tag_pages
from obsidian2web.transforms.aggregate import RecentPagesProcessor
from obsidian2web.transforms.base import Processor, ProcessorGroups
from obsidian2web.transforms.frontmatter import FrontmatterProcessor
from obsidian2web.transforms.html import CheckmarkProcessor, CrossPageLinkProcessor
from obsidian2web.transforms.markdown import (
    AtDatesProcessor,
    CodeblockProcessor,
    SetFirstImageProcessor,
    TableOfContentsProcessor,
    TagProcessor,
    heading_anchor,
)

logger = logging.getLogger(__name__)

STATIC_RESOURCES = ("styles.css", "main.js", "at-date.js", "canvas.js")


def default_processors(strict_links: bool = True, recent_pages: int = 10) -> ProcessorGroups:
    """The processor groups of a regular build, in the order they run."""
    return ProcessorGroups(
        pre=[
            FrontmatterProcessor(),
            CodeblockProcessor(),
            TagProcessor(),
            TableOfContentsProcessor(),
            SetFirstImageProcessor(),
            AtDatesProcessor(),
        ],
        post=[
            CheckmarkProcessor(),
            CrossPageLinkProcessor(strict=strict_links),
        ],
        end=[
            RecentPagesProcessor(default_count=recent_pages),
        ],
    )


def _expect_state(page: Page, expected: PageState, step: str) -> None:
    if page.state is not expected:
        raise SequencingError(
            f"{step} needs '{page.path}' in state {expected.value}, "
            f"found {page.state.value}"
        )


class Pipeline:
    """Runs the build passes over the pages of a build context."""

    def __init__(
        self,
        ctx: BuildContext,
        processors: Optional[ProcessorGroups] = None,
        scratch_dir: Optional[Path] = None,
    ):
        """Initialize Pipeline.

        Args:
            ctx: Build context holding the registered pages
            processors: Processor groups, the default set when omitted
            scratch_dir: Directory for pre-processing copies; a temporary
                         directory is created on first use when omitted and
                         removed by close()
        """
        self.ctx = ctx
        self.processors = processors or default_processors(
            strict_links=ctx.config.strict_links,
            recent_pages=ctx.config.recent_pages,
        )
        self.scratch_dir = Path(scratch_dir) if scratch_dir is not None else None
        self._temp_scratch: Optional[tempfile.TemporaryDirectory] = None
        self.markdown = create_markdown()

    @property
    def output_dir(self) -> Path:
        return self.ctx.config.output

    def _scratch_path(self, page: Page) -> Path:
        if self.scratch_dir is None:
            self._temp_scratch = tempfile.TemporaryDirectory(prefix="obsidian2web-")
            self.scratch_dir = Path(self._temp_scratch.name)
        digest = hashlib.sha1(str(page.path).encode('utf-8')).hexdigest()[:16]
        return self.scratch_dir / f"{digest}{page.path.suffix}"

    def close(self) -> None:
        """Remove the temporary scratch directory, if this pipeline created one."""
        if self._temp_scratch is not None:
            self._temp_scratch.cleanup()
            self._temp_scratch = None
            self.scratch_dir = None

    def __enter__(self) -> "Pipeline":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _run_processors(self, processors: Iterable[Processor], page: Page, path: Path) -> None:
        for processor in processors:
            if processor.markdown_only and page.page_type is not PageType.MARKDOWN:
                continue
            logger.debug("running %s on '%s'", processor.name, page.path)

            text = path.read_text(encoding='utf-8')
            transform = functools.partial(processor.handle, self.ctx, page)
            path.write_text(rewrite(processor.pattern, text, transform), encoding='utf-8')

    def run_pre_processors(self, page: Page) -> None:
        """Copy the page source to scratch space and run the pre-processors on it."""
        _expect_state(page, PageState.UNBUILT, "pre-processing")
        logger.info("pre-processing '%s'", page.path)

        scratch = self._scratch_path(page)
        shutil.copyfile(page.path, scratch)
        self._run_processors(self.processors.pre, page, scratch)

        page.scratch_path = scratch
        page.state = PageState.PRE

    def run_main_render(self, page: Page) -> Path:
        """Render the pre-processed page into its HTML file.

        Returns:
            Path of the written HTML file
        """
        _expect_state(page, PageState.PRE, "main render")
        logger.info("processing '%s'", page.path)

        text = page.scratch_path.read_text(encoding='utf-8')

        html_path = page.html_path(self.output_dir)
        html_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("writing to '%s'", html_path)
        html_path.write_text(self.render_page(page, text), encoding='utf-8')

        page.state = PageState.MAIN
        return html_path

    def render_page(self, page: Page, text: str) -> str:
        """Full HTML document for a page, given its pre-processed source."""
        ctx = self.ctx
        out = io.StringIO()

        write_head(out, ctx, page.title, page)
        write_page_tree(out, ctx, generating_for=page)

        out.write('  <hr>\n')
        for title in page.titles:
            out.write(f'  <a class="heading" href="#{heading_anchor(title)}">{unsafe_html(title)}</a><br>\n')
        out.write('  <hr>\n')
        for tag in page.tags:
            href = unsafe_html(ctx.web_path(f"/_/tags/{tag}.html"))
            out.write(f'  <a class="tag" href="{href}">#{unsafe_html(tag)}</a><br>\n')

        out.write('  </nav>\n  <main class="text">\n')
        if page.page_type is PageType.MARKDOWN:
            out.write(f'    <h2>{unsafe_html(page.title)}</h2>\n')
            out.write(self.markdown(text))
        else:
            write_canvas(out, ctx, text, self.markdown)

        write_footer(out, ctx)
        return out.getvalue()

    def run_post_processors(self, page: Page) -> None:
        """Run the post-processors over the rendered HTML file, in place."""
        _expect_state(page, PageState.MAIN, "post-processing")
        self._run_processors(self.processors.post, page, page.html_path(self.output_dir))
        page.state = PageState.POST

    def run_end_processors(self, page: Page) -> None:
        """Run the end-processors over a finished page. Leaves the state alone."""
        _expect_state(page, PageState.POST, "end-processing")
        self._run_processors(self.processors.end, page, page.html_path(self.output_dir))

    def build_page(self, page: Page) -> None:
        self.run_pre_processors(page)
        self.run_main_render(page)
        self.run_post_processors(page)

    def write_static_resources(self) -> None:
        """Write the bundled stylesheets and scripts into the output directory."""
        package_resources = resources.files("obsidian2web") / "resources"
        for name in STATIC_RESOURCES:
            output = self.output_dir / name
            if name == "styles.css" and self.ctx.config.custom_css is not None:
                shutil.copyfile(self.ctx.config.custom_css, output)
            else:
                output.write_text((package_resources / name).read_text(encoding='utf-8'), encoding='utf-8')

        pygments_css = HtmlFormatter(cssclass="highlight").get_style_defs('.highlight')
        (self.output_dir / "pygments.css").write_text(pygments_css, encoding='utf-8')

    def copy_assets(self) -> List[Path]:
        """Copy every registered non-page file to images/."""
        images_dir = self.output_dir / "images"
        images_dir.mkdir(parents=True, exist_ok=True)

        copied = []
        for path in self.ctx.assets():
            target = images_dir / Path(path).name
            shutil.copyfile(path, target)
            copied.append(target)
        return copied

    def build(self) -> BuildResult:
        """Run a full build: discover, build every page, then the site-wide steps."""
        pages = VaultDiscovery(self.ctx).discover_all()
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.write_static_resources()

        try:
            for page in self.ctx.pages.values():
                self.build_page(page)
        finally:
            self.close()

        copied = self.copy_assets()

        # end processors need every page done
        logger.info("running end processors")
        for page in self.ctx.pages.values():
            self.run_end_processors(page)

        generate_index_page(self.ctx)
        tags = generate_tag_pages(self.ctx)
        if self.ctx.config.rss is not None:
            generate_rss_feed(self.ctx)

        return BuildResult(
            pages=pages,
            tags=tags,
            copied_assets=copied,
            output_dir=self.output_dir,
        )
