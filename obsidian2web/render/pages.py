"""Site-wide pages generated once every page is built: index, tags, feed."""

import datetime
import email.utils
import logging
import shutil
import time
import uuid
from collections import defaultdict
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional

from obsidian2web.core.models import ConfigError, Page
from obsidian2web.render.html import unsafe_html, write_empty_page, write_footer, write_head, write_page_tree

if TYPE_CHECKING:
    from obsidian2web.core.context import BuildContext

logger = logging.getLogger(__name__)

TagMap = Dict[str, List[Page]]

FEED_SIZE = 20


def generate_index_page(ctx: "BuildContext") -> Path:
    """Write index.html.

    With a configured index page its rendered HTML is copied; otherwise a
    page holding only the navigation tree is generated.

    Raises:
        ConfigError: if the configured index page was never registered
    """
    output = ctx.config.output / "index.html"

    if ctx.config.index:
        index_path = ctx.vault_path / ctx.config.index
        page = ctx.page_from_path(index_path)
        if page is None:
            raise ConfigError(f"Index page not found: {index_path}")
        shutil.copyfile(page.html_path(ctx.config.output), output)
        return output

    with open(output, 'w', encoding='utf-8') as f:
        write_head(f, ctx, "Index Page")
        write_page_tree(f, ctx)
        write_empty_page(f, ctx)
    return output


def build_tag_map(ctx: "BuildContext") -> TagMap:
    """Group pages by tag. Pages in each list are ordered oldest first."""
    tag_map: TagMap = defaultdict(list)
    for page in ctx.pages.values():
        for tag in page.tags:
            tag_map[tag].append(page)

    for pages in tag_map.values():
        pages.sort(key=lambda p: p.ctime)
    return dict(tag_map)


def generate_tag_pages(ctx: "BuildContext", tag_map: Optional[TagMap] = None) -> TagMap:
    """Write one page per tag under _/tags/, then the tag index."""
    if tag_map is None:
        tag_map = build_tag_map(ctx)

    tags_dir = ctx.config.output / "_" / "tags"
    tags_dir.mkdir(parents=True, exist_ok=True)

    for tag, pages in tag_map.items():
        logger.info("generating tag page: %s", tag)
        output = tags_dir / f"{tag}.html"
        output.parent.mkdir(parents=True, exist_ok=True)

        with open(output, 'w', encoding='utf-8') as f:
            write_head(f, ctx, tag)
            f.write(
                ' <h3 style="text-align:center">'
                f'<a href="{ctx.web_path("/_/tag_index.html")}">Go to tag index</a></h3>\n'
                '  </nav>\n'
                '  <main class="text">\n'
            )
            f.write(f'<h1>{unsafe_html(tag)}</h1><p>({len(pages)} pages)')
            f.write('<div class="tag-page">\n')
            for page in pages:
                href = unsafe_html(ctx.web_path(f"/{page.web_path}"))
                f.write(
                    ' <div class="page-preview">\n'
                    f'  <a href="{href}">\n'
                    f'   <div class="page-preview-title"><h2>{unsafe_html(page.title)}</h2></div>\n'
                    f'   <div class="page-preview-text">{unsafe_html(page.preview())}&hellip;</div>\n'
                    '  </a>\n'
                    ' </div><p>\n'
                )
            f.write('</div>\n')
            write_footer(f, ctx)

    generate_tag_index(ctx, tag_map)
    return tag_map


def generate_tag_index(ctx: "BuildContext", tag_map: TagMap) -> Path:
    """Write _/tag_index.html listing tags by descending page count."""
    logger.info("generating tag index")
    output = ctx.config.output / "_" / "tag_index.html"
    output.parent.mkdir(parents=True, exist_ok=True)

    tags = sorted(tag_map, key=lambda tag: (-len(tag_map[tag]), tag))

    with open(output, 'w', encoding='utf-8') as f:
        write_head(f, ctx, "Tag Index")
        f.write('  </nav>\n  <main class="text">\n')
        f.write('<div class="tag-page">\n')
        for tag in tags:
            href = unsafe_html(ctx.web_path(f"/_/tags/{tag}.html"))
            f.write(
                '<div class="tag-box">'
                f' <a href="{href}">\n <h4>{unsafe_html(tag)}</h4>\n </a>\n'
                f' ({len(tag_map[tag])} pages)'
                '</div>\n'
            )
        f.write('</div>\n')
        write_footer(f, ctx)
    return output


def rfc822(timestamp: float) -> str:
    """Format a timestamp the way RSS wants its dates."""
    return email.utils.format_datetime(
        datetime.datetime.fromtimestamp(timestamp, tz=datetime.timezone.utc)
    )


def rss_guid(title: str) -> str:
    """Stable identifier for a feed item, derived from the page title."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, title))


def generate_rss_feed(ctx: "BuildContext", now: Optional[float] = None) -> Path:
    """Write feed.xml with the newest pages.

    Raises:
        ConfigError: if the build has no rss settings
    """
    rss = ctx.config.rss
    if rss is None:
        raise ConfigError("rss is not configured")

    output = ctx.config.output / "feed.xml"
    pages = sorted(ctx.pages.values(), key=lambda p: p.ctime, reverse=True)

    with open(output, 'w', encoding='utf-8') as f:
        f.write(
            '<?xml version="1.0" encoding="UTF-8" ?>\n'
            '<rss version="2.0">\n'
            '<channel>\n'
            f' <title>{unsafe_html(rss.title)}</title>\n'
            f' <description>{unsafe_html(rss.description)}</description>\n'
            f' <link>{unsafe_html(rss.url)}</link>\n'
            f' <lastBuildDate>{rfc822(now if now is not None else time.time())}</lastBuildDate>\n'
            ' <ttl>1800</ttl>\n'
        )
        for page in pages[:FEED_SIZE]:
            link = rss.url.rstrip('/') + ctx.web_path(f"/{page.web_path}")
            f.write(
                ' <item>\n'
                f'  <title>{unsafe_html(page.title)}</title>\n'
                f'  <description>{unsafe_html(page.preview())}</description>\n'
                f'  <link>{unsafe_html(link)}</link>\n'
                f'  <guid isPermaLink="false">{rss_guid(page.title)}</guid>\n'
                f'  <pubDate>{rfc822(page.ctime)}</pubDate>\n'
                ' </item>\n'
            )
        f.write('</channel>\n</rss>\n')
    return output
