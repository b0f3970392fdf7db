"""End-processors: rewrites that need the complete set of built pages."""

import datetime
import re
from typing import TextIO

from obsidian2web.render.html import unsafe_html
from obsidian2web.transforms.base import Processor


class RecentPagesProcessor(Processor):
    """Replaces ``{{recent_pages}}`` / ``{{recent_pages N}}`` with the newest pages.

    Pages are ordered by creation time, newest first. The page holding
    the marker is left out of its own listing.
    """

    pattern = re.compile(r'\{\{\s*recent_pages(?:\s+(\d+))?\s*\}\}')

    def __init__(self, default_count: int = 10):
        self.default_count = default_count

    def handle(self, ctx, page, text: str, match, out: TextIO) -> None:
        count = int(match.group(1)) if match.group(1) else self.default_count

        others = [p for p in ctx.pages.values() if p.path != page.path]
        others.sort(key=lambda p: p.ctime, reverse=True)

        out.write('<ul class="recent-pages">\n')
        for recent in others[:count]:
            href = unsafe_html(ctx.web_path(f"/{recent.web_path}"))
            created = datetime.datetime.fromtimestamp(recent.ctime, tz=datetime.timezone.utc)
            out.write(
                f'<li><a href="{href}">{unsafe_html(recent.title)}</a> '
                f'<time class="at-date" datetime="{created.isoformat()}">'
                f'{created.date().isoformat()}</time></li>\n'
            )
        out.write('</ul>')
