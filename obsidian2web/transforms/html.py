"""Post-processors: rewrites applied to the rendered HTML of a page."""

import html
import logging
import os
import re
from typing import TextIO

from obsidian2web.core.models import UnresolvedLinkError
from obsidian2web.render.html import unsafe_html
from obsidian2web.transforms.base import Processor
from obsidian2web.transforms.markdown import IMAGE_EXTENSIONS, heading_anchor

logger = logging.getLogger(__name__)


class CheckmarkProcessor(Processor):
    """Renders ``- [ ]`` / ``- [x]`` list items as checkboxes."""

    pattern = re.compile(r'<li>\s*\[([ xX])\]')

    def handle(self, ctx, page, text: str, match, out: TextIO) -> None:
        checked = ' checked' if match.group(1) in 'xX' else ''
        out.write(f'<li><input type="checkbox" class="checkmark" disabled{checked}>')


class CrossPageLinkProcessor(Processor):
    """Resolves ``[[Target]]`` links and ``![[file]]`` embeds.

    Supported forms: ``[[Target]]``, ``[[Target#Section]]``,
    ``[[Target|Display]]``, ``[[#Section]]`` and ``![[image.png]]``. Targets
    are looked up by page title first, then as a file name. What happens
    to a target that resolves to nothing depends on ``strict``.
    """

    pattern = re.compile(r'(!)?\[\[([^\]|#]*)(?:#([^\]|]+))?(?:\|([^\]]+))?\]\]')

    def __init__(self, strict: bool = True):
        self.strict = strict

    def handle(self, ctx, page, text: str, match, out: TextIO) -> None:
        is_embed = match.group(1) is not None
        target = html.unescape(match.group(2) or '').strip()
        section = match.group(3)
        display = match.group(4)

        if not target:
            if section is None:
                out.write(match.group())
                return
            out.write(f'<a href="#{heading_anchor(html.unescape(section))}">{display or section}</a>')
            return

        linked = self._find_page(ctx, target)
        if linked is not None:
            href = ctx.web_path(f"/{linked.web_path}")
            if section:
                href += f"#{heading_anchor(html.unescape(section))}"
            label = display or unsafe_html(target)
            out.write(f'<a href="{unsafe_html(href)}">{label}</a>')
            return

        asset = ctx.asset_from_name(target)
        if asset is not None:
            src = unsafe_html(ctx.web_path(f"/images/{os.path.basename(asset)}"))
            label = display or unsafe_html(target)
            if is_embed and target.lower().endswith(IMAGE_EXTENSIONS):
                out.write(f'<img src="{src}" alt="{label}">')
            else:
                out.write(f'<a href="{src}">{label}</a>')
            return

        if self.strict:
            raise UnresolvedLinkError(target, page.path)

        logger.warning("unresolved link [[%s]] in %s", target, page.path)
        out.write(f'<span class="unresolved-link">{match.group()}</span>')

    @staticmethod
    def _find_page(ctx, target: str):
        page = ctx.page_from_title(target)
        if page is not None:
            return page

        name = os.path.basename(target)
        stem, ext = os.path.splitext(name)
        if ext in ('.md', '.canvas'):
            page = ctx.page_from_title(stem)
            if page is not None:
                return page
        return ctx.page_from_path(ctx.vault_path / target)
