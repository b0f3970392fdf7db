"""Pre-processors: rewrites applied to markdown source before rendering."""

import datetime
import os
import re
from typing import TextIO
from urllib.parse import urlparse

import inflection
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.util import ClassNotFound

from obsidian2web.render.html import unsafe_html
from obsidian2web.transforms.base import Processor
from obsidian2web.transforms.frontmatter import normalize_tag

IMAGE_EXTENSIONS = ('png', 'jpg', 'jpeg', 'gif', 'webp', 'svg', 'bmp')

_HTML_TAG = re.compile(r'<[^>]+>')
_WIKI_LINK = re.compile(r'!?\[\[([^\]|]*)(?:\|([^\]]*))?\]\]')

# A code block after CodeblockProcessor ran: a single line of highlighted HTML.
HIGHLIGHTED_BLOCK = r'^<div class="highlight">.*$'


class CodeblockProcessor(Processor):
    """Highlights fenced code blocks with Pygments.

    The highlighted block is written on a single line (newlines as
    ``&#10;``) so the markdown converter keeps it as one raw HTML block
    and does not add line breaks inside it.
    """

    pattern = re.compile(r'^```([\w+#.-]*)[^\n]*\n(.*?)^```[ \t]*$', re.MULTILINE | re.DOTALL)
    markdown_only = True

    def __init__(self):
        self.formatter = HtmlFormatter(cssclass="highlight")

    def handle(self, ctx, page, text: str, match, out: TextIO) -> None:
        language = match.group(1)
        code = match.group(2)

        try:
            lexer = get_lexer_by_name(language) if language else TextLexer()
        except ClassNotFound:
            lexer = TextLexer()

        highlighted = highlight(code, lexer, self.formatter)
        out.write(highlighted.rstrip('\n').replace('\n', '&#10;'))
        out.write('\n')


class TagProcessor(Processor):
    """Turns inline ``#tags`` into tag page links and records them on the page."""

    # A run like #foo#bar is one unit; only its first tag counts.
    pattern = re.compile(
        HIGHLIGHTED_BLOCK + r'|(?<!\S)#([A-Za-z][\w/-]*)((?:#[\w/-]*)*)',
        re.MULTILINE,
    )
    markdown_only = True

    def handle(self, ctx, page, text: str, match, out: TextIO) -> None:
        if match.group(1) is None:
            out.write(match.group())
            return

        name = match.group(1).rstrip('/-')
        tag = normalize_tag(name)
        if tag != name:
            out.write(match.group())
            return

        rest = match.group(1)[len(tag):] + match.group(2)
        page.add_tag(tag)

        href = unsafe_html(ctx.web_path(f"/_/tags/{tag}.html"))
        out.write(f'<a class="tag" href="{href}">#{unsafe_html(tag)}</a>{rest}')


class TableOfContentsProcessor(Processor):
    """Collects headings into the page's heading list and gives each an anchor."""

    pattern = re.compile(r'^(#{1,6})[ \t]+(.+?)[ \t#]*$', re.MULTILINE)
    markdown_only = True

    def handle(self, ctx, page, text: str, match, out: TextIO) -> None:
        heading = match.group(2)
        title = _HTML_TAG.sub('', heading)
        title = _WIKI_LINK.sub(lambda m: m.group(2) or m.group(1), title).strip()
        page.titles.append(title)
        out.write(f'{match.group(1)} <a id="{heading_anchor(title)}"></a>{heading}')


def heading_anchor(title: str) -> str:
    """Fragment identifier used for a heading."""
    return inflection.parameterize(title)


class SetFirstImageProcessor(Processor):
    """Remembers the first image of a page for its preview card."""

    pattern = re.compile(
        r'!\[\[([^\]|]+?\.(?:' + '|'.join(IMAGE_EXTENSIONS) + r'))(?:\|[^\]]*)?\]\]'
        r'|!\[[^\]]*\]\(([^)\s]+)[^)]*\)',
        re.IGNORECASE,
    )
    markdown_only = True

    def handle(self, ctx, page, text: str, match, out: TextIO) -> None:
        out.write(match.group())

        if page.first_image is not None:
            return

        embed, url = match.group(1), match.group(2)
        if embed is not None:
            if ctx.asset_from_name(embed) is not None:
                page.first_image = ctx.web_path(f"/images/{os.path.basename(embed)}")
        elif urlparse(url).scheme:
            page.first_image = url
        else:
            page.first_image = ctx.web_path('/' + url.lstrip('/'))


class AtDatesProcessor(Processor):
    """Turns ``@2024-01-31`` style stamps into ``<time>`` elements."""

    pattern = re.compile(HIGHLIGHTED_BLOCK + r'|(?<![\w@])@(\d{4}-\d{2}-\d{2}(?:T\d{2}:\d{2}(?::\d{2})?)?)', re.MULTILINE)
    markdown_only = True

    def handle(self, ctx, page, text: str, match, out: TextIO) -> None:
        value = match.group(1)
        if value is None:
            out.write(match.group())
            return
        try:
            datetime.datetime.fromisoformat(value)
        except ValueError:
            out.write(match.group())
            return
        out.write(f'<time class="at-date" datetime="{value}">{value}</time>')
