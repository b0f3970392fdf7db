"""Shared HTML building blocks: escaping, page head, navigation tree."""

import io
from typing import TYPE_CHECKING, Optional, TextIO

import mistune

from obsidian2web.core.path_tree import PageFolder, split_children

if TYPE_CHECKING:
    from obsidian2web.core.context import BuildContext
    from obsidian2web.core.models import Page

FOOTER = (
    '  <footer>\n'
    '    made with love using <a href="https://github.com/lun-4/obsidian2web">obsidian2web!</a>\n'
    '  </footer>\n'
)

_HTML_ESCAPES = str.maketrans({
    '&': '&amp;',
    '<': '&lt;',
    '>': '&gt;',
    '"': '&quot;',
    "'": '&#x27;',
    '\\': '&#92;',
})


def unsafe_html(data: str) -> str:
    """Escape user content for embedding in HTML text or attributes."""
    return data.translate(_HTML_ESCAPES)


def create_markdown() -> mistune.Markdown:
    """Markdown converter used for page bodies and canvas nodes.

    Autolinks, strikethrough and tables are enabled, newlines become hard
    breaks and raw HTML passes through untouched.
    """
    return mistune.create_markdown(
        escape=False,
        hard_wrap=True,
        plugins=['strikethrough', 'table', 'url'],
    )


def write_head(out: TextIO, ctx: "BuildContext", title: str, page: Optional["Page"] = None) -> None:
    """Write everything up to the opening of the navigation sidebar."""
    out.write(
        '<!DOCTYPE html>\n'
        '<html lang="en">\n'
        '  <head>\n'
        '    <meta charset="UTF-8">\n'
        '    <meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f'    <title>{unsafe_html(title)}</title>\n'
        f'    <meta property="og:title" content="{unsafe_html(title)}" />\n'
        '    <meta property="og:type" content="article" />\n'
    )

    if page is not None:
        if page.first_image:
            out.write(f'    <meta property="og:image" content="{unsafe_html(page.first_image)}" />\n')
        # brackets escaped so link post-processing leaves the description alone
        description = unsafe_html(page.preview()).replace('[', '&#91;')
        out.write(f'    <meta property="og:description" content="{description}" />\n')

    webroot = ctx.config.webroot
    out.write(
        f'    <script src="{webroot}/main.js"></script>\n'
        f'    <script src="{webroot}/at-date.js"></script>\n'
        f'    <link rel="stylesheet" href="{webroot}/styles.css">\n'
        f'    <link rel="stylesheet" href="{webroot}/pygments.css">\n'
        '  </head>\n'
        '  <body>\n'
        '  <nav class="toc">\n'
    )


def write_footer(out: TextIO, ctx: "BuildContext") -> None:
    """Close the main section, add the optional footer and close the document."""
    out.write('  </main>\n')
    if ctx.config.project_footer:
        out.write(FOOTER)
    out.write('  </body>\n</html>\n')


def write_empty_page(out: TextIO, ctx: "BuildContext") -> None:
    out.write('  </nav>\n  <main class="text">\n')
    write_footer(out, ctx)


def write_page_tree(
    out: TextIO,
    ctx: "BuildContext",
    folder: Optional[PageFolder] = None,
    generating_for: Optional["Page"] = None,
) -> None:
    """Render the navigation tree of a folder, the vault root by default.

    Sub-folders come first as collapsible ``<details>`` blocks, then the
    pages of the folder as a link list. When rendering inside a page, its
    own link is marked with ``aria-current="page"``.
    """
    if folder is None:
        try:
            folder = ctx.tree.walk_to_dir(ctx.vault_path)
        except KeyError:
            # no pages registered
            folder = {}

    folder_names, file_names = split_children(folder)

    for name in folder_names:
        out.write('<details>')
        out.write(f'<summary>{unsafe_html(name)}</summary>\n')
        write_page_tree(out, ctx, folder[name], generating_for)
        out.write('</details>\n')

    current_web_path = generating_for.web_path if generating_for is not None else None

    out.write('<ul>\n')
    for name in file_names:
        page = ctx.pages[folder[name].path]
        current_attr = 'aria-current="page" ' if page.web_path == current_web_path else ''
        href = unsafe_html(ctx.web_path(f"/{page.web_path}"))
        out.write(
            f'<li><a class="toc-link" {current_attr}href="{href}">'
            f'{unsafe_html(page.title)}</a></li>\n'
        )
    out.write('</ul>\n')


def render_page_tree(ctx: "BuildContext", generating_for: Optional["Page"] = None) -> str:
    """Navigation tree of the whole vault as a string."""
    out = io.StringIO()
    write_page_tree(out, ctx, generating_for=generating_for)
    return out.getvalue()
