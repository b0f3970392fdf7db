"""Tests for vault discovery, the build context and page metadata."""

import datetime
import os
import shutil
import tempfile
from pathlib import Path

import pytest

from obsidian2web.core.config import BuildConfig
from obsidian2web.core.context import BuildContext
from obsidian2web.core.discovery import VaultDiscovery
from obsidian2web.core.models import MalformedInputError, PageState, PageType


class TestVaultDiscovery:
    """Tests for VaultDiscovery class."""

    @pytest.fixture
    def temp_vault(self):
        """Create a temporary vault with notes, a canvas and an image."""
        temp_dir = tempfile.mkdtemp()
        vault_path = Path(temp_dir)

        (vault_path / "note1.md").write_text("""---
title: Test Note One
tags:
  - evergreen
  - domain/cs
created: 2024-01-01
---

# Test Note One

This is test content.
""")

        (vault_path / "note2.md").write_text("""# No Frontmatter

Just plain content.
""")

        posts = vault_path / "posts"
        posts.mkdir()
        (posts / "post1.md").write_text("""---
title: Post One
tags: evergreen
---

Post content.
""")
        (posts / "board.canvas").write_text('{"nodes": [], "edges": []}')
        (posts / "diagram.png").write_bytes(b"\x89PNG")

        yield vault_path

        shutil.rmtree(temp_dir)

    def _context(self, vault_path: Path, include=None) -> BuildContext:
        config = BuildConfig(vault=vault_path, include=include or ["."])
        return BuildContext(config)

    def test_discover_all_finds_pages(self, temp_vault):
        ctx = self._context(temp_vault)
        pages = VaultDiscovery(ctx).discover_all()

        assert len(pages) == 4
        assert len(ctx.pages) == 4

    def test_page_types(self, temp_vault):
        ctx = self._context(temp_vault)
        VaultDiscovery(ctx).discover_all()

        canvas = ctx.page_from_path(temp_vault / "posts" / "board.canvas")
        note = ctx.page_from_path(temp_vault / "note1.md")

        assert canvas.page_type is PageType.CANVAS
        assert note.page_type is PageType.MARKDOWN

    def test_non_pages_go_to_title_index(self, temp_vault):
        ctx = self._context(temp_vault)
        VaultDiscovery(ctx).discover_all()

        image = os.path.abspath(temp_vault / "posts" / "diagram.png")
        assert ctx.titles["diagram.png"] == image
        assert image not in ctx.pages
        assert ctx.asset_from_name("diagram.png") == image
        assert list(ctx.assets()) == [image]

    def test_pages_are_in_path_tree(self, temp_vault):
        ctx = self._context(temp_vault)
        VaultDiscovery(ctx).discover_all()

        assert os.path.abspath(temp_vault / "posts" / "post1.md") in ctx.tree
        assert os.path.abspath(temp_vault / "posts" / "diagram.png") not in ctx.tree

    def test_include_subdirectory(self, temp_vault):
        ctx = self._context(temp_vault, include=["posts"])
        pages = VaultDiscovery(ctx).discover_all()

        assert {p.title for p in pages} == {"Post One", "board"}

    def test_include_single_file(self, temp_vault):
        ctx = self._context(temp_vault, include=["note2.md"])
        pages = VaultDiscovery(ctx).discover_all()

        assert [p.title for p in pages] == ["note2"]

    def test_include_not_found(self, temp_vault):
        ctx = self._context(temp_vault, include=["nonexistent"])
        with pytest.raises(FileNotFoundError):
            VaultDiscovery(ctx).discover_all()

    def test_include_partial_missing(self, temp_vault):
        ctx = self._context(temp_vault, include=["posts", "nonexistent"])
        pages = VaultDiscovery(ctx).discover_all()

        assert len(pages) == 2

    def test_registering_twice_keeps_one_page(self, temp_vault):
        ctx = self._context(temp_vault)
        first = ctx.add_page(temp_vault / "note1.md")
        second = ctx.add_page(temp_vault / "note1.md")

        assert first is second
        assert len(ctx.pages) == 1


class TestPageMetadata:
    """Tests for the metadata of registered pages."""

    @pytest.fixture
    def vault(self, tmp_path):
        vault_path = tmp_path / "vault"
        (vault_path / "notes").mkdir(parents=True)
        return vault_path

    def _register(self, vault: Path, relative: str, content: str):
        path = vault / relative
        path.write_text(content)
        ctx = BuildContext(BuildConfig(vault=vault))
        return ctx, ctx.add_page(path)

    def test_title_from_frontmatter(self, vault):
        _, page = self._register(vault, "notes/a.md", "---\ntitle: Proper Title\n---\nBody")
        assert page.title == "Proper Title"

    def test_title_from_filename(self, vault):
        _, page = self._register(vault, "notes/My Note.md", "# Heading\n")
        assert page.title == "My Note"

    def test_tags_from_frontmatter(self, vault):
        _, page = self._register(vault, "notes/a.md", "---\ntags:\n  - one\n  - two\n---\n")
        assert page.tags == ["one", "two"]

    def test_created_date(self, vault):
        _, page = self._register(vault, "notes/a.md", "---\ncreated: 2024-01-15\n---\n")
        expected = datetime.datetime(2024, 1, 15, tzinfo=datetime.timezone.utc).timestamp()
        assert page.ctime == expected

    def test_ctime_falls_back_to_file(self, vault):
        _, page = self._register(vault, "notes/a.md", "Body\n")
        assert page.ctime == (vault / "notes" / "a.md").stat().st_ctime

    def test_web_path_mirrors_source(self, vault, tmp_path):
        _, page = self._register(vault, "notes/a.md", "Body\n")

        assert page.web_path == "notes/a.html"
        assert page.html_path(tmp_path / "public") == tmp_path / "public" / "notes" / "a.html"

    def test_canvas_web_path(self, vault):
        _, page = self._register(vault, "notes/board.canvas", '{"nodes": [], "edges": []}')
        assert page.web_path == "notes/board.html"

    def test_new_page_is_unbuilt(self, vault):
        _, page = self._register(vault, "notes/a.md", "Body\n")

        assert page.state is PageState.UNBUILT
        assert page.scratch_path is None
        assert page.titles == []
        assert page.first_image is None

    def test_invalid_yaml_is_ignored(self, vault):
        _, page = self._register(vault, "notes/a.md", "---\ntitle: [unclosed\n---\nBody\n")

        assert page.title == "a"
        assert page.tags == []

    def test_page_from_title(self, vault):
        ctx, page = self._register(vault, "notes/a.md", "---\ntitle: Alpha\n---\n")

        assert ctx.page_from_title("Alpha") is page
        assert ctx.page_from_title("Missing") is None

    def test_preview_skips_frontmatter(self, vault):
        _, page = self._register(vault, "notes/a.md", "---\ntitle: A\n---\nFirst line\n\nSecond   line\n")
        assert page.preview() == "First line Second line"

    def test_preview_is_truncated(self, vault):
        _, page = self._register(vault, "notes/a.md", "word " * 100)
        assert len(page.preview(limit=20)) == 20

    def test_canvas_preview(self, vault):
        _, page = self._register(
            vault,
            "notes/board.canvas",
            '{"nodes": ['
            '{"id": "1", "x": 0, "y": 0, "width": 10, "height": 10, "type": "text", "text": "hello"}, '
            '{"id": "2", "x": 0, "y": 20, "width": 10, "height": 10, "type": "text", "text": "world"}'
            '], "edges": []}',
        )
        assert page.preview() == "hello world"

    def test_canvas_preview_wrong_structure(self, vault):
        _, page = self._register(vault, "notes/board.canvas", '{"nodes": 5, "edges": []}')

        with pytest.raises(MalformedInputError):
            page.preview()

    def test_canvas_preview_invalid_json(self, vault):
        _, page = self._register(vault, "notes/board.canvas", "{not json")

        with pytest.raises(MalformedInputError):
            page.preview()

    def test_add_tag_deduplicates(self, vault):
        _, page = self._register(vault, "notes/a.md", "---\ntags: [one]\n---\n")
        page.add_tag("one")
        page.add_tag("two")

        assert page.tags == ["one", "two"]

    def test_web_path_prefix(self, vault):
        ctx = BuildContext(BuildConfig(vault=vault, webroot="/blog/"))

        assert ctx.web_path("/notes/a.html") == "/blog/notes/a.html"
        with pytest.raises(ValueError):
            ctx.web_path("notes/a.html")
