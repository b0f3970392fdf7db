"""Tests for build file loading and front matter helpers."""

import datetime
from pathlib import Path

import pytest

from obsidian2web.core.config import BuildConfig, load_config
from obsidian2web.core.models import ConfigError
from obsidian2web.transforms.frontmatter import extract_tags, get_timestamp, normalize_tag, parse_frontmatter


class TestLoadConfig:
    """Tests for load_config."""

    def test_minimal(self, tmp_path):
        build_file = tmp_path / "build.yaml"
        build_file.write_text("vault: vault\n")

        config = load_config(build_file)

        assert config.vault == tmp_path / "vault"
        assert config.include == ["."]
        assert config.output == tmp_path / "public"
        assert config.webroot == ""
        assert config.strict_links is True
        assert config.rss is None

    def test_full(self, tmp_path):
        build_file = tmp_path / "build.yaml"
        build_file.write_text("""
vault: /srv/vault
include:
  - notes
  - index.md
output: site
webroot: /blog/
index: index.md
project_footer: true
strict_links: false
recent_pages: 5
rss:
  url: https://example.com
  title: My Notes
  description: Things I wrote down
""")

        config = load_config(build_file)

        assert config.vault == Path("/srv/vault")
        assert config.include == ["notes", "index.md"]
        assert config.output == tmp_path / "site"
        assert config.webroot == "/blog"
        assert config.index == "index.md"
        assert config.project_footer is True
        assert config.strict_links is False
        assert config.recent_pages == 5
        assert config.rss.url == "https://example.com"
        assert config.rss.title == "My Notes"

    def test_single_include_string(self, tmp_path):
        build_file = tmp_path / "build.yaml"
        build_file.write_text("vault: v\ninclude: notes\n")

        assert load_config(build_file).include == ["notes"]

    def test_missing_vault(self, tmp_path):
        build_file = tmp_path / "build.yaml"
        build_file.write_text("webroot: /x\n")

        with pytest.raises(ConfigError):
            load_config(build_file)

    def test_unknown_key(self, tmp_path):
        build_file = tmp_path / "build.yaml"
        build_file.write_text("vault: v\nthemes: dark\n")

        with pytest.raises(ConfigError, match="themes"):
            load_config(build_file)

    def test_incomplete_rss(self, tmp_path):
        build_file = tmp_path / "build.yaml"
        build_file.write_text("vault: v\nrss:\n  url: https://example.com\n")

        with pytest.raises(ConfigError, match="title"):
            load_config(build_file)

    def test_not_a_mapping(self, tmp_path):
        build_file = tmp_path / "build.yaml"
        build_file.write_text("- vault\n")

        with pytest.raises(ConfigError):
            load_config(build_file)

    def test_invalid_yaml(self, tmp_path):
        build_file = tmp_path / "build.yaml"
        build_file.write_text("vault: [unclosed\n")

        with pytest.raises(ConfigError):
            load_config(build_file)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_config(tmp_path / "nope.yaml")

    def test_direct_construction(self):
        config = BuildConfig(vault="v", webroot="/")
        assert config.vault == Path("v")
        assert config.webroot == ""


class TestFrontmatterHelpers:
    """Tests for front matter parsing helpers."""

    def test_parse(self):
        fm, body = parse_frontmatter("---\ntitle: A\n---\nBody\n")
        assert fm == {"title": "A"}
        assert body == "Body\n"

    def test_no_frontmatter(self):
        fm, body = parse_frontmatter("Body\n")
        assert fm == {}
        assert body == "Body\n"

    def test_unterminated(self):
        fm, body = parse_frontmatter("---\ntitle: A\n")
        assert fm == {}
        assert body == "---\ntitle: A\n"

    def test_non_mapping(self):
        fm, body = parse_frontmatter("---\n- a\n---\nBody")
        assert fm == {}
        assert body == "Body"

    def test_extract_tags(self):
        assert extract_tags({"tags": ["a", 1]}) == ["a", "1"]
        assert extract_tags({"tags": "single"}) == ["single"]
        assert extract_tags({}) == []

    def test_extract_tags_normalizes(self):
        assert extract_tags({"tags": ["#foo", "foo", "/bar/", "a/b"]}) == ["foo", "bar", "a/b"]

    def test_extract_tags_drops_path_escapes(self):
        assert extract_tags({"tags": ["../x", "a/../b", "#", "", "ok"]}) == ["ok"]

    def test_normalize_tag(self):
        assert normalize_tag(" #topic/sub ") == "topic/sub"
        assert normalize_tag("a//b") is None
        assert normalize_tag(".") is None

    def test_timestamps(self):
        midnight = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc).timestamp()

        assert get_timestamp(None) is None
        assert get_timestamp(datetime.date(2024, 1, 1)) == midnight
        assert get_timestamp(datetime.datetime(2024, 1, 1)) == midnight
        assert get_timestamp("2024-01-01") == midnight
        assert get_timestamp(1700000000) == 1700000000.0
        assert get_timestamp("yesterday") is None
