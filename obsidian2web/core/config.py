"""Build file loading."""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from obsidian2web.core.models import ConfigError


@dataclass
class RSSConfig:
    url: str
    title: str
    description: str


@dataclass
class BuildConfig:
    """Settings of one build, usually read from a YAML build file."""
    vault: Path
    include: List[str] = field(default_factory=lambda: ["."])
    output: Path = Path("public")
    webroot: str = ""
    index: Optional[str] = None
    project_footer: bool = False
    custom_css: Optional[Path] = None
    strict_links: bool = True
    rss: Optional[RSSConfig] = None
    recent_pages: int = 10

    def __post_init__(self):
        self.vault = Path(self.vault)
        self.output = Path(self.output)
        self.webroot = (self.webroot or "").rstrip('/')
        if self.custom_css is not None:
            self.custom_css = Path(self.custom_css)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> "BuildConfig":
        """Build a config from a parsed build file.

        Relative vault, output and custom_css paths are resolved against
        base_dir (the build file's directory) when given.

        Raises:
            ConfigError: on unknown keys, a missing vault or incomplete rss settings
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown build file keys: {', '.join(sorted(unknown))}")

        if not data.get('vault'):
            raise ConfigError("Build file must set 'vault'")

        values = dict(data)
        if isinstance(values.get('include'), str):
            values['include'] = [values['include']]

        if base_dir is not None:
            for key in ('vault', 'output', 'custom_css'):
                if values.get(key) is not None:
                    values[key] = Path(base_dir) / values[key]

        rss = values.get('rss')
        if rss is not None:
            if isinstance(rss, str):
                rss = {'url': rss}
            missing = [k for k in ('url', 'title', 'description') if not rss.get(k)]
            if missing:
                raise ConfigError(f"rss is missing: {', '.join(missing)}")
            values['rss'] = RSSConfig(url=rss['url'], title=rss['title'], description=rss['description'])

        return cls(**values)


def load_config(path: Path) -> BuildConfig:
    """Load a YAML build file.

    Raises:
        ConfigError: if the file does not hold a valid build configuration
    """
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse build file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Build file {path} must be a mapping")

    return BuildConfig.from_dict(data, base_dir=path.parent)
