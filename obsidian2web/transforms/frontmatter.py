"""YAML front matter of markdown notes.

Parsing helpers used when a page is registered, and the pre-processor
that removes the front matter block before rendering.
"""

import datetime
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Tuple

import yaml

from obsidian2web.transforms.base import Processor

logger = logging.getLogger(__name__)


def parse_frontmatter(content: str, source: Optional[Path] = None) -> Tuple[Dict[str, Any], str]:
    """Split a note into its front matter and body.

    Args:
        content: Full file content
        source: File the content came from, for warnings

    Returns:
        Tuple of (front matter dict, body). The dict is empty when the note
        has no front matter or it is not a valid YAML mapping.
    """
    if not content.startswith('---'):
        return {}, content

    parts = content.split('---\n', 2)
    if len(parts) < 3:
        return {}, content

    try:
        frontmatter = yaml.safe_load(parts[1])
    except yaml.YAMLError as e:
        name = source.name if source else "note"
        logger.warning("Failed to parse YAML in %s: %s", name, e)
        return {}, parts[2]

    if not isinstance(frontmatter, dict):
        return {}, parts[2]

    return frontmatter, parts[2]


def normalize_tag(tag: str) -> Optional[str]:
    """Tag name as used in tag page paths: no leading ``#`` or outer slashes.

    Returns:
        The tag, or None if it is empty or holds a ``.`` or ``..`` segment
    """
    tag = tag.strip().lstrip('#').strip('/')
    segments = tag.split('/')
    if not tag or any(segment in ('', '.', '..') for segment in segments):
        return None
    return tag


def extract_tags(frontmatter: Dict[str, Any]) -> List[str]:
    """Tags of a front matter dict, given either as a list or a single string.

    Tags that cannot name a tag page are dropped with a warning.
    """
    tag_data = frontmatter.get('tags')
    if isinstance(tag_data, list):
        raw = [str(tag) for tag in tag_data if tag is not None]
    elif isinstance(tag_data, str):
        raw = [tag_data]
    else:
        raw = []

    tags: List[str] = []
    for value in raw:
        tag = normalize_tag(value)
        if tag is None:
            logger.warning("Ignoring invalid tag: %r", value)
        elif tag not in tags:
            tags.append(tag)
    return tags


def get_timestamp(date_value: Any) -> Optional[float]:
    """Convert a front matter date to a POSIX timestamp.

    Accepts what YAML produces for dates (date, datetime), ISO strings and
    numbers. Dates without a timezone are taken as UTC.

    Returns:
        The timestamp, or None if the value is missing or not a date
    """
    if date_value is None:
        return None

    if isinstance(date_value, bool):
        return None

    if isinstance(date_value, (int, float)):
        return float(date_value)

    if isinstance(date_value, str):
        try:
            date_value = datetime.datetime.fromisoformat(date_value.strip())
        except ValueError:
            logger.warning("Ignoring unparseable date: %r", date_value)
            return None

    if isinstance(date_value, datetime.datetime):
        if date_value.tzinfo is None:
            date_value = date_value.replace(tzinfo=datetime.timezone.utc)
        return date_value.timestamp()

    if isinstance(date_value, datetime.date):
        return datetime.datetime(
            date_value.year, date_value.month, date_value.day,
            tzinfo=datetime.timezone.utc,
        ).timestamp()

    return None


class FrontmatterProcessor(Processor):
    """Drops the front matter block at the top of a note."""

    pattern = re.compile(r'\A---\n(?:.*?\n)?---(?:\n|\Z)', re.DOTALL)
    markdown_only = True

    def handle(self, ctx, page, text: str, match, out: TextIO) -> None:
        # \A also matches at the start of each remaining slice
        if match.start != 0:
            out.write(match.group())
