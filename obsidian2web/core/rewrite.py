"""Pattern driven text rewriting."""

import io
from typing import Callable, Optional, Pattern, TextIO, Union

from obsidian2web.core.scanner import Match, scan

# (full text, match, output sink) -> None. Whatever the transform writes
# to the sink replaces the matched span.
Transform = Callable[[str, Match, TextIO], None]


def rewrite(pattern: Union[str, Pattern[str]], text: str, transform: Transform) -> str:
    """Rewrite every match of pattern in text through transform.

    Text between matches is copied unchanged. A pattern that never
    matches returns the text as is.
    """
    out = io.StringIO()
    last_end: Optional[int] = None

    for match in scan(pattern, text):
        out.write(text[last_end or 0:match.start])
        transform(text, match, out)
        last_end = match.end

    out.write(text[last_end or 0:])
    return out.getvalue()


def keep(text: str, match: Match, out: TextIO) -> None:
    """Transform that writes the matched span back unchanged."""
    out.write(text[match.start:match.end])
