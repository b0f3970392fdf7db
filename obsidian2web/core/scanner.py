"""Iterative regex match driver with absolute offsets.

Every attempt runs against the remainder of the text, ``text[offset:]``,
so anchors such as ``^`` and ``\\A`` see the start of that remainder.
Positions reported in a :class:`Match` are always absolute, i.e. they
index into the original text.
"""

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Pattern, Union

from obsidian2web.core.models import MalformedInputError


@dataclass(frozen=True)
class Capture:
    """Start/end offsets of a capture group, end exclusive."""
    start: int
    end: int

    def shifted(self, offset: int) -> "Capture":
        return Capture(self.start + offset, self.end + offset)


class Match:
    """One match of a scan, with one entry per group (None when absent)."""

    def __init__(self, text: str, groups: List[Optional[Capture]]):
        if not groups or groups[0] is None:
            raise MalformedInputError("Match has no whole-match group")
        self.text = text
        self.groups = groups

    @property
    def start(self) -> int:
        return self.groups[0].start

    @property
    def end(self) -> int:
        return self.groups[0].end

    def span(self, index: int = 0) -> Optional[Capture]:
        return self.groups[index]

    def group(self, index: int = 0) -> Optional[str]:
        """Text of a group, None if the group did not participate."""
        capture = self.groups[index]
        if capture is None:
            return None
        return self.text[capture.start:capture.end]

    def __repr__(self) -> str:
        return f"Match(start={self.start}, end={self.end}, groups={len(self.groups)})"


def _captures(found: "re.Match[str]", offset: int) -> List[Optional[Capture]]:
    groups: List[Optional[Capture]] = []
    for index in range(found.re.groups + 1):
        start, end = found.span(index)
        if start == -1:
            groups.append(None)
        else:
            groups.append(Capture(start, end).shifted(offset))
    return groups


def scan(pattern: Union[str, Pattern[str]], text: str) -> Iterator[Match]:
    """Yield successive non-overlapping matches of pattern over text.

    After each match the cursor moves to the end of the whole match. An
    empty match additionally skips one character so the scan always makes
    progress; the skipped character is left to the caller as untouched
    text.

    The returned iterator is single use: start a new scan to rescan.
    """
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    offset = 0

    while offset <= len(text):
        found = regex.search(text[offset:])
        if found is None:
            return

        match = Match(text, _captures(found, offset))
        yield match

        if match.start == match.end:
            if match.end >= len(text):
                return
            offset = match.end + 1
        else:
            offset = match.end
