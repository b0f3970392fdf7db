"""Plug-in contract for rewrite processors."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Pattern, TextIO

if TYPE_CHECKING:
    from obsidian2web.core.context import BuildContext
    from obsidian2web.core.models import Page
    from obsidian2web.core.scanner import Match


class Processor:
    """A search pattern plus the transform applied to each of its matches.

    Subclasses set ``pattern`` and implement :meth:`handle`. The pipeline
    runs every processor of a pass group as one rewrite over the page,
    in the group's order, each one seeing the output of the previous.
    """

    pattern: Pattern[str]

    # Skip canvas pages, whose source is JSON rather than markdown.
    markdown_only = False

    @property
    def name(self) -> str:
        return type(self).__name__

    def handle(
        self,
        ctx: "BuildContext",
        page: "Page",
        text: str,
        match: "Match",
        out: TextIO,
    ) -> None:
        """Write the replacement for ``match`` to ``out``.

        May read or update page metadata and consult the build context.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.name}({self.pattern.pattern!r})"


@dataclass
class ProcessorGroups:
    """The ordered processor lists of the three rewrite passes."""
    pre: List[Processor] = field(default_factory=list)
    post: List[Processor] = field(default_factory=list)
    end: List[Processor] = field(default_factory=list)
