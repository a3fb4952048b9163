"""Byte offset to line lookups for node spans.

Front ends record byte spans; reports and trackers speak in 1-based lines.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from astdelta.tree.models import Node, Span, Tree


class LineIndex:
    """Maps byte offsets of one source text to 1-based line numbers."""

    __slots__ = ("_starts", "_length")

    def __init__(self, source: bytes | str) -> None:
        data = source.encode() if isinstance(source, str) else source
        self._length = len(data)
        starts = [0]
        pos = data.find(b"\n")
        while pos != -1:
            starts.append(pos + 1)
            pos = data.find(b"\n", pos + 1)
        self._starts = starts

    @property
    def line_count(self) -> int:
        return len(self._starts)

    def line_of(self, offset: int) -> int:
        """Line containing ``offset``. Offsets past the end clamp to the last line."""
        offset = max(0, min(offset, self._length))
        return bisect_right(self._starts, offset)

    def lines_of(self, span: Span) -> tuple[int, int]:
        """First and last line touched by a span (end offset is exclusive)."""
        start = self.line_of(span.start)
        end = self.line_of(max(span.start, span.end - 1))
        return start, end


@dataclass(frozen=True, slots=True)
class LineRange:
    """Combined location of one or more nodes."""

    start_offset: int
    end_offset: int
    start_line: int
    end_line: int


def range_of(nodes: Iterable[Node], lines: LineIndex) -> LineRange | None:
    """Smallest range covering every node in ``nodes``; None when empty."""
    spans = [n.span for n in nodes]
    if not spans:
        return None
    start = min(s.start for s in spans)
    end = max(s.end for s in spans)
    start_line, end_line = lines.lines_of(Span(start, end))
    return LineRange(start, end, start_line, end_line)


def locate(
    tree: Tree,
    lines: LineIndex,
    start_line: int,
    end_line: int,
    kind: str | Callable[[str], bool] | None = None,
) -> Node | None:
    """First node (pre-order) spanning exactly ``start_line..end_line``.

    ``kind`` restricts the search to one kind, or to kinds accepted by a
    predicate (e.g. ``lambda k: k.endswith("_statement")``).
    """
    if isinstance(kind, str):
        wanted = kind

        def accepts(k: str) -> bool:
            return k == wanted

    elif kind is None:

        def accepts(k: str) -> bool:  # noqa: ARG001
            return True

    else:
        accepts = kind

    for candidate in tree:
        if not accepts(candidate.kind):
            continue
        if lines.lines_of(candidate.span) == (start_line, end_line):
            return candidate
    return None
