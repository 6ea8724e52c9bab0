"""
diffing
=======

Positional line diff with context windows, plus text file helpers.

This module contains:
- the line diff renderer used for every differing object
- writing UTF-8 text with normalized newlines

The diff is **index-aligned**, not an LCS diff: line ``i`` of the reference
definition is only ever compared with line ``i`` of the target definition.
An inserted line therefore shows every following line as a removed/added
pair. Definitions coming out of ``SHOW CREATE`` are short and mostly edited in
place, so this keeps the output simple and predictable.

Rendering happens in two steps:

1. :func:`render_lines` produces styling-agnostic :class:`RenderedLine` items.
2. :func:`format_plain` (or :func:`schemadiff.reporting.style_line` for the
   console) turns them into text.

"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

DEFAULT_CONTEXT = 3
SEPARATOR = "..."
NO_DIFFERENCES = "No differences found."


class LineKind(enum.Enum):
    """Kind of a rendered diff line."""

    UNCHANGED = "unchanged"
    REMOVED = "removed"
    ADDED = "added"
    SEPARATOR = "separator"


@dataclass(frozen=True)
class RenderedLine:
    """One line of diff output.

    ``text`` is the raw definition line (reference side for removed lines,
    target side for added lines) and is empty for separators.
    """

    kind: LineKind
    text: str = ""


@dataclass(frozen=True)
class DiffBlock:
    """Inclusive line index range ``[start, end]`` rendered as one hunk."""

    start: int
    end: int


PLAIN_PREFIXES = {
    LineKind.UNCHANGED: "  ",
    LineKind.REMOVED: "- ",
    LineKind.ADDED: "+ ",
}


def split_lines(text: str) -> List[str]:
    """Split *text* on ``\\n``; a trailing newline yields a trailing empty line."""
    return text.split("\n")


def _line_at(lines: Sequence[str], index: int) -> str:
    return lines[index] if index < len(lines) else ""


def diff_indices(a_lines: Sequence[str], b_lines: Sequence[str]) -> List[int]:
    """Return the ascending indices at which the padded line sequences differ.

    A line missing on one side compares as an empty string.
    """
    max_lines = max(len(a_lines), len(b_lines))
    return [i for i in range(max_lines) if _line_at(a_lines, i) != _line_at(b_lines, i)]


def build_blocks(indices: Sequence[int], max_lines: int, context: int = DEFAULT_CONTEXT) -> List[DiffBlock]:
    """Group diff indices into context-padded, merged blocks.

    Parameters
    ----------
    indices:
        Ascending diff indices (see :func:`diff_indices`).
    max_lines:
        Length of the longer line sequence; blocks never extend past
        ``max_lines - 1``.
    context:
        Number of lines shown before and after each difference.

    Returns
    -------
    list of DiffBlock
        Ascending, non-overlapping blocks. A new difference joins the current
        block when ``index - context <= block.end + 1``, so windows that
        merely touch are merged as well.
    """
    if context < 0:
        raise ValueError(f"context must be >= 0, got {context}")

    blocks: List[DiffBlock] = []
    start = end = None
    for index in indices:
        if start is None:
            start = max(0, index - context)
            end = min(max_lines - 1, index + context)
        elif index - context <= end + 1:
            end = min(max_lines - 1, index + context)
        else:
            blocks.append(DiffBlock(start, end))
            start = max(0, index - context)
            end = min(max_lines - 1, index + context)
    if start is not None:
        blocks.append(DiffBlock(start, end))
    return blocks


def render_lines(a: str, b: str, context: int = DEFAULT_CONTEXT) -> List[RenderedLine]:
    """Return the diff of *a* (reference) and *b* (target) as rendered lines.

    An empty list means the two texts have no differing line.
    """
    a_lines = split_lines(a)
    b_lines = split_lines(b)
    max_lines = max(len(a_lines), len(b_lines))
    blocks = build_blocks(diff_indices(a_lines, b_lines), max_lines, context)

    out: List[RenderedLine] = []
    prev_end = -1
    for block in blocks:
        if block.start > prev_end + 1:
            out.append(RenderedLine(LineKind.SEPARATOR))
        for i in range(block.start, block.end + 1):
            a_line = _line_at(a_lines, i)
            b_line = _line_at(b_lines, i)
            if a_line == b_line:
                out.append(RenderedLine(LineKind.UNCHANGED, a_line))
            else:
                out.append(RenderedLine(LineKind.REMOVED, a_line))
                out.append(RenderedLine(LineKind.ADDED, b_line))
        prev_end = block.end
    return out


def format_plain(line: RenderedLine) -> str:
    """Return *line* as unstyled text."""
    if line.kind is LineKind.SEPARATOR:
        return SEPARATOR
    return PLAIN_PREFIXES[line.kind] + line.text


def render(a: str, b: str, context: int = DEFAULT_CONTEXT) -> str:
    """Return an unstyled, context-windowed diff of two definitions.

    Parameters
    ----------
    a, b:
        Canonical reference and target definitions; expected to differ.
    context:
        Number of unchanged lines shown around each difference (default 3).

    Returns
    -------
    str
        Diff lines joined with ``\\n``, or :data:`NO_DIFFERENCES` when the
        inputs have no differing line.
    """
    lines = render_lines(a, b, context)
    if not lines:
        return NO_DIFFERENCES
    return "\n".join(format_plain(line) for line in lines)


def write_text(path: Path, content: str) -> None:
    """Write UTF-8 text to *path* with normalized newlines.

    Parameters
    ----------
    path:
        File path to write.
    content:
        Text content.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    content = content.replace("\r\n", "\n").replace("\r", "\n")
    path.write_text(content, encoding="utf-8")
