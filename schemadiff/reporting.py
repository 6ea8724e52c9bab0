"""
reporting
=========

Console output, per-object diff files and the Markdown summary.

The diff renderer (:mod:`schemadiff.diffing`) knows nothing about colors;
this module turns its :class:`~schemadiff.diffing.RenderedLine` items into
ANSI-styled console text and writes the optional report files.

Primary API
-----------
- :func:`report_category`
- :func:`write_object_diffs`
- :func:`generate_summary_md`

"""

from __future__ import annotations

import datetime as dt
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from .diffing import (
    DEFAULT_CONTEXT,
    NO_DIFFERENCES,
    LineKind,
    RenderedLine,
    format_plain,
    render,
    render_lines,
    write_text,
)
from .reconcile import ComparisonResult, union_keys
from .utils import safe_name

RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RESET = "\033[0m"

LINE_COLORS = {
    LineKind.REMOVED: RED,
    LineKind.ADDED: GREEN,
}


@dataclass
class SummarySection:
    """One section of ``SUMMARY.md``: linked diff files plus free-text notes."""

    title: str
    files: List[Path] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)


def paint(text: str, color: str, enabled: bool) -> str:
    """Wrap *text* in an ANSI color when *enabled*."""
    if not enabled:
        return text
    return f"{color}{text}{RESET}"


def style_line(line: RenderedLine, color: bool = True) -> str:
    """Return *line* as console text; removed lines red, added lines green."""
    text = format_plain(line)
    ansi = LINE_COLORS.get(line.kind)
    if ansi is None:
        return text
    return paint(text, ansi, color)


def format_diff(lines: Sequence[RenderedLine], color: bool = True) -> str:
    """Join styled diff lines, or return the "no differences" sentinel."""
    if not lines:
        return NO_DIFFERENCES
    return "\n".join(style_line(line, color) for line in lines)


def report_category(
    label: str,
    result: ComparisonResult,
    reference: Mapping[str, str],
    target: Mapping[str, str],
    out: List[str],
    reference_label: str = "reference",
    target_label: str = "target",
    context: int = DEFAULT_CONTEXT,
    color: bool = True,
) -> bool:
    """Append the report for one category to *out*.

    Parameters
    ----------
    label:
        Category label (``"Tables"``).
    result:
        Classification produced by :func:`schemadiff.reconcile.reconcile`.
    reference, target:
        The definition maps that were reconciled; differing pairs are
        rendered from them.
    out:
        Output buffer; one entry per printed line (an entry may itself span
        several lines for a diff).
    reference_label, target_label:
        Environment labels used in "Not found in ..." lines.
    context:
        Number of unchanged lines shown around each difference.
    color:
        Whether to add ANSI colors.

    Returns
    -------
    bool
        ``result.ok``.
    """
    if result.ok:
        out.append(paint(f"✅ No differences in {label}", GREEN, color))
        return True

    reference_only = set(result.reference_only)
    target_only = set(result.target_only)
    differing = set(result.differing)
    for name in union_keys(reference, target):
        if name in target_only:
            out.append(paint(f"❌ Difference in {label}: {name}", RED, color))
            out.append(paint(f"❌ Not found in {reference_label}", RED, color))
        elif name in reference_only:
            out.append(paint(f"❌ Difference in {label}: {name}", RED, color))
            out.append(paint(f"❌ Not found in {target_label}", RED, color))
        elif name in differing:
            out.append(paint(f"❌ Difference in {label}: {name}", RED, color))
            out.append(format_diff(render_lines(reference[name], target[name], context), color))
    return False


def warning(message: str, color: bool = True) -> str:
    """Return a yellow warning line."""
    return paint(f"⚠️  {message}", YELLOW, color)


def write_object_diffs(
    diffs_dir: Path,
    result: ComparisonResult,
    reference: Mapping[str, str],
    target: Mapping[str, str],
    context: int = DEFAULT_CONTEXT,
) -> List[Path]:
    """Write one plain ``.diff`` file per differing object.

    Returns
    -------
    list of pathlib.Path
        The files written, in the order of ``result.differing``.
    """
    written: List[Path] = []
    for name in result.differing:
        path = diffs_dir / f"{safe_name(name)}.diff"
        write_text(path, render(reference[name], target[name], context) + "\n")
        written.append(path)
    return written


def one_sided_notes(result: ComparisonResult, reference_label: str, target_label: str) -> List[str]:
    """Describe objects that exist on one side only, for ``SUMMARY.md``."""
    notes = [f"`{name}` not found in {target_label}" for name in result.reference_only]
    notes += [f"`{name}` not found in {reference_label}" for name in result.target_only]
    return notes


def rel_link(from_file: Path, to_file: Path) -> str:
    """Create a portable relative link for Markdown.

    Parameters
    ----------
    from_file:
        The file that will contain the link (e.g., SUMMARY.md).
    to_file:
        The target file (e.g., a diff file).

    Returns
    -------
    str
        Relative path suitable for Markdown links.
    """
    return os.path.relpath(to_file, start=from_file.parent).replace("\\", "/")


def md_anchor(title: str) -> str:
    """Create an approximate GitHub-style markdown anchor from a section title."""
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


def generate_summary_md(
    out_dir: Path,
    header_lines: List[str],
    sections: List[SummarySection],
    now: Optional[dt.datetime] = None,
) -> Path:
    """Generate a Markdown summary linking to diff files.

    Parameters
    ----------
    out_dir:
        Output directory where ``SUMMARY.md`` is written.
    header_lines:
        Bullet-style lines to include near the top (targets, options).
    sections:
        One :class:`SummarySection` per compared (database, category).

    Returns
    -------
    pathlib.Path
        The path to the generated ``SUMMARY.md``.

    Notes
    -----
    Links are written as *relative* paths so the whole output directory can be
    moved or archived while preserving navigation.
    """
    summary_path = out_dir / "SUMMARY.md"
    stamp = (now or dt.datetime.now()).strftime("%Y-%m-%d %H:%M:%S")

    lines: List[str] = []
    lines.append("# Schema Diff Summary\n\n")
    lines.append(f"_Generated: {stamp}_\n\n")

    if header_lines:
        for h in header_lines:
            lines.append(h + "\n")
        lines.append("\n")

    lines.append("## Contents\n")
    for section in sections:
        lines.append(f"- [{section.title}](#{md_anchor(section.title)})\n")
    lines.append("\n")

    for section in sections:
        lines.append(f"## {section.title}\n\n")
        if not section.files and not section.notes:
            lines.append("- ✅ No differences\n\n")
            continue
        for f in section.files:
            lines.append(f"- [{f.name}]({rel_link(summary_path, f)})\n")
        for note in section.notes:
            lines.append(f"- ❌ {note}\n")
        lines.append("\n")

    write_text(summary_path, "".join(lines))
    return summary_path


def category_diffs_dir(out_dir: Path, category_value: str, database: Optional[str] = None) -> Path:
    """Return ``<out_dir>/diffs/[<database>/]<category>``."""
    base = out_dir / "diffs"
    if database is not None:
        base = base / safe_name(database)
    return base / category_value


def section_title(category_label: str, database: Optional[str] = None) -> str:
    """Return the ``SUMMARY.md`` section title of a category."""
    if database is None:
        return category_label
    return f"{database}: {category_label}"


def header_lines(descriptions: Dict[str, str]) -> List[str]:
    """Render ``key: value`` pairs as Markdown bullets."""
    return [f"- {key}: {value}" for key, value in descriptions.items()]
