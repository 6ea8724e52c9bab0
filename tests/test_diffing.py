"""Unit tests for diffing module."""

from pathlib import Path

import pytest

from schemadiff.diffing import (
    NO_DIFFERENCES,
    DiffBlock,
    LineKind,
    RenderedLine,
    build_blocks,
    diff_indices,
    format_plain,
    render,
    render_lines,
    split_lines,
    write_text,
)


def lines_of(n: int, changed: tuple = ()) -> str:
    """Return *n* numbered lines, with the indices in *changed* altered."""
    return "\n".join(f"line {i}{' changed' if i in changed else ''}" for i in range(n))


class TestSplitAndIndices:
    """Tests for split_lines and diff_indices."""

    def test_split_keeps_trailing_empty_line(self) -> None:
        """Test a trailing newline yields a trailing empty line."""
        assert split_lines("a\nb\n") == ["a", "b", ""]

    def test_split_keeps_carriage_returns(self) -> None:
        """Test only \\n separates lines."""
        assert split_lines("a\r\nb") == ["a\r", "b"]

    def test_missing_lines_compare_as_empty(self) -> None:
        """Test the shorter side is padded with empty strings."""
        assert diff_indices(["a", "b"], ["a", "b", "c"]) == [2]
        assert diff_indices(["a", "b", ""], ["a", "b"]) == []

    def test_indices_ascending(self) -> None:
        """Test every differing position is reported in order."""
        assert diff_indices(["a", "x", "c", "y"], ["a", "b", "c", "d"]) == [1, 3]


class TestBuildBlocks:
    """Tests for build_blocks function."""

    def test_single_line_boundary(self) -> None:
        """Test a single-line sequence clamps to [0, 0]."""
        assert build_blocks([0], 1, 3) == [DiffBlock(0, 0)]

    def test_gap_produces_two_blocks(self) -> None:
        """Test differences at 0 and 10 stay apart with context 3."""
        assert build_blocks([0, 10], 20, 3) == [DiffBlock(0, 3), DiffBlock(7, 13)]

    def test_merge_within_reach(self) -> None:
        """Test differences at 0 and 5 merge because 5-3 <= 3+1."""
        assert build_blocks([0, 5], 20, 3) == [DiffBlock(0, 8)]

    def test_merge_touching_windows(self) -> None:
        """Test windows that touch without overlapping are merged."""
        # [0,3] and [4,10]
        assert build_blocks([0, 7], 20, 3) == [DiffBlock(0, 10)]

    def test_one_line_gap_is_not_merged(self) -> None:
        """Test windows separated by one line stay separate."""
        assert build_blocks([0, 8], 20, 3) == [DiffBlock(0, 3), DiffBlock(5, 11)]

    def test_two_line_gap_is_not_merged(self) -> None:
        """Test windows separated by two lines stay separate."""
        assert build_blocks([0, 9], 20, 3) == [DiffBlock(0, 3), DiffBlock(6, 12)]

    def test_end_clamped_to_last_line(self) -> None:
        """Test the block end never exceeds max_lines - 1."""
        assert build_blocks([4], 6, 3) == [DiffBlock(1, 5)]

    def test_zero_context(self) -> None:
        """Test context 0 merges only consecutive lines."""
        assert build_blocks([1, 2, 4, 7], 10, 0) == [DiffBlock(1, 2), DiffBlock(4, 4), DiffBlock(7, 7)]

    def test_no_indices(self) -> None:
        """Test no differences yields no blocks."""
        assert build_blocks([], 5, 3) == []

    def test_negative_context_rejected(self) -> None:
        """Test a negative radius is a programming error."""
        with pytest.raises(ValueError, match="context"):
            build_blocks([0], 1, -1)


class TestRenderLines:
    """Tests for render_lines function."""

    def test_single_line_difference(self) -> None:
        """Test one differing line renders a removed+added pair only."""
        assert render_lines("a", "b") == [
            RenderedLine(LineKind.REMOVED, "a"),
            RenderedLine(LineKind.ADDED, "b"),
        ]

    def test_context_lines_unchanged(self) -> None:
        """Test surrounding lines are rendered as unchanged."""
        out = render_lines("a\nb\nc", "a\nX\nc", context=1)
        assert [line.kind for line in out] == [
            LineKind.UNCHANGED,
            LineKind.REMOVED,
            LineKind.ADDED,
            LineKind.UNCHANGED,
        ]
        assert out[0].text == "a"
        assert out[3].text == "c"

    def test_separator_between_blocks(self) -> None:
        """Test exactly one separator between non-adjacent blocks."""
        out = render_lines(lines_of(20), lines_of(20, changed=(0, 10)), context=3)
        kinds = [line.kind for line in out]
        assert kinds.count(LineKind.SEPARATOR) == 1
        sep = kinds.index(LineKind.SEPARATOR)
        # block [0,3] = 4 indices, one of them a removed+added pair
        assert sep == 5
        assert out[sep + 1] == RenderedLine(LineKind.UNCHANGED, "line 7")

    def test_leading_separator_when_first_block_starts_late(self) -> None:
        """Test a separator precedes a first block that does not start at 0."""
        out = render_lines(lines_of(10), lines_of(10, changed=(6,)), context=2)
        assert out[0].kind is LineKind.SEPARATOR
        assert out[1] == RenderedLine(LineKind.UNCHANGED, "line 4")

    def test_first_block_at_zero_has_no_separator(self) -> None:
        """Test a block starting at index 0 is not preceded by a separator."""
        out = render_lines(lines_of(10), lines_of(10, changed=(3,)), context=3)
        assert out[0] == RenderedLine(LineKind.UNCHANGED, "line 0")

    def test_first_block_at_index_one_has_separator(self) -> None:
        """Test a hidden line 0 is marked with a separator."""
        out = render_lines(lines_of(10), lines_of(10, changed=(4,)), context=3)
        assert out[0].kind is LineKind.SEPARATOR
        assert out[1] == RenderedLine(LineKind.UNCHANGED, "line 1")

    def test_extra_target_line_shows_empty_removed(self) -> None:
        """Test an appended line is a removed empty line plus an added line."""
        out = render_lines("a", "a\nb", context=0)
        assert out == [
            RenderedLine(LineKind.SEPARATOR),
            RenderedLine(LineKind.REMOVED, ""),
            RenderedLine(LineKind.ADDED, "b"),
        ]

    def test_insertion_shifts_following_lines(self) -> None:
        """Test the diff is positional: an insertion changes every later line."""
        out = render_lines("a\nb\nc", "a\nNEW\nb\nc", context=0)
        removed = [line.text for line in out if line.kind is LineKind.REMOVED]
        added = [line.text for line in out if line.kind is LineKind.ADDED]
        assert removed == ["b", "c", ""]
        assert added == ["NEW", "b", "c"]

    def test_identical_inputs_render_nothing(self) -> None:
        """Test equal inputs produce no rendered lines."""
        assert render_lines("same\ntext", "same\ntext") == []


class TestRender:
    """Tests for render and format_plain."""

    def test_plain_prefixes(self) -> None:
        """Test the unstyled line prefixes."""
        assert format_plain(RenderedLine(LineKind.UNCHANGED, "x")) == "  x"
        assert format_plain(RenderedLine(LineKind.REMOVED, "x")) == "- x"
        assert format_plain(RenderedLine(LineKind.ADDED, "x")) == "+ x"
        assert format_plain(RenderedLine(LineKind.SEPARATOR)) == "..."

    def test_render_single_line(self) -> None:
        """Test the boundary case of two single-line strings."""
        assert render("old", "new") == "- old\n+ new"

    def test_render_gap(self) -> None:
        """Test blocks [0,3] and [7,13] joined with one separator."""
        a = lines_of(20)
        b = lines_of(20, changed=(0, 10))
        expected = "\n".join(
            ["- line 0", "+ line 0 changed", "  line 1", "  line 2", "  line 3", "..."]
            + ["  line 7", "  line 8", "  line 9", "- line 10", "+ line 10 changed"]
            + ["  line 11", "  line 12", "  line 13"]
        )
        assert render(a, b) == expected

    def test_render_merge(self) -> None:
        """Test differences at 0 and 5 render as one block [0,8]."""
        out = render(lines_of(20), lines_of(20, changed=(0, 5)))
        assert "..." not in out
        assert out.splitlines()[-1] == "  line 8"
        assert len(out.splitlines()) == 11

    def test_render_identical_returns_sentinel(self) -> None:
        """Test equal inputs return the sentinel instead of failing."""
        assert render("x", "x") == NO_DIFFERENCES

    def test_render_is_deterministic(self) -> None:
        """Test two calls give byte-identical output."""
        a = lines_of(30)
        b = lines_of(30, changed=(2, 14, 29))
        assert render(a, b) == render(a, b)


class TestTextFiles:
    """Tests for write_text."""

    def test_write_text_normalizes_newlines(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "file.txt"
        write_text(path, "a\r\nb\rc")
        assert path.read_bytes() == b"a\nb\nc"
