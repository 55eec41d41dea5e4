"""Tests for grid_parser module."""

import pytest

from grid_parser import SHAPE_CODES, format_grid, parse_grid
from pipe_types import Cell, Position, TileShape


class TestParseGrid:
    """Tests for the grid parser."""

    def test_simple_grid(self) -> None:
        """Parse a 2x2 grid with both endpoints."""
        grid = parse_grid("S H1|V D")

        assert grid.rows == 2
        assert grid.cols == 2
        assert grid[Position(0, 0)] == Cell(TileShape.SOURCE)
        assert grid[Position(0, 1)] == Cell(TileShape.STRAIGHT_HORIZONTAL, 1)
        assert grid[Position(1, 0)] == Cell(TileShape.STRAIGHT_VERTICAL, 0)
        assert grid[Position(1, 1)] == Cell(TileShape.DESTINATION)

    def test_all_shape_codes(self) -> None:
        """Every code maps to its shape."""
        grid = parse_grid("H2 V3 NE1 SE2 SW3 NW0 T1 X2 S D")
        shapes = [cell.shape for cell in grid.cells[0]]
        assert shapes == list(SHAPE_CODES.values())
        assert [cell.rotation for cell in grid.cells[0]] == [2, 3, 1, 2, 3, 0, 1, 2, 0, 0]

    def test_case_insensitive(self) -> None:
        """Codes may be written in lowercase."""
        grid = parse_grid("s ne2|t3 d")
        assert grid[Position(0, 1)] == Cell(TileShape.CURVE_NE, 2)
        assert grid[Position(1, 0)] == Cell(TileShape.T_JUNCTION, 3)

    def test_extra_whitespace(self) -> None:
        """Runs of spaces and surrounding whitespace are ignored."""
        grid = parse_grid("  S   H0 | V0  D  ")
        assert grid.rows == 2
        assert grid.cols == 2

    def test_invalid_code_raises_error(self) -> None:
        """Unknown shape codes raise ValueError."""
        with pytest.raises(ValueError):
            parse_grid("S Q0|H0 D")

    def test_invalid_code_error_details(self) -> None:
        """The error names the cell, row and column."""
        with pytest.raises(ValueError) as exc_info:
            parse_grid("S H0|NX1 D")
        message = str(exc_info.value)
        assert "Invalid cell string: 'NX1'" in message
        assert "Row 1" in message
        assert "column 0" in message

    def test_rotation_out_of_range(self) -> None:
        """Rotation digits above 3 are rejected."""
        with pytest.raises(ValueError) as exc_info:
            parse_grid("S H4|H0 D")
        assert "'H4'" in str(exc_info.value)

    def test_multi_digit_rotation_rejected(self) -> None:
        """Rotation is a single digit."""
        with pytest.raises(ValueError):
            parse_grid("S H01|H0 D")

    def test_inconsistent_row_length_error_details(self) -> None:
        """Rows of different lengths are reported."""
        with pytest.raises(ValueError) as exc_info:
            parse_grid("S H0 H0|H0 D")
        message = str(exc_info.value)
        assert "Inconsistent row lengths" in message
        assert "Row 1: 2 columns" in message


class TestFormatGrid:
    """Tests for format_grid."""

    def test_format(self) -> None:
        """Pipes carry their rotation digit; endpoints do not."""
        grid = parse_grid("S ne2|T D")
        assert format_grid(grid) == "S NE2|T0 D"

    def test_parse_of_format_is_identity(self) -> None:
        """Formatting then parsing gives back the same grid."""
        grid = parse_grid("S X1 T2|SW3 NW0 V1|H2 SE3 D")
        assert parse_grid(format_grid(grid)) == grid
