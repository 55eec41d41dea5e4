"""
Grid parsing utilities for the pipeline puzzler.

Grids are written as rows separated by | with cells separated by spaces.
"""

from __future__ import annotations

from pipe_types import Cell, Grid, TileShape

__all__ = ["SHAPE_CODES", "format_grid", "parse_grid"]

SHAPE_CODES: dict[str, TileShape] = {
    "H": TileShape.STRAIGHT_HORIZONTAL,
    "V": TileShape.STRAIGHT_VERTICAL,
    "NE": TileShape.CURVE_NE,
    "SE": TileShape.CURVE_SE,
    "SW": TileShape.CURVE_SW,
    "NW": TileShape.CURVE_NW,
    "T": TileShape.T_JUNCTION,
    "X": TileShape.CROSS_JUNCTION,
    "S": TileShape.SOURCE,
    "D": TileShape.DESTINATION,
}

_CODE_FOR_SHAPE = {shape: code for code, shape in SHAPE_CODES.items()}


def _parse_cell(cell_str: str, row_idx: int, col_idx: int, row_str: str) -> Cell:
    code = cell_str.rstrip("0123456789")
    digits = cell_str[len(code):]

    shape = SHAPE_CODES.get(code.upper())
    if shape is None or len(digits) > 1 or (digits and int(digits) > 3):
        error_msg = (
            f"Invalid cell string: '{cell_str}'\n"
            f"  Row {row_idx}: \"{row_str}\"\n"
            f"  Position: column {col_idx}\n"
            f"  Valid formats:\n"
            f"    - Shape code with optional rotation digit 0-3 (e.g., 'H', 'NE2', 'T3')\n"
            f"    - Shape codes: {', '.join(SHAPE_CODES)}"
        )
        raise ValueError(error_msg)

    return Cell(shape, int(digits) if digits else 0)


def parse_grid(definition: str) -> Grid:
    """
    Parse a grid from a compact string format.

    Format:
    - Rows separated by |
    - Cells separated by one or more spaces
    - Each cell is a shape code followed by an optional rotation digit (0-3):
      * H / V: straight horizontal / vertical
      * NE / SE / SW / NW: curves named after their two open sides
      * T: t-junction, X: cross-junction
      * S: source, D: destination (rotation is ignored by the tile model)
    - Codes are case-insensitive; a missing digit means rotation 0

    Example:
        "S H V1|T2 NE X|SW3 H D"
        Creates a 3x3 grid whose top row is source, straight-horizontal at
        rotation 0 and straight-vertical at rotation 1.

    Args:
        definition: Grid definition string

    Returns:
        Parsed Grid (shape only; see puzzler.validate_grid for the invariant)

    Raises:
        ValueError: On unknown cell strings or rows of differing length
    """
    row_strings = definition.strip().split("|")
    rows: list[tuple[Cell, ...]] = []

    for row_idx, row_str in enumerate(row_strings):
        cell_strings = row_str.split()
        cells = [
            _parse_cell(cell_str, row_idx, col_idx, row_str)
            for col_idx, cell_str in enumerate(cell_strings)
        ]
        rows.append(tuple(cells))

    # Validate all rows have same length
    if rows:
        cols = len(rows[0])
        mismatched = [(i, len(row)) for i, row in enumerate(rows) if len(row) != cols]
        if mismatched:
            error_msg = (
                f"Inconsistent row lengths\n"
                f"  Expected: {cols} columns (from row 0)\n"
                f"  Mismatched rows:\n"
            )
            for row_idx, actual_cols in mismatched:
                error_msg += f"    Row {row_idx}: {actual_cols} columns - \"{row_strings[row_idx].strip()}\"\n"
            error_msg += "  All rows must have the same number of cells"
            raise ValueError(error_msg)

    return Grid(tuple(rows))


def format_grid(grid: Grid) -> str:
    """Write a grid back in the parse_grid format."""
    rows = []
    for row in grid.cells:
        tokens = []
        for cell in row:
            code = _CODE_FOR_SHAPE[cell.shape]
            tokens.append(code if cell.shape.is_sentinel else f"{code}{cell.rotation}")
        rows.append(" ".join(tokens))
    return "|".join(rows)
