"""
ASCII rendering for pipeline puzzler grids.

Tiles are drawn with box-drawing characters chosen from their open sides.
Water (the solved path, or everything connected to the source) is coloured.
"""

from __future__ import annotations

import logging
import random
from typing import Callable

import simple_chalk as chalk  # type: ignore[import-untyped]

from pipe_types import Cell, Direction, Grid, Position, TileShape
from puzzler import open_sides, reachable

logger = logging.getLogger(__name__)

_T, _R, _B, _L = Direction.TOP, Direction.RIGHT, Direction.BOTTOM, Direction.LEFT

GLYPHS: dict[frozenset[Direction], str] = {
    frozenset({_L, _R}): "─",
    frozenset({_T, _B}): "│",
    frozenset({_T, _R}): "└",
    frozenset({_B, _R}): "┌",
    frozenset({_B, _L}): "┐",
    frozenset({_T, _L}): "┘",
    frozenset({_T, _L, _R}): "┴",
    frozenset({_T, _B, _R}): "├",
    frozenset({_L, _R, _B}): "┬",
    frozenset({_T, _B, _L}): "┤",
    frozenset({_T, _R, _B, _L}): "┼",
}

CONFETTI_GLYPHS = "*+o.~"
CONFETTI_COLORS: list[Callable[[str], str]] = [
    chalk.yellow,
    chalk.blue,
    chalk.cyan,
    chalk.blueBright,
    chalk.yellowBright,
]


def tile_glyph(cell: Cell) -> str:
    """Single character for a tile: S / D for the endpoints, box drawing otherwise."""
    if cell.shape is TileShape.SOURCE:
        return "S"
    if cell.shape is TileShape.DESTINATION:
        return "D"
    return GLYPHS.get(open_sides(cell), "?")


def _tile_text(cell: Cell, cell_width: int) -> str:
    glyph = tile_glyph(cell)
    if cell_width == 1:
        return glyph

    # Extend horizontal openings to the cell edges so neighbours join up
    sides = open_sides(cell)
    left_pad = (cell_width - 1) // 2
    right_pad = cell_width - 1 - left_pad
    left = ("─" if _L in sides else " ") * left_pad
    right = ("─" if _R in sides else " ") * right_pad
    return left + glyph + right


def render_grid(
    grid: Grid,
    path: list[Position] | None = None,
    cursor: Position | None = None,
    cell_width: int = 3,
    show_reachable: bool = False,
    title: str | None = None,
) -> str:
    """
    Render a grid as a bordered block of box-drawing characters.

    Args:
        grid: The grid to render
        path: Optional witness path; its cells are drawn as water
        cursor: Optional position to highlight (white background)
        cell_width: Characters per cell (default 3)
        show_reachable: When no path is given, colour every cell already
            connected to the source
        title: Optional title centred in the top border

    Returns:
        Rendered grid, one line per row plus the border
    """
    if path is not None:
        water = set(path)
        water_color = chalk.blueBright
    elif show_reachable:
        water = reachable(grid)
        water_color = chalk.cyan
    else:
        water = set()
        water_color = chalk.blueBright

    inner_width = grid.cols * cell_width
    lines: list[str] = []

    # Top border with title
    title_line = "┌" + "─" * inner_width + "┐"
    if title:
        label = f" {title} "
        if len(label) <= inner_width:
            start = (inner_width - len(label)) // 2
            title_line = "┌" + "─" * start + label + "─" * (inner_width - start - len(label)) + "┐"
    lines.append(title_line)

    for r_idx, row in enumerate(grid.cells):
        line_parts = ["│"]
        for c_idx, cell in enumerate(row):
            pos = Position(r_idx, c_idx)
            content = _tile_text(cell, cell_width)

            if pos == cursor:
                content = chalk.bgWhite.black(content)
            elif pos in water:
                content = water_color(content)
            elif cell.shape is TileShape.SOURCE:
                content = chalk.green(content)
            elif cell.shape is TileShape.DESTINATION:
                content = chalk.yellow(content)

            line_parts.append(content)
        line_parts.append("│")
        lines.append("".join(line_parts))

    lines.append("└" + "─" * inner_width + "┘")

    logger.debug("render_grid: %dx%d, %d water cells", grid.rows, grid.cols, len(water))
    return "\n".join(lines)


def render_limits(grid: Grid, limits: dict[Position, int], cell_width: int = 3) -> str:
    """Render the remaining rotations of every tile; endpoints show as '·'."""
    lines = []
    for r_idx, row in enumerate(grid.cells):
        parts = []
        for c_idx, cell in enumerate(row):
            pos = Position(r_idx, c_idx)
            if cell.shape.is_sentinel or pos not in limits:
                text = "·".center(cell_width)
            else:
                remaining = limits[pos]
                text = str(remaining).center(cell_width)
                if remaining == 0:
                    text = chalk.red(text)
                elif remaining == 1:
                    text = chalk.yellow(text)
            parts.append(text)
        lines.append(" " + "".join(parts))
    return "\n".join(lines)


def render_confetti(width: int, rng: random.Random | None = None) -> str:
    """A line of randomly coloured confetti, `width` characters wide."""
    if rng is None:
        rng = random.Random()
    return "".join(
        rng.choice(CONFETTI_COLORS)(rng.choice(CONFETTI_GLYPHS)) if rng.random() < 0.6 else " "
        for _ in range(width)
    )
