"""
Shared type definitions for the pipeline puzzler.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator


class Direction(Enum):
    """Side of a tile. Declaration order is the clockwise cycle."""

    TOP = "top"  # Up (decreasing row)
    RIGHT = "right"  # Right (increasing col)
    BOTTOM = "bottom"  # Down (increasing row)
    LEFT = "left"  # Left (decreasing col)


class TileShape(Enum):
    """Catalog of tile kinds, including the two fixed endpoints."""

    STRAIGHT_HORIZONTAL = "straight-horizontal"
    STRAIGHT_VERTICAL = "straight-vertical"
    CURVE_NE = "curve-ne"
    CURVE_SE = "curve-se"
    CURVE_SW = "curve-sw"
    CURVE_NW = "curve-nw"
    T_JUNCTION = "t-junction"
    CROSS_JUNCTION = "cross-junction"
    SOURCE = "source"
    DESTINATION = "destination"

    @property
    def is_sentinel(self) -> bool:
        return self in (TileShape.SOURCE, TileShape.DESTINATION)


PIPE_SHAPES: tuple[TileShape, ...] = tuple(s for s in TileShape if not s.is_sentinel)


# =============================================================================
# Grid Definition Types
# =============================================================================


@dataclass(frozen=True)
class Cell:
    """A tile at one grid position: its shape and quarter turns applied."""

    shape: TileShape
    rotation: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.rotation <= 3:
            raise ValueError(
                f"Invalid rotation {self.rotation} for {self.shape.value}\n"
                f"  Rotation must be a quarter-turn count in [0, 3]"
            )


@dataclass(frozen=True)
class Position:
    """A (row, col) position within a grid."""

    row: int
    col: int


@dataclass(frozen=True)
class Grid:
    """A square 2D grid of cells, source at the top-left, destination at the bottom-right."""

    cells: tuple[tuple[Cell, ...], ...]

    @property
    def rows(self) -> int:
        return len(self.cells)

    @property
    def cols(self) -> int:
        return len(self.cells[0]) if self.cells else 0

    @property
    def size(self) -> int:
        return self.rows

    @property
    def source(self) -> Position:
        return Position(0, 0)

    @property
    def destination(self) -> Position:
        return Position(self.size - 1, self.size - 1)

    def __getitem__(self, pos: Position) -> Cell:
        return self.cells[pos.row][pos.col]

    def contains(self, pos: Position) -> bool:
        return 0 <= pos.row < self.rows and 0 <= pos.col < self.cols

    def positions(self) -> Iterator[Position]:
        """Yield every position in row-major order."""
        for r in range(self.rows):
            for c in range(self.cols):
                yield Position(r, c)
