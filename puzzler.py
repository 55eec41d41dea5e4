"""
Pipe connectivity model and path solver.
Two layers: tile model (open_sides per shape and rotation) -> solver (BFS from source to destination).
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

from pipe_types import PIPE_SHAPES, Cell, Direction, Grid, Position, TileShape

__all__ = [
    "Cell",
    "Constant",
    "CyclicShift",
    "Direction",
    "Grid",
    "PIPE_SHAPES",
    "Position",
    "RotationTable",
    "SideRule",
    "TileShape",
    "base_sides",
    "connects",
    "find_path",
    "has_opening",
    "is_connected",
    "neighbor",
    "open_sides",
    "opposite",
    "reachable",
    "rotate_direction",
    "rotate_tile",
    "side_rule",
    "validate_grid",
]

logger = logging.getLogger(__name__)

# Clockwise cycle; also the fixed expansion order of the solver.
CLOCKWISE: tuple[Direction, ...] = tuple(Direction)

_OPPOSITE = {
    Direction.TOP: Direction.BOTTOM,
    Direction.BOTTOM: Direction.TOP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

_STEP = {
    Direction.TOP: (-1, 0),
    Direction.RIGHT: (0, 1),
    Direction.BOTTOM: (1, 0),
    Direction.LEFT: (0, -1),
}


def opposite(direction: Direction) -> Direction:
    """Return the side facing `direction` across a shared edge."""
    return _OPPOSITE[direction]


def rotate_direction(direction: Direction, steps: int) -> Direction:
    """Rotate a direction `steps` quarter turns clockwise."""
    return CLOCKWISE[(CLOCKWISE.index(direction) + steps) % 4]


# =============================================================================
# Tile Model: Side Rules
# =============================================================================


@dataclass(frozen=True)
class CyclicShift:
    """Open sides are the base set turned clockwise by the rotation state."""

    base: frozenset[Direction]


@dataclass(frozen=True)
class Constant:
    """Open sides do not depend on the rotation state."""

    sides: frozenset[Direction]


@dataclass(frozen=True)
class RotationTable:
    """Open sides are looked up per rotation state."""

    table: tuple[frozenset[Direction], ...]


SideRule = CyclicShift | Constant | RotationTable


def _sides(*directions: Direction) -> frozenset[Direction]:
    return frozenset(directions)


_D = Direction

_SIDE_RULES: dict[TileShape, SideRule] = {
    TileShape.STRAIGHT_HORIZONTAL: CyclicShift(_sides(_D.LEFT, _D.RIGHT)),
    TileShape.STRAIGHT_VERTICAL: CyclicShift(_sides(_D.TOP, _D.BOTTOM)),
    TileShape.CURVE_NE: CyclicShift(_sides(_D.TOP, _D.RIGHT)),
    TileShape.CURVE_SE: CyclicShift(_sides(_D.BOTTOM, _D.RIGHT)),
    TileShape.CURVE_SW: CyclicShift(_sides(_D.BOTTOM, _D.LEFT)),
    TileShape.CURVE_NW: CyclicShift(_sides(_D.TOP, _D.LEFT)),
    # Looked up per state; the closed side is bottom, left, top, right in turn.
    TileShape.T_JUNCTION: RotationTable(
        (
            _sides(_D.TOP, _D.LEFT, _D.RIGHT),
            _sides(_D.TOP, _D.BOTTOM, _D.RIGHT),
            _sides(_D.LEFT, _D.RIGHT, _D.BOTTOM),
            _sides(_D.TOP, _D.BOTTOM, _D.LEFT),
        )
    ),
    TileShape.CROSS_JUNCTION: Constant(frozenset(Direction)),
    TileShape.SOURCE: Constant(_sides(_D.RIGHT, _D.BOTTOM)),
    TileShape.DESTINATION: Constant(_sides(_D.LEFT, _D.TOP)),
}


def side_rule(shape: TileShape) -> SideRule:
    """Return the rule that derives a shape's open sides from its rotation."""
    return _SIDE_RULES[shape]


def open_sides(cell: Cell) -> frozenset[Direction]:
    """
    Return the set of directions the cell is currently open towards.

    Straight and curve tiles shift their base set clockwise, the T-junction
    uses its fixed four-entry table, and the cross-junction and the two
    endpoints ignore the rotation state altogether.
    """
    match side_rule(cell.shape):
        case CyclicShift(base=base):
            return frozenset(rotate_direction(d, cell.rotation) for d in base)
        case Constant(sides=sides):
            return sides
        case RotationTable(table=table):
            if 0 <= cell.rotation < len(table):
                return table[cell.rotation]
            return frozenset()
        case rule:
            raise ValueError(f"Unknown side rule: {rule}")


def base_sides(shape: TileShape) -> frozenset[Direction]:
    """Open sides of an unrotated tile of this shape."""
    return open_sides(Cell(shape, 0))


def has_opening(cell: Cell, direction: Direction) -> bool:
    """Check if the cell is open towards `direction`."""
    return direction in open_sides(cell)


def connects(a: Cell, b: Cell, direction: Direction) -> bool:
    """
    Check whether water can cross from `a` into `b`, where `b` lies in
    `direction` from `a`. Both tiles must declare the shared edge open.
    """
    return has_opening(a, direction) and has_opening(b, opposite(direction))


# =============================================================================
# Connectivity Solver
# =============================================================================


def neighbor(pos: Position, direction: Direction, size: int) -> Position | None:
    """Step one cell in `direction`; None if that leaves a size x size grid."""
    dr, dc = _STEP[direction]
    row, col = pos.row + dr, pos.col + dc
    if 0 <= row < size and 0 <= col < size:
        return Position(row, col)
    return None


def _open_in_order(cell: Cell) -> list[Direction]:
    sides = open_sides(cell)
    return [d for d in CLOCKWISE if d in sides]


def find_path(grid: Grid) -> list[Position] | None:
    """
    Find a shortest route of connected tiles from source to destination.

    Breadth-first search from the source. A popped cell expands its open
    sides in clockwise order starting at TOP; a neighbour is entered only
    when it is open on the facing side. The first path that reaches the
    destination is returned, so the result is shortest by cell count and
    identical across calls for the same grid.

    Args:
        grid: A well-formed grid (see validate_grid)

    Returns:
        Ordered positions from source to destination inclusive, or None
        when the destination cannot be reached
    """
    start = grid.source
    goal = grid.destination
    size = grid.size

    visited: set[Position] = {start}
    frontier: deque[tuple[Position, list[Position]]] = deque([(start, [start])])

    while frontier:
        pos, path = frontier.popleft()
        if pos == goal:
            logger.debug("find_path: reached destination in %d cells", len(path))
            return path

        for direction in _open_in_order(grid[pos]):
            nxt = neighbor(pos, direction, size)
            if nxt is None or nxt in visited:
                continue
            if opposite(direction) in open_sides(grid[nxt]):
                visited.add(nxt)
                frontier.append((nxt, path + [nxt]))

    logger.debug("find_path: no route, %d cells reachable", len(visited))
    return None


def is_connected(grid: Grid) -> bool:
    """Check whether water can flow from source to destination."""
    return find_path(grid) is not None


def reachable(grid: Grid) -> set[Position]:
    """Return every position connected to the source, source included."""
    start = grid.source
    seen: set[Position] = {start}
    frontier: deque[Position] = deque([start])

    while frontier:
        pos = frontier.popleft()
        for direction in _open_in_order(grid[pos]):
            nxt = neighbor(pos, direction, grid.size)
            if nxt is None or nxt in seen:
                continue
            if opposite(direction) in open_sides(grid[nxt]):
                seen.add(nxt)
                frontier.append(nxt)

    return seen


# =============================================================================
# Grid Helpers
# =============================================================================


def rotate_tile(grid: Grid, pos: Position, steps: int = 1) -> Grid:
    """
    Turn one tile clockwise by `steps` quarter turns.

    Args:
        grid: The grid containing the tile
        pos: Position of the tile to turn
        steps: Quarter turns to apply (default 1)

    Returns:
        New Grid with the tile turned (original grid unchanged)

    Raises:
        ValueError: If the position is outside the grid or holds the source
            or destination
    """
    if not grid.contains(pos):
        raise ValueError(
            f"Position ({pos.row}, {pos.col}) is outside the {grid.rows}x{grid.cols} grid"
        )
    cell = grid[pos]
    if cell.shape.is_sentinel:
        raise ValueError(
            f"Cannot rotate the {cell.shape.value} at ({pos.row}, {pos.col})"
        )

    mutable_cells = [list(row) for row in grid.cells]
    mutable_cells[pos.row][pos.col] = Cell(cell.shape, (cell.rotation + steps) % 4)
    return Grid(tuple(tuple(row) for row in mutable_cells))


def validate_grid(grid: Grid) -> None:
    """
    Check the grid invariant: square, source at (0, 0), destination at
    (N-1, N-1), and pipe tiles everywhere else.

    Raises:
        ValueError: Describing every violation found
    """
    problems: list[str] = []

    if grid.rows < 2:
        problems.append(f"Grid must be at least 2x2, got {grid.rows} rows")
    mismatched = [(i, len(row)) for i, row in enumerate(grid.cells) if len(row) != grid.rows]
    for row_idx, actual_cols in mismatched:
        problems.append(f"Row {row_idx}: {actual_cols} columns, expected {grid.rows}")

    if not problems:
        for pos in grid.positions():
            shape = grid[pos].shape
            if pos == grid.source:
                expected = TileShape.SOURCE
            elif pos == grid.destination:
                expected = TileShape.DESTINATION
            else:
                if shape.is_sentinel:
                    problems.append(
                        f"Unexpected {shape.value} at ({pos.row}, {pos.col})"
                    )
                continue
            if shape != expected:
                problems.append(
                    f"Expected {expected.value} at ({pos.row}, {pos.col}), found {shape.value}"
                )

    if problems:
        error_msg = "Malformed grid\n" + "\n".join(f"  {p}" for p in problems)
        raise ValueError(error_msg)
