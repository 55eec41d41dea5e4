"""
Difficulty tiers and random level generation.

Levels are drawn cell by cell: a random pipe shape (optionally restricted by
the tier's complexity threshold) and a uniform rotation in {0, 1, 2, 3}.
Nothing here checks that the result is solvable.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum

from pipe_types import PIPE_SHAPES, Cell, Grid, TileShape

logger = logging.getLogger(__name__)

DEFAULT_GRID_SIZE = 6


class Difficulty(Enum):
    """Selectable difficulty tier."""

    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"


@dataclass(frozen=True)
class DifficultySettings:
    """Parameters a difficulty tier applies to each level."""

    name: str
    description: str
    time_limit: int  # seconds per level
    rotation_limit: int  # quarter turns allowed per tile
    pipe_complexity: float  # shapes up to this complexity are always eligible
    score_multiplier: float


DIFFICULTY_SETTINGS: dict[Difficulty, DifficultySettings] = {
    Difficulty.EASY: DifficultySettings(
        name="Easy",
        description="More time, more rotations, simpler pipes",
        time_limit=75,
        rotation_limit=5,
        pipe_complexity=0.3,
        score_multiplier=1.0,
    ),
    Difficulty.NORMAL: DifficultySettings(
        name="Normal",
        description="Balanced challenge",
        time_limit=50,
        rotation_limit=3,
        pipe_complexity=0.6,
        score_multiplier=1.5,
    ),
    Difficulty.HARD: DifficultySettings(
        name="Hard",
        description="Less time, fewer rotations, complex pipes",
        time_limit=30,
        rotation_limit=2,
        pipe_complexity=0.9,
        score_multiplier=2.0,
    ),
}

SHAPE_COMPLEXITY: dict[TileShape, float] = {
    TileShape.STRAIGHT_HORIZONTAL: 0.1,
    TileShape.STRAIGHT_VERTICAL: 0.1,
    TileShape.CURVE_NE: 0.4,
    TileShape.CURVE_SE: 0.4,
    TileShape.CURVE_SW: 0.4,
    TileShape.CURVE_NW: 0.4,
    TileShape.T_JUNCTION: 0.7,
    TileShape.CROSS_JUNCTION: 0.9,
}

# Chance that a shape above the threshold is still offered.
COMPLEX_PIPE_CHANCE = 0.2

_FALLBACK_SHAPES = (TileShape.STRAIGHT_HORIZONTAL, TileShape.STRAIGHT_VERTICAL)


def candidate_shapes(
    complexity: float,
    rng: random.Random,
    complex_chance: float = COMPLEX_PIPE_CHANCE,
) -> list[TileShape]:
    """
    Shapes eligible for one cell under a complexity threshold.

    Every shape at or below the threshold qualifies; each shape above it
    qualifies independently with probability `complex_chance`. Falls back to
    the two straight pipes if nothing qualified.
    """
    eligible = [
        shape
        for shape in PIPE_SHAPES
        if SHAPE_COMPLEXITY[shape] <= complexity or rng.random() < complex_chance
    ]
    return eligible or list(_FALLBACK_SHAPES)


def random_shape(rng: random.Random, complexity: float | None = None) -> TileShape:
    """Pick a pipe shape, uniform over the catalog or over the eligible subset."""
    if complexity is None:
        return rng.choice(PIPE_SHAPES)
    return rng.choice(candidate_shapes(complexity, rng))


def generate_grid(
    size: int = DEFAULT_GRID_SIZE,
    difficulty: Difficulty | None = None,
    rng: random.Random | None = None,
) -> Grid:
    """
    Generate a fresh level.

    Args:
        size: Side length of the square grid (at least 2)
        difficulty: Tier whose complexity threshold filters shapes; None draws
            uniformly from all eight shapes
        rng: Random source (default: a new unseeded Random)

    Returns:
        Grid with the source at (0, 0), the destination at (size-1, size-1)
        and random pipes elsewhere

    Raises:
        ValueError: If size is below 2
    """
    if size < 2:
        raise ValueError(f"Grid size must be at least 2, got {size}")
    if rng is None:
        rng = random.Random()

    complexity = None
    if difficulty is not None:
        complexity = DIFFICULTY_SETTINGS[difficulty].pipe_complexity

    rows: list[tuple[Cell, ...]] = []
    for r in range(size):
        row: list[Cell] = []
        for c in range(size):
            if r == 0 and c == 0:
                row.append(Cell(TileShape.SOURCE))
            elif r == size - 1 and c == size - 1:
                row.append(Cell(TileShape.DESTINATION))
            else:
                row.append(Cell(random_shape(rng, complexity), rng.randrange(4)))
        rows.append(tuple(row))

    logger.debug(
        "generate_grid: size=%d, difficulty=%s",
        size,
        difficulty.value if difficulty else "uniform",
    )
    return Grid(tuple(rows))
