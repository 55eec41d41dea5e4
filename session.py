"""
Game session: the mutable state around one player's run of levels.

The session owns the current grid and replaces it on every rotation; the
solver in puzzler is called on the new grid and never sees partial updates.
"""

from __future__ import annotations

import logging
import math
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from levels import DEFAULT_GRID_SIZE, DIFFICULTY_SETTINGS, Difficulty, DifficultySettings, generate_grid
from pipe_types import Grid, Position
from puzzler import find_path, rotate_tile, validate_grid

logger = logging.getLogger(__name__)

MILESTONES: tuple[int, ...] = (100, 250, 500, 1000, 2000, 3500, 5000, 7500, 10000)

_MILESTONE_MESSAGES = (
    "🌟 Amazing! You've reached {score} points!",
    "💧 Incredible! {score} points achieved! You're making a difference!",
    "🏆 Outstanding! {score} points! Keep connecting communities!",
    "⭐ Phenomenal! {score} points! Every pipe brings hope!",
    "🎉 Legendary! {score} points! You're a water hero!",
    "💎 Masterful! {score} points! Communities are celebrating!",
    "🌟 Extraordinary! {score} points! Your impact is immeasurable!",
    "🚀 Cosmic! {score} points! You've transcended pipe mastery!",
    "👑 Divine! {score} points! The ultimate pipeline legend!",
)


class GameStatus(Enum):
    """Where the current level stands."""

    PLAYING = "playing"
    SOLVED = "solved"
    TIME_UP = "time_up"


class FailureReason(Enum):
    """Why a rotation request was refused."""

    NOT_PLAYING = "not_playing"  # Level already solved
    TIME_UP = "time_up"  # Countdown reached zero
    OUT_OF_BOUNDS = "out_of_bounds"
    FIXED_TILE = "fixed_tile"  # Source or destination
    NO_ROTATIONS_LEFT = "no_rotations_left"


@dataclass(frozen=True)
class SessionConfig:
    """Rules governing a session."""

    grid_size: int = DEFAULT_GRID_SIZE
    difficulty: Difficulty = Difficulty.NORMAL
    time_bonus_per_second: int = 5
    level_bonus: int = 50
    milestones: tuple[int, ...] = MILESTONES


@dataclass(frozen=True)
class RotateResult:
    """A rotation that was applied, with the solver's verdict afterwards."""

    position: Position
    path: list[Position] | None  # Witness path if water now flows
    points: int = 0  # Points awarded if this rotation solved the level
    milestone: int | None = None  # Milestone reached by those points

    @property
    def solved(self) -> bool:
        return self.path is not None


@dataclass(frozen=True)
class RotateFailure:
    """A rotation that was refused."""

    reason: FailureReason
    position: Position
    details: str | None = None


def milestone_message(score: int, milestones: tuple[int, ...] = MILESTONES) -> str:
    """Banner text for reaching a milestone."""
    if score in milestones:
        idx = milestones.index(score)
        if idx < len(_MILESTONE_MESSAGES):
            return _MILESTONE_MESSAGES[idx].format(score=score)
    return f"🎯 Milestone achieved: {score} points!"


class GameSession:
    """Level, score, timer, and per-tile rotation budgets for one player."""

    def __init__(
        self,
        config: SessionConfig | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        grid: Grid | None = None,
    ) -> None:
        self.config = config or SessionConfig()
        self.rng = rng or random.Random()
        self.clock = clock
        self.difficulty = self.config.difficulty
        self.level = 1
        self.score = 0
        self.achieved_milestones: set[int] = set()
        self.message = ""
        self._start_level(grid if grid is not None else self._new_grid())

    @property
    def settings(self) -> DifficultySettings:
        return DIFFICULTY_SETTINGS[self.difficulty]

    @property
    def time_left(self) -> int:
        """Whole seconds remaining; frozen once the level is over."""
        if self._frozen_time_left is not None:
            return self._frozen_time_left
        elapsed = int(self.clock() - self._started_at)
        return max(0, self.settings.time_limit - elapsed)

    def _new_grid(self) -> Grid:
        return generate_grid(self.config.grid_size, self.difficulty, self.rng)

    def _start_level(self, grid: Grid) -> None:
        validate_grid(grid)
        # Reset the timer before the level reopens
        self._started_at = self.clock()
        self._frozen_time_left: int | None = None
        self.initial_grid = grid
        self.grid = grid
        self.rotations_left: dict[Position, int] = {
            pos: self.settings.rotation_limit
            for pos in grid.positions()
            if not grid[pos].shape.is_sentinel
        }
        self.path: list[Position] | None = None
        self.status = GameStatus.PLAYING
        self.message = f"🎮 Level {self.level} started! Difficulty: {self.settings.name}"
        logger.info(
            "Level %d started (%s, %dx%d, %ds)",
            self.level,
            self.difficulty.value,
            grid.size,
            grid.size,
            self.settings.time_limit,
        )

    def check_time(self) -> GameStatus:
        """Move a running level to TIME_UP once the countdown hits zero."""
        if self.status is GameStatus.PLAYING and self.time_left <= 0:
            self.status = GameStatus.TIME_UP
            self._frozen_time_left = 0
            self.message = f"⏰ Time's up! Try again on {self.settings.name} difficulty."
            logger.info("Level %d: time up", self.level)
        return self.status

    def points_for_solve(self, time_left: int) -> int:
        """Points for solving the current level with `time_left` seconds to spare."""
        base = time_left * self.config.time_bonus_per_second + self.level * self.config.level_bonus
        return math.floor(base * self.settings.score_multiplier)

    def _check_milestones(self) -> int | None:
        # One milestone per solve, lowest first.
        for milestone in self.config.milestones:
            if self.score >= milestone and milestone not in self.achieved_milestones:
                self.achieved_milestones.add(milestone)
                return milestone
        return None

    def rotate(self, pos: Position) -> RotateResult | RotateFailure:
        """
        Turn the tile at `pos` one quarter clockwise and re-check the flow.

        Args:
            pos: Position of the tile to turn

        Returns:
            RotateResult with the solver's path (None if water does not flow),
            or RotateFailure if the rotation was not allowed
        """
        if self.check_time() is GameStatus.TIME_UP:
            return RotateFailure(FailureReason.TIME_UP, pos)
        if self.status is not GameStatus.PLAYING:
            return RotateFailure(FailureReason.NOT_PLAYING, pos, f"level is {self.status.value}")
        if not self.grid.contains(pos):
            return RotateFailure(
                FailureReason.OUT_OF_BOUNDS, pos, f"grid is {self.grid.rows}x{self.grid.cols}"
            )
        if self.grid[pos].shape.is_sentinel:
            return RotateFailure(FailureReason.FIXED_TILE, pos, self.grid[pos].shape.value)

        remaining = self.rotations_left.get(pos, 0)
        if remaining <= 0:
            self.message = "🔄 No rotations remaining for this pipe!"
            return RotateFailure(FailureReason.NO_ROTATIONS_LEFT, pos)

        self.grid = rotate_tile(self.grid, pos)
        self.rotations_left[pos] = remaining - 1
        self.path = find_path(self.grid)

        if self.path is None:
            return RotateResult(pos, None)

        time_left = self.time_left
        points = self.points_for_solve(time_left)
        self.score += points
        self.status = GameStatus.SOLVED
        self._frozen_time_left = time_left
        milestone = self._check_milestones()
        self.message = (
            f"🎉 Level {self.level} Complete! +{points} points "
            f"({self.difficulty.value} difficulty bonus applied)"
        )
        logger.info(
            "Level %d solved: path of %d cells, +%d points (score %d)",
            self.level,
            len(self.path),
            points,
            self.score,
        )
        return RotateResult(pos, self.path, points, milestone)

    def restart_level(self) -> None:
        """Restore the level's starting grid, rotation budgets and timer."""
        self._start_level(self.initial_grid)

    def next_level(self) -> None:
        """Advance to a freshly generated level."""
        self.level += 1
        self._start_level(self._new_grid())

    def change_difficulty(self, difficulty: Difficulty) -> None:
        """Switch tier and restart the current level under its limits."""
        self.difficulty = difficulty
        self._start_level(self.initial_grid)
        self.message = f"Difficulty changed to {self.settings.name}! {self.settings.description}"
