"""Tests for the keyboard front end, driven without a terminal."""

import io
import random

import pytest
import readchar
from rich.console import Console
from rich.panel import Panel

from grid_parser import parse_grid
from interactive_game import InteractiveGame
from levels import Difficulty
from pipe_types import Direction, Position
from session import GameSession, GameStatus, SessionConfig

NEARLY_SOLVED = "S H0 SW0|V0 NW2 NW0|H0 SW1 D"


class FakeClock:
    """Clock that never moves unless told to."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def game() -> InteractiveGame:
    session = GameSession(
        SessionConfig(),
        rng=random.Random(0),
        clock=FakeClock(),
        grid=parse_grid(NEARLY_SOLVED),
    )
    game = InteractiveGame(session)
    game.console = Console(file=io.StringIO(), width=80)
    return game


def render(game: InteractiveGame) -> str:
    console = Console(file=io.StringIO(), width=80, color_system=None)
    console.print(game.generate_display())
    return console.file.getvalue()  # type: ignore[attr-defined]


class TestCursor:
    """Tests for cursor movement."""

    def test_starts_next_to_source(self, game: InteractiveGame) -> None:
        assert game.cursor == Position(0, 1)

    def test_moves(self, game: InteractiveGame) -> None:
        """The cursor follows the direction keys."""
        game.move_cursor(Direction.BOTTOM)
        game.move_cursor(Direction.RIGHT)
        assert game.cursor == Position(1, 2)

    def test_clamped_at_edges(self, game: InteractiveGame) -> None:
        """Moving off the grid leaves the cursor where it was."""
        game.move_cursor(Direction.TOP)
        assert game.cursor == Position(0, 1)
        game.move_cursor(Direction.LEFT)
        game.move_cursor(Direction.LEFT)
        assert game.cursor == Position(0, 0)


class TestAttemptRotate:
    """Tests for rotating the tile under the cursor."""

    def test_solving_turn_celebrates(self, game: InteractiveGame) -> None:
        """The winning turn starts confetti and shows the first milestone."""
        game.move_cursor(Direction.BOTTOM)
        game.move_cursor(Direction.BOTTOM)
        game.attempt_rotate()

        assert game.session.status is GameStatus.SOLVED
        assert game.celebrating
        assert game.banner == "🌟 Amazing! You've reached 100 points!"

    def test_plain_turn(self, game: InteractiveGame) -> None:
        """A turn that does not solve the level leaves no effects."""
        game.attempt_rotate()
        assert game.session.grid[Position(0, 1)].rotation == 1
        assert not game.celebrating
        assert game.banner is None

    def test_refusal_is_reported(self, game: InteractiveGame) -> None:
        """Turning the source puts the reason in the status line."""
        game.move_cursor(Direction.LEFT)
        game.attempt_rotate()
        assert game.session.message == "✗ Cannot rotate (0, 0): fixed_tile (source)"

    def test_clear_effects(self, game: InteractiveGame) -> None:
        game.celebrating = True
        game.banner = "x"
        game._clear_effects()
        assert not game.celebrating
        assert game.banner is None


class TestDisplay:
    """Tests for the rich panel."""

    def test_is_panel(self, game: InteractiveGame) -> None:
        assert isinstance(game.generate_display(), Panel)

    def test_shows_status(self, game: InteractiveGame) -> None:
        """Level, score, time and the status message are on screen."""
        output = render(game)
        assert "Level: 1" in output
        assert "Score: 0" in output
        assert "Time: 50s" in output
        assert "Level 1 started" in output
        assert "N - Next level" not in output

    def test_next_level_hint_after_solve(self, game: InteractiveGame) -> None:
        """The next-level key is offered once the level is solved."""
        game.move_cursor(Direction.BOTTOM)
        game.move_cursor(Direction.BOTTOM)
        game.attempt_rotate()
        output = render(game)
        assert "N - Next level" in output
        assert "Amazing!" in output


class TestHandleKey:
    """Tests for key dispatch."""

    def test_quit(self, game: InteractiveGame) -> None:
        assert game.handle_key("q") is False
        assert game.handle_key("Q") is False
        assert game.session.message == "Quitting..."

    def test_upper_case_moves(self, game: InteractiveGame) -> None:
        """WASD works with caps lock on."""
        assert game.handle_key("S") is True
        game.handle_key("D")
        assert game.cursor == Position(1, 2)

    def test_arrow_keys(self, game: InteractiveGame) -> None:
        game.handle_key(readchar.key.DOWN)
        game.handle_key(readchar.key.LEFT)
        assert game.cursor == Position(1, 0)

    def test_space_rotates(self, game: InteractiveGame) -> None:
        game.handle_key(" ")
        assert game.session.grid[Position(0, 1)].rotation == 1

    def test_next_level_needs_solve(self, game: InteractiveGame) -> None:
        """N before the water flows only prints a hint."""
        game.handle_key("n")
        assert game.session.level == 1
        assert game.session.message == "Connect the pipes first!"

    def test_next_level_after_solve(self, game: InteractiveGame) -> None:
        """N after solving deals level 2 and clears the celebration."""
        for key in ("s", "s", " "):
            game.handle_key(key)
        assert game.celebrating

        game.handle_key("N")

        assert game.session.level == 2
        assert game.session.status is GameStatus.PLAYING
        assert not game.celebrating
        assert game.banner is None

    def test_difficulty_keys(self, game: InteractiveGame) -> None:
        """1 / 2 / 3 switch tier and restart the level."""
        game.handle_key(" ")
        game.handle_key("3")
        assert game.session.difficulty is Difficulty.HARD
        assert game.session.grid == parse_grid(NEARLY_SOLVED)
        assert game.session.rotations_left[Position(0, 1)] == 2

        game.handle_key("1")
        assert game.session.difficulty is Difficulty.EASY

    def test_restart(self, game: InteractiveGame) -> None:
        game.handle_key(" ")
        game.handle_key("r")
        assert game.session.grid == parse_grid(NEARLY_SOLVED)

    def test_unknown_key(self, game: InteractiveGame) -> None:
        assert game.handle_key("z") is True
        assert game.session.message == "Unknown key: 'z'"
