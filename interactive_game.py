"""
Interactive terminal game for the pipeline puzzler.
Move a cursor over the grid and rotate pipes until water reaches the village.
"""

import logging
import random
import sys

import readchar
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ascii_render import render_confetti, render_grid, render_limits
from levels import DIFFICULTY_SETTINGS, Difficulty, generate_grid
from pipe_types import Direction, Position
from puzzler import find_path, neighbor
from session import GameSession, GameStatus, RotateFailure, SessionConfig, milestone_message

DIFFICULTY_KEYS = {
    "1": Difficulty.EASY,
    "2": Difficulty.NORMAL,
    "3": Difficulty.HARD,
}

MOVE_KEYS = {
    "w": Direction.TOP,
    "s": Direction.BOTTOM,
    "a": Direction.LEFT,
    "d": Direction.RIGHT,
    readchar.key.UP: Direction.TOP,
    readchar.key.DOWN: Direction.BOTTOM,
    readchar.key.LEFT: Direction.LEFT,
    readchar.key.RIGHT: Direction.RIGHT,
}

ROTATE_KEYS = {" ", readchar.key.ENTER, "\r", "\n"}


class InteractiveGame:
    """Keyboard front end around a GameSession."""

    def __init__(self, session: GameSession) -> None:
        self.session = session
        self.console = Console()
        self.cursor = Position(0, 1)
        self.banner: str | None = None
        self.celebrating = False

    def generate_display(self) -> Panel:
        """Generate the current display with grid and status."""
        session = self.session
        session.check_time()

        status = Text()
        status.append("Level: ", style="bold")
        status.append(f"{session.level}   ")
        status.append("Score: ", style="bold")
        status.append(f"{session.score:,}   ")
        status.append("Difficulty: ", style="bold")
        status.append(f"{session.settings.name}\n")

        status.append("Time: ", style="bold")
        time_style = "bold red" if session.time_left <= 10 else "bold green"
        status.append(f"{session.time_left}s\n\n", style=time_style)

        grid_text = render_grid(
            session.grid,
            path=session.path,
            cursor=self.cursor if session.status is GameStatus.PLAYING else None,
            show_reachable=True,
            title="Pipeline Puzzler",
        )
        status.append(Text.from_ansi(grid_text))
        status.append("\n\n")
        status.append("Rotations left:\n", style="bold")
        status.append(Text.from_ansi(render_limits(session.grid, session.rotations_left)))
        status.append("\n\n")

        if self.celebrating:
            width = session.grid.cols * 3 + 2
            status.append(Text.from_ansi(render_confetti(width, session.rng)))
            status.append("\n")
        if self.banner:
            status.append(self.banner + "\n", style="bold yellow")

        status.append("Keys:\n", style="bold cyan")
        status.append("  WASD / arrows - Move cursor\n")
        status.append("  Space / Enter - Rotate pipe\n")
        status.append("  R - Restart level\n")
        if session.status is GameStatus.SOLVED:
            status.append("  N - Next level\n", style="bold green")
        status.append("  1 / 2 / 3 - Easy / Normal / Hard\n")
        status.append("  Q - Quit\n\n")

        # Status line at the bottom
        status.append("─" * 40 + "\n", style="dim")
        status.append("Status: ", style="bold")
        status.append(session.message)

        border = {
            GameStatus.PLAYING: "blue",
            GameStatus.SOLVED: "green",
            GameStatus.TIME_UP: "red",
        }[session.status]
        return Panel(status, title="Pipeline Puzzler", border_style=border, width=80)

    def move_cursor(self, direction: Direction) -> None:
        nxt = neighbor(self.cursor, direction, self.session.grid.size)
        if nxt is not None:
            self.cursor = nxt

    def attempt_rotate(self) -> None:
        """Rotate the pipe under the cursor and react to the verdict."""
        result = self.session.rotate(self.cursor)

        if isinstance(result, RotateFailure):
            if result.details:
                self.session.message = (
                    f"✗ Cannot rotate ({result.position.row}, {result.position.col}): "
                    f"{result.reason.value} ({result.details})"
                )
            return

        self.console.bell()
        if result.solved:
            self.celebrating = True
            if result.milestone is not None:
                self.banner = milestone_message(result.milestone, self.session.config.milestones)

    def _clear_effects(self) -> None:
        self.celebrating = False
        self.banner = None

    def handle_key(self, key: str) -> bool:
        """
        Apply one key press to the game.

        Returns:
            False when the key asks to quit, True otherwise
        """
        if key.lower() == "q":
            self.session.message = "Quitting..."
            return False
        elif key in MOVE_KEYS or key.lower() in MOVE_KEYS:
            self.move_cursor(MOVE_KEYS.get(key) or MOVE_KEYS[key.lower()])
        elif key in ROTATE_KEYS:
            self.attempt_rotate()
        elif key.lower() == "r":
            self._clear_effects()
            self.session.restart_level()
        elif key.lower() == "n":
            if self.session.status is GameStatus.SOLVED:
                self._clear_effects()
                self.session.next_level()
            else:
                self.session.message = "Connect the pipes first!"
        elif key in DIFFICULTY_KEYS:
            self._clear_effects()
            self.session.change_difficulty(DIFFICULTY_KEYS[key])
        else:
            self.session.message = f"Unknown key: {repr(key)}"
        return True

    def run(self) -> None:
        """Run the game loop until the player quits."""
        # Session state is only touched on this thread; the timer advances on each redraw
        with Live(self.generate_display(), console=self.console, refresh_per_second=4) as live:
            try:
                while True:
                    live.update(self.generate_display())

                    key = readchar.readkey()

                    if not self.handle_key(key):
                        live.update(self.generate_display())
                        break

            except KeyboardInterrupt:
                self.session.message = "Interrupted by user"
                live.update(self.generate_display())


def main(difficulty: Difficulty) -> None:
    """Run the interactive game at the given difficulty."""
    session = GameSession(SessionConfig(difficulty=difficulty))
    InteractiveGame(session).run()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "render":
        # Non-interactive: render one generated level and the solver's verdict
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")

        seed = int(sys.argv[2]) if len(sys.argv) > 2 else None
        grid = generate_grid(rng=random.Random(seed))
        path = find_path(grid)
        print(render_grid(grid, path=path, show_reachable=True, title="Generated level"))
        if path is None:
            print("No path: water does not flow")
        else:
            print("Path: " + " -> ".join(f"({p.row},{p.col})" for p in path))
    else:
        name = sys.argv[1] if len(sys.argv) > 1 else "normal"
        try:
            chosen = Difficulty(name)
        except ValueError:
            print(f"Unknown difficulty '{name}'. Choose from: {', '.join(d.value for d in DIFFICULTY_SETTINGS)}")
            sys.exit(2)
        main(chosen)
