"""
Terminal front end for Memory Match.

Reads one command per line from stdin and prints the board as text.
"""

import sys
import threading
from typing import Any, Callable, Dict, Optional, TextIO, Tuple
import logging

from ..deck import Difficulty
from ..session import format_time
from .base import FrontEnd

logger = logging.getLogger(__name__)


HELP_TEXT = """\
Commands:
  start              start a game
  again              play again after finishing
  reset              restart the current game
  menu               return to the start screen
  easy|medium|hard   select difficulty (also: difficulty <level>)
  <number>           flip the card with that number
  scores             show best scores
  help               show this help
  quit               exit
"""

# Single-word commands and the actions they post
_SIMPLE_COMMANDS: Dict[str, str] = {
    'start': 'start_game',
    'again': 'play_again',
    'reset': 'reset_game',
    'restart': 'reset_game',
    'menu': 'return_to_menu',
}

CELL_WIDTH = 10


def parse_command(line: str) -> Optional[Tuple[str, Any]]:
    """
    Translate a console command into an input action.

    Card numbers are 1-based on screen and 0-based in the session.

    Args:
        line: Raw input line

    Returns:
        (action, value) tuple, or None if the line is not a game command
    """
    words = line.strip().lower().split()
    if not words:
        return None

    command = words[0]

    if command in _SIMPLE_COMMANDS and len(words) == 1:
        return _SIMPLE_COMMANDS[command], None

    if command == 'difficulty' and len(words) == 2:
        command = words[1]

    if command in {d.value for d in Difficulty}:
        return 'select_difficulty', command

    if command.isdigit() and len(words) == 1:
        number = int(command)
        if number >= 1:
            return 'click_card', number - 1

    return None


def render_best_scores(best_scores: Dict[str, dict]) -> str:
    """Render one line per difficulty, each from its own record."""
    lines = ["Best scores:"]
    for difficulty in Difficulty:
        record = best_scores.get(difficulty.value) or {}
        if record.get('moves') is None or record.get('time') is None:
            text = "no record yet"
        else:
            text = f"{record['moves']} moves ({format_time(record['time'])})"
        lines.append(f"  {difficulty.value:<7} {text}")
    return "\n".join(lines)


def render_board(snapshot: dict) -> str:
    """
    Render a session snapshot as text.

    Args:
        snapshot: Dictionary from GameSession.snapshot()

    Returns:
        Multi-line string
    """
    state = snapshot['state']
    difficulty = snapshot['difficulty']

    if state == 'start':
        return "\n".join([
            "MEMORY MATCH",
            f"Difficulty: {difficulty}",
            render_best_scores(snapshot['best_scores']),
            "Type 'start' to play or 'help' for commands.",
        ])

    header = (
        f"[{difficulty}]  Moves: {snapshot['moves']}  "
        f"Pairs: {snapshot['matches']}/{snapshot['total_pairs']}  "
        f"Time: {snapshot['elapsed_display']}"
    )
    lines = [header]

    columns = snapshot['grid']['columns']
    cards = snapshot['cards']
    for start in range(0, len(cards), columns):
        cells = []
        for index in range(start, min(start + columns, len(cards))):
            card = cards[index]
            if card['matched']:
                label = f"*{card['symbol']}*"
            elif card['revealed']:
                label = card['symbol']
            else:
                label = str(index + 1)
            cells.append(f"[{label:^{CELL_WIDTH}}]")
        lines.append(" ".join(cells))

    if state == 'complete':
        lines.append(f"Complete! {snapshot['moves']} moves in {snapshot['elapsed_display']}.")
        if snapshot['is_new_record']:
            lines.append("NEW RECORD!")
        else:
            best = snapshot['best_score']
            if best['moves'] is not None and best['time'] is not None:
                lines.append(f"Best: {best['moves']} moves ({format_time(best['time'])})")
        lines.append("Type 'again' to play again or 'menu' to return.")

    return "\n".join(lines)


class ConsoleFrontEnd(FrontEnd):
    """Line-based terminal front end."""

    name = "console"

    def __init__(
        self,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
        on_quit: Optional[Callable[[], None]] = None,
    ):
        """
        Initialize console front end.

        Args:
            input_stream: Command source (default: sys.stdin)
            output_stream: Board output (default: sys.stdout)
            on_quit: Called when the player types quit or input ends
        """
        super().__init__()
        self._input = input_stream
        self._output = output_stream
        self._on_quit = on_quit
        self._reader_thread: Optional[threading.Thread] = None
        self._running = False
        self._last_rendered: Optional[str] = None

    @property
    def input_stream(self) -> TextIO:
        return self._input or sys.stdin

    @property
    def output_stream(self) -> TextIO:
        return self._output or sys.stdout

    def initialize(self) -> None:
        """Start reading commands in a background thread."""
        self._running = True
        self._reader_thread = threading.Thread(target=self._read_loop, daemon=True)
        self._reader_thread.start()
        self._initialized = True
        logger.info("ConsoleFrontEnd initialized")

    def close(self) -> None:
        logger.info("Closing ConsoleFrontEnd")
        # Reader thread may be blocked on input (daemon)
        self._running = False
        self._initialized = False

    def _read_loop(self) -> None:
        try:
            for line in self.input_stream:
                if not self._running:
                    break
                if not self.handle_line(line):
                    break
        except Exception as e:
            logger.error(f"Console input failed: {e}", exc_info=True)

        if self._running and self._on_quit:
            logger.info("Console input ended")
            self._on_quit()

    def handle_line(self, line: str) -> bool:
        """
        Process one command line.

        Returns:
            False when the player asked to quit
        """
        command = line.strip().lower()
        if not command:
            return True

        if command in ('quit', 'exit', 'q'):
            self._write("Bye!")
            self._running = False
            if self._on_quit:
                self._on_quit()
            return False

        if command == 'help':
            self._write(HELP_TEXT.rstrip())
            return True

        if command == 'scores':
            if self.last_state is not None:
                self._write(render_best_scores(self.last_state['best_scores']))
            return True

        parsed = parse_command(command)
        if parsed is None:
            self._write(f"Unknown command: {command} (type 'help')")
            return True

        action, value = parsed
        self._post(action, value)
        return True

    def show_state(self, snapshot: dict) -> None:
        """Print the board when anything besides the clock changed."""
        super().show_state(snapshot)

        key = repr({k: v for k, v in snapshot.items() if k not in ('elapsed', 'elapsed_display')})
        if key == self._last_rendered:
            return
        self._last_rendered = key
        self._write(render_board(snapshot))

    def _write(self, text: str) -> None:
        self.output_stream.write(text + "\n")
        self.output_stream.flush()
