"""
Game session controller for Memory Match.

Owns the board, the turn rules, the timer and the start/playing/complete
state machine. All mutations happen through the event methods
(select_difficulty, start_game, click_card, reset_game, return_to_menu,
tick); everything else is a read-only query.
"""

from enum import Enum
from typing import Callable, Dict, List, Optional, Set, Tuple, Union
import copy
import logging

from .best_scores import BestScore, BestScoreStore, ScoreTracker
from .deck import Card, Difficulty, build_deck, grid_layout
from .scheduler import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)


class GameState(Enum):
    """Session state enumeration."""
    START = "start"
    PLAYING = "playing"
    COMPLETE = "complete"


def format_time(seconds: int) -> str:
    """Format elapsed seconds as MM:SS."""
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins:02d}:{secs:02d}"


class GameSession:
    """
    Memory game session controller.

    Delayed card resolutions and the per-second timer run as scheduled
    tasks. Each reset bumps the session generation and cancels pending
    tasks; a task that still fires checks the generation and the state
    before touching anything.
    """

    # Default resolution delays in seconds
    MATCH_DELAY = 0.5
    MISMATCH_DELAY = 1.0

    # Timer resolution in seconds
    TICK_INTERVAL = 1.0

    def __init__(
        self,
        store: BestScoreStore,
        scheduler: Scheduler,
        difficulty: Union[Difficulty, str] = Difficulty.MEDIUM,
        rng=None,
        match_delay: Optional[float] = None,
        mismatch_delay: Optional[float] = None,
    ):
        """
        Initialize the session controller.

        Best scores are loaded from the store once, here.

        Args:
            store: Best score persistence
            scheduler: Scheduler for resolutions and the timer
            difficulty: Initial difficulty
            rng: Random source for shuffling (default: random module)
            match_delay: Seconds before a matched pair is resolved
            mismatch_delay: Seconds before a wrong pair flips back
        """
        self._scheduler = scheduler
        self._tracker = ScoreTracker(store)
        self._rng = rng
        self.match_delay = self.MATCH_DELAY if match_delay is None else match_delay
        self.mismatch_delay = self.MISMATCH_DELAY if mismatch_delay is None else mismatch_delay

        self._difficulty = Difficulty.parse(difficulty)
        self._state = GameState.START
        self._generation = 0

        self._cards: List[Card] = []
        self._flipped: List[int] = []
        self._matches = 0
        self._moves = 0
        self._elapsed = 0
        self._locked = False
        self._new_record = False

        self._timer_task: Optional[ScheduledTask] = None
        self._pending: Set[ScheduledTask] = set()
        self._listeners: List[Callable[['GameSession'], None]] = []

    def add_listener(self, callback: Callable[['GameSession'], None]) -> None:
        """
        Register a callback run after every state change.

        Args:
            callback: Function called with this session
        """
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[['GameSession'], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            try:
                callback(self)
            except Exception as e:
                logger.error(f"Session listener failed: {e}", exc_info=True)

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def difficulty(self) -> Difficulty:
        return self._difficulty

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def cards(self) -> List[Card]:
        """Copy of the current board in display order."""
        return [copy.copy(card) for card in self._cards]

    @property
    def flipped(self) -> List[int]:
        return list(self._flipped)

    @property
    def moves(self) -> int:
        return self._moves

    @property
    def matches(self) -> int:
        return self._matches

    @property
    def total_pairs(self) -> int:
        return len(self._cards) // 2

    @property
    def elapsed(self) -> int:
        return self._elapsed

    @property
    def is_locked(self) -> bool:
        return self._locked

    @property
    def is_new_record(self) -> bool:
        """Whether the latest completed run set a new record."""
        return self._new_record

    @property
    def timer_running(self) -> bool:
        return self._timer_task is not None and self._timer_task.active

    @property
    def best_score(self) -> BestScore:
        return self._tracker.best(self._difficulty)

    @property
    def best_scores(self) -> Dict[Difficulty, BestScore]:
        return self._tracker.records

    @property
    def grid_layout(self) -> Tuple[int, int]:
        return grid_layout(self._difficulty)

    def is_revealed(self, index: int) -> bool:
        """Whether the card at index is face up."""
        return self._cards[index].matched or index in self._flipped

    def snapshot(self) -> dict:
        """
        JSON-serializable view of the session for front ends.

        Returns:
            Dictionary describing board, counters and records
        """
        columns, rows = self.grid_layout
        cards = []
        for index, card in enumerate(self._cards):
            entry = card.to_dict()
            entry['revealed'] = self.is_revealed(index)
            cards.append(entry)

        return {
            'state': self._state.value,
            'difficulty': self._difficulty.value,
            'grid': {'columns': columns, 'rows': rows},
            'cards': cards,
            'flipped': list(self._flipped),
            'moves': self._moves,
            'matches': self._matches,
            'total_pairs': self.total_pairs,
            'elapsed': self._elapsed,
            'elapsed_display': format_time(self._elapsed),
            'locked': self._locked,
            'is_new_record': self._new_record,
            'best_score': self.best_score.to_dict(),
            'best_scores': {
                difficulty.value: record.to_dict()
                for difficulty, record in self.best_scores.items()
            },
        }

    def select_difficulty(self, difficulty: Union[Difficulty, str]) -> None:
        """
        Change difficulty.

        While playing or after finishing this starts a fresh game on the
        new difficulty; on the start screen it only changes the difficulty
        used by the next start.
        """
        difficulty = Difficulty.parse(difficulty)
        if difficulty is self._difficulty:
            return

        logger.info(f"Difficulty changed: {self._difficulty.value} -> {difficulty.value}")
        self._difficulty = difficulty

        if self._state is not GameState.START:
            self._begin()
        self._notify()

    def start_game(self) -> None:
        """Start a fresh game on the active difficulty."""
        self._begin()
        self._notify()

    def play_again(self) -> None:
        """Start over after completing a game."""
        if self._state is not GameState.COMPLETE:
            logger.debug(f"play_again ignored in state {self._state.value}")
            return
        self.start_game()

    def reset_game(self) -> None:
        """Restart the running game with a new deck."""
        if self._state is not GameState.PLAYING:
            logger.debug(f"reset_game ignored in state {self._state.value}")
            return
        logger.info("Game reset")
        self.start_game()

    def return_to_menu(self) -> None:
        """Stop the game and go back to the start screen."""
        if self._state is GameState.START:
            return

        self._teardown()
        self._cards = []
        self._clear_counters()
        self._state = GameState.START
        logger.info("Returned to menu")
        self._notify()

    def tick(self) -> None:
        """Advance the game timer by one second."""
        if self._state is not GameState.PLAYING:
            return
        self._elapsed += 1
        self._notify()

    def click_card(self, index: int) -> None:
        """
        Flip the card at a board position.

        Clicks are ignored when not playing, while a pair is being
        resolved, on matched or already flipped cards, and when two cards
        are already face up.
        """
        if self._state is not GameState.PLAYING:
            logger.debug(f"Click on {index} ignored: state is {self._state.value}")
            return
        if self._locked:
            logger.debug(f"Click on {index} ignored: resolving pair")
            return
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(self._cards):
            logger.debug(f"Click on {index!r} ignored: no such card")
            return
        if self._cards[index].matched:
            logger.debug(f"Click on {index} ignored: already matched")
            return
        if index in self._flipped or len(self._flipped) >= 2:
            logger.debug(f"Click on {index} ignored: already flipped")
            return

        self._flipped.append(index)

        if len(self._flipped) == 2:
            self._locked = True
            self._moves += 1

            first, second = self._flipped
            if self._cards[first].symbol == self._cards[second].symbol:
                logger.debug(f"Match: {first} and {second}")
                self._schedule(self.match_delay, self._resolve_match)
            else:
                logger.debug(f"No match: {first} and {second}")
                self._schedule(self.mismatch_delay, self._resolve_mismatch)

        self._notify()

    def _begin(self) -> None:
        """Tear down the current game and start a new one."""
        self._teardown()
        self._cards = build_deck(self._difficulty, self._rng)
        self._clear_counters()
        self._state = GameState.PLAYING

        generation = self._generation
        self._timer_task = self._scheduler.call_every(self.TICK_INTERVAL, lambda: self._on_timer(generation))

        logger.info(f"Game started on {self._difficulty.value} ({self.total_pairs} pairs)")

    def _clear_counters(self) -> None:
        self._flipped = []
        self._matches = 0
        self._moves = 0
        self._elapsed = 0
        self._locked = False
        self._new_record = False

    def _teardown(self) -> None:
        """Invalidate every task scheduled by the current game."""
        self._generation += 1
        self._stop_timer()
        for task in self._pending:
            task.cancel()
        self._pending.clear()

    def _stop_timer(self) -> None:
        if self._timer_task is not None:
            self._timer_task.cancel()
            self._timer_task = None

    def _on_timer(self, generation: int) -> None:
        if generation != self._generation:
            return
        self.tick()

    def _schedule(self, delay: float, resolve: Callable[[], None]) -> None:
        generation = self._generation

        def fire():
            self._pending.discard(task)
            if generation != self._generation or self._state is not GameState.PLAYING:
                logger.debug(f"Dropping stale resolution from game {generation}")
                return
            resolve()
            self._notify()

        task = self._scheduler.call_later(delay, fire)
        self._pending.add(task)

    def _resolve_match(self) -> None:
        first, second = self._flipped
        self._cards[first].matched = True
        self._cards[second].matched = True
        self._flipped = []
        self._matches += 1
        self._locked = False

        if self._matches == self.total_pairs and self._matches > 0:
            self._complete()

    def _resolve_mismatch(self) -> None:
        self._flipped = []
        self._locked = False

    def _complete(self) -> None:
        self._stop_timer()
        self._state = GameState.COMPLETE
        logger.info(f"Game complete on {self._difficulty.value}: {self._moves} moves in {format_time(self._elapsed)}")
        self._new_record = self._tracker.submit(self._difficulty, self._moves, self._elapsed)
