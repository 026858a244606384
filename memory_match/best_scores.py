"""
Best score tracking for Memory Match.

Keeps one best (moves, time) record per difficulty and persists the whole
record map as a JSON string in a key-value store.
"""

import json
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from .deck import Difficulty

logger = logging.getLogger(__name__)


# Settings key holding the serialized records
BEST_SCORES_KEY = "best_scores"


@dataclass(frozen=True)
class BestScore:
    """Best result for one difficulty. Empty when either field is missing."""

    moves: Optional[int] = None
    time: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.moves is None or self.time is None

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {'moves': self.moves, 'time': self.time}

    @classmethod
    def from_dict(cls, data: Any) -> 'BestScore':
        """
        Build a record from its serialized form.

        Raises:
            ValueError: If the data is not a valid record
        """
        if not isinstance(data, dict):
            raise ValueError(f"Record must be a mapping, got {type(data).__name__}")

        moves = data.get('moves')
        time = data.get('time')
        for name, value in (('moves', moves), ('time', time)):
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"Invalid {name} value: {value!r}")

        return cls(moves=moves, time=time)


def empty_records() -> Dict[Difficulty, BestScore]:
    """Record map with no result for any difficulty."""
    return {difficulty: BestScore() for difficulty in Difficulty}


def is_new_best(moves: int, time: int, best: Optional[BestScore]) -> bool:
    """
    Decide whether a finished run beats the stored best.

    A run is a new best if there is no record, if it took fewer moves, or
    if it took the same moves in strictly less time.

    Args:
        moves: Moves of the finished run
        time: Elapsed seconds of the finished run
        best: Stored record, or None

    Returns:
        True if the run should replace the record
    """
    if best is None or best.is_empty:
        return True

    if moves < best.moves:
        return True

    if moves == best.moves and time < best.time:
        return True

    return False


def serialize_records(records: Dict[Difficulty, BestScore]) -> str:
    """Serialize a record map (all three difficulties) to JSON."""
    payload = {
        difficulty.value: records.get(difficulty, BestScore()).to_dict()
        for difficulty in Difficulty
    }
    return json.dumps(payload, sort_keys=True)


def deserialize_records(raw: Optional[str]) -> Dict[Difficulty, BestScore]:
    """
    Parse a serialized record map.

    Missing or malformed data yields empty records for every difficulty.

    Args:
        raw: JSON string as written by serialize_records, or None

    Returns:
        Record map covering all difficulties
    """
    if not raw:
        return empty_records()

    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping, got {type(data).__name__}")

        records = empty_records()
        for difficulty in Difficulty:
            if difficulty.value in data:
                records[difficulty] = BestScore.from_dict(data[difficulty.value])
        return records

    except (TypeError, ValueError) as e:
        logger.warning(f"Ignoring unreadable saved best scores: {e}")
        return empty_records()


class BestScoreStore(ABC):
    """Persistence interface for best score records."""

    @abstractmethod
    def load(self) -> Dict[Difficulty, BestScore]:
        """
        Load records for all difficulties.

        Must not raise: unreadable data loads as empty records.
        """
        pass

    @abstractmethod
    def save(self, records: Dict[Difficulty, BestScore]) -> bool:
        """
        Persist the complete record map.

        Returns:
            True if successful, False otherwise
        """
        pass


class KeyValueBestScoreStore(BestScoreStore):
    """
    Best score store on top of a string key-value store.

    The backing store needs get(key, default) and set(key, value);
    SettingsManager provides both.
    """

    def __init__(self, backend, key: str = BEST_SCORES_KEY):
        """
        Initialize store.

        Args:
            backend: Key-value store with get/set
            key: Entry holding the serialized records
        """
        self._backend = backend
        self._key = key

    def load(self) -> Dict[Difficulty, BestScore]:
        try:
            raw = self._backend.get(self._key, None)
        except Exception as e:
            logger.warning(f"Failed to read best scores: {e}", exc_info=True)
            return empty_records()

        if raw is not None and not isinstance(raw, str):
            logger.warning(f"Ignoring saved best scores of type {type(raw).__name__}")
            return empty_records()

        records = deserialize_records(raw)
        logger.info(f"Loaded best scores: {self._describe(records)}")
        return records

    def save(self, records: Dict[Difficulty, BestScore]) -> bool:
        result = self._backend.set(self._key, serialize_records(records))
        # Plain dict-style stores return None from set()
        return result is not False

    @staticmethod
    def _describe(records: Dict[Difficulty, BestScore]) -> str:
        parts = []
        for difficulty, record in records.items():
            text = "-" if record.is_empty else f"{record.moves} moves/{record.time}s"
            parts.append(f"{difficulty.value}={text}")
        return ", ".join(parts)


class ScoreTracker:
    """Compares finished runs against stored records and saves improvements."""

    def __init__(self, store: BestScoreStore):
        """
        Initialize tracker and load records once.

        Args:
            store: Persistence backend
        """
        self._store = store
        self._lock = threading.Lock()
        self._records = empty_records()
        self._records.update(store.load())

    def best(self, difficulty: Difficulty) -> BestScore:
        """Stored record for a difficulty (empty if none)."""
        with self._lock:
            return self._records[Difficulty.parse(difficulty)]

    @property
    def records(self) -> Dict[Difficulty, BestScore]:
        with self._lock:
            return dict(self._records)

    def submit(self, difficulty: Difficulty, moves: int, time: int) -> bool:
        """
        Record a finished run.

        Args:
            difficulty: Difficulty the run was played on
            moves: Moves taken
            time: Elapsed seconds

        Returns:
            True if the run set a new record
        """
        difficulty = Difficulty.parse(difficulty)

        with self._lock:
            if not is_new_best(moves, time, self._records[difficulty]):
                logger.info(f"Run on {difficulty.value} ({moves} moves, {time}s) did not beat the record")
                return False

            self._records[difficulty] = BestScore(moves=moves, time=time)
            logger.info(f"New best on {difficulty.value}: {moves} moves in {time}s")

            if not self._store.save(dict(self._records)):
                logger.error("Failed to save best scores")

        return True
