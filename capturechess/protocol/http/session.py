from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

from ...puzzle.game import PuzzleGame
from ...puzzle.record import PuzzleRecord


@dataclass
class PuzzleSession:
    game: PuzzleGame
    record: Optional[PuzzleRecord] = None


class InMemorySessionStore:
    """Thread-safe in-memory puzzle session store.

    Sessions are keyed by a generated ``puzzle_id`` and live for the lifetime
    of the process.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, PuzzleSession] = {}

    def create(self, session: PuzzleSession) -> str:
        pid = uuid.uuid4().hex
        with self._lock:
            self._sessions[pid] = session
        return pid

    def get(self, puzzle_id: str) -> Optional[PuzzleSession]:
        with self._lock:
            return self._sessions.get(puzzle_id)

    def delete(self, puzzle_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(puzzle_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
