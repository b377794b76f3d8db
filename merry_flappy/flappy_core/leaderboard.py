"""
Leaderboard
===========

Ranked list of the best finished runs, persisted under a single key in a
local key-value store.

Stored layout (JSON):
    {"leaderboard": [{"name": "Elf", "score": 12, "id": 1760000000000000000}, ...]}

Missing or malformed data loads as an empty board.
"""

from __future__ import annotations

import json
import os
import tempfile
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from merry_flappy.flappy_core.config_loader import GameConfig, get_config


class LeaderboardWriteError(RuntimeError):
    """Persisting the leaderboard failed."""


@dataclass(frozen=True)
class LeaderboardEntry:
    """One finished run."""
    name: str
    score: int
    id: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(data: Any) -> "LeaderboardEntry":
        """Strict parse of a stored record. Raises ValueError on bad data."""
        if not isinstance(data, dict):
            raise ValueError(f"Leaderboard record must be an object, got {type(data).__name__}")
        name, score, entry_id = data.get("name"), data.get("score"), data.get("id")
        if not isinstance(name, str):
            raise ValueError(f"Leaderboard name must be a string, got {name!r}")
        # bool is an int subclass; reject it explicitly
        for field_name, value in (("score", score), ("id", entry_id)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Leaderboard {field_name} must be an integer, got {value!r}")
        return LeaderboardEntry(name=name, score=score, id=entry_id)


class MemoryStore:
    """Dict-backed key-value store."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(data) if data else {}

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        # Round-trip through JSON so stored values behave like a real store
        self._data[key] = json.loads(json.dumps(value))


class JsonFileStore:
    """
    Key-value store backed by one JSON object file.

    Reads never raise: a missing or undecodable file reads as empty.
    Writes go to a temp file that replaces the target.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> Dict[str, Any]:
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Any:
        return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            prefix=self._path.name, suffix=".tmp", dir=str(self._path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self._path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


class LeaderboardStore:
    """
    Top-N leaderboard.

    submit() appends, sorts by score descending (stable, so earlier entries
    win ties), truncates and persists before returning.
    """

    def __init__(
        self,
        store: Optional[Any] = None,
        config: Optional[GameConfig] = None
    ):
        """
        Initialize leaderboard.

        Args:
            store: Object with get(key) / set(key, value). Uses a JsonFileStore
                at leaderboard.path from config, or a MemoryStore when unset.
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        lb = config.leaderboard
        if store is None:
            store = JsonFileStore(lb.path) if lb.path else MemoryStore()

        self._store = store
        self._key = lb.storage_key
        self._max_entries = lb.max_entries
        self._default_name = lb.default_name
        self._last_id: int = 0

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def load(self) -> List[LeaderboardEntry]:
        """
        Read the persisted board.

        Returns:
            Entries best first, or [] when absent or malformed.
        """
        try:
            raw = self._store.get(self._key)
        except (OSError, ValueError):
            return []
        if not isinstance(raw, list):
            return []
        try:
            entries = [LeaderboardEntry.from_dict(item) for item in raw]
        except ValueError:
            return []
        if not self._is_ranked(entries):
            return []
        return entries

    def _is_ranked(self, entries: List[LeaderboardEntry]) -> bool:
        """True for a board submit() could have written: short enough, best first, unique ids."""
        if len(entries) > self._max_entries:
            return False
        if len({e.id for e in entries}) != len(entries):
            return False
        return all(a.score >= b.score for a, b in zip(entries, entries[1:]))

    def _next_id(self) -> int:
        # Stay above ids already persisted
        last = max([self._last_id] + [e.id for e in self.load()])
        entry_id = max(time.time_ns(), last + 1)
        self._last_id = entry_id
        return entry_id

    def make_entry(self, name: Optional[str], score: int) -> LeaderboardEntry:
        """Build an entry with a blank name replaced by the default."""
        name = (name or "").strip() or self._default_name
        return LeaderboardEntry(name=name, score=int(score), id=self._next_id())

    def submit(self, entry: LeaderboardEntry) -> List[LeaderboardEntry]:
        """
        Add an entry and persist the ranked board.

        Returns:
            The ranked board after insertion.

        Raises:
            LeaderboardWriteError: If the store could not be written.
        """
        entries = self.load()
        entries.append(entry)
        ranked = sorted(entries, key=lambda e: e.score, reverse=True)[:self._max_entries]

        try:
            self._store.set(self._key, [e.to_dict() for e in ranked])
        except (OSError, TypeError, ValueError) as exc:
            raise LeaderboardWriteError(f"Could not save leaderboard: {exc}") from exc
        return ranked

    def record(self, name: Optional[str], score: int) -> List[LeaderboardEntry]:
        """make_entry() + submit()."""
        return self.submit(self.make_entry(name, score))

    def rank_of(self, entry: LeaderboardEntry, board: Optional[List[LeaderboardEntry]] = None) -> Optional[int]:
        """1-based rank of `entry` on the board, or None if it did not place."""
        board = self.load() if board is None else board
        for i, e in enumerate(board):
            if e.id == entry.id:
                return i + 1
        return None
