"""Persistence of recently used session directories."""

from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable

from loguru import logger

MAX_RECENT_SESSIONS = 10
STORAGE_KEY = "recentSessions"


@dataclass(frozen=True)
class RecentSession:
    """One entry of the recent-session list."""

    path: str
    name: str
    timestamp: int  # milliseconds since epoch


def default_state_path() -> Path:
    """Return default path for persisted workspace state."""
    return Path.home() / ".termdesk" / "state.json"


def display_name(path: str) -> str:
    """Last path segment, or the path itself for a filesystem root."""
    trimmed = path.rstrip("/\\")
    return trimmed.replace("\\", "/").rsplit("/", 1)[-1] or path


def _now_ms() -> int:
    return int(time.time() * 1000)


class RecentSessionStore:
    """Newest-first, path-unique, capped list stored under one JSON key.

    The state file is a JSON object; only ``recentSessions`` is owned here and
    other keys are preserved on write.
    """

    def __init__(
        self,
        path: Path | None = None,
        limit: int = MAX_RECENT_SESSIONS,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._path = path or default_state_path()
        self._limit = limit
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[RecentSession]:
        """Read the stored list; corrupt or missing storage yields []."""
        raw = self._read_state().get(STORAGE_KEY)
        if not isinstance(raw, list):
            return []
        result: list[RecentSession] = []
        for item in raw:
            if not isinstance(item, dict) or not isinstance(item.get("path"), str):
                continue
            path = item["path"]
            try:
                timestamp = int(item.get("timestamp", 0))
            except (TypeError, ValueError):
                timestamp = 0
            result.append(RecentSession(path=path, name=str(item.get("name") or display_name(path)), timestamp=timestamp))
        return result[: self._limit]

    def add(self, path: str) -> list[RecentSession]:
        """Front-insert ``path``, dropping an older duplicate and the overflow."""
        entries = [e for e in self.load() if e.path != path]
        entries.insert(0, RecentSession(path=path, name=display_name(path), timestamp=self._clock()))
        trimmed = entries[: self._limit]
        self._write(trimmed)
        return trimmed

    def clear(self) -> None:
        self._write([])

    def _read_state(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning(f"[recent] Ignoring unreadable state file {self._path}: {exc}")
            return {}
        return payload if isinstance(payload, dict) else {}

    def _write(self, entries: list[RecentSession]) -> None:
        state = self._read_state()
        state[STORAGE_KEY] = [asdict(e) for e in entries]
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(state, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.error(f"[recent] Failed to persist recent sessions: {exc}")
