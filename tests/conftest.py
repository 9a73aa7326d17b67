"""Shared fixtures and collaborator fakes for termdesk tests."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from termdesk.errors import SpawnError
from termdesk.events import EventHub
from termdesk.files.listing import DirectoryEntry
from termdesk.session.recent_store import RecentSessionStore


class FakeHandle:
    """In-memory ProcessHandle; tests drive output and exit by hand."""

    def __init__(self, host: "FakeHost", pid: int, cols: int, rows: int) -> None:
        self._host = host
        self.pid = pid
        self.spawn_geometry = (cols, rows)
        self.writes: list[str] = []
        self.resizes: list[tuple[int, int]] = []
        self.killed = False
        self._on_data = None
        self._on_exit = None

    def start(self, on_data, on_exit) -> None:
        self._on_data = on_data
        self._on_exit = on_exit

    def write(self, data: str) -> None:
        self.writes.append(data)

    def resize(self, cols: int, rows: int) -> None:
        self.resizes.append((cols, rows))

    def kill(self) -> None:
        self.killed = True
        self._host.log.append(("kill", self.pid))

    def emit(self, text: str) -> None:
        self._on_data(text)

    def exit(self, code: int | None) -> None:
        self._on_exit(code)


class FakeHost:
    """ProcessHost that records spawn/kill order."""

    def __init__(self) -> None:
        self.log: list[tuple[str, int]] = []
        self.handles: list[FakeHandle] = []
        self.spawn_calls: list[dict] = []
        self.fail_with: str | None = None
        self.gate: threading.Event | None = None

    def spawn(self, command, args, cwd, cols, rows, env=None) -> FakeHandle:
        if self.gate is not None:
            self.gate.wait(timeout=5)
        self.spawn_calls.append({"command": command, "args": args, "cwd": cwd, "cols": cols, "rows": rows})
        if self.fail_with:
            raise SpawnError(self.fail_with, command=command)
        handle = FakeHandle(self, pid=len(self.handles) + 1, cols=cols, rows=rows)
        self.handles.append(handle)
        self.log.append(("spawn", handle.pid))
        return handle

    @property
    def last(self) -> FakeHandle:
        return self.handles[-1]


class FakeLister:
    """DirectoryLister over an in-memory mapping of path -> raw entries."""

    def __init__(self, tree: dict[str, list[tuple[str, bool]]] | None = None) -> None:
        self.tree = tree or {}
        self.calls: list[str] = []
        self.gates: dict[str, threading.Event] = {}

    def list(self, path: str) -> list[DirectoryEntry]:
        self.calls.append(path)
        gate = self.gates.get(path)
        if gate is not None:
            gate.wait(timeout=5)
        if path not in self.tree:
            raise FileNotFoundError(path)
        return [
            DirectoryEntry(name=name, path=f"{path.rstrip('/')}/{name}", is_directory=is_dir)
            for name, is_dir in self.tree[path]
        ]


class RecordingShell:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def open_path(self, path: str) -> None:
        self.calls.append(("open", path))

    def reveal(self, path: str) -> None:
        self.calls.append(("reveal", path))

    def open_url(self, url: str) -> None:
        self.calls.append(("url", url))


class EventRecorder:
    """Collects every payload published for the subscribed event names."""

    def __init__(self, hub: EventHub, *names: str) -> None:
        self.events: list[tuple[str, object]] = []
        for name in names:
            hub.subscribe(name, lambda payload, n=name: self.events.append((n, payload)))

    def of(self, name: str) -> list[object]:
        return [payload for n, payload in self.events if n == name]


@pytest.fixture
def hub() -> EventHub:
    return EventHub()


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def recent_store(tmp_path: Path) -> RecentSessionStore:
    return RecentSessionStore(tmp_path / "state.json")


@pytest.fixture
def sample_lister() -> FakeLister:
    return FakeLister(
        {
            "/proj": [("b.txt", False), ("A", True), ("a.txt", False), (".git", True), ("src", True)],
            "/proj/A": [("inner", True), ("z.md", False)],
            "/proj/A/inner": [("deep.txt", False)],
            "/proj/src": [("main.py", False)],
            "/other": [("readme.md", False)],
        }
    )
