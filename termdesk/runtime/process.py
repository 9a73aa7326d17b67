"""Process host: spawns the session tool and streams its output.

A :class:`ProcessHandle` owns one backend plus a reader thread. Listeners are
attached before :meth:`ProcessHandle.start` so no output is lost; callbacks run
on the reader thread and must only hand data off (e.g. into a queue).
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Protocol

from loguru import logger

from termdesk.errors import SpawnError
from termdesk.runtime.backend import PTYBackend, build_backend
from termdesk.runtime.preflight import resolve_command, split_command

DataListener = Callable[[str], None]
ExitListener = Callable[["int | None"], None]


class ProcessHandle:
    """Duplex stream plus resize/kill controls for one spawned process."""

    def __init__(self, backend: PTYBackend, command: str = "") -> None:
        self.command = command
        self._backend = backend
        self._on_data: DataListener | None = None
        self._on_exit: ExitListener | None = None
        self._killed = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def pid(self) -> int | None:
        return self._backend.pid

    def start(self, on_data: DataListener, on_exit: ExitListener) -> None:
        """Attach listeners and begin reading output."""
        if self._thread is not None:
            return
        self._on_data = on_data
        self._on_exit = on_exit
        self._thread = threading.Thread(
            target=self._read_loop,
            daemon=True,
            name=f"termdesk-pty-{self.pid}",
        )
        self._thread.start()

    def write(self, data: str) -> None:
        if self._killed.is_set():
            return
        self._backend.write(data)

    def resize(self, cols: int, rows: int) -> None:
        if self._killed.is_set():
            return
        self._backend.resize(cols, rows)

    def kill(self) -> None:
        """Terminate the process without waiting for it to exit."""
        if self._killed.is_set():
            return
        self._killed.set()
        try:
            self._backend.close()
        except OSError as exc:
            logger.warning(f"[pty] Failed to close pid={self.pid}: {exc}")

    def _read_loop(self) -> None:
        backend = self._backend
        while not self._killed.is_set():
            try:
                data = backend.read()
            except (OSError, ValueError):
                # fd closed underneath us by kill()
                data = ""
            if data:
                if self._on_data is not None:
                    self._on_data(data)
                continue
            if not backend.is_alive():
                break
            time.sleep(0.01)

        if self._killed.is_set():
            return
        code = backend.exit_code()
        logger.info(f"[pty] Process pid={self.pid} exited with code {code}")
        if self._on_exit is not None:
            self._on_exit(code)


class ProcessHost(Protocol):
    """Spawns session processes."""

    def spawn(
        self,
        command: str,
        args: list[str],
        cwd: str,
        cols: int,
        rows: int,
        env: dict[str, str] | None = None,
    ) -> ProcessHandle:
        """Start ``command`` in ``cwd``; raise SpawnError on failure."""


class PtyProcessHost:
    """ProcessHost backed by the platform PTY backend."""

    def spawn(
        self,
        command: str,
        args: list[str],
        cwd: str,
        cols: int,
        rows: int,
        env: dict[str, str] | None = None,
    ) -> ProcessHandle:
        executable = resolve_command(command, env)
        if executable is None:
            raise SpawnError(f"Command not found: {command}", command=command)
        argv = [executable, *split_command(command)[1:], *args]
        try:
            backend = build_backend(argv, cols=cols, rows=rows, cwd=cwd, env=env)
        except Exception as exc:
            raise SpawnError(f"Failed to start {command}: {exc}", command=command) from exc
        return ProcessHandle(backend, command=command)
