"""Lifecycle of the single interactive session process.

State machine::

    IDLE ──start──▶ STARTING ──handle──▶ LIVE ⇄ AWAITING_INPUT
                        │                  │
                        └──stop──▶ STOPPED ◀┘ (stop)
                                           LIVE/AWAITING ──exit──▶ EXITED

EXITED and STOPPED accept a new start. Output and exit notifications arrive
on the handle's reader thread and go into the session's own queue; ``pump()``
drains that queue on the UI thread so chunks are emitted in arrival order.
"""

from __future__ import annotations

import asyncio
import queue
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from termdesk.errors import SpawnError, ValidationError
from termdesk.events import (
    SESSION_STATE,
    TERMINAL_ATTENTION_CLEARED,
    TERMINAL_EXITED,
    TERMINAL_INPUT_NEEDED,
    TERMINAL_OUTPUT,
    AttentionCleared,
    EventHub,
    InputNeeded,
    SessionExited,
    SessionStateChanged,
    TerminalOutput,
)
from termdesk.runtime.process import ProcessHandle, ProcessHost
from termdesk.session.recent_store import RecentSessionStore

SESSION_ENDED_MARKER = "\r\n\x1b[90m--- Session ended ---\x1b[0m\r\n"


class SessionState(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    LIVE = "live"
    AWAITING_INPUT = "awaiting_input"
    EXITED = "exited"
    STOPPED = "stopped"


ATTACHED_STATES = frozenset({SessionState.STARTING, SessionState.LIVE, SessionState.AWAITING_INPUT})
RUNNING_STATES = frozenset({SessionState.LIVE, SessionState.AWAITING_INPUT})


@dataclass
class Session:
    """One start of the session tool."""

    generation: int
    workdir: str
    state: SessionState = SessionState.STARTING
    cols: int = 80
    rows: int = 24
    exit_code: int | None = None
    error: str = ""
    handle: ProcessHandle | None = None
    inbox: "queue.SimpleQueue[tuple[str, object]]" = field(default_factory=queue.SimpleQueue)


class SessionController:
    """Owns the one attached session and its state transitions."""

    def __init__(
        self,
        host: ProcessHost,
        hub: EventHub,
        recent: RecentSessionStore | None = None,
        command: str = "claude",
        args: list[str] | None = None,
        env: dict[str, str] | None = None,
        cols: int = 80,
        rows: int = 24,
    ) -> None:
        self._host = host
        self._hub = hub
        self._recent = recent
        self.command = command
        self.args = list(args or [])
        self.env = env
        self.default_cols = cols
        self.default_rows = rows

        self._session: Session | None = None
        self._generation = 0
        self._pumping = False

    # ------------------------------------------------------------------ #
    # Read-only view                                                       #
    # ------------------------------------------------------------------ #

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state if self._session is not None else SessionState.IDLE

    @property
    def is_attached(self) -> bool:
        return self.state in ATTACHED_STATES

    @property
    def exit_code(self) -> int | None:
        return self._session.exit_code if self._session is not None else None

    # ------------------------------------------------------------------ #
    # Transitions                                                          #
    # ------------------------------------------------------------------ #

    async def start_session(
        self,
        workdir: str,
        cols: int | None = None,
        rows: int | None = None,
    ) -> Session:
        """Tear down any attached session, then spawn a fresh one in ``workdir``.

        Raises:
            ValidationError: no working directory; nothing changes.
            SpawnError: the process could not be started; the session ends
                up EXITED without an exit code.
        """
        workdir = (workdir or "").strip()
        if not workdir:
            raise ValidationError("Please select a working directory first")

        self._teardown(reason="restart")
        if self._recent is not None:
            self._recent.add(workdir)

        self._generation += 1
        session = Session(
            generation=self._generation,
            workdir=workdir,
            cols=cols or self.default_cols,
            rows=rows or self.default_rows,
        )
        self._session = session
        self._publish_state(session)
        logger.info(f"[session] Starting {self.command!r} in {workdir} ({session.cols}x{session.rows})")

        try:
            handle = await asyncio.to_thread(
                self._host.spawn,
                self.command,
                self.args,
                workdir,
                session.cols,
                session.rows,
                self.env,
            )
        except SpawnError as exc:
            logger.error(f"[session] Spawn failed: {exc}")
            if self._session is session and session.state is SessionState.STARTING:
                session.state = SessionState.EXITED
                session.error = str(exc)
                self._publish_state(session)
                self._hub.publish(TERMINAL_EXITED, SessionExited(session.generation, None, str(exc)))
            raise

        if self._session is not session or session.state is not SessionState.STARTING:
            logger.info(f"[session] Discarding superseded process for generation {session.generation}")
            handle.kill()
            return session

        session.handle = handle
        inbox = session.inbox
        handle.start(
            on_data=lambda text: inbox.put(("data", text)),
            on_exit=lambda code: inbox.put(("exit", code)),
        )
        handle.resize(session.cols, session.rows)
        session.state = SessionState.LIVE
        self._publish_state(session)
        return session

    def stop(self) -> bool:
        """Kill the attached process without waiting for it to exit."""
        if not self.is_attached:
            return False
        self._teardown(reason="stop")
        return True

    def send_keys(self, text: str) -> bool:
        """Forward keystrokes verbatim; a keystroke answers an input request."""
        session = self._session
        if session is None or session.state not in RUNNING_STATES or session.handle is None:
            return False
        session.handle.write(text)
        if session.state is SessionState.AWAITING_INPUT:
            session.state = SessionState.LIVE
            self._publish_state(session)
            self._hub.publish(TERMINAL_ATTENTION_CLEARED, AttentionCleared(session.generation))
        return True

    def resize(self, cols: int, rows: int) -> bool:
        """Forward a geometry change; swallowed when no session is attached."""
        session = self._session
        if session is None or session.state not in ATTACHED_STATES:
            logger.debug(f"[session] Resize {cols}x{rows} ignored, no session attached")
            return False
        session.cols, session.rows = cols, rows
        if session.handle is not None:
            session.handle.resize(cols, rows)
        return True

    def notify_input_needed(self) -> bool:
        """External "needs input" signal: LIVE → AWAITING_INPUT."""
        session = self._session
        if session is None or session.state not in RUNNING_STATES:
            return False
        if session.state is SessionState.LIVE:
            session.state = SessionState.AWAITING_INPUT
            self._publish_state(session)
            self._hub.publish(TERMINAL_INPUT_NEEDED, InputNeeded(session.generation))
        return True

    # ------------------------------------------------------------------ #
    # Output delivery                                                      #
    # ------------------------------------------------------------------ #

    def pump(self, max_items: int = 256) -> int:
        """Drain the current session's queue on the caller's thread."""
        session = self._session
        if session is None:
            return 0
        handled = 0
        while handled < max_items:
            try:
                kind, payload = session.inbox.get_nowait()
            except queue.Empty:
                break
            handled += 1
            if session.state not in RUNNING_STATES:
                continue
            if kind == "data":
                self._hub.publish(TERMINAL_OUTPUT, TerminalOutput(session.generation, str(payload)))
            elif kind == "exit":
                self._on_exit(session, payload if isinstance(payload, int) else None)
        return handled

    async def run(self, poll_interval_s: float = 0.02) -> None:
        """Pump output until :meth:`close` is called."""
        self._pumping = True
        while self._pumping:
            self.pump()
            await asyncio.sleep(poll_interval_s)

    def close(self) -> None:
        """Stop pumping and kill any attached process."""
        self._pumping = False
        self._teardown(reason="shutdown")

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _on_exit(self, session: Session, code: int | None) -> None:
        session.exit_code = code
        session.handle = None
        session.state = SessionState.EXITED
        logger.info(f"[session] Exited with code {code}")
        self._hub.publish(TERMINAL_OUTPUT, TerminalOutput(session.generation, SESSION_ENDED_MARKER))
        self._publish_state(session)
        self._hub.publish(TERMINAL_EXITED, SessionExited(session.generation, code))

    def _teardown(self, reason: str) -> None:
        session = self._session
        if session is None or session.state not in ATTACHED_STATES:
            return
        handle = session.handle
        was_awaiting = session.state is SessionState.AWAITING_INPUT
        session.handle = None
        session.state = SessionState.STOPPED
        if handle is not None:
            logger.info(f"[session] Killing pid={handle.pid} ({reason})")
            handle.kill()
        self._publish_state(session)
        if was_awaiting:
            self._hub.publish(TERMINAL_ATTENTION_CLEARED, AttentionCleared(session.generation))

    def _publish_state(self, session: Session) -> None:
        self._hub.publish(
            SESSION_STATE,
            SessionStateChanged(session.generation, session.state.value, session.workdir),
        )
