"""Workspace event contracts and lightweight signal bus."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable

from loguru import logger

EventHandler = Callable[[object], None]

TERMINAL_OUTPUT = "terminal.output"
TERMINAL_EXITED = "terminal.exited"
TERMINAL_INPUT_NEEDED = "terminal.input_needed"
TERMINAL_ATTENTION_CLEARED = "terminal.attention_cleared"
SESSION_STATE = "session.state"
WORKSPACE_PROMPT = "workspace.prompt"
TASK_PROGRESS = "task.progress"
TABS_CHANGED = "tabs.changed"
TREE_CHANGED = "tree.changed"


@dataclass(frozen=True)
class TerminalOutput:
    """Output chunk from the session process, in arrival order."""

    generation: int
    text: str


@dataclass(frozen=True)
class SessionExited:
    """Session process ended on its own, or failed to spawn (code is None)."""

    generation: int
    code: int | None
    error: str = ""


@dataclass(frozen=True)
class InputNeeded:
    """The tool is blocked waiting on the user."""

    generation: int


@dataclass(frozen=True)
class AttentionCleared:
    generation: int


@dataclass(frozen=True)
class SessionStateChanged:
    generation: int
    state: str
    workdir: str


@dataclass(frozen=True)
class UserPrompt:
    """User-facing message that blocks an action (e.g. no folder chosen)."""

    text: str


@dataclass(frozen=True)
class TaskProgress:
    """Chunk of output from a long-running auxiliary task."""

    task: str
    text: str


@dataclass(frozen=True)
class TabsChanged:
    reason: str


@dataclass(frozen=True)
class TreeChanged:
    root: str


class EventHub:
    """Simple in-process pub/sub for workspace modules."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        self._handlers[event_name].append(handler)

    def unsubscribe(self, event_name: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event_name: str, payload: object) -> None:
        for handler in list(self._handlers.get(event_name, [])):
            try:
                handler(payload)
            except Exception:
                logger.exception(f"[events] Handler for {event_name!r} failed")
