"""Tab registry: every open content surface and the panel that owns it."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from loguru import logger

from termdesk.documents.renderers import Document

TERMINAL_TAB_ID = "terminal"


class TabKind(str, Enum):
    TERMINAL = "terminal"
    FILE = "file"
    BROWSER = "browser"


class PanelId(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"

    @property
    def other(self) -> "PanelId":
        return PanelId.SECONDARY if self is PanelId.PRIMARY else PanelId.PRIMARY


@dataclass
class TabContent:
    """What a file tab currently shows."""

    loading: bool = False
    document: Document | None = None
    error: str = ""


@dataclass
class Tab:
    """One content surface."""

    tab_id: str
    kind: TabKind
    title: str
    panel: PanelId
    payload: str = ""  # absolute path (FILE) or URL (BROWSER)
    closeable: bool = True
    needs_attention: bool = False
    content: TabContent = field(default_factory=TabContent)


@dataclass
class PanelState:
    active_tab_id: str | None = None


class TabRegistry:
    """Single source of truth for tabs and the active tab of each panel.

    The terminal tab exists from construction, lives in PRIMARY and can never
    be closed. Other tabs get ``tab-<n>`` identifiers from a counter that only
    grows; iteration follows registration order.
    """

    def __init__(self, terminal_title: str = "Terminal") -> None:
        self._tabs: dict[str, Tab] = {}
        self._counter = 0
        self.panels: dict[PanelId, PanelState] = {
            PanelId.PRIMARY: PanelState(active_tab_id=TERMINAL_TAB_ID),
            PanelId.SECONDARY: PanelState(),
        }
        self._tabs[TERMINAL_TAB_ID] = Tab(
            tab_id=TERMINAL_TAB_ID,
            kind=TabKind.TERMINAL,
            title=terminal_title,
            panel=PanelId.PRIMARY,
            closeable=False,
        )

    def __iter__(self) -> Iterator[Tab]:
        return iter(list(self._tabs.values()))

    def __len__(self) -> int:
        return len(self._tabs)

    def __contains__(self, tab_id: object) -> bool:
        return tab_id in self._tabs

    @property
    def terminal(self) -> Tab:
        return self._tabs[TERMINAL_TAB_ID]

    def get(self, tab_id: str) -> Tab | None:
        return self._tabs.get(tab_id)

    def tabs_in(self, panel: PanelId) -> list[Tab]:
        return [t for t in self._tabs.values() if t.panel is panel]

    def active_id(self, panel: PanelId) -> str | None:
        return self.panels[panel].active_tab_id

    def active_tab(self, panel: PanelId) -> Tab | None:
        tab_id = self.panels[panel].active_tab_id
        return self._tabs.get(tab_id) if tab_id else None

    def create_tab(
        self,
        kind: TabKind,
        title: str,
        payload: str = "",
        panel: PanelId = PanelId.PRIMARY,
    ) -> str:
        """Register a closeable tab. Does not activate it."""
        if kind is TabKind.TERMINAL:
            raise ValueError("The terminal tab is created by the registry itself")
        self._counter += 1
        tab_id = f"tab-{self._counter}"
        self._tabs[tab_id] = Tab(tab_id=tab_id, kind=kind, title=title, panel=panel, payload=payload)
        logger.debug(f"[tabs] Created {tab_id} ({kind.value}) in {panel.value}: {title}")
        return tab_id

    def find_tab(self, kind: TabKind, key: str) -> str | None:
        """Existing FILE tab for a path or BROWSER tab for a URL."""
        for tab in self._tabs.values():
            if tab.kind is kind and tab.payload == key:
                return tab.tab_id
        return None

    def set_active(self, panel: PanelId, tab_id: str | None) -> None:
        if tab_id is not None:
            tab = self._tabs.get(tab_id)
            if tab is None or tab.panel is not panel:
                raise ValueError(f"Tab {tab_id!r} is not in the {panel.value} panel")
        self.panels[panel].active_tab_id = tab_id

    def close_tab(self, tab_id: str) -> bool:
        """Remove a closeable tab; its panel falls back to the first remaining tab."""
        tab = self._tabs.get(tab_id)
        if tab is None or not tab.closeable:
            return False
        del self._tabs[tab_id]
        state = self.panels[tab.panel]
        if state.active_tab_id == tab_id:
            remaining = self.tabs_in(tab.panel)
            state.active_tab_id = remaining[0].tab_id if remaining else None
        logger.debug(f"[tabs] Closed {tab_id}")
        return True

    def move_tab(self, tab_id: str, target: PanelId, activate: bool = True) -> bool:
        """Reassign a tab to ``target``, repairing the source panel's active tab."""
        tab = self._tabs.get(tab_id)
        if tab is None or tab.panel is target:
            return False
        source = tab.panel
        tab.panel = target

        source_state = self.panels[source]
        if source_state.active_tab_id == tab_id:
            source_state.active_tab_id = self._fallback_active(source)
        if activate:
            self.panels[target].active_tab_id = tab_id
        logger.debug(f"[tabs] Moved {tab_id} {source.value} -> {target.value} (activate={activate})")
        return True

    def _fallback_active(self, panel: PanelId) -> str | None:
        terminal = self._tabs.get(TERMINAL_TAB_ID)
        if terminal is not None and terminal.panel is panel:
            return TERMINAL_TAB_ID
        remaining = self.tabs_in(panel)
        return remaining[0].tab_id if remaining else None
