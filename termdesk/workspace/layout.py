"""Dual-panel layout rules on top of the tab registry."""

from __future__ import annotations

from loguru import logger

from termdesk.workspace.tabs import TERMINAL_TAB_ID, PanelId, TabRegistry


class PanelLayout:
    """Split visibility, activation and relocation of tabs between panels."""

    def __init__(self, registry: TabRegistry) -> None:
        self.registry = registry
        self.split_visible = False
        self._split_moved_tab: str | None = None

    def activate(self, tab_id: str, panel: PanelId | None = None) -> bool:
        """Make ``tab_id`` the active tab of the panel that owns it."""
        tab = self.registry.get(tab_id)
        if tab is None:
            return False
        if panel is not None and tab.panel is not panel:
            logger.debug(f"[layout] {tab_id} is not in {panel.value}, not activating")
            return False
        self.registry.set_active(tab.panel, tab_id)
        return True

    def toggle_split(self) -> bool:
        """Show or hide the secondary panel; returns the new visibility."""
        if self.split_visible:
            self._hide_secondary()
        else:
            self._show_secondary()
        return self.split_visible

    def relocate(self, tab_id: str, target: PanelId) -> bool:
        """Drag-and-drop or context-menu move; only while the split is shown."""
        if not self.split_visible:
            logger.debug(f"[layout] Ignoring move of {tab_id}: split view is hidden")
            return False
        return self.registry.move_tab(tab_id, target, activate=True)

    def move_to_other_panel(self, tab_id: str) -> bool:
        tab = self.registry.get(tab_id)
        if tab is None:
            return False
        return self.relocate(tab_id, tab.panel.other)

    def _show_secondary(self) -> None:
        self.split_visible = True
        self._split_moved_tab = None
        registry = self.registry
        active = registry.active_id(PanelId.PRIMARY)
        if active and active != TERMINAL_TAB_ID:
            registry.move_tab(active, PanelId.SECONDARY, activate=True)
            if registry.terminal.panel is PanelId.PRIMARY:
                registry.set_active(PanelId.PRIMARY, TERMINAL_TAB_ID)
            self._split_moved_tab = active

    def _hide_secondary(self) -> None:
        registry = self.registry
        primary_before = registry.active_id(PanelId.PRIMARY)
        for tab in registry.tabs_in(PanelId.SECONDARY):
            registry.move_tab(tab.tab_id, PanelId.PRIMARY, activate=False)
        registry.panels[PanelId.SECONDARY].active_tab_id = None
        self.split_visible = False

        moved = self._split_moved_tab
        self._split_moved_tab = None
        if moved and moved in registry and primary_before == TERMINAL_TAB_ID:
            registry.set_active(PanelId.PRIMARY, moved)
        elif registry.active_tab(PanelId.PRIMARY) is None:
            registry.set_active(PanelId.PRIMARY, TERMINAL_TAB_ID)
