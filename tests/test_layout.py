"""Tests for split view and tab relocation."""

from termdesk.workspace.layout import PanelLayout
from termdesk.workspace.tabs import TERMINAL_TAB_ID, PanelId, TabKind, TabRegistry


def make_layout():
    registry = TabRegistry()
    return registry, PanelLayout(registry)


class TestActivate:
    def test_activate_within_owning_panel(self):
        registry, layout = make_layout()
        a = registry.create_tab(TabKind.FILE, "a", "/a")
        assert layout.activate(a, PanelId.PRIMARY)
        assert registry.active_id(PanelId.PRIMARY) == a

    def test_activate_in_wrong_panel_refused(self):
        registry, layout = make_layout()
        a = registry.create_tab(TabKind.FILE, "a", "/a")
        assert layout.activate(a, PanelId.SECONDARY) is False
        assert registry.active_id(PanelId.SECONDARY) is None
        assert registry.active_id(PanelId.PRIMARY) == TERMINAL_TAB_ID

    def test_activate_unknown_tab(self):
        _, layout = make_layout()
        assert layout.activate("tab-42") is False


class TestToggleSplit:
    def test_split_on_moves_focused_content_beside_terminal(self):
        registry, layout = make_layout()
        a = registry.create_tab(TabKind.FILE, "a", "/a")
        layout.activate(a)
        assert layout.toggle_split() is True
        assert registry.get(a).panel is PanelId.SECONDARY
        assert registry.active_id(PanelId.SECONDARY) == a
        assert registry.active_id(PanelId.PRIMARY) == TERMINAL_TAB_ID

    def test_split_on_with_terminal_focused_moves_nothing(self):
        registry, layout = make_layout()
        a = registry.create_tab(TabKind.FILE, "a", "/a")
        layout.toggle_split()
        assert registry.get(a).panel is PanelId.PRIMARY
        assert registry.active_id(PanelId.SECONDARY) is None

    def test_toggle_twice_restores_primary_and_empties_secondary(self):
        registry, layout = make_layout()
        a = registry.create_tab(TabKind.FILE, "a", "/a")
        registry.create_tab(TabKind.FILE, "b", "/b")
        layout.activate(a)

        layout.toggle_split()
        layout.toggle_split()

        assert layout.split_visible is False
        assert registry.tabs_in(PanelId.SECONDARY) == []
        assert registry.active_id(PanelId.SECONDARY) is None
        assert registry.active_id(PanelId.PRIMARY) == a

    def test_split_off_keeps_primary_choice_made_during_split(self):
        registry, layout = make_layout()
        a = registry.create_tab(TabKind.FILE, "a", "/a")
        b = registry.create_tab(TabKind.FILE, "b", "/b")
        layout.activate(a)
        layout.toggle_split()
        layout.activate(b)
        layout.toggle_split()
        assert registry.active_id(PanelId.PRIMARY) == b
        assert registry.get(a).panel is PanelId.PRIMARY

    def test_split_off_with_terminal_in_secondary(self):
        registry, layout = make_layout()
        layout.toggle_split()
        layout.relocate(TERMINAL_TAB_ID, PanelId.SECONDARY)
        assert registry.active_id(PanelId.PRIMARY) is None
        layout.toggle_split()
        assert registry.terminal.panel is PanelId.PRIMARY
        assert registry.active_id(PanelId.PRIMARY) == TERMINAL_TAB_ID


class TestRelocate:
    def test_relocate_refused_while_split_hidden(self):
        registry, layout = make_layout()
        a = registry.create_tab(TabKind.FILE, "a", "/a")
        assert layout.relocate(a, PanelId.SECONDARY) is False
        assert registry.get(a).panel is PanelId.PRIMARY

    def test_relocate_activates_in_target(self):
        registry, layout = make_layout()
        a = registry.create_tab(TabKind.FILE, "a", "/a")
        layout.toggle_split()
        assert layout.relocate(a, PanelId.SECONDARY)
        assert registry.active_id(PanelId.SECONDARY) == a

    def test_move_to_other_panel_round_trip(self):
        registry, layout = make_layout()
        a = registry.create_tab(TabKind.FILE, "a", "/a")
        layout.toggle_split()
        layout.move_to_other_panel(a)
        assert registry.get(a).panel is PanelId.SECONDARY
        layout.move_to_other_panel(a)
        assert registry.get(a).panel is PanelId.PRIMARY
        assert registry.active_id(PanelId.PRIMARY) == a
        assert registry.active_id(PanelId.SECONDARY) is None
