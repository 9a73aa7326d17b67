"""Workspace state engine: tabs, panels, file tree and the facade over them."""

from termdesk.workspace.file_tree import FileTreeCache, TreeNode
from termdesk.workspace.layout import PanelLayout
from termdesk.workspace.tabs import TERMINAL_TAB_ID, PanelId, PanelState, Tab, TabContent, TabKind, TabRegistry
from termdesk.workspace.workspace import Workspace

__all__ = [
    "FileTreeCache",
    "PanelId",
    "PanelLayout",
    "PanelState",
    "TERMINAL_TAB_ID",
    "Tab",
    "TabContent",
    "TabKind",
    "TabRegistry",
    "TreeNode",
    "Workspace",
]
