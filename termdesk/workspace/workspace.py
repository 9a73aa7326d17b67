"""Workspace facade: the action entry points a host UI drives.

Owns the tab registry, panel layout, session controller, file tree and the
working-directory value. All mutation goes through the methods here; results
of out-of-band work (listing, rendering, copying, spawning) are awaited on the
caller's event loop and re-checked before they touch state.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from urllib.parse import urlparse

from loguru import logger

from termdesk.config.schema import Config
from termdesk.documents.renderers import DocumentRenderer
from termdesk.errors import ConversionError, SpawnError, ValidationError
from termdesk.events import (
    TABS_CHANGED,
    TASK_PROGRESS,
    TERMINAL_ATTENTION_CLEARED,
    TERMINAL_EXITED,
    TERMINAL_INPUT_NEEDED,
    TREE_CHANGED,
    WORKSPACE_PROMPT,
    EventHub,
    TabsChanged,
    TaskProgress,
    TreeChanged,
    UserPrompt,
)
from termdesk.files.copier import CopyResult, FileCopier, summarize
from termdesk.files.listing import DirectoryLister, LocalDirectoryLister
from termdesk.files.shell import ExternalShell
from termdesk.runtime.preflight import build_env
from termdesk.runtime.process import ProcessHost, PtyProcessHost
from termdesk.session.controller import RUNNING_STATES, SessionController
from termdesk.session.recent_store import RecentSession, RecentSessionStore
from termdesk.workspace.file_tree import FileTreeCache, TreeNode
from termdesk.workspace.layout import PanelLayout
from termdesk.workspace.tabs import TERMINAL_TAB_ID, PanelId, TabContent, TabKind, TabRegistry


def url_title(url: str) -> str:
    """Browser tab title: the URL's host name."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        host = None
    return host or "Browser"


class Workspace:
    """One terminal session, any number of file/browser tabs, two panels."""

    def __init__(
        self,
        config: Config | None = None,
        *,
        workdir: str | None = None,
        hub: EventHub | None = None,
        host: ProcessHost | None = None,
        lister: DirectoryLister | None = None,
        copier: FileCopier | None = None,
        renderer: DocumentRenderer | None = None,
        shell: ExternalShell | None = None,
        recent: RecentSessionStore | None = None,
    ) -> None:
        self.config = config or Config()
        session_cfg = self.config.session

        self.hub = hub or EventHub()
        self.tabs = TabRegistry()
        self.layout = PanelLayout(self.tabs)
        self.recent = recent or RecentSessionStore(self.config.state_path)
        self.session = SessionController(
            host or PtyProcessHost(),
            self.hub,
            self.recent,
            command=session_cfg.command,
            args=session_cfg.args,
            env=build_env(session_cfg.extra_paths, session_cfg.term),
            cols=session_cfg.cols,
            rows=session_cfg.rows,
        )
        self.copier = copier or FileCopier()
        self.renderer = renderer or DocumentRenderer()
        self.shell = shell or ExternalShell()

        self._workdir = str(self.config.default_workdir) if workdir is None else workdir
        self.tree = FileTreeCache(lister or LocalDirectoryLister(), root=self._workdir)

        self.hub.subscribe(TERMINAL_INPUT_NEEDED, self._on_input_needed)
        self.hub.subscribe(TERMINAL_ATTENTION_CLEARED, self._on_attention_cleared)
        self.hub.subscribe(TERMINAL_EXITED, self._on_attention_cleared)

    @property
    def workdir(self) -> str:
        return self._workdir

    # ------------------------------------------------------------------ #
    # Working directory & file tree                                        #
    # ------------------------------------------------------------------ #

    async def select_workdir(self, path: str) -> list[TreeNode]:
        """Make ``path`` the working directory and tree root."""
        self._workdir = path
        self.tree.set_root(path)
        logger.info(f"[workspace] Working directory: {path}")
        return await self.refresh_tree()

    async def set_root(self, path: str) -> list[TreeNode]:
        """Directory context action "set as root"."""
        return await self.select_workdir(path)

    async def refresh_tree(self) -> list[TreeNode]:
        nodes = await self.tree.refresh()
        self.hub.publish(TREE_CHANGED, TreeChanged(self.tree.root))
        return nodes

    async def toggle_directory(self, path: str) -> bool:
        expanded = await self.tree.toggle(path)
        self.hub.publish(TREE_CHANGED, TreeChanged(self.tree.root))
        return expanded

    async def expand_all(self, path: str) -> None:
        await self.tree.expand_all(path)
        self.hub.publish(TREE_CHANGED, TreeChanged(self.tree.root))

    async def copy_files(self, sources: list[str]) -> list[CopyResult]:
        """Copy files into the working directory, then refresh the tree."""
        if not self._workdir:
            self._prompt("Please select a working directory first")
            return []
        results = await asyncio.to_thread(self.copier.copy, sources, self._workdir)
        succeeded = [r.name for r in results if r.success]
        failed = [f"{r.name} ({r.error})" for r in results if not r.success]
        if succeeded:
            logger.info(f"[workspace] Copied: {', '.join(succeeded)}")
        if failed:
            logger.warning(f"[workspace] Failed: {', '.join(failed)}")
        self.hub.publish(TASK_PROGRESS, TaskProgress("copy", summarize(results, Path(self._workdir).name)))
        await self.refresh_tree()
        return results

    # ------------------------------------------------------------------ #
    # Session                                                              #
    # ------------------------------------------------------------------ #

    async def start_session(self, cols: int | None = None, rows: int | None = None) -> bool:
        """Start the session tool in the working directory."""
        try:
            await self.session.start_session(self._workdir, cols, rows)
        except ValidationError as exc:
            logger.warning(f"[workspace] {exc}")
            self._prompt(str(exc))
            return False
        except SpawnError:
            return False
        self.layout.activate(TERMINAL_TAB_ID)
        self._tabs_changed("session")
        return True

    async def start_session_in(self, path: str, cols: int | None = None, rows: int | None = None) -> bool:
        """Recent-session entry: switch root to ``path`` and start there."""
        await self.select_workdir(path)
        return await self.start_session(cols, rows)

    def stop_session(self) -> bool:
        return self.session.stop()

    def send_keys(self, text: str) -> bool:
        return self.session.send_keys(text)

    def resize(self, cols: int, rows: int) -> bool:
        return self.session.resize(cols, rows)

    def notify_input_needed(self) -> bool:
        return self.session.notify_input_needed()

    def add_file_to_context(self, path: str) -> bool:
        """Type ``@<name>`` into the running session."""
        if self.session.state not in RUNNING_STATES:
            logger.info("[workspace] Session not active, cannot add file to context")
            return False
        return self.send_keys(f"@{Path(path).name} ")

    def recent_sessions(self) -> list[RecentSession]:
        return self.recent.load()

    # ------------------------------------------------------------------ #
    # Tabs & panels                                                        #
    # ------------------------------------------------------------------ #

    async def open_file(self, path: str, in_side_panel: bool = False) -> str:
        """Open ``path`` in a file tab, reusing an existing tab for the same path."""
        existing = self.tabs.find_tab(TabKind.FILE, path)
        if existing is not None:
            self._place(existing, in_side_panel)
            return existing

        tab_id = self.tabs.create_tab(TabKind.FILE, Path(path).name, payload=path)
        tab = self.tabs.get(tab_id)
        tab.content = TabContent(loading=True)
        self._place(tab_id, in_side_panel)

        try:
            document = await asyncio.to_thread(self.renderer.render, path)
            content = TabContent(document=document)
        except ConversionError as exc:
            logger.warning(f"[workspace] Cannot render {path}: {exc}")
            content = TabContent(error=str(exc))

        tab = self.tabs.get(tab_id)
        if tab is None:
            logger.debug(f"[workspace] {tab_id} closed before {path} finished rendering")
            return tab_id
        tab.content = content
        self._tabs_changed("content")
        return tab_id

    def open_url(self, url: str, in_side_panel: bool = False) -> str:
        """Open ``url`` in a browser tab, reusing an existing tab for the same URL."""
        existing = self.tabs.find_tab(TabKind.BROWSER, url)
        if existing is not None:
            self._place(existing, in_side_panel)
            return existing
        tab_id = self.tabs.create_tab(TabKind.BROWSER, url_title(url), payload=url)
        self._place(tab_id, in_side_panel)
        return tab_id

    def activate_tab(self, tab_id: str) -> bool:
        changed = self.layout.activate(tab_id)
        if changed:
            self._tabs_changed("activate")
        return changed

    def close_tab(self, tab_id: str) -> bool:
        closed = self.tabs.close_tab(tab_id)
        if closed:
            self._tabs_changed("close")
        return closed

    def move_tab(self, tab_id: str, target: PanelId) -> bool:
        """Drag-and-drop move onto ``target``'s tab bar."""
        moved = self.layout.relocate(tab_id, target)
        if moved:
            self._tabs_changed("move")
        return moved

    def move_tab_to_other_panel(self, tab_id: str) -> bool:
        moved = self.layout.move_to_other_panel(tab_id)
        if moved:
            self._tabs_changed("move")
        return moved

    def toggle_split(self) -> bool:
        visible = self.layout.toggle_split()
        self._tabs_changed("split")
        return visible

    # ------------------------------------------------------------------ #
    # Desktop shell                                                        #
    # ------------------------------------------------------------------ #

    def open_external(self, path: str) -> None:
        self.shell.open_path(path)

    def reveal(self, path: str) -> None:
        self.shell.reveal(path)

    def open_url_external(self, url: str) -> None:
        self.shell.open_url(url)

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _place(self, tab_id: str, in_side_panel: bool) -> None:
        if in_side_panel and self.layout.split_visible:
            if not self.tabs.move_tab(tab_id, PanelId.SECONDARY, activate=True):
                self.layout.activate(tab_id)
        else:
            self.layout.activate(tab_id)
        self._tabs_changed("open")

    def _prompt(self, text: str) -> None:
        self.hub.publish(WORKSPACE_PROMPT, UserPrompt(text))

    def _tabs_changed(self, reason: str) -> None:
        self.hub.publish(TABS_CHANGED, TabsChanged(reason))

    def _on_input_needed(self, _payload: object) -> None:
        self.tabs.terminal.needs_attention = True
        self._tabs_changed("attention")

    def _on_attention_cleared(self, _payload: object) -> None:
        if self.tabs.terminal.needs_attention:
            self.tabs.terminal.needs_attention = False
            self._tabs_changed("attention")
