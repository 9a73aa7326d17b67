"""Lazily materialized directory tree with expand/collapse state.

Only directories in the expanded set have their children listed; collapsing
drops the listing, so re-expanding always fetches fresh. Listings run in a
worker thread. A result is applied only if the root is unchanged and, for a
subdirectory, the path is still expanded and no newer request for it was
issued meanwhile.
"""

from __future__ import annotations

import asyncio
import itertools
import os
from dataclasses import dataclass
from typing import Iterator

from loguru import logger

from termdesk.files.listing import DirectoryEntry, DirectoryLister, visible_entries


@dataclass
class TreeNode:
    entry: DirectoryEntry
    depth: int = 0
    children: list["TreeNode"] | None = None

    @property
    def path(self) -> str:
        return self.entry.path

    @property
    def is_expanded(self) -> bool:
        return self.children is not None


class FileTreeCache:
    """Expansion state plus the currently materialized tree for one root."""

    def __init__(self, lister: DirectoryLister, root: str = "") -> None:
        self._lister = lister
        self._root = root
        self._expanded: set[str] = set()
        self._generation = 0
        self._tickets = itertools.count(1)
        self._pending: dict[str, int] = {}
        self._detached: dict[str, TreeNode] = {}
        self.nodes: list[TreeNode] = []

    @property
    def root(self) -> str:
        return self._root

    @property
    def expanded(self) -> frozenset[str]:
        return frozenset(self._expanded)

    def is_expanded(self, path: str) -> bool:
        return path in self._expanded

    def set_root(self, path: str) -> None:
        """Switch to a new root; expansion state does not carry over."""
        self._root = path
        self._expanded.clear()
        self._pending.clear()
        self._detached.clear()
        self._generation += 1
        self.nodes = []
        logger.debug(f"[tree] Root set to {path}")

    async def refresh(self) -> list[TreeNode]:
        """Re-list the root and re-expand everything still expanded."""
        generation = self._generation
        root = self._root
        if not root:
            self.nodes = []
            return self.nodes
        entries = await self._list(root)
        if generation != self._generation:
            logger.debug(f"[tree] Dropping stale root listing for {root}")
            return self.nodes
        nodes = [TreeNode(entry=e, depth=0) for e in entries]
        await self._materialize(nodes, generation)
        if generation == self._generation:
            self.nodes = nodes
        return self.nodes

    async def toggle(self, path: str) -> bool:
        """Collapse ``path`` if expanded, otherwise expand it. Returns the new state."""
        if path in self._expanded:
            self._expanded.discard(path)
            self._pending.pop(path, None)
            node = self.find(path)
            if node is not None:
                node.children = None
            self._detached.pop(path, None)
            return False

        self._expanded.add(path)
        await self._load_children(self._node_for(path), self._generation)
        return True

    async def expand_all(self, path: str, _visited: set[str] | None = None) -> None:
        """Expand ``path`` and every directory below it, depth-first.

        No depth limit; directories already visited through another link are
        skipped so symlink cycles terminate.
        """
        visited = _visited if _visited is not None else set()
        real = os.path.realpath(path)
        if real in visited:
            return
        visited.add(real)

        if path not in self._expanded:
            await self.toggle(path)
        node = self.find(path)
        if node is None or node.children is None:
            # expanded, but hidden under a collapsed ancestor
            node = self._node_for(path)
            await self._load_children(node, self._generation)
        if node.children is None:
            return
        for child in list(node.children):
            if child.entry.is_directory:
                await self.expand_all(child.path, visited)

    def find(self, path: str) -> TreeNode | None:
        for node in _depth_first([*self.nodes, *self._detached.values()]):
            if node.path == path:
                return node
        return None

    def children(self, path: str) -> list[DirectoryEntry] | None:
        node = self.find(path)
        if node is None or node.children is None:
            return None
        return [child.entry for child in node.children]

    def walk(self) -> Iterator[TreeNode]:
        """Visible rows in display order."""
        return _depth_first(self.nodes)

    def _node_for(self, path: str) -> TreeNode:
        """Materialized node for ``path``, or a detached one outside the rendered tree."""
        node = self.find(path)
        if node is None:
            node = TreeNode(entry=DirectoryEntry(name=os.path.basename(path) or path, path=path, is_directory=True))
            self._detached[path] = node
        return node

    async def _materialize(self, nodes: list[TreeNode], generation: int) -> None:
        for node in nodes:
            if node.entry.is_directory and node.path in self._expanded:
                await self._load_children(node, generation)

    async def _load_children(self, node: TreeNode, generation: int) -> None:
        path = node.path
        ticket = next(self._tickets)
        self._pending[path] = ticket
        entries = await self._list(path)
        if (
            generation != self._generation
            or path not in self._expanded
            or self._pending.get(path) != ticket
        ):
            logger.debug(f"[tree] Dropping stale listing for {path}")
            return
        del self._pending[path]
        node.children = [TreeNode(entry=e, depth=node.depth + 1) for e in entries]
        await self._materialize(node.children, generation)

    async def _list(self, path: str) -> list[DirectoryEntry]:
        try:
            raw = await asyncio.to_thread(self._lister.list, path)
        except OSError as exc:
            logger.warning(f"[tree] Cannot list {path}: {exc}")
            return []
        return visible_entries(raw)


def _depth_first(roots: list[TreeNode]) -> Iterator[TreeNode]:
    stack = list(reversed(roots))
    while stack:
        node = stack.pop()
        yield node
        if node.children:
            stack.extend(reversed(node.children))
