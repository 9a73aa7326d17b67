"""Best-effort hand-off to the native desktop shell."""

from __future__ import annotations

import os
import subprocess
import sys
import webbrowser
from pathlib import Path

from loguru import logger


class ExternalShell:
    """Open paths and URLs outside the workspace. Fire-and-forget."""

    def open_path(self, path: str) -> None:
        """Open a file or folder in its native application."""
        try:
            if os.name == "nt":
                os.startfile(path)  # type: ignore[attr-defined]
            elif sys.platform == "darwin":
                subprocess.Popen(["open", path])
            else:
                subprocess.Popen(["xdg-open", path])
        except OSError as exc:
            logger.warning(f"[shell] Cannot open {path}: {exc}")

    def reveal(self, path: str) -> None:
        """Show ``path`` selected in the file manager."""
        try:
            if os.name == "nt":
                subprocess.Popen(["explorer", "/select,", path])
            elif sys.platform == "darwin":
                subprocess.Popen(["open", "-R", path])
            else:
                subprocess.Popen(["xdg-open", str(Path(path).parent)])
        except OSError as exc:
            logger.warning(f"[shell] Cannot reveal {path}: {exc}")

    def open_url(self, url: str) -> None:
        """Open ``url`` in the default browser."""
        if not webbrowser.open(url):
            logger.warning(f"[shell] No browser available for {url}")
