"""Copy dropped or picked files into the working directory."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from loguru import logger


@dataclass(frozen=True)
class CopyResult:
    """Outcome for one source path."""

    name: str
    success: bool
    error: str | None = None


class FileCopier:
    """Copies files and directories; one failure never aborts the batch."""

    def copy(self, sources: list[str], dest_dir: str) -> list[CopyResult]:
        dest = Path(dest_dir)
        results: list[CopyResult] = []
        for src_str in sources:
            src = Path(src_str)
            try:
                if src.is_dir():
                    shutil.copytree(src, dest / src.name, dirs_exist_ok=True)
                else:
                    shutil.copy2(src, dest / src.name)
                results.append(CopyResult(name=src.name, success=True))
            except (OSError, shutil.Error) as exc:
                logger.warning(f"[copy] Failed to copy {src} -> {dest}: {exc}")
                results.append(CopyResult(name=src.name, success=False, error=str(exc)))
        return results


def summarize(results: list[CopyResult], dest_name: str) -> str:
    """Status line for a finished copy batch."""
    copied = sum(1 for r in results if r.success)
    failed = len(results) - copied
    if copied and not failed:
        return f"Copied {copied} item(s) → {dest_name}/"
    if copied and failed:
        return f"Copied {copied}, failed to copy {failed}"
    if failed:
        return f"Failed to copy {failed} item(s)"
    return "Nothing to copy"
