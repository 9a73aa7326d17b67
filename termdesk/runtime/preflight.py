"""Tool discovery and child-process environment."""

from __future__ import annotations

import os
import shlex
import shutil
from pathlib import Path
from typing import Iterable, Mapping


def build_env(
    extra_paths: Iterable[str] = (),
    term: str = "xterm-256color",
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Return a copy of the environment with common tool locations on PATH."""
    env = dict(os.environ if base is None else base)
    current = env.get("PATH", "")
    known = set(current.split(os.pathsep)) if current else set()
    prefix: list[str] = []
    for raw in extra_paths:
        entry = str(Path(raw).expanduser())
        if entry and entry not in known and entry not in prefix:
            prefix.append(entry)
    env["PATH"] = os.pathsep.join([*prefix, current]) if current else os.pathsep.join(prefix)
    env["TERM"] = term
    return env


def split_command(command: str) -> list[str]:
    """Tokens of a configured command line; the first one is the executable."""
    try:
        return shlex.split(command or "", posix=os.name != "nt")
    except ValueError:
        return (command or "").split()


def resolve_command(command: str, env: Mapping[str, str] | None = None) -> str | None:
    """Resolve the executable of ``command`` on the (augmented) PATH."""
    tokens = split_command(command)
    if not tokens:
        return None
    token = tokens[0]
    path = (env or os.environ).get("PATH")
    return shutil.which(token, path=path)


def command_exists(command: str, env: Mapping[str, str] | None = None) -> bool:
    return resolve_command(command, env) is not None
