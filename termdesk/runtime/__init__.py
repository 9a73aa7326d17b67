"""PTY-level runtime for the session process."""

from .backend import PTYBackend, build_backend
from .preflight import build_env, command_exists, resolve_command, split_command
from .process import ProcessHandle, ProcessHost, PtyProcessHost

__all__ = [
    "PTYBackend",
    "ProcessHandle",
    "ProcessHost",
    "PtyProcessHost",
    "build_backend",
    "build_env",
    "command_exists",
    "resolve_command",
    "split_command",
]
