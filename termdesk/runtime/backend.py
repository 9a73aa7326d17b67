"""Platform PTY backends for the session process.

Every backend speaks text: output is decoded as UTF-8 with undecodable bytes
replaced, input is encoded the same way.
"""

from __future__ import annotations

import codecs
import os
import subprocess
from typing import Protocol

from loguru import logger


class PTYBackend(Protocol):
    """What :class:`~termdesk.runtime.process.ProcessHandle` needs from a PTY."""

    pid: int | None

    def read(self) -> str:
        """Next output chunk, or "" if nothing arrived within a short wait."""

    def write(self, data: str) -> None: ...

    def resize(self, cols: int, rows: int) -> None: ...

    def is_alive(self) -> bool: ...

    def exit_code(self) -> int | None:
        """Exit status once terminated; negative signal number if killed."""

    def close(self) -> None:
        """Terminate the child and release the terminal."""


class PexpectPty:
    """POSIX pseudo-terminal via ``pexpect.spawn``."""

    read_timeout = 0.05

    def __init__(
        self,
        argv: list[str],
        cols: int,
        rows: int,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        import pexpect

        self._errors = (pexpect.TIMEOUT, pexpect.EOF)
        self._child = pexpect.spawn(
            argv[0],
            args=argv[1:],
            cwd=cwd,
            env=env,
            dimensions=(rows, cols),
            echo=False,
            encoding="utf-8",
            codec_errors="replace",
        )
        self.pid: int | None = self._child.pid

    def read(self) -> str:
        try:
            return self._child.read_nonblocking(size=4096, timeout=self.read_timeout)
        except self._errors:
            return ""

    def write(self, data: str) -> None:
        self._child.send(data)

    def resize(self, cols: int, rows: int) -> None:
        self._child.setwinsize(rows, cols)

    def is_alive(self) -> bool:
        return self._child.isalive()

    def exit_code(self) -> int | None:
        child = self._child
        if child.isalive():
            return None
        if child.signalstatus is not None:
            return -child.signalstatus
        return child.exitstatus

    def close(self) -> None:
        self._child.close(force=True)


class ConPty:
    """Windows pseudo-console via pywinpty."""

    def __init__(
        self,
        argv: list[str],
        cols: int,
        rows: int,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        from winpty import PtyProcess

        child_env = dict(os.environ if env is None else env)
        child_env.setdefault("COLORTERM", "truecolor")
        self._child = PtyProcess.spawn(
            subprocess.list2cmdline(argv),
            cwd=cwd,
            env=child_env,
            dimensions=(rows, cols),
        )
        self.pid: int | None = getattr(self._child, "pid", None)

    def read(self) -> str:
        try:
            return self._child.read(4096)
        except EOFError:
            return ""

    def write(self, data: str) -> None:
        self._child.write(data)

    def resize(self, cols: int, rows: int) -> None:
        self._child.setwinsize(rows, cols)

    def is_alive(self) -> bool:
        return bool(self._child.isalive())

    def exit_code(self) -> int | None:
        if self._child.isalive():
            return None
        return getattr(self._child, "exitstatus", None)

    def close(self) -> None:
        try:
            self._child.close(force=True)
        except OSError as exc:
            logger.debug(f"[pty] ConPTY close failed: {exc}")
        if self.pid is not None:
            # the pseudo-console does not take the tool's own children with it
            subprocess.run(
                ["taskkill", "/F", "/T", "/PID", str(self.pid)],
                capture_output=True,
                timeout=3,
                check=False,
            )


class PipeFallback:
    """Plain pipes for hosts without a usable PTY. Resize is a no-op."""

    def __init__(
        self,
        argv: list[str],
        cols: int,
        rows: int,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        del cols, rows
        self._child = subprocess.Popen(
            argv,
            cwd=cwd,
            env=env,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            bufsize=0,
        )
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.pid: int | None = self._child.pid

    def read(self) -> str:
        stdout = self._child.stdout
        if stdout is None:
            return ""
        chunk = os.read(stdout.fileno(), 4096)
        return self._decoder.decode(chunk, final=not chunk)

    def write(self, data: str) -> None:
        stdin = self._child.stdin
        if stdin is not None:
            stdin.write(data.encode("utf-8"))

    def resize(self, cols: int, rows: int) -> None:
        del cols, rows

    def is_alive(self) -> bool:
        return self._child.poll() is None

    def exit_code(self) -> int | None:
        return self._child.poll()

    def close(self) -> None:
        if self._child.poll() is None:
            self._child.kill()


def build_backend(
    argv: list[str],
    cols: int = 80,
    rows: int = 24,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
) -> PTYBackend:
    """Spawn ``argv`` on the best backend this platform offers."""
    label = " ".join(argv)[:60]
    if os.name != "nt":
        logger.info(f"[pty] pexpect backend for: {label}")
        return PexpectPty(argv, cols, rows, cwd=cwd, env=env)
    try:
        backend: PTYBackend = ConPty(argv, cols, rows, cwd=cwd, env=env)
    except (ImportError, OSError, RuntimeError) as exc:
        logger.warning(f"[pty] ConPTY unavailable ({exc}); using plain pipes")
        return PipeFallback(argv, cols, rows, cwd=cwd, env=env)
    logger.info(f"[pty] ConPTY backend for: {label}")
    return backend
