"""Configuration schema for termdesk."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings


class SessionConfig(BaseModel):
    """Interactive tool launched in the terminal tab."""

    command: str = "claude"
    args: list[str] = Field(default_factory=list)
    cols: int = 80
    rows: int = 24
    term: str = "xterm-256color"
    extra_paths: list[str] = Field(
        default_factory=lambda: [
            "/opt/homebrew/bin",
            "/usr/local/bin",
            "/usr/local/nodejs/bin",
            "~/.npm-global/bin",
            "/usr/bin",
        ]
    )
    poll_interval_s: float = 0.02


class WorkspaceConfig(BaseModel):
    """Workspace defaults."""

    default_workdir: str = "~"
    state_file: str = "~/.termdesk/state.json"


class LoggingConfig(BaseModel):
    """Loguru sink settings."""

    level: str = "INFO"
    file: str = ""
    rotation: str = "5 MB"


class Config(BaseSettings):
    """Root configuration for termdesk."""

    session: SessionConfig = Field(default_factory=SessionConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def default_workdir(self) -> Path:
        """Get expanded default working directory."""
        return Path(self.workspace.default_workdir).expanduser()

    @property
    def state_path(self) -> Path:
        """Get expanded path of the persisted state file."""
        return Path(self.workspace.state_file).expanduser()

    model_config = ConfigDict(
        env_prefix="TERMDESK_",
        env_nested_delimiter="__",
        extra="ignore",
    )
