"""
Process-level configuration for dirshell.

Settings come from keyword arguments, `DIRSHELL_*` environment variables,
or a YAML/JSON file, and are converted into the frozen SandboxConfig the
engine runs on.
"""

import json
import logging
from pathlib import Path
from typing import Union

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dirshell.filesystem.config import SandboxConfig

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ShellSettings(BaseSettings):
    """
    dirshell settings.

    Environment variables:
        DIRSHELL_ROOT - Directory to expose (default: current directory)
        DIRSHELL_CAT_MAX_BYTES - Largest file `cat` will print
        DIRSHELL_GREP_MAX_BYTES - Largest file `grep` will search
        DIRSHELL_SNIFF_BYTES - Bytes sampled to tell text from binary
        DIRSHELL_IGNORE_FILENAME - Name of per-directory ignore files
        DIRSHELL_COMPLETION_MAX_ITEMS - Most tab-completion candidates returned
        DIRSHELL_COLOR - ANSI colors in output (true/false)
        DIRSHELL_REJECT_SYMLINK_ESCAPES - Reject symlinks leaving the root
        DIRSHELL_LOG_LEVEL - Logging level

    Example:
        ```python
        settings = ShellSettings.from_file("~/.config/dirshell.yaml")
        interpreter = CommandInterpreter(settings.to_sandbox_config())
        ```
    """

    model_config = SettingsConfigDict(env_prefix="DIRSHELL_", extra="forbid")

    root: Path = Field(
        default=Path("."),
        description="Directory exposed to clients",
    )
    cat_max_bytes: int = Field(
        default=256 * 1024,
        ge=0,
        description="Maximum file size printable via `cat`",
    )
    grep_max_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=0,
        description="Maximum file size searched by `grep`",
    )
    sniff_bytes: int = Field(
        default=4096,
        ge=1,
        description="Prefix length sampled by the text classifier",
    )
    ignore_filename: str = Field(
        default=".dirshellignore",
        description="Per-directory ignore file name",
    )
    completion_max_items: int = Field(
        default=200,
        ge=1,
        description="Maximum number of tab-completion candidates",
    )
    color: bool = Field(
        default=True,
        description="Emit ANSI colors",
    )
    reject_symlink_escapes: bool = Field(
        default=False,
        description="Reject paths whose symlink target leaves the root",
    )
    static_prefix: str = Field(
        default="/api/static",
        description="URL namespace for shared single files",
    )
    download_endpoint: str = Field(
        default="/api/download",
        description="URL of the download endpoint",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)

    def to_sandbox_config(self) -> SandboxConfig:
        """
        Build the engine configuration.

        Raises:
            pydantic.ValidationError: If root is not an existing directory
        """
        return SandboxConfig(
            root=self.root,
            cat_max_bytes=self.cat_max_bytes,
            grep_max_bytes=self.grep_max_bytes,
            sniff_bytes=self.sniff_bytes,
            ignore_filename=self.ignore_filename,
            completion_max_items=self.completion_max_items,
            color=self.color,
            reject_symlink_escapes=self.reject_symlink_escapes,
            static_prefix=self.static_prefix,
            download_endpoint=self.download_endpoint,
        )

    @classmethod
    def from_file(cls, path: Union[str, Path], **overrides) -> "ShellSettings":
        """
        Load settings from a YAML or JSON file.

        File format (YAML):
            ```yaml
            root: /srv/public
            cat_max_bytes: 262144
            ignore_filename: .dirshellignore
            color: false
            ```

        Args:
            path: Path to the settings file
            **overrides: Values taking precedence over the file

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        path = Path(path).expanduser().resolve()

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        content = path.read_text()
        if path.suffix == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)

        data = dict(data or {})
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**data)

    def __str__(self) -> str:
        return f"ShellSettings(root={self.root}, cat_max={self.cat_max_bytes})"
