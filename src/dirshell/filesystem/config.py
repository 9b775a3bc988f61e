"""
Configuration for the sandboxed filesystem engine.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SandboxConfig(BaseModel):
    """
    Read-only configuration shared by every command invocation.

    Set once at startup; instances are frozen so concurrent requests
    can share one object.

    Usage:
        config = SandboxConfig(root=Path("/srv/public"), cat_max_bytes=65536)
        sandbox = PathSandbox(config)
    """

    model_config = ConfigDict(frozen=True)

    root: Path = Field(
        description="Directory exposed to clients (resolved to an absolute path)",
    )

    cat_max_bytes: int = Field(
        default=256 * 1024,
        ge=0,
        description="Maximum file size printable via `cat`",
    )

    grep_max_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=0,
        description="Files above this size are reported as too large by `grep`",
    )

    sniff_bytes: int = Field(
        default=4096,
        ge=1,
        description="Prefix length sampled by the text classifier",
    )

    ignore_filename: str = Field(
        default=".dirshellignore",
        min_length=1,
        description="Per-directory file holding ignore patterns",
    )

    completion_max_items: int = Field(
        default=200,
        ge=1,
        description="Maximum number of tab-completion candidates",
    )

    static_prefix: str = Field(
        default="/api/static",
        description="URL namespace under which single files are served",
    )

    download_endpoint: str = Field(
        default="/api/download",
        description="URL of the download endpoint",
    )

    color: bool = Field(
        default=True,
        description="Emit ANSI colors in command output",
    )

    reject_symlink_escapes: bool = Field(
        default=False,
        description="Also reject paths whose symlink-resolved target leaves the root",
    )

    @field_validator("root", mode="before")
    @classmethod
    def resolve_root(cls, v):
        """Resolve the root to an absolute, existing directory."""
        root = Path(v).expanduser().resolve()
        if not root.is_dir():
            raise ValueError(f"root is not a directory: {root}")
        return root

    @field_validator("ignore_filename")
    @classmethod
    def plain_filename(cls, v: str) -> str:
        """The ignore file is looked up by name in every directory."""
        if "/" in v or v in (".", ".."):
            raise ValueError(f"ignore_filename must be a plain file name: {v!r}")
        return v

    @field_validator("static_prefix", "download_endpoint")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return "/" + v.strip("/")

    def __repr__(self) -> str:
        return (
            f"SandboxConfig("
            f"root={str(self.root)!r}, "
            f"cat_max={self.cat_max_bytes}, "
            f"ignore_file={self.ignore_filename!r})"
        )
