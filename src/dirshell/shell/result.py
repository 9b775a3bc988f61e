"""
Structured result of one command invocation.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class CommandResult:
    """
    What a command hands back to the transport.

    `output` is always present; the other fields are set only by commands
    that produce them.
    """

    output: str = ""
    cwd: Optional[str] = None
    """New current directory (set by `cd` and `pwd`)."""

    download_url: Optional[str] = None
    """Relative URL the client should fetch."""

    clipboard: Optional[str] = None
    """Text the client should copy to its clipboard."""

    html: Optional[str] = None
    """Pre-rendered markup, shown instead of output."""

    readme: Optional[str] = None
    """Documentation preview of the new directory."""

    doc_type: Optional[str] = None
    """Kind of readme: markdown, text, rst or nfo."""

    def to_dict(self) -> dict[str, Any]:
        """Render the JSON payload, omitting unset optional fields."""
        data: dict[str, Any] = {"output": self.output}
        if self.download_url:
            data["download"] = self.download_url
        if self.cwd:
            data["cwd"] = self.cwd
        if self.readme is not None:
            data["readme"] = self.readme
        if self.doc_type:
            data["docType"] = self.doc_type
        if self.clipboard:
            data["clipboard"] = self.clipboard
        if self.html:
            data["html"] = self.html
        return data
