"""
Shell-like command surface over the sandboxed filesystem.
"""

from dirshell.shell.commands import default_registry
from dirshell.shell.formatting import Painter, format_human_size, format_long
from dirshell.shell.interpreter import CommandInterpreter
from dirshell.shell.registry import Command, CommandContext, CommandRegistry, RequestInfo
from dirshell.shell.result import CommandResult
from dirshell.shell.session import Session, SessionStore, new_session_id
from dirshell.shell.tokenizer import split_command_line

__all__ = [
    "CommandInterpreter",
    "CommandResult",
    "CommandRegistry",
    "Command",
    "CommandContext",
    "RequestInfo",
    "default_registry",
    "Session",
    "SessionStore",
    "new_session_id",
    "split_command_line",
    "Painter",
    "format_human_size",
    "format_long",
]
