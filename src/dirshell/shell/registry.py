"""
Registry mapping command names and aliases to handler functions.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional

from dirshell.filesystem.exceptions import CommandNotFoundError
from dirshell.shell.result import CommandResult
from dirshell.shell.session import Session

if TYPE_CHECKING:
    from dirshell.filesystem.archive import ArchiveBuilder
    from dirshell.filesystem.completion import PathCompleter
    from dirshell.filesystem.config import SandboxConfig
    from dirshell.filesystem.ignore import IgnoreMatcher
    from dirshell.filesystem.sandbox import PathSandbox
    from dirshell.filesystem.search import SearchEngine
    from dirshell.filesystem.walker import DirectoryWalker
    from dirshell.shell.formatting import Painter

DEFAULT_HOST = "localhost:8080"


@dataclass(frozen=True)
class RequestInfo:
    """The parts of the inbound request that commands may use."""

    host: str = DEFAULT_HOST
    scheme: str = "http"
    remote_addr: Optional[str] = None

    @classmethod
    def from_request(
        cls,
        host: Optional[str],
        tls: bool = False,
        forwarded_proto: Optional[str] = None,
        remote_addr: Optional[str] = None,
    ) -> "RequestInfo":
        """Build from transport values; https when TLS or forwarded as such."""
        scheme = "https" if tls or forwarded_proto == "https" else "http"
        return cls(host=host or DEFAULT_HOST, scheme=scheme, remote_addr=remote_addr)


@dataclass
class CommandContext:
    """Collaborators handed to every command handler."""

    config: "SandboxConfig"
    sandbox: "PathSandbox"
    ignore: "IgnoreMatcher"
    walker: "DirectoryWalker"
    search: "SearchEngine"
    archive: "ArchiveBuilder"
    completer: "PathCompleter"
    painter: "Painter"
    registry: "CommandRegistry"
    request: RequestInfo = field(default_factory=RequestInfo)


Handler = Callable[[list[str], Session, CommandContext], CommandResult]


@dataclass(frozen=True)
class Command:
    """A registered command."""

    name: str
    handler: Handler
    aliases: tuple[str, ...] = ()
    usage: str = ""
    summary: str = ""


class CommandRegistry:
    """
    Maps command names and aliases to handlers.

    Usage:
        registry = CommandRegistry()

        @registry.register("pwd", usage="pwd", summary="print working directory")
        def pwd(args, session, ctx):
            return CommandResult(output=session.cwd)

        registry.get("pwd").handler([], session, ctx)
    """

    def __init__(self) -> None:
        self._commands: list[Command] = []
        self._by_name: dict[str, Command] = {}

    def register(
        self,
        name: str,
        *aliases: str,
        usage: str = "",
        summary: str = "",
    ) -> Callable[[Handler], Handler]:
        """Decorator registering a handler under name and aliases."""

        def decorator(handler: Handler) -> Handler:
            self.add(Command(name, handler, tuple(aliases), usage or name, summary))
            return handler

        return decorator

    def add(self, command: Command) -> None:
        """
        Register a command.

        Raises:
            ValueError: If the name or an alias is already taken
        """
        for key in (command.name, *command.aliases):
            if key in self._by_name:
                raise ValueError(f"Command name already registered: {key}")
        self._commands.append(command)
        for key in (command.name, *command.aliases):
            self._by_name[key] = command

    def get(self, name: str) -> Command:
        """
        Look up a command by name or alias.

        Raises:
            CommandNotFoundError: If nothing is registered under name
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise CommandNotFoundError(name)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def commands(self) -> list[Command]:
        """Registered commands in registration order."""
        return list(self._commands)
