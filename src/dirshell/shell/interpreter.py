"""
Command interpreter: tokenizes a command line and dispatches it.
"""

import logging
from typing import Any, Optional

from dirshell.filesystem.archive import ArchiveBuilder
from dirshell.filesystem.completion import CompletionItem, PathCompleter
from dirshell.filesystem.config import SandboxConfig
from dirshell.filesystem.docs import read_doc_file
from dirshell.filesystem.exceptions import CommandNotFoundError, FileSystemError
from dirshell.filesystem.ignore import IgnoreMatcher
from dirshell.filesystem.sandbox import PathSandbox
from dirshell.filesystem.search import SearchEngine
from dirshell.filesystem.walker import DirectoryWalker
from dirshell.shell.commands import default_registry
from dirshell.shell.formatting import Painter
from dirshell.shell.registry import CommandContext, CommandRegistry, RequestInfo
from dirshell.shell.result import CommandResult
from dirshell.shell.session import Session
from dirshell.shell.tokenizer import split_command_line

logger = logging.getLogger(__name__)


class CommandInterpreter:
    """
    Runs shell-like commands against the sandbox on behalf of a session.

    Errors never escape `execute`: filesystem errors become the command's
    output, anything unexpected is logged and reported as an internal error.

    Usage:
        interpreter = CommandInterpreter(SandboxConfig(root="/srv/public"))
        sessions = SessionStore()
        session, _ = sessions.get_or_create(None)

        result = interpreter.execute("ls -l", session)
        print(result.output)
    """

    def __init__(
        self,
        config: SandboxConfig,
        registry: Optional[CommandRegistry] = None,
    ):
        """
        Initialize the interpreter.

        Args:
            config: Sandbox configuration
            registry: Command table (default: the built-in commands)
        """
        self.config = config
        self.registry = registry or default_registry
        self.sandbox = PathSandbox(config)
        self.ignore = IgnoreMatcher(config.root, config.ignore_filename)
        self.walker = DirectoryWalker(self.ignore)
        self.search = SearchEngine(self.sandbox, self.ignore, self.walker)
        self.archive = ArchiveBuilder(self.sandbox, self.ignore, self.walker)
        self.completer = PathCompleter(self.sandbox, self.walker)
        self.painter = Painter(enabled=config.color)

    def context(self, request: Optional[RequestInfo] = None) -> CommandContext:
        """Collaborators for one invocation."""
        return CommandContext(
            config=self.config,
            sandbox=self.sandbox,
            ignore=self.ignore,
            walker=self.walker,
            search=self.search,
            archive=self.archive,
            completer=self.completer,
            painter=self.painter,
            registry=self.registry,
            request=request or RequestInfo(),
        )

    def execute(
        self,
        line: str,
        session: Session,
        request: Optional[RequestInfo] = None,
    ) -> CommandResult:
        """
        Execute one command line.

        Args:
            line: Raw command line as typed by the client
            session: Session whose cwd the command runs in
            request: Host/scheme of the inbound request (for URLs)

        Returns:
            The command's result; failures are reported in `output`
        """
        args = split_command_line(line.strip())
        if not args:
            return CommandResult()

        name, argv = args[0], args[1:]
        try:
            command = self.registry.get(name)
        except CommandNotFoundError:
            logger.debug(f"Unknown command {name!r}")
            return CommandResult(output=f"sh: {name}: command not found")

        try:
            return command.handler(argv, session, self.context(request))
        except FileSystemError as e:
            logger.info(f"{command.name} failed in {session.cwd}: {e}")
            return CommandResult(output=f"{command.name}: {e}")
        except Exception:
            logger.exception(f"{command.name} crashed on {line!r}")
            return CommandResult(output=f"{command.name}: internal error")

    def complete(
        self,
        session: Session,
        typed: str,
        dirs_only: bool = False,
        files_only: bool = False,
        text_only: bool = False,
        max_size: Optional[int] = None,
    ) -> list[CompletionItem]:
        """Tab-completion candidates for a partially typed path."""
        return self.completer.complete(
            session.cwd,
            typed,
            dirs_only=dirs_only,
            files_only=files_only,
            text_only=text_only,
            max_size=max_size,
        )

    def config_snapshot(self, session: Session) -> dict[str, Any]:
        """
        Client bootstrap payload: content cap, cwd and its doc preview.

        A cwd that no longer resolves falls back to `/`.
        """
        cwd = session.cwd
        try:
            real = self.sandbox.require_directory(cwd).real_path
        except FileSystemError:
            cwd = "/"
            real = self.sandbox.root

        data: dict[str, Any] = {"catMax": self.config.cat_max_bytes, "cwd": cwd}
        readme, doc_type = read_doc_file(real)
        if readme:
            data["readme"] = readme
            data["docType"] = doc_type
        return data
