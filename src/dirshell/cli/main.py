"""
dirshell CLI.

A local terminal front end for the sandboxed command interpreter: run a
single command, drop into an interactive shell, or build the archive a
download would stream.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.text import Text

from dirshell import __version__
from dirshell.filesystem.exceptions import FileSystemError, NoMatchError
from dirshell.settings import ShellSettings
from dirshell.shell import CommandInterpreter, CommandResult, SessionStore

# Load environment variables
load_dotenv()

console = Console()
err_console = Console(stderr=True)


def setup_logging(level: int = logging.INFO) -> None:
    """Setup rich logging on stderr."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True)],
    )


def load_settings(
    config_file: Optional[str],
    root: Optional[str],
    no_color: bool,
) -> ShellSettings:
    overrides = {"root": root, "color": False if no_color else None}
    if config_file:
        return ShellSettings.from_file(config_file, **overrides)
    return ShellSettings(**{k: v for k, v in overrides.items() if v is not None})


def print_result(result: CommandResult) -> None:
    """Print a command result to the terminal."""
    if result.output:
        console.print(Text.from_ansi(result.output), soft_wrap=True)
    if result.download_url:
        console.print(f"[green]Download:[/green] {result.download_url}", soft_wrap=True)
    if result.clipboard:
        console.print(f"[dim]Clipboard:[/dim] {result.clipboard}", soft_wrap=True)
    if result.readme:
        if result.doc_type == "markdown":
            body = Markdown(result.readme)
        else:
            body = Text(result.readme)
        console.print(Panel(body, title="README"))


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML or JSON settings file",
)
@click.option(
    "--root",
    "-r",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Directory to expose (overrides DIRSHELL_ROOT)",
)
@click.option("--no-color", is_flag=True, help="Disable ANSI colors in output")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str], root: Optional[str], no_color: bool, verbose: bool):
    """dirshell - browse one directory tree through a sandboxed shell."""
    try:
        settings = load_settings(config_file, root, no_color)
        config = settings.to_sandbox_config()
    except (ValidationError, FileNotFoundError) as e:
        raise click.ClickException(str(e))

    setup_logging(logging.DEBUG if verbose else settings.log_level_value)
    ctx.obj = CommandInterpreter(config)


@cli.command()
@click.argument("command_line")
@click.option("--cwd", default="/", help="Virtual directory to run in")
@click.pass_obj
def run(interpreter: CommandInterpreter, command_line: str, cwd: str):
    """
    Run a single command and print its output.

    Examples:

        dirshell --root ./public run "ls -lh"

        dirshell --root ./public run "grep -rn TODO" --cwd /src
    """
    session = SessionStore().create()
    try:
        entry = interpreter.sandbox.require_directory(cwd)
        interpreter.ignore.require_visible(entry)
    except FileSystemError as e:
        raise click.ClickException(f"cd: {e}")
    session.cwd = entry.virtual_path
    print_result(interpreter.execute(command_line, session))


@cli.command()
@click.pass_obj
def shell(interpreter: CommandInterpreter):
    """
    Interactive shell.

    Type 'help' for the command list, 'exit' or 'quit' to leave.
    """
    session = SessionStore().create()
    console.print(
        Panel(
            f"[bold cyan]dirshell[/bold cyan] {__version__}\n\n"
            f"Root: [green]{interpreter.config.root}[/green]\n"
            f"Type [yellow]help[/yellow] for commands, [yellow]exit[/yellow] to quit.",
            title="Welcome",
        )
    )

    while True:
        try:
            line = Prompt.ask(f"[bold blue]{session.cwd}[/bold blue] $")
        except (KeyboardInterrupt, EOFError):
            console.print()
            break

        if line.strip() in ("exit", "quit"):
            break
        print_result(interpreter.execute(line, session))


@cli.command("zip")
@click.argument("target")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), required=True)
@click.option("--cwd", default="/", help="Virtual directory TARGET is relative to")
@click.pass_obj
def zip_(interpreter: CommandInterpreter, target: str, output: Path, cwd: str):
    """
    Write the archive a download of TARGET would produce.

    TARGET is a file, a directory, `.` or a glob such as '*.txt'.
    """
    try:
        items = interpreter.archive.collect_for_download(cwd, target)
        if not items:
            raise NoMatchError("no matching files found")
    except FileSystemError as e:
        raise click.ClickException(f"zip: {e}")

    with open(output, "wb") as f:
        written = interpreter.archive.write_zip(items, f)
    console.print(f"Wrote {written} of {len(items)} files to {output}")


def main() -> None:
    cli(prog_name="dirshell")


if __name__ == "__main__":
    sys.exit(main())
