"""
Built-in command handlers.

Every handler has the signature `(args, session, ctx) -> CommandResult`
and reports failures by raising FileSystemError subclasses; the
interpreter turns those into `<command>: <message>` output.
"""

import hashlib
import logging
from datetime import datetime
from typing import Optional

from dirshell.filesystem.classifier import looks_text
from dirshell.filesystem.docs import read_doc_file
from dirshell.filesystem.exceptions import (
    BinaryContentError,
    EntryNotFoundError,
    FileAccessDeniedError,
    FileSizeLimitExceededError,
    FileSystemError,
    InvalidArgumentError,
    IsADirectoryPathError,
    NoMatchError,
)
from dirshell.filesystem.patterns import has_glob_meta
from dirshell.filesystem.sandbox import join_virtual, query_escape, url_escape_virtual
from dirshell.filesystem.search import GrepFailure, render_tree
from dirshell.filesystem.walker import WalkEntry, WalkPolicy
from dirshell.shell.formatting import CYAN, GREEN, format_long
from dirshell.shell.registry import CommandContext, CommandRegistry
from dirshell.shell.result import CommandResult
from dirshell.shell.session import Session

logger = logging.getLogger(__name__)

_HASH_CHUNK = 64 * 1024

default_registry = CommandRegistry()
command = default_registry.register


def _split_flags(args: list[str]) -> tuple[str, list[str]]:
    """Return (all flag letters, positional arguments)."""
    flags = "".join(a[1:] for a in args if a.startswith("-"))
    positional = [a for a in args if not a.startswith("-")]
    return flags, positional


def _download_url(ctx: CommandContext, **params: str) -> str:
    query = "&".join(f"{key}={value}" for key, value in params.items())
    return f"{ctx.config.download_endpoint}?{query}"


@command("pwd", usage="pwd", summary="print working directory")
def pwd(args: list[str], session: Session, ctx: CommandContext) -> CommandResult:
    cwd = session.cwd
    return CommandResult(output=cwd, cwd=cwd)


@command("help", usage="help", summary="print this message")
def help_(args: list[str], session: Session, ctx: CommandContext) -> CommandResult:
    lines = ["Available commands:"]
    for cmd in ctx.registry.commands():
        names = "|".join((cmd.name, *cmd.aliases))
        lines.append(f"  {names:<32} {cmd.usage:<40} {cmd.summary}")
    return CommandResult(output="\n".join(lines))


@command("ls", "dir", usage="ls [-l] [-a] [-h] [PATH]", summary="list files (-h for human readable sizes)")
def ls(args: list[str], session: Session, ctx: CommandContext) -> CommandResult:
    """List one directory, or a single file when PATH is a file."""
    flags, positional = _split_flags(args)
    long_format = "l" in flags
    show_hidden = "a" in flags
    human = "h" in flags
    target = positional[-1] if positional else session.cwd

    try:
        entry = ctx.sandbox.stat(join_virtual(session.cwd, target))
        if entry.is_directory:
            ctx.ignore.require_visible(entry)
    except EntryNotFoundError:
        raise EntryNotFoundError(target, f"cannot access '{target}': No such file or directory")

    if not entry.is_directory:
        label = ctx.painter.name(entry.mode, entry.name)
        if long_format:
            label = format_long(entry.mode, entry.size, entry.mod_time, label, human)
        return CommandResult(output=label)

    try:
        children = ctx.walker.list_directory(entry.real_path, WalkPolicy(show_hidden=show_hidden))
    except OSError as e:
        logger.warning(f"ls cannot read {entry.real_path}: {e}")
        raise FileSystemError("error reading directory")

    lines = []
    for child in children:
        try:
            st = child.stat()
        except OSError:
            if not long_format:
                lines.append(child.name)
            continue
        label = ctx.painter.name(st.st_mode, child.name)
        if long_format:
            mod_time = datetime.fromtimestamp(st.st_mtime)
            label = format_long(st.st_mode, st.st_size, mod_time, label, human)
        lines.append(label)
    return CommandResult(output="\n".join(lines))


@command("cd", usage="cd [DIR]", summary="change directory")
def cd(args: list[str], session: Session, ctx: CommandContext) -> CommandResult:
    """Validate the target before committing it as the new cwd."""
    target = args[0] if args and args[0] else "/"
    entry = ctx.sandbox.require_directory(join_virtual(session.cwd, target))
    ctx.ignore.require_visible(entry)
    session.cwd = entry.virtual_path
    readme, doc_type = read_doc_file(entry.real_path)
    return CommandResult(cwd=entry.virtual_path, readme=readme, doc_type=doc_type or None)


@command("cat", usage="cat FILE", summary="view a text file")
def cat(args: list[str], session: Session, ctx: CommandContext) -> CommandResult:
    if not args:
        raise InvalidArgumentError("missing operand")

    limit = ctx.config.cat_max_bytes
    entry = ctx.sandbox.require_file(join_virtual(session.cwd, args[0]))
    if entry.size > limit:
        raise FileSizeLimitExceededError(entry.virtual_path, entry.size, limit)

    try:
        with open(entry.real_path, "rb") as f:
            content = f.read(limit)
    except OSError as e:
        logger.warning(f"cat cannot read {entry.real_path}: {e}")
        raise FileSystemError("cannot open file")

    if not looks_text(content):
        raise BinaryContentError(entry.virtual_path)
    return CommandResult(output=content.decode("utf-8", errors="replace"))


def _parse_depth(value: str) -> Optional[int]:
    try:
        depth = int(value)
    except ValueError:
        return None
    return depth if depth >= 0 else None


@command("tree", usage="tree [-L<DEPTH>] [-a] [PATH]", summary="directory structure")
def tree(args: list[str], session: Session, ctx: CommandContext) -> CommandResult:
    show_hidden = False
    max_depth = None
    target = session.cwd

    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "-L" and i + 1 < len(args):
            max_depth = _parse_depth(args[i + 1])
            i += 1
        elif arg.startswith("-L") and len(arg) > 2:
            max_depth = _parse_depth(arg[2:])
        elif arg.startswith("-"):
            show_hidden = show_hidden or "a" in arg
        else:
            target = join_virtual(session.cwd, arg)
        i += 1

    result = ctx.search.tree(target, show_hidden=show_hidden, max_depth=max_depth)

    def label(entry: WalkEntry) -> str:
        try:
            return ctx.painter.name(entry.stat().st_mode, entry.name)
        except OSError:
            return entry.name

    return CommandResult(output=render_tree(result, label))


@command("find", usage="find [PATH] [-name PATTERN] [-type f|d]", summary="search for files and directories")
def find(args: list[str], session: Session, ctx: CommandContext) -> CommandResult:
    search_path = session.cwd
    name_pattern = "*"
    type_filter = None

    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "-name" and i + 1 < len(args):
            name_pattern = args[i + 1]
            i += 1
        elif arg == "-type" and i + 1 < len(args):
            type_filter = args[i + 1]
            i += 1
        elif not arg.startswith("-"):
            search_path = join_virtual(session.cwd, arg)
        i += 1

    entries = ctx.search.find(search_path, name_pattern, type_filter)
    if not entries:
        raise NoMatchError("no matches found")

    lines = []
    for entry in entries:
        try:
            lines.append(ctx.painter.name(entry.stat().st_mode, entry.virtual_path))
        except OSError:
            lines.append(entry.virtual_path)
    return CommandResult(output="\n".join(lines))


@command("grep", usage="grep [-r] [-i] [-n] PATTERN [FILE...]", summary="search for text patterns in files")
def grep(args: list[str], session: Session, ctx: CommandContext) -> CommandResult:
    """
    Literal substring search.

    Without -r, files must be named explicitly; with -r and no files the
    current directory is searched.
    """
    flags, positional = _split_flags(args)
    if not positional or not positional[0]:
        raise InvalidArgumentError("missing pattern")

    pattern, targets = positional[0], positional[1:]
    recursive = "r" in flags
    if not targets:
        if not recursive:
            raise InvalidArgumentError("no files specified")
        targets = ["."]

    items = ctx.search.grep(
        session.cwd,
        pattern,
        targets,
        recursive=recursive,
        ignore_case="i" in flags,
    )
    if not items:
        raise NoMatchError("no matches found")

    painter = ctx.painter
    lines = []
    for item in items:
        if isinstance(item, GrepFailure):
            lines.append(f"grep: {item.target}: {item.message}")
            continue
        prefix = ""
        if item.with_filename:
            prefix += painter.paint(item.virtual_path, CYAN) + ":"
        if "n" in flags:
            prefix += painter.paint(str(item.line_number), GREEN) + ":"
        lines.append(prefix + painter.highlight(item.line, item.spans))
    return CommandResult(output="\n".join(lines))


@command("download", "get", "rget", "wget", usage="get FILE|DIR|PATTERN", summary="download a file, a directory or matching files")
def download(args: list[str], session: Session, ctx: CommandContext) -> CommandResult:
    """
    Turn a target into a download URL.

    Globs and `.` go through the archive builder: one match downloads
    directly, several are zipped. A directory name is zipped whole.
    """
    if not args:
        raise InvalidArgumentError("missing operand")

    target = args[0]
    cwd = session.cwd

    if has_glob_meta(target) or target == ".":
        items = ctx.archive.collect_for_download(cwd, target)
        if not items:
            raise NoMatchError("no matching files found")
        if len(items) == 1:
            return CommandResult(download_url=_download_url(ctx, path=url_escape_virtual(items[0].virtual_path)))
        return CommandResult(
            output=f"Downloading {len(items)} files as archive.zip",
            download_url=_download_url(ctx, pattern=query_escape(target), cwd=url_escape_virtual(cwd)),
        )

    entry = ctx.sandbox.stat(join_virtual(cwd, target))
    if entry.is_directory:
        items = ctx.archive.collect_from_directory(entry.virtual_path)
        if not items:
            raise NoMatchError("directory is empty")
        name = entry.name
        return CommandResult(
            output=f"Downloading directory '{name}' with {len(items)} files as {name}.zip",
            download_url=_download_url(ctx, dir=url_escape_virtual(entry.virtual_path)),
        )

    return CommandResult(download_url=_download_url(ctx, path=url_escape_virtual(entry.virtual_path)))


@command("sum", "checksum", usage="sum FILE", summary="print MD5 and SHA256 checksums")
def checksum(args: list[str], session: Session, ctx: CommandContext) -> CommandResult:
    if not args:
        raise InvalidArgumentError("missing file operand")

    entry = ctx.sandbox.require_file(join_virtual(session.cwd, args[0]))
    md5 = hashlib.md5(usedforsecurity=False)
    sha256 = hashlib.sha256()
    try:
        with open(entry.real_path, "rb") as f:
            for chunk in iter(lambda: f.read(_HASH_CHUNK), b""):
                md5.update(chunk)
                sha256.update(chunk)
    except OSError as e:
        logger.warning(f"sum cannot read {entry.real_path}: {e}")
        raise FileSystemError("error reading file")

    return CommandResult(output=f"MD5:    {md5.hexdigest()}\nSHA256: {sha256.hexdigest()}")


@command("url", "share", usage="url FILE", summary="get shareable URL (copies to clipboard)")
def share(args: list[str], session: Session, ctx: CommandContext) -> CommandResult:
    if not args:
        raise InvalidArgumentError("missing file operand")

    try:
        entry = ctx.sandbox.require_file(join_virtual(session.cwd, args[0]))
    except IsADirectoryPathError:
        raise InvalidArgumentError("cannot share directories (use 'get' to download as zip)")

    if ctx.ignore.should_ignore(entry.real_path, entry.name):
        raise FileAccessDeniedError(entry.virtual_path, "file is ignored")

    request = ctx.request
    url = f"{request.scheme}://{request.host}{ctx.config.static_prefix}{url_escape_virtual(entry.virtual_path)}"
    return CommandResult(
        output=f"Shareable URL: {url}\n" + ctx.painter.paint("URL copied to clipboard!", GREEN),
        clipboard=url,
    )
