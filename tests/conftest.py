"""
Shared fixtures: a temporary sandbox root and the engine objects on it.
"""

import tempfile
from pathlib import Path

import pytest

from dirshell.filesystem import (
    ArchiveBuilder,
    DirectoryWalker,
    IgnoreMatcher,
    PathSandbox,
    SandboxConfig,
    SearchEngine,
)


def _write(path: Path, content="") -> Path:
    """Create a file (and its parents) with text or bytes content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content)
    return path


@pytest.fixture
def write():
    """Helper writing files into a tree."""
    return _write


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def root(temp_dir):
    """Sandbox root inside the temporary directory."""
    path = temp_dir / "root"
    path.mkdir()
    return path


@pytest.fixture
def config(root):
    """Test sandbox configuration with small caps and no colors."""
    return SandboxConfig(
        root=root,
        cat_max_bytes=100,
        grep_max_bytes=1000,
        ignore_filename=".ignorefile",
        color=False,
    )


@pytest.fixture
def sandbox(config):
    return PathSandbox(config)


@pytest.fixture
def matcher(config):
    return IgnoreMatcher(config.root, config.ignore_filename)


@pytest.fixture
def walker(matcher):
    return DirectoryWalker(matcher)


@pytest.fixture
def engine(sandbox, matcher, walker):
    return SearchEngine(sandbox, matcher, walker)


@pytest.fixture
def builder(sandbox, matcher, walker):
    return ArchiveBuilder(sandbox, matcher, walker)
