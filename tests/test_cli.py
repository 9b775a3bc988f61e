"""
Tests for the dirshell CLI.
"""

import zipfile

import pytest
from click.testing import CliRunner

from dirshell.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project(root, write):
    write(root / "hello.txt", "hello\n")
    write(root / "docs" / "guide.md", "# Guide\n")
    write(root / "docs" / "notes.txt", "notes\n")
    return root


def _invoke(runner, project, *args, **kwargs):
    return runner.invoke(cli, ["--root", str(project), "--no-color", *args], **kwargs)


class TestRunCommand:
    """Tests for `dirshell run`."""

    def test_run_cat(self, runner, project):
        result = _invoke(runner, project, "run", "cat hello.txt")
        assert result.exit_code == 0, result.output
        assert "hello" in result.output

    def test_run_in_cwd(self, runner, project):
        result = _invoke(runner, project, "run", "pwd", "--cwd", "/docs")
        assert result.exit_code == 0, result.output
        assert "/docs" in result.output

    def test_run_bad_cwd(self, runner, project):
        result = _invoke(runner, project, "run", "ls", "--cwd", "/missing")
        assert result.exit_code != 0
        assert "no such file or directory" in result.output

    def test_run_cwd_with_quote_in_name(self, runner, project, write):
        """The working directory is resolved as a path, not re-parsed as a command."""
        write(project / "say \"hi\"" / "x.txt", "x\n")
        result = _invoke(runner, project, "run", "ls", "--cwd", "/say \"hi\"")
        assert result.exit_code == 0, result.output
        assert "x.txt" in result.output

    def test_run_cwd_ignored(self, runner, project, write):
        write(project / ".dirshellignore", "docs\n")
        result = _invoke(runner, project, "run", "ls", "--cwd", "/docs")
        assert result.exit_code != 0
        assert "cd: no such file or directory" in result.output

    def test_run_download_url(self, runner, project):
        result = _invoke(runner, project, "run", "get hello.txt")
        assert "Download:" in result.output
        assert "/api/download?path=/hello.txt" in result.output

    def test_run_unknown_command(self, runner, project):
        result = _invoke(runner, project, "run", "rm x")
        assert "sh: rm: command not found" in result.output

    def test_missing_root(self, runner, temp_dir):
        result = runner.invoke(cli, ["--root", str(temp_dir / "missing"), "run", "ls"])
        assert result.exit_code != 0


class TestShellCommand:
    """Tests for the interactive shell."""

    def test_shell_session(self, runner, project):
        result = _invoke(runner, project, "shell", input="cd docs\nls\nexit\n")
        assert result.exit_code == 0, result.output
        assert "guide.md" in result.output
        assert "notes.txt" in result.output

    def test_shell_ends_on_eof(self, runner, project):
        result = _invoke(runner, project, "shell", input="pwd\n")
        assert result.exit_code == 0, result.output


class TestZipCommand:
    """Tests for `dirshell zip`."""

    def test_zip_directory(self, runner, project, temp_dir):
        output = temp_dir / "out.zip"
        result = _invoke(runner, project, "zip", "docs", "-o", str(output))
        assert result.exit_code == 0, result.output
        assert "Wrote 2 of 2 files" in result.output

        with zipfile.ZipFile(output) as zf:
            assert sorted(zf.namelist()) == ["docs/guide.md", "docs/notes.txt"]

    def test_zip_pattern(self, runner, project, temp_dir):
        output = temp_dir / "md.zip"
        result = _invoke(runner, project, "zip", "*.md", "--cwd", "/docs", "-o", str(output))
        assert result.exit_code == 0, result.output

        with zipfile.ZipFile(output) as zf:
            assert zf.namelist() == ["guide.md"]

    def test_zip_no_match(self, runner, project, temp_dir):
        result = _invoke(runner, project, "zip", "*.rs", "-o", str(temp_dir / "x.zip"))
        assert result.exit_code != 0
        assert "no matching files found" in result.output


class TestConfigFile:
    """Tests for --config."""

    def test_config_file(self, runner, project, temp_dir):
        path = temp_dir / "dirshell.yaml"
        path.write_text(f"root: {project}\ncat_max_bytes: 3\ncolor: false\n")

        result = runner.invoke(cli, ["--config", str(path), "run", "cat hello.txt"])
        assert result.exit_code == 0, result.output
        assert "file too large" in result.output
