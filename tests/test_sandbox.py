"""
Tests for path containment, ignore rules, glob matching and text
classification.
"""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from dirshell.filesystem import (
    EntryNotFoundError,
    FileAccessDeniedError,
    IgnoreMatcher,
    IsADirectoryPathError,
    NotADirectoryPathError,
    PathSandbox,
    SandboxConfig,
    glob_match,
    has_glob_meta,
    join_virtual,
    looks_text,
    normalize_virtual,
    parse_rule_file,
    url_escape_virtual,
)


class TestSandboxConfig:
    """Test SandboxConfig."""

    def test_defaults(self, root):
        """Test default values."""
        config = SandboxConfig(root=root)
        assert config.cat_max_bytes == 256 * 1024
        assert config.grep_max_bytes == 10 * 1024 * 1024
        assert config.sniff_bytes == 4096
        assert config.ignore_filename == ".dirshellignore"
        assert config.reject_symlink_escapes is False

    def test_root_is_resolved(self, root):
        """Test that a relative-looking root resolves to an absolute path."""
        config = SandboxConfig(root=f"{root}/./")
        assert config.root == root
        assert config.root.is_absolute()

    def test_root_must_be_directory(self, temp_dir):
        """Test that a missing root is rejected."""
        with pytest.raises(ValidationError):
            SandboxConfig(root=temp_dir / "missing")

    def test_ignore_filename_must_be_plain(self, root):
        with pytest.raises(ValidationError):
            SandboxConfig(root=root, ignore_filename="sub/.ignore")

    def test_frozen(self, config):
        """Test that configuration cannot change after startup."""
        with pytest.raises(ValidationError):
            config.cat_max_bytes = 1

    def test_url_prefixes_normalized(self, root):
        config = SandboxConfig(root=root, static_prefix="files/", download_endpoint="/dl/")
        assert config.static_prefix == "/files"
        assert config.download_endpoint == "/dl"


class TestVirtualPaths:
    """Test normalize_virtual and join_virtual."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("", "/"),
            ("/", "/"),
            ("a", "/a"),
            ("foo/..//bar", "/bar"),
            ("/a/./b/", "/a/b"),
            ("/../../etc", "/etc"),
            ("//double", "/double"),
            ("..", "/"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_virtual(raw) == expected

    @pytest.mark.parametrize("raw", ["", "a/b/../c", "//x//y", "/../..", "./.", "/a/b/c/../../.."])
    def test_normalize_idempotent(self, raw):
        once = normalize_virtual(raw)
        assert normalize_virtual(once) == once

    def test_join_relative(self):
        assert join_virtual("/a", "b") == "/a/b"

    def test_join_absolute_replaces_base(self):
        assert join_virtual("/a", "/x") == "/x"

    def test_join_parent_of_top_level(self):
        assert join_virtual("/a", "..") == "/"

    def test_join_empty_arg(self):
        assert join_virtual("/a/b/", "") == "/a/b"

    def test_url_escape_keeps_slashes(self):
        assert url_escape_virtual("/my dir/a&b#1.txt") == "/my%20dir/a%26b%231.txt"
        assert url_escape_virtual("/100%/x+y?") == "/100%25/x%2By%3F"


class TestPathSandbox:
    """Test PathSandbox."""

    def test_resolve_root(self, sandbox, root):
        assert sandbox.resolve("/") == root
        assert sandbox.resolve("") == root

    def test_resolve_nested(self, sandbox, root):
        assert sandbox.resolve("/a/b.txt") == root / "a" / "b.txt"

    @pytest.mark.parametrize(
        "virtual",
        ["/../etc/passwd", "../../..", "a/../../../b", "/./../x", "..", "/a/..//../.."],
    )
    def test_resolve_never_escapes(self, sandbox, root, virtual):
        """Test the containment invariant for traversal attempts."""
        real = sandbox.resolve(virtual)
        assert real == root or root in real.parents

    def test_dotdot_prefixed_names_are_reachable(self, sandbox, root):
        """Names that merely start with '..' are not treated as escapes."""
        assert sandbox.resolve("/..notes") == root / "..notes"

    def test_symlink_escape_allowed_by_default(self, sandbox, root, temp_dir):
        outside = temp_dir / "outside"
        outside.mkdir()
        (root / "link").symlink_to(outside)

        assert sandbox.resolve("/link") == root / "link"

    def test_symlink_escape_rejected_when_enabled(self, root, temp_dir):
        outside = temp_dir / "outside"
        outside.mkdir()
        (root / "link").symlink_to(outside)
        (root / "inner").mkdir()
        (root / "inner_link").symlink_to(root / "inner")

        sandbox = PathSandbox(SandboxConfig(root=root, reject_symlink_escapes=True))
        with pytest.raises(FileAccessDeniedError):
            sandbox.resolve("/link/secret.txt")
        assert sandbox.resolve("/inner_link") == root / "inner_link"

    def test_stat(self, sandbox, root, write):
        write(root / "a.txt", "hello")
        entry = sandbox.stat("a.txt")
        assert entry.virtual_path == "/a.txt"
        assert entry.real_path == root / "a.txt"
        assert entry.size == 5
        assert entry.is_directory is False
        assert entry.name == "a.txt"

    def test_stat_missing(self, sandbox):
        with pytest.raises(EntryNotFoundError) as exc_info:
            sandbox.stat("/nope")
        assert exc_info.value.http_status == 404

    def test_require_directory_and_file(self, sandbox, root, write):
        write(root / "d" / "f.txt", "x")
        assert sandbox.require_directory("/d").is_directory
        assert not sandbox.require_file("/d/f.txt").is_directory
        with pytest.raises(NotADirectoryPathError):
            sandbox.require_directory("/d/f.txt")
        with pytest.raises(IsADirectoryPathError):
            sandbox.require_file("/d")

    def test_to_virtual(self, sandbox, root):
        assert sandbox.to_virtual(root) == "/"
        assert sandbox.to_virtual(root / "a" / "b") == "/a/b"


class TestGlobMatch:
    """Test glob_match."""

    def test_simple(self):
        assert glob_match("*.txt", "a.txt")
        assert not glob_match("*.txt", "a.md")
        assert glob_match("file?.png", "file1.png")
        assert glob_match("[ab]*", "beta")

    def test_star_does_not_cross_separator(self):
        assert glob_match("secret/*", "secret/a.txt")
        assert not glob_match("secret/*", "secret/x/a.txt")
        assert not glob_match("*", "a/b")

    def test_caret_negation(self):
        assert glob_match("[^a]*", "beta")
        assert not glob_match("[^a]*", "alpha")

    def test_case_sensitive(self):
        assert not glob_match("*.TXT", "a.txt")

    def test_has_glob_meta(self):
        assert has_glob_meta("*.txt")
        assert has_glob_meta("a?")
        assert has_glob_meta("[ab]")
        assert not has_glob_meta("plain.txt")


class TestIgnoreRules:
    """Test parse_rule_file and IgnoreMatcher."""

    def test_parse_rule_file(self, temp_dir, write):
        rule_file = write(temp_dir / ".ignorefile", "*.log\n\n# comment\n  secret/*  \n")
        assert parse_rule_file(rule_file) == ["*.log", "secret/*"]

    def test_parse_missing_rule_file(self, temp_dir):
        assert parse_rule_file(temp_dir / "missing") == []

    def test_name_match_in_same_directory(self, matcher, root, write):
        write(root / "a" / ".ignorefile", "*.log\n# comment\n")
        log = write(root / "a" / "x.log", "x")
        keep = write(root / "a" / "keep.txt", "k")

        assert matcher.should_ignore(log, log.name)
        assert not matcher.should_ignore(keep, keep.name)

    def test_ancestor_rule_applies_to_nested_entries(self, matcher, root, write):
        write(root / ".ignorefile", "*.log\n")
        deep = write(root / "a" / "b" / "c" / "deep.log", "x")
        assert matcher.should_ignore(deep, deep.name)

    def test_path_pattern_relative_to_rule_directory(self, matcher, root, write):
        write(root / "a" / "b" / ".ignorefile", "secret/*\n")
        secret = write(root / "a" / "b" / "secret" / "top.txt", "t")
        elsewhere = write(root / "a" / "secret" / "top.txt", "t")

        assert matcher.should_ignore(secret, secret.name)
        assert not matcher.should_ignore(elsewhere, elsewhere.name)

    def test_rules_above_root_are_not_consulted(self, temp_dir, root, write):
        write(temp_dir / ".ignorefile", "*.txt\n")
        f = write(root / "a.txt", "hello")
        matcher = IgnoreMatcher(root, ".ignorefile")
        assert not matcher.should_ignore(f, f.name)

    def test_root_itself_never_ignored(self, matcher, root, write):
        write(root / ".ignorefile", "*\n")
        assert not matcher.should_ignore(root, root.name)

    def test_rules_are_reread(self, matcher, root, write):
        f = write(root / "a.txt", "hello")
        assert not matcher.should_ignore(f, f.name)
        write(root / ".ignorefile", "a.txt\n")
        assert matcher.should_ignore(f, f.name)

    def test_is_hidden_covers_entries_below_ignored_directory(self, matcher, root, write):
        """Entries inside an ignored directory are hidden although no rule names them."""
        write(root / ".ignorefile", "secret\n")
        f = write(root / "secret" / "deep" / "key.txt", "k")
        assert not matcher.should_ignore(f, f.name)
        assert matcher.is_hidden(f)
        assert matcher.is_hidden(root / "secret" / "deep")
        assert matcher.is_hidden(root / "secret")
        assert not matcher.is_hidden(root)

    def test_is_hidden_visible_entry(self, matcher, root, write):
        write(root / ".ignorefile", "secret\n")
        f = write(root / "public" / "a.txt", "a")
        assert not matcher.is_hidden(f)

    def test_require_visible(self, matcher, sandbox, root, write):
        write(root / ".ignorefile", "secret\n")
        write(root / "secret" / "key.txt", "k")
        write(root / "public" / "a.txt", "a")

        entry = sandbox.stat("/public")
        assert matcher.require_visible(entry) is entry
        with pytest.raises(EntryNotFoundError):
            matcher.require_visible(sandbox.stat("/secret"))
        with pytest.raises(EntryNotFoundError):
            matcher.require_visible(sandbox.stat("/secret/key.txt"))


class TestLooksText:
    """Test the text classifier."""

    def test_nul_is_binary(self):
        assert not looks_text(b"\x00a")

    def test_ascii_and_utf8(self):
        assert looks_text(b"hello")
        assert looks_text("café".encode("utf-8"))

    def test_empty_is_text(self):
        assert looks_text(b"")

    def test_printable_ratio(self):
        assert looks_text(b"A" * 90 + b"\xff" * 10)
        assert looks_text(b"A" * 85 + b"\xff" * 15)
        assert not looks_text(b"A" * 80 + b"\xff" * 20)

    def test_control_bytes_without_nul(self):
        assert not looks_text(b"\x01\x02\xff" * 50)
