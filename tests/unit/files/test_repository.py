"""Unit tests for FileRepository.

Uses the sample server directory from conftest:

    config/ops.json, config/server.yaml, world/level.dat,
    server.properties, eula
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from mcremote.core.config import AgentConfig
from mcremote.core.errors import (
    ExtensionDeniedError,
    FileTooLargeError,
    InvalidEncodingError,
    IsDirectoryError,
    NotDirectoryError,
    PathEscapeError,
    PathNotFoundError,
)
from mcremote.files.models import FileEntry
from mcremote.files.repository import FileRepository
from mcremote.security.resolver import PathResolver


def _paths(entries: list[FileEntry]) -> list[str]:
    return [entry.path for entry in entries]


class TestConstruction:
    """Tests for FileRepository construction."""

    @pytest.mark.parametrize("limit", [0, -1])
    def test_rejects_non_positive_limit(self, resolver: PathResolver, limit: int) -> None:
        """A read limit must be positive."""
        with pytest.raises(ValueError, match="must be positive"):
            FileRepository(resolver, max_file_size_bytes=limit)

    def test_from_config(self, agent_config: AgentConfig, resolver: PathResolver) -> None:
        """from_config takes the configured read limit."""
        repository = FileRepository.from_config(agent_config, resolver)

        assert repository.max_file_size_bytes == 1024


class TestListFiles:
    """Tests for FileRepository.list_files."""

    def test_root_listing(self, repository: FileRepository) -> None:
        """Root listing shows directories and allowed files only."""
        entries = repository.list_files(None)

        assert _paths(entries) == ["config", "world"]
        assert all(entry.is_directory for entry in entries)

    def test_non_recursive_directory(self, repository: FileRepository) -> None:
        """Listing config/ reports its allowed files with relative paths."""
        entries = repository.list_files("config")

        assert _paths(entries) == ["config/ops.json", "config/server.yaml"]
        assert not any(entry.is_directory for entry in entries)

    def test_directories_sorted_first(
        self, repository: FileRepository, server_root: Path
    ) -> None:
        """Directories precede files, each group ordered by path."""
        (server_root / "config" / "zz").mkdir()
        (server_root / "config" / "aa.json").write_text("{}")

        entries = repository.list_files("config")

        assert _paths(entries) == [
            "config/zz",
            "config/aa.json",
            "config/ops.json",
            "config/server.yaml",
        ]

    def test_hides_disallowed_files(self, repository: FileRepository) -> None:
        """A directory holding only disallowed files lists as empty."""
        assert repository.list_files("world") == []

    def test_directory_size_is_zero(self, repository: FileRepository) -> None:
        """Directories report size 0."""
        entries = repository.list_files("")

        assert {entry.size for entry in entries} == {0}

    def test_file_size_and_mtime(self, repository: FileRepository, server_root: Path) -> None:
        """Files report their byte size and mtime in milliseconds."""
        target = server_root / "config" / "ops.json"
        os.utime(target, ns=(1_700_000_000_000_000_000, 1_700_000_000_500_000_000))

        entries = {entry.path: entry for entry in repository.list_files("config")}
        entry = entries["config/ops.json"]

        assert entry.size == target.stat().st_size
        assert entry.last_modified == 1_700_000_000_500

    def test_recursive_listing(self, repository: FileRepository, server_root: Path) -> None:
        """Recursive listing walks the subtree and filters at every depth."""
        (server_root / "config" / "mod" / "deep").mkdir(parents=True)
        (server_root / "config" / "mod" / "deep" / "settings.json").write_text("{}")
        (server_root / "config" / "mod" / "deep" / "notes.txt").write_text("x")
        (server_root / "empty").mkdir()

        entries = repository.list_files("", recursive=True)

        assert _paths(entries) == [
            "config",
            "config/mod",
            "config/mod/deep",
            "empty",
            "world",
            "config/mod/deep/settings.json",
            "config/ops.json",
            "config/server.yaml",
        ]

    def test_recursive_excludes_start_directory(self, repository: FileRepository) -> None:
        """The listed directory itself is never part of the result."""
        entries = repository.list_files("config", recursive=True)

        assert "config" not in _paths(entries)
        assert _paths(entries) == ["config/ops.json", "config/server.yaml"]

    def test_skips_escaping_symlinked_directory(
        self, repository: FileRepository, server_root: Path, tmp_path: Path
    ) -> None:
        """A symlinked directory pointing outside the root is omitted."""
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "leak.json").write_text("{}")
        (server_root / "escape").symlink_to(outside, target_is_directory=True)

        flat = repository.list_files("")
        deep = repository.list_files("", recursive=True)

        assert "escape" not in _paths(flat)
        assert not any(path.startswith("escape") for path in _paths(deep))

    def test_skips_escaping_symlinked_file(
        self, repository: FileRepository, server_root: Path, tmp_path: Path
    ) -> None:
        """A symlinked file pointing outside the root is omitted."""
        secret = tmp_path / "secret.json"
        secret.write_text("{}")
        (server_root / "config" / "leak.json").symlink_to(secret)

        assert "config/leak.json" not in _paths(repository.list_files("config"))

    @pytest.mark.skipif(os.geteuid() == 0, reason="root ignores directory permissions")
    def test_skips_unreadable_subdirectory(
        self, repository: FileRepository, server_root: Path
    ) -> None:
        """An unreadable subdirectory is reported but its contents skipped."""
        locked = server_root / "config" / "locked"
        locked.mkdir()
        (locked / "hidden.json").write_text("{}")
        locked.chmod(0)
        try:
            entries = repository.list_files("config", recursive=True)
        finally:
            locked.chmod(0o755)

        assert "config/locked" in _paths(entries)
        assert "config/locked/hidden.json" not in _paths(entries)

    def test_missing_directory(self, repository: FileRepository) -> None:
        """Listing a missing directory raises PathNotFoundError."""
        with pytest.raises(PathNotFoundError, match="Directory not found: plugins"):
            repository.list_files("plugins")

    def test_file_target(self, repository: FileRepository) -> None:
        """Listing a file raises NotDirectoryError."""
        with pytest.raises(NotDirectoryError):
            repository.list_files("config/ops.json")

    def test_escape(self, repository: FileRepository) -> None:
        """Listing outside the root raises PathEscapeError."""
        with pytest.raises(PathEscapeError):
            repository.list_files("../..")

    def test_fresh_result_each_call(self, repository: FileRepository, server_root: Path) -> None:
        """Listings are never cached."""
        first = repository.list_files("config")
        (server_root / "config" / "new.json").write_text("{}")
        second = repository.list_files("config")

        assert len(second) == len(first) + 1


class TestReadFile:
    """Tests for FileRepository.read_file."""

    def test_reads_content(self, repository: FileRepository, server_root: Path) -> None:
        """Reading returns the decoded UTF-8 content."""
        expected = (server_root / "config" / "ops.json").read_text(encoding="utf-8")

        assert repository.read_file("config/ops.json") == expected

    def test_preserves_bytes(self, repository: FileRepository, server_root: Path) -> None:
        """Line endings and non-ASCII text are returned unchanged."""
        (server_root / "config" / "motd.yaml").write_bytes("a: \"héllo\"\r\nb: 1\r\n".encode())

        assert repository.read_file("config/motd.yaml") == "a: \"héllo\"\r\nb: 1\r\n"

    def test_exactly_at_limit(self, repository: FileRepository, server_root: Path) -> None:
        """A file of exactly max_file_size_bytes is served."""
        (server_root / "config" / "big.json").write_bytes(b"a" * 1024)

        assert len(repository.read_file("config/big.json")) == 1024

    def test_over_limit_is_not_opened(
        self, repository: FileRepository, server_root: Path
    ) -> None:
        """A file one byte over the limit is rejected before reading."""
        (server_root / "config" / "big.json").write_bytes(b"a" * 1025)

        with (
            patch("mcremote.files.repository.open", create=True) as mock_open,
            pytest.raises(FileTooLargeError, match=r"1025 bytes \(max: 1024\)"),
        ):
            repository.read_file("config/big.json")

        mock_open.assert_not_called()

    def test_empty_file(self, repository: FileRepository, server_root: Path) -> None:
        """An empty file reads as an empty string."""
        (server_root / "config" / "empty.json").write_bytes(b"")

        assert repository.read_file("config/empty.json") == ""

    def test_invalid_utf8(self, repository: FileRepository, server_root: Path) -> None:
        """Undecodable content raises InvalidEncodingError."""
        (server_root / "config" / "broken.json").write_bytes(b"\xff\xfe\x00")

        with pytest.raises(InvalidEncodingError):
            repository.read_file("config/broken.json")

    def test_missing_file(self, repository: FileRepository) -> None:
        """Reading a missing file raises PathNotFoundError."""
        with pytest.raises(PathNotFoundError, match="File not found: config/none.json"):
            repository.read_file("config/none.json")

    def test_directory(self, repository: FileRepository) -> None:
        """Reading a directory raises IsDirectoryError."""
        with pytest.raises(IsDirectoryError):
            repository.read_file("config")

    def test_disallowed_extension(self, repository: FileRepository) -> None:
        """Reading a disallowed file raises ExtensionDeniedError."""
        with pytest.raises(ExtensionDeniedError):
            repository.read_file("server.properties")

    def test_escape(self, repository: FileRepository) -> None:
        """Reading outside the root raises PathEscapeError."""
        with pytest.raises(PathEscapeError):
            repository.read_file("../../etc/passwd")


class TestWriteFile:
    """Tests for FileRepository.write_file."""

    def test_creates_file(self, repository: FileRepository, server_root: Path) -> None:
        """Writing a new file stores the UTF-8 bytes."""
        repository.write_file("config/new.json", '{"a": 1}')

        assert (server_root / "config" / "new.json").read_bytes() == b'{"a": 1}'

    def test_round_trip(self, repository: FileRepository) -> None:
        """Written text reads back identically."""
        content = "kürbis: ☃\r\nline2\n"

        repository.write_file("config/round.yaml", content)

        assert repository.read_file("config/round.yaml") == content

    def test_creates_parent_directories(
        self, repository: FileRepository, server_root: Path
    ) -> None:
        """Missing parent directories are created."""
        repository.write_file("config/mod/sub/new.json", "{}")

        assert (server_root / "config" / "mod" / "sub" / "new.json").is_file()

    def test_overwrites(self, repository: FileRepository, server_root: Path) -> None:
        """Existing content is replaced completely."""
        repository.write_file("config/ops.json", "[]")

        assert (server_root / "config" / "ops.json").read_text() == "[]"

    def test_empty_content(self, repository: FileRepository, server_root: Path) -> None:
        """Writing an empty string truncates the file."""
        repository.write_file("config/ops.json", "")

        assert (server_root / "config" / "ops.json").read_bytes() == b""

    def test_directory_target(self, repository: FileRepository, server_root: Path) -> None:
        """Writing onto a directory raises IsDirectoryError."""
        (server_root / "config" / "dir.json").mkdir()

        with pytest.raises(IsDirectoryError):
            repository.write_file("config/dir.json", "{}")

    def test_disallowed_extension(self, repository: FileRepository, server_root: Path) -> None:
        """Writing a disallowed extension fails without touching disk."""
        with pytest.raises(ExtensionDeniedError):
            repository.write_file("config/run.sh", "rm -rf /")

        assert not (server_root / "config" / "run.sh").exists()

    def test_escape(self, repository: FileRepository, server_root: Path) -> None:
        """Writing outside the root fails without creating anything."""
        with pytest.raises(PathEscapeError):
            repository.write_file("../evil/x.json", "{}")

        assert not (server_root.parent / "evil").exists()


class TestDeleteFile:
    """Tests for FileRepository.delete_file."""

    def test_deletes_file(self, repository: FileRepository, server_root: Path) -> None:
        """Deleting removes the file."""
        repository.delete_file("config/ops.json")

        assert not (server_root / "config" / "ops.json").exists()

    def test_directory_is_kept(self, repository: FileRepository, server_root: Path) -> None:
        """Directories are never deleted."""
        with pytest.raises(IsDirectoryError, match="Cannot delete directories"):
            repository.delete_file("config")

        assert (server_root / "config").is_dir()

    def test_missing_file(self, repository: FileRepository) -> None:
        """Deleting a missing file raises PathNotFoundError."""
        with pytest.raises(PathNotFoundError):
            repository.delete_file("config/none.json")

    def test_disallowed_extension(self, repository: FileRepository, server_root: Path) -> None:
        """Disallowed files cannot be deleted."""
        with pytest.raises(ExtensionDeniedError):
            repository.delete_file("world/level.dat")

        assert (server_root / "world" / "level.dat").exists()

    def test_escape(self, repository: FileRepository) -> None:
        """Deleting outside the root raises PathEscapeError."""
        with pytest.raises(PathEscapeError):
            repository.delete_file("../../etc/hosts.json")


class TestSymlinkAliases:
    """Tests for symlinks whose name and target differ."""

    def test_disallowed_alias_hidden_from_listings(
        self, repository: FileRepository, server_root: Path
    ) -> None:
        """An allowed file reached under a disallowed name is never listed."""
        (server_root / "evil.sh").symlink_to(server_root / "config" / "ops.json")
        (server_root / "config" / "run.sh").symlink_to(server_root / "config" / "ops.json")

        flat = _paths(repository.list_files(None))
        deep = _paths(repository.list_files(None, recursive=True))

        assert "evil.sh" not in flat
        assert "evil.sh" not in deep
        assert "config/run.sh" not in deep
        assert "config/ops.json" in deep

    def test_alias_to_disallowed_file_hidden(
        self, repository: FileRepository, server_root: Path
    ) -> None:
        """A disallowed file reached under an allowed name is never listed."""
        (server_root / "config" / "level.json").symlink_to(server_root / "world" / "level.dat")

        assert "config/level.json" not in _paths(repository.list_files("config", recursive=True))

    def test_disallowed_alias_rejected_on_read(
        self, repository: FileRepository, server_root: Path
    ) -> None:
        """Reading through a disallowed name fails."""
        (server_root / "evil.sh").symlink_to(server_root / "config" / "ops.json")

        with pytest.raises(ExtensionDeniedError):
            repository.read_file("evil.sh")

    def test_delete_removes_link_not_target(
        self, repository: FileRepository, server_root: Path
    ) -> None:
        """Deleting a symlink leaves the file it points to in place."""
        link = server_root / "link.json"
        link.symlink_to(server_root / "config" / "ops.json")

        repository.delete_file("link.json")

        assert not link.is_symlink()
        assert (server_root / "config" / "ops.json").is_file()

    def test_delete_link_to_directory_refused(
        self, repository: FileRepository, server_root: Path
    ) -> None:
        """A symlink to a directory counts as a directory."""
        link = server_root / "cfg.json"
        link.symlink_to(server_root / "config", target_is_directory=True)

        with pytest.raises(IsDirectoryError):
            repository.delete_file("cfg.json")

        assert link.is_symlink()


class TestEditSession:
    """An end-to-end editing session against one repository."""

    def test_write_list_read_delete(self, repository: FileRepository) -> None:
        """A written file shows up in listings until it is deleted."""
        repository.write_file("config/mods/tweaks.toml.json", '{"speed": 2}')

        listed = _paths(repository.list_files("config", recursive=True))
        assert "config/mods" in listed
        assert "config/mods/tweaks.toml.json" in listed
        assert repository.read_file("config/mods/tweaks.toml.json") == '{"speed": 2}'

        repository.delete_file("config/mods/tweaks.toml.json")

        assert repository.list_files("config/mods") == []
        with pytest.raises(PathNotFoundError):
            repository.read_file("config/mods/tweaks.toml.json")
