"""File operations on the confined server directory.

Every operation derives exactly one confined path through the
``PathResolver`` before touching the filesystem. Direct operations on a
single path are strict and raise typed errors; listings are permissive
and silently drop entries the resolver would reject.

There is no locking: concurrent writes to the same path race at the
filesystem level and the last completed write wins.
"""

import logging
import os
import stat
from collections.abc import Iterator
from pathlib import Path

from mcremote.core.config import AgentConfig
from mcremote.core.errors import (
    FileTooLargeError,
    InternalError,
    InvalidEncodingError,
    IsDirectoryError,
    NotDirectoryError,
    PathNotFoundError,
)
from mcremote.files.models import FileEntry
from mcremote.security.resolver import PathResolver

logger = logging.getLogger(__name__)


class FileRepository:
    """List, read, write and delete files below the exposed root.

    Args:
        resolver: Resolver confining client paths to the root.
        max_file_size_bytes: Largest file size returned by ``read_file``.
    """

    def __init__(self, resolver: PathResolver, max_file_size_bytes: int) -> None:
        if max_file_size_bytes <= 0:
            msg = f"max_file_size_bytes must be positive, got {max_file_size_bytes}"
            raise ValueError(msg)
        self._resolver = resolver
        self._max_file_size_bytes = max_file_size_bytes

    @classmethod
    def from_config(cls, config: AgentConfig, resolver: PathResolver) -> "FileRepository":
        """Build a repository from the agent configuration."""
        return cls(resolver, config.max_file_size_bytes)

    @property
    def max_file_size_bytes(self) -> int:
        """Configured read limit in bytes."""
        return self._max_file_size_bytes

    # =========================================================================
    # Listing
    # =========================================================================

    def list_files(self, relative_path: str | None, recursive: bool = False) -> list[FileEntry]:
        """List a directory below the root.

        Directories are always reported; files are reported only if they
        pass the resolver's extension check. Entries that cannot be read
        are skipped. The result is ordered directories first, then by
        root-relative path.

        Args:
            relative_path: Directory relative to the root (None or "" for root).
            recursive: If True, walk the whole subtree. The start directory
                itself is never reported.

        Returns:
            Ordered list of FileEntry.

        Raises:
            PathEscapeError: If the path leaves the root.
            ExtensionDeniedError: If the path fails the extension check.
            PathNotFoundError: If the directory does not exist.
            NotDirectoryError: If the path is not a directory.
            InternalError: If the directory cannot be enumerated.
        """
        display = relative_path or ""
        directory = self._resolver.resolve(relative_path)

        if not directory.exists():
            raise PathNotFoundError(f"Directory not found: {display}")
        if not directory.is_dir():
            raise NotDirectoryError(f"Path is not a directory: {display}")

        try:
            if recursive:
                entries = list(self._walk(directory))
            else:
                entries = list(self._iter_children(directory))
        except OSError as e:
            logger.error("Cannot list directory %r: %s", display, e.strerror)
            raise InternalError(f"Cannot list directory {display}: {e.strerror}") from e

        entries.sort(key=lambda entry: entry.sort_key)
        return entries

    def _iter_children(self, directory: Path) -> Iterator[FileEntry]:
        """Yield entries for the immediate children of a directory.

        Args:
            directory: Confined directory to enumerate.

        Yields:
            FileEntry for each visible child.
        """
        for child in directory.iterdir():
            try:
                is_directory = child.is_dir()
            except OSError:
                logger.debug("Cannot determine type of: %s", child)
                continue

            if not self._is_visible(child, is_directory):
                continue

            entry = self._make_entry(child, is_directory)
            if entry is not None:
                yield entry

    def _walk(self, start: Path) -> Iterator[FileEntry]:
        """Lazily walk a subtree and yield visible entries.

        Symlinked directories are reported but not descended into.
        Directories that cannot be read are reported (when seen from their
        parent) and their contents skipped.

        Args:
            start: Confined directory to walk.

        Yields:
            FileEntry for every visible node below ``start``.
        """
        for dirpath, dirnames, filenames in os.walk(start, onerror=self._log_walk_error):
            current = Path(dirpath)

            for name in dirnames:
                child = current / name
                if not self._is_visible(child, is_directory=True):
                    continue
                entry = self._make_entry(child, is_directory=True)
                if entry is not None:
                    yield entry

            for name in filenames:
                child = current / name
                if not self._is_visible(child, is_directory=False):
                    continue
                entry = self._make_entry(child, is_directory=False)
                if entry is not None:
                    yield entry

    def _is_visible(self, path: Path, is_directory: bool) -> bool:
        """Decide whether a listing may report a node.

        Files must pass the full resolver check. Directories only need to
        stay inside the root once symlinks are followed.
        """
        if is_directory:
            visible = self._resolver.is_confined(path)
        else:
            visible = self._resolver.is_allowed(path)

        if not visible:
            logger.debug("Listing skips rejected entry: %s", self._resolver.relativize(path))
        return visible

    def _make_entry(self, path: Path, is_directory: bool) -> FileEntry | None:
        """Build a FileEntry from a filesystem node.

        Args:
            path: Node inside the root.
            is_directory: Whether the node is a directory.

        Returns:
            FileEntry, or None if the node cannot be stat'ed.
        """
        try:
            st = path.stat()
        except OSError:
            logger.debug("Skipping unreadable entry: %s", self._resolver.relativize(path))
            return None

        return FileEntry(
            path=self._resolver.relativize(path),
            size=0 if is_directory else st.st_size,
            last_modified=st.st_mtime_ns // 1_000_000,
            is_directory=is_directory,
        )

    def _log_walk_error(self, error: OSError) -> None:
        """Log a directory the walk could not enter and carry on."""
        logger.debug("Walk skipped unreadable directory: %s", error.strerror)

    # =========================================================================
    # Single-file operations
    # =========================================================================

    def read_file(self, relative_path: str) -> str:
        """Read a file as UTF-8 text.

        The on-disk size is checked before any content is read, and the
        read itself never buffers more than the limit plus one byte.

        Args:
            relative_path: File path relative to the root.

        Returns:
            Decoded file content.

        Raises:
            PathEscapeError: If the path leaves the root.
            ExtensionDeniedError: If the extension is not allowed.
            PathNotFoundError: If the file does not exist.
            IsDirectoryError: If the path is a directory.
            FileTooLargeError: If the file exceeds the read limit.
            InvalidEncodingError: If the content is not valid UTF-8.
            InternalError: On unexpected I/O failure.
        """
        target = self._resolver.resolve(relative_path)

        if not target.exists():
            raise PathNotFoundError(f"File not found: {relative_path}")
        if target.is_dir():
            raise IsDirectoryError(f"Path is a directory: {relative_path}")

        limit = self._max_file_size_bytes
        try:
            size = target.stat().st_size
            if size > limit:
                raise FileTooLargeError(f"File too large: {size} bytes (max: {limit})")

            with open(target, "rb") as f:
                data = f.read(limit + 1)
        except OSError as e:
            logger.error("Cannot read %r: %s", relative_path, e.strerror)
            raise InternalError(f"Cannot read {relative_path}: {e.strerror}") from e

        # File grew between stat and read
        if len(data) > limit:
            raise FileTooLargeError(f"File too large: more than {limit} bytes (max: {limit})")

        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidEncodingError(f"File is not valid UTF-8: {relative_path}") from e

    def write_file(self, relative_path: str, content: str) -> None:
        """Write UTF-8 text to a file, creating parent directories.

        Existing content is overwritten unconditionally.

        Args:
            relative_path: File path relative to the root.
            content: Text to write.

        Raises:
            PathEscapeError: If the path leaves the root.
            ExtensionDeniedError: If the extension is not allowed.
            IsDirectoryError: If the path is an existing directory.
            InternalError: On unexpected I/O failure.
        """
        target = self._resolver.resolve(relative_path)

        if target.is_dir():
            raise IsDirectoryError(f"Path is a directory: {relative_path}")

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content.encode("utf-8"))
        except OSError as e:
            logger.error("Cannot write %r: %s", relative_path, e.strerror)
            raise InternalError(f"Cannot write {relative_path}: {e.strerror}") from e

        logger.info("Wrote %s (%d chars)", relative_path, len(content))

    def delete_file(self, relative_path: str) -> None:
        """Delete a single file. Directories are never deleted.

        A symlink is removed itself; the file it points to is left alone.
        Links to directories count as directories.

        Args:
            relative_path: File path relative to the root.

        Raises:
            PathEscapeError: If the path leaves the root.
            ExtensionDeniedError: If the extension is not allowed.
            PathNotFoundError: If the file does not exist.
            IsDirectoryError: If the path is a directory.
            InternalError: On unexpected I/O failure.
        """
        target = self._resolver.locate(relative_path)

        try:
            mode = target.stat().st_mode
        except FileNotFoundError as e:
            raise PathNotFoundError(f"File not found: {relative_path}") from e
        except OSError as e:
            raise InternalError(f"Cannot delete {relative_path}: {e.strerror}") from e

        if stat.S_ISDIR(mode):
            raise IsDirectoryError(f"Cannot delete directories: {relative_path}")

        try:
            target.unlink()
        except FileNotFoundError as e:
            raise PathNotFoundError(f"File not found: {relative_path}") from e
        except OSError as e:
            logger.error("Cannot delete %r: %s", relative_path, e.strerror)
            raise InternalError(f"Cannot delete {relative_path}: {e.strerror}") from e

        logger.info("Deleted %s", relative_path)
