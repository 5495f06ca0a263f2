"""Confinement of client-supplied paths to the exposed root directory.

Every filesystem operation performed on behalf of a client starts here:
a raw, attacker-controlled relative path string is turned either into a
canonical absolute path inside the root (a "confined path") or into a
security rejection.
"""

import logging
from pathlib import Path

from mcremote.core.config import AgentConfig, resolve_root
from mcremote.core.errors import ExtensionDeniedError, PathEscapeError

logger = logging.getLogger(__name__)


class PathResolver:
    """Confines relative paths to a root directory and an extension allowlist.

    The resolver holds no mutable state; a single instance is shared by all
    concurrent requests.

    Args:
        root: Root directory. Canonicalized on construction.
        allowed_extensions: Dot-prefixed extensions permitted for file targets.
            Matching is case-insensitive.
    """

    def __init__(self, root: Path, allowed_extensions: frozenset[str]) -> None:
        self._root = root.resolve()
        self._allowed_extensions = frozenset(ext.lower() for ext in allowed_extensions)

    @classmethod
    def from_config(cls, config: AgentConfig) -> "PathResolver":
        """Build a resolver from the agent configuration.

        Raises:
            ConfigError: If the configured root is not an existing directory.
        """
        return cls(resolve_root(config), config.allowed_extensions)

    @property
    def root(self) -> Path:
        """Canonical absolute root directory."""
        return self._root

    @property
    def allowed_extensions(self) -> frozenset[str]:
        """Lower-cased allowed extensions."""
        return self._allowed_extensions

    def resolve(self, user_path: str | None) -> Path:
        """Resolve a client path to a confined absolute path.

        An empty or missing path denotes the root itself and skips the
        extension check. Backslashes are treated as separators and leading
        separators are stripped, so every input is interpreted relative to
        the root. The joined path is canonicalized (``..`` collapsed,
        symlinks followed) before the confinement check.

        The extension check applies to the final segment as the client
        named it and, when that segment is a symlink, to the name of its
        target as well. It is skipped when the input ends with a separator,
        which marks an intended directory target. A final segment without a
        dot passes only if nothing non-directory exists there yet.

        Args:
            user_path: Relative path as sent by the client.

        Returns:
            Canonical absolute path inside the root, symlinks followed.

        Raises:
            PathEscapeError: If the path resolves outside the root.
            ExtensionDeniedError: If the file target's extension is not allowed.
        """
        _, resolved = self._confine(user_path)
        return resolved

    def locate(self, user_path: str | None) -> Path:
        """Validate a client path like ``resolve`` and return the node it names.

        Directories leading up to the final segment are resolved, the final
        segment itself is not followed. Operations that act on the entry
        rather than its content (such as deleting a symlink) use this path.

        Args:
            user_path: Relative path as sent by the client.

        Returns:
            Absolute path of the named node inside the root.

        Raises:
            PathEscapeError: If the path or its parent resolves outside the root.
            ExtensionDeniedError: If the file target's extension is not allowed.
        """
        node, _ = self._confine(user_path)
        return node

    def _confine(self, user_path: str | None) -> tuple[Path, Path]:
        """Run the confinement and extension checks.

        Returns:
            Tuple of (named node, fully resolved target).
        """
        if not user_path:
            return self._root, self._root

        normalized = user_path.replace("\\", "/").lstrip("/")
        joined = self._root / normalized

        try:
            resolved = joined.resolve()
            parent = joined.parent.resolve()
        except (OSError, RuntimeError, ValueError) as e:
            logger.warning("Unresolvable path rejected: %r", user_path)
            raise PathEscapeError(f"Invalid path: {user_path}") from e

        # A trailing ".." names a directory, which is its own resolved target
        node = resolved if joined.name == ".." else parent / joined.name

        if not (resolved.is_relative_to(self._root) and node.is_relative_to(self._root)):
            logger.warning("Path traversal attempt blocked: %r", user_path)
            raise PathEscapeError(f"Path traversal attempt blocked: {user_path}")

        if normalized and not normalized.endswith("/") and node != self._root:
            self._check_extension(node.name, resolved, user_path)
            if resolved.name != node.name:
                self._check_extension(resolved.name, resolved, user_path)

        return node, resolved

    def relativize(self, path: Path) -> str:
        """Express a confined path relative to the root.

        Args:
            path: Absolute path inside the root.

        Returns:
            Slash-separated root-relative path, empty for the root itself.
        """
        relative = path.relative_to(self._root).as_posix()
        return "" if relative == "." else relative

    def is_allowed(self, path: Path) -> bool:
        """Check whether an existing path would pass ``resolve``.

        Used by listings, which filter rejected entries instead of failing.

        Args:
            path: Absolute path inside the root.
        """
        try:
            self.resolve(self.relativize(path))
        except (PathEscapeError, ExtensionDeniedError):
            return False
        return True

    def is_confined(self, path: Path) -> bool:
        """Check whether a path stays inside the root once symlinks are followed.

        Args:
            path: Absolute path to check.
        """
        try:
            return path.resolve().is_relative_to(self._root)
        except (OSError, RuntimeError):
            return False

    def _check_extension(self, filename: str, resolved: Path, user_path: str) -> None:
        """Enforce the extension allowlist on one name of a file target.

        Args:
            filename: Final path segment to check.
            resolved: Canonical path of the target.
            user_path: Original client input, used in the error message.

        Raises:
            ExtensionDeniedError: If the target is not an allowed file.
        """
        dot_index = filename.rfind(".")

        if dot_index >= 0:
            ext = filename[dot_index:].lower()
            if ext not in self._allowed_extensions:
                logger.warning("Extension %r denied for %r", ext, user_path)
                raise ExtensionDeniedError(f"File extension not allowed: {ext}")
            return

        # Existing extensionless files are never served; new targets may be created
        if resolved.exists() and not resolved.is_dir():
            logger.warning("Extensionless file denied: %r", user_path)
            raise ExtensionDeniedError(f"Files without extension are not allowed: {user_path}")
