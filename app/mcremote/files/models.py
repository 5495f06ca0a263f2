"""File access domain models.

This module defines the data structures returned by the file repository
and the server directory inspection: listing entries, server flavour
classifications and the descriptive server info record.
"""

from dataclasses import dataclass
from enum import Enum


class ServerType(str, Enum):
    """Flavour of game server detected from the directory layout.

    Attributes:
        MODDED: Both mods/ and config/ directories exist.
        PLUGIN: A plugins/ directory exists.
        VANILLA: Only server.properties was found.
        UNKNOWN: No known signature matched.
    """

    MODDED = "modded"
    PLUGIN = "plugin"
    VANILLA = "vanilla"
    UNKNOWN = "unknown"


class ModLoader(str, Enum):
    """Mod loader or server software detected from launcher files."""

    FABRIC = "fabric"
    FORGE = "forge"
    NEOFORGE = "neoforge"
    PAPER = "paper"
    SPIGOT = "spigot"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class FileEntry:
    """A single node reported by a directory listing.

    Entries are built fresh for every listing call and never cached.

    Attributes:
        path: Root-relative, slash-separated path (never starts with "/").
        size: Size in bytes (0 for directories).
        last_modified: Last modification time in milliseconds since epoch.
        is_directory: Whether the node is a directory.
    """

    path: str
    size: int
    last_modified: int
    is_directory: bool

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if self.path.startswith("/"):
            msg = f"Entry path must be root-relative, got {self.path!r}"
            raise ValueError(msg)
        if self.size < 0:
            msg = f"Size cannot be negative, got {self.size}"
            raise ValueError(msg)

    @property
    def sort_key(self) -> tuple[bool, str]:
        """Directories first, then ascending by path."""
        return (not self.is_directory, self.path)


@dataclass(frozen=True, slots=True)
class ServerInfo:
    """Descriptive information about the exposed server directory.

    Attributes:
        server_name: Configured display name.
        root_path: Absolute root directory.
        server_type: Detected server flavour.
        mod_loader: Detected mod loader.
        has_config_dir: Whether config/ exists.
        has_mods: Whether mods/ exists.
        has_plugins: Whether plugins/ exists.
        java_version: Java runtime version on the host, "unknown" if absent.
        os: Host operating system name.
    """

    server_name: str
    root_path: str
    server_type: ServerType
    mod_loader: ModLoader
    has_config_dir: bool
    has_mods: bool
    has_plugins: bool
    java_version: str
    os: str
