"""Server directory inspection.

Classifies the exposed root by looking for well-known directories and
launcher files, and probes the host for its Java runtime version.
Nothing here reads file contents; only existence checks are performed.
"""

import functools
import logging
import platform
import re
import subprocess
from pathlib import Path

from mcremote.files.models import ModLoader, ServerInfo, ServerType
from mcremote.utils.shell import find_executable, probe

logger = logging.getLogger(__name__)

UNKNOWN_VERSION = "unknown"

# Matches: openjdk version "17.0.2" 2022-01-18 / java version "1.8.0_391"
_JAVA_VERSION_RE = re.compile(r'version\s+"([^"]+)"')


def detect_server_type(root: Path) -> ServerType:
    """Classify the server flavour from its directory layout.

    Args:
        root: Server root directory.

    Returns:
        ServerType classification.
    """
    if (root / "mods").is_dir() and (root / "config").is_dir():
        return ServerType.MODDED
    if (root / "plugins").is_dir():
        return ServerType.PLUGIN
    if (root / "server.properties").exists():
        return ServerType.VANILLA
    return ServerType.UNKNOWN


def detect_mod_loader(root: Path) -> ModLoader:
    """Detect the mod loader from launcher files and library folders.

    Checks in order: Fabric, Forge, NeoForge, Paper/Purpur, Spigot.

    Args:
        root: Server root directory.

    Returns:
        ModLoader classification.
    """
    if (root / "fabric-server-launch.jar").exists() or (root / "fabric-server.jar").exists():
        return ModLoader.FABRIC
    if (root / "forge").exists() or (root / "libraries/net/minecraftforge").is_dir():
        return ModLoader.FORGE
    if (root / "libraries/net/neoforged").is_dir():
        return ModLoader.NEOFORGE
    if (root / "paper.jar").exists() or (root / "purpur.jar").exists():
        return ModLoader.PAPER
    if (root / "spigot.jar").exists():
        return ModLoader.SPIGOT
    return ModLoader.UNKNOWN


def probe_java_version() -> str:
    """Query the host's Java runtime version.

    Returns:
        Version string (e.g. "17.0.2"), or "unknown" if Java is not
        installed or its banner cannot be parsed.
    """
    java = find_executable("java")
    if java is None:
        return UNKNOWN_VERSION

    try:
        output = probe([java, "-version"])
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.debug("Cannot probe Java version: %s", exc)
        return UNKNOWN_VERSION

    match = _JAVA_VERSION_RE.search(output.text)
    if match is None:
        return UNKNOWN_VERSION
    return match.group(1)


@functools.cache
def host_java_version() -> str:
    """Java version of the host, probed once per process."""
    return probe_java_version()


def collect_server_info(root: Path, server_name: str, java_version: str) -> ServerInfo:
    """Gather descriptive information about the server directory.

    Args:
        root: Canonical server root directory.
        server_name: Configured display name.
        java_version: Host Java version, see ``host_java_version``.

    Returns:
        ServerInfo describing the installation and host.
    """
    return ServerInfo(
        server_name=server_name,
        root_path=str(root),
        server_type=detect_server_type(root),
        mod_loader=detect_mod_loader(root),
        has_config_dir=(root / "config").is_dir(),
        has_mods=(root / "mods").is_dir(),
        has_plugins=(root / "plugins").is_dir(),
        java_version=java_version,
        os=platform.system() or UNKNOWN_VERSION,
    )
