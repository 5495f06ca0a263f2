"""Agent configuration and settings.

This module provides the configuration model and I/O functions for the
remote agent. A single ``AgentConfig`` is loaded once at startup and
passed to every component; it is never mutated afterwards.

On first run the agent writes a default configuration containing a
freshly generated API key. The key is persisted and reused on every
subsequent start.

Configuration is stored in ~/.config/mcremote/agent.toml
"""

import logging
import os
import tomllib
import uuid
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mcremote.core.paths import get_config_path

logger = logging.getLogger(__name__)

DEFAULT_PORT = 25580
DEFAULT_ROOT_PATH = "./"
DEFAULT_EXTENSIONS = ".toml,.json,.json5,.yml,.yaml,.cfg,.properties"
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_SERVER_NAME = "My Minecraft Server"


def parse_extensions(
    raw: str | list[str] | tuple[str, ...] | set[str] | frozenset[str],
) -> frozenset[str]:
    """Normalize an extension allowlist.

    Accepts a comma-separated string or a sequence of tokens. Tokens are
    trimmed and lower-cased, empty tokens are discarded and a leading dot
    is added where missing.

    Args:
        raw: Comma-separated string or iterable of extension tokens.

    Returns:
        Frozen set of dot-prefixed, lower-cased extensions.
    """
    tokens = raw.split(",") if isinstance(raw, str) else list(raw)

    extensions: set[str] = set()
    for token in tokens:
        ext = str(token).strip().lower()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = f".{ext}"
        extensions.add(ext)
    return frozenset(extensions)


class AgentConfig(BaseModel):
    """Configuration for the remote agent.

    Attributes:
        port: TCP port the HTTP server listens on.
        host: Interface address the HTTP server binds to.
        api_key: Shared secret clients must send in the X-API-Key header.
        root_path: Directory exposed to clients (relative paths resolve
            against the working directory at startup).
        allowed_extensions: Dot-prefixed, lower-cased file extensions that
            may be listed, read, written or deleted.
        max_file_size_bytes: Largest file size served by a single read.
        server_name: Display name reported to clients.
        workers: Number of worker threads handling requests.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    port: Annotated[
        int,
        Field(ge=1, le=65535, description="Port to listen on"),
    ] = DEFAULT_PORT
    host: Annotated[
        str,
        Field(description="Interface address to bind"),
    ] = "0.0.0.0"  # nosec: B104
    api_key: Annotated[
        str,
        Field(min_length=1, description="Secret API key for authentication"),
    ]
    root_path: Annotated[
        str,
        Field(description="Root directory to expose"),
    ] = DEFAULT_ROOT_PATH
    allowed_extensions: Annotated[
        frozenset[str],
        Field(description="Allowed file extensions"),
    ] = parse_extensions(DEFAULT_EXTENSIONS)
    max_file_size_bytes: Annotated[
        int,
        Field(gt=0, description="Maximum file size in bytes"),
    ] = DEFAULT_MAX_FILE_SIZE
    server_name: Annotated[
        str,
        Field(description="Display name for this server"),
    ] = DEFAULT_SERVER_NAME
    workers: Annotated[
        int,
        Field(ge=1, le=64, description="Worker threads (1-64)"),
    ] = 4

    @field_validator("allowed_extensions", mode="before")
    @classmethod
    def normalize_extensions(cls, v: object) -> frozenset[str]:
        """Accept comma-separated strings as well as lists."""
        if isinstance(v, (str, list, tuple, set, frozenset)):
            return parse_extensions(v)
        msg = "allowed_extensions must be a string or a list of strings"
        raise ValueError(msg)


class ConfigError(Exception):
    """Base exception for agent configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> AgentConfig:
    """Load agent configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated AgentConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Agent config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read agent config: {e}") from e

    try:
        return AgentConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid agent config content: {e}") from e


def save_config(config: AgentConfig, path: Path | None = None) -> Path:
    """Save agent configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The AgentConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(_config_to_dict(config), f)
        # os.replace() is atomic on POSIX
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write agent config: {e}") from e

    return config_path


def _config_to_dict(config: AgentConfig) -> dict[str, object]:
    """Convert AgentConfig to a dictionary for TOML serialization.

    Extensions are written as a sorted list so the file is stable
    across saves.

    Args:
        config: The AgentConfig to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    return {
        "port": config.port,
        "host": config.host,
        "api_key": config.api_key,
        "root_path": config.root_path,
        "allowed_extensions": sorted(config.allowed_extensions),
        "max_file_size_bytes": config.max_file_size_bytes,
        "server_name": config.server_name,
        "workers": config.workers,
    }


def generate_api_key() -> str:
    """Generate a new random API key."""
    return str(uuid.uuid4())


def load_or_create_config(path: Path | None = None) -> tuple[AgentConfig, bool]:
    """Load the agent config, writing defaults on first run.

    When no config file exists, a default configuration with a newly
    generated API key is saved. The key is never regenerated afterwards.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Tuple of (config, created) where created is True on first run.

    Raises:
        ConfigError: If an existing file is invalid or the defaults cannot
            be written.
    """
    config_path = path or get_config_path()

    try:
        config = load_config(config_path)
    except ConfigNotFoundError:
        config = AgentConfig(api_key=generate_api_key())
        save_config(config, config_path)
        logger.info("Created default config at %s", config_path)
        return config, True

    logger.info("Loaded config from %s", config_path)
    return config, False


def resolve_root(config: AgentConfig) -> Path:
    """Resolve the configured root to an absolute, canonical directory.

    Args:
        config: Agent configuration.

    Returns:
        Canonical absolute path of the root directory.

    Raises:
        ConfigError: If the root does not exist or is not a directory.
    """
    try:
        root = Path(config.root_path).expanduser().resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise ConfigError(f"Invalid root path '{config.root_path}': {e}") from e

    if not root.is_dir():
        raise ConfigError(f"Root path is not a directory: {config.root_path}")
    return root
