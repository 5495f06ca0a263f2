"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules. The
``server_root`` fixture builds a small game-server directory:

    mc/
        config/ops.json       (allowed)
        config/server.yaml    (allowed)
        world/level.dat       (extension not allowed)
        server.properties     (extension not allowed)
        eula                  (no extension)
"""

from pathlib import Path

import pytest
from mcremote.core.config import AgentConfig
from mcremote.files.repository import FileRepository
from mcremote.security.resolver import PathResolver

OPS_JSON = '[{"uuid": "069a79f4", "name": "Notch", "level": 4}]\n'

ALLOWED = frozenset({".json", ".yaml"})


@pytest.fixture
def server_root(tmp_path: Path) -> Path:
    """Create a sample server directory below tmp_path."""
    root = tmp_path / "srv" / "mc"
    (root / "config").mkdir(parents=True)
    (root / "world").mkdir()
    (root / "config" / "ops.json").write_text(OPS_JSON, encoding="utf-8")
    (root / "config" / "server.yaml").write_text("difficulty: hard\n", encoding="utf-8")
    (root / "world" / "level.dat").write_bytes(b"\x0a\x00\x00\x01")
    (root / "server.properties").write_text("motd=hello\n", encoding="utf-8")
    (root / "eula").write_text("eula=true\n", encoding="utf-8")
    return root.resolve()


@pytest.fixture
def agent_config(server_root: Path) -> AgentConfig:
    """AgentConfig exposing server_root with a .json/.yaml allowlist."""
    return AgentConfig(
        api_key="test-api-key",
        root_path=str(server_root),
        allowed_extensions=".json,.yaml",
        max_file_size_bytes=1024,
        server_name="Test Server",
    )


@pytest.fixture
def resolver(server_root: Path) -> PathResolver:
    """PathResolver bound to server_root."""
    return PathResolver(server_root, ALLOWED)


@pytest.fixture
def repository(resolver: PathResolver) -> FileRepository:
    """FileRepository with a 1 KiB read limit."""
    return FileRepository(resolver, max_file_size_bytes=1024)
