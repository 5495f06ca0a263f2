"""Confined file access module.

This module provides the listing and file operations exposed to remote
clients, the models they return, and server directory inspection.
"""

from mcremote.files.models import FileEntry, ModLoader, ServerInfo, ServerType
from mcremote.files.repository import FileRepository
from mcremote.files.server_info import collect_server_info

__all__ = [
    "FileEntry",
    "FileRepository",
    "ModLoader",
    "ServerInfo",
    "ServerType",
    "collect_server_info",
]
