"""Response models for the HTTP API.

Field names are snake_case in Python and camelCase on the wire, which is
the format remote clients expect.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from mcremote.files.models import FileEntry, ServerInfo


class ApiModel(BaseModel):
    """Base model serializing to camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(ApiModel):
    """Body of every failure response."""

    error: str
    message: str


class StatusResponse(ApiModel):
    """Unauthenticated liveness probe."""

    status: Literal["ok", "error"] = "ok"
    version: str
    server_name: str


class FileEntryModel(ApiModel):
    """One node of a directory listing."""

    path: str
    size: int
    last_modified: int
    is_directory: bool

    @classmethod
    def from_entry(cls, entry: FileEntry) -> "FileEntryModel":
        """Convert a repository FileEntry."""
        return cls(
            path=entry.path,
            size=entry.size,
            last_modified=entry.last_modified,
            is_directory=entry.is_directory,
        )


class FileListResponse(ApiModel):
    """Directory listing."""

    files: list[FileEntryModel]


class FileContentResponse(ApiModel):
    """Content of a single file."""

    path: str
    content: str
    encoding: str = "UTF-8"


class FileMutationResponse(ApiModel):
    """Acknowledgement of a write or delete."""

    success: bool = True
    path: str


class ServerInfoResponse(ApiModel):
    """Descriptive information about the server directory."""

    server_name: str
    root_path: str
    server_type: str
    mod_loader: str
    has_config_dir: bool
    has_mods: bool
    has_plugins: bool
    java_version: str
    os: str

    @classmethod
    def from_info(cls, info: ServerInfo) -> "ServerInfoResponse":
        """Convert a ServerInfo record."""
        return cls(
            server_name=info.server_name,
            root_path=info.root_path,
            server_type=info.server_type.value,
            mod_loader=info.mod_loader.value,
            has_config_dir=info.has_config_dir,
            has_mods=info.has_mods,
            has_plugins=info.has_plugins,
            java_version=info.java_version,
            os=info.os,
        )
