"""HTTP endpoints for remote file access.

All routes except ``/status`` require a valid X-API-Key header. The key is
checked by a router dependency, which runs before any query parameter is
looked at or any file is touched.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request, Response
from starlette.concurrency import run_in_threadpool

from mcremote import __version__
from mcremote.api.schemas import (
    FileContentResponse,
    FileEntryModel,
    FileListResponse,
    FileMutationResponse,
    ServerInfoResponse,
    StatusResponse,
)
from mcremote.core.config import AgentConfig
from mcremote.core.errors import BadRequestError
from mcremote.files.repository import FileRepository
from mcremote.files.server_info import collect_server_info, host_java_version
from mcremote.security.gate import AccessGate
from mcremote.security.resolver import PathResolver

logger = logging.getLogger(__name__)


def get_config(request: Request) -> AgentConfig:
    """Agent configuration bound to the application."""
    return request.app.state.config


def get_resolver(request: Request) -> PathResolver:
    """Path resolver bound to the application."""
    return request.app.state.resolver


def get_repository(request: Request) -> FileRepository:
    """File repository bound to the application."""
    return request.app.state.repository


def require_api_key(
    request: Request,
    x_api_key: Annotated[str | None, Header()] = None,
) -> None:
    """Reject the request unless it carries the configured API key."""
    gate: AccessGate = request.app.state.gate
    gate.authenticate(x_api_key)


def _require_path(path: str | None) -> str:
    """Return the path query parameter or fail with 400."""
    if not path:
        raise BadRequestError("Missing 'path' query parameter")
    return path


API_PREFIX = "/api/v1"

# Reachable without an API key
PUBLIC_PATHS = frozenset({f"{API_PREFIX}/status"})

public_router = APIRouter(prefix=API_PREFIX)
router = APIRouter(prefix=API_PREFIX, dependencies=[Depends(require_api_key)])


@public_router.get("/status", response_model=StatusResponse)
def status(config: Annotated[AgentConfig, Depends(get_config)]) -> StatusResponse:
    """Liveness probe, reachable without credentials."""
    return StatusResponse(status="ok", version=__version__, server_name=config.server_name)


@router.get("/files", response_model=FileListResponse)
def list_files(
    repository: Annotated[FileRepository, Depends(get_repository)],
    path: str | None = None,
    recursive: str | None = None,
) -> FileListResponse:
    """List a directory below the root."""
    is_recursive = (recursive or "").lower() == "true"
    entries = repository.list_files(path, recursive=is_recursive)
    logger.debug("Listed %r (recursive=%s): %d entries", path or "", is_recursive, len(entries))
    return FileListResponse(files=[FileEntryModel.from_entry(e) for e in entries])


@router.get("/file", response_model=FileContentResponse)
def read_file(
    repository: Annotated[FileRepository, Depends(get_repository)],
    path: str | None = None,
) -> FileContentResponse:
    """Return the UTF-8 content of a file."""
    relative = _require_path(path)
    content = repository.read_file(relative)
    return FileContentResponse(path=relative, content=content)


@router.put("/file", response_model=FileMutationResponse)
async def write_file(
    request: Request,
    repository: Annotated[FileRepository, Depends(get_repository)],
    path: str | None = None,
) -> FileMutationResponse:
    """Replace a file's content with the raw request body."""
    relative = _require_path(path)
    body = await request.body()
    try:
        content = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise BadRequestError("Request body is not valid UTF-8") from e

    await run_in_threadpool(repository.write_file, relative, content)
    return FileMutationResponse(success=True, path=relative)


@router.delete("/file", response_model=FileMutationResponse)
def delete_file(
    repository: Annotated[FileRepository, Depends(get_repository)],
    path: str | None = None,
) -> FileMutationResponse:
    """Delete a single file."""
    relative = _require_path(path)
    repository.delete_file(relative)
    return FileMutationResponse(success=True, path=relative)


@router.get("/info", response_model=ServerInfoResponse)
def server_info(
    config: Annotated[AgentConfig, Depends(get_config)],
    resolver: Annotated[PathResolver, Depends(get_resolver)],
) -> ServerInfoResponse:
    """Describe the server installation behind the root."""
    info = collect_server_info(resolver.root, config.server_name, host_java_version())
    return ServerInfoResponse.from_info(info)


def _options() -> Response:
    """Answer a bare OPTIONS request (preflights are handled by CORS)."""
    return Response(status_code=204, headers={"Allow": "GET, PUT, DELETE, OPTIONS"})


for _path in ("/status", "/files", "/file", "/info"):
    public_router.add_api_route(_path, _options, methods=["OPTIONS"], include_in_schema=False)
