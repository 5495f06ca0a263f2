"""Error taxonomy for remote file access.

Every failure that can reach a client is a ``RemoteError`` subclass that
carries a stable machine-readable ``code`` and the HTTP status the
dispatch layer answers with. Messages only ever echo the client's own
input, never absolute host paths.
"""


class RemoteError(Exception):
    """Base exception for all client-visible failures.

    Attributes:
        code: Stable machine-readable error code.
        status_code: HTTP status used when the error reaches a client.
        message: Short human-readable description.
    """

    code: str = "INTERNAL_ERROR"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthorizedError(RemoteError):
    """Raised when the shared-secret credential is missing or wrong."""

    code = "UNAUTHORIZED"
    status_code = 401


class BadRequestError(RemoteError):
    """Raised when a request is missing a required parameter or is malformed."""

    code = "BAD_REQUEST"
    status_code = 400


class AccessDeniedError(RemoteError):
    """Base class for security rejections (confinement violated)."""

    code = "FORBIDDEN"
    status_code = 403


class PathEscapeError(AccessDeniedError):
    """Raised when a path resolves outside the root directory."""


class ExtensionDeniedError(AccessDeniedError):
    """Raised when a file target does not carry an allowed extension."""


class PathNotFoundError(RemoteError):
    """Raised when the confined target does not exist."""

    code = "NOT_FOUND"
    status_code = 404


class NotDirectoryError(RemoteError):
    """Raised when a listing targets something other than a directory."""

    code = "NOT_A_DIRECTORY"


class IsDirectoryError(RemoteError):
    """Raised when a file operation targets a directory."""

    code = "IS_A_DIRECTORY"


class FileTooLargeError(RemoteError):
    """Raised when a file exceeds the configured read limit."""

    code = "FILE_TOO_LARGE"


class InvalidEncodingError(RemoteError):
    """Raised when file content is not valid UTF-8."""

    code = "INVALID_ENCODING"


class InternalError(RemoteError):
    """Raised for unexpected I/O failures."""

    code = "INTERNAL_ERROR"
