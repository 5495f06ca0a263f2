"""HTTP API for remote file access."""

from mcremote.api.app import create_app

__all__ = ["create_app"]
