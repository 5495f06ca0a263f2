"""Security layer for remote file access.

This module provides path confinement with extension filtering and
shared-secret request authentication.
"""

from mcremote.security.gate import API_KEY_HEADER, AccessGate
from mcremote.security.resolver import PathResolver

__all__ = [
    "API_KEY_HEADER",
    "AccessGate",
    "PathResolver",
]
