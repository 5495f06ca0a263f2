"""mcremote - Remote file access agent for game-server installations.

Exposes a confined, extension-filtered view of a server directory over
HTTP to a remote editor, protected by a single shared API key.
"""

__version__ = "1.0.0"
