"""Host command probing.

Runs short-lived, read-only commands on the host (such as ``java -version``)
and captures whatever they print.
"""

import shutil
import subprocess
from dataclasses import dataclass

# Probes run on a request worker and must give it back quickly
PROBE_TIMEOUT = 10.0


@dataclass(frozen=True, slots=True)
class ProbeOutput:
    """Captured output of a probe command.

    Attributes:
        stdout: Text written to standard output.
        stderr: Text written to standard error.
        returncode: Exit status of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def text(self) -> str:
        """Both streams joined, stderr first.

        JVM tools print their version banner on stderr.
        """
        return "\n".join(part for part in (self.stderr, self.stdout) if part)


def probe(args: list[str], *, timeout: float = PROBE_TIMEOUT) -> ProbeOutput:
    """Run a command and capture its text output.

    A non-zero exit status is not treated as an error; callers inspect the
    output instead.

    Args:
        args: Executable and arguments.
        timeout: Seconds to wait before giving up.

    Returns:
        ProbeOutput with both streams and the exit status.

    Raises:
        FileNotFoundError: If the executable does not exist.
        subprocess.TimeoutExpired: If the command runs past ``timeout``.
    """
    completed = subprocess.run(  # nosec: B603
        args,
        capture_output=True,
        text=True,
        check=False,
        timeout=timeout,
    )
    return ProbeOutput(
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
        returncode=completed.returncode,
    )


def find_executable(name: str) -> str | None:
    """Return the full path of an executable on PATH, or None."""
    return shutil.which(name)
