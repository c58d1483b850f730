"""
Process Runner
==============
Runs an external command synchronously and captures its combined output.

BOUNDARY RULES:
    - The runner ONLY executes and captures.
    - The runner NEVER retries — retry policy belongs to the caller.
    - The runner NEVER interprets output — it is opaque bytes.

Failure contract:
    On launch failure or non-zero exit a CommandError is raised. The error
    always carries the captured bytes, since that is where the external
    tool puts its diagnostics.
"""
import time
import logging
import subprocess
from dataclasses import dataclass, field
from typing import Optional, Sequence

from imagetest.core.errors import CommandError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """
    Captured outcome of a successful external command.

    Fields
    ------
    argv : list[str]
        The full command line that was executed.
    output : bytes
        Merged stdout + stderr.
    exit_code : int
        Process exit code (always 0 for a returned result).
    duration_seconds : float
        Wall clock duration of the invocation.
    """
    argv: list[str] = field(default_factory=list)
    output: bytes = b""
    exit_code: int = 0
    duration_seconds: float = 0.0

    @property
    def text(self) -> str:
        return self.output.decode("utf-8", errors="replace")


def run_command(
    executable: str,
    args: Sequence[str],
    *,
    timeout: Optional[float] = None,
) -> CommandResult:
    """
    Execute ``executable`` with ``args`` and capture merged output.

    Parameters
    ----------
    executable : str
        Program name, resolved through PATH.
    args : Sequence[str]
        Ordered argument list, passed without a shell.
    timeout : float | None
        Optional deadline in seconds. None waits for the process to exit.

    Returns
    -------
    CommandResult
        Output and timing of a zero-exit invocation.

    Raises
    ------
    CommandError
        If the process cannot be launched, times out or exits non-zero.
    """
    argv = [executable, *args]
    logger.debug("Running: %s", " ".join(argv))
    start_time = time.monotonic()

    try:
        completed = subprocess.run(
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise CommandError(argv, f"timed out after {timeout}s", e.output or b"") from e
    except OSError as e:
        raise CommandError(argv, str(e)) from e

    duration = round(time.monotonic() - start_time, 3)
    output = completed.stdout or b""
    logger.debug(
        "Finished: %s | exit=%d | time=%.2fs", argv[0], completed.returncode, duration,
    )

    if completed.returncode != 0:
        raise CommandError(
            argv,
            f"exit status {completed.returncode}",
            output,
            exit_code=completed.returncode,
        )

    return CommandResult(
        argv=argv,
        output=output,
        exit_code=completed.returncode,
        duration_seconds=duration,
    )
