"""
Errors
======
Exception taxonomy for image tests.

    launch/exit failure   — CommandError (always carries captured output)
    assertion failure     — CheckAssertionError and subclasses
    retry-exhausted       — RetryExhaustedError
    scenario control      — ScenarioAborted (fatal step), ScenarioFailed (aggregate)
"""
from typing import Optional, Sequence


def decode_output(output: Optional[bytes]) -> str:
    """Decode captured process output for human-readable messages."""
    if not output:
        return ""
    return output.decode("utf-8", errors="replace")


class ImageTestError(Exception):
    """Base exception for imagetest."""


class CommandError(ImageTestError):
    """An external command could not start or exited non-zero."""

    def __init__(
        self,
        argv: Sequence[str],
        cause: str,
        output: bytes = b"",
        exit_code: Optional[int] = None,
    ) -> None:
        self.argv = list(argv)
        self.cause = cause
        self.output = output or b""
        self.exit_code = exit_code
        super().__init__(f"{cause}: {decode_output(self.output)}")

    @property
    def output_text(self) -> str:
        return decode_output(self.output)


class CheckAssertionError(ImageTestError, AssertionError):
    """An expected condition was not observed."""


class OutputMismatchError(CheckAssertionError):
    def __init__(self, operation: str, output: bytes, expected: str) -> None:
        self.operation = operation
        self.output = output
        self.expected = expected
        super().__init__(
            f"{operation} output: got '{decode_output(output)}', want '{expected}'"
        )


class HTTPStatusMismatchError(CheckAssertionError):
    def __init__(self, url: str, status_code: int, expected_status: int) -> None:
        self.url = url
        self.status_code = status_code
        self.expected_status = expected_status
        super().__init__(f"HTTP status: got {status_code}, want {expected_status}")


class RetryExhaustedError(ImageTestError):
    """A bounded retry budget was consumed without success."""

    def __init__(self, attempts: int, last_error: Optional[BaseException]) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"failed after {attempts} attempts: {last_error}")


class ScenarioAborted(ImageTestError):
    """A build, run or inspect step failed; the scenario cannot continue."""


class ScenarioFailed(ImageTestError, AssertionError):
    """One or more recorded failures made the scenario fail."""

    def __init__(self, failures: Sequence) -> None:
        self.failures = list(failures)
        lines = [f"{len(self.failures)} check(s) failed:"]
        lines.extend(f"  - {failure}" for failure in self.failures)
        super().__init__("\n".join(lines))
