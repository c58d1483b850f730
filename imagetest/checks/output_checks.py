"""
Output Checks
=============
Assert that a command run against an image prints an expected substring.

Two variants:
    exec — inside the already running scenario container
    run  — in a fresh, auto-removed container started from the image

Launch and exit failures propagate as CommandError with the captured
output; a missing substring raises OutputMismatchError with the full output.
"""
import logging
from typing import Callable, Sequence

from imagetest.core.config import CONTAINER_RUNTIME, SCL_CHECK_COMMAND, SCL_EXPECTED_OUTPUT
from imagetest.core.errors import OutputMismatchError
from imagetest.executor.container_runner import exec_in_container, run_in_image
from imagetest.models.command_spec import CommandSpec

logger = logging.getLogger(__name__)

ImageCheck = Callable[[str, str], None]


def _assert_contains(operation: str, output: bytes, expected_output: str) -> None:
    if expected_output.encode("utf-8") not in output:
        raise OutputMismatchError(operation, output, expected_output)


def check_exec_output_contains(
    container_id: str,
    argv: Sequence[str],
    expected_output: str,
    *,
    runtime: str = CONTAINER_RUNTIME,
) -> None:
    result = exec_in_container(container_id, argv, runtime=runtime)
    _assert_contains(f"{runtime} exec", result.output, expected_output)
    logger.debug("exec in %s printed %r", container_id[:12], expected_output)


def check_run_output_contains(
    image_name: str,
    argv: Sequence[str],
    expected_output: str,
    *,
    runtime: str = CONTAINER_RUNTIME,
) -> None:
    result = run_in_image(image_name, argv, runtime=runtime)
    _assert_contains(f"{runtime} run", result.output, expected_output)
    logger.debug("run of %s printed %r", image_name, expected_output)


def command_check(
    command: str,
    expected_output: str,
    *,
    runtime: str = CONTAINER_RUNTIME,
) -> ImageCheck:
    """
    Build a reusable check for ``(image_name, container_id)``.

    The returned check runs ``command`` through bash inside the running
    container first, then in a fresh container from the image. The second
    half is skipped when the first fails.
    """
    spec = CommandSpec(command=command, expected_output=expected_output)

    def check(image_name: str, container_id: str) -> None:
        check_exec_output_contains(container_id, spec.argv, spec.expected_output, runtime=runtime)
        check_run_output_contains(image_name, spec.argv, spec.expected_output, runtime=runtime)

    check.__name__ = f"command_check[{command}]"
    return check


def check_scl_enabled(
    image_name: str,
    container_id: str,
    *,
    command: str = SCL_CHECK_COMMAND,
    expected_output: str = SCL_EXPECTED_OUTPUT,
    runtime: str = CONTAINER_RUNTIME,
) -> None:
    """Verify the software collection is enabled by checking the interpreter version."""
    command_check(command, expected_output, runtime=runtime)(image_name, container_id)
