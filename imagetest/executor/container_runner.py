"""
Container Runner
================
Thin wrappers around the container runtime CLI.

DOCKER STRATEGY:
    - One detached container per scenario, running as a fixed non-root user.
    - The application port is published to an arbitrary host port.
    - The container is force-removed exactly once, by ``running_container``.
    - One-off commands use ``run --rm`` so they clean up after themselves.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Sequence

from imagetest.core.config import APP_PORT, APP_USER_ID, CONTAINER_RUNTIME
from imagetest.core.constants import INSPECT_IP_FORMAT
from imagetest.core.errors import CommandError, ImageTestError
from imagetest.executor.process_runner import CommandResult, run_command

logger = logging.getLogger(__name__)


def run_app(
    image_name: str,
    *,
    user_id: int = APP_USER_ID,
    port: int = APP_PORT,
    runtime: str = CONTAINER_RUNTIME,
) -> str:
    """Start a detached container from ``image_name`` and return its id."""
    result = run_command(
        runtime,
        ["run", f"--user={user_id}", "-p", str(port), "-d", image_name],
    )
    container_id = result.text.strip()
    logger.info("Container %s started from %s", container_id[:12], image_name)
    return container_id


def stop_app(container_id: str, *, runtime: str = CONTAINER_RUNTIME) -> None:
    """Force-remove a container."""
    run_command(runtime, ["rm", "-f", container_id])
    logger.info("Container %s removed", container_id[:12])


@contextmanager
def running_container(
    image_name: str,
    *,
    user_id: int = APP_USER_ID,
    port: int = APP_PORT,
    runtime: str = CONTAINER_RUNTIME,
) -> Iterator[str]:
    """
    Start a container and remove it when the block exits.

    Removal is tied to a successful start: if ``run_app`` raises there is
    nothing to remove. If removal fails while the block is already raising,
    the removal error is logged and the original exception wins.
    """
    container_id = run_app(image_name, user_id=user_id, port=port, runtime=runtime)
    try:
        yield container_id
    except BaseException:
        try:
            stop_app(container_id, runtime=runtime)
        except CommandError:
            logger.error("Failed to remove container %s", container_id[:12], exc_info=True)
        raise
    else:
        stop_app(container_id, runtime=runtime)


def inspect_container_ip(container_id: str, *, runtime: str = CONTAINER_RUNTIME) -> str:
    """Return the container's address on the runtime's internal network."""
    result = run_command(runtime, ["inspect", INSPECT_IP_FORMAT, container_id])
    address = result.text.strip().strip("'").strip()
    if not address:
        raise ImageTestError(f"container {container_id[:12]} has no network address")
    logger.debug("Container %s has address %s", container_id[:12], address)
    return address


def container_url(address: str, port: int = APP_PORT) -> str:
    return f"http://{address}:{port}"


def exec_in_container(
    container_id: str,
    argv: Sequence[str],
    *,
    runtime: str = CONTAINER_RUNTIME,
) -> CommandResult:
    """Run ``argv`` inside an already running container."""
    return run_command(runtime, ["exec", container_id, *argv])


def run_in_image(
    image_name: str,
    argv: Sequence[str],
    *,
    runtime: str = CONTAINER_RUNTIME,
) -> CommandResult:
    """Run ``argv`` in a fresh, auto-removed container started from ``image_name``."""
    return run_command(runtime, ["run", "--rm", image_name, *argv])
