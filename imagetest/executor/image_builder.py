"""
Image Builder
=============
Builds an application image from source with the external
source-to-image tool.

Invocation:
    <tool> build --force-pull=false --context-dir=<dir> <source> <builder> <output>

Reuse mode is decided by the scenario, not here: when the scenario runs
with reuse_images enabled this module is never called.
"""
import logging

from imagetest.core.config import BUILD_TOOL
from imagetest.executor.process_runner import run_command

logger = logging.getLogger(__name__)


def build_command_args(
    builder_image: str,
    source: str,
    context_dir: str,
    output_image: str,
) -> list[str]:
    """Argument list for the build tool, in the order it expects them."""
    return [
        "build",
        "--force-pull=false",
        f"--context-dir={context_dir}",
        source,
        builder_image,
        output_image,
    ]


def build_app(
    builder_image: str,
    source: str,
    context_dir: str,
    output_image: str,
    *,
    build_tool: str = BUILD_TOOL,
) -> bytes:
    """
    Build ``output_image`` from ``source`` on top of ``builder_image``.

    Returns the raw build log. A failing build raises CommandError with the
    log attached.
    """
    logger.info(
        "Building image | builder=%s | source=%s | context=%s | output=%s",
        builder_image, source, context_dir or ".", output_image,
    )
    result = run_command(
        build_tool,
        build_command_args(builder_image, source, context_dir, output_image),
    )
    logger.info("Image %s built in %.2fs", output_image, result.duration_seconds)
    return result.output
