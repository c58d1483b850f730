"""
Image Scenario
==============
Drives one image test end to end:

    Build  →  Run  →  Inspect  →  Verify (parallel)  →  Teardown

Lifecycle rules:
    - Build is skipped in reuse mode; the output image must already exist.
    - Build, run and inspect failures are fatal (ScenarioAborted).
    - A failed run leaves nothing to tear down.
    - Once a container exists it is removed exactly once, whatever the
      verification outcome (running_container owns that guarantee).
    - Verification failures are recorded on the reporter; they never stop
      sibling checks or teardown.
    - At the end, recorded failures are raised as ScenarioFailed so a plain
      pytest test fails with every message listed.
"""
import time
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from imagetest.checks.connectivity import check_http_connectivity
from imagetest.checks.output_checks import ImageCheck, command_check
from imagetest.checks.parallel import CheckGroup
from imagetest.core.config import ScenarioConfig
from imagetest.core.errors import CommandError, ImageTestError
from imagetest.executor.container_runner import (
    container_url,
    inspect_container_ip,
    running_container,
)
from imagetest.executor.image_builder import build_app
from imagetest.models.check_failure import CheckFailure
from imagetest.reporting.reporter import OutcomeReporter

logger = logging.getLogger(__name__)


@dataclass
class ScenarioResult:
    """
    Summary of one scenario run.

    Fields
    ------
    output_image : str
        Image under test.
    built : bool
        False when the build was skipped (reuse mode).
    container_id : str | None
        Id of the container that was started, if any.
    container_ip : str | None
        Internal address the connectivity check polled.
    failures : list[CheckFailure]
        Everything recorded on the reporter.
    execution_time_seconds : float
        Wall clock duration of the whole scenario.
    """
    output_image: str
    built: bool = False
    container_id: Optional[str] = None
    container_ip: Optional[str] = None
    failures: list[CheckFailure] = field(default_factory=list)
    execution_time_seconds: float = 0.0

    @property
    def passed(self) -> bool:
        return not self.failures


def _check_name(check: ImageCheck, default: str) -> str:
    return getattr(check, "__name__", default)


def _verify(
    output_image: str,
    container_id: str,
    config: ScenarioConfig,
    reporter: OutcomeReporter,
    result: ScenarioResult,
    output_check: ImageCheck,
    output_check_name: str,
    extra_checks: Sequence[ImageCheck],
) -> None:
    try:
        address = inspect_container_ip(container_id, runtime=config.container_runtime)
    except ImageTestError as e:
        reporter.fatal("inspect", str(e), type(e).__name__)
    result.container_ip = address
    url = container_url(address, config.app_port)

    group = CheckGroup()
    group.add(
        "http-connectivity",
        lambda: check_http_connectivity(
            url,
            max_attempts=config.http_max_attempts,
            timeout=config.http_timeout,
            retry_delay=config.http_retry_delay,
        ),
    )
    group.add(output_check_name, lambda: output_check(output_image, container_id))
    for index, check in enumerate(extra_checks):
        group.add(
            _check_name(check, f"image-check-{index}"),
            lambda check=check: check(output_image, container_id),
        )
    group.run(reporter)


def verify_image_from_source(
    builder_image: str,
    source: str,
    context_dir: str,
    output_image: str,
    *,
    config: Optional[ScenarioConfig] = None,
    reporter: Optional[OutcomeReporter] = None,
    output_check: Optional[ImageCheck] = None,
    extra_checks: Sequence[ImageCheck] = (),
    raise_on_failure: bool = True,
) -> ScenarioResult:
    """
    Build ``output_image`` from ``source``, run it and verify it.

    Parameters
    ----------
    builder_image : str
        Builder image supplying the toolchain.
    source : str
        Application source (URL or path) handed to the build tool.
    context_dir : str
        Sub-directory of the source to build; empty for the root.
    output_image : str
        Name of the image to build (or reuse).
    config : ScenarioConfig | None
        Scenario settings; defaults to ScenarioConfig.from_env().
    reporter : OutcomeReporter | None
        Failure sink; a fresh one is created when omitted.
    output_check : ImageCheck | None
        Command-output check; defaults to the software-collection check
        configured from ``config``, reported as "scl-enabled". A custom
        check is reported under its ``__name__``.
    extra_checks : Sequence[ImageCheck]
        Additional ``(image_name, container_id)`` checks run alongside.
    raise_on_failure : bool
        Raise ScenarioFailed when anything was recorded (default True).

    Returns
    -------
    ScenarioResult

    Raises
    ------
    ScenarioAborted
        Build, run or inspect failed.
    ScenarioFailed
        One or more verification or teardown failures were recorded.
    """
    config = config or ScenarioConfig.from_env()
    reporter = reporter or OutcomeReporter(name=output_image)
    output_check_name = "scl-enabled"
    if output_check is None:
        output_check = command_check(
            config.scl_command,
            config.scl_expected_output,
            runtime=config.container_runtime,
        )
    else:
        output_check_name = _check_name(output_check, "output-check")

    result = ScenarioResult(output_image=output_image)
    start_time = time.monotonic()

    # ------------------------------------------------------------------
    # 1. Build
    # ------------------------------------------------------------------
    if config.reuse_images:
        logger.info("Reuse mode: skipping build of %s", output_image)
    else:
        try:
            build_app(
                builder_image, source, context_dir, output_image,
                build_tool=config.build_tool,
            )
        except CommandError as e:
            reporter.fatal("build", f"\n{e.output_text}\n{e.cause}", type(e).__name__)
        result.built = True

    # ------------------------------------------------------------------
    # 2–5. Run, inspect, verify, teardown
    # ------------------------------------------------------------------
    try:
        with running_container(
            output_image,
            user_id=config.app_user_id,
            port=config.app_port,
            runtime=config.container_runtime,
        ) as container_id:
            result.container_id = container_id
            _verify(
                output_image, container_id, config, reporter, result,
                output_check, output_check_name, extra_checks,
            )
    except CommandError as e:
        if result.container_id is None:
            reporter.fatal("run", str(e), type(e).__name__)
        reporter.error("teardown", str(e), type(e).__name__)

    result.failures = reporter.failures
    result.execution_time_seconds = round(time.monotonic() - start_time, 3)
    logger.info(
        "Scenario %s complete | passed=%s | failures=%d | time=%.2fs",
        output_image, result.passed, len(result.failures), result.execution_time_seconds,
    )

    if raise_on_failure:
        reporter.raise_for_failures()
    return result
