"""
Parallel Checks
===============
Runs independent checks concurrently and collects every failure.

Each check gets its own worker thread; the group joins on all of them
before returning. A failing check never stops its siblings, and every
failure is returned (and reported), not just the first one. Test-runner
outcomes such as pytest.fail() count as failures; only KeyboardInterrupt
and SystemExit escape.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional, Union

from imagetest.models.check_failure import CheckFailure
from imagetest.reporting.reporter import OutcomeReporter

logger = logging.getLogger(__name__)

Check = Callable[[], None]


class CheckGroup:
    """Fan-out/join over a fixed set of zero-argument checks."""

    def __init__(self) -> None:
        self._checks: list[tuple[str, Check]] = []

    def add(self, name: str, check: Check) -> "CheckGroup":
        self._checks.append((name, check))
        return self

    def __len__(self) -> int:
        return len(self._checks)

    def _run_one(
        self,
        name: str,
        check: Check,
        reporter: Optional[OutcomeReporter],
    ) -> Optional[CheckFailure]:
        try:
            check()
        except (KeyboardInterrupt, SystemExit):
            raise
        except BaseException as e:
            # pytest.fail()/skip() outcomes derive from BaseException
            failure = CheckFailure.from_exception(name, e)
            if reporter is not None:
                reporter.record(failure)
            else:
                logger.error("Check %s failed: %s", name, e)
            return failure
        logger.debug("Check %s passed", name)
        return None

    def run(self, reporter: Optional[OutcomeReporter] = None) -> list[CheckFailure]:
        """Run every check concurrently; return the failures once all have finished."""
        if not self._checks:
            return []

        logger.info("Running %d checks in parallel", len(self._checks))
        with ThreadPoolExecutor(
            max_workers=len(self._checks), thread_name_prefix="imagetest-check",
        ) as pool:
            futures = [
                pool.submit(self._run_one, name, check, reporter)
                for name, check in self._checks
            ]
            results = [future.result() for future in futures]

        failures = [failure for failure in results if failure is not None]
        logger.info("Parallel checks complete | total=%d | failed=%d", len(results), len(failures))
        return failures


def run_in_parallel(
    checks: Iterable[Union[Check, tuple[str, Check]]],
    reporter: Optional[OutcomeReporter] = None,
) -> list[CheckFailure]:
    """
    Convenience wrapper around CheckGroup.

    ``checks`` may hold bare callables (named after the function) or
    ``(name, callable)`` pairs.
    """
    group = CheckGroup()
    for index, item in enumerate(checks):
        if isinstance(item, tuple):
            name, check = item
        else:
            check = item
            name = getattr(item, "__name__", f"check-{index}")
        group.add(name, check)
    return group.run(reporter)
