"""
Outcome Reporter
================
Collects the pass/fail outcome of one image scenario.

Every check task may write to the reporter at the same time, so all
writes are serialised behind a lock.

    error(...)  — record a failure and keep going
    fatal(...)  — record a failure and abort the scenario (ScenarioAborted)
"""
import logging
import threading

from imagetest.core.errors import ScenarioAborted, ScenarioFailed
from imagetest.models.check_failure import CheckFailure

logger = logging.getLogger(__name__)


class OutcomeReporter:
    """Thread-safe failure sink for one scenario."""

    def __init__(self, name: str = "scenario") -> None:
        self.name = name
        self._lock = threading.Lock()
        self._failures: list[CheckFailure] = []

    def record(self, failure: CheckFailure) -> None:
        with self._lock:
            self._failures.append(failure)
        logger.error("%s: %s", self.name, failure)

    def error(self, check_name: str, message: str, error_type: str = "") -> None:
        self.record(CheckFailure(check_name=check_name, message=message, error_type=error_type))

    def fatal(self, check_name: str, message: str, error_type: str = "") -> None:
        self.error(check_name, message, error_type)
        raise ScenarioAborted(f"[{check_name}] {message}")

    @property
    def failures(self) -> list[CheckFailure]:
        with self._lock:
            return list(self._failures)

    @property
    def failed(self) -> bool:
        with self._lock:
            return bool(self._failures)

    def raise_for_failures(self) -> None:
        """Raise ScenarioFailed listing every recorded failure, if any."""
        failures = self.failures
        if failures:
            raise ScenarioFailed(failures)
