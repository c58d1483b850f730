"""
Connectivity Check
==================
Polls an HTTP endpoint with HEAD requests until the application answers.

Retry policy:
    - Transport errors (refused, reset, timeout) mean the application is
      probably still starting: sleep and retry, up to ``max_attempts``.
    - Any status other than 200 is a confirmed wrong state: fail at once.
"""
import time
import logging
from typing import Optional

import httpx

from imagetest.core.config import (
    HTTP_MAX_ATTEMPTS,
    HTTP_RETRY_DELAY_SECONDS,
    HTTP_TIMEOUT_SECONDS,
)
from imagetest.core.constants import EXPECTED_HTTP_STATUS
from imagetest.core.errors import HTTPStatusMismatchError, RetryExhaustedError

logger = logging.getLogger(__name__)


def check_http_connectivity(
    url: str,
    *,
    max_attempts: int = HTTP_MAX_ATTEMPTS,
    timeout: float = HTTP_TIMEOUT_SECONDS,
    retry_delay: float = HTTP_RETRY_DELAY_SECONDS,
    client: Optional[httpx.Client] = None,
) -> int:
    """
    Wait for ``url`` to answer a HEAD request with 200.

    Parameters
    ----------
    url : str
        Endpoint to poll, e.g. ``http://172.17.0.2:8080``.
    max_attempts : int
        Attempt budget for transport-level failures.
    timeout : float
        Per-attempt timeout in seconds.
    retry_delay : float
        Seconds to sleep after a transport error.
    client : httpx.Client | None
        Client to use instead of a fresh one (tests inject a mock transport).

    Returns
    -------
    int
        Number of attempts it took to get a 200.

    Raises
    ------
    HTTPStatusMismatchError
        On the first response whose status is not 200.
    RetryExhaustedError
        When every attempt failed at transport level.
    """
    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=timeout, follow_redirects=True)

    last_error: Optional[Exception] = None
    try:
        for attempt in range(1, max_attempts + 1):
            try:
                response = client.head(url, timeout=timeout)
            except httpx.TransportError as e:
                last_error = e
                logger.debug("HEAD %s attempt %d/%d failed: %s", url, attempt, max_attempts, e)
                time.sleep(retry_delay)
                continue

            if response.status_code != EXPECTED_HTTP_STATUS:
                logger.error("HEAD %s returned HTTP %d", url, response.status_code)
                raise HTTPStatusMismatchError(url, response.status_code, EXPECTED_HTTP_STATUS)

            logger.info("HEAD %s answered 200 after %d attempt(s)", url, attempt)
            return attempt
    finally:
        if owns_client:
            client.close()

    logger.error("HEAD %s unreachable after %d attempts", url, max_attempts)
    raise RetryExhaustedError(max_attempts, last_error)
