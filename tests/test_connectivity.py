"""
Unit Tests — Connectivity Check
===============================
HTTP is served by httpx.MockTransport and sleeping is patched out, so the
retry policy is exercised without a network or real delays.
"""
from unittest.mock import patch

import httpx
import pytest

from imagetest.checks.connectivity import check_http_connectivity
from imagetest.core.errors import HTTPStatusMismatchError, RetryExhaustedError

URL = "http://172.17.0.2:8080"


def make_client(responses):
    """
    Client whose transport replays ``responses`` in order.

    Each entry is a status code or an exception class to raise.
    """
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        item = responses[min(len(calls), len(responses)) - 1]
        if isinstance(item, type) and issubclass(item, Exception):
            raise item("connection refused", request=request)
        return httpx.Response(item)

    return httpx.Client(transport=httpx.MockTransport(handler)), calls


class TestCheckHttpConnectivity:

    def test_immediate_success(self):
        client, calls = make_client([200])
        with patch("imagetest.checks.connectivity.time.sleep") as mock_sleep:
            attempts = check_http_connectivity(URL, client=client)

        assert attempts == 1
        assert len(calls) == 1
        mock_sleep.assert_not_called()

    def test_uses_head(self):
        client, calls = make_client([200])
        check_http_connectivity(URL, client=client)
        assert calls[0].method == "HEAD"
        assert str(calls[0].url).startswith(URL)

    @pytest.mark.parametrize("k", [2, 5, 10])
    def test_succeeds_on_kth_attempt(self, k):
        client, calls = make_client([httpx.ConnectError] * (k - 1) + [200])
        with patch("imagetest.checks.connectivity.time.sleep") as mock_sleep:
            attempts = check_http_connectivity(URL, client=client, retry_delay=1.0)

        assert attempts == k
        assert len(calls) == k
        assert mock_sleep.call_count == k - 1
        if k > 1:
            mock_sleep.assert_called_with(1.0)

    def test_non_200_fails_without_retry(self):
        client, calls = make_client([500])
        with patch("imagetest.checks.connectivity.time.sleep") as mock_sleep:
            with pytest.raises(HTTPStatusMismatchError) as exc_info:
                check_http_connectivity(URL, client=client)

        assert len(calls) == 1
        mock_sleep.assert_not_called()
        assert exc_info.value.status_code == 500
        assert str(exc_info.value) == "HTTP status: got 500, want 200"

    def test_status_error_after_transport_error(self):
        client, calls = make_client([httpx.ConnectError, 404])
        with patch("imagetest.checks.connectivity.time.sleep"):
            with pytest.raises(HTTPStatusMismatchError):
                check_http_connectivity(URL, client=client)
        assert len(calls) == 2

    def test_unreachable_exhausts_attempts(self):
        client, calls = make_client([httpx.ConnectError])
        with patch("imagetest.checks.connectivity.time.sleep") as mock_sleep:
            with pytest.raises(RetryExhaustedError) as exc_info:
                check_http_connectivity(URL, client=client)

        assert len(calls) == 10
        assert mock_sleep.call_count == 10
        assert exc_info.value.attempts == 10
        assert isinstance(exc_info.value.last_error, httpx.ConnectError)
        assert "failed after 10 attempts" in str(exc_info.value)

    def test_timeouts_are_retried(self):
        client, calls = make_client([httpx.ReadTimeout, 200])
        with patch("imagetest.checks.connectivity.time.sleep"):
            assert check_http_connectivity(URL, client=client) == 2

    def test_custom_attempt_budget(self):
        client, calls = make_client([httpx.ConnectError])
        with patch("imagetest.checks.connectivity.time.sleep"):
            with pytest.raises(RetryExhaustedError, match="failed after 3 attempts"):
                check_http_connectivity(URL, client=client, max_attempts=3)
        assert len(calls) == 3

    def test_options_are_keyword_only(self):
        client, calls = make_client([200])
        with pytest.raises(TypeError):
            check_http_connectivity(URL, 3)
        assert calls == []
