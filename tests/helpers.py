"""Test doubles and payload builders shared across test modules."""

import asyncio
import threading
from email.utils import formatdate

from promscope.core.models import FetchResult

EXPOSITION = """\
# HELP http_requests_total Total HTTP requests.
# TYPE http_requests_total counter
http_requests_total{method="GET",code="200"} 1027
http_requests_total{method="POST",code="500"} 3
# HELP process_open_fds Number of open file descriptors.
# TYPE process_open_fds gauge
process_open_fds 12
# HELP request_duration_seconds Request latency.
# TYPE request_duration_seconds histogram
request_duration_seconds_bucket{le="0.5"} 4
request_duration_seconds_bucket{le="1.0"} 6
request_duration_seconds_bucket{le="+Inf"} 7
request_duration_seconds_sum 12.3
request_duration_seconds_count 7
# HELP rpc_duration_seconds RPC latency.
# TYPE rpc_duration_seconds summary
rpc_duration_seconds{quantile="0.5"} 0.2
rpc_duration_seconds{quantile="0.9"} 0.8
rpc_duration_seconds_sum 17.5
rpc_duration_seconds_count 42
some_untyped_value 1
"""

# Flat names produced by EXPOSITION, in natural order
EXPOSITION_NAMES = [
    'http_requests_total {method="GET", code="200"}',
    'http_requests_total {method="POST", code="500"}',
    "process_open_fds",
    "request_duration_seconds_avg",
    'request_duration_seconds_bucket {le="0.5"}',
    'request_duration_seconds_bucket {le="1"}',
    'request_duration_seconds_bucket {le="Inf"}',
    "request_duration_seconds_count",
    "request_duration_seconds_sum",
    "rpc_duration_seconds_count",
    "rpc_duration_seconds_sum",
]


def counter_payload(value: float, name: str = "requests_total") -> bytes:
    """Exposition payload with a single unlabelled counter."""
    return f"# TYPE {name} counter\n{name} {value}\n".encode()


def http_date(timestamp: float) -> str:
    """Format a Unix timestamp as an RFC 1123 Date header."""
    return formatdate(timestamp, usegmt=True)


def ok(body: bytes, date: float | None = None) -> FetchResult:
    """Build a 200 FetchResult, optionally with a Date header."""
    headers = {"Content-Type": "text/plain; version=0.0.4"}
    if date is not None:
        headers["Date"] = http_date(date)
    return FetchResult(status=200, body=body, headers=headers)


class StaticSource:
    """MetricsSourcePort that replays scripted responses.

    Each item is either a FetchResult or an exception to raise. The last
    item is repeated once the script is exhausted.
    """

    def __init__(self, *responses: FetchResult | Exception) -> None:
        self._responses = list(responses)
        self.calls = 0

    def fetch(self) -> FetchResult:
        index = min(self.calls, len(self._responses) - 1)
        self.calls += 1
        response = self._responses[index]
        if isinstance(response, Exception):
            raise response
        return response


class BlockingSource:
    """MetricsSourcePort whose fetch waits until released."""

    def __init__(self, response: FetchResult) -> None:
        self.response = response
        self.entered = threading.Event()
        self.release = threading.Event()
        self.calls = 0

    def fetch(self) -> FetchResult:
        self.calls += 1
        self.entered.set()
        self.release.wait(timeout=5)
        return self.response


class AsyncStaticSource:
    """AsyncMetricsSourcePort returning one fixed response."""

    def __init__(self, response: FetchResult) -> None:
        self.response = response
        self.calls = 0

    async def fetch(self) -> FetchResult:
        self.calls += 1
        return self.response


class AsyncBlockingSource:
    """AsyncMetricsSourcePort whose fetch waits until released."""

    def __init__(self, response: FetchResult) -> None:
        self.response = response
        self.entered = asyncio.Event()
        self.release = asyncio.Event()
        self.calls = 0

    async def fetch(self) -> FetchResult:
        self.calls += 1
        self.entered.set()
        await self.release.wait()
        return self.response
