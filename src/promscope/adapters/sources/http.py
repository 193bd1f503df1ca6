"""HTTP fetch sources backed by httpx."""

import logging

import httpx

from promscope.core.config import DEFAULT_TIMEOUT, StoreConfig
from promscope.core.exceptions import FetchError
from promscope.core.models import FetchResult

logger = logging.getLogger(__name__)

# Prefer the classic text format, accept OpenMetrics as a fallback.
ACCEPT_HEADER = (
    "text/plain;version=0.0.4;q=1.0,"
    "application/openmetrics-text;version=1.0.0;q=0.5,"
    "*/*;q=0.1"
)


def _to_fetch_result(response: httpx.Response) -> FetchResult:
    return FetchResult(
        status=response.status_code,
        body=response.content,
        headers=dict(response.headers.items()),
    )


class HttpxSource:
    """Synchronous implementation of MetricsSourcePort.

    Args:
        endpoint: URL of the metrics endpoint.
        timeout: Request timeout in seconds.
        client: Optional pre-configured client. A client passed in is not
            closed by ``close()``.
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ) -> None:
        self.endpoint = endpoint
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    @classmethod
    def from_config(cls, config: StoreConfig) -> "HttpxSource":
        return cls(config.endpoint, timeout=config.timeout)

    def fetch(self) -> FetchResult:
        """GET the endpoint once.

        Raises:
            FetchError: On connection errors, timeouts or an invalid URL.
        """
        try:
            response = self._client.get(
                self.endpoint, headers={"Accept": ACCEPT_HEADER}
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(
                f"request to {self.endpoint} failed: {exc}", endpoint=self.endpoint
            ) from exc
        logger.debug("GET %s -> %d", self.endpoint, response.status_code)
        return _to_fetch_result(response)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpxSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class AsyncHttpxSource:
    """Async implementation of AsyncMetricsSourcePort.

    Args:
        endpoint: URL of the metrics endpoint.
        timeout: Request timeout in seconds.
        client: Optional pre-configured async client, not closed by
            ``aclose()``.
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.endpoint = endpoint
        self._owns_client = client is None
        self._client = (
            client if client is not None else httpx.AsyncClient(timeout=timeout)
        )

    @classmethod
    def from_config(cls, config: StoreConfig) -> "AsyncHttpxSource":
        return cls(config.endpoint, timeout=config.timeout)

    async def fetch(self) -> FetchResult:
        """GET the endpoint once.

        Raises:
            FetchError: On connection errors, timeouts or an invalid URL.
        """
        try:
            response = await self._client.get(
                self.endpoint, headers={"Accept": ACCEPT_HEADER}
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(
                f"request to {self.endpoint} failed: {exc}", endpoint=self.endpoint
            ) from exc
        logger.debug("GET %s -> %d", self.endpoint, response.status_code)
        return _to_fetch_result(response)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpxSource":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
