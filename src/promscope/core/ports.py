"""Port interfaces for fetch sources and decoders.

These protocols define the contracts that adapters must implement.
The core depends only on these interfaces, not concrete implementations.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from promscope.core.models import FetchResult, MetricFamily


@runtime_checkable
class MetricsSourcePort(Protocol):
    """Port for fetching a raw exposition payload.

    Examples: HttpxSource.
    """

    def fetch(self) -> FetchResult:
        """Fetch the endpoint once.

        Returns:
            The raw response. A non-2xx status is returned, not raised.

        Raises:
            FetchError: On transport failures (connection refused, timeout).
        """
        ...


@runtime_checkable
class AsyncMetricsSourcePort(Protocol):
    """Async counterpart of MetricsSourcePort.

    Examples: AsyncHttpxSource.
    """

    async def fetch(self) -> FetchResult:
        """Fetch the endpoint once."""
        ...


@runtime_checkable
class DecoderPort(Protocol):
    """Port for decoding a raw payload into metric families."""

    def __call__(
        self, body: bytes, content_type: str | None = None
    ) -> Sequence[MetricFamily]:
        """Decode the whole payload or raise ParseError."""
        ...
