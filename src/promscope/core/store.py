"""Sampling store: fetch, flatten and keep a bounded history of snapshots."""

import inspect
import logging
import threading
import time
from collections.abc import Callable
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

from promscope.core.config import StoreConfig
from promscope.core.derive import derive
from promscope.core.exceptions import FetchError, PromscopeError, failure_fields
from promscope.core.flatten import flatten
from promscope.core.history import HistoryBuffer
from promscope.core.models import (
    FetchResult,
    SampleResult,
    Series,
    Snapshot,
)
from promscope.core.ports import (
    AsyncMetricsSourcePort,
    DecoderPort,
    MetricsSourcePort,
)
from promscope.core.series import dump_snapshots

logger = logging.getLogger(__name__)

# strptime fallbacks: RFC 1123 with a numeric zone, then with a zone name.
_DATE_FORMATS = ("%a, %d %b %Y %H:%M:%S %z", "%a, %d %b %Y %H:%M:%S %Z")


def parse_http_date(value: str | None) -> float | None:
    """Parse a ``Date`` header into a Unix timestamp.

    Month and weekday names are read by ``email.utils``, independent of the
    process locale.

    Args:
        value: Header value, e.g. ``Mon, 02 Jan 2006 15:04:05 GMT``.

    Returns:
        Timestamp in seconds, or None if absent or unparseable.
    """
    if not value:
        return None
    value = value.strip()
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        parsed = None
    if parsed is None:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(value, fmt)
            except ValueError:
                continue
            break
        else:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


class SamplingStore:
    """Holds a bounded history of flattened snapshots of one endpoint.

    ``sample()`` runs at most once at a time: a call made while another one
    is in flight returns ``SampleResult(fetched=False)`` immediately instead
    of waiting. Readers (``dump``) never wait for an in-flight sample.

    Example:
        ```python
        from promscope import HttpxSource, SamplingStore

        store = SamplingStore(3, HttpxSource("http://localhost:8080/metrics"))
        store.sample()
        for name, series in store.dump("http"):
            print(name, [o.value for o in series])
        ```
    """

    def __init__(
        self,
        capacity: int,
        source: MetricsSourcePort | AsyncMetricsSourcePort,
        decoder: DecoderPort | None = None,
        clock: Callable[[], float] = time.time,
        include_average: bool = True,
    ) -> None:
        """Initialize the store with an empty history.

        Args:
            capacity: Number of snapshots to keep (>= 1).
            source: Fetch source bound to one endpoint.
            decoder: Payload decoder. Defaults to the prometheus_client based
                decoder.
            clock: Fallback time source when the response has no Date header.
            include_average: Emit derived histogram averages when flattening.

        Raises:
            InvalidConfigurationError: If capacity is not a positive integer.
        """
        self._history: HistoryBuffer[Snapshot] = HistoryBuffer(capacity)
        self._source = source
        if decoder is None:
            from promscope.adapters.decoding import decode_exposition

            decoder = decode_exposition
        self._decoder = decoder
        self._clock = clock
        self._include_average = include_average
        self._sampling = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: StoreConfig,
        source: MetricsSourcePort | AsyncMetricsSourcePort,
        decoder: DecoderPort | None = None,
    ) -> "SamplingStore":
        """Create a store from a StoreConfig."""
        return cls(
            config.capacity,
            source,
            decoder=decoder,
            include_average=config.include_average,
        )

    @property
    def capacity(self) -> int:
        return self._history.capacity

    def __len__(self) -> int:
        return len(self._history)

    def sample(self) -> SampleResult:
        """Fetch, decode and append one snapshot.

        Returns:
            ``SampleResult(fetched=True, ...)`` when a snapshot was appended,
            ``SampleResult(fetched=False)`` when another sample was in flight.

        Raises:
            FetchError: On transport failures or a non-2xx status.
            ParseError: If the payload cannot be decoded.
        """
        if inspect.iscoroutinefunction(self._source.fetch):
            raise TypeError("source is async, use sample_async()")
        if not self._sampling.acquire(blocking=False):
            logger.debug("Sample already in flight, skipping")
            return SampleResult(fetched=False)
        try:
            try:
                response = self._source.fetch()  # type: ignore[union-attr]
                return self._append(response)
            except PromscopeError as exc:
                logger.warning(
                    "Sampling failed: %s", exc, extra=failure_fields(exc)
                )
                raise
        finally:
            self._sampling.release()

    async def sample_async(self) -> SampleResult:
        """Async variant of sample() for an AsyncMetricsSourcePort.

        Shares the single-flight lock with sample(); acquiring it never
        blocks the event loop.
        """
        if not inspect.iscoroutinefunction(self._source.fetch):
            raise TypeError("source is sync, use sample()")
        if not self._sampling.acquire(blocking=False):
            logger.debug("Sample already in flight, skipping")
            return SampleResult(fetched=False)
        try:
            try:
                response = await self._source.fetch()  # type: ignore[misc]
                return self._append(response)
            except PromscopeError as exc:
                logger.warning(
                    "Sampling failed: %s", exc, extra=failure_fields(exc)
                )
                raise
        finally:
            self._sampling.release()

    def _append(self, response: FetchResult) -> SampleResult:
        """Turn a fetched response into a snapshot and append it."""
        if not 200 <= response.status < 300:
            raise FetchError(
                f"received status {response.status} from metrics endpoint",
                status=response.status,
                endpoint=getattr(self._source, "endpoint", None),
            )
        families = self._decoder(response.body, response.content_type)
        timestamp = parse_http_date(response.header("date"))
        if timestamp is None:
            timestamp = self._clock()
        snapshot = flatten(families, timestamp, self._include_average)
        self._warn_on_kind_changes(snapshot)
        self._history.add(snapshot)
        logger.debug(
            "Sampled %d observations at %.3f", len(snapshot), timestamp
        )
        return SampleResult(
            fetched=True, observations=len(snapshot), timestamp=timestamp
        )

    def _warn_on_kind_changes(self, snapshot: Snapshot) -> None:
        previous = self._history.last()
        if previous is None:
            return
        for name, observation in snapshot.items():
            old = previous.get(name)
            if old is not None and old.kind is not observation.kind:
                logger.warning(
                    "Metric %s changed kind from %s to %s",
                    name,
                    old.kind.value,
                    observation.kind.value,
                )

    def snapshots(self) -> list[Snapshot]:
        """Return a copy of the history, oldest first."""
        return [dict(snapshot) for snapshot in self._history.get()]

    def latest(self) -> Snapshot | None:
        """Return a copy of the newest snapshot, or None if empty."""
        snapshot = self._history.last()
        return dict(snapshot) if snapshot is not None else None

    def dump(self, filter_text: str = "") -> list[tuple[str, Series]]:
        """Return the series of every name in the newest snapshot.

        Args:
            filter_text: Case-insensitive substring filter, empty for all.

        Returns:
            ``(name, series)`` pairs in natural name order, each series
            newest first.

        Raises:
            EmptyHistoryError: If no sample has succeeded yet.
        """
        return dump_snapshots(self._history.get(), filter_text)

    def derive(self, series: Series) -> list[Series]:
        """Return the series followed by its derived rate series, if any."""
        return derive(series)

    def dump_derived(self, filter_text: str = "") -> list[Series]:
        """Dump and interleave every series with its derived series.

        Raises:
            EmptyHistoryError: If no sample has succeeded yet.
        """
        result: list[Series] = []
        for _, series in self.dump(filter_text):
            result.extend(derive(series))
        return result
