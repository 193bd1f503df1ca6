"""promscope: sample a Prometheus metrics endpoint into a bounded history.

Example:
    ```python
    from promscope import HttpxSource, SamplingStore

    store = SamplingStore(3, HttpxSource("http://localhost:8080/metrics"))
    store.sample()
    for series in store.dump_derived("requests"):
        print(series[0].name, series[0].value)
    ```
"""

from promscope.adapters.decoding import decode_exposition
from promscope.adapters.logging import HistoryLogHandler
from promscope.adapters.sources.http import AsyncHttpxSource, HttpxSource
from promscope.core.config import StoreConfig
from promscope.core.derive import derive, derive_rate
from promscope.core.exceptions import (
    EmptyHistoryError,
    FetchError,
    InvalidConfigurationError,
    ParseError,
    PromscopeError,
)
from promscope.core.flatten import flatten
from promscope.core.history import HistoryBuffer
from promscope.core.models import (
    FetchResult,
    MetricFamily,
    Observation,
    ObservationKind,
    SampleResult,
    Series,
    Snapshot,
)
from promscope.core.store import SamplingStore

__all__ = [
    "AsyncHttpxSource",
    "EmptyHistoryError",
    "FetchError",
    "FetchResult",
    "HistoryBuffer",
    "HistoryLogHandler",
    "HttpxSource",
    "InvalidConfigurationError",
    "MetricFamily",
    "Observation",
    "ObservationKind",
    "ParseError",
    "PromscopeError",
    "SampleResult",
    "SamplingStore",
    "Series",
    "Snapshot",
    "StoreConfig",
    "decode_exposition",
    "derive",
    "derive_rate",
    "flatten",
]
