"""Core domain models for sampled metrics data."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum


class ObservationKind(Enum):
    """Kind of a flattened observation."""

    COUNTER = "counter"
    COUNTER_RATE = "counter_rate"
    GAUGE = "gauge"
    HISTOGRAM_BUCKET = "histogram_bucket"
    HISTOGRAM_SUM = "histogram_sum"
    HISTOGRAM_COUNT = "histogram_count"
    HISTOGRAM_AVG = "histogram_avg"
    SUMMARY_SUM = "summary_sum"
    SUMMARY_COUNT = "summary_count"

    @property
    def is_derived(self) -> bool:
        """True for kinds computed from other observations."""
        return self in (ObservationKind.COUNTER_RATE, ObservationKind.HISTOGRAM_AVG)

    @property
    def is_countable(self) -> bool:
        """True for monotonic kinds a rate can be derived from."""
        return self in (ObservationKind.COUNTER, ObservationKind.HISTOGRAM_COUNT)


@dataclass(frozen=True)
class Observation:
    """A single named numeric fact at one point in time.

    Attributes:
        name: Flat name (base name plus serialized labels).
        kind: Kind assigned when the payload was flattened.
        timestamp: Unix timestamp in seconds of the snapshot.
        value: The observed value.
    """

    name: str
    kind: ObservationKind
    timestamp: float
    value: float


Snapshot = dict[str, Observation]
Series = list[Observation]
Labels = tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class SampleResult:
    """Outcome of one sampling attempt.

    Attributes:
        fetched: False when a concurrent sample was already in flight.
        observations: Number of observations appended.
        timestamp: Timestamp of the appended snapshot, if any.
    """

    fetched: bool
    observations: int = 0
    timestamp: float | None = None

    def __bool__(self) -> bool:
        return self.fetched


@dataclass(frozen=True)
class FetchResult:
    """Raw response of a metrics endpoint.

    Attributes:
        status: HTTP status code.
        body: Undecoded response body.
        headers: Response headers.
    """

    status: int
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    @property
    def content_type(self) -> str | None:
        return self.header("content-type")


class MetricType(Enum):
    """Declared type of a metric family."""

    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"
    GAUGE_HISTOGRAM = "gaugehistogram"
    SUMMARY = "summary"
    UNTYPED = "untyped"


@dataclass(frozen=True)
class CounterMetric:
    labels: Labels
    value: float


@dataclass(frozen=True)
class GaugeMetric:
    labels: Labels
    value: float


@dataclass(frozen=True)
class HistogramBucket:
    """One cumulative histogram bucket.

    Attributes:
        upper_bound: Inclusive upper bound (``le``).
        cumulative_count: Integer cumulative count.
        cumulative_count_float: Fractional cumulative count, 0 when absent.
    """

    upper_bound: float
    cumulative_count: int = 0
    cumulative_count_float: float = 0.0


@dataclass(frozen=True)
class HistogramMetric:
    labels: Labels
    buckets: tuple[HistogramBucket, ...] = ()
    sample_sum: float = 0.0
    sample_count: int = 0
    sample_count_float: float = 0.0


@dataclass(frozen=True)
class SummaryMetric:
    labels: Labels
    sample_sum: float = 0.0
    sample_count: int = 0


@dataclass(frozen=True)
class UntypedMetric:
    labels: Labels
    value: float


Metric = CounterMetric | GaugeMetric | HistogramMetric | SummaryMetric | UntypedMetric


@dataclass(frozen=True)
class MetricFamily:
    """A named group of metric instances sharing one type.

    Attributes:
        name: Base name used for flattening.
        type: Declared family type.
        metrics: Instances, one per distinct label set, in payload order.
    """

    name: str
    type: MetricType
    metrics: tuple[Metric, ...] = ()


@dataclass(frozen=True)
class LogEntry:
    """A structured log entry.

    Attributes:
        timestamp: Unix timestamp in seconds.
        level: Log level (e.g., INFO, ERROR, DEBUG).
        message: The log message.
        attributes: Additional structured fields.
    """

    timestamp: float
    level: str
    message: str
    attributes: dict[str, str | int | float | bool] = field(default_factory=dict)
