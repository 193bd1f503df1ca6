"""Flatten decoded metric families into a snapshot of observations.

Every family type expands into one or more flat observations:

- counter: ``<name>``
- gauge: ``<name>``
- histogram / gauge histogram: ``<name>_bucket`` (one per ``le``),
  ``<name>_sum``, ``<name>_count`` and, when the count is positive,
  ``<name>_avg``
- summary: ``<name>_sum``, ``<name>_count``

Labels are appended to the name as ``{k1="v1", k2="v2"}`` in payload order.
"""

import logging
import math
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, localcontext

from promscope.core.models import (
    CounterMetric,
    GaugeMetric,
    HistogramMetric,
    Labels,
    MetricFamily,
    MetricType,
    Observation,
    ObservationKind,
    Snapshot,
    SummaryMetric,
)

logger = logging.getLogger(__name__)


def flat_name(base: str, labels: Labels = ()) -> str:
    """Create the flat name for a metric and its labels.

    Label values are wrapped in double quotes as-is, without escaping.

    Args:
        base: Base name, including any generated suffix (e.g. ``_bucket``).
        labels: Ordered label pairs.

    Returns:
        ``base`` if there are no labels, else ``base {k="v", ...}``.
    """
    if not labels:
        return base
    parts = [f'{key}="{value}"' for key, value in labels]
    return f"{base} {{{', '.join(parts)}}}"


_CENTS = Decimal("0.01")


def format_bound(value: float) -> str:
    """Render a bucket upper bound rounded to two decimals.

    Examples: ``0.5`` -> ``"0.5"``, ``1.0`` -> ``"1"``, ``0.005`` -> ``"0.01"``,
    ``+Inf`` -> ``"Inf"``.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Inf" if value > 0 else "-Inf"
    # Large enough for the widest finite float at two decimals
    with localcontext() as context:
        context.prec = 400
        rounded = Decimal(repr(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)
    text = format(rounded, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def expand_counter(
    name: str, metric: CounterMetric, timestamp: float
) -> list[Observation]:
    """Expand a counter into a single observation."""
    return [
        Observation(
            flat_name(name, metric.labels),
            ObservationKind.COUNTER,
            timestamp,
            metric.value,
        )
    ]


def expand_gauge(name: str, metric: GaugeMetric, timestamp: float) -> list[Observation]:
    """Expand a gauge into a single observation."""
    return [
        Observation(
            flat_name(name, metric.labels),
            ObservationKind.GAUGE,
            timestamp,
            metric.value,
        )
    ]


def expand_histogram(
    name: str,
    metric: HistogramMetric,
    timestamp: float,
    include_average: bool = True,
) -> list[Observation]:
    """Expand a histogram into bucket, sum, count and average observations.

    Fractional counts are preferred when positive, falling back to the
    integer counts otherwise.

    Args:
        name: Family base name.
        metric: Histogram instance.
        timestamp: Snapshot timestamp.
        include_average: Emit ``<name>_avg`` when the count is positive.

    Returns:
        List of observations in bucket order, then sum, count and average.
    """
    observations: list[Observation] = []
    for bucket in metric.buckets:
        labels = (*metric.labels, ("le", format_bound(bucket.upper_bound)))
        value = bucket.cumulative_count_float
        if value <= 0:
            value = float(bucket.cumulative_count)
        observations.append(
            Observation(
                flat_name(f"{name}_bucket", labels),
                ObservationKind.HISTOGRAM_BUCKET,
                timestamp,
                value,
            )
        )

    observations.append(
        Observation(
            flat_name(f"{name}_sum", metric.labels),
            ObservationKind.HISTOGRAM_SUM,
            timestamp,
            metric.sample_sum,
        )
    )

    count = metric.sample_count_float
    if count <= 0:
        count = float(metric.sample_count)
    observations.append(
        Observation(
            flat_name(f"{name}_count", metric.labels),
            ObservationKind.HISTOGRAM_COUNT,
            timestamp,
            count,
        )
    )

    if include_average and count > 0:
        observations.append(
            Observation(
                flat_name(f"{name}_avg", metric.labels),
                ObservationKind.HISTOGRAM_AVG,
                timestamp,
                metric.sample_sum / count,
            )
        )
    return observations


def expand_summary(
    name: str, metric: SummaryMetric, timestamp: float
) -> list[Observation]:
    """Expand a summary into sum and count observations."""
    return [
        Observation(
            flat_name(f"{name}_sum", metric.labels),
            ObservationKind.SUMMARY_SUM,
            timestamp,
            metric.sample_sum,
        ),
        Observation(
            flat_name(f"{name}_count", metric.labels),
            ObservationKind.SUMMARY_COUNT,
            timestamp,
            float(metric.sample_count),
        ),
    ]


def _expand_family(
    family: MetricFamily, timestamp: float, include_average: bool
) -> Iterable[Observation]:
    for metric in family.metrics:
        match metric:
            case CounterMetric():
                yield from expand_counter(family.name, metric, timestamp)
            case GaugeMetric():
                yield from expand_gauge(family.name, metric, timestamp)
            case HistogramMetric():
                yield from expand_histogram(
                    family.name, metric, timestamp, include_average
                )
            case SummaryMetric():
                yield from expand_summary(family.name, metric, timestamp)
            case _:
                logger.debug(
                    "Ignoring %s metric in family %s",
                    family.type.value,
                    family.name,
                )


def flatten(
    families: Iterable[MetricFamily],
    timestamp: float,
    include_average: bool = True,
) -> Snapshot:
    """Flatten metric families into a snapshot keyed by flat name.

    Unsupported family types produce no observations. When two instances
    map to the same flat name, the later one wins.

    Args:
        families: Decoded metric families.
        timestamp: Timestamp shared by all observations of the snapshot.
        include_average: Emit derived histogram averages.

    Returns:
        Mapping of flat name to Observation.
    """
    snapshot: Snapshot = {}
    for family in families:
        if family.type is MetricType.UNTYPED:
            logger.debug("Ignoring untyped family %s", family.name)
            continue
        for observation in _expand_family(family, timestamp, include_average):
            snapshot[observation.name] = observation
    return snapshot
