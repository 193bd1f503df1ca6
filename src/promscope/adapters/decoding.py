"""Exposition decoder adapter built on prometheus_client parsers.

Parses the Prometheus text format (or OpenMetrics, when the response says
so) and groups the flat samples back into metric families with one
instance per label set.
"""

import math
from collections.abc import Iterable

from prometheus_client.metrics_core import Metric as PromMetric
from prometheus_client.openmetrics.parser import (
    text_string_to_metric_families as openmetrics_to_families,
)
from prometheus_client.parser import text_string_to_metric_families

from promscope.core.exceptions import ParseError
from promscope.core.models import (
    CounterMetric,
    GaugeMetric,
    HistogramBucket,
    HistogramMetric,
    Labels,
    Metric,
    MetricFamily,
    MetricType,
    SummaryMetric,
    UntypedMetric,
)

OPENMETRICS_CONTENT_TYPE = "application/openmetrics-text"

_TYPES = {
    "counter": MetricType.COUNTER,
    "gauge": MetricType.GAUGE,
    "histogram": MetricType.HISTOGRAM,
    "gaugehistogram": MetricType.GAUGE_HISTOGRAM,
    "summary": MetricType.SUMMARY,
}

# Labels that identify a sample within an instance, not the instance itself
_RESERVED_LABELS = frozenset({"le", "quantile"})


def _instance_labels(labels: dict[str, str]) -> Labels:
    return tuple(
        (key, value) for key, value in labels.items() if key not in _RESERVED_LABELS
    )


def _as_count(value: float) -> tuple[int, float]:
    """Split a count into (integer count, fractional count or 0)."""
    value = float(value)
    if math.isfinite(value) and value.is_integer():
        return int(value), 0.0
    return 0, value


def _group_samples(family: PromMetric) -> dict[Labels, list]:
    groups: dict[Labels, list] = {}
    for sample in family.samples:
        if sample.value is None:
            continue
        groups.setdefault(_instance_labels(sample.labels), []).append(sample)
    return groups


def _build_histogram(name: str, labels: Labels, samples: list) -> HistogramMetric:
    buckets = []
    sample_sum = 0.0
    count = (0, 0.0)
    for sample in samples:
        suffix = sample.name[len(name) :]
        if suffix == "_bucket":
            cumulative, cumulative_float = _as_count(sample.value)
            buckets.append(
                HistogramBucket(
                    upper_bound=float(sample.labels["le"]),
                    cumulative_count=cumulative,
                    cumulative_count_float=cumulative_float,
                )
            )
        elif suffix in ("_sum", "_gsum"):
            sample_sum = float(sample.value)
        elif suffix in ("_count", "_gcount"):
            count = _as_count(sample.value)
    return HistogramMetric(
        labels=labels,
        buckets=tuple(buckets),
        sample_sum=sample_sum,
        sample_count=count[0],
        sample_count_float=count[1],
    )


def _build_summary(name: str, labels: Labels, samples: list) -> SummaryMetric:
    sample_sum = 0.0
    sample_count = 0
    for sample in samples:
        suffix = sample.name[len(name) :]
        if suffix == "_sum":
            sample_sum = float(sample.value)
        elif suffix == "_count":
            if math.isfinite(float(sample.value)):
                sample_count = int(sample.value)
    return SummaryMetric(
        labels=labels, sample_sum=sample_sum, sample_count=sample_count
    )


def _value_of(samples: list, sample_name: str) -> float | None:
    for sample in samples:
        if sample.name == sample_name:
            return float(sample.value)
    return None


def convert_family(family: PromMetric) -> MetricFamily:
    """Convert one prometheus_client family into a MetricFamily.

    Counters are named after their ``_total`` sample, so a counter exposed
    as ``requests_total`` keeps that name. prometheus_client appends
    ``_total`` to text-format counter samples that lack it, so a counter
    exposed as ``foo`` is named ``foo_total``; the exposed name cannot be
    recovered from the parsed samples.
    """
    metric_type = _TYPES.get(family.type, MetricType.UNTYPED)
    name = family.name
    if metric_type is MetricType.COUNTER:
        name = f"{family.name}_total"

    metrics: list[Metric] = []
    for labels, samples in _group_samples(family).items():
        if metric_type is MetricType.COUNTER:
            value = _value_of(samples, name)
            if value is not None:
                metrics.append(CounterMetric(labels=labels, value=value))
        elif metric_type is MetricType.GAUGE:
            value = _value_of(samples, name)
            if value is not None:
                metrics.append(GaugeMetric(labels=labels, value=value))
        elif metric_type in (MetricType.HISTOGRAM, MetricType.GAUGE_HISTOGRAM):
            metrics.append(_build_histogram(name, labels, samples))
        elif metric_type is MetricType.SUMMARY:
            metrics.append(_build_summary(name, labels, samples))
        else:
            for sample in samples:
                metrics.append(UntypedMetric(labels=labels, value=float(sample.value)))
    return MetricFamily(name=name, type=metric_type, metrics=tuple(metrics))


def _is_openmetrics(content_type: str | None) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";")[0].strip().lower()
    return media_type == OPENMETRICS_CONTENT_TYPE


def decode_families(families: Iterable[PromMetric]) -> list[MetricFamily]:
    return [convert_family(family) for family in families]


def decode_exposition(
    body: bytes, content_type: str | None = None
) -> list[MetricFamily]:
    """Decode a raw exposition payload into metric families.

    Decoding is all-or-nothing: the whole payload is parsed before any
    family is returned.

    Args:
        body: Raw response body.
        content_type: Response Content-Type, selects the OpenMetrics parser
            for ``application/openmetrics-text``.

    Returns:
        Metric families in payload order.

    Raises:
        ParseError: If the payload is not valid UTF-8 or not valid exposition
            format.
    """
    parse = (
        openmetrics_to_families
        if _is_openmetrics(content_type)
        else text_string_to_metric_families
    )
    try:
        text = body.decode("utf-8")
        return decode_families(list(parse(text)))
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        raise ParseError(f"failed to parse metrics: {exc}") from exc
