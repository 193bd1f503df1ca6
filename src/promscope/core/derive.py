"""Derive synthetic series from raw observation series."""

from promscope.core.models import Observation, ObservationKind, Series

NANOS_PER_SECOND = 1_000_000_000
RATE_SUFFIX = "_per_second_rate"


def rate_name(name: str) -> str:
    """Suffix the base-name segment of a flat name with ``_per_second_rate``.

    ``http_requests_total {code="200"}`` becomes
    ``http_requests_total_per_second_rate {code="200"}``.
    """
    base, sep, rest = name.partition(" ")
    return f"{base}{RATE_SUFFIX}{sep}{rest}"


def compute_rate(current: Observation, previous: Observation) -> Observation:
    """Compute the per-second rate between two observations.

    Sub-second intervals are scaled up with integer nanosecond arithmetic.
    The rate is NaN when the elapsed time is zero or negative.

    Args:
        current: Newer observation.
        previous: Older observation.

    Returns:
        COUNTER_RATE observation stamped with the current timestamp.
    """
    elapsed_ns = round((current.timestamp - previous.timestamp) * NANOS_PER_SECOND)
    delta = current.value - previous.value
    if elapsed_ns <= 0:
        rate = float("nan")
    elif elapsed_ns < NANOS_PER_SECOND:
        rate = delta * (NANOS_PER_SECOND // elapsed_ns)
    else:
        rate = delta / (elapsed_ns / NANOS_PER_SECOND)
    return Observation(
        name=rate_name(current.name),
        kind=ObservationKind.COUNTER_RATE,
        timestamp=current.timestamp,
        value=rate,
    )


def derive_rate(series: Series) -> Series:
    """Derive the rate series of a counter-like series.

    Args:
        series: Observations newest first.

    Returns:
        One rate per adjacent pair, newest first. Empty for series shorter
        than two or of a kind that is not countable.
    """
    if len(series) < 2 or not series[0].kind.is_countable:
        return []
    return [
        compute_rate(current, previous)
        for current, previous in zip(series, series[1:])
    ]


def derive(series: Series) -> list[Series]:
    """Return the series followed by any series derived from it."""
    derived = [series]
    rates = derive_rate(series)
    if rates:
        derived.append(rates)
    return derived
