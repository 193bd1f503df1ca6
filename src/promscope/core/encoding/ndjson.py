"""NDJSON encoder for dumped series."""

import json
import math
from collections.abc import Iterable

from promscope.core.models import Observation, Series


def _json_value(value: float) -> float | str:
    # JSON has no NaN or infinities
    if math.isnan(value) or math.isinf(value):
        return str(value)
    return value


def encode_observations(observations: Iterable[Observation]) -> str:
    """Encode observations to newline-delimited JSON.

    Args:
        observations: An iterable of Observation objects.

    Returns:
        NDJSON string with one JSON object per line.
        Empty string if no observations.
    """
    lines = []
    for observation in observations:
        obj = {
            "name": observation.name,
            "kind": observation.kind.value,
            "timestamp": observation.timestamp,
            "value": _json_value(observation.value),
        }
        lines.append(json.dumps(obj))

    if not lines:
        return ""

    return "\n".join(lines) + "\n"


def encode_dump(dump: Iterable[tuple[str, Series]]) -> str:
    """Encode dumped series to newline-delimited JSON, one line per series.

    Args:
        dump: ``(name, series)`` pairs as returned by ``SamplingStore.dump``.

    Returns:
        NDJSON string. Each object has ``name``, ``kind``, ``values`` and
        ``timestamps`` (both newest first). Empty string if no series.
    """
    lines = []
    for name, series in dump:
        if not series:
            continue
        obj = {
            "name": name,
            "kind": series[0].kind.value,
            "values": [_json_value(o.value) for o in series],
            "timestamps": [o.timestamp for o in series],
        }
        lines.append(json.dumps(obj))

    if not lines:
        return ""

    return "\n".join(lines) + "\n"
