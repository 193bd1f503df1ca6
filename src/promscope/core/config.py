"""Configuration values consumed by the sampling engine."""

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from promscope.core.exceptions import InvalidConfigurationError

# Enough data points to show the delta between the last two values or rates.
DEFAULT_CAPACITY = 3
DEFAULT_INTERVAL = 5.0
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class StoreConfig:
    """Settings for one sampling store and its fetch source.

    Attributes:
        endpoint: URL of the metrics endpoint.
        capacity: Number of snapshots kept in the history.
        interval: Polling interval in seconds, used by the external driver.
        timeout: Fetch timeout in seconds.
        include_average: Emit ``<name>_avg`` observations for histograms.
    """

    endpoint: str
    capacity: int = DEFAULT_CAPACITY
    interval: float = DEFAULT_INTERVAL
    timeout: float = DEFAULT_TIMEOUT
    include_average: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.endpoint, str) or not self.endpoint.strip():
            raise InvalidConfigurationError("endpoint must be a non-empty string")
        validate_capacity(self.capacity)
        if self.interval <= 0:
            raise InvalidConfigurationError(
                f"interval must be positive, got {self.interval!r}"
            )
        if self.timeout <= 0:
            raise InvalidConfigurationError(
                f"timeout must be positive, got {self.timeout!r}"
            )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "StoreConfig":
        """Build a config from a plain mapping, rejecting unknown keys.

        Args:
            values: Mapping of field names to values.

        Returns:
            Validated StoreConfig.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise InvalidConfigurationError(
                f"unknown configuration keys: {', '.join(unknown)}"
            )
        if "endpoint" not in values:
            raise InvalidConfigurationError("endpoint is required")
        return cls(**values)


def validate_capacity(capacity: object) -> int:
    """Return capacity if it is an integer >= 1, else raise.

    Raises:
        InvalidConfigurationError: For zero, negative or non-integer values.
    """
    if isinstance(capacity, bool) or not isinstance(capacity, int):
        raise InvalidConfigurationError(
            f"capacity must be an integer, got {type(capacity).__name__}"
        )
    if capacity < 1:
        raise InvalidConfigurationError(f"capacity must be >= 1, got {capacity}")
    return capacity
