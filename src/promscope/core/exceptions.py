"""Exceptions raised by the sampling engine."""


class PromscopeError(Exception):
    """Base class for all promscope errors."""


class InvalidConfigurationError(PromscopeError, ValueError):
    """Raised when a component is constructed with invalid settings."""


class FetchError(PromscopeError):
    """Raised when the metrics endpoint could not be fetched.

    Args:
        message: Human readable description.
        status: HTTP status code, if a response was received.
        endpoint: Endpoint that was fetched, if known.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.endpoint = endpoint


class ParseError(PromscopeError):
    """Raised when an exposition payload cannot be decoded."""


class EmptyHistoryError(PromscopeError):
    """Raised when the history is queried before any successful sample."""


def failure_fields(exc: BaseException) -> dict[str, str | int]:
    """Structured fields describing a failed sample, for log records.

    Always has ``error_type``; ``endpoint`` and ``status`` are added when a
    FetchError knows them.
    """
    fields: dict[str, str | int] = {"error_type": type(exc).__name__}
    if isinstance(exc, FetchError):
        if exc.endpoint is not None:
            fields["endpoint"] = exc.endpoint
        if exc.status is not None:
            fields["status"] = exc.status
    return fields
