"""Python logging handler that keeps recent sampling failures in memory.

A renderer can show why the last polls failed without its own log
plumbing: attach the handler to the ``promscope`` logger and read
``entries()`` when drawing.
"""

import logging
from collections.abc import Sequence

from promscope.core.exceptions import failure_fields
from promscope.core.history import HistoryBuffer
from promscope.core.models import LogEntry

# Record fields set by SamplingStore when a sample fails
DEFAULT_FIELDS = ("error_type", "endpoint", "status")

DEFAULT_LOG_CAPACITY = 100

_Value = str | int | float | bool


class HistoryLogHandler(logging.Handler):
    """Logging handler that keeps records as LogEntry in a HistoryBuffer.

    Only the named record fields end up in ``LogEntry.attributes``. When a
    record carries an exception (``logger.exception(...)``), the failure
    fields of that exception are filled in as well, so a FetchError logged
    anywhere still shows its endpoint and status.

    Example:
        ```python
        import logging
        from promscope.adapters.logging import HistoryLogHandler

        failures = HistoryLogHandler(capacity=20, level=logging.WARNING)
        logging.getLogger("promscope").addHandler(failures)
        ...
        for entry in failures.entries(level="WARNING"):
            print(entry.attributes.get("status"), entry.message)
        ```
    """

    def __init__(
        self,
        capacity: int = DEFAULT_LOG_CAPACITY,
        level: int = logging.NOTSET,
        fields: Sequence[str] = DEFAULT_FIELDS,
    ) -> None:
        """Initialize the handler with an empty buffer.

        Args:
            capacity: Number of entries to keep.
            level: Minimum level handled.
            fields: Record attributes copied into the entry attributes when
                present and scalar.
        """
        super().__init__(level)
        self._buffer: HistoryBuffer[LogEntry] = HistoryBuffer(capacity)
        self._fields = tuple(fields)

    def emit(self, record: logging.LogRecord) -> None:
        attributes: dict[str, _Value] = {}
        for name in self._fields:
            value = getattr(record, name, None)
            if isinstance(value, _Value):
                attributes[name] = value

        if record.exc_info and record.exc_info[1] is not None:
            for name, value in failure_fields(record.exc_info[1]).items():
                attributes.setdefault(name, value)

        self._buffer.add(
            LogEntry(
                timestamp=record.created,
                level=record.levelname,
                message=record.getMessage(),
                attributes=attributes,
            )
        )

    def entries(self, since: float = 0, level: str | None = None) -> list[LogEntry]:
        """Return buffered entries, oldest first.

        Args:
            since: Only entries with timestamp > since.
            level: Only entries of this level name (e.g. "WARNING").
        """
        return [
            entry
            for entry in self._buffer.get()
            if entry.timestamp > since and (level is None or entry.level == level)
        ]

    def clear(self) -> None:
        self._buffer.clear()
