"""Example driver that polls a metrics endpoint and prints its history.

Run with:
    python examples/tail_endpoint.py http://localhost:9100/metrics [filter]

Every interval the store samples the endpoint once, then the dump (each
series followed by its per-second rate, if any) is printed as NDJSON.
Failed polls are logged and the loop keeps going.
"""

import asyncio
import logging
import sys

from promscope import (
    AsyncHttpxSource,
    EmptyHistoryError,
    HistoryLogHandler,
    PromscopeError,
    SamplingStore,
    StoreConfig,
)
from promscope.core.encoding import encode_observations

logger = logging.getLogger("tail_endpoint")


async def tail(config: StoreConfig, filter_text: str = "") -> None:
    """Sample forever, printing the derived dump after every poll."""
    failures = HistoryLogHandler(capacity=5, level=logging.WARNING)
    logging.getLogger("promscope").addHandler(failures)

    async with AsyncHttpxSource.from_config(config) as source:
        store = SamplingStore.from_config(config, source)
        while True:
            try:
                await store.sample_async()
            except PromscopeError as exc:
                logger.debug("Poll failed with %s", type(exc).__name__)

            try:
                for series in store.dump_derived(filter_text):
                    print(encode_observations(series[:1]), end="")
            except EmptyHistoryError:
                logger.info("Waiting for the first successful sample")

            for entry in failures.entries():
                status = entry.attributes.get("status", "-")
                print(f"# {entry.level} [{status}]: {entry.message}", file=sys.stderr)
            failures.clear()
            await asyncio.sleep(config.interval)


def main() -> None:
    if len(sys.argv) < 2:
        print(__doc__, file=sys.stderr)
        sys.exit(2)
    logging.basicConfig(level=logging.INFO)
    config = StoreConfig(endpoint=sys.argv[1])
    filter_text = sys.argv[2] if len(sys.argv) > 2 else ""
    try:
        asyncio.run(tail(config, filter_text))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
