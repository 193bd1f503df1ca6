"""Filter, sort and extract per-metric series from snapshot history."""

import re
from collections.abc import Sequence

from promscope.core.exceptions import EmptyHistoryError
from promscope.core.models import Series, Snapshot

_DIGITS = re.compile(r"(\d+)")


def natural_key(name: str) -> tuple[tuple[tuple[int, int | str], ...], str]:
    """Sort key that compares embedded integers by numeric value.

    ``item2`` sorts before ``item10``. The raw name is the tie breaker, so
    ``item01`` and ``item1`` still have a stable order.
    """
    parts: list[tuple[int, int | str]] = []
    for index, chunk in enumerate(_DIGITS.split(name)):
        if not chunk:
            continue
        if index % 2:
            parts.append((0, int(chunk)))
        else:
            parts.append((1, chunk))
    return tuple(parts), name


def filter_and_sort(snapshot: Snapshot, filter_text: str = "") -> list[str]:
    """Return the names of a snapshot matching a filter, naturally sorted.

    Args:
        snapshot: Snapshot whose names are considered.
        filter_text: Case-insensitive substring. Empty keeps every name.

    Returns:
        Matching names in natural order.
    """
    needle = filter_text.lower()
    names = [name for name in snapshot if not needle or needle in name.lower()]
    return sorted(names, key=natural_key)


def extract_series(snapshots: Sequence[Snapshot], name: str) -> Series:
    """Return the observations of one name, newest first.

    The series stops at the first snapshot (scanning backwards from the
    newest) that lacks the name, so it is empty if the newest snapshot
    does not contain it.

    Args:
        snapshots: History ordered oldest to newest.
        name: Flat observation name.

    Returns:
        Observations from youngest to oldest.
    """
    series: Series = []
    for snapshot in reversed(snapshots):
        observation = snapshot.get(name)
        if observation is None:
            break
        series.append(observation)
    return series


def dump_snapshots(
    snapshots: Sequence[Snapshot], filter_text: str = ""
) -> list[tuple[str, Series]]:
    """Build the sorted, filtered series for every name of the newest snapshot.

    Args:
        snapshots: History ordered oldest to newest.
        filter_text: Case-insensitive substring filter.

    Returns:
        ``(name, series)`` pairs in natural name order. Empty if the filter
        matches nothing.

    Raises:
        EmptyHistoryError: If there are no snapshots.
    """
    if not snapshots:
        raise EmptyHistoryError("no data points")
    dump: list[tuple[str, Series]] = []
    for name in filter_and_sort(snapshots[-1], filter_text):
        series = extract_series(snapshots, name)
        if series:
            dump.append((name, series))
    return dump
