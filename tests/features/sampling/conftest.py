"""BDD step definitions for sampling.feature."""

import math
from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from promscope.core.derive import rate_name
from promscope.core.exceptions import FetchError, PromscopeError
from promscope.core.models import FetchResult, Series
from promscope.core.store import SamplingStore
from tests.helpers import StaticSource, counter_payload, ok

START = 1702300000.0


@dataclass
class SamplingScenarioContext:
    """State shared between the steps of one scenario."""

    capacity: int = 3
    responses: list[FetchResult | Exception] = field(default_factory=list)
    store: SamplingStore | None = None
    failures: list[PromscopeError] = field(default_factory=list)
    dump: list[tuple[str, Series]] = field(default_factory=list)
    error: PromscopeError | None = None

    def get_store(self) -> SamplingStore:
        if self.store is None:
            responses = self.responses or [ok(b"")]
            self.store = SamplingStore(self.capacity, StaticSource(*responses))
        return self.store


def _numbers(text: str) -> list[float]:
    return [float(part) for part in text.split(",")]


def _words(text: str) -> list[str]:
    return [part.strip() for part in text.split(",")]


@pytest.fixture
def ctx() -> SamplingScenarioContext:
    """Fresh scenario context for each test."""
    return SamplingScenarioContext()


# === Given ===
@given(parsers.parse("a store with capacity {capacity:d}"))
def step_store(ctx: SamplingScenarioContext, capacity: int) -> None:
    ctx.capacity = capacity


@given(
    parsers.parse(
        "the endpoint serves counter values {values} "
        "with {step:d} seconds between polls"
    )
)
def step_counter_values(ctx: SamplingScenarioContext, values: str, step: int) -> None:
    ctx.responses = [
        ok(counter_payload(value), date=START + index * step)
        for index, value in enumerate(_numbers(values))
    ]


@given(parsers.parse("the endpoint refuses connections on poll {n:d}"))
def step_refuses(ctx: SamplingScenarioContext, n: int) -> None:
    ctx.responses[n - 1] = FetchError("connection refused")


@given(parsers.parse("the endpoint serves jobs for the queues {queues}"))
def step_jobs(ctx: SamplingScenarioContext, queues: str) -> None:
    lines = ["# TYPE jobs_processed_total counter"]
    lines += [
        f'jobs_processed_total{{queue="{queue}"}} {index}'
        for index, queue in enumerate(_words(queues))
    ]
    lines += ["# TYPE queue_depth gauge", "queue_depth 4", ""]
    ctx.responses = [ok("\n".join(lines).encode(), date=START)]


# === When ===
@when(parsers.parse("the endpoint is polled {n:d} times"))
def step_poll(ctx: SamplingScenarioContext, n: int) -> None:
    store = ctx.get_store()
    for _ in range(n):
        try:
            store.sample()
        except PromscopeError as exc:
            ctx.failures.append(exc)


@when(parsers.parse('the history is dumped with filter "{filter_text}"'))
def step_dump_filtered(ctx: SamplingScenarioContext, filter_text: str) -> None:
    ctx.dump = ctx.get_store().dump(filter_text)


@when("the history is dumped")
def step_dump(ctx: SamplingScenarioContext) -> None:
    try:
        ctx.dump = ctx.get_store().dump()
    except PromscopeError as exc:
        ctx.error = exc


# === Then ===
@then(parsers.parse('the series "{name}" has values {values}'))
def step_series_values(ctx: SamplingScenarioContext, name: str, values: str) -> None:
    series = dict(ctx.get_store().dump())[name]
    assert [o.value for o in series] == _numbers(values)


@then(parsers.parse('the rate series of "{name}" has values {values}'))
def step_rate_values(ctx: SamplingScenarioContext, name: str, values: str) -> None:
    rates = _rate_series(ctx, name)
    assert [o.value for o in rates] == _numbers(values)


@then(parsers.parse('the newest rate of "{name}" is undefined'))
def step_rate_undefined(ctx: SamplingScenarioContext, name: str) -> None:
    assert math.isnan(_rate_series(ctx, name)[0].value)


@then(parsers.parse("the number of failed polls is {n:d}"))
def step_failures(ctx: SamplingScenarioContext, n: int) -> None:
    assert len(ctx.failures) == n


@then(parsers.parse("the dumped queues are {queues}"))
def step_dumped_queues(ctx: SamplingScenarioContext, queues: str) -> None:
    names = [name for name, _ in ctx.dump]
    assert names == [f'jobs_processed_total {{queue="{q}"}}' for q in _words(queues)]


@then(parsers.parse('the dump fails with "{message}"'))
def step_dump_fails(ctx: SamplingScenarioContext, message: str) -> None:
    assert ctx.error is not None
    assert message in str(ctx.error)


def _rate_series(ctx: SamplingScenarioContext, name: str) -> Series:
    wanted = rate_name(name)
    for series in ctx.get_store().dump_derived():
        if series and series[0].name == wanted:
            return series
    raise AssertionError(f"no rate series for {name}")
