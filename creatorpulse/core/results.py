"""Collect-results-and-errors fold used by per-source and per-owner batch loops."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

K = TypeVar("K")
T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome(Generic[K, T]):
    """Result of one batch step: either a value or the error that stopped it."""

    key: K
    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchReport(Generic[K, T]):
    succeeded: list[Outcome[K, T]] = field(default_factory=list)
    failed: list[Outcome[K, T]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)

    def values(self) -> list[T]:
        return [outcome.value for outcome in self.succeeded if outcome.value is not None]


async def capture(key: K, step: Awaitable[T]) -> Outcome[K, T]:
    """Await one step and wrap its result or its exception."""
    try:
        return Outcome(key=key, value=await step)
    except Exception as exc:
        return Outcome(key=key, error=exc)


def partition(outcomes: Iterable[Outcome[K, T]], *, label: str) -> BatchReport[K, T]:
    """Split outcomes into successes and failures, logging each failure."""
    report: BatchReport[K, T] = BatchReport()
    for outcome in outcomes:
        if outcome.ok:
            report.succeeded.append(outcome)
            continue
        logger.error(
            "%s failed for %s: %s",
            label,
            outcome.key,
            outcome.error,
            exc_info=outcome.error,
        )
        report.failed.append(outcome)
    return report


async def run_sequentially(
    keys: Iterable[K],
    step: Callable[[K], Awaitable[T]],
    *,
    label: str,
) -> BatchReport[K, T]:
    """Run `step` for each key one at a time; a failing key never stops the rest."""
    outcomes = [await capture(key, step(key)) for key in keys]
    return partition(outcomes, label=label)
