#!/usr/bin/env python3
"""
Best-effort concurrent fan-out.

A thin layer over ``asyncio.gather(..., return_exceptions=True)`` that runs
independent coroutines together and reports one outcome per task instead of
failing on the first error. A failing task never cancels its siblings.
"""

import asyncio
import logging
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from .models import BatchResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Outcome(Generic[T]):
    """Result of one fanned-out task."""

    label: str
    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def gather_outcomes(tasks: Iterable[tuple[str, Awaitable[T]]]) -> list[Outcome[T]]:
    """
    Run labelled awaitables concurrently and collect every outcome.

    Args:
        tasks: (label, awaitable) pairs; labels identify failures in logs

    Returns:
        Outcomes in input order
    """
    labelled = list(tasks)
    results = await asyncio.gather(*(aw for _, aw in labelled), return_exceptions=True)

    outcomes: list[Outcome[T]] = []
    for (label, _), result in zip(labelled, results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            logger.error(f"Task {label} failed: {result}")
            outcomes.append(Outcome(label=label, error=result))
        else:
            outcomes.append(Outcome(label=label, value=result))
    return outcomes


def summarize_outcomes(outcomes: list[Outcome]) -> BatchResult:
    """Collapse outcomes into a total/succeeded/failed summary."""
    failures = [outcome for outcome in outcomes if not outcome.ok]
    return BatchResult(
        total=len(outcomes),
        succeeded=len(outcomes) - len(failures),
        failed=len(failures),
        errors=[f"{outcome.label}: {outcome.error}" for outcome in failures],
    )
