"""
Execution helpers: sequential call plans and concurrency primitives.
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

T = TypeVar("T")

Executor = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class PlannedCall:
    """One mutating call of a plan, kept as plain data until executed."""

    method: str
    args: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"method": self.method, "args": self.args}


class SequentialPipeline:
    """
    An ordered list of calls where each runs only after the previous succeeded.

    A failing call stops the pipeline and propagates; calls that already ran
    are not undone.
    """

    def __init__(self, calls: Sequence[PlannedCall]) -> None:
        self.calls = list(calls)

    def to_list(self) -> list[dict[str, Any]]:
        return [call.to_dict() for call in self.calls]

    async def run(self, executors: Mapping[str, Executor]) -> list[Any]:
        """
        Execute every call in order.

        Args:
            executors: Async callables keyed by call method, invoked with the
                call's args as keyword arguments

        Returns:
            The result of each call, in order
        """
        missing = {call.method for call in self.calls} - set(executors)
        if missing:
            raise KeyError(f"No executor for: {', '.join(sorted(missing))}")

        results = []
        for call in self.calls:
            results.append(await executors[call.method](**call.args))
        return results


async def gather_bounded(
    factories: Iterable[Callable[[], Awaitable[T]]], limit: int
) -> list[T]:
    """
    Run coroutine factories with at most ``limit`` in flight, results in order.

    Work starts in iteration order. The first failure cancels whatever has
    not finished and is re-raised.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")
    semaphore = asyncio.Semaphore(limit)

    async def run(factory: Callable[[], Awaitable[T]]) -> T:
        async with semaphore:
            return await factory()

    tasks = [asyncio.ensure_future(run(factory)) for factory in factories]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def settle_all(aws: Iterable[Awaitable[T]]) -> list[T | BaseException]:
    """Run awaitables concurrently and wait for every one to finish or fail."""
    return list(await asyncio.gather(*aws, return_exceptions=True))
