import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar

T = TypeVar("T")

TaskFactory = Callable[[], Awaitable[T]]


@dataclass(frozen=True)
class TaskOutcome(Generic[T]):
    index: int
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _semaphore(concurrency: int) -> asyncio.Semaphore:
    return asyncio.Semaphore(max(1, concurrency))


async def _run_one(factory: TaskFactory, semaphore: asyncio.Semaphore):
    async with semaphore:
        return await factory()


def _to_outcome(index: int, raw: object) -> TaskOutcome:
    if isinstance(raw, Exception):
        return TaskOutcome(index=index, error=raw)
    if isinstance(raw, BaseException):
        raise raw
    return TaskOutcome(index=index, value=raw)


async def run_parallel(
    factories: Sequence[TaskFactory],
    concurrency: int,
) -> list[TaskOutcome]:
    """Run every factory concurrently, capturing per-task errors in order.

    Cancelling the caller cancels all in-flight tasks.
    """
    semaphore = _semaphore(concurrency)
    coros = [_run_one(f, semaphore) for f in factories]
    results = await asyncio.gather(*coros, return_exceptions=True)
    return [_to_outcome(i, raw) for i, raw in enumerate(results)]
