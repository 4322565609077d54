import asyncio
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Iterable, Optional, TypeVar

from .config import BuildConfig
from .errors import FetchTimeout, TaskExhausted

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class FetchOutcome(Generic[T, R]):
    index: int                          # submission position
    task: T
    value: Optional[R]
    attempts: int
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BatchResult(Generic[T, R]):
    outcomes: list[FetchOutcome[T, R]]  # sorted by index

    @property
    def successes(self) -> list[R]:
        return [o.value for o in self.outcomes if o.ok]

    @property
    def dropped(self) -> int:
        return sum(1 for o in self.outcomes if not o.ok)


class BoundedFetcher:
    """
    Runs one async call per task with at most `concurrency` in flight.

    Every attempt is bounded by `timeout`; a task gets `attempts` tries in total.
    Tasks that never succeed are dropped (logged as TaskExhausted) and the batch
    carries on, so `run` always returns.
    """

    def __init__(
        self,
        *,
        concurrency: int = 16,
        timeout: float = 10.0,
        attempts: int = 3,
        backoff_base: float = 0.5,
        progress_every: int = 0,
        name: str = "fetch",
    ):
        if concurrency < 1 or attempts < 1:
            raise ValueError("concurrency and attempts must be >= 1")
        self.concurrency = concurrency
        self.timeout = timeout
        self.attempts = attempts
        self.backoff_base = backoff_base
        self.progress_every = progress_every
        self.name = name

    @classmethod
    def from_config(cls, cfg: BuildConfig, *, name: str) -> "BoundedFetcher":
        return cls(
            concurrency=cfg.concurrency,
            timeout=cfg.timeout,
            attempts=cfg.attempts,
            backoff_base=cfg.backoff_base,
            progress_every=cfg.progress_every,
            name=name,
        )

    async def _sleep_backoff(self, attempt: int, label: str) -> None:
        if self.backoff_base <= 0:
            return
        sleep_s = self.backoff_base * (2 ** (attempt - 1))
        sleep_s += random.uniform(0, self.backoff_base)
        logger.debug("Sleeping %.2fs before retrying %s", sleep_s, label)
        await asyncio.sleep(sleep_s)

    async def _call_with_retry(
        self,
        index: int,
        task: T,
        fn: Callable[[T], Awaitable[R]],
        label: str,
    ) -> FetchOutcome[T, R]:
        last_err: Exception | None = None

        for attempt in range(1, self.attempts + 1):
            t0 = time.perf_counter()
            try:
                # wait_for cancels the call on timeout, so a late answer never lands
                value = await asyncio.wait_for(fn(task), timeout=self.timeout)
                return FetchOutcome(index=index, task=task, value=value, attempts=attempt)

            except asyncio.TimeoutError:
                last_err = FetchTimeout(f"{label} exceeded {self.timeout:.1f}s")
                logger.warning(
                    "FetchTimeout (attempt %d/%d) %s %s after %.2fs",
                    attempt,
                    self.attempts,
                    self.name,
                    label,
                    time.perf_counter() - t0,
                )

            except Exception as e:
                last_err = e
                logger.warning(
                    "Request failed (attempt %d/%d) %s %s after %.2fs error=%r",
                    attempt,
                    self.attempts,
                    self.name,
                    label,
                    time.perf_counter() - t0,
                    e,
                )

            if attempt < self.attempts:
                await self._sleep_backoff(attempt, label)

        exhausted = TaskExhausted(f"{self.name} {label}: giving up after {self.attempts} attempts ({last_err!r})")
        logger.warning("%s", exhausted)
        return FetchOutcome(index=index, task=task, value=None, attempts=self.attempts, error=exhausted)

    async def run(
        self,
        tasks: Iterable[T],
        fn: Callable[[T], Awaitable[R]],
        *,
        describe: Callable[[T], str] = repr,
    ) -> BatchResult[T, R]:
        queue: asyncio.Queue[tuple[int, T]] = asyncio.Queue()
        for item in enumerate(tasks):
            queue.put_nowait(item)
        total = queue.qsize()

        logger.info("%s: %d tasks, concurrency=%d timeout=%.1fs attempts=%d",
                    self.name, total, self.concurrency, self.timeout, self.attempts)

        async def worker() -> list[FetchOutcome[T, R]]:
            # each worker keeps its own outcomes; they are merged after gather
            mine: list[FetchOutcome[T, R]] = []
            while True:
                try:
                    index, task = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return mine
                if self.progress_every and (index % self.progress_every == 0 or index == total - 1):
                    logger.info("%s progress %d/%d", self.name, index + 1, total)
                mine.append(await self._call_with_retry(index, task, fn, describe(task)))

        parts: list[Any] = await asyncio.gather(*(worker() for _ in range(min(self.concurrency, total))))
        outcomes = sorted((o for part in parts for o in part), key=lambda o: o.index)
        result: BatchResult[T, R] = BatchResult(outcomes=outcomes)

        logger.info("%s done: succeeded=%d dropped=%d", self.name, len(result.successes), result.dropped)
        return result
