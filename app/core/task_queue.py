from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from app.core.logging import get_logger
from app.core.mailer import mailer


JobCallable = Callable[[], Awaitable[None]]

logger = get_logger(__name__)


class BackgroundQueue:
    """Simple in-process async job queue with fixed concurrency."""

    def __init__(self, *, concurrency: int = 2) -> None:
        self.concurrency = max(1, int(concurrency))
        self._queue: asyncio.Queue[JobCallable] = asyncio.Queue()
        self._workers: list[asyncio.Task[None]] = []
        self._started = False

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def _worker(self, idx: int) -> None:
        while True:
            job = await self._queue.get()
            try:
                await job()
            except Exception as e:  # noqa: BLE001
                # A failed job must not take the worker down
                logger.exception(f"[queue] Worker {idx} job failed: {e}")
            finally:
                self._queue.task_done()

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        for i in range(self.concurrency):
            self._workers.append(asyncio.create_task(self._worker(i)))

    async def stop(self) -> None:
        # Drain queue and cancel workers
        if self._started:
            await self._queue.join()
        for t in self._workers:
            t.cancel()
        self._workers.clear()
        self._started = False

    def enqueue(self, fn: JobCallable) -> None:
        self._queue.put_nowait(fn)


queue = BackgroundQueue(concurrency=2)


def enqueue_verification_email(*, email: str, name: str, link: str) -> None:
    """Queue a verification mail; delivery errors are logged by the worker."""

    async def _job() -> None:
        await asyncio.to_thread(
            mailer.send_verification, email=email, name=name, link=link
        )

    queue.enqueue(_job)
