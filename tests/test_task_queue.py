"""Tests for the in-process background queue."""

import pytest

from app.core import task_queue
from app.core.task_queue import BackgroundQueue


async def test_jobs_run_and_failures_do_not_stop_workers() -> None:
    bg = BackgroundQueue(concurrency=1)
    ran: list[str] = []

    async def failing() -> None:
        raise RuntimeError("boom")

    async def ok() -> None:
        ran.append("ok")

    bg.start()
    bg.enqueue(failing)
    bg.enqueue(ok)
    await bg.stop()

    assert ran == ["ok"]
    assert bg.pending == 0


async def test_enqueue_verification_email_sends_off_loop(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    bg = BackgroundQueue(concurrency=1)
    sent: list[dict] = []
    monkeypatch.setattr(task_queue, "queue", bg)
    monkeypatch.setattr(
        task_queue.mailer, "send_verification", lambda **kwargs: sent.append(kwargs)
    )

    bg.start()
    task_queue.enqueue_verification_email(
        email="ada@example.com", name="Ada", link="http://x/verify?token=t"
    )
    await bg.stop()

    assert sent == [
        {"email": "ada@example.com", "name": "Ada", "link": "http://x/verify?token=t"}
    ]
