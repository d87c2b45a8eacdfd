import asyncio
import logging

import pytest

from omnivision.core.dispatch import FireAndForget


@pytest.mark.asyncio
async def test_failed_send_is_logged_not_raised(caplog):
    sends = FireAndForget()

    async def failing():
        raise ConnectionError("socket closed")

    with caplog.at_level(logging.WARNING):
        task = sends.submit(failing(), "tool response abc", level=logging.WARNING)
        await asyncio.sleep(0)
        await asyncio.sleep(0)

    assert task.done()
    assert "tool response abc failed: socket closed" in caplog.text
    assert sends.pending == 0


@pytest.mark.asyncio
async def test_successful_send_leaves_nothing_pending():
    sends = FireAndForget()
    seen = []

    async def ok():
        seen.append(True)

    sends.submit(ok(), "media send")
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert seen == [True]
    assert sends.pending == 0


@pytest.mark.asyncio
async def test_cancel_all():
    sends = FireAndForget()
    task = sends.submit(asyncio.Event().wait(), "media send")

    sends.cancel_all()
    await asyncio.sleep(0)

    assert task.cancelled()
    assert sends.pending == 0
