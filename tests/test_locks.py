import asyncio

import pytest

from util.locks import ReadWriteLock


@pytest.mark.asyncio
async def test_readers_share_the_lock():
    lock = ReadWriteLock()
    async with lock.read():
        async with lock.read():
            assert lock.readers == 2
    assert lock.readers == 0


@pytest.mark.asyncio
async def test_writer_waits_for_readers():
    lock = ReadWriteLock()
    events = []

    async def writer():
        async with lock.write():
            events.append("write")

    async with lock.read():
        task = asyncio.create_task(writer())
        await asyncio.sleep(0)
        events.append("read-done")
    await task

    assert events == ["read-done", "write"]


@pytest.mark.asyncio
async def test_readers_wait_for_writer():
    lock = ReadWriteLock()
    events = []

    async def reader():
        async with lock.read():
            events.append("read")

    async with lock.write():
        assert lock.writer_active
        task = asyncio.create_task(reader())
        await asyncio.sleep(0)
        events.append("write-done")
    await task

    assert events == ["write-done", "read"]
    assert not lock.writer_active


@pytest.mark.asyncio
async def test_cancelled_writer_releases_waiting_readers():
    lock = ReadWriteLock()

    async def writer():
        async with lock.write():
            pass

    async def reader():
        async with lock.read():
            return "ok"

    async with lock.read():
        w = asyncio.create_task(writer())
        await asyncio.sleep(0)
        r = asyncio.create_task(reader())
        await asyncio.sleep(0)
        w.cancel()
        with pytest.raises(asyncio.CancelledError):
            await w

    assert await asyncio.wait_for(r, timeout=1) == "ok"
