import asyncio

from rtu_poller.producers.factory import factory
from rtu_poller.scheduler import Scheduler


def test_enqueue_once_reads_every_device():
    sdm = factory.get("sdm")
    dzg = factory.get("dzg")

    async def go():
        requests = asyncio.Queue()
        scheduler = Scheduler([(1, sdm), (2, dzg)], requests, 5.0)
        count = await scheduler.enqueue_once()
        return count, [requests.get_nowait() for _ in range(requests.qsize())]

    count, snips = asyncio.run(go())

    assert count == len(sdm.REGISTERS) + len(dzg.REGISTERS)
    assert len(snips) == count
    assert {s.device_id for s in snips[:len(sdm.REGISTERS)]} == {1}
    assert {s.device_id for s in snips[len(sdm.REGISTERS):]} == {2}


def run_with_consumer(scheduler, requests, delay, duration):
    """Consume the requests slowly. Returns the queue sizes seen by the consumer."""
    sizes = []

    async def consume():
        while True:
            await requests.get()
            sizes.append(requests.qsize())
            await asyncio.sleep(delay)
            requests.task_done()

    async def go():
        tasks = [
            asyncio.create_task(scheduler.run_async()),
            asyncio.create_task(consume()),
        ]
        await asyncio.sleep(duration)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    asyncio.run(go())
    return sizes


def test_run_repeats_rounds():
    sdm = factory.get("sdm")
    requests = asyncio.Queue()
    scheduler = Scheduler([(1, sdm)], requests, 0.01)

    sizes = run_with_consumer(scheduler, requests, 0, 0.1)

    assert len(sizes) >= 2 * len(sdm.REGISTERS)


def test_queue_stays_bounded_with_slow_consumer():
    sdm = factory.get("sdm")
    requests = asyncio.Queue()
    scheduler = Scheduler([(1, sdm)], requests, 0.001)

    sizes = run_with_consumer(scheduler, requests, 0.005, 0.3)

    # More than a round went through, yet the backlog never exceeded one round
    assert len(sizes) > len(sdm.REGISTERS)
    assert max(sizes) < len(sdm.REGISTERS)
