import asyncio
import logging
from typing import Sequence

from rtu_poller.modbus.snip import QuerySnip
from rtu_poller.producers.producer import Producer

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Feeds the agent with a full reading of every device, periodically.
    A round is only queued once the agent is done with the previous one.
    """
    def __init__(
        self,
        devices: Sequence[tuple[int, Producer]],
        requests: asyncio.Queue[QuerySnip | None],
        interval: float
    ):
        self.devices = list(devices)
        self.requests = requests
        self.interval = interval

    async def enqueue_once(self) -> int:
        """Queue one round of requests. Returns the number queued."""
        count = 0

        for device_id, producer in self.devices:
            for snip in producer.produce(device_id):
                await self.requests.put(snip)
                count += 1

        return count

    async def run_async(self):
        loop = asyncio.get_running_loop()

        while True:
            started = loop.time()
            count = await self.enqueue_once()
            logger.debug(f"Queued {count} requests")

            # The consumer calls task_done() once per request
            await self.requests.join()

            elapsed = loop.time() - started

            if elapsed > self.interval:
                logger.warning(
                    f"Polling round took {elapsed:.1f}s, "
                    f"longer than the {self.interval}s interval"
                )

            await asyncio.sleep(max(0.0, self.interval - elapsed))
