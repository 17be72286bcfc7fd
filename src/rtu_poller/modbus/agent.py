import asyncio
import logging
from datetime import datetime

from rtu_poller.constants import MAX_RETRY_COUNT, RETRY_DELAY, SETTLE_DELAY
from rtu_poller.errors import TransportError
from rtu_poller.modbus.executor import QueryExecutor
from rtu_poller.modbus.snip import ControlSnip, QuerySnip
from rtu_poller.status import Status

logger = logging.getLogger(__name__)


class PollingAgent:
    """
    Consumes the read requests, one at a time.
    Each request is either delivered on the output queue, or dropped once
    all the attempts failed. In both cases, a single control snip is sent.
    """
    def __init__(
        self,
        executor: QueryExecutor,
        status: Status,
        requests: asyncio.Queue[QuerySnip | None],
        results: asyncio.Queue[QuerySnip],
        controls: asyncio.Queue[ControlSnip],
        *,
        max_retry_count: int = MAX_RETRY_COUNT,
        settle_delay: float = SETTLE_DELAY,
        retry_delay: float = RETRY_DELAY
    ):
        self.executor = executor
        self.status = status
        self.requests = requests
        self.results = results
        self.controls = controls
        self.max_retry_count = max_retry_count
        self.settle_delay = settle_delay
        self.retry_delay = retry_delay
        self._previous_device_id: int | None = None

    async def process(self, snip: QuerySnip) -> bool:
        """Run one request to completion. Returns True if it was delivered."""
        # Devices on the line need a pause when another device was just queried
        if self._previous_device_id != snip.device_id:
            await asyncio.sleep(self.settle_delay)

        self._previous_device_id = snip.device_id

        for attempt in range(1, self.max_retry_count + 1):
            try:
                reading = await self.executor.query(snip)
                break
            except TransportError:
                self.status.increase_reconnect_counter()
                logger.warning(
                    f"Device {snip.device_id} failed to respond - "
                    f"retry attempt {attempt} of {self.max_retry_count}"
                )
                await asyncio.sleep(self.retry_delay)
        else:
            await self.controls.put(ControlSnip.error(snip.device_id))
            return False

        snip.value = snip.decoder.decode(reading)
        snip.read_timestamp = datetime.now()
        await self.results.put(snip)
        await self.controls.put(ControlSnip.ok(snip.device_id))

        return True

    async def run_async(self):
        """
        Main loop of the agent.
        Runs until a None request is received or the task is cancelled.
        """
        try:
            while True:
                snip = await self.requests.get()

                try:
                    if snip is None:  # Sentinel to stop
                        break

                    await self.process(snip)
                finally:
                    self.requests.task_done()
        except asyncio.CancelledError:
            logger.info("Agent cancelled - exiting")
            raise
