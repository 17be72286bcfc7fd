import asyncio
import logging
from dataclasses import dataclass, field
from typing import Sequence

from rtu_poller.constants import (
    MAX_DEVICE_ID,
    MIN_DEVICE_ID,
    SCAN_CAVEAT,
    SCAN_PROBE_DELAY,
    SCAN_TIMEOUT,
)
from rtu_poller.errors import TransportError
from rtu_poller.modbus.executor import QueryExecutor
from rtu_poller.modbus.iec61850 import iec_description
from rtu_poller.modbus.session import TransportSession
from rtu_poller.producers.producer import Producer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FoundDevice:
    device_id: int
    meter_type: str


@dataclass
class ScanReport:
    devices: list[FoundDevice] = field(default_factory=list)
    absent: list[int] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.devices)

    def meter_type(self, device_id: int) -> str:
        """The type found at the given address, or n/a"""
        for device in self.devices:
            if device.device_id == device_id:
                return device.meter_type

        return "n/a"

    def summary(self) -> list[str]:
        lines = [f"Found {self.count} active devices:"]
        lines.extend(
            f"* slave address {d.device_id}: type {d.meter_type}"
            for d in self.devices
        )
        lines.append(SCAN_CAVEAT)

        return lines


class BusScanner:
    """
    Sweeps all the valid addresses, probing each with every producer in turn.
    The first producer to get a reply wins the address.
    The session must not be used by anything else while the scan runs.
    """
    def __init__(
        self,
        session: TransportSession,
        executor: QueryExecutor,
        producers: Sequence[Producer],
        *,
        timeout: float = SCAN_TIMEOUT,
        probe_delay: float = SCAN_PROBE_DELAY
    ):
        self.session = session
        self.executor = executor
        self.producers = list(producers)
        self.timeout = timeout
        self.probe_delay = probe_delay

    async def probe(self, device_id: int) -> Producer | None:
        """Returns the first producer whose probe got a reply"""
        for producer in self.producers:
            snip = producer.probe(device_id)

            try:
                reading = await self.executor.query(snip)
            except TransportError:
                continue

            logger.info(
                f"Device {device_id}: {producer.meter_type} type device found, "
                f"{iec_description(snip.iec61850)}: "
                f"{snip.decoder.decode(reading):.2f}"
            )

            return producer

        return None

    async def scan(self) -> ScanReport:
        report = ScanReport()
        logger.info("Starting bus scan")

        with self.session.timeout_override(self.timeout):
            for device_id in range(MIN_DEVICE_ID, MAX_DEVICE_ID + 1):
                # Give the bus some time to recover before the next device
                await asyncio.sleep(self.probe_delay)

                producer = await self.probe(device_id)

                if producer is None:
                    logger.info(f"Device {device_id}: n/a")
                    report.absent.append(device_id)
                else:
                    report.devices.append(
                        FoundDevice(device_id, producer.meter_type)
                    )

        for line in report.summary():
            logger.info(line)

        return report
