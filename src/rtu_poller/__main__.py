import asyncio
import faulthandler
import logging
import sys

from rtu_poller.config import Config
from rtu_poller.errors import ConfigurationError
from rtu_poller.modbus.agent import PollingAgent
from rtu_poller.modbus.executor import QueryExecutor
from rtu_poller.modbus.iec61850 import iec_description
from rtu_poller.modbus.scanner import BusScanner
from rtu_poller.modbus.session import TransportSession
from rtu_poller.modbus.snip import ControlSnip, ControlType, QuerySnip
from rtu_poller.optargs import parse_args
from rtu_poller.producers.factory import factory
from rtu_poller.scheduler import Scheduler
from rtu_poller.status import Status

logger = logging.getLogger("rtu_poller")


def setup_logging(debug: bool):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    faulthandler.enable()

    def hook(exc_type, exc, tb):
        logging.error("Uncaught top-level", exc_info=(exc_type, exc, tb))
    sys.excepthook = hook


async def consume_results(results: asyncio.Queue[QuerySnip]):
    while True:
        snip = await results.get()
        logger.info(
            f"Device {snip.device_id}: {iec_description(snip.iec61850)}: "
            f"{snip.value:.2f}"
        )


async def consume_controls(controls: asyncio.Queue[ControlSnip], status: Status):
    while True:
        control = await controls.get()

        if control.type == ControlType.ERROR:
            logger.error(f"{control.message} ({status.as_dict()})")
        else:
            logger.debug(f"Device {control.device_id}: {control.message}")


async def poll(agent: PollingAgent, scheduler: Scheduler, status: Status):
    """Run the agent and its collaborators until one of them fails"""
    tasks = [
        asyncio.create_task(consume_results(agent.results)),
        asyncio.create_task(consume_controls(agent.controls, status)),
        asyncio.create_task(scheduler.run_async()),
        asyncio.create_task(agent.run_async()),
    ]

    try:
        await asyncio.gather(*tasks)
    finally:
        for task in tasks:
            task.cancel()

        await asyncio.gather(*tasks, return_exceptions=True)


async def main(config: Config, scan: bool, verbose: bool):
    status = Status()
    session = TransportSession(config["com_port"], config.comset, verbose)
    await session.open()

    executor = QueryExecutor(session, status, verbose)

    try:
        if scan:
            producers = factory.ordered(config["producer_order"])
            await BusScanner(session, executor, producers).scan()
            return

        devices = config.devices(factory)

        if not devices:
            raise ConfigurationError("No devices to poll. Use --scan to find some.")

        requests = asyncio.Queue()
        agent = PollingAgent(executor, status, requests, asyncio.Queue(), asyncio.Queue())
        scheduler = Scheduler(devices, requests, config["poll_interval"])

        await poll(agent, scheduler, status)
    finally:
        session.close()


def load_config(options, device_ids, path: str | None = None) -> Config:
    """
    Load the configuration and apply the command line to it.
    Valid overrides are saved for the next session.
    """
    config = Config(path)
    config.apply_command_line_overrides(options, device_ids)

    if not config["com_port"]:
        raise ConfigurationError("No serial port configured. Use -c to set one.")

    if not config.is_usable:
        raise ConfigurationError(
            f"Serial port {config['com_port']} not found. "
            f"Available ports: {', '.join(Config.list_comports()) or 'none'}."
        )

    if config.has_unsaved_changes:
        config.save()

    return config


def run(argv=None):
    options, device_ids = parse_args(argv)
    setup_logging(options.debug)

    try:
        config = load_config(options, device_ids)
        asyncio.run(main(config, options.scan, options.verbose))
    except ConfigurationError as e:
        logger.critical(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == '__main__':
    run()
