import copy
import logging
import os

import serial.tools.list_ports
import toml
from appdirs import user_config_dir

from rtu_poller.constants import (
    APP_NAME,
    CONFIG_FILENAME,
    CONFIG_SCHEMA,
    MAX_DEVICE_ID,
    MIN_DEVICE_ID,
    VALID_BAUD_RATES,
)
from rtu_poller.errors import ConfigurationError
from rtu_poller.modbus.session import ComSet
from rtu_poller.producers.factory import ProducerFactory
from rtu_poller.producers.producer import Producer

logger = logging.getLogger(__name__)


def parse_device(entry, default_producer: str) -> tuple[int, str]:
    """Split a 'device_id:producer' entry. A bare id uses the default producer."""
    device_id, _, producer = str(entry).partition(":")

    try:
        value = int(device_id)
    except ValueError:
        raise ValueError(f"Invalid device ID: {entry}") from None

    if not MIN_DEVICE_ID <= value <= MAX_DEVICE_ID:
        raise ValueError(f"Device ID out of range: {entry}")

    return value, producer or default_producer


class Config(dict):
    """Configuration manager for the poller, behaves like a dict."""

    def __init__(self, path: str | None = None):
        super().__init__(copy.deepcopy(CONFIG_SCHEMA))
        self._path = path
        self._has_unsaved_changes = False
        self._is_usable = False
        self._load()

    @property
    def is_usable(self):
        return self._is_usable

    @property
    def has_unsaved_changes(self):
        return self._has_unsaved_changes

    @property
    def comset(self) -> ComSet:
        return ComSet.from_serial(self["baud"], self["parity"])

    def _validate_config(self, config=None):
        """Validate config values and raise ValueError if invalid."""
        cfg = config if config is not None else self

        if cfg["baud"] not in VALID_BAUD_RATES:
            raise ValueError(f"Invalid baud rate: {cfg['baud']}")

        if cfg["stop"] != 1:
            raise ValueError(f"Invalid stop bits: {cfg['stop']}")

        if cfg["parity"] not in ["N", "E"]:
            raise ValueError(f"Invalid parity: {cfg['parity']}")

        if cfg["poll_interval"] <= 0:
            raise ValueError(f"Invalid poll interval: {cfg['poll_interval']}")

        for entry in cfg["device_ids"]:
            parse_device(entry, cfg["default_producer"])

    def _get_config_path(self):
        if self._path:
            return self._path

        config_dir = user_config_dir(APP_NAME)
        os.makedirs(config_dir, exist_ok=True)
        return os.path.join(config_dir, CONFIG_FILENAME)

    @staticmethod
    def list_comports():
        """List all sorted COM ports."""
        return sorted([p.device for p in serial.tools.list_ports.comports()],
                      key=lambda x: int(''.join(filter(str.isdigit, x)) or 0))

    def save(self):
        """Save the config dictionary to disk."""
        try:
            with open(self._get_config_path(), "w") as f:
                toml.dump(dict(self), f)
                logger.info("Configuration saved successfully.")
                self._has_unsaved_changes = False
        except OSError as e:
            logger.error(f"Error saving configuration: {e}")

    def _load(self):
        """Load config from disk, validate, and update the dict."""
        config_path = self._get_config_path()
        config_in_the_works = copy.deepcopy(CONFIG_SCHEMA)

        if os.path.exists(config_path):
            try:
                with open(config_path, "r") as f:
                    loaded = toml.load(f)

                    # Complete any missing values
                    config_in_the_works.update(loaded)
            except toml.TomlDecodeError as e:
                logger.error(f"Error loading configuration: {e}")
            except OSError as e:
                logger.error(f"Unexpected error loading configuration: {e}")
            else:
                try:
                    self._validate_config(config_in_the_works)
                except (ValueError, TypeError) as e:
                    logger.error(f"Configuration error: {e}")
                    # Revert to default
                    config_in_the_works = copy.deepcopy(CONFIG_SCHEMA)

        # Apply the configuration to this object
        dict.clear(self)
        dict.update(self, config_in_the_works)
        self._is_usable = self['com_port'] in Config.list_comports()

    def update(self, *args, **kwargs):
        # Make a copy to compare with later
        old = self.copy()

        super().update(*args, **kwargs)

        self._has_unsaved_changes = (old != self)

        # Check if the comm port is valid
        self._is_usable = self['com_port'] in Config.list_comports()

    def apply_command_line_overrides(self, options, device_ids=()):
        """
        Apply any command line overrides to the config.
        Raises ConfigurationError if the result is not valid.
        """
        overrides = {}

        if options.comport:
            overrides['com_port'] = options.comport

        if options.baudrate:
            overrides['baud'] = options.baudrate

        if options.serial:
            serial_opt = options.serial.upper()
            if len(serial_opt) == 3 and serial_opt[0] == '8' and serial_opt[2].isdigit():
                overrides['stop'] = int(serial_opt[2])
                overrides['parity'] = serial_opt[1]
            else:
                raise ConfigurationError(f"Invalid serial configuration: {options.serial}")

        if options.comset is not None:
            comset = ComSet.from_value(options.comset)
            overrides['baud'] = comset.baudrate
            overrides['parity'] = comset.parity
            overrides['stop'] = 1

        if options.interval is not None:
            overrides['poll_interval'] = options.interval

        if device_ids:
            overrides['device_ids'] = list(device_ids)

        if not overrides:
            return

        candidate = dict(self)
        candidate.update(overrides)

        try:
            self._validate_config(candidate)
        except ValueError as e:
            raise ConfigurationError(f"Command line override error: {e}") from e

        self.update(overrides)

    def devices(self, factory: ProducerFactory) -> list[tuple[int, Producer]]:
        """The configured devices along with the producer to read them"""
        retval = []

        for entry in self["device_ids"]:
            device_id, name = parse_device(entry, self["default_producer"])
            retval.append((device_id, factory.get(name)))

        return retval
