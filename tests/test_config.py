import types

import pytest
import toml

from rtu_poller.config import Config, parse_device
from rtu_poller.constants import CONFIG_SCHEMA
from rtu_poller.errors import ConfigurationError
from rtu_poller.modbus.session import ComSet
from rtu_poller.producers.factory import factory


@pytest.fixture(autouse=True)
def ports(monkeypatch):
    monkeypatch.setattr(Config, "list_comports", staticmethod(lambda: ["/dev/ttyUSB0"]))


def make_options(**kwargs):
    values = dict(comport=None, baudrate=None, serial=None, comset=None, interval=None)
    values.update(kwargs)
    return types.SimpleNamespace(**values)


def write_config(path, **values):
    with open(path, "w") as f:
        toml.dump(values, f)


def test_defaults_without_file(tmp_path):
    config = Config(str(tmp_path / "config.toml"))
    assert dict(config) == CONFIG_SCHEMA
    assert config.comset == ComSet.B9600_8N1
    assert not config.is_usable


def test_load_completes_missing_values(tmp_path):
    path = tmp_path / "config.toml"
    write_config(path, com_port="/dev/ttyUSB0", baud=19200, parity="E")

    config = Config(str(path))

    assert config["baud"] == 19200
    assert config["poll_interval"] == CONFIG_SCHEMA["poll_interval"]
    assert config.comset == ComSet.B19200_8E1
    assert config.is_usable


@pytest.mark.parametrize("values", [
    {"baud": 4800},
    {"parity": "O"},
    {"stop": 2},
    {"device_ids": [0]},
    {"device_ids": ["12:x:y", "abc"]},
])
def test_invalid_file_reverts_to_defaults(tmp_path, values):
    path = tmp_path / "config.toml"
    write_config(path, **values)

    config = Config(str(path))

    assert dict(config) == CONFIG_SCHEMA


def test_corrupt_file_reverts_to_defaults(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("baud = = 2")

    assert dict(Config(str(path))) == CONFIG_SCHEMA


def test_save_round_trip(tmp_path):
    path = str(tmp_path / "config.toml")
    config = Config(path)
    config.update({"com_port": "/dev/ttyUSB0", "device_ids": ["1:sdm", "3"]})
    assert config.has_unsaved_changes

    config.save()

    assert not config.has_unsaved_changes
    assert Config(path)["device_ids"] == ["1:sdm", "3"]


def test_command_line_overrides(tmp_path):
    config = Config(str(tmp_path / "config.toml"))

    config.apply_command_line_overrides(
        make_options(comport="/dev/ttyUSB0", comset=4, interval=2.5),
        ["5", "6:dzg"]
    )

    assert config["com_port"] == "/dev/ttyUSB0"
    assert config.comset == ComSet.B2400_8E1
    assert config["poll_interval"] == 2.5
    assert config["device_ids"] == ["5", "6:dzg"]
    assert config.is_usable


def test_serial_override(tmp_path):
    config = Config(str(tmp_path / "config.toml"))
    config.apply_command_line_overrides(make_options(serial="8e1", baudrate=2400))
    assert config.comset == ComSet.B2400_8E1


@pytest.mark.parametrize("options", [
    make_options(serial="8O1"),
    make_options(serial="7N1"),
    make_options(comset=9),
    make_options(interval=0),
])
def test_invalid_overrides_are_fatal(tmp_path, options):
    config = Config(str(tmp_path / "config.toml"))

    with pytest.raises(ConfigurationError):
        config.apply_command_line_overrides(options)

    assert dict(config) == CONFIG_SCHEMA


def test_devices_use_the_default_producer(tmp_path):
    config = Config(str(tmp_path / "config.toml"))
    config.update({"device_ids": [1, "2:janitza"], "default_producer": "dzg"})

    devices = config.devices(factory)

    assert [(d, p.meter_type) for d, p in devices] == [(1, "DZG"), (2, "JANITZA")]


def test_unknown_producer_is_fatal(tmp_path):
    config = Config(str(tmp_path / "config.toml"))
    config.update({"device_ids": ["2:abb"]})

    with pytest.raises(ConfigurationError):
        config.devices(factory)


def test_parse_device():
    assert parse_device(7, "sdm") == (7, "sdm")
    assert parse_device("7:dzg", "sdm") == (7, "dzg")

    with pytest.raises(ValueError):
        parse_device("248", "sdm")
