import asyncio
import logging

import pytest

from rtu_poller.errors import ConfigurationError, ErrorKind, TransportError
from rtu_poller.modbus.decoder import Decoder
from rtu_poller.modbus.executor import QueryExecutor
from rtu_poller.modbus.snip import QuerySnip

from conftest import FakeSession, flaky


def make_snip(func_code=4, read_len=2):
    return QuerySnip(
        device_id=9, func_code=func_code, op_code=0x0C, read_len=read_len,
        decoder=Decoder.raw32()
    )


def test_success_returns_raw_bytes(status):
    session = FakeSession(lambda *args: b"\x40\x50\x00\x00")
    executor = QueryExecutor(session, status)

    assert asyncio.run(executor.query(make_snip())) == b"\x40\x50\x00\x00"
    assert status.requests == 1
    assert session.calls[0][1:] == (9, 4, 0x0C, 2)


def test_failure_is_counted_and_raised(status):
    session = FakeSession(flaky(1, b""))
    executor = QueryExecutor(session, status)

    with pytest.raises(TransportError) as info:
        asyncio.run(executor.query(make_snip()))

    assert info.value.kind == ErrorKind.TIMEOUT
    assert status.requests == 1
    assert len(session.calls) == 1


@pytest.mark.parametrize("read_len", [0, -2])
def test_bad_length_is_fatal(status, read_len):
    session = FakeSession(lambda *args: b"")
    executor = QueryExecutor(session, status)

    with pytest.raises(ConfigurationError):
        asyncio.run(executor.query(make_snip(read_len=read_len)))

    assert session.calls == []
    assert status.requests == 0


@pytest.mark.parametrize("func_code", [1, 2, 6, 16])
def test_bad_function_code_is_fatal(status, func_code):
    session = FakeSession(lambda *args: b"")
    executor = QueryExecutor(session, status)

    with pytest.raises(ConfigurationError):
        asyncio.run(executor.query(make_snip(func_code=func_code)))

    assert session.calls == []


def test_verbose_logs_the_failure(status, caplog):
    executor = QueryExecutor(FakeSession(flaky(1, b"")), status, verbose=True)

    with caplog.at_level(logging.INFO, logger="rtu_poller.modbus.executor"):
        with pytest.raises(TransportError):
            asyncio.run(executor.query(make_snip()))

    assert "failed to retrieve opcode 0xc" in caplog.text
