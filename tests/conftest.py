import struct
import time
import types

import pytest

from pymodbus.exceptions import ModbusIOException

from rtu_poller.errors import ErrorKind, TransportError
from rtu_poller.status import Status


def float_registers(value: float) -> list[int]:
    return list(struct.unpack(">2H", struct.pack(">f", value)))


class FakeSession:
    """
    Stands in for the TransportSession.
    The responder is called with (address, function_code, start, count) and
    returns the bytes, or raises.
    """
    def __init__(self, responder):
        self.responder = responder
        self.calls = []
        self.timeout = 0.3

    async def read_registers(self, address, function_code, start, count):
        self.calls.append((time.monotonic(), address, function_code, start, count))
        return self.responder(address, function_code, start, count)


class FakeClient:
    """
    Stands in for the pymodbus serial client.
    The responder is called with (function_code, address, count, device_id) and
    returns a list of registers, a response object, or raises.
    """
    def __init__(self, responder=None, connect_result=True, **kwargs):
        self.kwargs = kwargs
        self.responder = responder
        self.connect_result = connect_result
        self.comm_params = types.SimpleNamespace(timeout_connect=kwargs.get("timeout"))
        # pymodbus keeps a separate copy in the transaction manager
        self.ctx = types.SimpleNamespace(
            comm_params=types.SimpleNamespace(timeout_connect=kwargs.get("timeout"))
        )
        self.connected = False
        self.calls = []

    async def connect(self):
        self.connected = self.connect_result
        return self.connect_result

    def close(self):
        self.connected = False

    def _reply(self, function_code, address, count, device_id):
        self.calls.append((function_code, address, count, device_id, self.ctx.comm_params.timeout_connect))
        reply = self.responder(function_code, address, count, device_id)

        if isinstance(reply, list):
            return types.SimpleNamespace(isError=lambda: False, registers=reply)

        return reply

    async def read_holding_registers(self, address, *, count=1, device_id=1):
        return self._reply(3, address, count, device_id)

    async def read_input_registers(self, address, *, count=1, device_id=1):
        return self._reply(4, address, count, device_id)


def no_reply(*args):
    raise ModbusIOException("No response received")


def flaky(failures: int, payload: bytes):
    """Fails the given number of times, then returns the payload"""
    remaining = [failures]

    def responder(address, function_code, start, count):
        if remaining[0] > 0:
            remaining[0] -= 1
            raise TransportError(ErrorKind.TIMEOUT, address, function_code)
        return payload

    return responder


@pytest.fixture
def status():
    return Status()
