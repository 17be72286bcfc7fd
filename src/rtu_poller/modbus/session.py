import logging
import struct
from contextlib import contextmanager
from enum import IntEnum

from pymodbus import FramerType, ModbusException, pymodbus_apply_logging_config
from pymodbus.client import AsyncModbusSerialClient
from pymodbus.exceptions import ModbusIOException

from rtu_poller.constants import (
    MODBUS_TIMEOUT,
    READ_HOLDING_REGISTERS,
    READ_INPUT_REGISTERS,
)
from rtu_poller.errors import (
    ConfigurationError,
    ErrorKind,
    LinkOpenError,
    TransportError,
)

logger = logging.getLogger(__name__)


class ComSet(IntEnum):
    """Communication presets. Always 8 data bits and 1 stop bit."""
    B2400_8N1 = 1
    B9600_8N1 = 2
    B19200_8N1 = 3
    B2400_8E1 = 4
    B9600_8E1 = 5
    B19200_8E1 = 6

    @property
    def baudrate(self) -> int:
        return COMSET_PARAMS[self][0]

    @property
    def parity(self) -> str:
        return COMSET_PARAMS[self][1]

    def __str__(self) -> str:
        return f"{self.baudrate} 8{self.parity}1"

    @classmethod
    def from_value(cls, value) -> "ComSet":
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"Invalid communication set {value!r}. "
                f"Valid values are: {', '.join(str(c.value) for c in cls)}."
            ) from None

    @classmethod
    def from_serial(cls, baudrate: int, parity: str) -> "ComSet":
        for comset, params in COMSET_PARAMS.items():
            if params == (baudrate, parity.upper()):
                return comset

        raise ConfigurationError(
            f"No communication set for {baudrate} baud, parity {parity}"
        )


COMSET_PARAMS = {
    ComSet.B2400_8N1: (2400, "N"),
    ComSet.B9600_8N1: (9600, "N"),
    ComSet.B19200_8N1: (19200, "N"),
    ComSet.B2400_8E1: (2400, "E"),
    ComSet.B9600_8E1: (9600, "E"),
    ComSet.B19200_8E1: (19200, "E"),
}


class TransportSession:
    """
    Owns the serial link.
    Not safe for concurrent use: only one caller may drive it at a time.
    """
    def __init__(
        self,
        port: str,
        comset,
        verbose: bool = False,
        client_class=AsyncModbusSerialClient
    ):
        self.port = port
        self.comset = ComSet.from_value(comset)
        self.verbose = verbose
        self.client: AsyncModbusSerialClient | None = None
        self._client_class = client_class
        self._timeout = MODBUS_TIMEOUT

    @property
    def connected(self):
        return self.client is not None and self.client.connected

    @property
    def timeout(self) -> float:
        return self._timeout

    @timeout.setter
    def timeout(self, value: float):
        self._timeout = value

        if self.client is not None:
            self.client.comm_params.timeout_connect = value

            # The transaction manager waits on its own copy of the params
            ctx = getattr(self.client, "ctx", None)

            if ctx is not None:
                ctx.comm_params.timeout_connect = value

    @contextmanager
    def timeout_override(self, seconds: float):
        """Use another timeout for the duration of the block"""
        previous = self.timeout
        self.timeout = seconds

        try:
            yield self
        finally:
            self.timeout = previous

    async def open(self):
        """Connect. Failing to do so is not recoverable."""
        if self.verbose:
            pymodbus_apply_logging_config(logging.DEBUG)
            logger.info(f"Connecting to RTU via {self.port}, {self.comset}")

        try:
            self.client = self._client_class(
                port=self.port,
                baudrate=self.comset.baudrate,
                bytesize=8,
                parity=self.comset.parity,
                stopbits=1,
                timeout=self._timeout,
                retries=0,
                framer=FramerType.RTU
            )

            connected = await self.client.connect()
        except (ModbusException, ValueError, OSError) as e:
            raise LinkOpenError(f"Failed to connect to {self.port}: {e}") from e

        if not connected:
            raise LinkOpenError(f"Failed to connect to {self.port}")

        logger.info("Modbus client connected")

    def close(self):
        if self.client is not None:
            self.client.close()

    async def read_registers(
        self,
        address: int,
        function_code: int,
        start: int,
        count: int
    ) -> bytes:
        """Read count registers and return them as big-endian bytes"""
        if function_code == READ_HOLDING_REGISTERS:
            method = self.client.read_holding_registers
        elif function_code == READ_INPUT_REGISTERS:
            method = self.client.read_input_registers
        else:
            raise ConfigurationError(
                f"Unknown function code {function_code} - cannot query device."
            )

        try:
            response = await method(start, count=count, device_id=address)
        except ModbusIOException as e:
            raise TransportError(
                ErrorKind.TIMEOUT, address, function_code, str(e)
            ) from e
        except ModbusException as e:
            raise TransportError(
                ErrorKind.LINK_FAULT, address, function_code, str(e)
            ) from e

        if response.isError():
            raise TransportError(
                ErrorKind.LINK_FAULT,
                address,
                function_code,
                f"Exception code {response.exception_code}"
            )

        if len(response.registers) != count:
            raise TransportError(
                ErrorKind.LINK_FAULT,
                address,
                function_code,
                f"Expected {count} registers, got {len(response.registers)}"
            )

        return struct.pack(f">{count}H", *response.registers)
