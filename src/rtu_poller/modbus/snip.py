from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from rtu_poller.modbus.decoder import Decoder


class ControlType(Enum):
    OK = "ok"
    ERROR = "error"


@dataclass
class QuerySnip:
    """
    A single register read, from its creation by a producer to its delivery.
    The value and read_timestamp are only set once the read succeeded.
    """
    device_id: int
    func_code: int
    op_code: int        # First register to read
    read_len: int       # Number of registers
    decoder: Decoder
    iec61850: str | None = None
    value: float | None = None
    read_timestamp: datetime | None = None

    @property
    def key(self) -> tuple[int, int, int]:
        return (self.device_id, self.op_code, self.func_code)

    def __repr__(self) -> str:
        return (
            f"<QuerySnip dev={self.device_id} fc={self.func_code} "
            f"op=0x{self.op_code:04X} len={self.read_len} {self.decoder!r}>"
        )


@dataclass(frozen=True)
class ControlSnip:
    type: ControlType
    message: str
    device_id: int

    @classmethod
    def ok(cls, device_id: int) -> ControlSnip:
        return cls(ControlType.OK, "OK", device_id)

    @classmethod
    def error(cls, device_id: int) -> ControlSnip:
        return cls(
            ControlType.ERROR,
            f"Device {device_id} did not respond.",
            device_id
        )
