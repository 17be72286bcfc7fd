from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum


# ---------------------------------------------------------------------------
# Raw decoders
# ---------------------------------------------------------------------------

def _check_length(b: bytes, size: int):
    if len(b) != size:
        raise ValueError(f"Expected {size} bytes, got {len(b)}")


def rtu16_to_float(b: bytes) -> float:
    """Unsigned 16 bit register"""
    _check_length(b, 2)
    return float(struct.unpack(">H", b)[0])


def rtu32_to_float(b: bytes) -> float:
    """Two registers holding an IEEE-754 single precision value"""
    _check_length(b, 4)
    return float(struct.unpack(">f", b)[0])


def rtu_scaled16_to_float(b: bytes, scalar: float) -> float:
    """Fixed-point value held in one unsigned register"""
    _check_length(b, 2)
    return struct.unpack(">H", b)[0] / scalar


def rtu_scaled32_to_float(b: bytes, scalar: float) -> float:
    """Fixed-point value held in two registers, as an unsigned integer"""
    _check_length(b, 4)
    return struct.unpack(">I", b)[0] / scalar


# ---------------------------------------------------------------------------
# Decode strategy attached to a request
# ---------------------------------------------------------------------------

class DecodeKind(Enum):
    RAW16 = "raw16"
    RAW32 = "raw32"
    SCALED16 = "scaled16"
    SCALED32 = "scaled32"


@dataclass(frozen=True)
class Decoder:
    kind: DecodeKind
    scalar: float = 1.0

    def __post_init__(self):
        if self.scalar == 0:
            raise ValueError("Scalar cannot be 0")

    @classmethod
    def raw16(cls) -> Decoder:
        return cls(DecodeKind.RAW16)

    @classmethod
    def raw32(cls) -> Decoder:
        return cls(DecodeKind.RAW32)

    @classmethod
    def scaled16(cls, scalar: float) -> Decoder:
        return cls(DecodeKind.SCALED16, scalar)

    @classmethod
    def scaled32(cls, scalar: float) -> Decoder:
        return cls(DecodeKind.SCALED32, scalar)

    @property
    def register_count(self) -> int:
        """Number of 16 bit registers the decoder consumes"""
        if self.kind in (DecodeKind.RAW16, DecodeKind.SCALED16):
            return 1

        return 2

    def decode(self, b: bytes) -> float:
        if self.kind == DecodeKind.RAW16:
            return rtu16_to_float(b)
        elif self.kind == DecodeKind.RAW32:
            return rtu32_to_float(b)
        elif self.kind == DecodeKind.SCALED16:
            return rtu_scaled16_to_float(b, self.scalar)

        return rtu_scaled32_to_float(b, self.scalar)

    def __repr__(self) -> str:
        if self.kind in (DecodeKind.SCALED16, DecodeKind.SCALED32):
            return f"<{self.kind.value}/{self.scalar:g}>"

        return f"<{self.kind.value}>"
