"""DZG DVH4013 meters.

Values are unsigned integers in holding registers, scaled by a power of ten.
"""
from rtu_poller.constants import READ_HOLDING_REGISTERS
from rtu_poller.modbus.decoder import Decoder
from rtu_poller.producers.producer import Producer


class DZGProducer(Producer):
    METER_TYPE = "DZG"
    FUNC_CODE = READ_HOLDING_REGISTERS
    PROBE = "VolLocPhsA"
    REGISTERS = {
        "VolLocPhsA": (0x0000, Decoder.scaled32(100)),
        "VolLocPhsB": (0x0002, Decoder.scaled32(100)),
        "VolLocPhsC": (0x0004, Decoder.scaled32(100)),
        "AmpLocPhsA": (0x000C, Decoder.scaled32(1000)),
        "AmpLocPhsB": (0x000E, Decoder.scaled32(1000)),
        "AmpLocPhsC": (0x0010, Decoder.scaled32(1000)),
        "WLocPhsA": (0x001E, Decoder.scaled32(100)),
        "WLocPhsB": (0x0020, Decoder.scaled32(100)),
        "WLocPhsC": (0x0022, Decoder.scaled32(100)),
        "Freq": (0x0014, Decoder.scaled16(100)),
        "TotkWhImport": (0x4000, Decoder.scaled32(1000)),
        "TotkWhExport": (0x4020, Decoder.scaled32(1000)),
    }


PRODUCER = DZGProducer
