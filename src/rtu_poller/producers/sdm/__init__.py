"""Eastron SDM630 and compatible meters.

All the values are float32, in input registers.
"""
from rtu_poller.constants import READ_INPUT_REGISTERS
from rtu_poller.modbus.decoder import Decoder
from rtu_poller.producers.producer import Producer


class SDMProducer(Producer):
    METER_TYPE = "SDM"
    FUNC_CODE = READ_INPUT_REGISTERS
    PROBE = "VolLocPhsA"
    REGISTERS = {
        "VolLocPhsA": (0x0000, Decoder.raw32()),
        "VolLocPhsB": (0x0002, Decoder.raw32()),
        "VolLocPhsC": (0x0004, Decoder.raw32()),
        "AmpLocPhsA": (0x0006, Decoder.raw32()),
        "AmpLocPhsB": (0x0008, Decoder.raw32()),
        "AmpLocPhsC": (0x000A, Decoder.raw32()),
        "WLocPhsA": (0x000C, Decoder.raw32()),
        "WLocPhsB": (0x000E, Decoder.raw32()),
        "WLocPhsC": (0x0010, Decoder.raw32()),
        "AngLocPhsA": (0x001E, Decoder.raw32()),
        "AngLocPhsB": (0x0020, Decoder.raw32()),
        "AngLocPhsC": (0x0022, Decoder.raw32()),
        "Freq": (0x0046, Decoder.raw32()),
        "TotkWhImport": (0x0048, Decoder.raw32()),
        "TotkWhExport": (0x004A, Decoder.raw32()),
    }


PRODUCER = SDMProducer
