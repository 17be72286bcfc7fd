"""Janitza B23 meters. Float32 values in holding registers."""
from rtu_poller.constants import READ_HOLDING_REGISTERS
from rtu_poller.modbus.decoder import Decoder
from rtu_poller.producers.producer import Producer


class JanitzaProducer(Producer):
    METER_TYPE = "JANITZA"
    FUNC_CODE = READ_HOLDING_REGISTERS
    PROBE = "VolLocPhsA"
    REGISTERS = {
        "VolLocPhsA": (0x4A38, Decoder.raw32()),
        "VolLocPhsB": (0x4A3A, Decoder.raw32()),
        "VolLocPhsC": (0x4A3C, Decoder.raw32()),
        "AmpLocPhsA": (0x4A44, Decoder.raw32()),
        "AmpLocPhsB": (0x4A46, Decoder.raw32()),
        "AmpLocPhsC": (0x4A48, Decoder.raw32()),
        "WLocPhsA": (0x4A4C, Decoder.raw32()),
        "WLocPhsB": (0x4A4E, Decoder.raw32()),
        "WLocPhsC": (0x4A50, Decoder.raw32()),
        "AngLocPhsA": (0x4A64, Decoder.raw32()),
        "AngLocPhsB": (0x4A66, Decoder.raw32()),
        "AngLocPhsC": (0x4A68, Decoder.raw32()),
        "Freq": (0x4A36, Decoder.raw32()),
        "TotkWhImport": (0x4A76, Decoder.raw32()),
        "TotkWhExport": (0x4A78, Decoder.raw32()),
    }


PRODUCER = JanitzaProducer
