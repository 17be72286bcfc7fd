from __future__ import annotations

from rtu_poller.modbus.decoder import Decoder
from rtu_poller.modbus.snip import QuerySnip


class Producer:
    """
    Describes how to probe for, and read, a meter family.

    Subclasses set:
    - METER_TYPE: the label reported by the scanner
    - FUNC_CODE: the function code used for all the reads
    - REGISTERS: IEC 61850 label -> (first register, decoder)
    - PROBE: the label read to detect the family
    """
    METER_TYPE: str = ""
    FUNC_CODE: int = 0
    REGISTERS: dict[str, tuple[int, Decoder]] = {}
    PROBE: str = ""

    @property
    def meter_type(self) -> str:
        return self.METER_TYPE

    def snip(self, device_id: int, label: str) -> QuerySnip:
        op_code, decoder = self.REGISTERS[label]

        return QuerySnip(
            device_id=device_id,
            func_code=self.FUNC_CODE,
            op_code=op_code,
            read_len=decoder.register_count,
            decoder=decoder,
            iec61850=label,
        )

    def probe(self, device_id: int) -> QuerySnip:
        return self.snip(device_id, self.PROBE)

    def produce(self, device_id: int) -> list[QuerySnip]:
        """One snip per known register, in register order"""
        labels = sorted(self.REGISTERS, key=lambda k: self.REGISTERS[k][0])

        return [self.snip(device_id, label) for label in labels]

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.METER_TYPE}>"
