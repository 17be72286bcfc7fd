import logging

from rtu_poller.constants import READ_HOLDING_REGISTERS, READ_INPUT_REGISTERS
from rtu_poller.errors import ConfigurationError, TransportError
from rtu_poller.modbus.session import TransportSession
from rtu_poller.modbus.snip import QuerySnip
from rtu_poller.status import Status

logger = logging.getLogger(__name__)

FUNCTION_CODES = (READ_HOLDING_REGISTERS, READ_INPUT_REGISTERS)


class QueryExecutor:
    """Issues a single query on the session. Never retries."""
    def __init__(self, session: TransportSession, status: Status, verbose: bool = False):
        self.session = session
        self.status = status
        self.verbose = verbose

    async def query(self, snip: QuerySnip) -> bytes:
        """
        Read the registers described by the snip and return the raw bytes.
        Raises TransportError if the device does not reply properly, and
        ConfigurationError if the snip itself is malformed.
        """
        if snip.read_len <= 0:
            raise ConfigurationError(f"Invalid meter operation {snip!r}.")

        if snip.func_code not in FUNCTION_CODES:
            raise ConfigurationError(
                f"Unknown function code {snip.func_code} - cannot query device."
            )

        self.status.increase_request_counter()

        try:
            return await self.session.read_registers(
                snip.device_id, snip.func_code, snip.op_code, snip.read_len
            )
        except TransportError as e:
            if self.verbose:
                logger.info(
                    f"Device {snip.device_id}: failed to retrieve opcode "
                    f"0x{snip.op_code:x}, error was: {e}"
                )

            raise
