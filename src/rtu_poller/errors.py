from enum import Enum, auto


class ErrorKind(Enum):
    TIMEOUT = auto()     # The device did not answer in time
    LINK_FAULT = auto()  # Anything else going wrong on the line


class PollerError(Exception):
    """Base class for all the errors raised by rtu_poller"""


class ConfigurationError(PollerError):
    """
    A defect in the deployment or in the construction of a request.
    These are never retried - the process is expected to stop.
    """


class LinkOpenError(ConfigurationError):
    """The serial link could not be opened"""


class TransportError(PollerError):
    """A single query failed on the bus. Recoverable by retrying."""
    def __init__(
        self,
        kind: ErrorKind,
        device_id: int,
        function_code: int,
        message: str = ""
    ):
        super().__init__(message or kind.name.lower())
        self.kind = kind
        self.device_id = device_id
        self.function_code = function_code
