import threading
import time


class Status:
    """
    Counters shared by the executor and the polling agent.
    Read by monitoring - nothing depends on these values for correctness.
    """
    def __init__(self):
        self._lock = threading.Lock()
        self._requests = 0
        self._reconnects = 0
        self.started = time.time()

    @property
    def requests(self) -> int:
        with self._lock:
            return self._requests

    @property
    def reconnects(self) -> int:
        with self._lock:
            return self._reconnects

    @property
    def uptime(self) -> float:
        return time.time() - self.started

    def increase_request_counter(self):
        with self._lock:
            self._requests += 1

    def increase_reconnect_counter(self):
        with self._lock:
            self._reconnects += 1

    def as_dict(self) -> dict:
        with self._lock:
            return {
                "requests": self._requests,
                "reconnects": self._reconnects,
                "uptime": time.time() - self.started,
            }
