"""Time-ordered string IDs for orders.

IDs are zero-padded to a fixed width so that lexical order on the VARCHAR
column equals creation order. Single-process generator.
"""

import threading
import time

_ID_WIDTH = 20


class OrderIdGenerator:
    """Monotonic ID generator.

    Layout (63 bits):
      - 41 bits: millisecond timestamp (since custom epoch)
      - 10 bits: node_id (0-1023)
      - 12 bits: sequence (0-4095 per millisecond)
    """

    _EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
    _NODE_BITS = 10
    _SEQUENCE_BITS = 12
    _MAX_SEQUENCE = (1 << _SEQUENCE_BITS) - 1

    def __init__(self, node_id: int = 0) -> None:
        if not (0 <= node_id < (1 << self._NODE_BITS)):
            raise ValueError(f"node_id must be 0-{(1 << self._NODE_BITS) - 1}")
        self._node_id = node_id
        self._sequence = 0
        self._last_ms = -1
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            now_ms = max(self._now_ms(), self._last_ms)
            if now_ms == self._last_ms:
                self._sequence = (self._sequence + 1) & self._MAX_SEQUENCE
                if self._sequence == 0:
                    # sequence exhausted for this millisecond; borrow the next one
                    now_ms += 1
            else:
                self._sequence = 0
            self._last_ms = now_ms

            value = (
                ((now_ms - self._EPOCH_MS) << (self._NODE_BITS + self._SEQUENCE_BITS))
                | (self._node_id << self._SEQUENCE_BITS)
                | self._sequence
            )
            return str(value).zfill(_ID_WIDTH)

    @staticmethod
    def _now_ms() -> int:
        return time.time_ns() // 1_000_000


_default_generator = OrderIdGenerator()


def generate_id() -> str:
    """Generate a new order ID with the module-level generator."""
    return _default_generator.next_id()
