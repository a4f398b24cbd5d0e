from __future__ import annotations

from .errors import TransportWriteError
from .transport import Transport

DEFAULT_MAX_PACKET_SIZE = 512


class PacketBuffer:
    """Batches newline-terminated metric lines into size-bounded packets.

    Not thread-safe on its own; the owning client serializes every call
    (and the closed check) under its lock.
    """

    def __init__(self, transport: Transport, max_packet_size: int = DEFAULT_MAX_PACKET_SIZE):
        self.transport = transport
        self.max_packet_size = check_packet_size(max_packet_size)
        self._pending = bytearray()

    def __len__(self) -> int:
        return len(self._pending)

    def pending(self) -> bytes:
        return bytes(self._pending)

    def append(self, line: bytes) -> None:
        if self._pending and len(self._pending) + len(line) > self.max_packet_size:
            try:
                self.flush()
            finally:
                # Only the earlier packet is dropped on a failed write.
                self._pending += line
        else:
            self._pending += line
        # An oversized line goes out alone, untruncated.
        if len(self._pending) > self.max_packet_size:
            self.flush()

    def flush(self) -> None:
        if not self._pending:
            return
        packet = bytes(self._pending)
        # Cleared before the write: a failed packet is dropped, not retried.
        self._pending.clear()
        try:
            self.transport.write(packet)
        except Exception as e:  # noqa: BLE001
            raise TransportWriteError(f"statsd write failed: {e!r}", original=e) from e


def check_packet_size(n: int) -> int:
    n = int(n)
    if n <= 0:
        raise ValueError(f"max_packet_size must be > 0, got {n}")
    return n
