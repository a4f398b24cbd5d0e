from __future__ import annotations

import io
import socket
import sys
import threading
from typing import IO, List, Protocol, Union


class Transport(Protocol):
    """Anything that can write a packet and be closed."""

    def write(self, data: bytes) -> int:
        ...

    def close(self) -> None:
        ...


class UDPTransport:
    """Connected UDP socket. One write is one datagram."""

    def __init__(self, host: str = "127.0.0.1", port: int = 8125):
        self.addr = (host, int(port))
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            self._sock.connect(self.addr)
        except OSError:
            self._sock.close()
            raise

    def write(self, data: bytes) -> int:
        return self._sock.send(data)

    def close(self) -> None:
        self._sock.close()


class MemoryTransport:
    """Keeps every written packet in memory. Used by tests."""

    def __init__(self):
        self.packets: List[bytes] = []
        self.closed = False
        self.close_calls = 0
        self._lock = threading.Lock()

    def write(self, data: bytes) -> int:
        if self.closed:
            raise ValueError("write to closed MemoryTransport")
        with self._lock:
            self.packets.append(bytes(data))
        return len(data)

    def close(self) -> None:
        self.close_calls += 1
        self.closed = True

    def getvalue(self) -> bytes:
        with self._lock:
            return b"".join(self.packets)


class StreamTransport:
    """Writes packets to a file-like stream, e.g. ``sys.stdout``.

    Text streams get the packet decoded as UTF-8. The standard streams are
    flushed but never closed.
    """

    def __init__(self, stream: Union[IO[bytes], IO[str], None] = None):
        self.stream = stream if stream is not None else sys.stdout

    def write(self, data: bytes) -> int:
        if isinstance(self.stream, io.TextIOBase):
            self.stream.write(data.decode("utf-8"))
        else:
            self.stream.write(data)  # type: ignore[arg-type]
        self.stream.flush()
        return len(data)

    def close(self) -> None:
        if self.stream in (sys.stdout, sys.stderr):
            self.stream.flush()
            return
        self.stream.close()
