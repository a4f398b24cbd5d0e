from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Union

from .buffer import DEFAULT_MAX_PACKET_SIZE, PacketBuffer, check_packet_size
from .errors import ClosedError, TransportWriteError
from .formatting import Duration, Number, format_duration, format_float, format_int, format_value
from .lines import COUNT, GAUGE, TIME, UNIQUE, build_line
from .transport import Transport

logger = logging.getLogger(__name__)

NameFormatter = Callable[[str], str]


def _identity(name: str) -> str:
    return name


class _Flusher:
    """Background thread calling ``flush`` every ``interval_s`` seconds."""

    def __init__(self, client: "Client", interval_s: float):
        self.client = client
        self.interval_s = float(interval_s)
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="statsd-flusher", daemon=True)

    def start(self) -> None:
        logger.debug("starting statsd flusher every %.3fs", self.interval_s)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not threading.current_thread():
            self._thread.join()
        logger.debug("statsd flusher stopped")

    def _run(self) -> None:
        while not self._stop.wait(self.interval_s):
            try:
                self.client._timed_flush()
            except TransportWriteError:
                # Nobody to report to from here; metrics are best-effort.
                logger.exception("periodic statsd flush failed")


class Client:
    """StatsD client batching metric lines into packets on a transport.

    The client owns the transport: closing the client closes it. All public
    methods may be called from any thread.
    """

    def __init__(
        self,
        transport: Transport,
        prefix: str = "",
        max_packet_size: int = DEFAULT_MAX_PACKET_SIZE,
        formatter: Optional[NameFormatter] = None,
        flush_interval: Optional[float] = None,
    ):
        self._prefix = prefix
        self._transport = transport
        self._buffer = PacketBuffer(transport, max_packet_size)
        self._formatter: NameFormatter = _identity
        self._lock = threading.Lock()
        self._closed = False
        self._closing = False
        self._flusher: Optional[_Flusher] = None
        if formatter is not None:
            self.set_formatter(formatter)
        if flush_interval:
            self.flush_every(flush_interval)

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def max_packet_size(self) -> int:
        return self._buffer.max_packet_size

    @property
    def flush_interval(self) -> Optional[float]:
        flusher = self._flusher
        return flusher.interval_s if flusher else None

    # Configuration

    def set_max_packet_size(self, n: int) -> None:
        n = check_packet_size(n)
        with self._lock:
            self._buffer.max_packet_size = n

    def set_formatter(self, fn: Optional[NameFormatter]) -> None:
        if fn is None:
            fn = _identity
        if not callable(fn):
            raise TypeError("formatter must be callable")
        self._formatter = fn

    # Metrics

    def count(self, name: str, delta: int, rate: float = 1.0) -> None:
        self.write_metric(name, format_int(delta), COUNT, rate)

    def increment(self, name: str, rate: float = 1.0) -> None:
        self.count(name, 1, rate)

    def gauge(self, name: str, value: Number, rate: float = 1.0) -> None:
        value_s = format_int(value) if isinstance(value, int) else format_float(value)
        if value >= 0:
            self.write_metric(name, value_s, GAUGE, rate)
            return
        # A signed gauge value is a delta on the server; reset to 0 first.
        full_name = self._prefix + self._formatter(name)
        self._append(
            build_line(full_name, "0", GAUGE, rate) + "\n" + build_line(full_name, value_s, GAUGE, rate) + "\n"
        )

    def unique(self, name: str, value: Union[int, str], rate: float = 1.0) -> None:
        self.write_metric(name, format_value(value), UNIQUE, rate)

    def time(self, name: str, duration: Duration, rate: float = 1.0) -> None:
        """Emit a timing; ``duration`` is a timedelta or seconds, sent as ms."""

        self.write_metric(name, format_duration(duration), TIME, rate)

    def record(self, name: str, rate: float = 1.0) -> Callable[[], None]:
        """Start a timer now; the returned function emits the elapsed time.

        Typical use brackets a block of work::

            stop = client.record("db.query")
            try:
                run_query()
            finally:
                stop()
        """

        start = time.monotonic()

        def stop() -> None:
            elapsed = max(0.0, time.monotonic() - start)
            self.time(name, elapsed, rate)

        return stop

    @contextmanager
    def timed(self, name: str, rate: float = 1.0) -> Iterator[None]:
        stop = self.record(name, rate)
        try:
            yield
        finally:
            stop()

    def write_metric(self, name: str, value: str, type_tag: str, rate: float = 1.0) -> None:
        """Low-level path used by every typed helper.

        ``type_tag`` may be any string, which allows metric types the client
        doesn't know about.
        """

        line = build_line(self._prefix + self._formatter(name), value, type_tag, rate)
        self._append(line + "\n")

    def _append(self, lines: str) -> None:
        data = lines.encode("utf-8")
        with self._lock:
            if self._closed:
                raise ClosedError()
            self._buffer.append(data)

    # Flushing

    def flush(self, n: int = 1) -> None:
        """Flush the buffer ``n`` times (once if ``n <= 0``)."""

        for _ in range(max(1, n)):
            with self._lock:
                if self._closed:
                    raise ClosedError()
                self._buffer.flush()

    def flush_every(self, interval: float) -> None:
        """Flush periodically in the background, replacing any earlier interval.

        A non-positive interval stops periodic flushing.
        """

        new = _Flusher(self, interval) if interval and interval > 0 else None
        with self._lock:
            if self._closed or self._closing:
                raise ClosedError()
            old, self._flusher = self._flusher, new
            if new is not None:
                new.start()
        if old is not None:
            old.stop()

    def _timed_flush(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._buffer.flush()

    # Lifecycle

    def is_closed(self) -> bool:
        with self._lock:
            return self._closed

    def close(self) -> None:
        """Stop the flusher, flush what is left and close the transport.

        Calling close again is a no-op.
        """

        with self._lock:
            if self._closed or self._closing:
                return
            self._closing = True
            flusher, self._flusher = self._flusher, None
        # Joined outside the lock: a tick in progress needs it to finish.
        if flusher is not None:
            flusher.stop()

        with self._lock:
            try:
                self._buffer.flush()
            finally:
                self._closed = True
                try:
                    self._transport.close()
                except Exception as e:  # noqa: BLE001
                    logger.debug("closing statsd transport failed: %r", e)
                    raise TransportWriteError(f"statsd close failed: {e!r}", original=e) from e


def new_client(transport: Transport, prefix: str = "", **kwargs) -> Client:
    return Client(transport, prefix, **kwargs)
