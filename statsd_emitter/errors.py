from __future__ import annotations

from typing import Optional


class StatsdError(Exception):
    """Base class for errors raised by the emitter."""


class ClosedError(StatsdError):
    def __init__(self, message: str = "statsd client is closed"):
        super().__init__(message)


class TransportWriteError(StatsdError):
    """The transport failed to write or close.

    The original exception is kept on ``original`` and chained as ``__cause__``.
    """

    def __init__(self, message: str, original: Optional[BaseException] = None):
        super().__init__(message)
        self.original = original
