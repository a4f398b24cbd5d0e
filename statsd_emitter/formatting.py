from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from typing import Union

Number = Union[int, float]
Duration = Union[timedelta, int, float]


def format_int(n: int) -> str:
    return str(int(n))


def format_uint(n: int) -> str:
    if n < 0:
        raise ValueError(f"unsigned value must be >= 0, got {n}")
    return str(int(n))


def format_float(x: float) -> str:
    """Shortest positional form of a float; never exponent notation."""

    x = float(x)
    if x.is_integer():
        return str(int(x))
    return format(Decimal(repr(x)), "f")


def duration_ms(d: Duration) -> int:
    seconds = d.total_seconds() if isinstance(d, timedelta) else float(d)
    return int(round(seconds * 1000.0))


def format_duration(d: Duration) -> str:
    # Timings are whole milliseconds on the wire.
    return str(duration_ms(d))


def format_value(v: Union[Duration, str]) -> str:
    if isinstance(v, timedelta):
        return format_duration(v)
    if isinstance(v, bool):
        return format_int(int(v))
    if isinstance(v, int):
        return format_int(v)
    if isinstance(v, float):
        return format_float(v)
    return str(v)
