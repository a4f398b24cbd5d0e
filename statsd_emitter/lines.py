from __future__ import annotations

from typing import Optional

from .formatting import format_float

# Protocol type tags
COUNT = "c"
GAUGE = "g"
UNIQUE = "s"
TIME = "ms"


def format_rate(rate: float) -> str:
    return format_float(rate)


def build_line(prefixed_name: str, value: str, type_tag: str, rate: Optional[float] = None) -> str:
    """Build a single protocol line: ``<name>:<value>|<type>[|@<rate>]``.

    The rate suffix is only written for sampled metrics (rate < 1.0). Rates
    are not validated; the server-side sampler decides what to do with them.
    """

    line = f"{prefixed_name}:{value}|{type_tag}"
    if rate is not None and rate < 1.0:
        line += f"|@{format_rate(rate)}"
    return line
