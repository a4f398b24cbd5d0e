from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .buffer import DEFAULT_MAX_PACKET_SIZE
from .client import Client
from .transport import UDPTransport


def load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a mapping/dict. Got: {type(data)}")
    return data


@dataclass(frozen=True)
class StatsdCfg:
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 8125
    prefix: str = ""
    max_packet_size: int = DEFAULT_MAX_PACKET_SIZE
    flush_interval_s: Optional[float] = None


def parse_config(raw: Dict[str, Any]) -> StatsdCfg:
    sd_raw = raw.get("statsd") or {}
    interval = sd_raw.get("flush_interval_s")
    return StatsdCfg(
        enabled=bool(sd_raw.get("enabled", False)),
        host=str(sd_raw.get("host", "127.0.0.1")),
        port=int(sd_raw.get("port", 8125)),
        prefix=str(sd_raw.get("prefix") or ""),
        max_packet_size=int(sd_raw.get("max_packet_size", DEFAULT_MAX_PACKET_SIZE)),
        # 0 or missing means "flush manually"
        flush_interval_s=float(interval) if interval else None,
    )


def maybe_create_client(cfg: StatsdCfg) -> Optional[Client]:
    if not cfg.enabled:
        return None
    return Client(
        UDPTransport(cfg.host, cfg.port),
        prefix=cfg.prefix,
        max_packet_size=cfg.max_packet_size,
        flush_interval=cfg.flush_interval_s,
    )
