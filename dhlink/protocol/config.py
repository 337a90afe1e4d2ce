# MIT License © 2025 Motohiro Suzuki
"""
protocol/config.py

Link configuration.

Sources, lowest to highest priority:
  1) defaults below
  2) YAML file (yaml.safe_load), e.g.

       role: responder
       level: secured
       params: {p: 2089, g: 2}
       send_interval_s: 3.0

  3) env DHLINK_ROLE / DHLINK_LEVEL / DHLINK_RNG_SEED / DHLINK_AUDIT_LOG /
     DHLINK_PORT
  4) explicit keyword overrides passed to load_config()
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from dhlink.protocol.errors import ConfigError
from dhlink.protocol.types import ACTIVE_LEVELS, DHParameters, Role, SecurityLevel

DEFAULT_PARAMS = DHParameters(p=2089, g=2)

_ENV = {
    "role": "DHLINK_ROLE",
    "level": "DHLINK_LEVEL",
    "rng_seed": "DHLINK_RNG_SEED",
    "audit_log_path": "DHLINK_AUDIT_LOG",
    "port": "DHLINK_PORT",
}


def _role(v: Any) -> Role:
    if isinstance(v, Role):
        return v
    try:
        return Role(str(v).strip().lower())
    except ValueError as e:
        raise ConfigError(f"unknown role: {v!r}") from e


def _level(v: Any) -> SecurityLevel:
    if isinstance(v, SecurityLevel):
        lvl = v
    else:
        try:
            lvl = SecurityLevel(str(v).strip().lower())
        except ValueError as e:
            raise ConfigError(f"unknown security level: {v!r}") from e
    if lvl not in ACTIVE_LEVELS:
        raise ConfigError(f"security level {lvl.value!r} cannot be selected")
    return lvl


def _params(v: Any) -> DHParameters:
    if isinstance(v, DHParameters):
        return v
    if not isinstance(v, Mapping) or "p" not in v or "g" not in v:
        raise ConfigError("params must be a mapping with p and g")
    try:
        p, g = int(v["p"]), int(v["g"])
    except (TypeError, ValueError) as e:
        raise ConfigError("params p/g must be integers") from e
    if p < 5 or g < 2:
        raise ConfigError("params out of range (p >= 5, g >= 2)")
    return DHParameters(p=p, g=g)


class LinkConfig:
    def __init__(
        self,
        *,
        role: Role | str,
        params: DHParameters | Mapping[str, Any] = DEFAULT_PARAMS,
        level: SecurityLevel | str = SecurityLevel.CLEARTEXT,
        send_interval_s: float = 3.0,
        tick_s: float = 0.05,
        host: str = "127.0.0.1",
        port: int = 9100,
        rng_seed: int | None = None,
        audit_log_path: str | None = None,
        **_ignored: Any,
    ) -> None:
        self.role = _role(role)
        self.params = _params(params)
        self.level = _level(level)

        try:
            self.send_interval_s = float(send_interval_s)
            self.tick_s = float(tick_s)
            self.port = int(port)
            self.rng_seed = None if rng_seed is None else int(rng_seed)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid numeric setting: {e}") from e

        if self.send_interval_s <= 0 or self.tick_s <= 0:
            raise ConfigError("send_interval_s and tick_s must be > 0")

        self.host = str(host)
        self.audit_log_path = audit_log_path.strip() if isinstance(audit_log_path, str) and audit_log_path.strip() else None

    def __repr__(self) -> str:
        return (
            f"LinkConfig(role={self.role.value}, level={self.level.value}, "
            f"p={self.params.p}, g={self.params.g}, send_interval_s={self.send_interval_s}, "
            f"host={self.host}, port={self.port})"
        )


def _read_yaml(path: str | Path) -> dict:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"config file not found: {p}")
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {p}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {p}")
    return data


def _read_env() -> dict:
    out: dict = {}
    for key, env in _ENV.items():
        v = (os.environ.get(env, "") or "").strip()
        if v:
            out[key] = v
    return out


def load_config(path: str | Path | None = None, **overrides: Any) -> LinkConfig:
    merged: dict = {}
    if path is not None:
        merged.update(_read_yaml(path))
    merged.update(_read_env())
    merged.update({k: v for k, v in overrides.items() if v is not None})

    if "role" not in merged:
        raise ConfigError("role is required (config file, DHLINK_ROLE or --role)")
    return LinkConfig(**merged)
