#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-30 21:14:52 krylon>
#
# /data/code/python/tsddns/config.py
# created on 19. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.config

(c) 2026 Benjamin Walkenhorst

Load the configuration from a TOML file and the environment.

Settings are looked up in this order, later sources win:
built-in defaults, the configuration file, environment variables
(TSDDNS_SECTION_KEY, e.g. TSDDNS_BIND_SERVER), and finally whatever
the caller passes in as overrides (i.e. command line flags).
"""

import os
import re
import tomllib
from dataclasses import dataclass, field
from ipaddress import ip_network
from pathlib import Path
from typing import Any, Final, Mapping, Optional, Union

import dns.exception
import dns.name

from tsddns import common
from tsddns.common import ErrorKind, TsddnsError
from tsddns.model import (Credential, Family, ReverseConfig,
                          ReverseZoneConfig, legal_boundaries)
from tsddns.transport import algorithms

env_prefix: Final[str] = "TSDDNS"


class ConfigError(TsddnsError):
    """ConfigError indicates a missing or invalid setting."""

    kind = ErrorKind.Configuration


defaults: Final[dict[str, Any]] = {
    "tailscale": {
        "api_key": "",
        "client_id": "",
        "client_secret": "",
        "tailnet": "",
        "poll_interval": "30s",
    },
    "bind": {
        "server": "",
        "port": 53,
        "zone": "",
        "key_name": "",
        "key_secret": "",
        "algorithm": "hmac-sha256",
        "ttl": "300s",
        "update_interval": "60s",
        "timeout": "10s",
        "tcp": False,
        "ptr": {
            "ipv4": {
                "enabled": False,
                "zone": "",
                "subnet": "100.64.0.0/10",
                "subnet_size": 16,
            },
            "ipv6": {
                "enabled": False,
                "zone": "",
                "subnet": "fd7a:115c:a1e0::/48",
                "subnet_size": 64,
            },
        },
    },
    "general": {
        "log_level": "info",
        "dry_run": False,
    },
}

duration_pat: Final[re.Pattern] = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$", re.I)
duration_units: Final[dict[str, float]] = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 3600,
}


def parse_duration(val: Union[str, int, float]) -> float:
    """Parse a duration like 30s, 5m or 1h into seconds. Plain numbers are seconds."""
    if isinstance(val, bool):
        raise ConfigError(f"Invalid duration: {val!r}", value=val)
    if isinstance(val, (int, float)):
        return float(val)
    m = duration_pat.match(str(val))
    if m is None:
        raise ConfigError(f"Invalid duration: {val!r}", value=val)
    unit: Final[str] = (m[2] or "s").lower()
    return float(m[1]) * duration_units[unit]


def parse_bool(val: Union[str, bool, int]) -> bool:
    """Interpret <val> as a boolean."""
    if isinstance(val, bool):
        return val
    if isinstance(val, int):
        return val != 0
    match val.strip().lower():
        case "1" | "true" | "yes" | "on":
            return True
        case "0" | "false" | "no" | "off" | "":
            return False
    raise ConfigError(f"Invalid boolean value: {val!r}", value=val)


def parse_int(val: Union[str, int], key: str) -> int:
    """Interpret <val> as an integer."""
    if isinstance(val, bool):
        raise ConfigError(f"{key} must be a number, not {val!r}", key=key)
    try:
        return int(val)
    except (TypeError, ValueError) as err:
        raise ConfigError(f"{key} must be a number, not {val!r}", key=key) from err


def check_name(val: str, key: str) -> str:
    """Check that <val> is a well-formed domain name (or IP address) and return it."""
    try:
        dns.name.from_text(val)
    except dns.exception.DNSException as derr:
        raise ConfigError(f"{key} {val!r} is not a valid domain name: {derr}",
                          key=key) from derr
    return val


def merge(base: dict[str, Any], other: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of <base> with the values from <other> merged in recursively."""
    res: dict[str, Any] = dict(base)
    for key, val in other.items():
        if isinstance(val, Mapping) and isinstance(res.get(key), dict):
            res[key] = merge(res[key], val)
        else:
            res[key] = val
    return res


def env_overrides(tree: Mapping[str, Any],
                  environ: Mapping[str, str],
                  prefix: str = env_prefix) -> dict[str, Any]:
    """Collect the environment variables matching the keys in <tree>."""
    res: dict[str, Any] = {}
    for key, val in tree.items():
        var: str = f"{prefix}_{key.upper()}"
        if isinstance(val, Mapping):
            sub = env_overrides(val, environ, var)
            if sub:
                res[key] = sub
        elif var in environ:
            res[key] = environ[var]
    return res


@dataclass(kw_only=True, slots=True, frozen=True)
class TailscaleConfig:
    """Settings for talking to the Tailscale API."""

    tailnet: str
    api_key: str = field(default="", repr=False)
    client_id: str = ""
    client_secret: str = field(default="", repr=False)
    poll_interval: float = 30.0


@dataclass(kw_only=True, slots=True, frozen=True)
class BindConfig:
    """Settings for talking to the DNS server."""

    server: str
    zone: str
    cred: Credential
    port: int = 53
    ttl: int = 300
    update_interval: float = 60.0
    timeout: float = 10.0
    tcp: bool = False
    reverse: ReverseConfig = field(default_factory=ReverseConfig)


@dataclass(kw_only=True, slots=True, frozen=True)
class Config:
    """Config is the complete, validated configuration of the application."""

    tailscale: TailscaleConfig
    bind: BindConfig
    log_level: str = "info"
    dry_run: bool = False


def _reverse_zone(fam: Family, raw: Mapping[str, Any]) -> ReverseZoneConfig:
    label: Final[str] = f"IPv{fam.value}"
    enabled: Final[bool] = parse_bool(raw.get("enabled", False))
    if not enabled:
        return ReverseZoneConfig(family=fam)

    zone: Final[str] = str(raw.get("zone", "")).strip()
    if zone == "":
        raise ConfigError(f"{label} PTR zone must be provided when {label} PTR records are enabled",
                          family=fam)
    check_name(zone, f"{label} PTR zone")

    subnet_str: Final[str] = str(raw.get("subnet", "")).strip()
    if subnet_str == "":
        raise ConfigError(f"{label} subnet must be provided when {label} PTR records are enabled",
                          family=fam)
    try:
        subnet = ip_network(subnet_str, strict=False)
    except ValueError as verr:
        raise ConfigError(f"Invalid {label} subnet {subnet_str}: {verr}",
                          family=fam,
                          subnet=subnet_str) from verr
    if subnet.version != fam.value:
        raise ConfigError(f"Subnet {subnet_str} is not an {label} network",
                          family=fam,
                          subnet=subnet_str)

    size: Final[int] = parse_int(raw.get("subnet_size", 0), f"{label} subnet size")
    if size not in legal_boundaries[fam]:
        sizes: Final[str] = ", ".join(str(x) for x in legal_boundaries[fam])
        raise ConfigError(f"{label} subnet size must be one of {sizes}",
                          family=fam,
                          boundary=size)

    return ReverseZoneConfig(family=fam,
                             enabled=True,
                             subnet=subnet,
                             boundary=size,
                             zone=zone.rstrip("."))


def from_dict(raw: Mapping[str, Any]) -> Config:
    """Build and validate a Config from a (possibly partial) settings tree."""
    tree: Final[dict[str, Any]] = merge(defaults, raw)
    ts: Final[dict[str, Any]] = tree["tailscale"]
    bd: Final[dict[str, Any]] = tree["bind"]
    gen: Final[dict[str, Any]] = tree["general"]

    if ts["api_key"] == "" and (ts["client_id"] == "" or ts["client_secret"] == ""):
        raise ConfigError("Either a tailscale api_key or client_id and client_secret must be provided")
    if ts["tailnet"] == "":
        raise ConfigError("tailscale tailnet must be provided")

    for key in ("server", "zone", "key_name", "key_secret"):
        if str(bd[key]).strip() == "":
            raise ConfigError(f"bind {key} must be provided", key=key)

    for key in ("server", "zone", "key_name"):
        check_name(str(bd[key]).strip(), f"bind {key}")

    algorithm: Final[str] = str(bd["algorithm"]).strip().lower()
    if algorithm not in algorithms:
        raise ConfigError(f"Unsupported TSIG algorithm: {algorithm}",
                          algorithm=algorithm)

    port: Final[int] = parse_int(bd["port"], "bind port")
    if not 0 < port < 65536:
        raise ConfigError(f"bind port must be between 1 and 65535, not {port}", port=port)

    ttl: Final[float] = parse_duration(bd["ttl"])
    if ttl < 0:
        raise ConfigError("bind ttl must not be negative", ttl=ttl)

    intervals: dict[str, float] = {}
    for key, val in (("poll_interval", ts["poll_interval"]),
                     ("update_interval", bd["update_interval"]),
                     ("timeout", bd["timeout"])):
        intervals[key] = parse_duration(val)
        if intervals[key] <= 0:
            raise ConfigError(f"{key} must be positive", key=key)

    log_level: Final[str] = str(gen["log_level"]).strip().lower()
    if log_level not in common.log_levels:
        raise ConfigError(f"Unknown log level {log_level}", log_level=log_level)

    ptr: Final[dict[str, Any]] = bd["ptr"]
    reverse: Final[ReverseConfig] = ReverseConfig(v4=_reverse_zone(Family.V4, ptr["ipv4"]),
                                                  v6=_reverse_zone(Family.V6, ptr["ipv6"]))

    return Config(
        tailscale=TailscaleConfig(
            tailnet=str(ts["tailnet"]),
            api_key=str(ts["api_key"]),
            client_id=str(ts["client_id"]),
            client_secret=str(ts["client_secret"]),
            poll_interval=intervals["poll_interval"],
        ),
        bind=BindConfig(
            server=str(bd["server"]).strip(),
            zone=str(bd["zone"]).strip().rstrip("."),
            cred=Credential(name=str(bd["key_name"]).strip(),
                            secret=str(bd["key_secret"]).strip(),
                            algorithm=algorithm),
            port=port,
            ttl=int(ttl),
            update_interval=intervals["update_interval"],
            timeout=intervals["timeout"],
            tcp=parse_bool(bd["tcp"]),
            reverse=reverse,
        ),
        log_level=log_level,
        dry_run=parse_bool(gen["dry_run"]),
    )


def load(path: Optional[Union[str, Path]] = None,
         environ: Optional[Mapping[str, str]] = None,
         overrides: Optional[Mapping[str, Any]] = None) -> Config:
    """Load the configuration.

    If <path> is None, the default configuration file is used if it exists.
    A configuration file that was asked for explicitly must exist.
    """
    raw: dict[str, Any] = {}

    if path is None:
        cfg_path: Path = common.path.config
        required: bool = False
    else:
        cfg_path = Path(path)
        required = True

    if cfg_path.is_file():
        try:
            with open(cfg_path, "rb") as fh:
                raw = tomllib.load(fh)
        except (OSError, tomllib.TOMLDecodeError) as err:
            raise ConfigError(f"Cannot read configuration file {cfg_path}: {err}",
                              path=str(cfg_path)) from err
    elif required:
        raise ConfigError(f"Configuration file {cfg_path} does not exist",
                          path=str(cfg_path))

    if environ is None:
        environ = os.environ
    raw = merge(raw, env_overrides(defaults, environ))

    if overrides is not None:
        raw = merge(raw, overrides)

    return from_dict(raw)


# Local Variables: #
# python-indent: 4 #
# End: #
