#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-20 21:07:13 krylon>
#
# /data/code/python/tsddns/model.py
# created on 12. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.model

(c) 2026 Benjamin Walkenhorst
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from ipaddress import IPv4Address, IPv4Network, IPv6Address, IPv6Network
from typing import Final, Optional, Union

Address = Union[IPv4Address, IPv6Address]
Network = Union[IPv4Network, IPv6Network]


class Family(IntEnum):
    """Family is an IP address family."""

    V4 = 4
    V6 = 6


legal_boundaries: Final[dict[Family, tuple[int, ...]]] = {
    Family.V4: (8, 16, 24),
    Family.V6: (32, 48, 64),
}


class RecordType(Enum):
    """RecordType is the kind of DNS record we publish."""

    A = "A"
    AAAA = "AAAA"
    PTR = "PTR"

    @property
    def forward(self) -> bool:
        """Return True for address records."""
        return self is not RecordType.PTR


@dataclass(slots=True, kw_only=True, frozen=True)
class Endpoint:
    """Endpoint is a machine in the tailnet."""

    ident: str
    name: str = ""
    ipv4: Optional[IPv4Address] = None
    ipv6: Optional[IPv6Address] = None
    online: bool = False

    @property
    def display_name(self) -> str:
        """Return the Endpoint's name, or its ID if the name is empty."""
        return self.name or self.ident


@dataclass(slots=True, kw_only=True, frozen=True)
class DesiredRecord:
    """DesiredRecord is a DNS record that should exist on the server."""

    rtype: RecordType
    name: str
    value: str
    ttl: int
    zone: Optional[str] = None

    def __post_init__(self) -> None:
        assert self.ttl >= 0, "TTL must not be negative"


@dataclass(slots=True, kw_only=True, frozen=True)
class ReverseZoneConfig:
    """ReverseZoneConfig controls PTR records for one address family."""

    family: Family
    enabled: bool = False
    subnet: Optional[Network] = None
    boundary: int = 0
    zone: str = ""

    def __post_init__(self) -> None:
        if self.enabled:
            assert self.subnet is not None, \
                f"IPv{self.family.value} reverse records need a subnet"
            assert self.boundary in legal_boundaries[self.family], \
                f"Illegal boundary /{self.boundary} for IPv{self.family.value}"

    def contains(self, addr: Address) -> bool:
        """Return True if <addr> lies within the validation subnet."""
        if self.subnet is None or addr.version != self.subnet.version:
            return False
        return addr in self.subnet


@dataclass(slots=True, kw_only=True, frozen=True)
class ReverseConfig:
    """ReverseConfig holds the reverse zone settings for both families."""

    v4: ReverseZoneConfig = field(default_factory=lambda: ReverseZoneConfig(family=Family.V4))
    v6: ReverseZoneConfig = field(default_factory=lambda: ReverseZoneConfig(family=Family.V6))

    def for_family(self, family: Family) -> ReverseZoneConfig:
        """Return the settings for the given address family."""
        return self.v4 if family == Family.V4 else self.v6

    @property
    def enabled(self) -> bool:
        """Return True if reverse records are enabled for any family."""
        return self.v4.enabled or self.v6.enabled


@dataclass(slots=True, kw_only=True)
class ZoneBatch:
    """ZoneBatch is the list of records destined for a single zone."""

    zone: str
    records: list[DesiredRecord] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)


@dataclass(slots=True, kw_only=True, frozen=True)
class Credential:
    """Credential is a TSIG key."""

    name: str
    secret: str = field(repr=False)
    algorithm: str = "hmac-sha256"


@dataclass(slots=True, kw_only=True, frozen=True)
class Status:
    """Status summarizes the configuration the application is running with."""

    tailnet: str
    server: str
    port: int
    zone: str
    dry_run: bool
    log_level: str
    poll_interval: float
    update_interval: float
    ptr_ipv4: bool
    ptr_ipv6: bool


# Local Variables: #
# python-indent: 4 #
# End: #
