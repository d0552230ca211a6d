#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-22 17:31:58 krylon>
#
# /data/code/python/tsddns/synth.py
# created on 13. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.synth

(c) 2026 Benjamin Walkenhorst

Turn a list of Endpoints into the DNS records that should exist for them.
"""

import logging
import re
from typing import Final, Optional, Sequence

from tsddns import common
from tsddns.classify import (ClassificationError, OutOfSubnet, reverse_name,
                             zone_for_address)
from tsddns.model import (Address, DesiredRecord, Endpoint, Family,
                          RecordType, ReverseConfig, ReverseZoneConfig)

placeholder_name: Final[str] = "machine"

invalid_chars: Final[re.Pattern] = re.compile("[^a-zA-Z0-9.-]")
hyphens: Final[re.Pattern] = re.compile("-+")


def sanitize_name(name: str) -> str:
    """Turn <name> into something we can use as a DNS label.

    Only the leftmost label of a fully qualified name is kept.
    """
    label: str = name.split(".", 1)[0]
    label = invalid_chars.sub("-", label)
    label = hyphens.sub("-", label)
    label = label.strip("-.")
    if label == "":
        label = placeholder_name
    return label.lower()


def reverse_record(addr: Address,
                   hostname: str,
                   ttl: int,
                   cfg: ReverseZoneConfig) -> DesiredRecord:
    """Create a PTR record pointing from <addr> to <hostname>.

    Raises OutOfSubnet if <addr> is not within the configured subnet.
    """
    if not cfg.contains(addr):
        raise OutOfSubnet(f"{addr} is not in configured subnet {cfg.subnet}",
                          address=str(addr),
                          subnet=str(cfg.subnet))

    return DesiredRecord(rtype=RecordType.PTR,
                         name=reverse_name(addr),
                         value=hostname,
                         ttl=ttl,
                         zone=zone_for_address(addr, cfg.family, cfg.boundary))


def synthesize(endpoints: Sequence[Endpoint],
               zone: str,
               ttl: int,
               reverse: Optional[ReverseConfig] = None,
               log: Optional[logging.Logger] = None) -> list[DesiredRecord]:
    """Return the records that should exist for the online Endpoints in <endpoints>."""
    if log is None:
        log = common.get_logger("synth")
    if reverse is None:
        reverse = ReverseConfig()

    zone = zone.rstrip(".")
    forward: list[DesiredRecord] = []
    ptr: list[DesiredRecord] = []

    for ep in endpoints:
        if not ep.online:
            continue

        name: str = sanitize_name(ep.display_name)
        hostname: str = f"{name}.{zone}"

        for fam, addr, rtype in ((Family.V4, ep.ipv4, RecordType.A),
                                 (Family.V6, ep.ipv6, RecordType.AAAA)):
            if addr is None:
                continue

            forward.append(DesiredRecord(rtype=rtype,
                                         name=name,
                                         value=str(addr),
                                         ttl=ttl,
                                         zone=zone))
            log.debug("Endpoint %s (%s) -> %s record %s -> %s",
                      ep.display_name,
                      ep.ident,
                      rtype.value,
                      name,
                      addr)

            cfg: ReverseZoneConfig = reverse.for_family(fam)
            if not cfg.enabled:
                continue

            try:
                ptr.append(reverse_record(addr, hostname, ttl, cfg))
            except ClassificationError as cerr:
                log.warning("Skip PTR record for %s (%s): %s",
                            addr,
                            ep.display_name,
                            cerr)

    log.debug("Converted %d endpoints to %d address and %d PTR records",
              len(endpoints),
              len(forward),
              len(ptr))

    return forward + ptr


# Local Variables: #
# python-indent: 4 #
# End: #
