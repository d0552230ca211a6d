#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-21 19:44:02 krylon>
#
# /data/code/python/tsddns/classify.py
# created on 13. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.classify

(c) 2026 Benjamin Walkenhorst

Figure out which reverse zone an address belongs to. The boundary size is
given in bits, for IPv4 it must be 8, 16 or 24, for IPv6 32, 48 or 64.
The network part of the address is kept in whole octets (IPv4) or nibbles
(IPv6), and those are the labels of the zone name closest to the root.
"""

from ipaddress import ip_address
from typing import Final, Union

import dns.exception
import dns.reversename

from tsddns.common import ErrorKind, TsddnsError
from tsddns.model import Address, Family, legal_boundaries


class ClassificationError(TsddnsError):
    """Base class for errors in mapping addresses to zones."""

    kind = ErrorKind.Classification


class InvalidAddress(ClassificationError):
    """InvalidAddress indicates an address (or reverse name) we cannot make sense of."""


class UnsupportedBoundary(ClassificationError):
    """UnsupportedBoundary indicates a subnet boundary we do not handle."""


class OutOfSubnet(ClassificationError):
    """OutOfSubnet indicates an address outside the configured subnet."""


v4_suffix: Final[str] = "in-addr.arpa"
v6_suffix: Final[str] = "ip6.arpa"

suffixes: Final[dict[Family, str]] = {
    Family.V4: v4_suffix,
    Family.V6: v6_suffix,
}

# Bits per label of the reverse name.
label_bits: Final[dict[Family, int]] = {
    Family.V4: 8,
    Family.V6: 4,
}

# Labels in a complete reverse name, not counting the suffix.
label_count: Final[dict[Family, int]] = {
    Family.V4: 4,
    Family.V6: 32,
}


def parse_address(addr: Union[str, Address], family: Family) -> Address:
    """Parse <addr> and check that it belongs to <family>."""
    try:
        parsed: Address = ip_address(addr) if isinstance(addr, str) else addr
    except ValueError as verr:
        raise InvalidAddress(f"'{addr}' does not look like an IP address: {verr}",
                             address=str(addr)) from verr
    if parsed.version != family.value:
        raise InvalidAddress(f"{addr} is not an IPv{family.value} address",
                             address=str(addr))
    return parsed


def check_boundary(family: Family, boundary: int) -> int:
    """Return the number of labels a zone for <boundary> keeps, or raise UnsupportedBoundary."""
    if boundary not in legal_boundaries[family]:
        raise UnsupportedBoundary(f"Unsupported IPv{family.value} subnet size /{boundary}",
                                  boundary=boundary)
    return boundary // label_bits[family]


def reverse_name(addr: Union[str, Address]) -> str:
    """Return the fully qualified reverse name for <addr>, with a trailing dot.

    >>> reverse_name("100.64.1.1")
    '1.1.64.100.in-addr.arpa.'
    """
    try:
        return dns.reversename.from_address(str(addr)).to_text()
    except (dns.exception.SyntaxError, ValueError) as err:
        raise InvalidAddress(f"'{addr}' does not look like an IP address: {err}",
                             address=str(addr)) from err


def family_of_name(name: str) -> Family:
    """Return the address family a reverse name belongs to."""
    name = name.rstrip(".").lower()
    for fam, sfx in suffixes.items():
        if name.endswith("." + sfx):
            return fam
    raise InvalidAddress(f"{name} is not a reverse name", address=name)


def zone_for_record_name(name: str, boundary: int) -> str:
    """Return the reverse zone a reverse record name belongs to.

    <name> is the fully reversed form of an address, e.g.
    1.1.64.100.in-addr.arpa. The host part is stripped, what remains is the
    part of the name that is covered by the network of <boundary> bits.
    """
    fam: Final[Family] = family_of_name(name)
    keep: Final[int] = check_boundary(fam, boundary)
    sfx: Final[str] = suffixes[fam]

    labels: Final[list[str]] = name.rstrip(".").lower()[:-(len(sfx) + 1)].split(".")
    if len(labels) != label_count[fam] or not all(labels):
        raise InvalidAddress(f"{name} does not contain a complete IPv{fam.value} address",
                             address=name)

    return ".".join(labels[-keep:] + [sfx])


def zone_for_address(addr: Union[str, Address], family: Family, boundary: int) -> str:
    """Return the reverse zone <addr> belongs to for a network of <boundary> bits.

    >>> zone_for_address("100.64.1.1", Family.V4, 16)
    '64.100.in-addr.arpa'
    """
    parsed: Final[Address] = parse_address(addr, family)
    check_boundary(family, boundary)
    return zone_for_record_name(reverse_name(parsed), boundary)


# Local Variables: #
# python-indent: 4 #
# End: #
