#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-22 18:40:16 krylon>
#
# /data/code/python/tsddns/test_classify.py
# created on 13. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.test_classify

(c) 2026 Benjamin Walkenhorst
"""

import unittest
from ipaddress import ip_address
from typing import Final

from tsddns.classify import (InvalidAddress, UnsupportedBoundary,
                             reverse_name, zone_for_address,
                             zone_for_record_name)
from tsddns.common import ErrorKind
from tsddns.model import Family


class TestClassify(unittest.TestCase):
    """Test mapping addresses to reverse zones."""

    def test_01_ipv4_zone(self) -> None:
        """Test finding the zone for IPv4 addresses."""
        test_cases: Final[list[tuple[str, int, str]]] = [
            ("100.64.0.1", 8, "100.in-addr.arpa"),
            ("100.64.0.1", 16, "64.100.in-addr.arpa"),
            ("100.64.0.1", 24, "0.64.100.in-addr.arpa"),
            ("100.64.1.1", 16, "64.100.in-addr.arpa"),
            ("10.1.2.3", 24, "2.1.10.in-addr.arpa"),
        ]

        for c in test_cases:
            zone: str = zone_for_address(c[0], Family.V4, c[1])
            self.assertEqual(zone, c[2])

    def test_02_ipv6_zone(self) -> None:
        """Test finding the zone for IPv6 addresses."""
        test_cases: Final[list[tuple[str, int, str]]] = [
            ("2001:db8::1", 32, "8.b.d.0.1.0.0.2.ip6.arpa"),
            ("2001:db8::1", 48, "0.0.0.0.8.b.d.0.1.0.0.2.ip6.arpa"),
            ("2001:db8::1", 64, "0.0.0.0.0.0.0.0.8.b.d.0.1.0.0.2.ip6.arpa"),
            ("fd7a:115c:a1e0::1", 48, "0.e.1.a.c.5.1.1.a.7.d.f.ip6.arpa"),
        ]

        for c in test_cases:
            zone: str = zone_for_address(c[0], Family.V6, c[1])
            self.assertEqual(zone, c[2])

    def test_03_reverse_name(self) -> None:
        """Test generating reverse names."""
        self.assertEqual(reverse_name("100.64.1.1"), "1.1.64.100.in-addr.arpa.")
        self.assertEqual(reverse_name(ip_address("100.64.1.1")), "1.1.64.100.in-addr.arpa.")

        name: Final[str] = reverse_name("2001:db8::1")
        labels: Final[list[str]] = name.split(".")
        self.assertTrue(name.endswith(".ip6.arpa."))
        # 32 nibbles, ip6, arpa and the empty root label
        self.assertEqual(len(labels), 35)
        self.assertEqual(labels[0], "1")

    def test_04_zone_from_record_name(self) -> None:
        """Test deriving the zone from a reverse name."""
        test_cases: Final[list[tuple[str, int, str]]] = [
            ("1.1.64.100.in-addr.arpa.", 8, "100.in-addr.arpa"),
            ("1.1.64.100.in-addr.arpa.", 16, "64.100.in-addr.arpa"),
            ("1.1.64.100.in-addr.arpa", 24, "1.64.100.in-addr.arpa"),
            (reverse_name("2001:db8::1"), 32, "8.b.d.0.1.0.0.2.ip6.arpa"),
        ]

        for c in test_cases:
            zone: str = zone_for_record_name(c[0], c[1])
            self.assertEqual(zone, c[2])

    def test_05_round_trip(self) -> None:
        """Test that the zone of an address and of its reverse name agree."""
        addresses: Final[list[str]] = [
            "100.64.0.1",
            "100.127.255.254",
            "192.168.17.4",
            "1.2.3.4",
        ]

        for addr in addresses:
            for boundary in (8, 16, 24):
                zone: str = zone_for_address(addr, Family.V4, boundary)
                self.assertEqual(zone_for_record_name(reverse_name(addr), boundary), zone)

    def test_06_invalid_address(self) -> None:
        """Test that garbage and mismatched families are rejected."""
        test_cases: Final[list[tuple[str, Family]]] = [
            ("not-an-address", Family.V4),
            ("300.1.1.1", Family.V4),
            ("2001:db8::1", Family.V4),
            ("100.64.0.1", Family.V6),
        ]

        for c in test_cases:
            with self.assertRaises(InvalidAddress) as ctx:
                zone_for_address(c[0], c[1], 16 if c[1] == Family.V4 else 64)
            self.assertEqual(ctx.exception.kind, ErrorKind.Classification)
            self.assertEqual(ctx.exception.address, c[0])

        bad_names: Final[list[tuple[str, int]]] = [
            ("www.example.com.", 16),
            ("1.64.100.in-addr.arpa.", 16),
            ("x.ip6.arpa.", 64),
        ]

        for c in bad_names:
            with self.assertRaises(InvalidAddress):
                zone_for_record_name(c[0], c[1])

    def test_07_unsupported_boundary(self) -> None:
        """Test that boundaries we do not support are rejected."""
        test_cases: Final[list[tuple[str, Family, int]]] = [
            ("100.64.0.1", Family.V4, 12),
            ("100.64.0.1", Family.V4, 32),
            ("2001:db8::1", Family.V6, 16),
            ("2001:db8::1", Family.V6, 56),
        ]

        for c in test_cases:
            with self.assertRaises(UnsupportedBoundary) as ctx:
                zone_for_address(c[0], c[1], c[2])
            self.assertEqual(ctx.exception.boundary, c[2])


# Local Variables: #
# python-indent: 4 #
# End: #
