#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-23 20:05:49 krylon>
#
# /data/code/python/tsddns/test_synth.py
# created on 13. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.test_synth

(c) 2026 Benjamin Walkenhorst
"""

import os
import shutil
import unittest
from datetime import datetime
from ipaddress import IPv4Address, IPv6Address, ip_network
from typing import Final

from tsddns import common
from tsddns.model import (DesiredRecord, Endpoint, Family, RecordType,
                          ReverseConfig, ReverseZoneConfig)
from tsddns.synth import sanitize_name, synthesize

test_dir: Final[str] = os.path.join(
    "/tmp",
    datetime.now().strftime(f"{common.AppName.lower()}_test_synth_%Y%m%d_%H%M%S"))

zone: Final[str] = "example.com"

ptr_both: Final[ReverseConfig] = ReverseConfig(
    v4=ReverseZoneConfig(family=Family.V4,
                         enabled=True,
                         subnet=ip_network("100.64.0.0/10"),
                         boundary=16,
                         zone="64.100.in-addr.arpa"),
    v6=ReverseZoneConfig(family=Family.V6,
                         enabled=True,
                         subnet=ip_network("fd7a:115c:a1e0::/48"),
                         boundary=64,
                         zone="0.0.0.0.0.e.1.a.c.5.1.1.a.7.d.f.ip6.arpa"),
)


class TestSanitize(unittest.TestCase):
    """Test cleaning up machine names."""

    def test_01_sanitize(self) -> None:
        """Test turning machine names into DNS labels."""
        test_cases: Final[list[tuple[str, str]]] = [
            ("m1", "m1"),
            ("laptop.tail1234.ts.net", "laptop"),
            ("My Laptop", "my-laptop"),
            ("weird__name!!", "weird-name"),
            ("--edge--", "edge"),
            ("", "machine"),
            ("!!!", "machine"),
            (".hidden", "machine"),
            ("Gaming-PC", "gaming-pc"),
        ]

        for c in test_cases:
            self.assertEqual(sanitize_name(c[0]), c[1])


class TestSynthesize(unittest.TestCase):
    """Test turning Endpoints into records."""

    @classmethod
    def setUpClass(cls) -> None:
        """Prepare the testing environment."""
        common.set_basedir(test_dir)

    @classmethod
    def tearDownClass(cls) -> None:
        """Clean up afterwards."""
        shutil.rmtree(test_dir, ignore_errors=True)

    def test_01_single_a_record(self) -> None:
        """Test that an Endpoint without a name gets a record named after its ID."""
        ep: Final[Endpoint] = Endpoint(ident="m1",
                                       name="",
                                       ipv4=IPv4Address("100.64.1.1"),
                                       online=True)

        records: Final[list[DesiredRecord]] = synthesize([ep], zone, 300)

        self.assertEqual(len(records), 1)
        rec: Final[DesiredRecord] = records[0]
        self.assertEqual(rec.rtype, RecordType.A)
        self.assertEqual(rec.name, "m1")
        self.assertEqual(rec.value, "100.64.1.1")
        self.assertEqual(rec.ttl, 300)
        self.assertEqual(rec.zone, zone)

    def test_02_offline(self) -> None:
        """Test that offline Endpoints do not get any records."""
        ep: Final[Endpoint] = Endpoint(ident="m2",
                                       name="sleepy",
                                       ipv4=IPv4Address("100.64.1.2"),
                                       ipv6=IPv6Address("fd7a:115c:a1e0::2"),
                                       online=False)

        self.assertEqual(synthesize([ep], zone, 300, ptr_both), [])

    def test_03_forward_and_reverse(self) -> None:
        """Test creating address and PTR records for both families."""
        ep: Final[Endpoint] = Endpoint(ident="n1",
                                       name="web.tail1234.ts.net",
                                       ipv4=IPv4Address("100.64.1.1"),
                                       ipv6=IPv6Address("fd7a:115c:a1e0::1"),
                                       online=True)

        records: Final[list[DesiredRecord]] = synthesize([ep], zone, 600, ptr_both)
        by_type: Final[dict[RecordType, list[DesiredRecord]]] = {}
        for rec in records:
            by_type.setdefault(rec.rtype, []).append(rec)

        self.assertEqual(len(records), 4)
        self.assertEqual(len(by_type[RecordType.A]), 1)
        self.assertEqual(len(by_type[RecordType.AAAA]), 1)
        self.assertEqual(len(by_type[RecordType.PTR]), 2)

        self.assertEqual(by_type[RecordType.AAAA][0].value, "fd7a:115c:a1e0::1")

        ptr4, ptr6 = by_type[RecordType.PTR]
        self.assertEqual(ptr4.name, "1.1.64.100.in-addr.arpa.")
        self.assertEqual(ptr4.value, "web.example.com")
        self.assertEqual(ptr4.zone, "64.100.in-addr.arpa")
        self.assertEqual(ptr4.ttl, 600)
        self.assertTrue(ptr6.name.endswith(".ip6.arpa."))
        self.assertEqual(ptr6.zone, "0.0.0.0.0.e.1.a.c.5.1.1.a.7.d.f.ip6.arpa")
        self.assertEqual(ptr6.value, "web.example.com")

    def test_04_outside_subnet(self) -> None:
        """Test that addresses outside the configured subnet get no PTR record."""
        ep: Final[Endpoint] = Endpoint(ident="x1",
                                       name="outsider",
                                       ipv4=IPv4Address("192.168.1.10"),
                                       online=True)

        records: Final[list[DesiredRecord]] = synthesize([ep], zone, 300, ptr_both)

        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].rtype, RecordType.A)
        self.assertEqual(records[0].value, "192.168.1.10")

    def test_05_family_disabled(self) -> None:
        """Test that PTR records are only created for enabled families."""
        only_v4: Final[ReverseConfig] = ReverseConfig(v4=ptr_both.v4)
        ep: Final[Endpoint] = Endpoint(ident="d1",
                                       name="dual",
                                       ipv4=IPv4Address("100.100.3.4"),
                                       ipv6=IPv6Address("fd7a:115c:a1e0::4"),
                                       online=True)

        records: Final[list[DesiredRecord]] = synthesize([ep], zone, 300, only_v4)
        ptrs: Final[list[DesiredRecord]] = [x for x in records if x.rtype == RecordType.PTR]

        self.assertEqual(len(records), 3)
        self.assertEqual(len(ptrs), 1)
        self.assertEqual(ptrs[0].zone, "100.100.in-addr.arpa")

    def test_06_roster(self) -> None:
        """Test a roster with online and offline machines."""
        roster: Final[list[Endpoint]] = [
            Endpoint(ident="a", name="alpha", ipv4=IPv4Address("100.64.0.1"), online=True),
            Endpoint(ident="b", name="beta", ipv4=IPv4Address("100.64.0.2"), online=True),
            Endpoint(ident="c", name="gamma", ipv4=IPv4Address("100.64.0.3"), online=False),
        ]

        records: Final[list[DesiredRecord]] = synthesize(roster, "t.example.com", 300)

        self.assertEqual(len(records), 2)
        self.assertEqual({x.name for x in records}, {"alpha", "beta"})
        for rec in records:
            self.assertEqual(rec.rtype, RecordType.A)
            self.assertEqual(rec.zone, "t.example.com")


# Local Variables: #
# python-indent: 4 #
# End: #
