#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-02-03 18:20:44 krylon>
#
# /data/code/python/tsddns/test_nexus.py
# created on 22. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.test_nexus

(c) 2026 Benjamin Walkenhorst
"""

import os
import shutil
import unittest
from datetime import datetime
from typing import Any, Final
from unittest import mock

import dns.exception

from tsddns import common
from tsddns.config import Config, from_dict
from tsddns.discovery import TailnetClient
from tsddns.main import build_parser
from tsddns.model import Endpoint, Status
from tsddns.nexus import Nexus
from tsddns.transport import StartupError

test_dir: Final[str] = os.path.join(
    "/tmp",
    datetime.now().strftime(f"{common.AppName.lower()}_test_nexus_%Y%m%d_%H%M%S"))

settings: Final[dict[str, Any]] = {
    "tailscale": {
        "api_key": "tskey-api-abc123",
        "tailnet": "example.com",
    },
    "bind": {
        "server": "192.0.2.53",
        "port": 5353,
        "zone": "ts.example.com",
        "key_name": "tsddns-key",
        "key_secret": "c2VjcmV0IGtleSBnb2VzIGhlcmU=",
        "ptr": {"ipv4": {"enabled": True, "zone": "64.100.in-addr.arpa"}},
    },
    "general": {
        "dry_run": True,
    },
}


class EmptySource:  # pylint: disable-msg=R0903
    """EmptySource knows no machines."""

    def list_online_endpoints(self) -> list[Endpoint]:
        """Return an empty list."""
        return []


class TestNexus(unittest.TestCase):
    """Test putting the pieces together."""

    @classmethod
    def setUpClass(cls) -> None:
        """Prepare the testing environment."""
        common.set_basedir(test_dir)

    @classmethod
    def tearDownClass(cls) -> None:
        """Clean up afterwards."""
        shutil.rmtree(test_dir, ignore_errors=True)

    def test_01_wiring(self) -> None:
        """Test that the configuration ends up where it belongs."""
        cfg: Final[Config] = from_dict(settings)
        nx: Final[Nexus] = Nexus(cfg=cfg)

        self.assertIsInstance(nx.source, TailnetClient)
        self.assertEqual(nx.transport.port, 5353)
        self.assertTrue(nx.updater.dry_run)
        self.assertIs(nx.updater.sender, nx.transport)
        self.assertEqual(nx.pipeline.ttl, 300)
        self.assertEqual(nx.pipeline.poll_interval, 30.0)
        self.assertFalse(nx.active)

    def test_02_status(self) -> None:
        """Test the status summary."""
        nx: Final[Nexus] = Nexus(cfg=from_dict(settings), source=EmptySource())
        st: Final[Status] = nx.status()

        self.assertEqual(st.tailnet, "example.com")
        self.assertEqual(st.server, "192.0.2.53")
        self.assertEqual(st.port, 5353)
        self.assertEqual(st.zone, "ts.example.com")
        self.assertTrue(st.dry_run)
        self.assertTrue(st.ptr_ipv4)
        self.assertFalse(st.ptr_ipv6)

    def test_03_start_fails(self) -> None:
        """Test that nothing is started if the DNS server cannot be reached."""
        nx: Final[Nexus] = Nexus(cfg=from_dict(settings), source=EmptySource())

        with mock.patch("dns.query.udp", side_effect=dns.exception.Timeout()):
            with self.assertRaises(StartupError):
                nx.start()

        self.assertFalse(nx.active)
        self.assertEqual(nx.pipeline.threads, [])

    def test_04_command_line(self) -> None:
        """Test parsing the command line."""
        argp = build_parser()

        args = argp.parse_args([])
        self.assertEqual(args.cmd, "run")
        self.assertIsNone(args.dry_run)

        args = argp.parse_args(["-n", "-l", "debug", "test"])
        self.assertEqual(args.cmd, "test")
        self.assertTrue(args.dry_run)
        self.assertEqual(args.log_level, "debug")

        with self.assertRaises(SystemExit):
            with mock.patch("sys.stderr"):
                argp.parse_args(["frobnicate"])


# Local Variables: #
# python-indent: 4 #
# End: #
