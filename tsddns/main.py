#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-02-04 20:11:35 krylon>
#
# /data/code/python/tsddns/main.py
# created on 21. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.main

(c) 2026 Benjamin Walkenhorst
"""


import argparse
import dataclasses
import logging
import pathlib
import signal
import sys
import time
from typing import Any, Optional, Sequence

from tsddns import common, config
from tsddns.common import TsddnsError
from tsddns.config import Config, ConfigError
from tsddns.discovery import DiscoveryError
from tsddns.nexus import Nexus


def build_parser() -> argparse.ArgumentParser:
    """Return the parser for our command line."""
    argp: argparse.ArgumentParser = argparse.ArgumentParser(
        prog=common.AppName,
        description="Keep a DNS server in sync with the machines in a Tailscale tailnet")
    argp.add_argument("-b", "--basedir",
                      type=pathlib.Path,
                      default=common.path.base(),
                      help="Directory to store application data in")
    argp.add_argument("-c", "--config",
                      type=pathlib.Path,
                      help="Path of the configuration file")
    argp.add_argument("-n", "--dry-run",
                      action="store_true",
                      default=None,
                      help="Compute updates and log them, but do not send them")
    argp.add_argument("-l", "--log-level",
                      choices=sorted(common.log_levels),
                      help="Log level for the console")
    argp.add_argument("-v", "--verbose",
                      action="store_true",
                      help="Log everything, same as --log-level debug")
    argp.add_argument("cmd",
                      nargs="?",
                      default="run",
                      choices=("run", "status", "test"),
                      help="What to do (default: run)")
    return argp


def load_config(args: argparse.Namespace) -> Config:
    """Load the configuration, with command line flags taking precedence."""
    general: dict[str, Any] = {}
    if args.dry_run is not None:
        general["dry_run"] = args.dry_run
    if args.verbose:
        general["log_level"] = "debug"
    elif args.log_level is not None:
        general["log_level"] = args.log_level

    return config.load(args.config, overrides={"general": general} if general else None)


def run(nx: Nexus) -> int:
    """Run until we are interrupted."""
    def handle_term(_signum, _frame) -> None:
        raise KeyboardInterrupt

    signal.signal(signal.SIGTERM, handle_term)

    try:
        nx.start()
        while nx.active:
            time.sleep(1)
    except KeyboardInterrupt:
        print("Telling Nexus to stop.")
    finally:
        nx.stop()
    return 0


def status(nx: Nexus) -> int:
    """Print the configuration we would run with."""
    print("Application Status:")
    for key, val in dataclasses.asdict(nx.status()).items():
        print(f"  {key}: {val}")
    return 0


def check_connections(nx: Nexus, log: logging.Logger) -> int:
    """Check that we can talk to both Tailscale and the DNS server."""
    log.info("Testing Tailscale connection...")
    try:
        machines = nx.source.list_online_endpoints()  # type: ignore[union-attr]
    except DiscoveryError as derr:
        log.error("Testing Tailscale connection failed: %s", derr)
        return 1
    log.info("Tailscale connection successful - found %d online machines", len(machines))

    log.info("Testing DNS server connection...")
    try:
        nx.transport.validate_connection()
    except TsddnsError as err:
        log.error("Testing DNS server connection failed: %s", err)
        return 1

    log.info("All connections tested successfully!")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse the command line and do what it says."""
    args = build_parser().parse_args(argv)
    common.set_basedir(args.basedir)

    try:
        cfg: Config = load_config(args)
    except ConfigError as cerr:
        print(f"Invalid configuration: {cerr}", file=sys.stderr)
        return 2

    common.set_log_level(common.log_levels[cfg.log_level])
    log: logging.Logger = common.get_logger("main")

    try:
        nx: Nexus = Nexus(cfg=cfg)
        match args.cmd:
            case "status":
                return status(nx)
            case "test":
                return check_connections(nx, log)
            case _:
                return run(nx)
    except TsddnsError as err:
        log.error("%s: %s", err.__class__.__name__, err)
        return 1


if __name__ == '__main__':
    sys.exit(main())

# Local Variables: #
# python-indent: 4 #
# End: #
