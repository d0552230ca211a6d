#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-02-03 17:58:09 krylon>
#
# /data/code/python/tsddns/nexus.py
# created on 21. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.nexus

(c) 2026 Benjamin Walkenhorst
"""

import logging
from dataclasses import dataclass, field
from threading import RLock
from typing import Optional

from tsddns import common
from tsddns.config import Config
from tsddns.discovery import TailnetClient
from tsddns.model import Status
from tsddns.pipeline import Pipeline, Source
from tsddns.transport import Transport
from tsddns.updater import Updater


@dataclass(kw_only=True, slots=True)
class Nexus:
    """Nexus brings together all the moving parts, so to speak."""

    cfg: Config
    log: logging.Logger = field(default_factory=lambda: common.get_logger("nexus"))
    lock: RLock = field(default_factory=RLock)
    source: Optional[Source] = None
    transport: Transport = field(init=False)
    updater: Updater = field(init=False)
    pipeline: Pipeline = field(init=False)

    def __post_init__(self) -> None:
        ts = self.cfg.tailscale
        bind = self.cfg.bind

        if self.source is None:
            self.source = TailnetClient(tailnet=ts.tailnet,
                                        api_key=ts.api_key,
                                        client_id=ts.client_id,
                                        client_secret=ts.client_secret)

        self.transport = Transport(server=bind.server,
                                   port=bind.port,
                                   zone=bind.zone,
                                   cred=bind.cred,
                                   timeout=bind.timeout,
                                   tcp=bind.tcp)
        self.updater = Updater(zone=bind.zone,
                               sender=self.transport,
                               reverse=bind.reverse,
                               dry_run=self.cfg.dry_run)
        self.pipeline = Pipeline(source=self.source,
                                 updater=self.updater,
                                 zone=bind.zone,
                                 ttl=bind.ttl,
                                 reverse=bind.reverse,
                                 poll_interval=ts.poll_interval,
                                 update_interval=bind.update_interval)

    @property
    def active(self) -> bool:
        """Return the Nexus' active flag."""
        with self.lock:
            return self.pipeline.active

    def start(self) -> None:
        """Let get this Nexus started!

        The DNS server must answer a query for our zone's SOA record,
        otherwise StartupError is raised and nothing is started.
        """
        self.log.info("Starting %s %s for tailnet %s, zone %s on %s:%d",
                      common.AppName,
                      common.AppVersion,
                      self.cfg.tailscale.tailnet,
                      self.cfg.bind.zone,
                      self.cfg.bind.server,
                      self.cfg.bind.port)
        if self.cfg.dry_run:
            self.log.info("Running in dry-run mode, no updates will be sent.")

        self.transport.validate_connection()
        with self.lock:
            self.pipeline.start()

    def stop(self) -> None:
        """Stop the pipeline and wait for its threads to finish."""
        self.pipeline.stop()
        self.pipeline.join()

    def status(self) -> Status:
        """Return a summary of the configuration we are running with."""
        return Status(tailnet=self.cfg.tailscale.tailnet,
                      server=self.cfg.bind.server,
                      port=self.cfg.bind.port,
                      zone=self.cfg.bind.zone,
                      dry_run=self.cfg.dry_run,
                      log_level=self.cfg.log_level,
                      poll_interval=self.cfg.tailscale.poll_interval,
                      update_interval=self.cfg.bind.update_interval,
                      ptr_ipv4=self.cfg.bind.reverse.v4.enabled,
                      ptr_ipv6=self.cfg.bind.reverse.v6.enabled)


# Local Variables: #
# python-indent: 4 #
# End: #
