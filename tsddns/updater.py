#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-27 18:55:06 krylon>
#
# /data/code/python/tsddns/updater.py
# created on 16. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.updater

(c) 2026 Benjamin Walkenhorst
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

from tsddns import common
from tsddns.model import DesiredRecord, ReverseConfig
from tsddns.transport import TransportError
from tsddns.zone import UpdateTransaction, build_transaction, group_by_zone


class Sender(Protocol):  # pylint: disable-msg=R0903
    """Sender is anything that can deliver an UpdateTransaction."""

    def send(self, tx: UpdateTransaction) -> None:
        """Deliver <tx>, raise TransportError on failure."""


@dataclass(kw_only=True, slots=True)
class UpdateReport:
    """UpdateReport summarizes one round of updates."""

    records: int = 0
    zones_ok: list[str] = field(default_factory=list)
    zones_failed: list[str] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        """Return the number of zones we tried to update."""
        return len(self.zones_ok) + len(self.zones_failed)

    @property
    def success(self) -> bool:
        """Return True if no zone failed."""
        return len(self.zones_failed) == 0


@dataclass(kw_only=True, slots=True)
class Updater:
    """Updater pushes record sets to the DNS server, one transaction per zone."""

    zone: str
    sender: Optional[Sender] = None
    reverse: ReverseConfig = field(default_factory=ReverseConfig)
    dry_run: bool = False
    log: logging.Logger = field(default_factory=lambda: common.get_logger("updater"))

    def __post_init__(self) -> None:
        assert self.dry_run or self.sender is not None, \
            "Updater needs a Sender unless running in dry-run mode"

    def apply(self, records: Sequence[DesiredRecord]) -> UpdateReport:
        """Group <records> by zone and send one update per zone.

        Failing zones are logged and reported, they do not keep the
        remaining zones from being updated.
        """
        report: UpdateReport = UpdateReport(records=len(records))

        if len(records) == 0:
            self.log.debug("No records to update")
            return report

        if self.dry_run:
            self.log.info("DRY RUN: Would update %d DNS records", len(records))
        else:
            self.log.info("Updating %d DNS records", len(records))

        for batch in group_by_zone(records, self.zone, self.reverse, self.log):
            if len(batch) == 0:
                continue

            tx: UpdateTransaction = build_transaction(batch.zone, batch.records)

            if self.dry_run:
                self._log_dry_run(tx)
                report.zones_ok.append(tx.zone)
                continue

            self.log.debug("Sending %d records to zone %s", len(batch), batch.zone)
            for rec in tx.records:
                self.log.debug("Replace %s record %s in %s -> %s (TTL %d)",
                               rec.rtype.value,
                               rec.name,
                               tx.zone,
                               rec.value,
                               rec.ttl)

            try:
                self.sender.send(tx)  # type: ignore[union-attr]
            except TransportError as terr:
                self.log.error("Failed to update zone %s: %s",
                               tx.zone,
                               terr)
                report.zones_failed.append(tx.zone)
            else:
                self.log.debug("Successfully updated %d records in zone %s",
                               len(batch),
                               tx.zone)
                report.zones_ok.append(tx.zone)

        if not self.dry_run:
            self.log.info("Updated %d of %d zones",
                          len(report.zones_ok),
                          report.attempted)

        return report

    def _log_dry_run(self, tx: UpdateTransaction) -> None:
        for rec in tx.records:
            self.log.info("DRY RUN: Would create/update %s record %s in %s -> %s (TTL: %d)",
                          rec.rtype.value,
                          rec.name,
                          tx.zone,
                          rec.value,
                          rec.ttl)


# Local Variables: #
# python-indent: 4 #
# End: #
