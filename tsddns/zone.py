#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-24 16:12:30 krylon>
#
# /data/code/python/tsddns/zone.py
# created on 14. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.zone

(c) 2026 Benjamin Walkenhorst

Sort records by the zone they live in and build update transactions.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Final, Optional, Sequence

import dns.name
import dns.update

from tsddns import common
from tsddns.classify import (ClassificationError, family_of_name,
                             zone_for_record_name)
from tsddns.model import DesiredRecord, ReverseConfig, ZoneBatch


class OpKind(Enum):
    """OpKind is the kind of operation in an update transaction."""

    Delete = auto()
    Insert = auto()


@dataclass(slots=True, kw_only=True, frozen=True)
class UpdateOp:
    """UpdateOp is a single operation within an update transaction.

    Delete operations remove the whole RRset of the record's name and type,
    the record's value and TTL are ignored for those.
    """

    kind: OpKind
    record: DesiredRecord


@dataclass(slots=True, kw_only=True)
class UpdateTransaction:
    """UpdateTransaction is a list of operations to be applied to one zone."""

    zone: str
    ops: list[UpdateOp] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.ops)

    @property
    def records(self) -> list[DesiredRecord]:
        """Return the records inserted by the transaction."""
        return [op.record for op in self.ops if op.kind == OpKind.Insert]

    def to_message(self, **kwargs) -> dns.update.UpdateMessage:
        """Render the transaction as a DNS UPDATE message.

        Keyword arguments (keyring, keyname, keyalgorithm) are passed on to
        the UpdateMessage.
        """
        origin: Final[dns.name.Name] = dns.name.from_text(self.zone)
        msg: Final[dns.update.UpdateMessage] = dns.update.UpdateMessage(origin, **kwargs)

        for op in self.ops:
            rec: DesiredRecord = op.record
            owner: dns.name.Name = dns.name.from_text(
                rec.name,
                origin if rec.rtype.forward else dns.name.root)
            match op.kind:
                case OpKind.Delete:
                    msg.delete(owner, rec.rtype.value)
                case OpKind.Insert:
                    value: str = rec.value
                    if not rec.rtype.forward and not value.endswith("."):
                        value += "."
                    msg.add(owner, rec.ttl, rec.rtype.value, value)

        return msg


def zone_of(rec: DesiredRecord,
            forward_zone: str,
            reverse: Optional[ReverseConfig] = None) -> Optional[str]:
    """Return the zone <rec> should be published in, or None if we cannot tell."""
    if rec.rtype.forward:
        return forward_zone.rstrip(".")
    if rec.zone:
        return rec.zone.rstrip(".")
    if reverse is None:
        return None

    cfg = reverse.for_family(family_of_name(rec.name))
    if not cfg.enabled:
        return None
    return zone_for_record_name(rec.name, cfg.boundary)


def group_by_zone(records: Sequence[DesiredRecord],
                  forward_zone: str,
                  reverse: Optional[ReverseConfig] = None,
                  log: Optional[logging.Logger] = None) -> list[ZoneBatch]:
    """Sort <records> into one ZoneBatch per zone.

    Address records always go to <forward_zone>, PTR records to the zone that
    was determined when they were created. Records we cannot find a zone for
    are dropped.
    """
    if log is None:
        log = common.get_logger("zone")

    batches: dict[str, ZoneBatch] = {}

    for rec in records:
        try:
            zone: Optional[str] = zone_of(rec, forward_zone, reverse)
        except ClassificationError as cerr:
            log.warning("Cannot determine zone for %s record %s: %s",
                        rec.rtype.value,
                        rec.name,
                        cerr)
            continue

        if not zone:
            log.warning("Cannot determine zone for %s record %s, dropping it.",
                        rec.rtype.value,
                        rec.name)
            continue

        if zone not in batches:
            batches[zone] = ZoneBatch(zone=zone)
        batches[zone].records.append(rec)

    return list(batches.values())


def build_transaction(zone: str, records: Sequence[DesiredRecord]) -> UpdateTransaction:
    """Build a transaction that replaces the RRset of each record in <records>.

    For every record, the existing RRset is deleted, then the record is
    inserted, so applying the same records twice has no additional effect.
    """
    if len(records) == 0:
        raise ValueError(f"Refusing to build an empty transaction for zone {zone}")

    zone = zone.rstrip(".")
    tx: Final[UpdateTransaction] = UpdateTransaction(zone=zone)

    for rec in records:
        if rec.zone is not None and rec.zone.rstrip(".") != zone:
            raise ValueError(f"{rec.rtype.value} record {rec.name} belongs to zone "
                             f"{rec.zone}, not {zone}")
        tx.ops.append(UpdateOp(kind=OpKind.Delete, record=rec))
        tx.ops.append(UpdateOp(kind=OpKind.Insert, record=rec))

    return tx


# Local Variables: #
# python-indent: 4 #
# End: #
