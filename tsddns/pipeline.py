#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-02-02 19:36:27 krylon>
#
# /data/code/python/tsddns/pipeline.py
# created on 20. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.pipeline

(c) 2026 Benjamin Walkenhorst

The pipeline consists of three threads:

- the discovery thread fetches the list of online machines, once right
  away and then every <poll_interval> seconds,
- the synthesis thread turns each list of machines into a list of DNS
  records,
- the transmission thread pushes the records to the DNS server every
  <update_interval> seconds.

They talk to each other through two bounded queues. When a thread quits,
it shuts down the queue it writes to, so the thread on the other end knows
no more data is coming. All threads share one Event that tells them to stop.
"""

import logging
from dataclasses import dataclass, field
from queue import Empty, Full, Queue, ShutDown
from threading import Event, RLock, Thread
from typing import Final, Optional, Protocol, TypeVar

from tsddns import common
from tsddns.control import Stage, StageState
from tsddns.discovery import DiscoveryError
from tsddns.model import DesiredRecord, Endpoint, ReverseConfig
from tsddns.synth import synthesize
from tsddns.updater import Updater

q_timeout: Final[float] = 0.5
q_size: Final[int] = 10

T = TypeVar("T")


class Source(Protocol):  # pylint: disable-msg=R0903
    """Source is anything that can tell us which machines are online."""

    def list_online_endpoints(self) -> list[Endpoint]:
        """Return the Endpoints that are currently online."""


@dataclass(kw_only=True, slots=True)
class Pipeline:
    """Pipeline runs the discovery, synthesis and transmission threads."""

    source: Source
    updater: Updater
    zone: str
    ttl: int
    reverse: ReverseConfig = field(default_factory=ReverseConfig)
    poll_interval: float = 30.0
    update_interval: float = 60.0
    log: logging.Logger = field(default_factory=lambda: common.get_logger("pipeline"))
    lock: RLock = field(default_factory=RLock)
    stop_event: Event = field(default_factory=Event)
    rosterQ: Queue[list[Endpoint]] = field(init=False)
    recordQ: Queue[list[DesiredRecord]] = field(init=False)
    threads: list[Thread] = field(default_factory=list)
    _state: dict[Stage, StageState] = field(init=False)

    def __post_init__(self) -> None:
        assert self.poll_interval > 0
        assert self.update_interval > 0
        self.rosterQ = Queue(q_size)
        self.recordQ = Queue(q_size)
        self._state = {x: StageState.Idle for x in Stage}

    @property
    def active(self) -> bool:
        """Return True if any of the threads is still running."""
        with self.lock:
            return any(x in (StageState.Running, StageState.Draining)
                       for x in self._state.values())

    def state(self, stage: Stage) -> StageState:
        """Return the state of the given stage."""
        with self.lock:
            return self._state[stage]

    def _set_state(self, stage: Stage, state: StageState) -> None:
        with self.lock:
            self.log.debug("%s stage: %s -> %s",
                           stage.name,
                           self._state[stage].name,
                           state.name)
            self._state[stage] = state

    def start(self) -> None:
        """Start the worker threads."""
        with self.lock:
            if self.threads:
                self.log.error("Pipeline has been started already.")
                return

            workers = ((Stage.Discovery, self._discovery_worker),
                       (Stage.Synthesis, self._synthesis_worker),
                       (Stage.Transmission, self._transmission_worker))

            for stage, target in workers:
                self._set_state(stage, StageState.Running)
                t: Thread = Thread(target=target,
                                   name=f"{stage.name.lower()}_worker",
                                   daemon=False)
                self.threads.append(t)

            for t in self.threads:
                t.start()

    def stop(self) -> None:
        """Tell all threads to stop."""
        self.log.info("Stopping pipeline")
        self.stop_event.set()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for all threads to finish."""
        for t in self.threads:
            t.join(timeout)
        if not self.active:
            self.log.info("Pipeline stopped")

    def _publish(self, q: Queue[T], item: T) -> bool:
        """Put <item> into <q>, unless we are told to stop first.

        Return True if the item was put into the queue.
        """
        while not self.stop_event.is_set():
            try:
                q.put(item, True, q_timeout)
                return True
            except Full:
                continue
            except ShutDown:
                return False
        return False

    def _receive(self, q: Queue[T]) -> Optional[T]:
        """Wait for an item from <q>.

        Return None if we are told to stop or the queue was shut down.
        """
        while not self.stop_event.is_set():
            try:
                return q.get(True, q_timeout)
            except Empty:
                continue
            except ShutDown:
                return None
        return None

    def _discovery_worker(self) -> None:
        """Fetch the list of online machines periodically."""
        self.log.info("Starting discovery with interval %.1fs", self.poll_interval)
        try:
            while not self.stop_event.is_set():
                try:
                    roster: list[Endpoint] = self.source.list_online_endpoints()
                except DiscoveryError as derr:
                    self.log.error("Failed to get machine list: %s", derr)
                else:
                    if not self._publish(self.rosterQ, roster):
                        break

                if self.stop_event.wait(self.poll_interval):
                    break
        finally:
            self._set_state(Stage.Discovery, StageState.Draining)
            self.rosterQ.shutdown()
            self._set_state(Stage.Discovery, StageState.Stopped)
            self.log.info("Discovery stopped")

    def _synthesis_worker(self) -> None:
        """Turn lists of machines into lists of DNS records."""
        self.log.info("Starting machine-to-record converter")
        try:
            while not self.stop_event.is_set():
                roster: Optional[list[Endpoint]] = self._receive(self.rosterQ)
                if roster is None:
                    break

                records: list[DesiredRecord] = synthesize(roster,
                                                          self.zone,
                                                          self.ttl,
                                                          self.reverse)
                self.log.debug("Converted %d machines to %d records",
                               len(roster),
                               len(records))
                if len(records) == 0:
                    continue
                if not self._publish(self.recordQ, records):
                    break
        finally:
            self._set_state(Stage.Synthesis, StageState.Draining)
            self.recordQ.shutdown()
            self._set_state(Stage.Synthesis, StageState.Stopped)
            self.log.info("Machine-to-record converter stopped")

    def _latest(self) -> tuple[Optional[list[DesiredRecord]], bool]:
        """Take everything that is waiting in the record queue without blocking.

        Return the most recent record set (or None if there was nothing),
        and a flag that is True if the queue has been shut down.
        """
        latest: Optional[list[DesiredRecord]] = None
        skipped: int = 0
        closed: bool = False

        while True:
            try:
                item = self.recordQ.get_nowait()
            except Empty:
                break
            except ShutDown:
                closed = True
                break
            if latest is not None:
                skipped += 1
            latest = item

        if skipped > 0:
            self.log.debug("Skipped %d outdated record sets", skipped)
        return latest, closed

    def _transmission_worker(self) -> None:
        """Push record sets to the DNS server."""
        self.log.info("Starting DNS updates with interval %.1fs", self.update_interval)
        try:
            records: Optional[list[DesiredRecord]] = self._receive(self.recordQ)
            if records is None:
                return
            self.updater.apply(records)

            while not self.stop_event.wait(self.update_interval):
                records, closed = self._latest()
                if records is not None:
                    self.updater.apply(records)
                if closed:
                    break
        finally:
            self._set_state(Stage.Transmission, StageState.Draining)
            self._set_state(Stage.Transmission, StageState.Stopped)
            self.log.info("DNS updating stopped")


# Local Variables: #
# python-indent: 4 #
# End: #
