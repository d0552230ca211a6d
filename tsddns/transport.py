#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-26 20:48:19 krylon>
#
# /data/code/python/tsddns/transport.py
# created on 15. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.transport

(c) 2026 Benjamin Walkenhorst

Sign update transactions and send them to the DNS server.
"""

import binascii
import logging
from dataclasses import dataclass, field
from ipaddress import ip_address
from typing import Final, Optional

import dns.exception
import dns.message
import dns.name
import dns.query
import dns.rcode
import dns.rdatatype
import dns.tsig
import dns.tsigkeyring
from dns.resolver import (NXDOMAIN, NoAnswer, NoNameservers,
                          NoResolverConfiguration, Resolver)

from tsddns import common
from tsddns.common import ErrorKind, TsddnsError
from tsddns.model import Credential
from tsddns.zone import UpdateTransaction

algorithms: Final[dict[str, dns.name.Name]] = {
    "hmac-md5": dns.tsig.HMAC_MD5,
    "hmac-sha1": dns.tsig.HMAC_SHA1,
    "hmac-sha256": dns.tsig.HMAC_SHA256,
    "hmac-sha384": dns.tsig.HMAC_SHA384,
    "hmac-sha512": dns.tsig.HMAC_SHA512,
}

check_timeout: Final[float] = 5.0


class TransportError(TsddnsError):
    """TransportError indicates a failure to deliver an update to the server."""

    kind = ErrorKind.Transport


class UpdateRefused(TransportError):
    """UpdateRefused means the server answered with an error code."""


class UnsupportedAlgorithm(TsddnsError):
    """UnsupportedAlgorithm is raised for TSIG algorithms we do not know."""

    kind = ErrorKind.Startup


class StartupError(TsddnsError):
    """StartupError indicates a problem that keeps us from starting at all."""

    kind = ErrorKind.Startup


@dataclass(kw_only=True, slots=True)
class Signer:
    """Signer holds the TSIG key used to sign updates."""

    cred: Credential
    keyring: dict = field(init=False)
    keyname: dns.name.Name = field(init=False)
    algorithm: dns.name.Name = field(init=False)

    def __post_init__(self) -> None:
        alg: Final[str] = self.cred.algorithm.lower().rstrip(".")
        if alg not in algorithms:
            raise UnsupportedAlgorithm(f"Unsupported TSIG algorithm: {self.cred.algorithm}",
                                       algorithm=self.cred.algorithm)
        self.algorithm = algorithms[alg]
        self.keyname = dns.name.from_text(self.cred.name)
        try:
            self.keyring = dns.tsigkeyring.from_text(
                {self.cred.name: (self.algorithm, self.cred.secret)})
        except (binascii.Error, ValueError) as err:
            raise StartupError(f"TSIG secret for key {self.cred.name} is not valid base64: {err}",
                               key=self.cred.name) from err

    def sign(self, tx: UpdateTransaction) -> dns.message.Message:
        """Return <tx> as an UPDATE message that will be signed when sent."""
        return tx.to_message(keyring=self.keyring,
                             keyname=self.keyname,
                             keyalgorithm=self.algorithm)


@dataclass(kw_only=True, slots=True)
class Transport:
    """Transport sends signed updates to the authoritative server."""

    server: str
    cred: Credential
    zone: str
    port: int = 53
    timeout: float = 10.0
    tcp: bool = False
    log: logging.Logger = field(default_factory=lambda: common.get_logger("transport"))
    signer: Signer = field(init=False)
    res: Optional[Resolver] = None

    def __post_init__(self) -> None:
        self.signer = Signer(cred=self.cred)

    def resolver(self) -> Resolver:
        """Return the Resolver used to look up the server's address."""
        if self.res is None:
            self.res = Resolver()
            self.res.timeout = self.timeout
            self.res.lifetime = self.timeout
        return self.res

    def server_address(self) -> str:
        """Return the IP address of the server, resolving its name if necessary."""
        try:
            return str(ip_address(self.server))
        except ValueError:
            pass

        try:
            reply = self.resolver().resolve_name(self.server)
            for addr in reply.addresses():
                return addr
        except (NXDOMAIN, NoAnswer, NoNameservers, NoResolverConfiguration,
                dns.exception.Timeout) as err:
            raise TransportError(f"Cannot resolve server name {self.server}: {err}",
                                 server=self.server) from err
        except dns.exception.DNSException as derr:
            raise TransportError(f"{derr.__class__.__name__} resolving server name "
                                 f"{self.server}: {derr}",
                                 server=self.server) from derr
        raise TransportError(f"Server name {self.server} has no addresses",
                             server=self.server)

    def exchange(self, msg: dns.message.Message, timeout: float) -> dns.message.Message:
        """Send <msg> to the server and return the response."""
        where: Final[str] = self.server_address()
        try:
            if self.tcp:
                return dns.query.tcp(msg, where, timeout=timeout, port=self.port)
            return dns.query.udp(msg, where, timeout=timeout, port=self.port)
        except dns.exception.Timeout as terr:
            raise TransportError(f"Timeout talking to {self.server}:{self.port}",
                                 server=self.server) from terr
        except (EOFError, OSError) as serr:
            raise TransportError(f"{serr.__class__.__name__} talking to "
                                 f"{self.server}:{self.port}: {serr}",
                                 server=self.server) from serr
        except dns.exception.DNSException as derr:
            raise TransportError(f"{derr.__class__.__name__} talking to "
                                 f"{self.server}:{self.port}: {derr}",
                                 server=self.server) from derr

    def send(self, tx: UpdateTransaction) -> None:
        """Sign and send <tx>. Raise TransportError if anything goes wrong."""
        try:
            msg: dns.message.Message = self.signer.sign(tx)
        except dns.exception.DNSException as derr:
            raise TransportError(f"Cannot build update for zone {tx.zone}: {derr}",
                                 zone=tx.zone) from derr
        self.log.debug("Send update with %d operations for zone %s to %s:%d:\n%s",
                       len(tx),
                       tx.zone,
                       self.server,
                       self.port,
                       msg)

        response: Final[dns.message.Message] = self.exchange(msg, self.timeout)
        rcode: Final[dns.rcode.Rcode] = response.rcode()
        if rcode != dns.rcode.NOERROR:
            raise UpdateRefused(f"Update of zone {tx.zone} failed with {dns.rcode.to_text(rcode)}",
                                zone=tx.zone,
                                rcode=rcode)

    def validate_connection(self, timeout: Optional[float] = None) -> None:
        """Query the server for the SOA record of our zone.

        Raise StartupError if we do not get a proper answer.
        """
        if timeout is None:
            timeout = check_timeout

        self.log.debug("Validate connection to %s:%d", self.server, self.port)
        try:
            query: dns.message.Message = dns.message.make_query(self.zone,
                                                                dns.rdatatype.SOA)
        except dns.exception.DNSException as derr:
            raise StartupError(f"Invalid zone name {self.zone}: {derr}",
                               zone=self.zone) from derr

        try:
            response: dns.message.Message = self.exchange(query, timeout)
        except TransportError as terr:
            raise StartupError(f"Connection test failed: {terr}",
                               server=self.server) from terr

        rcode: Final[dns.rcode.Rcode] = response.rcode()
        if rcode != dns.rcode.NOERROR:
            raise StartupError(f"Connection test failed with {dns.rcode.to_text(rcode)}",
                               server=self.server,
                               rcode=rcode)
        self.log.info("Successfully validated connection to %s:%d",
                      self.server,
                      self.port)


# Local Variables: #
# python-indent: 4 #
# End: #
