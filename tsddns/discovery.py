#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-28 17:20:37 krylon>
#
# /data/code/python/tsddns/discovery.py
# created on 18. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.discovery

(c) 2026 Benjamin Walkenhorst

Fetch the list of machines in the tailnet from the Tailscale API.
"""

import logging
import time
from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import Any, Final, Optional

import requests

from tsddns import common
from tsddns.common import ErrorKind, TsddnsError
from tsddns.model import Endpoint

api_base: Final[str] = "https://api.tailscale.com/api/v2"
token_url: Final[str] = f"{api_base}/oauth/token"
oauth_scope: Final[str] = "devices:core:read"
http_timeout: Final[float] = 30.0

# Renew OAuth tokens this many seconds before they expire.
token_slack: Final[float] = 60.0


class DiscoveryError(TsddnsError):
    """DiscoveryError indicates a failure to get the device list."""

    kind = ErrorKind.Discovery


@dataclass(kw_only=True, slots=True)
class TailnetClient:
    """TailnetClient lists the devices in a tailnet.

    Either an API key or an OAuth client ID and secret must be given.
    """

    tailnet: str
    api_key: str = field(default="", repr=False)
    client_id: str = ""
    client_secret: str = field(default="", repr=False)
    timeout: float = http_timeout
    session: requests.Session = field(default_factory=requests.Session)
    log: logging.Logger = field(default_factory=lambda: common.get_logger("discovery"))
    _token: str = field(default="", repr=False)
    _token_expires: float = 0.0

    def __post_init__(self) -> None:
        if self.tailnet == "":
            raise ValueError("tailnet is required")
        if self.api_key == "" and (self.client_id == "" or self.client_secret == ""):
            raise ValueError("Either an API key or an OAuth client ID and secret are required")

    @property
    def oauth(self) -> bool:
        """Return True if we authenticate using OAuth client credentials."""
        return self.api_key == ""

    def _get_token(self) -> str:
        """Return an OAuth access token, fetching a new one if needed."""
        now: Final[float] = time.monotonic()
        if self._token != "" and now < self._token_expires:
            return self._token

        self.log.debug("Request OAuth access token for client %s", self.client_id)
        try:
            res = self.session.post(token_url,
                                    data={
                                        "client_id": self.client_id,
                                        "client_secret": self.client_secret,
                                        "grant_type": "client_credentials",
                                        "scope": oauth_scope,
                                    },
                                    timeout=self.timeout)
            res.raise_for_status()
            data = res.json()
            self._token = data["access_token"]
            expires_in: float = float(data.get("expires_in", 3600))
        except requests.RequestException as rerr:
            raise DiscoveryError(f"Failed to get OAuth token: {rerr}",
                                 tailnet=self.tailnet) from rerr
        except (ValueError, KeyError, TypeError) as perr:
            raise DiscoveryError(f"Cannot parse OAuth token response: {perr}",
                                 tailnet=self.tailnet) from perr

        self._token_expires = now + max(expires_in - token_slack, 0.0)
        return self._token

    def _fetch_devices(self) -> list[dict[str, Any]]:
        url: Final[str] = f"{api_base}/tailnet/{self.tailnet}/devices"
        kwargs: dict[str, Any] = {"timeout": self.timeout}
        if self.oauth:
            kwargs["headers"] = {"Authorization": f"Bearer {self._get_token()}"}
        else:
            kwargs["auth"] = (self.api_key, "")

        try:
            res = self.session.get(url, **kwargs)
            res.raise_for_status()
            devices = res.json().get("devices", [])
        except requests.RequestException as rerr:
            raise DiscoveryError(f"Fetching devices failed: {rerr}",
                                 tailnet=self.tailnet) from rerr
        except (ValueError, AttributeError) as perr:
            raise DiscoveryError(f"Cannot parse device list: {perr}",
                                 tailnet=self.tailnet) from perr

        if not isinstance(devices, list):
            raise DiscoveryError("Device list is not a list",
                                 tailnet=self.tailnet)
        return devices

    def list_endpoints(self) -> list[Endpoint]:
        """Return all devices in the tailnet."""
        self.log.debug("Fetching machines from Tailscale")
        endpoints: list[Endpoint] = []

        for dev in self._fetch_devices():
            if not isinstance(dev, dict):
                self.log.debug("Ignore malformed device entry: %r", dev)
                continue
            ep: Optional[Endpoint] = device_to_endpoint(dev)
            if ep is None:
                self.log.debug("Ignore device without ID: %s", dev)
                continue
            endpoints.append(ep)

        self.log.debug("Found %d machines", len(endpoints))
        return endpoints

    def list_online_endpoints(self) -> list[Endpoint]:
        """Return the devices in the tailnet that are online."""
        online: Final[list[Endpoint]] = [x for x in self.list_endpoints() if x.online]
        self.log.debug("Found %d online machines", len(online))
        return online


def device_to_endpoint(dev: dict[str, Any]) -> Optional[Endpoint]:
    """Convert a device as returned by the API into an Endpoint.

    The first IPv4 and the first IPv6 address of the device are used,
    anything that does not parse as an address is ignored.
    A device counts as online if it is authorized.
    """
    ident: str = str(dev.get("id") or dev.get("nodeId") or "")
    if ident == "":
        return None

    ipv4: Optional[IPv4Address] = None
    ipv6: Optional[IPv6Address] = None

    for raw in dev.get("addresses") or []:
        try:
            addr = ip_address(raw)
        except ValueError:
            continue
        match addr:
            case IPv4Address() if ipv4 is None:
                ipv4 = addr
            case IPv6Address() if ipv6 is None:
                ipv6 = addr

    return Endpoint(ident=ident,
                    name=str(dev.get("name") or ""),
                    ipv4=ipv4,
                    ipv6=ipv6,
                    online=bool(dev.get("authorized", False)))


# Local Variables: #
# python-indent: 4 #
# End: #
