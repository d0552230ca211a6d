#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-12 17:02:11 krylon>
#
# /data/code/python/tsddns/__init__.py
# created on 12. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.__init__

(c) 2026 Benjamin Walkenhorst

tsddns keeps the A, AAAA and PTR records of a DNS server in sync with the
machines in a Tailscale tailnet, using TSIG-signed dynamic updates.
"""

# Local Variables: #
# python-indent: 4 #
# End: #
