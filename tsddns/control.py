#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-27 19:03:44 krylon>
#
# /data/code/python/tsddns/control.py
# created on 17. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.control

(c) 2026 Benjamin Walkenhorst

This file contains data types for keeping track of the pipeline's worker threads.
"""

from enum import Enum, auto


class Stage(Enum):
    """Stage identifies one of the threads of the pipeline."""

    Discovery = auto()
    Synthesis = auto()
    Transmission = auto()


class StageState(Enum):
    """StageState is the life cycle state of a Stage.

    A Stage goes from Idle to Running when its thread starts, to Draining
    once it has been told to stop and finishes what it is doing, and ends
    up Stopped.
    """

    Idle = auto()
    Running = auto()
    Draining = auto()
    Stopped = auto()


# Local Variables: #
# python-indent: 4 #
# End: #
