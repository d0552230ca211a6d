#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-19 18:22:41 krylon>
#
# /data/code/python/tsddns/common.py
# created on 12. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the tsddns DNS updater. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
tsddns.common

(c) 2026 Benjamin Walkenhorst
"""

import logging
import logging.handlers
import os
import pathlib
import sys
from enum import Enum, auto
from threading import Lock
from typing import Any, Final

AppName: Final[str] = "tsddns"
AppVersion: Final[str] = "0.1.0"

log_level_tty: int = logging.INFO

log_levels: Final[dict[str, int]] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class ErrorKind(Enum):
    """ErrorKind tags the broad category an error belongs to."""

    Configuration = auto()
    Classification = auto()
    Transport = auto()
    Startup = auto()
    Discovery = auto()


class TsddnsError(Exception):
    """Base class for application-specific Exceptions.

    Subclasses set <kind>, keyword arguments passed to the constructor are
    kept as structured context and are available as attributes.
    """

    kind: ErrorKind = ErrorKind.Startup

    def __init__(self, msg: str = "", **ctx: Any) -> None:
        super().__init__(msg)
        self.ctx: dict[str, Any] = ctx
        for key, val in ctx.items():
            setattr(self, key, val)


class Path:
    """Holds the paths of folders and files used by the application"""

    __base: str

    def __init__(self, root: str = os.path.expanduser(f"~/.{AppName.lower()}.d")) -> None:  # noqa
        self.__base = root

    def base(self, folder: str = "") -> pathlib.Path:
        """
        Return the base directory for application specific files.

        If path is a non-empty string, set the base directory to its value.
        """
        if folder != "":
            self.__base = folder
        return pathlib.Path(self.__base)

    @property
    def log(self) -> pathlib.Path:
        """Return the path to the log file"""
        return pathlib.Path(os.path.join(self.__base, f"{AppName.lower()}.log"))

    @property
    def config(self) -> pathlib.Path:
        """Return the path of the configuration file"""
        return pathlib.Path(os.path.join(self.__base, f"{AppName.lower()}.toml"))


path: Path = Path(os.path.expanduser(f"~/.{AppName.lower()}.d"))

_lock: Final[Lock] = Lock()  # pylint: disable-msg=C0103
_cache: Final[dict[str, logging.Logger]] = {}  # pylint: disable-msg=C0103


def set_basedir(folder: str) -> None:
    """Set the base dir to the speficied path."""
    path.base(str(folder))
    init_app()


def init_app() -> None:
    """Initialize the application environment"""
    if not os.path.isdir(path.base()):
        os.makedirs(path.base(), exist_ok=True)


def set_log_level(level: int) -> None:
    """Set the level of the console handlers, including those of existing loggers."""
    global log_level_tty  # pylint: disable-msg=W0603
    with _lock:
        log_level_tty = level
        for log_obj in _cache.values():
            for handler in log_obj.handlers:
                if isinstance(handler, logging.StreamHandler) and \
                   not isinstance(handler, logging.FileHandler):
                    handler.setLevel(level)


def get_logger(name: str, terminal: bool = True) -> logging.Logger:
    """Create and return a logger with the given name"""
    with _lock:
        init_app()

        if name in _cache:
            return _cache[name]

        log_format = "%(asctime)s (%(name)-16s / line %(lineno)-4d) " + \
            "- %(levelname)-8s %(message)s"
        max_log_size = 4 * 2**20  # 4 MiB
        max_log_count = 10

        log_obj = logging.getLogger(f"{AppName}.{name}")
        log_obj.setLevel(logging.DEBUG)
        log_obj.propagate = False
        log_file_handler = logging.handlers.RotatingFileHandler(path.log,
                                                                'a',
                                                                max_log_size,
                                                                max_log_count)

        log_fmt = logging.Formatter(log_format)
        log_file_handler.setFormatter(log_fmt)
        log_obj.addHandler(log_file_handler)

        if terminal:
            log_console_handler = logging.StreamHandler(sys.stdout)
            log_console_handler.setFormatter(log_fmt)
            log_console_handler.setLevel(log_level_tty)
            log_obj.addHandler(log_console_handler)

        _cache[name] = log_obj
        return log_obj


# Local Variables: #
# python-indent: 4 #
# End: #
