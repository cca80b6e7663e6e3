# Copyright Red Hat
#
# treecmp/_treecmp.py - Tree comparison global definitions
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Global definitions for the top-level treecmp package.
"""
import logging
import math

_log = logging.getLogger("treecmp")

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

# Treecmp debugging subsystem mask
TREECMP_DEBUG_WALK = 1
TREECMP_DEBUG_COMPARE = 2
TREECMP_DEBUG_COMMAND = 4
TREECMP_DEBUG_ALL = TREECMP_DEBUG_WALK | TREECMP_DEBUG_COMPARE | TREECMP_DEBUG_COMMAND

# Treecmp debugging subsystem names
TREECMP_SUBSYSTEM_WALK = "treecmp.walk"
TREECMP_SUBSYSTEM_COMPARE = "treecmp.compare"
TREECMP_SUBSYSTEM_COMMAND = "treecmp.command"

_DEBUG_MASK_TO_SUBSYSTEM = {
    TREECMP_DEBUG_WALK: TREECMP_SUBSYSTEM_WALK,
    TREECMP_DEBUG_COMPARE: TREECMP_SUBSYSTEM_COMPARE,
    TREECMP_DEBUG_COMMAND: TREECMP_SUBSYSTEM_COMMAND,
}

_debug_subsystems = set()


class SubsystemFilter(logging.Filter):
    """
    Filters DEBUG records based on a set of enabled subsystem names.
    Non-DEBUG records or DEBUG records without a 'subsystem' attribute
    are always passed through.
    """

    def __init__(self, name=""):
        super().__init__(name)
        self.enabled_subsystems = set(_debug_subsystems)

    def filter(self, record):
        if record.levelno != logging.DEBUG:
            return True

        if not hasattr(record, "subsystem"):
            return True

        return record.subsystem in self.enabled_subsystems

    def set_debug_subsystems(self, subsystems):
        """Sets the collection of subsystems to allow."""
        self.enabled_subsystems = set(subsystems)


def get_debug_mask():
    """
    Return the current debug mask for the ``treecmp`` package.

    :returns: The current debug mask value
    :rtype: int
    """
    enabled_subsystems = set(_debug_subsystems)
    treecmp_log = logging.getLogger("treecmp")

    for handler in treecmp_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                enabled_subsystems.update(f.enabled_subsystems)

    mask_map = {v: k for k, v in _DEBUG_MASK_TO_SUBSYSTEM.items()}
    mask = 0
    for subsystem_name in enabled_subsystems:
        mask |= mask_map.get(subsystem_name, 0)
    return mask


def set_debug_mask(mask):
    """
    Set the debug mask for the ``treecmp`` package.

    :param mask: the logical OR of the ``TREECMP_DEBUG_*``
                 values to log.
    :rtype: None
    """
    # pylint: disable=global-statement
    global _debug_subsystems

    if mask < 0 or mask > TREECMP_DEBUG_ALL:
        raise TreeCmpArgumentError(f"Invalid treecmp debug mask: {mask}")

    enabled_subsystems = [
        subsystem_name
        for flag, subsystem_name in _DEBUG_MASK_TO_SUBSYSTEM.items()
        if mask & flag
    ]

    treecmp_log = logging.getLogger("treecmp")
    for handler in treecmp_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                f.set_debug_subsystems(enabled_subsystems)

    _debug_subsystems = set(enabled_subsystems)


#
# Treecmp exception types
#


class TreeCmpError(Exception):
    """
    Base class for tree comparison errors.
    """


class TreeCmpPathError(TreeCmpError):
    """
    An invalid comparison root was supplied: the path does not exist or
    is not a directory.
    """


class TreeCmpArgumentError(TreeCmpError, ValueError):
    """
    An invalid argument was passed to a treecmp API call.
    """


def size_fmt(value):
    """
    Format a size in bytes as a human readable string.

    :param value: The integer value to format.
    :returns: A human readable string reflecting value.
    """
    suffixes = ["B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB", "ZiB"]
    if value == 0:
        return "0B"
    magnitude = math.floor(math.log(abs(value), 1024))
    val = value / math.pow(1024, magnitude)
    if magnitude > 7:
        return f"{val:.1f}YiB"
    return f"{val:3.1f}{suffixes[magnitude]}"


__all__ = [
    "TREECMP_DEBUG_WALK",
    "TREECMP_DEBUG_COMPARE",
    "TREECMP_DEBUG_COMMAND",
    "TREECMP_DEBUG_ALL",
    "TREECMP_SUBSYSTEM_WALK",
    "TREECMP_SUBSYSTEM_COMPARE",
    "TREECMP_SUBSYSTEM_COMMAND",
    "SubsystemFilter",
    "get_debug_mask",
    "set_debug_mask",
    "TreeCmpError",
    "TreeCmpPathError",
    "TreeCmpArgumentError",
    "size_fmt",
]
