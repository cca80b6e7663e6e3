# Copyright Red Hat
#
# treecmp/compare/options.py - Tree comparison options
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree comparison options.
"""
from dataclasses import dataclass, field, fields
from typing import Tuple, Union
from argparse import Namespace
import logging

from treecmp import TreeCmpArgumentError

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Default read size for streaming content comparison.
DEFAULT_CHUNK_SIZE = 2**16


@dataclass(frozen=True)
class CompareOptions:
    """
    Directory tree comparison options.
    """

    #: Follow symlinks when walking directory trees
    follow_symlinks: bool = True
    #: File patterns to include (glob notation)
    file_patterns: Tuple[str, ...] = field(default_factory=tuple)
    #: File patterns to exclude (glob notation)
    exclude_patterns: Tuple[str, ...] = field(default_factory=tuple)
    #: Maximum number of concurrent content comparisons (0 for default)
    max_workers: int = 0
    #: Read size used when comparing file content
    chunk_size: int = DEFAULT_CHUNK_SIZE
    #: Treat files of unequal size as different without reading them
    size_check: bool = True

    def __post_init__(self):
        """
        Validate numeric option values.

        :raises: ``TreeCmpArgumentError`` if ``max_workers`` is negative or
                 ``chunk_size`` is not positive.
        """
        if self.max_workers < 0:
            raise TreeCmpArgumentError(
                f"max_workers cannot be negative: {self.max_workers}"
            )
        if self.chunk_size <= 0:
            raise TreeCmpArgumentError(
                f"chunk_size must be positive: {self.chunk_size}"
            )

    def __str__(self):
        """
        Return a human readable string representation of this
        ``CompareOptions`` instance.

        :returns: A human readable string.
        :rtype: ``str``
        """
        items = [
            (key, val) if not isinstance(val, tuple) else (key, " ".join(val))
            for key, val in self.__dict__.items()
        ]
        return "\n".join(f"{key}={val}" for key, val in items)

    @classmethod
    def from_cmd_args(cls, cmd_args: Namespace) -> "CompareOptions":
        """
        Initialise CompareOptions from command line arguments.

        Construct a new ``CompareOptions`` object from the command line
        arguments in ``cmd_args``. Arguments that are absent or unset keep
        their default values.

        :param cmd_args: The command line selection arguments.
        :type cmd_args: ``Namespace``
        :returns: A new ``CompareOptions`` instance
        :rtype: ``CompareOptions``
        """

        def get_value(name: str) -> Union[bool, int, Tuple[str, ...]]:
            attr = getattr(cmd_args, name)
            if isinstance(attr, list):
                return tuple(attr)
            if attr is None and name in ("file_patterns", "exclude_patterns"):
                return ()
            return attr

        field_names = {f.name for f in fields(cls)}
        kwargs = {
            name: value
            for name in field_names
            if hasattr(cmd_args, name) and (value := get_value(name)) is not None
        }
        options = cls(**kwargs)
        _log_debug("Initialised CompareOptions from arguments: %s", repr(options))
        return options
