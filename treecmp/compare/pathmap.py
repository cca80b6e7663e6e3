# Copyright Red Hat
#
# treecmp/compare/pathmap.py - Tree comparison path mapping
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Relative path mapping for walked trees.
"""
from typing import Any, Dict, Iterable, Mapping, Optional
from dataclasses import dataclass
from datetime import datetime
from pathlib import PurePath
from types import MappingProxyType
import logging
import os

from treecmp import TREECMP_SUBSYSTEM_WALK

from .difftypes import DiagnosticKind, DiagnosticSink, emit_diagnostic

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_walk(msg, *args, **kwargs):
    """A wrapper for walk subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TREECMP_SUBSYSTEM_WALK}, **kwargs)


@dataclass(frozen=True)
class FileEntry:
    """
    Representation of a single regular file within one compared tree.
    """

    #: The path relative to the tree root, using '/' separators
    relative_path: str
    #: The full path from the host perspective
    absolute_path: str
    #: File size returned by ``stat()``
    size: int
    #: File modification time returned by ``stat()``
    mtime: float

    def __str__(self):
        """
        Return a string representation of this ``FileEntry`` object.

        :returns: A human readable representation of this ``FileEntry``.
        :rtype: ``str``
        """
        indent = 4 * " "
        return (
            f"{indent}path: {self.relative_path}\n"
            f"{indent}full_path: {self.absolute_path}\n"
            f"{indent}size: {self.size}\n"
            f"{indent}mtime: {datetime.fromtimestamp(self.mtime).isoformat()}"
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``FileEntry`` object into a dictionary representation
        suitable for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """
        return {
            "path": self.relative_path,
            "full_path": self.absolute_path,
            "size": self.size,
            "mtime": self.mtime,
        }


#: Read-only mapping of relative path to ``FileEntry``.
PathMapping = Mapping[str, FileEntry]


def relative_path(path: str, root: str) -> str:
    """
    Return ``path`` relative to ``root`` with platform-neutral '/'
    separators.

    :param path: An absolute path beneath ``root``.
    :type path: ``str``
    :param root: The tree root.
    :type root: ``str``
    :returns: The '/' separated relative path.
    :rtype: ``str``
    """
    return PurePath(os.path.relpath(path, root)).as_posix()


def printable_path(path: str) -> str:
    """
    Return ``path`` in a form that can be written to any text stream.

    Bytes of a file name that are not valid UTF-8 (held as surrogate
    escapes by ``os`` functions) are rendered as ``\\xNN`` sequences.

    :param path: The path to render.
    :type path: ``str``
    :returns: A printable version of ``path``.
    :rtype: ``str``
    """
    return os.fsencode(path).decode("utf-8", "backslashreplace")


def build_map(
    paths: Iterable[str],
    root: str,
    on_warning: Optional[DiagnosticSink] = None,
) -> PathMapping:
    """
    Build a ``PathMapping`` from the absolute file paths in ``paths``.

    Files whose metadata cannot be read (for example because they were
    removed after the walk) are dropped from the mapping and reported to
    ``on_warning`` as ``DiagnosticKind.METADATA`` diagnostics.

    :param paths: Absolute paths of regular files beneath ``root``.
    :type paths: ``Iterable[str]``
    :param root: The root the paths were walked from.
    :type root: ``str``
    :param on_warning: An optional diagnostic sink.
    :type on_warning: ``Optional[DiagnosticSink]``
    :returns: A read-only mapping of relative path to ``FileEntry``.
    :rtype: ``PathMapping``
    """
    root = os.path.abspath(root)
    mapping: Dict[str, FileEntry] = {}
    for path in paths:
        rel_path = relative_path(path, root)
        try:
            st = os.stat(path)
        except OSError as err:
            emit_diagnostic(
                on_warning,
                DiagnosticKind.METADATA,
                path,
                f"Could not stat {path}: {err.strerror or err}",
            )
            continue
        if rel_path in mapping:
            _log_debug_walk("Replacing duplicate relative path '%s'", rel_path)
        mapping[rel_path] = FileEntry(rel_path, path, st.st_size, st.st_mtime)

    _log_debug("Mapped %d paths under %s", len(mapping), root)
    return MappingProxyType(mapping)


__all__ = [
    "FileEntry",
    "PathMapping",
    "build_map",
    "printable_path",
    "relative_path",
]
