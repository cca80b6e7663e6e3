# Copyright Red Hat
#
# treecmp/compare/treewalk.py - Tree comparison tree walk
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree walking support for treecmp.
"""
from typing import FrozenSet, List, Optional, Tuple
from fnmatch import fnmatch
import logging
import errno
import stat
import os

from treecmp import TREECMP_SUBSYSTEM_WALK

from .difftypes import DiagnosticKind, DiagnosticSink, emit_diagnostic
from .options import CompareOptions
from .pathmap import relative_path

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Errors from stat() on a symbolic link whose target cannot be resolved
_DANGLING_ERRNOS = (errno.ENOENT, errno.ENOTDIR, errno.ELOOP)


def _log_debug_walk(msg, *args, **kwargs):
    """A wrapper for walk subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TREECMP_SUBSYSTEM_WALK}, **kwargs)


def _dir_id(path: str) -> Optional[Tuple[int, int]]:
    """
    Return the ``(st_dev, st_ino)`` identity of the directory at ``path``,
    or ``None`` if it cannot be stat'd.
    """
    try:
        st = os.stat(path)
    except OSError:
        return None
    return (st.st_dev, st.st_ino)


def _matches(rel_path: str, patterns: Tuple[str, ...]) -> bool:
    """
    Return ``True`` if ``rel_path`` matches any glob in ``patterns``.
    """
    return any(fnmatch(rel_path, pat) for pat in patterns)


# pylint: disable=too-many-locals,too-many-branches
def walk_tree(
    root: str,
    options: Optional[CompareOptions] = None,
    on_warning: Optional[DiagnosticSink] = None,
) -> List[str]:
    """
    Walk the directory tree at ``root`` and return the absolute paths of all
    regular files beneath it.

    Directories that cannot be read are reported to ``on_warning`` as
    ``DiagnosticKind.TRAVERSAL`` diagnostics and skipped: the walk continues
    with their siblings. Files that cannot be stat'd are reported as
    ``DiagnosticKind.METADATA`` diagnostics and skipped. A directory that is
    also one of its own ancestors (a symbolic link loop) is not descended.

    :param root: The directory to walk. The caller guarantees that this
                 exists and is a directory.
    :type root: ``str``
    :param options: Options controlling the walk.
    :type options: ``Optional[CompareOptions]``
    :param on_warning: An optional diagnostic sink.
    :type on_warning: ``Optional[DiagnosticSink]``
    :returns: A list of absolute file paths in file system order.
    :rtype: ``List[str]``
    """
    options = options or CompareOptions()
    root = os.path.abspath(root)
    follow_symlinks = options.follow_symlinks
    exclude_patterns = options.exclude_patterns
    file_patterns = options.file_patterns

    def _onerror(err: OSError):
        where = err.filename or root
        emit_diagnostic(
            on_warning,
            DiagnosticKind.TRAVERSAL,
            where,
            f"Could not read directory {where}: {err.strerror or err}",
        )

    _log_info("Walking %s (follow_symlinks=%s)", root, follow_symlinks)

    # map of directory path: identities of that directory's ancestors
    ancestry = {root: frozenset()}
    files = []
    excluded = 0

    for dirpath, dirnames, filenames in os.walk(
        root, onerror=_onerror, followlinks=follow_symlinks
    ):
        this_id = _dir_id(dirpath)
        seen: FrozenSet[Tuple[int, int]] = ancestry.pop(dirpath, frozenset())
        if this_id is not None:
            seen = seen | {this_id}

        descend = []
        for name in dirnames:
            path = os.path.join(dirpath, name)
            if exclude_patterns and _matches(
                relative_path(path, root), exclude_patterns
            ):
                excluded += 1
                continue
            if os.path.islink(path) and not follow_symlinks:
                _log_debug_walk("Skipping symbolic link '%s'", path)
                continue
            child_id = _dir_id(path)
            if child_id is not None and child_id in seen:
                emit_diagnostic(
                    on_warning,
                    DiagnosticKind.TRAVERSAL,
                    path,
                    f"Not descending into {path}: symbolic link loop",
                )
                continue
            ancestry[path] = seen
            descend.append(name)
        dirnames[:] = descend

        for name in filenames:
            path = os.path.join(dirpath, name)
            if exclude_patterns or file_patterns:
                rel_path = relative_path(path, root)
                if exclude_patterns and _matches(rel_path, exclude_patterns):
                    excluded += 1
                    continue
                if file_patterns and not _matches(rel_path, file_patterns):
                    excluded += 1
                    continue
            if not follow_symlinks and os.path.islink(path):
                _log_debug_walk("Skipping symbolic link '%s'", path)
                continue
            try:
                st = os.stat(path)
            except OSError as err:
                if err.errno in _DANGLING_ERRNOS and os.path.islink(path):
                    _log_debug_walk("Skipping dangling symbolic link '%s'", path)
                    continue
                emit_diagnostic(
                    on_warning,
                    DiagnosticKind.METADATA,
                    path,
                    f"Could not stat {path}: {err.strerror or err}",
                )
                continue
            if not stat.S_ISREG(st.st_mode):
                _log_debug_walk("Skipping non-regular file '%s'", path)
                continue
            files.append(path)

    _log_debug("Found %d files under %s (excluded %d)", len(files), root, excluded)
    return files


__all__ = [
    "walk_tree",
]
