# Copyright Red Hat
#
# treecmp/compare/contentcmp.py - Tree comparison content comparison
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Byte-for-byte file content comparison.
"""
from typing import Optional
import logging
import os

from treecmp import TREECMP_SUBSYSTEM_COMPARE

from .difftypes import DiagnosticKind, DiagnosticSink, emit_diagnostic
from .options import CompareOptions

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TREECMP_SUBSYSTEM_COMPARE}, **kwargs)


def contents_differ(
    path_a: str,
    path_b: str,
    options: Optional[CompareOptions] = None,
    on_warning: Optional[DiagnosticSink] = None,
) -> bool:
    """
    Compare the content of two files byte for byte.

    Both files are read in ``options.chunk_size`` blocks until a mismatch
    or end of file is found. If ``options.size_check`` is set, files whose
    sizes differ are reported as different without reading them.

    If either file cannot be opened or read the failure is reported to
    ``on_warning`` as a ``DiagnosticKind.READ`` diagnostic and the pair is
    treated as different: a pair is never reported identical unless the
    comparison completed.

    :param path_a: The first file to compare.
    :type path_a: ``str``
    :param path_b: The second file to compare.
    :type path_b: ``str``
    :param options: Options controlling the comparison.
    :type options: ``Optional[CompareOptions]``
    :param on_warning: An optional diagnostic sink.
    :type on_warning: ``Optional[DiagnosticSink]``
    :returns: ``False`` if the files have identical content or ``True``
              otherwise.
    :rtype: ``bool``
    """
    options = options or CompareOptions()
    chunk_size = options.chunk_size
    try:
        with open(path_a, "rb") as file_a, open(path_b, "rb") as file_b:
            if options.size_check:
                size_a = os.fstat(file_a.fileno()).st_size
                size_b = os.fstat(file_b.fileno()).st_size
                if size_a != size_b:
                    _log_debug_compare(
                        "Size mismatch for '%s' (%d) and '%s' (%d)",
                        path_a,
                        size_a,
                        path_b,
                        size_b,
                    )
                    return True
            while True:
                chunk_a = file_a.read(chunk_size)
                chunk_b = file_b.read(chunk_size)
                if chunk_a != chunk_b:
                    _log_debug_compare("Content differs: '%s' '%s'", path_a, path_b)
                    return True
                if not chunk_a:
                    return False
    except OSError as err:
        emit_diagnostic(
            on_warning,
            DiagnosticKind.READ,
            err.filename or path_a,
            f"Could not compare files {path_a} and {path_b}: {err.strerror or err}",
        )
        return True


__all__ = [
    "contents_differ",
]
