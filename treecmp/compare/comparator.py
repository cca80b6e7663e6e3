# Copyright Red Hat
#
# treecmp/compare/comparator.py - Tree comparison folder comparator
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Top-level tree comparison interface.
"""
from typing import List, Optional
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from math import floor
import threading
import logging
import os

from treecmp import TreeCmpPathError

from .difftypes import Diagnostic, DiagnosticSink
from .options import CompareOptions
from .pathmap import build_map
from .reconcile import reconcile
from .results import ComparisonResult
from .treewalk import walk_tree

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


class DiagnosticCollector:
    """
    Thread-safe diagnostic sink that records every ``Diagnostic`` it
    receives and forwards it to an optional downstream sink.
    """

    def __init__(self, forward: Optional[DiagnosticSink] = None):
        self.forward = forward
        self.diagnostics: List[Diagnostic] = []
        self._lock = threading.Lock()

    def __call__(self, diag: Diagnostic):
        with self._lock:
            self.diagnostics.append(diag)
            if self.forward is not None:
                self.forward(diag)


def check_root(folder: str):
    """
    Check that ``folder`` exists and is a directory.

    :param folder: The comparison root to check.
    :type folder: ``str``
    :raises: ``TreeCmpPathError`` if the path does not exist or is not a
             directory.
    """
    if not os.path.exists(folder):
        raise TreeCmpPathError(f"'{folder}' does not exist")
    if not os.path.isdir(folder):
        raise TreeCmpPathError(f"'{folder}' is not a directory")


class FolderComparator:
    """
    Top-level interface for comparing two directory trees.
    """

    def __init__(self, options: Optional[CompareOptions] = None):
        """
        Initialise a new ``FolderComparator``.

        :param options: Options to control this ``FolderComparator``
                        instance.
        :type options: ``Optional[CompareOptions]``
        """
        self.options: CompareOptions = options or CompareOptions()

    def _scan(self, root: str, sink: DiagnosticSink):
        """
        Walk ``root`` and build its path mapping.
        """
        return build_map(walk_tree(root, self.options, sink), root, sink)

    def compare_folders(
        self,
        folder_a: str,
        folder_b: str,
        on_warning: Optional[DiagnosticSink] = None,
    ) -> ComparisonResult:
        """
        Compare two directory trees and return the classified results.

        Both trees are walked concurrently. Recoverable per-path failures
        never abort the comparison: they are recorded in the returned
        ``ComparisonResult.warnings`` list and passed to ``on_warning``.

        :param folder_a: The first (left hand) directory to compare.
        :type folder_a: ``str``
        :param folder_b: The second (right hand) directory to compare.
        :type folder_b: ``str``
        :param on_warning: An optional diagnostic sink. It may be called
                           from worker threads, but never concurrently.
        :type on_warning: ``Optional[DiagnosticSink]``
        :returns: The comparison results.
        :rtype: ``ComparisonResult``
        :raises: ``TreeCmpPathError`` if either folder is not an existing
                 directory.
        """
        check_root(folder_a)
        check_root(folder_b)

        start_time = datetime.now()
        collector = DiagnosticCollector(forward=on_warning)

        _log_debug(
            "Comparing '%s' to '%s' with options:\n%s",
            folder_a,
            folder_b,
            self.options,
        )

        with ThreadPoolExecutor(max_workers=2) as pool:
            future_a = pool.submit(self._scan, folder_a, collector)
            future_b = pool.submit(self._scan, folder_b, collector)
            map_a = future_a.result()
            map_b = future_b.result()

        diffs = reconcile(map_a, map_b, self.options, collector)

        results = ComparisonResult(
            diffs,
            floor(start_time.timestamp()),
            folder_a=folder_a,
            folder_b=folder_b,
            warnings=collector.diagnostics,
        )
        _log_info(
            "Compared %d files in %s (%d differences, %d warnings)",
            results.counts.total_files,
            datetime.now() - start_time,
            results.counts.total_differences,
            len(results.warnings),
        )
        return results


__all__ = [
    "DiagnosticCollector",
    "FolderComparator",
    "check_root",
]
