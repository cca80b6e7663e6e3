# Copyright Red Hat
#
# treecmp/compare/reconcile.py - Tree comparison reconciler
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Reconcile two path mappings into a classified ``DifferenceSet``.
"""
from typing import Callable, List, Optional
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
import logging

from treecmp import TREECMP_SUBSYSTEM_COMPARE

from .contentcmp import contents_differ
from .difftypes import Classification, DiagnosticSink
from .options import CompareOptions
from .pathmap import FileEntry, PathMapping
from .results import (
    DifferenceSet,
    DifferentContentRecord,
    OnlyInRecord,
    SameContentRecord,
)

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TREECMP_SUBSYSTEM_COMPARE}, **kwargs)


def classify(
    entry_a: Optional[FileEntry],
    entry_b: Optional[FileEntry],
    differ: Callable[[str, str], bool],
) -> Classification:
    """
    Classify one relative path from its entries in each tree.

    :param entry_a: The path's entry in the first tree, if any.
    :type entry_a: ``Optional[FileEntry]``
    :param entry_b: The path's entry in the second tree, if any.
    :type entry_b: ``Optional[FileEntry]``
    :param differ: Content comparison callable returning ``True`` if the
                   two absolute paths differ. Only called when both entries
                   are present.
    :type differ: ``Callable[[str, str], bool]``
    :returns: The terminal classification of the path.
    :rtype: ``Classification``
    """
    if entry_a is None and entry_b is None:
        raise ValueError("classify() requires at least one entry")
    if entry_a is None:
        return Classification.ONLY_IN_SECOND
    if entry_b is None:
        return Classification.ONLY_IN_FIRST
    if differ(entry_a.absolute_path, entry_b.absolute_path):
        return Classification.DIFFERENT_CONTENT
    return Classification.SAME_CONTENT


def reconcile(
    map_a: PathMapping,
    map_b: PathMapping,
    options: Optional[CompareOptions] = None,
    on_warning: Optional[DiagnosticSink] = None,
) -> DifferenceSet:
    """
    Classify every relative path in the union of ``map_a`` and ``map_b``.

    Paths present in both mappings have their content compared; these
    comparisons run concurrently on a thread pool bounded by
    ``options.max_workers``. Each comparison returns its verdict and the
    ``DifferenceSet`` is populated once all comparisons have completed, in
    sorted path order.

    :param map_a: The path mapping of the first tree.
    :type map_a: ``PathMapping``
    :param map_b: The path mapping of the second tree.
    :type map_b: ``PathMapping``
    :param options: Options controlling content comparison.
    :type options: ``Optional[CompareOptions]``
    :param on_warning: An optional diagnostic sink.
    :type on_warning: ``Optional[DiagnosticSink]``
    :returns: The classified paths.
    :rtype: ``DifferenceSet``
    """
    options = options or CompareOptions()
    diffs = DifferenceSet()
    all_paths = sorted(set(map_a.keys()) | set(map_b.keys()))
    _log_debug("Starting reconcile with %d paths", len(all_paths))

    if not all_paths:
        _log_info("No paths to compare; returning empty DifferenceSet")
        return diffs

    start_time = datetime.now()

    common: List[str] = [
        path for path in all_paths if path in map_a and path in map_b
    ]

    def _differ(path: str) -> bool:
        return contents_differ(
            map_a[path].absolute_path, map_b[path].absolute_path, options, on_warning
        )

    if options.max_workers == 1 or len(common) <= 1:
        verdicts = [_differ(path) for path in common]
    else:
        with ThreadPoolExecutor(max_workers=options.max_workers or None) as pool:
            verdicts = list(pool.map(_differ, common))

    differs = dict(zip(common, verdicts))

    for path in all_paths:
        entry_a = map_a.get(path)
        entry_b = map_b.get(path)
        classification = classify(entry_a, entry_b, lambda *_: differs[path])
        _log_debug_compare("Classified '%s' as %s", path, classification.value)

        if classification == Classification.ONLY_IN_SECOND:
            diffs.only_in_second.append(
                OnlyInRecord(path, entry_b.absolute_path, entry_b.size)
            )
        elif classification == Classification.ONLY_IN_FIRST:
            diffs.only_in_first.append(
                OnlyInRecord(path, entry_a.absolute_path, entry_a.size)
            )
        elif classification == Classification.DIFFERENT_CONTENT:
            diffs.different_content.append(
                DifferentContentRecord(path, entry_a, entry_b)
            )
        else:
            diffs.same_content.append(SameContentRecord(path, entry_a.size))

    _log_debug(
        "Reconciled %d paths (%d content comparisons) in %s",
        len(all_paths),
        len(common),
        datetime.now() - start_time,
    )
    return diffs


__all__ = [
    "classify",
    "reconcile",
]
