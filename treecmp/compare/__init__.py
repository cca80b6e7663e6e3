# Copyright Red Hat
#
# treecmp/compare/__init__.py - Tree comparison engine package
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory tree comparison package.

Provides tree walking, relative path mapping, byte-for-byte content
comparison and classification of the paths of two directory trees. The
main entry points are ``FolderComparator`` and ``CompareOptions``.
"""
from .comparator import FolderComparator
from .difftypes import Classification, Diagnostic, DiagnosticKind
from .options import CompareOptions
from .pathmap import FileEntry
from .results import ComparisonCounts, ComparisonResult, DifferenceSet

__all__ = [
    "Classification",
    "CompareOptions",
    "ComparisonCounts",
    "ComparisonResult",
    "Diagnostic",
    "DiagnosticKind",
    "DifferenceSet",
    "FileEntry",
    "FolderComparator",
]
