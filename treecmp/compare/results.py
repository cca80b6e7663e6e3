# Copyright Red Hat
#
# treecmp/compare/results.py - Tree comparison results
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree comparison records, difference sets and results.
"""
from typing import Any, ClassVar, Dict, List, Optional
from dataclasses import dataclass, field
import json

from treecmp import size_fmt

from .difftypes import Classification, Diagnostic
from .pathmap import FileEntry, printable_path


@dataclass(frozen=True)
class OnlyInRecord:
    """
    A path present in only one of the compared trees.
    """

    path: str
    absolute_path: str
    size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "absolute_path": self.absolute_path,
            "size": self.size,
        }


@dataclass(frozen=True)
class DifferentContentRecord:
    """
    A path present in both trees whose content differs.
    """

    path: str
    file1: FileEntry
    file2: FileEntry

    @property
    def size_delta(self) -> int:
        """
        The change in size from the first to the second tree.
        """
        return self.file2.size - self.file1.size

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "file1": self.file1.to_dict(),
            "file2": self.file2.to_dict(),
        }


@dataclass(frozen=True)
class SameContentRecord:
    """
    A path present in both trees with identical content.
    """

    path: str
    size: int

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "size": self.size}


@dataclass
class DifferenceSet:
    """
    The four classification sequences produced by one reconciliation.
    """

    only_in_first: List[OnlyInRecord] = field(default_factory=list)
    only_in_second: List[OnlyInRecord] = field(default_factory=list)
    different_content: List[DifferentContentRecord] = field(default_factory=list)
    same_content: List[SameContentRecord] = field(default_factory=list)

    def records(self, classification: Classification) -> list:
        """
        Return the record list for ``classification``.

        :param classification: The classification to select.
        :type classification: ``Classification``
        :returns: The list of records with that classification.
        :rtype: ``list``
        """
        return getattr(self, classification.value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            cls.value: [record.to_dict() for record in self.records(cls)]
            for cls in Classification
        }


@dataclass(frozen=True)
class ComparisonCounts:
    """
    Summary counts computed from a ``DifferenceSet``.
    """

    only_in_first: int = 0
    only_in_second: int = 0
    different_content: int = 0
    same_content: int = 0
    total_differences: int = 0
    total_files: int = 0

    def to_dict(self) -> Dict[str, int]:
        return dict(self.__dict__)


def aggregate(diffs: DifferenceSet) -> ComparisonCounts:
    """
    Compute summary counts for the difference set ``diffs``.

    :param diffs: The classified paths of one comparison.
    :type diffs: ``DifferenceSet``
    :returns: The counts for each category and the totals.
    :rtype: ``ComparisonCounts``
    """
    only_in_first = len(diffs.only_in_first)
    only_in_second = len(diffs.only_in_second)
    different_content = len(diffs.different_content)
    same_content = len(diffs.same_content)
    total_differences = only_in_first + only_in_second + different_content
    return ComparisonCounts(
        only_in_first=only_in_first,
        only_in_second=only_in_second,
        different_content=different_content,
        same_content=same_content,
        total_differences=total_differences,
        total_files=total_differences + same_content,
    )


class ComparisonResult:
    """Container for tree comparison results with formatting methods."""

    #: Constant for the names of the string report formats
    REPORT_FORMATS: ClassVar[List[str]] = [
        "summary",
        "detailed",
        "json",
        "paths",
    ]

    # pylint: disable=too-many-arguments
    def __init__(
        self,
        details: DifferenceSet,
        timestamp: int,
        folder_a: str = "",
        folder_b: str = "",
        warnings: Optional[List[Diagnostic]] = None,
    ):
        self.details = details
        self.counts = aggregate(details)
        self.timestamp = timestamp
        self.folder_a = folder_a
        self.folder_b = folder_b
        self.warnings = warnings or []

    def __repr__(self) -> str:
        """
        Return a machine-readable representation of this instance.

        :returns: ``ComparisonResult`` constructor style string.
        :rtype: ``str``
        """
        return (
            f"ComparisonResult(<{self.counts.total_files} paths>, "
            f"{self.timestamp}, {self.folder_a!r}, {self.folder_b!r})"
        )

    @property
    def equivalent(self) -> bool:
        """
        ``True`` if the compared trees hold the same paths with the same
        content.
        """
        return self.counts.total_differences == 0

    def paths(self) -> List[str]:
        """
        Return a sorted list of the relative paths that differ between the
        compared trees.

        :returns: Path list.
        :rtype: ``List[str]``
        """
        return sorted(
            record.path
            for cls in (
                Classification.ONLY_IN_FIRST,
                Classification.ONLY_IN_SECOND,
                Classification.DIFFERENT_CONTENT,
            )
            for record in self.details.records(cls)
        )

    def summary(self) -> str:
        """
        Return a summary of the counts in this ``ComparisonResult``.

        :returns: A string summarizing this instance.
        :rtype: ``str``
        """
        counts = self.counts
        return (
            "COMPARISON SUMMARY:\n"
            "==================\n"
            f"Total files compared: {counts.total_files}\n"
            f"Files with differences: {counts.total_differences}\n"
            f"Files only in first folder: {counts.only_in_first}\n"
            f"Files only in second folder: {counts.only_in_second}\n"
            f"Files with different content: {counts.different_content}\n"
            f"Files with same content: {counts.same_content}"
        )

    def detailed(self) -> str:
        """
        Return a per-path listing of the differences in this
        ``ComparisonResult``. Empty categories are omitted.

        :returns: A string listing differing paths by category.
        :rtype: ``str``
        """

        def _section(title: str, lines: List[str]) -> str:
            return f"{title}\n{'=' * (len(title) + 1)}\n" + "\n".join(lines)

        details = self.details
        sections = []
        if details.only_in_first:
            sections.append(
                _section(
                    "FILES ONLY IN FIRST FOLDER:",
                    [
                        f"  {printable_path(rec.path)} ({rec.size} bytes)"
                        for rec in details.only_in_first
                    ],
                )
            )
        if details.only_in_second:
            sections.append(
                _section(
                    "FILES ONLY IN SECOND FOLDER:",
                    [
                        f"  {printable_path(rec.path)} ({rec.size} bytes)"
                        for rec in details.only_in_second
                    ],
                )
            )
        if details.different_content:
            lines = []
            for rec in details.different_content:
                lines.append(f"  {printable_path(rec.path)}")
                lines.append(f"    First folder: {rec.file1.size} bytes")
                lines.append(f"    Second folder: {rec.file2.size} bytes")
                if rec.size_delta:
                    lines.append(f"    Size delta: {size_fmt(rec.size_delta)}")
            sections.append(_section("FILES WITH DIFFERENT CONTENT:", lines))
        return "\n\n".join(sections)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``ComparisonResult`` into a dictionary representation
        suitable for encoding as JSON.
        """
        return {
            "folder_a": self.folder_a,
            "folder_b": self.folder_b,
            "timestamp": self.timestamp,
            "counts": self.counts.to_dict(),
            "details": self.details.to_dict(),
            "warnings": [diag.to_dict() for diag in self.warnings],
        }

    def json(self, pretty: bool = False) -> str:
        """
        Return JSON representation of this ``ComparisonResult``.

        :param pretty: Indent the output for human readers.
        :type pretty: ``bool``
        :returns: JSON string description of the comparison.
        :rtype: ``str``
        """
        return json.dumps(self.to_dict(), indent=4 if pretty else None)


__all__ = [
    "ComparisonCounts",
    "ComparisonResult",
    "DifferenceSet",
    "DifferentContentRecord",
    "OnlyInRecord",
    "SameContentRecord",
    "aggregate",
]
