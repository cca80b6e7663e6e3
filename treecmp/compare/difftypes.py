# Copyright Red Hat
#
# treecmp/compare/difftypes.py - Tree comparison result types
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Tree comparison classification and diagnostic types
"""
from dataclasses import dataclass
from typing import Callable, Optional
from enum import Enum


class Classification(Enum):
    """
    Enum for the terminal classification of a relative path.
    """

    ONLY_IN_FIRST = "only_in_first"
    ONLY_IN_SECOND = "only_in_second"
    DIFFERENT_CONTENT = "different_content"
    SAME_CONTENT = "same_content"


class DiagnosticKind(Enum):
    """
    Enum for recoverable per-path failures.
    """

    TRAVERSAL = "traversal"  # directory could not be read
    METADATA = "metadata"  # file could not be stat'd
    READ = "read"  # file content could not be read


@dataclass(frozen=True)
class Diagnostic:
    """
    A warning raised by one comparison stage and recovered locally.
    """

    kind: DiagnosticKind
    path: str
    message: str

    def __str__(self):
        return self.message

    def to_dict(self):
        """
        Convert this ``Diagnostic`` into a dictionary suitable for encoding
        as JSON.
        """
        return {"kind": self.kind.value, "path": self.path, "message": self.message}


#: Signature of a caller supplied diagnostic sink.
DiagnosticSink = Callable[[Diagnostic], None]


def emit_diagnostic(
    on_warning: Optional[DiagnosticSink],
    kind: DiagnosticKind,
    path: str,
    message: str,
) -> Diagnostic:
    """
    Build a ``Diagnostic`` and deliver it to ``on_warning`` if set.

    :param on_warning: An optional diagnostic sink.
    :type on_warning: ``Optional[DiagnosticSink]``
    :param kind: The kind of failure being reported.
    :type kind: ``DiagnosticKind``
    :param path: The path that the failure relates to.
    :type path: ``str``
    :param message: A human readable description of the failure.
    :type message: ``str``
    :returns: The new ``Diagnostic``.
    :rtype: ``Diagnostic``
    """
    diag = Diagnostic(kind, path, message)
    if on_warning is not None:
        on_warning(diag)
    return diag
