# Copyright Red Hat
#
# treecmp/command.py - Tree comparison command interface
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
"""The ``treecmp.command`` module provides both the treecmp command line
interface infrastructure, and a simple procedural interface to the
``treecmp.compare`` library modules.

The procedural interface is used by the ``treecmp`` command line tool,
and may be used by application programs, or interactively in the
Python shell by users who do not require all the features present
in the treecmp object API.
"""
from argparse import ArgumentParser
from typing import List, Optional
from os.path import basename
import logging
import sys

from treecmp import (
    TreeCmpPathError,
    TREECMP_DEBUG_WALK,
    TREECMP_DEBUG_COMPARE,
    TREECMP_DEBUG_COMMAND,
    TREECMP_DEBUG_ALL,
    TREECMP_SUBSYSTEM_COMMAND,
    SubsystemFilter,
    set_debug_mask,
    __version__,
)
from .compare import (
    CompareOptions,
    ComparisonResult,
    Diagnostic,
    FolderComparator,
)
from .compare.comparator import check_root
from .compare.difftypes import DiagnosticSink
from .compare.pathmap import printable_path

REPORT_FORMATS = ComparisonResult.REPORT_FORMATS

#: Exit status when the compared trees are equivalent.
EXIT_EQUIVALENT = 0
#: Exit status when differences were found.
EXIT_DIFFERENT = 1
#: Exit status for usage, validation and fatal errors.
EXIT_ERROR = 2

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_command(msg, *args, **kwargs):
    """A wrapper for command subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": TREECMP_SUBSYSTEM_COMMAND}, **kwargs)


_DEFAULT_LOG_LEVEL = logging.WARNING
_CONSOLE_HANDLER = None


def _log_diagnostic(diag: Diagnostic):
    """
    Diagnostic sink that logs each ``Diagnostic`` as a warning.
    """
    _log_warn("%s", diag.message)


def compare_folders(
    folder_a: str,
    folder_b: str,
    options: Optional[CompareOptions] = None,
    on_warning: Optional[DiagnosticSink] = None,
) -> ComparisonResult:
    """
    Find differences between two directory trees.

    :param folder_a: The directory to use as the left side of the
                     comparison.
    :type folder_a: ``str``
    :param folder_b: The directory to use as the right side of the
                     comparison.
    :type folder_b: ``str``
    :param options: Options controlling the comparison.
    :type options: ``Optional[CompareOptions]``
    :param on_warning: An optional sink for recoverable per-path failures.
    :type on_warning: ``Optional[DiagnosticSink]``
    :returns: A tree comparison results container.
    :rtype: ``ComparisonResult``
    """
    comparator = FolderComparator(options=options)
    return comparator.compare_folders(folder_a, folder_b, on_warning=on_warning)


def print_results(
    results: ComparisonResult,
    output_formats: List[str],
    pretty: bool = False,
):
    """
    Print ``results`` to stdout in each of ``output_formats``.

    :param results: The comparison results to print.
    :type results: ``ComparisonResult``
    :param output_formats: A list of ``REPORT_FORMATS`` names.
    :type output_formats: ``List[str]``
    :param pretty: Indent JSON output.
    :type pretty: ``bool``
    """
    spacer = ""
    for output_format in output_formats:
        if output_format == "detailed" and results.equivalent:
            continue
        print(spacer, end="")
        if output_format == "summary":
            print(results.summary())
        elif output_format == "detailed":
            print(results.detailed())
        elif output_format == "json":
            print(results.json(pretty=pretty))
        elif output_format == "paths":
            paths = results.paths()
            if paths:
                print("\n".join(printable_path(path) for path in paths))
        spacer = "\n"


def _compare_cmd(cmd_args):
    """
    Compare folders command handler.

    Compare two directory trees and print the requested reports.

    :param cmd_args: Command line arguments for the command
    :returns: integer status code returned from ``main()``
    """
    options = CompareOptions.from_cmd_args(cmd_args)
    output_formats = list(dict.fromkeys(cmd_args.output_format or []))
    if cmd_args.detailed and "detailed" not in output_formats:
        output_formats.append("detailed")
    if not output_formats or output_formats == ["detailed"]:
        output_formats.insert(0, "summary")

    if cmd_args.pretty and "json" not in output_formats:
        _log_error("Option --pretty only supported with --output-format=json")
        return EXIT_ERROR

    if "json" in output_formats and len(output_formats) > 1:
        _log_error(
            "Option --output-format=json cannot be combined with other reports"
        )
        return EXIT_ERROR

    for folder in (cmd_args.folder1, cmd_args.folder2):
        try:
            check_root(folder)
        except TreeCmpPathError as err:
            _log_error("Error: %s", err)
            return EXIT_ERROR

    if not cmd_args.quiet and "json" not in output_formats:
        print("Comparing folders:")
        print(f"Folder 1: {printable_path(cmd_args.folder1)}")
        print(f"Folder 2: {printable_path(cmd_args.folder2)}")
        print("---")

    results = compare_folders(
        cmd_args.folder1, cmd_args.folder2, options, on_warning=_log_diagnostic
    )
    _log_debug_command("Comparison results: %s", repr(results))

    print_results(results, output_formats, pretty=cmd_args.pretty)

    return EXIT_DIFFERENT if results.counts.total_differences > 0 else EXIT_EQUIVALENT


def setup_logging(cmd_args):
    """
    Set up treecmp logging.
    """
    # pylint: disable=global-statement
    global _CONSOLE_HANDLER
    level = _DEFAULT_LOG_LEVEL
    if cmd_args.verbose and cmd_args.verbose > 1:
        level = logging.DEBUG
    elif cmd_args.verbose and cmd_args.verbose > 0:
        level = logging.INFO

    treecmp_log = logging.getLogger("treecmp")
    formatter = logging.Formatter("%(levelname)s - %(message)s")
    treecmp_log.setLevel(level)
    if treecmp_log.hasHandlers():
        treecmp_log.handlers.clear()

    # Subsystem log filtering
    _treecmp_subsystem_filter = SubsystemFilter("treecmp")

    # Main console handler
    _CONSOLE_HANDLER = logging.StreamHandler(sys.stderr)

    _CONSOLE_HANDLER.setLevel(level)
    _CONSOLE_HANDLER.setFormatter(formatter)
    _CONSOLE_HANDLER.addFilter(_treecmp_subsystem_filter)

    treecmp_log.addHandler(_CONSOLE_HANDLER)


def shutdown_logging():
    """
    Shut down treecmp logging.
    """
    logging.shutdown()


def set_debug(debug_arg):
    """
    Set debugging mask from command line argument.
    """
    if not debug_arg:
        return

    mask_map = {
        "walk": TREECMP_DEBUG_WALK,
        "compare": TREECMP_DEBUG_COMPARE,
        "command": TREECMP_DEBUG_COMMAND,
        "all": TREECMP_DEBUG_ALL,
    }

    mask = 0
    for name in debug_arg.split(","):
        if name not in mask_map:
            raise ValueError(f"Unknown debug option: {name}")
        mask |= mask_map[name]
    set_debug_mask(mask)


def _add_compare_args(parser):
    parser.add_argument(
        "-o",
        "--output-format",
        type=str,
        action="append",
        choices=REPORT_FORMATS,
        default=None,
        help=f"Report output format ({', '.join(REPORT_FORMATS)})",
    )
    parser.add_argument(
        "--detailed",
        action="store_true",
        help="Show detailed file-by-file differences",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Indent JSON output (with --output-format=json)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Do not output the comparison header",
    )
    parser.add_argument(
        "-i",
        "--include-pattern",
        type=str,
        action="append",
        metavar="PATTERN",
        dest="file_patterns",
        default=None,
        help="File patterns to include (glob notation)",
    )
    parser.add_argument(
        "-x",
        "--exclude-pattern",
        type=str,
        action="append",
        metavar="PATTERN",
        dest="exclude_patterns",
        default=None,
        help="File patterns to exclude (glob notation)",
    )
    parser.add_argument(
        "-P",
        "--no-follow-symlinks",
        dest="follow_symlinks",
        action="store_false",
        help="Do not follow symlinks when walking directory trees",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        dest="max_workers",
        metavar="N",
        default=0,
        help="Maximum number of concurrent file comparisons (0=default)",
    )
    parser.add_argument(
        "-b",
        "--chunk-size",
        type=int,
        metavar="BYTES",
        default=2**16,
        help="Read size for content comparison (default: 64KiB)",
    )
    parser.add_argument(
        "-S",
        "--no-size-check",
        dest="size_check",
        action="store_false",
        help="Always read file content even if sizes differ",
    )
    parser.add_argument(
        "folder1",
        type=str,
        metavar="FOLDER1",
        help="Path to first folder",
    )
    parser.add_argument(
        "folder2",
        type=str,
        metavar="FOLDER2",
        help="Path to second folder",
    )


def main(args):
    """
    Main entry point for treecmp.
    """
    parser = ArgumentParser(
        description="Directory tree comparison", prog=basename(args[0])
    )

    # Global arguments
    parser.add_argument(
        "-d",
        "--debug",
        metavar="DEBUGOPTS",
        type=str,
        help="A list of debug options to enable (walk, compare, command, all)",
    )
    parser.add_argument("-v", "--verbose", help="Enable verbose output", action="count")
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        help="Report the version number of treecmp",
        version=__version__,
    )
    _add_compare_args(parser)
    parser.set_defaults(func=_compare_cmd)

    try:
        cmd_args = parser.parse_args(args[1:])
    except SystemExit as err:
        return err.code

    status = EXIT_ERROR

    try:
        set_debug(cmd_args.debug)
    except ValueError as err:
        print(err)
        parser.print_help()
        return status

    setup_logging(cmd_args)

    _log_debug_command("Parsed %s", " ".join(args[1:]))

    if cmd_args.debug:
        status = cmd_args.func(cmd_args)
    else:
        try:
            status = cmd_args.func(cmd_args)
        # pylint: disable=broad-except
        except KeyboardInterrupt:  # pragma: no cover
            _log_info("Exiting on user cancel")
        except Exception as err:
            _log_error("Command failed: %s", err)

    shutdown_logging()
    return status


def run():
    """
    Console script entry point for treecmp.
    """
    sys.exit(main(sys.argv))


# vim: set et ts=4 sw=4 :
