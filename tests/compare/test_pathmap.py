# Copyright Red Hat
#
# tests/compare/test_pathmap.py - Path mapper tests.
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import tempfile
import os
from unittest.mock import patch

from treecmp.compare.difftypes import DiagnosticKind
from treecmp.compare.pathmap import (
    FileEntry,
    build_map,
    printable_path,
    relative_path,
)
from treecmp.compare.treewalk import walk_tree

from ._util import make_entry, make_tree


class TestBuildMap(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = self._tmp.name
        make_tree(self.root, {"a.txt": "hello", "dir/sub/b.bin": b"\x00\x01\x02"})

    def tearDown(self):
        self._tmp.cleanup()

    def test_build_map_relative_keys(self):
        mapping = build_map(walk_tree(self.root), self.root)
        self.assertEqual(sorted(mapping.keys()), ["a.txt", "dir/sub/b.bin"])

    def test_build_map_entries(self):
        mapping = build_map(walk_tree(self.root), self.root)
        entry = mapping["dir/sub/b.bin"]
        self.assertIsInstance(entry, FileEntry)
        self.assertEqual(entry.relative_path, "dir/sub/b.bin")
        self.assertEqual(entry.size, 3)
        self.assertEqual(
            entry.absolute_path, os.path.join(self.root, "dir", "sub", "b.bin")
        )
        self.assertEqual(entry.mtime, os.stat(entry.absolute_path).st_mtime)

    def test_build_map_is_read_only(self):
        mapping = build_map(walk_tree(self.root), self.root)
        with self.assertRaises(TypeError):
            mapping["new"] = make_entry("new")

    def test_build_map_drops_vanished_file(self):
        """A file that cannot be stat'd is dropped and reported."""
        paths = walk_tree(self.root)
        os.unlink(os.path.join(self.root, "a.txt"))
        warnings = []
        mapping = build_map(paths, self.root, on_warning=warnings.append)
        self.assertEqual(list(mapping.keys()), ["dir/sub/b.bin"])
        self.assertEqual(len(warnings), 1)
        self.assertEqual(warnings[0].kind, DiagnosticKind.METADATA)
        self.assertEqual(warnings[0].path, os.path.join(self.root, "a.txt"))

    def test_build_map_duplicate_relative_path_overwrites(self):
        path = os.path.join(self.root, "a.txt")
        mapping = build_map([path, path], self.root)
        self.assertEqual(len(mapping), 1)

    def test_build_map_stat_error(self):
        warnings = []
        paths = walk_tree(self.root)
        with patch(
            "treecmp.compare.pathmap.os.stat",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            mapping = build_map(paths, self.root, warnings.append)
        self.assertEqual(len(mapping), 0)
        self.assertEqual(len(warnings), 2)
        self.assertTrue(all(w.kind == DiagnosticKind.METADATA for w in warnings))


class TestRelativePath(unittest.TestCase):
    def test_relative_path_uses_forward_slashes(self):
        root = os.path.join(os.sep, "base")
        path = os.path.join(root, "dir", "a.txt")
        self.assertEqual(relative_path(path, root), "dir/a.txt")

    def test_relative_path_top_level(self):
        root = os.path.join(os.sep, "base")
        self.assertEqual(relative_path(os.path.join(root, "a.txt"), root), "a.txt")


class TestFileEntry(unittest.TestCase):
    def test_FileEntry__str__(self):
        entry = make_entry("dir/a.txt", size=42)
        s = str(entry)
        self.assertIn("path: dir/a.txt", s)
        self.assertIn("full_path: /a/dir/a.txt", s)
        self.assertIn("size: 42", s)

    def test_FileEntry_to_dict(self):
        entry = make_entry("a.txt", size=7, mtime=1.5)
        self.assertEqual(
            entry.to_dict(),
            {"path": "a.txt", "full_path": "/a/a.txt", "size": 7, "mtime": 1.5},
        )

    def test_FileEntry_frozen(self):
        entry = make_entry("a.txt")
        with self.assertRaises(AttributeError):
            entry.size = 10


class TestPrintablePath(unittest.TestCase):
    def test_printable_path_utf8_unchanged(self):
        self.assertEqual(printable_path("dir/café.txt"), "dir/café.txt")

    def test_printable_path_escapes_invalid_bytes(self):
        path = os.fsdecode(b"dir/\xff.txt")
        printable = printable_path(path)
        self.assertEqual(printable, "dir/\\xff.txt")
        printable.encode("utf-8")
