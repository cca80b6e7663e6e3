# Copyright Red Hat
#
# tests/compare/test_treewalk.py - Tree walker tests.
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import tempfile
import errno
import os
from unittest.mock import patch

from treecmp.compare.difftypes import DiagnosticKind
from treecmp.compare.options import CompareOptions
from treecmp.compare.treewalk import walk_tree

from tests import have_root

from ._util import make_tree


class TestWalkTree(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = self._tmp.name
        make_tree(
            self.root,
            {
                "a.txt": "hello",
                "dir/b.txt": "b",
                "dir/sub/c.txt": "c",
                "dir/sub/d.log": "d",
            },
        )

    def tearDown(self):
        self._tmp.cleanup()

    def _rel(self, paths):
        return sorted(os.path.relpath(p, self.root).replace(os.sep, "/") for p in paths)

    def test_walk_tree_finds_all_files(self):
        files = walk_tree(self.root)
        self.assertEqual(
            self._rel(files), ["a.txt", "dir/b.txt", "dir/sub/c.txt", "dir/sub/d.log"]
        )

    def test_walk_tree_returns_absolute_paths(self):
        cwd = os.getcwd()
        try:
            os.chdir(self.root)
            files = walk_tree(".")
        finally:
            os.chdir(cwd)
        self.assertTrue(files)
        for path in files:
            self.assertTrue(os.path.isabs(path))

    def test_walk_tree_empty(self):
        with tempfile.TemporaryDirectory() as empty:
            self.assertEqual(walk_tree(empty), [])

    def test_walk_tree_skips_directories(self):
        os.makedirs(os.path.join(self.root, "empty", "deeper"))
        files = walk_tree(self.root)
        self.assertNotIn("empty", self._rel(files))
        self.assertNotIn("empty/deeper", self._rel(files))

    def test_walk_tree_exclude_patterns(self):
        opts = CompareOptions(exclude_patterns=("*.log",))
        self.assertNotIn("dir/sub/d.log", self._rel(walk_tree(self.root, opts)))

        opts = CompareOptions(exclude_patterns=("dir/sub",))
        self.assertEqual(self._rel(walk_tree(self.root, opts)), ["a.txt", "dir/b.txt"])

    def test_walk_tree_file_patterns(self):
        opts = CompareOptions(file_patterns=("*.txt",))
        self.assertEqual(
            self._rel(walk_tree(self.root, opts)),
            ["a.txt", "dir/b.txt", "dir/sub/c.txt"],
        )

    def test_walk_tree_unreadable_dir_is_localized(self):
        """A directory read failure skips that subtree and reports it."""
        real_walk = os.walk
        bad = os.path.join(self.root, "dir", "sub")

        def fake_walk(top, onerror=None, followlinks=False):
            for dirpath, dirnames, filenames in real_walk(top, followlinks=followlinks):
                if dirpath == bad:
                    err = PermissionError(13, "Permission denied", bad)
                    onerror(err)
                    continue
                yield dirpath, dirnames, filenames

        warnings = []
        with patch("treecmp.compare.treewalk.os.walk", side_effect=fake_walk):
            files = walk_tree(self.root, on_warning=warnings.append)

        self.assertEqual(self._rel(files), ["a.txt", "dir/b.txt"])
        self.assertEqual(len(warnings), 1)
        self.assertEqual(warnings[0].kind, DiagnosticKind.TRAVERSAL)
        self.assertEqual(warnings[0].path, bad)
        self.assertIn("Could not read directory", warnings[0].message)

    @unittest.skipIf(have_root(), "permission checks do not apply to root")
    def test_walk_tree_permission_denied(self):
        locked = os.path.join(self.root, "dir", "sub")
        os.chmod(locked, 0)
        try:
            warnings = []
            files = walk_tree(self.root, on_warning=warnings.append)
        finally:
            os.chmod(locked, 0o755)
        self.assertEqual(self._rel(files), ["a.txt", "dir/b.txt"])
        self.assertEqual([w.kind for w in warnings], [DiagnosticKind.TRAVERSAL])

    def test_walk_tree_file_stat_error_is_reported(self):
        """A file that cannot be stat'd is skipped with a warning."""
        real_stat = os.stat
        bad = os.path.join(self.root, "dir", "b.txt")

        def fake_stat(path, *args, **kwargs):
            if path == bad:
                raise PermissionError(errno.EACCES, "Permission denied", path)
            return real_stat(path, *args, **kwargs)

        warnings = []
        with patch("treecmp.compare.treewalk.os.stat", side_effect=fake_stat):
            files = walk_tree(self.root, on_warning=warnings.append)

        self.assertNotIn("dir/b.txt", self._rel(files))
        self.assertEqual(len(files), 3)
        self.assertEqual(len(warnings), 1)
        self.assertEqual(warnings[0].kind, DiagnosticKind.METADATA)
        self.assertEqual(warnings[0].path, bad)
        self.assertIn("Could not stat", warnings[0].message)

    @unittest.skipIf(have_root(), "permission checks do not apply to root")
    def test_walk_tree_unsearchable_dir(self):
        """Files in a readable but unsearchable directory are reported."""
        locked = os.path.join(self.root, "dir", "sub")
        os.chmod(locked, 0o644)
        try:
            warnings = []
            files = walk_tree(self.root, on_warning=warnings.append)
        finally:
            os.chmod(locked, 0o755)
        self.assertEqual(self._rel(files), ["a.txt", "dir/b.txt"])
        self.assertEqual(
            sorted(w.path for w in warnings),
            [os.path.join(locked, "c.txt"), os.path.join(locked, "d.log")],
        )
        self.assertTrue(all(w.kind == DiagnosticKind.METADATA for w in warnings))


@unittest.skipUnless(hasattr(os, "symlink"), "symbolic links not supported")
class TestWalkTreeSymlinks(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = self._tmp.name
        make_tree(self.root, {"real/file.txt": "data"})

    def tearDown(self):
        self._tmp.cleanup()

    def _rel(self, paths):
        return sorted(os.path.relpath(p, self.root).replace(os.sep, "/") for p in paths)

    def test_symlink_to_file_followed(self):
        os.symlink(
            os.path.join(self.root, "real", "file.txt"),
            os.path.join(self.root, "link.txt"),
        )
        self.assertEqual(self._rel(walk_tree(self.root)), ["link.txt", "real/file.txt"])

    def test_symlink_to_dir_followed(self):
        os.symlink(os.path.join(self.root, "real"), os.path.join(self.root, "alias"))
        self.assertEqual(
            self._rel(walk_tree(self.root)), ["alias/file.txt", "real/file.txt"]
        )

    def test_no_follow_symlinks(self):
        os.symlink(os.path.join(self.root, "real"), os.path.join(self.root, "alias"))
        os.symlink(
            os.path.join(self.root, "real", "file.txt"),
            os.path.join(self.root, "link.txt"),
        )
        opts = CompareOptions(follow_symlinks=False)
        self.assertEqual(self._rel(walk_tree(self.root, opts)), ["real/file.txt"])

    def test_dangling_symlink_skipped(self):
        os.symlink(
            os.path.join(self.root, "missing"), os.path.join(self.root, "dangling")
        )
        warnings = []
        files = walk_tree(self.root, on_warning=warnings.append)
        self.assertEqual(self._rel(files), ["real/file.txt"])
        self.assertEqual(warnings, [])

    def test_symlink_loop_not_descended(self):
        os.symlink(self.root, os.path.join(self.root, "real", "loop"))
        warnings = []
        files = walk_tree(self.root, on_warning=warnings.append)
        self.assertEqual(self._rel(files), ["real/file.txt"])
        self.assertEqual(len(warnings), 1)
        self.assertEqual(warnings[0].kind, DiagnosticKind.TRAVERSAL)
        self.assertIn("symbolic link loop", warnings[0].message)
