# Copyright Red Hat
#
# tests/__init__.py - Tree comparison test package
#
# This file is part of the treecmp project.
#
# SPDX-License-Identifier: Apache-2.0
import logging
import os
import time

log = logging.getLogger()
log.setLevel(logging.DEBUG)
formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
file_handler = logging.FileHandler("test.log")
file_handler.setFormatter(formatter)
console_handler = logging.StreamHandler()
console_handler.setFormatter(formatter)
console_handler.setLevel(logging.WARNING)
log.addHandler(file_handler)
log.addHandler(console_handler)

os.environ["TZ"] = "UTC"
time.tzset()


class MockArgs(object):
    debug = None
    verbose = 0
    output_format = None
    detailed = False
    pretty = False
    quiet = True
    file_patterns = None
    exclude_patterns = None
    follow_symlinks = True
    max_workers = 0
    chunk_size = 2**16
    size_check = True
    folder1 = None
    folder2 = None


def have_root():
    """Return ``True`` if the test suite is running as the root user,
    and ``False`` otherwise.
    """
    return os.geteuid() == 0 and os.getegid() == 0
