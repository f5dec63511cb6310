# test_file.py -- Test for gitlite.file
# Copyright (C) 2026 gitlite contributors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# gitlite is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Tests for gitlite.file."""

import errno
import os
import shutil
import tempfile

from gitlite.file import FileLocked, GitFile, _GitFile, ensure_dir_exists

from . import TestCase


class GitFileTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self._tempdir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self._tempdir)
        with open(self.path("foo"), "wb") as f:
            f.write(b"foo contents")

    def path(self, filename: str) -> str:
        return os.path.join(self._tempdir, filename)

    def test_invalid(self) -> None:
        foo = self.path("foo")
        self.assertRaises(OSError, GitFile, foo, mode="r")
        self.assertRaises(OSError, GitFile, foo, mode="ab")
        self.assertRaises(OSError, GitFile, foo, mode="r+b")
        self.assertRaises(OSError, GitFile, foo, mode="w+b")
        self.assertRaises(OSError, GitFile, foo, mode="a+bU")

    def test_readonly(self) -> None:
        with GitFile(self.path("foo"), "rb") as f:
            self.assertNotIsInstance(f, _GitFile)
            self.assertEqual(b"foo contents", f.read())
        self.assertFalse(os.path.exists(self.path("foo.lock")))

    def test_write(self) -> None:
        foo = self.path("foo")
        foo_lock = f"{foo}.lock"

        with open(foo, "rb") as orig_f:
            self.assertEqual(b"foo contents", orig_f.read())

        self.assertFalse(os.path.exists(foo_lock))
        f = GitFile(foo, "wb")
        self.assertFalse(f.closed)
        self.assertTrue(os.path.exists(foo_lock))
        f.write(b"new stuff")
        with open(foo, "rb") as orig_f:
            self.assertEqual(b"foo contents", orig_f.read())
        f.close()
        self.assertTrue(f.closed)
        self.assertFalse(os.path.exists(foo_lock))

        with open(foo, "rb") as new_f:
            self.assertEqual(b"new stuff", new_f.read())

    def test_write_new_file(self) -> None:
        with GitFile(self.path("new"), "wb") as f:
            f.writelines([b"new ", b"file"])
        with open(self.path("new"), "rb") as f:
            self.assertEqual(b"new file", f.read())

    def test_mask(self) -> None:
        with GitFile(self.path("masked"), "wb", mask=0o444, fsync=False) as f:
            f.write(b"read only")
        self.assertEqual(0, os.stat(self.path("masked")).st_mode & 0o222)

    def test_open_twice(self) -> None:
        foo = self.path("foo")
        f1 = GitFile(foo, "wb")
        f1.write(b"new")
        with self.assertRaises(FileLocked) as cm:
            GitFile(foo, "wb")
        self.assertIsInstance(cm.exception, OSError)
        self.assertEqual(foo, cm.exception.filename)
        self.assertEqual(f"{foo}.lock", cm.exception.lockfilename)
        self.assertEqual(errno.EEXIST, cm.exception.errno)
        self.assertEqual(
            f"[Errno {errno.EEXIST}] locked by {foo}.lock: '{foo}'", str(cm.exception)
        )
        f1.write(b" contents")
        f1.close()

        with open(foo, "rb") as f:
            self.assertEqual(b"new contents", f.read())

    def test_abort(self) -> None:
        foo = self.path("foo")
        foo_lock = f"{foo}.lock"

        f = GitFile(foo, "wb")
        f.write(b"new contents")
        f.abort()
        self.assertTrue(f.closed)
        self.assertFalse(os.path.exists(foo_lock))

        with open(foo, "rb") as new_orig_f:
            self.assertEqual(b"foo contents", new_orig_f.read())

    def test_abort_close(self) -> None:
        foo = self.path("foo")
        f = GitFile(foo, "wb")
        f.abort()
        f.close()
        f.abort()

    def test_exception_in_context_aborts(self) -> None:
        foo = self.path("foo")
        with self.assertRaises(RuntimeError):
            with GitFile(foo, "wb") as f:
                f.write(b"partial")
                raise RuntimeError("interrupted")
        self.assertFalse(os.path.exists(f"{foo}.lock"))
        with open(foo, "rb") as orig_f:
            self.assertEqual(b"foo contents", orig_f.read())


class EnsureDirExistsTests(TestCase):
    def test_creates_and_tolerates_existing(self) -> None:
        tempdir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, tempdir)
        target = os.path.join(tempdir, "a", "b")
        ensure_dir_exists(target)
        self.assertTrue(os.path.isdir(target))
        ensure_dir_exists(target)
        self.assertTrue(os.path.isdir(target))
