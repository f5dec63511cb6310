# test_cli.py -- tests for cli.py
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

"""Tests for the gitlite command-line interface."""

import io
import os
import shutil
import sys
import tempfile

from gitlite import cli
from gitlite.cli import AmbiguousObjectId, resolve_object
from gitlite.errors import InvalidObjectId, NotGitRepository, ObjectMissing
from gitlite.object_store import MemoryObjectStore
from gitlite.repo import Repo

from . import TestCase

doc_blob_sha = "bd9dbf5aae1a3862dd1526723246b20206e5fc37"


class MockStream:
    """Text stream that also exposes its bytes through .buffer."""

    def __init__(self) -> None:
        self.buffer = io.BytesIO()

    def write(self, data: str) -> int:
        return self.buffer.write(data.encode("utf-8"))

    def flush(self) -> None:
        pass

    def getvalue(self) -> bytes:
        return self.buffer.getvalue()


class GitliteCliTestCase(TestCase):
    """Base class for CLI tests."""

    def setUp(self) -> None:
        super().setUp()
        self.test_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.test_dir)
        self.repo_path = os.path.join(self.test_dir, "repo")
        os.mkdir(self.repo_path)

    def _run_cli(
        self, *args: str, stdin: bytes = b"", cwd: str | None = None
    ) -> tuple[int | None, bytes]:
        """Run a CLI command and capture its standard output."""
        old_stdout = sys.stdout
        old_stdin = sys.stdin
        old_cwd = os.getcwd()
        try:
            sys.stdout = MockStream()  # type: ignore[assignment]
            sys.stdin = io.TextIOWrapper(io.BytesIO(stdin))
            os.chdir(cwd or self.repo_path)
            result = cli.main(list(args))
            return result, sys.stdout.getvalue()  # type: ignore[attr-defined]
        finally:
            sys.stdout = old_stdout
            sys.stdin = old_stdin
            os.chdir(old_cwd)

    def _init(self) -> None:
        result, _ = self._run_cli("init")
        self.assertIsNone(result)


class InitCommandTest(GitliteCliTestCase):
    def test_init_cwd(self) -> None:
        result, stdout = self._run_cli("init")
        self.assertIsNone(result)
        controldir = os.path.join(os.path.realpath(self.repo_path), ".git")
        self.assertTrue(os.path.isdir(os.path.join(controldir, "objects")))
        self.assertTrue(os.path.isdir(os.path.join(controldir, "refs")))
        self.assertTrue(stdout.startswith(b"Initialized empty repository in "))
        self.assertTrue(stdout.endswith(b".git\n"))

    def test_init_path(self) -> None:
        new_repo_path = os.path.join(self.test_dir, "new_repo")
        result, stdout = self._run_cli("init", new_repo_path)
        self.assertIsNone(result)
        controldir = os.path.join(new_repo_path, ".git")
        self.assertEqual(
            f"Initialized empty repository in {controldir}\n".encode(), stdout
        )
        with open(os.path.join(controldir, "HEAD"), "rb") as f:
            self.assertEqual(b"ref: refs/heads/main\n", f.read())

    def test_init_twice(self) -> None:
        self._init()
        self._init()
        with open(os.path.join(self.repo_path, ".git", "HEAD"), "rb") as f:
            self.assertEqual(b"ref: refs/heads/main\n", f.read())

    def test_init_under_file(self) -> None:
        blocker = os.path.join(self.test_dir, "blocker")
        with open(blocker, "wb") as f:
            f.write(b"")
        with self.assertLogs("gitlite.cli", "ERROR") as cm:
            result, _ = self._run_cli("init", blocker)
        self.assertEqual(1, result)
        self.assertTrue(cm.output[0].startswith("ERROR:gitlite.cli:error: "))


class HashObjectCommandTest(GitliteCliTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.file_path = os.path.join(self.repo_path, "doc.txt")
        with open(self.file_path, "wb") as f:
            f.write(b"what is up, doc?")

    def test_hash_file(self) -> None:
        result, stdout = self._run_cli("hash-object", "doc.txt")
        self.assertIsNone(result)
        self.assertEqual(f"{doc_blob_sha}\n".encode(), stdout)

    def test_hash_without_repository(self) -> None:
        result, _ = self._run_cli("hash-object", "doc.txt")
        self.assertIsNone(result)
        self.assertFalse(os.path.exists(os.path.join(self.repo_path, ".git")))

    def test_hash_stdin(self) -> None:
        result, stdout = self._run_cli("hash-object", "--stdin", stdin=b"")
        self.assertIsNone(result)
        self.assertEqual(b"e69de29bb2d1d6434b8b29ae775ad8c2e48c5391\n", stdout)

    def test_write(self) -> None:
        self._init()
        result, stdout = self._run_cli("hash-object", "-w", "doc.txt")
        self.assertIsNone(result)
        self.assertEqual(f"{doc_blob_sha}\n".encode(), stdout)
        self.assertTrue(
            os.path.isfile(
                os.path.join(
                    self.repo_path, ".git", "objects", doc_blob_sha[:2], doc_blob_sha[2:]
                )
            )
        )

    def test_write_from_subdirectory(self) -> None:
        self._init()
        subdir = os.path.join(self.repo_path, "sub")
        os.mkdir(subdir)
        result, _ = self._run_cli(
            "hash-object", "-w", "--stdin", stdin=b"what is up, doc?", cwd=subdir
        )
        self.assertIsNone(result)
        with Repo(os.path.join(self.repo_path, ".git")) as repo:
            self.assertIn(doc_blob_sha, repo)

    def test_write_without_repository(self) -> None:
        try:
            Repo.discover(self.test_dir).close()
        except NotGitRepository:
            pass
        else:
            self.skipTest("temporary directory is inside a repository")
        with self.assertLogs("gitlite.cli", "ERROR") as cm:
            result, _ = self._run_cli("hash-object", "-w", "doc.txt")
        self.assertEqual(1, result)
        self.assertIn("No repository was found", cm.output[0])

    def test_unsupported_type(self) -> None:
        with self.assertLogs("gitlite.cli", "ERROR") as cm:
            result, _ = self._run_cli("hash-object", "-t", "commit", "doc.txt")
        self.assertEqual(1, result)
        self.assertIn("unsupported object type 'commit'", cm.output[0])

    def test_missing_file(self) -> None:
        with self.assertLogs("gitlite.cli", "ERROR"):
            result, _ = self._run_cli("hash-object", "nonexistent")
        self.assertEqual(1, result)


class CatFileCommandTest(GitliteCliTestCase):
    def setUp(self) -> None:
        super().setUp()
        self._init()
        with Repo(os.path.join(self.repo_path, ".git")) as repo:
            repo.object_store.add_data("blob", b"what is up, doc?")

    def test_pretty(self) -> None:
        result, stdout = self._run_cli("cat-file", "-p", doc_blob_sha)
        self.assertIsNone(result)
        self.assertEqual(b"what is up, doc?", stdout)

    def test_type(self) -> None:
        result, stdout = self._run_cli("cat-file", "-t", doc_blob_sha)
        self.assertIsNone(result)
        self.assertEqual(b"blob\n", stdout)

    def test_size(self) -> None:
        result, stdout = self._run_cli("cat-file", "-s", doc_blob_sha)
        self.assertIsNone(result)
        self.assertEqual(b"16\n", stdout)

    def test_exists(self) -> None:
        self.assertEqual((0, b""), self._run_cli("cat-file", "-e", doc_blob_sha))
        self.assertEqual((1, b""), self._run_cli("cat-file", "-e", "0" * 40))
        self.assertEqual((1, b""), self._run_cli("cat-file", "-e", "xyz"))

    def test_abbreviated(self) -> None:
        result, stdout = self._run_cli("cat-file", "-p", doc_blob_sha[:7])
        self.assertIsNone(result)
        self.assertEqual(b"what is up, doc?", stdout)

    def test_uppercase(self) -> None:
        result, stdout = self._run_cli("cat-file", "-t", doc_blob_sha.upper())
        self.assertIsNone(result)
        self.assertEqual(b"blob\n", stdout)

    def test_missing(self) -> None:
        with self.assertLogs("gitlite.cli", "ERROR") as cm:
            result, stdout = self._run_cli("cat-file", "-p", "0" * 40)
        self.assertEqual(1, result)
        self.assertEqual(b"", stdout)
        self.assertEqual(
            [f"ERROR:gitlite.cli:error: {'0' * 40} is not in the object store"],
            cm.output,
        )

    def test_corrupt(self) -> None:
        path = os.path.join(
            self.repo_path, ".git", "objects", doc_blob_sha[:2], doc_blob_sha[2:]
        )
        os.chmod(path, 0o644)
        with open(path, "wb") as f:
            f.write(b"garbage")
        with self.assertLogs("gitlite.cli", "ERROR"):
            result, _ = self._run_cli("cat-file", "-p", doc_blob_sha)
        self.assertEqual(1, result)

    def test_requires_mode(self) -> None:
        with self.assertRaises(SystemExit):
            self._run_cli("cat-file", doc_blob_sha)


class ResolveObjectTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.store = MemoryObjectStore()
        self.doc = self.store.add_data("blob", b"what is up, doc?")

    def test_full(self) -> None:
        self.assertEqual(self.doc, resolve_object(self.store, self.doc.upper()))

    def test_full_missing_is_not_checked(self) -> None:
        self.assertEqual("0" * 40, resolve_object(self.store, "0" * 40))

    def test_prefix(self) -> None:
        self.assertEqual(self.doc, resolve_object(self.store, "bd9d"))

    def test_prefix_too_short(self) -> None:
        self.assertRaises(InvalidObjectId, resolve_object, self.store, "bd9")

    def test_not_hex(self) -> None:
        self.assertRaises(InvalidObjectId, resolve_object, self.store, "bd9x")

    def test_no_match(self) -> None:
        self.assertRaises(ObjectMissing, resolve_object, self.store, "0000")

    def test_ambiguous(self) -> None:
        self.store.add_raw("bd9d" + "0" * 36, b"")
        with self.assertRaises(AmbiguousObjectId) as cm:
            resolve_object(self.store, "bd9d")
        self.assertEqual(2, len(cm.exception.candidates))


class HelpCommandTest(GitliteCliTestCase):
    def test_help(self) -> None:
        result, stdout = self._run_cli("help")
        self.assertIsNone(result)
        self.assertIn(b"cat-file", stdout)
        self.assertIn(b"hash-object", stdout)
        self.assertIn(b"init", stdout)

    def test_no_args(self) -> None:
        result, stdout = self._run_cli()
        self.assertEqual(1, result)
        self.assertTrue(stdout.startswith(b"usage: gitlite"))

    def test_unknown_command(self) -> None:
        with self.assertLogs("gitlite.cli", "CRITICAL") as cm:
            result, _ = self._run_cli("frobnicate")
        self.assertEqual(1, result)
        self.assertIn("No such subcommand: frobnicate", cm.output[0])
