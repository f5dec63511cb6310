# repo.py -- For dealing with repositories.
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

"""Repository access.

A repository is a control directory laid out as::

    HEAD        symbolic ref to the default branch
    objects/    loose objects, see gitlite.object_store
    refs/       empty; branches are not managed here
"""

__all__ = [
    "BASE_DIRECTORIES",
    "CONTROLDIR",
    "DEFAULT_BRANCH",
    "HEADFILE",
    "OBJECTDIR",
    "REFSDIR",
    "SYMREF",
    "Repo",
]

import logging
import os
from types import TracebackType

from .errors import NotGitRepository
from .file import GitFile
from .object_format import ObjectFormat
from .object_store import BaseObjectStore, DiskObjectStore
from .objects import ShaFile

logger = logging.getLogger(__name__)

CONTROLDIR = ".git"
OBJECTDIR = "objects"
REFSDIR = "refs"
REFSDIR_HEADS = "heads"
HEADFILE = "HEAD"
SYMREF = b"ref: "
DEFAULT_BRANCH = "main"

BASE_DIRECTORIES = [
    [OBJECTDIR],
    [REFSDIR],
]


def _mkdir_if_missing(path: str) -> None:
    try:
        os.mkdir(path)
    except FileExistsError:
        pass


def _put_named_file(controldir: str, path: str, contents: bytes) -> None:
    """Write a file to the control dir with the given name and contents."""
    with GitFile(os.path.join(controldir, path), "wb") as f:
        f.write(contents)


class Repo:
    """A repository: a control directory plus its object store.

    Open an existing one with ``Repo(path)`` or create one with
    ``Repo.init(path)``; ``path`` is the control directory itself.
    """

    object_store: BaseObjectStore

    def __init__(
        self,
        root: str | os.PathLike[str],
        *,
        object_store: BaseObjectStore | None = None,
        object_format: ObjectFormat | None = None,
    ) -> None:
        """Open a repository.

        Args:
          root: Path to the control directory
          object_store: Object store to use instead of the on-disk one
          object_format: Hash algorithm of the on-disk object store
        Raises:
          NotGitRepository: if root does not look like a repository
        """
        self._controldir = os.fspath(root)
        if not os.path.isdir(
            os.path.join(self._controldir, OBJECTDIR)
        ) or not os.path.isfile(os.path.join(self._controldir, HEADFILE)):
            raise NotGitRepository(f"No repository was found at {self._controldir}")
        if object_store is None:
            object_store = DiskObjectStore(
                os.path.join(self._controldir, OBJECTDIR), object_format=object_format
            )
        self.object_store = object_store

    def __repr__(self) -> str:
        return f"<Repo at {self._controldir!r}>"

    def controldir(self) -> str:
        """Return the path of the control directory."""
        return self._controldir

    @classmethod
    def discover(cls, start: str | os.PathLike[str] = ".") -> "Repo":
        """Find the repository whose working tree contains start.

        Walks up from start looking for a CONTROLDIR directory.

        Raises:
          NotGitRepository: if no repository is found up to the filesystem root
        """
        path = os.path.abspath(start)
        while True:
            candidate = os.path.join(path, CONTROLDIR)
            if os.path.isdir(candidate):
                return cls(candidate)
            parent = os.path.dirname(path)
            if parent == path:
                raise NotGitRepository(
                    f"No repository was found at {os.fspath(start)} or its parents"
                )
            path = parent

    def get_named_file(self, path: str) -> bytes | None:
        """Get the contents of a file from the control dir, or None if missing."""
        try:
            with GitFile(os.path.join(self._controldir, path), "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None

    def get_head(self) -> str:
        """Return the target of HEAD: a ref name, or a hex SHA if detached."""
        contents = self.get_named_file(HEADFILE)
        if contents is None:
            raise NotGitRepository(f"{self._controldir} has no {HEADFILE}")
        contents = contents.rstrip(b"\r\n")
        if contents.startswith(SYMREF):
            contents = contents[len(SYMREF) :]
        return contents.decode("utf-8")

    @classmethod
    def init(
        cls,
        path: str | os.PathLike[str],
        *,
        mkdir: bool = True,
        default_branch: str = DEFAULT_BRANCH,
        object_format: ObjectFormat | None = None,
    ) -> "Repo":
        """Create a new repository, or reinitialize an existing one.

        Directories that already exist are left alone and HEAD is rewritten
        with the same contents, so calling this repeatedly is harmless.

        Args:
          path: Path of the control directory to create
          mkdir: Whether to create path itself if it does not exist
          default_branch: Branch HEAD points at
          object_format: Hash algorithm of the object store
        Returns: `Repo` instance
        Raises:
          OSError: if a directory or HEAD cannot be created
        """
        path = os.fspath(path)
        if mkdir:
            _mkdir_if_missing(path)
        for d in BASE_DIRECTORIES:
            _mkdir_if_missing(os.path.join(path, *d))
        head = SYMREF + f"{REFSDIR}/{REFSDIR_HEADS}/{default_branch}\n".encode("utf-8")
        _put_named_file(path, HEADFILE, head)
        logger.debug("Initialized repository in %s", path)
        return cls(path, object_format=object_format)

    def __getitem__(self, name: str) -> ShaFile:
        """Retrieve an object by SHA."""
        return self.object_store[name]

    def __contains__(self, name: str) -> bool:
        """Check if a specific object is in the repository."""
        return name in self.object_store

    def close(self) -> None:
        """Close any files opened by this repository."""
        self.object_store.close()

    def __enter__(self) -> "Repo":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
