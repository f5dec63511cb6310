# file.py -- Safe access to repository files
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

"""Safe access to repository files.

Writes never touch the target path directly. Data for ``foo`` goes to
``foo.lock``, which is renamed over ``foo`` once it has been written
completely, so readers either see the old file or the whole new one.
"""

__all__ = [
    "FileLocked",
    "GitFile",
    "ensure_dir_exists",
]

import errno
import os
import warnings
from collections.abc import Iterable
from types import TracebackType
from typing import IO


def ensure_dir_exists(dirname: str | os.PathLike[str]) -> None:
    """Ensure a directory exists, creating if necessary."""
    try:
        os.makedirs(dirname)
    except FileExistsError:
        pass


class FileLocked(FileExistsError):
    """File is already locked."""

    def __init__(self, filename: str, lockfilename: str) -> None:
        """Initialize FileLocked.

        Args:
          filename: Name of the file that is locked
          lockfilename: Name of the lock file
        """
        self.lockfilename = lockfilename
        super().__init__(errno.EEXIST, f"locked by {lockfilename}", filename)


def GitFile(
    filename: str | os.PathLike[str],
    mode: str = "rb",
    mask: int = 0o644,
    fsync: bool = True,
) -> "IO[bytes] | _GitFile":
    """Open a file, using the lock file protocol for writes.

    Only binary read-only and write-only modes are supported.

    Args:
      filename: Path to the file
      mode: "rb" or "wb"
      mask: Permission bits for created files
      fsync: Whether to fsync written data before renaming it into place
    Returns: a builtin file object for reads, a _GitFile for writes
    """
    if "a" in mode:
        raise OSError("append mode not supported for repository files")
    if "+" in mode:
        raise OSError("read/write mode not supported for repository files")
    if "b" not in mode:
        raise OSError("text mode not supported for repository files")
    if "w" in mode:
        return _GitFile(filename, mode, mask, fsync)
    return open(filename, mode)


class _GitFile:
    """File that follows the lock file protocol for writes.

    Note: You *must* call close() or abort() on a _GitFile for the lock to be
        released; using it as a context manager does that.
    """

    def __init__(
        self, filename: str | os.PathLike[str], mode: str, mask: int, fsync: bool
    ) -> None:
        self._filename = os.fspath(filename)
        self._lockfilename = self._filename + ".lock"
        self._fsync = fsync
        try:
            fd = os.open(
                self._lockfilename,
                os.O_RDWR | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0),
                mask,
            )
        except FileExistsError as exc:
            raise FileLocked(self._filename, self._lockfilename) from exc
        self._file = os.fdopen(fd, mode)
        self._closed = False

    @property
    def name(self) -> str:
        return self._filename

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> int:
        return self._file.write(data)

    def writelines(self, lines: Iterable[bytes]) -> None:
        self._file.writelines(lines)

    def abort(self) -> None:
        """Close and discard the lockfile without overwriting the target."""
        if self._closed:
            return
        self._file.close()
        try:
            os.remove(self._lockfilename)
        except FileNotFoundError:
            pass
        self._closed = True

    def close(self) -> None:
        """Close this file, renaming the lockfile over the target.

        Raises:
          OSError: if the target could not be replaced; the lockfile is
            removed in that case.
        """
        if self._closed:
            return
        self._file.flush()
        if self._fsync:
            os.fsync(self._file.fileno())
        self._file.close()
        try:
            os.replace(self._lockfilename, self._filename)
        finally:
            self.abort()

    def __del__(self) -> None:
        if not getattr(self, "_closed", True):
            warnings.warn(f"unclosed {self!r}", ResourceWarning, stacklevel=2)
            self.abort()

    def __enter__(self) -> "_GitFile":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self.abort()
        else:
            self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self._filename!r}>"
