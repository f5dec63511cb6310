# object_store.py -- Object store for stored objects
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

"""Object store interfaces and implementation.

Objects are kept loose: one zlib-compressed file per object, at a path
derived from the object's identifier. With the default fanout of 2 the
object ``0a5159e4fd9efdc3530c880fa15b672f08d47421`` lives at::

    objects/0a/5159e4fd9efdc3530c880fa15b672f08d47421
"""

__all__ = [
    "PACK_MODE",
    "BaseObjectStore",
    "DiskObjectStore",
    "MemoryObjectStore",
]

import logging
import os
import tempfile
from collections.abc import Iterable, Iterator
from contextlib import suppress
from typing import Any

from .compression import decompress
from .errors import (
    ChecksumMismatch,
    InvalidObjectId,
    InvalidObjectType,
    ObjectFormatException,
    ObjectMissing,
)
from .file import GitFile
from .object_format import DEFAULT_OBJECT_FORMAT, ObjectFormat
from .objects import (
    ObjectID,
    ShaFile,
    check_object_size,
    hex_to_filename,
    parse_object,
    parse_object_header,
    valid_hexsha,
)

logger = logging.getLogger(__name__)

PACK_MODE = 0o444


class BaseObjectStore:
    """Object store interface."""

    def __init__(
        self, *, strict: bool = False, object_format: ObjectFormat | None = None
    ) -> None:
        """Initialize object store.

        Args:
          strict: Verify the declared size and the digest of every object read
          object_format: Object format to use (defaults to DEFAULT_OBJECT_FORMAT)
        """
        self.strict = strict
        self.object_format = object_format if object_format else DEFAULT_OBJECT_FORMAT

    def _to_hexsha(self, sha: str) -> ObjectID:
        if not isinstance(sha, str) or not valid_hexsha(sha, self.object_format):
            raise InvalidObjectId(sha, self.object_format.hex_length)
        return ObjectID(sha.lower())

    def _parse_loose(self, sha: ObjectID, data: bytes) -> tuple[str, bytes]:
        header, content = parse_object(decompress(data))
        type_name, size = parse_object_header(header)
        if self.strict:
            check_object_size(size, content)
            got = self.object_format.hash_object_hex(header + b"\0" + content)
            if got != sha:
                raise ChecksumMismatch(sha, got)
        return type_name, content

    def contains_loose(self, sha: str) -> bool:
        """Check if a particular object is present by SHA and is loose."""
        raise NotImplementedError(self.contains_loose)

    def __contains__(self, sha: str) -> bool:
        """Check if a particular object is present by SHA."""
        return self.contains_loose(sha)

    def __iter__(self) -> Iterator[ObjectID]:
        """Iterate over the SHAs that are present in this store."""
        raise NotImplementedError(self.__iter__)

    def get_raw(self, name: str) -> tuple[str, bytes]:
        """Obtain the type and content of an object.

        Args:
          name: hex sha for the object.
        Returns: tuple with type name and object content.
        Raises:
          InvalidObjectId: if name is not a full hex sha
          ObjectMissing: if the object is not in the store
          CorruptObjectStream: if the stored data does not inflate
          ObjectFormatException: if the inflated data is not a valid object
        """
        raise NotImplementedError(self.get_raw)

    def __getitem__(self, sha: str) -> ShaFile:
        """Obtain an object by SHA."""
        type_name, content = self.get_raw(sha)
        try:
            return ShaFile.from_raw_string(type_name, content)
        except InvalidObjectType as exc:
            raise ObjectFormatException(
                f"{sha} has unsupported type {type_name!r}"
            ) from exc

    def add_object(self, obj: ShaFile) -> ObjectID:
        """Add a single object to this object store.

        Returns: the SHA of the object
        """
        raise NotImplementedError(self.add_object)

    def add_data(self, type_name: str, content: bytes) -> ObjectID:
        """Store content as an object of the given type.

        Args:
          type_name: Type tag of the object, e.g. "blob"
          content: Raw object content
        Returns: the SHA of the object
        Raises:
          InvalidObjectType: if type_name is not a supported object type
        """
        return self.add_object(ShaFile.from_raw_string(type_name, content))

    def add_objects(self, objects: Iterable[ShaFile]) -> list[ObjectID]:
        """Add a set of objects to this object store."""
        return [self.add_object(obj) for obj in objects]

    def iter_prefix(self, prefix: str) -> Iterator[ObjectID]:
        """Iterate over all object SHAs starting with the given hex prefix."""
        prefix = prefix.lower()
        for sha in self:
            if sha.startswith(prefix):
                yield sha

    def close(self) -> None:
        """Close any files opened by this object store."""


class DiskObjectStore(BaseObjectStore):
    """Object store that keeps loose objects in a directory on disk."""

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        loose_compression_level: int = -1,
        fsync_object_files: bool = False,
        file_mode: int | None = None,
        dir_mode: int | None = None,
        fanout: int = 2,
        strict: bool = False,
        object_format: ObjectFormat | None = None,
    ) -> None:
        """Open an object store.

        Args:
          path: Path of the object store.
          loose_compression_level: zlib compression level for loose objects
          fsync_object_files: whether to fsync object files for durability
          file_mode: Permission bits for object files (default read-only)
          dir_mode: Permission bits for shard directories
          fanout: Number of identifier characters used as shard directory name
          strict: Verify the declared size and the digest of every object read
          object_format: Hash algorithm to use (SHA1 or SHA256)
        """
        super().__init__(strict=strict, object_format=object_format)
        if not 0 < fanout < self.object_format.hex_length:
            raise ValueError(f"invalid fanout {fanout}")
        self.path = os.fspath(path)
        self.loose_compression_level = loose_compression_level
        self.fsync_object_files = fsync_object_files
        self.file_mode = file_mode
        self.dir_mode = dir_mode
        self.fanout = fanout

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.path!r})>"

    @classmethod
    def init(cls, path: str | os.PathLike[str], **kwargs: Any) -> "DiskObjectStore":
        """Create the object directory, if needed, and open a store on it."""
        try:
            os.mkdir(path)
        except FileExistsError:
            pass
        return cls(path, **kwargs)

    def shard_path(self, sha: str) -> str:
        """Return the path at which the object with the given SHA is stored.

        Raises:
          InvalidObjectId: if sha is not a full hex sha
        """
        return hex_to_filename(self.path, self._to_hexsha(sha), self.fanout)

    def contains_loose(self, sha: str) -> bool:
        """Check if a particular object is present by SHA and is loose."""
        return os.path.exists(self.shard_path(sha))

    def __iter__(self) -> Iterator[ObjectID]:
        """Iterate over the SHAs of all loose objects."""
        rest_length = self.object_format.hex_length - self.fanout
        try:
            bases = sorted(os.listdir(self.path))
        except FileNotFoundError:
            return
        for base in bases:
            if len(base) != self.fanout:
                continue
            try:
                names = sorted(os.listdir(os.path.join(self.path, base)))
            except NotADirectoryError:
                continue
            for rest in names:
                sha = base + rest
                if len(rest) == rest_length and valid_hexsha(sha, self.object_format):
                    yield ObjectID(sha)

    def count_loose_objects(self) -> int:
        """Count the number of loose objects in the object store."""
        return sum(1 for _ in self)

    def get_raw(self, name: str) -> tuple[str, bytes]:
        """Obtain the type and content of an object.

        Args:
          name: hex sha for the object.
        Returns: tuple with type name and object content.
        """
        sha = self._to_hexsha(name)
        path = hex_to_filename(self.path, sha, self.fanout)
        try:
            with GitFile(path, "rb") as f:
                data = f.read()
        except FileNotFoundError:
            raise ObjectMissing(sha) from None
        logger.debug("Read %d bytes for object %s from %s", len(data), sha, path)
        return self._parse_loose(sha, data)

    def add_object(self, obj: ShaFile) -> ObjectID:
        """Add a single object to this object store.

        Args:
          obj: Object to add
        Returns: the SHA of the object
        """
        sha = obj.get_id(self.object_format)
        path = hex_to_filename(self.path, sha, self.fanout)
        dir = os.path.dirname(path)
        try:
            os.mkdir(dir)
            if self.dir_mode is not None:
                os.chmod(dir, self.dir_mode)
        except FileExistsError:
            pass
        if os.path.exists(path):
            logger.debug("Object %s already present", sha)
            return sha
        # Write to a private temporary file, then rename it into place.
        fd, tmp_path = tempfile.mkstemp(dir=dir, prefix="tmp_obj_")
        try:
            with os.fdopen(fd, "wb") as f:
                mask = self.file_mode if self.file_mode is not None else PACK_MODE
                os.chmod(tmp_path, mask)
                f.writelines(obj.as_legacy_object_chunks(self.loose_compression_level))
                if self.fsync_object_files:
                    f.flush()
                    os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            with suppress(FileNotFoundError):
                os.remove(tmp_path)
            raise
        logger.debug("Wrote object %s to %s", sha, path)
        return sha


class MemoryObjectStore(BaseObjectStore):
    """Object store that keeps compressed objects in memory."""

    def __init__(
        self,
        *,
        loose_compression_level: int = -1,
        strict: bool = False,
        object_format: ObjectFormat | None = None,
    ) -> None:
        """Initialize a MemoryObjectStore.

        Creates an empty in-memory object store.
        """
        super().__init__(strict=strict, object_format=object_format)
        self.loose_compression_level = loose_compression_level
        self._data: dict[ObjectID, bytes] = {}

    def contains_loose(self, sha: str) -> bool:
        """Check if a particular object is present by SHA and is loose."""
        return self._to_hexsha(sha) in self._data

    def __iter__(self) -> Iterator[ObjectID]:
        """Iterate over the SHAs that are present in this store."""
        return iter(sorted(self._data))

    def get_raw(self, name: str) -> tuple[str, bytes]:
        """Obtain the type and content of an object.

        Args:
          name: hex sha for the object.
        Returns: tuple with type name and object content.
        """
        sha = self._to_hexsha(name)
        try:
            data = self._data[sha]
        except KeyError:
            raise ObjectMissing(sha) from None
        return self._parse_loose(sha, data)

    def add_object(self, obj: ShaFile) -> ObjectID:
        """Add a single object to this object store."""
        sha = obj.get_id(self.object_format)
        self._data.setdefault(sha, obj.as_legacy_object(self.loose_compression_level))
        return sha

    def add_raw(self, sha: str, data: bytes) -> None:
        """Store already-compressed data under the given SHA, for testing only."""
        self._data[self._to_hexsha(sha)] = data
