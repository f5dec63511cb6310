# objects.py -- Access to stored objects
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

"""Access to stored objects.

Every object is serialized in the same canonical form before it is hashed
and compressed::

    <type> <size>\\0<content>

where ``<type>`` is an ASCII tag and ``<size>`` the decimal length of
``<content>`` in bytes. The header never contains a NUL byte, so the first
NUL always marks the end of the header; the content itself may contain NULs.
"""

__all__ = [
    "OBJECT_CLASSES",
    "Blob",
    "ObjectID",
    "ShaFile",
    "check_object_size",
    "hex_to_filename",
    "object_class",
    "object_header",
    "parse_object",
    "parse_object_header",
    "serialize_object",
    "valid_hexsha",
]

import binascii
import os
from collections.abc import Iterable, Iterator
from typing import NewType

from .compression import compress_chunks, decompress
from .errors import InvalidObjectType, ObjectFormatException
from .object_format import DEFAULT_OBJECT_FORMAT, ObjectFormat

ObjectID = NewType("ObjectID", str)


def valid_hexsha(hex: str, object_format: ObjectFormat = DEFAULT_OBJECT_FORMAT) -> bool:
    """Check whether a string is a full identifier for the given object format."""
    if len(hex) != object_format.hex_length:
        return False
    try:
        binascii.unhexlify(hex)
    except ValueError:
        return False
    else:
        return True


def hex_to_filename(
    path: str | os.PathLike[str], hex: str, fanout: int = 2
) -> str:
    """Takes a hex sha and returns its filename relative to the given path.

    The first ``fanout`` characters name the shard directory and the rest
    name the file, e.g. ``0a/5159e4fd9efdc3530c880fa15b672f08d47421``.
    """
    directory = hex[:fanout]
    filename = hex[fanout:]
    return os.path.join(path, directory, filename)


def object_header(type_name: str, length: int) -> bytes:
    """Return the canonical header for an object of the given type and size."""
    return f"{type_name} {length}\0".encode("ascii")


def serialize_object(type_name: str, content: bytes) -> bytes:
    """Build the canonical serialized form of an object.

    Args:
      type_name: Type tag; must be a known object type
      content: Raw object content, of any length including zero
    Returns: ``<type> <size>\\0<content>``
    Raises:
      InvalidObjectType: if type_name is not a known object type
    """
    object_class(type_name)
    return object_header(type_name, len(content)) + content


def parse_object(raw: bytes) -> tuple[bytes, bytes]:
    """Split a canonical serialized object into header and content.

    The declared size in the header is not checked against the content; use
    check_object_size for that.

    Returns: tuple of (header, content)
    Raises:
      ObjectFormatException: if raw contains no NUL byte
    """
    end = raw.find(b"\0")
    if end == -1:
        raise ObjectFormatException("object header is not terminated by a NUL byte")
    return raw[:end], raw[end + 1 :]


def parse_object_header(header: bytes) -> tuple[str, int]:
    """Parse an object header into its type tag and declared size.

    Raises:
      ObjectFormatException: if the header is not ``<type> <decimal size>``
    """
    try:
        type_name, size_text = header.split(b" ", 1)
    except ValueError as exc:
        raise ObjectFormatException(f"invalid object header {header!r}") from exc
    if not size_text.isdigit():
        raise ObjectFormatException(f"invalid object size {size_text!r}")
    try:
        return type_name.decode("ascii"), int(size_text)
    except UnicodeDecodeError as exc:
        raise ObjectFormatException(f"invalid object type {type_name!r}") from exc


def check_object_size(size: int, content: bytes) -> None:
    """Check that a declared object size matches its content.

    Raises:
      ObjectFormatException: on a mismatch
    """
    if size != len(content):
        raise ObjectFormatException(
            f"object declares {size} bytes but has {len(content)}"
        )


def object_class(type_name: str) -> type["ShaFile"]:
    """Get the object class corresponding to the given type.

    Args:
      type_name: A type name string.
    Returns: The ShaFile subclass corresponding to the given type.
    Raises:
      InvalidObjectType: if there is no such object type
    """
    try:
        return _TYPE_MAP[type_name]
    except KeyError:
        raise InvalidObjectType(type_name) from None


class ShaFile:
    """A stored object, named by the digest of its canonical form."""

    type_name: str

    def __init__(self) -> None:
        """Don't call this directly."""
        self._chunked_text: list[bytes] = []
        self._sha: str | None = None

    @classmethod
    def from_string(cls, string: bytes) -> "ShaFile":
        """Create an object from its raw content."""
        obj = cls()
        obj.set_raw_string(string)
        return obj

    @staticmethod
    def from_raw_string(type_name: str, string: bytes) -> "ShaFile":
        """Creates an object of the indicated type from the raw string given.

        Args:
          type_name: The type tag of the object.
          string: The raw uncompressed content.
        """
        obj = object_class(type_name)()
        obj.set_raw_string(string)
        return obj

    @staticmethod
    def from_legacy_object(data: bytes) -> "ShaFile":
        """Parse a compressed loose object, as stored on disk."""
        header, content = parse_object(decompress(data))
        type_name, _ = parse_object_header(header)
        try:
            cls = object_class(type_name)
        except InvalidObjectType as exc:
            raise ObjectFormatException(f"{type_name} is not a known object type") from exc
        obj = cls()
        obj.set_raw_string(content)
        return obj

    def set_raw_string(self, text: bytes) -> None:
        """Set the content of this object."""
        if not isinstance(text, bytes):
            raise TypeError(f"Expected bytes for text, got {text!r}")
        self.set_raw_chunks([text])

    def set_raw_chunks(self, chunks: Iterable[bytes]) -> None:
        """Set the content of this object from a sequence of chunks."""
        self._chunked_text = list(chunks)
        self._sha = None

    def as_raw_string(self) -> bytes:
        """Return the content of this object."""
        return b"".join(self._chunked_text)

    def raw_length(self) -> int:
        """Returns the length of the content of this object."""
        return sum(len(chunk) for chunk in self._chunked_text)

    def _header(self) -> bytes:
        return object_header(self.type_name, self.raw_length())

    def as_serialized_chunks(self) -> Iterator[bytes]:
        """Return the canonical serialized form as chunks."""
        yield self._header()
        yield from self._chunked_text

    def as_serialized_string(self) -> bytes:
        """Return the canonical serialized form, header included."""
        return b"".join(self.as_serialized_chunks())

    def as_legacy_object_chunks(self, compression_level: int = -1) -> Iterator[bytes]:
        """Return the compressed canonical form as chunks."""
        return compress_chunks(self.as_serialized_chunks(), compression_level)

    def as_legacy_object(self, compression_level: int = -1) -> bytes:
        """Return the compressed canonical form, as written to disk."""
        return b"".join(self.as_legacy_object_chunks(compression_level))

    def get_id(self, object_format: ObjectFormat | None = None) -> ObjectID:
        """Return the identifier of this object under the given format."""
        if object_format is None or object_format is DEFAULT_OBJECT_FORMAT:
            if self._sha is None:
                self._sha = self._make_sha(DEFAULT_OBJECT_FORMAT)
            return ObjectID(self._sha)
        return ObjectID(self._make_sha(object_format))

    def _make_sha(self, object_format: ObjectFormat) -> str:
        ret = object_format.new_hash()
        for chunk in self.as_serialized_chunks():
            ret.update(chunk)
        return ret.hexdigest()

    @property
    def id(self) -> ObjectID:
        """The hex SHA of this object."""
        return self.get_id()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.id}>"

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        """Return true if the sha of the two objects match."""
        return isinstance(other, ShaFile) and self.id == other.id


class Blob(ShaFile):
    """A blob object: opaque file content."""

    type_name = "blob"

    def _get_data(self) -> bytes:
        return self.as_raw_string()

    def _set_data(self, data: bytes) -> None:
        self.set_raw_string(data)

    data = property(
        _get_data, _set_data, doc="The text contained within the blob object."
    )

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> "Blob":
        """Create a blob holding the content of a file."""
        with open(path, "rb") as f:
            blob = cls()
            blob.set_raw_string(f.read())
            return blob


OBJECT_CLASSES = (Blob,)

_TYPE_MAP: dict[str, type[ShaFile]] = {cls.type_name: cls for cls in OBJECT_CLASSES}
