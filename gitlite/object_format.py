# object_format.py -- Object format abstraction layer
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

"""Digest functions used to name stored objects.

An object's identifier is the lowercase hex digest of its canonical
serialized form. SHA-1 is the default, which keeps stored objects readable by
git; SHA-256 is available for stores that want the longer identifiers.
"""

__all__ = [
    "DEFAULT_OBJECT_FORMAT",
    "OBJECT_FORMATS",
    "SHA1",
    "SHA256",
    "ObjectFormat",
    "get_object_format",
]

from collections.abc import Callable
from hashlib import sha1, sha256
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from _hashlib import HASH


class ObjectFormat:
    """Object format (hash algorithm) used to name objects."""

    def __init__(
        self,
        name: str,
        hex_length: int,
        hash_func: Callable[[], "HASH"],
    ) -> None:
        """Initialize an object format.

        Args:
            name: Name of the format (e.g., "sha1", "sha256")
            hex_length: Length of the hexadecimal identifier in characters
            hash_func: Hash constructor from hashlib
        """
        self.name = name
        self.hex_length = hex_length
        self.hash_func = hash_func

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"ObjectFormat({self.name!r})"

    def new_hash(self) -> "HASH":
        """Create a new hash object, for feeding data in chunks."""
        return self.hash_func()

    def hash_object_hex(self, data: bytes) -> str:
        """Hash data and return the identifier.

        Args:
            data: Data to hash; any byte sequence, including empty

        Returns:
            Lowercase hexadecimal digest of hex_length characters
        """
        h = self.new_hash()
        h.update(data)
        return h.hexdigest()


SHA1 = ObjectFormat("sha1", hex_length=40, hash_func=sha1)
SHA256 = ObjectFormat("sha256", hex_length=64, hash_func=sha256)

OBJECT_FORMATS = {
    "sha1": SHA1,
    "sha256": SHA256,
}

DEFAULT_OBJECT_FORMAT = SHA1


def get_object_format(name: str | None = None) -> ObjectFormat:
    """Get an object format by name.

    Args:
        name: Format name ("sha1" or "sha256"). If None, returns default.

    Returns:
        ObjectFormat instance

    Raises:
        ValueError: If the format name is not supported
    """
    if name is None:
        return DEFAULT_OBJECT_FORMAT
    try:
        return OBJECT_FORMATS[name.lower()]
    except KeyError:
        raise ValueError(f"Unsupported object format: {name}")
