# errors.py -- errors for gitlite
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

"""gitlite-related exception classes.

Filesystem failures are not wrapped: they surface as the builtin OSError
raised by the failing call.
"""

__all__ = [
    "ChecksumMismatch",
    "CorruptObjectStream",
    "FileFormatException",
    "InvalidObjectId",
    "InvalidObjectType",
    "NotGitRepository",
    "ObjectFormatException",
    "ObjectMissing",
]


class ChecksumMismatch(Exception):
    """A checksum didn't match the expected contents."""

    def __init__(self, expected: str, got: str, extra: str | None = None) -> None:
        """Initialize a ChecksumMismatch exception.

        Args:
            expected: The expected hex digest.
            got: The hex digest that was actually computed.
            extra: Optional additional error information.
        """
        self.expected = expected
        self.got = got
        self.extra = extra
        message = f"Checksum mismatch: Expected {expected}, got {got}"
        if extra is not None:
            message += f"; {extra}"
        Exception.__init__(self, message)


class ObjectMissing(KeyError):
    """Indicates that a requested object is not in the object store."""

    def __init__(self, sha: str) -> None:
        """Initialize an ObjectMissing exception.

        Args:
            sha: The hex SHA of the missing object.
        """
        self.sha = sha
        KeyError.__init__(self, sha)

    def __str__(self) -> str:
        return f"{self.sha} is not in the object store"


class NotGitRepository(Exception):
    """Indicates that no repository was found."""


class InvalidObjectId(ValueError):
    """An object identifier is not a hex digest of the expected length."""

    def __init__(self, sha: str, hex_length: int) -> None:
        """Initialize an InvalidObjectId exception.

        Args:
            sha: The offending identifier.
            hex_length: The number of hex digits that was expected.
        """
        self.sha = sha
        ValueError.__init__(
            self, f"invalid object id {sha!r}: expected {hex_length} hex digits"
        )


class InvalidObjectType(ValueError):
    """An object type tag is not one the store knows about."""

    def __init__(self, type_name: str) -> None:
        """Initialize an InvalidObjectType exception.

        Args:
            type_name: The unsupported type tag.
        """
        self.type_name = type_name
        ValueError.__init__(self, f"unsupported object type {type_name!r}")


class FileFormatException(Exception):
    """Base class for exceptions relating to reading stored object formats."""


class ObjectFormatException(FileFormatException):
    """Indicates an error parsing an object."""


class CorruptObjectStream(FileFormatException):
    """The compressed stream of a stored object could not be inflated."""
