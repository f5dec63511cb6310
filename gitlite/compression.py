# compression.py -- zlib encoding of stored objects
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

"""zlib wrapping of canonical object bytes."""

__all__ = [
    "compress",
    "compress_chunks",
    "decompress",
]

import zlib
from collections.abc import Iterable, Iterator

from .errors import CorruptObjectStream


def compress_chunks(chunks: Iterable[bytes], level: int = -1) -> Iterator[bytes]:
    """Compress a sequence of chunks into a single zlib stream.

    Args:
      chunks: Chunks of uncompressed data
      level: zlib compression level (-1 for the zlib default, 0-9 otherwise)
    Returns: Iterator over chunks of the compressed stream
    """
    compobj = zlib.compressobj(level)
    for chunk in chunks:
        yield compobj.compress(chunk)
    yield compobj.flush()


def compress(data: bytes, level: int = -1) -> bytes:
    """Compress data into a zlib stream."""
    return b"".join(compress_chunks([data], level))


def decompress(data: bytes) -> bytes:
    """Inflate a complete zlib stream.

    Raises:
      CorruptObjectStream: if the header is invalid, the stream is truncated,
        the adler32 trailer does not match, or bytes follow the end of the
        stream.
    """
    dcomp = zlib.decompressobj()
    try:
        dcomped = dcomp.decompress(data)
        dcomped += dcomp.flush()
    except zlib.error as exc:
        raise CorruptObjectStream(f"unable to inflate object: {exc}") from exc
    if not dcomp.eof:
        raise CorruptObjectStream("truncated zlib stream")
    if dcomp.unused_data:
        raise CorruptObjectStream(
            f"{len(dcomp.unused_data)} trailing bytes after zlib stream"
        )
    return dcomped
