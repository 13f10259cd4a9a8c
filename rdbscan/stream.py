################################################################################
# Copyright (c) 2023, National Research Foundation (SARAO)
#
# Licensed under the BSD 3-Clause License (the "License"); you may not use
# this file except in compliance with the License. You may obtain a copy
# of the License at
#
#   https://opensource.org/licenses/BSD-3-Clause
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
################################################################################

"""Fixed-width reads over the outer RDB stream and over inner blobs.

The RDB format mixes byte orders: wide lengths are big-endian while
integer-encoded strings and most container fields are little-endian, so
every multi-byte read names its byte order explicitly.
"""

import struct
from typing import BinaryIO, Optional, Union

from .errors import TruncatedInput
from .utils import _PathType
from . import crc64


_INT8 = struct.Struct('<b')
_UINT8 = struct.Struct('<B')
_INT16_LE = struct.Struct('<h')
_UINT16_LE = struct.Struct('<H')
_INT32_LE = struct.Struct('<i')
_UINT32_LE = struct.Struct('<I')
_INT64_LE = struct.Struct('<q')
_UINT64_LE = struct.Struct('<Q')
_UINT16_BE = struct.Struct('>H')
_UINT32_BE = struct.Struct('>I')
_UINT64_BE = struct.Struct('>Q')
_FLOAT_LE = struct.Struct('<f')
_DOUBLE_LE = struct.Struct('<d')

#: Largest single request passed to the underlying file object
MAX_READ_CHUNK = 1024 * 1024


class ByteReader:
    """Forward-only reader over a binary file-like object.

    Tracks the absolute offset of the next byte so that errors can report
    where they happened, and optionally maintains a running CRC-64 of
    everything read so far.

    Parameters
    ----------
    fd : file-like object
        Source opened in binary mode. Only its `read` method is used.
    filename : path-like, optional
        Name of the underlying file, for error messages
    checksum : bool, optional
        If true, keep a CRC-64 of all bytes consumed in :attr:`crc`
    offset : int, optional
        Offset of the first byte of `fd` within the enclosing data
    """

    def __init__(self, fd: BinaryIO, filename: Optional[_PathType] = None,
                 checksum: bool = False, offset: int = 0) -> None:
        self._fd = fd
        self.filename = filename
        self.offset = offset
        self.crc = 0 if checksum else None     # type: Optional[int]

    def _fill(self, n: int) -> bytes:
        # Lengths come from the file, so request at most one chunk at a time
        data = self._fd.read(min(n, MAX_READ_CHUNK)) or b''
        if len(data) == n:
            return data
        # Raw (unbuffered) streams may also return short reads before the end
        buf = bytearray(data)
        while len(buf) < n:
            more = self._fd.read(min(n - len(buf), MAX_READ_CHUNK))
            if not more:
                break
            buf += more
        return bytes(buf)

    def read(self, n: int) -> bytes:
        """Read exactly `n` bytes, raising :exc:`TruncatedInput` if fewer remain."""
        if n == 0:
            return b''
        data = self._fill(n)
        if len(data) < n:
            raise TruncatedInput('needed {} bytes but only {} remain'.format(n, len(data)),
                                 self.offset, self.filename)
        if self.crc is not None:
            self.crc = crc64.crc64(data, self.crc)
        self.offset += n
        return data

    def skip(self, n: int) -> None:
        """Move past `n` bytes without keeping them."""
        remaining = n
        while remaining > 0:
            want = min(remaining, MAX_READ_CHUNK)
            data = self._fill(want)
            if len(data) < want:
                raise TruncatedInput('needed {} bytes but only {} remain'
                                     .format(n, n - remaining + len(data)),
                                     self.offset, self.filename)
            if self.crc is not None:
                self.crc = crc64.crc64(data, self.crc)
            remaining -= want
        self.offset += n

    def at_eof(self) -> bool:
        """Check whether the source is exhausted.

        This consumes one byte if one is available, so it is only suitable
        for checking that nothing follows the end of the stream.
        """
        return not self._fill(1)

    def _unpack(self, fmt: struct.Struct) -> Union[int, float]:
        return fmt.unpack(self.read(fmt.size))[0]

    def read_uint8(self) -> int:
        return self._unpack(_UINT8)

    def read_int8(self) -> int:
        return self._unpack(_INT8)

    def read_int16_le(self) -> int:
        return self._unpack(_INT16_LE)

    def read_uint16_le(self) -> int:
        return self._unpack(_UINT16_LE)

    def read_uint16_be(self) -> int:
        return self._unpack(_UINT16_BE)

    def read_int24_le(self) -> int:
        return int.from_bytes(self.read(3), 'little', signed=True)

    def read_uint24_le(self) -> int:
        return int.from_bytes(self.read(3), 'little', signed=False)

    def read_int32_le(self) -> int:
        return self._unpack(_INT32_LE)

    def read_uint32_le(self) -> int:
        return self._unpack(_UINT32_LE)

    def read_uint32_be(self) -> int:
        return self._unpack(_UINT32_BE)

    def read_int64_le(self) -> int:
        return self._unpack(_INT64_LE)

    def read_uint64_le(self) -> int:
        return self._unpack(_UINT64_LE)

    def read_uint64_be(self) -> int:
        return self._unpack(_UINT64_BE)

    def read_float_le(self) -> float:
        return self._unpack(_FLOAT_LE)

    def read_double_le(self) -> float:
        return self._unpack(_DOUBLE_LE)


class BlobReader(ByteReader):
    """Reader over an in-memory blob, such as a ziplist extracted from a string.

    Integers are unpacked straight out of a :class:`memoryview` of the blob
    and string slices are views as well, so re-parsing does not copy the
    blob. Offsets are reported relative to `base`, which is normally the
    offset of the blob in the outer stream.
    """

    def __init__(self, blob: Union[bytes, bytearray, memoryview], base: int = 0,
                 filename: Optional[_PathType] = None) -> None:
        super().__init__(None, filename, offset=base)       # type: ignore
        self._view = memoryview(blob)
        self._pos = 0
        self.base = base

    def __len__(self) -> int:
        return len(self._view)

    @property
    def pos(self) -> int:
        """Position of the next byte relative to the start of the blob."""
        return self._pos

    def remaining(self) -> int:
        return len(self._view) - self._pos

    def peek_uint8(self) -> int:
        if self._pos >= len(self._view):
            raise TruncatedInput('unexpected end of blob', self.offset, self.filename)
        return self._view[self._pos]

    def _check(self, n: int) -> None:
        if self._pos + n > len(self._view):
            raise TruncatedInput('needed {} bytes but only {} remain in blob'
                                 .format(n, self.remaining()), self.offset, self.filename)

    def read_view(self, n: int) -> memoryview:
        """Read exactly `n` bytes as a view into the blob (no copy)."""
        self._check(n)
        view = self._view[self._pos:self._pos + n]
        self._pos += n
        self.offset += n
        return view

    def read(self, n: int) -> bytes:
        return bytes(self.read_view(n))

    def skip(self, n: int) -> None:
        self.read_view(n)

    def at_eof(self) -> bool:
        return self._pos >= len(self._view)

    def _unpack(self, fmt: struct.Struct) -> Union[int, float]:
        self._check(fmt.size)
        value = fmt.unpack_from(self._view, self._pos)[0]
        self._pos += fmt.size
        self.offset += fmt.size
        return value
