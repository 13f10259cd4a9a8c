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

"""Decoders for the compact containers that Redis embeds inside RDB strings.

Each decoder works on a blob previously extracted from the outer stream with
:func:`~rdbscan.rdb_utility.read_string`, independently of the outer stream
position. The `base` offset of the blob is only used to report errors at
their absolute position in the file.

Elements are returned as :class:`bytes` for string entries and :class:`int`
for integer-encoded entries.

Problems that do not prevent decoding (such as a header count that
disagrees with the number of entries actually present) are passed to the
optional `report` callable as ``report(offset, message)``; without one they
are logged as warnings.
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import BadEncoding
from .stream import BlobReader
from .utils import _PathType


logger = logging.getLogger(__name__)

Element = Union[bytes, int]
_Report = Optional[Callable[[int, str], None]]

# Intset element width in bytes -> little-endian numpy dtype
_INTSET_DTYPES = {2: np.dtype('<i2'), 4: np.dtype('<i4'), 8: np.dtype('<i8')}

ZIPLIST_HEADER_SIZE = 10
ZIPLIST_END = 0xFF
ZIPLIST_BIG_PREVLEN = 254
# A ziplist header count of 0xFFFF means "too many entries, walk to find out"
ZIPLIST_UNKNOWN_COUNT = 0xFFFF

ZIP_STR_MASK = 0xC0
ZIP_STR_06B = 0
ZIP_STR_14B = 1
ZIP_STR_32B = 2
ZIP_INT_16B = 0xC0
ZIP_INT_32B = 0xD0
ZIP_INT_64B = 0xE0
ZIP_INT_24B = 0xF0
ZIP_INT_8B = 0xFE
ZIP_INT_IMM_MIN = 0xF1
ZIP_INT_IMM_MAX = 0xFD

LISTPACK_HEADER_SIZE = 6
LISTPACK_END = 0xFF
LISTPACK_UNKNOWN_COUNT = 0xFFFF

LP_ENCODING_32BIT_STR = 0xF0
LP_ENCODING_16BIT_INT = 0xF1
LP_ENCODING_24BIT_INT = 0xF2
LP_ENCODING_32BIT_INT = 0xF3
LP_ENCODING_64BIT_INT = 0xF4

ZIPMAP_BIGLEN = 254
ZIPMAP_END = 255


def _reporter(report: _Report) -> Callable[[int, str], None]:
    if report is not None:
        return report

    def log_inconsistency(offset: int, message: str) -> None:
        logger.warning('Inconsistent container at offset %d: %s', offset, message)
    return log_inconsistency


def decode_intset(blob: bytes, base: int = 0, filename: Optional[_PathType] = None,
                  report: _Report = None) -> List[int]:
    """Decode an intset into a list of signed integers.

    The layout is a 4-byte little-endian element width (2, 4 or 8), a 4-byte
    little-endian element count and then the elements themselves as
    little-endian signed integers of that width.

    Raises
    ------
    BadEncoding
        If the element width is not one of 2, 4 or 8
    TruncatedInput
        If the blob is too short for the declared number of elements
    """
    reader = BlobReader(blob, base, filename)
    width = reader.read_uint32_le()
    if width not in _INTSET_DTYPES:
        raise BadEncoding('invalid intset encoding width {}'.format(width), base, filename)
    count = reader.read_uint32_le()
    data = reader.read_view(count * width)
    if not reader.at_eof():
        _reporter(report)(reader.offset, '{} trailing bytes after intset'
                          .format(reader.remaining()))
    if count == 0:
        return []
    return np.frombuffer(data, dtype=_INTSET_DTYPES[width], count=count).tolist()


def _read_ziplist_entry(reader: BlobReader) -> Element:
    prev_length = reader.read_uint8()
    if prev_length == ZIPLIST_BIG_PREVLEN:
        reader.read_uint32_le()
    start = reader.offset
    header = reader.read_uint8()
    str_type = (header & ZIP_STR_MASK) >> 6
    if str_type == ZIP_STR_06B:
        return reader.read(header & 0x3F)
    elif str_type == ZIP_STR_14B:
        return reader.read(((header & 0x3F) << 8) | reader.read_uint8())
    elif str_type == ZIP_STR_32B:
        return reader.read(reader.read_uint32_be())
    elif header == ZIP_INT_16B:
        return reader.read_int16_le()
    elif header == ZIP_INT_32B:
        return reader.read_int32_le()
    elif header == ZIP_INT_64B:
        return reader.read_int64_le()
    elif header == ZIP_INT_24B:
        return reader.read_int24_le()
    elif header == ZIP_INT_8B:
        return reader.read_int8()
    elif ZIP_INT_IMM_MIN <= header <= ZIP_INT_IMM_MAX:
        return header - ZIP_INT_IMM_MIN
    else:
        raise BadEncoding('invalid ziplist entry encoding 0x{:02x}'.format(header),
                          start, reader.filename)


def decode_ziplist(blob: bytes, base: int = 0, filename: Optional[_PathType] = None,
                   report: _Report = None) -> List[Element]:
    """Walk a ziplist and return its entries in order.

    The ziplist consists of a header (total bytes '<I', offset to tail '<I',
    number of entries '<H'), the entries and a 0xFF terminator. Each entry
    is framed as

        (previous entry length, 1 byte or 0xFE + 4 bytes '<I')
        (encoding byte, possibly followed by a longer string length)(payload)

    Entries are walked until the terminator, so the number of entries found
    wins over the header count if the two disagree.

    Raises
    ------
    BadEncoding
        If an entry uses a reserved encoding or the terminator is missing
    """
    report = _reporter(report)
    reader = BlobReader(blob, base, filename)
    if len(reader) < ZIPLIST_HEADER_SIZE + 1:
        raise BadEncoding('ziplist of {} bytes is too short'.format(len(reader)),
                          base, filename)
    total_bytes = reader.read_uint32_le()
    tail_offset = reader.read_uint32_le()
    count = reader.read_uint16_le()
    entries = []      # type: List[Element]
    last_entry = ZIPLIST_HEADER_SIZE
    while True:
        if reader.at_eof():
            raise BadEncoding('ziplist terminator missing', reader.offset, filename)
        if reader.peek_uint8() == ZIPLIST_END:
            break
        last_entry = reader.pos
        entries.append(_read_ziplist_entry(reader))
    end = reader.offset
    reader.skip(1)
    if count != ZIPLIST_UNKNOWN_COUNT and count != len(entries):
        report(base, 'ziplist header claims {} entries but {} were found'
               .format(count, len(entries)))
    if total_bytes != len(reader):
        report(base, 'ziplist header claims {} bytes but blob has {}'
               .format(total_bytes, len(reader)))
    if tail_offset != last_entry:
        report(base, 'ziplist tail offset {} does not point at last entry ({})'
               .format(tail_offset, last_entry))
    if not reader.at_eof():
        report(end, '{} trailing bytes after ziplist terminator'.format(reader.remaining()))
    return entries


def _backlen_size(entry_length: int) -> int:
    """Number of bytes in the reverse-traversal length that ends a listpack entry."""
    if entry_length <= 127:
        return 1
    elif entry_length < 16383:
        return 2
    elif entry_length < 2097151:
        return 3
    elif entry_length < 268435455:
        return 4
    else:
        return 5


def _read_listpack_entry(reader: BlobReader) -> Element:
    start = reader.offset
    header = reader.read_uint8()
    if header & 0x80 == 0:
        # 7-bit unsigned integer
        return header & 0x7F
    elif header & 0xC0 == 0x80:
        # String of up to 63 bytes
        return reader.read(header & 0x3F)
    elif header & 0xE0 == 0xC0:
        # 13-bit signed integer
        value = ((header & 0x1F) << 8) | reader.read_uint8()
        return value - (1 << 13) if value >= 1 << 12 else value
    elif header & 0xF0 == 0xE0:
        # String of up to 4095 bytes
        return reader.read(((header & 0x0F) << 8) | reader.read_uint8())
    elif header == LP_ENCODING_32BIT_STR:
        return reader.read(reader.read_uint32_le())
    elif header == LP_ENCODING_16BIT_INT:
        return reader.read_int16_le()
    elif header == LP_ENCODING_24BIT_INT:
        return reader.read_int24_le()
    elif header == LP_ENCODING_32BIT_INT:
        return reader.read_int32_le()
    elif header == LP_ENCODING_64BIT_INT:
        return reader.read_int64_le()
    else:
        raise BadEncoding('invalid listpack entry encoding 0x{:02x}'.format(header),
                          start, reader.filename)


def decode_listpack(blob: bytes, base: int = 0, filename: Optional[_PathType] = None,
                    report: _Report = None) -> List[Element]:
    """Walk a listpack and return its entries in order.

    The listpack header is the total size ('<I') and number of entries
    ('<H'). Every entry is an encoding byte, an optional extended length,
    the payload and a variable-length "backlen" (used by Redis to walk
    backwards, and skipped here). The list ends with a 0xFF byte.
    """
    report = _reporter(report)
    reader = BlobReader(blob, base, filename)
    if len(reader) < LISTPACK_HEADER_SIZE + 1:
        raise BadEncoding('listpack of {} bytes is too short'.format(len(reader)),
                          base, filename)
    total_bytes = reader.read_uint32_le()
    count = reader.read_uint16_le()
    entries = []      # type: List[Element]
    while True:
        if reader.at_eof():
            raise BadEncoding('listpack terminator missing', reader.offset, filename)
        if reader.peek_uint8() == LISTPACK_END:
            break
        start = reader.pos
        entries.append(_read_listpack_entry(reader))
        reader.skip(_backlen_size(reader.pos - start))
    end = reader.offset
    reader.skip(1)
    if count != LISTPACK_UNKNOWN_COUNT and count != len(entries):
        report(base, 'listpack header claims {} entries but {} were found'
               .format(count, len(entries)))
    if total_bytes != len(reader):
        report(base, 'listpack header claims {} bytes but blob has {}'
               .format(total_bytes, len(reader)))
    if not reader.at_eof():
        report(end, '{} trailing bytes after listpack terminator'.format(reader.remaining()))
    return entries


def _read_zipmap_length(reader: BlobReader) -> Optional[int]:
    length = reader.read_uint8()
    if length < ZIPMAP_BIGLEN:
        return length
    elif length == ZIPMAP_BIGLEN:
        return reader.read_uint32_le()
    else:
        return None


def decode_zipmap(blob: bytes, base: int = 0, filename: Optional[_PathType] = None,
                  report: _Report = None) -> List[bytes]:
    """Decode the legacy zipmap hash encoding into alternating fields and values."""
    reader = BlobReader(blob, base, filename)
    count = reader.read_uint8()
    entries = []      # type: List[bytes]
    while True:
        field_length = _read_zipmap_length(reader)
        if field_length is None:
            break
        entries.append(reader.read(field_length))
        start = reader.offset
        value_length = _read_zipmap_length(reader)
        if value_length is None:
            raise BadEncoding('zipmap ends between field and value', start, filename)
        free = reader.read_uint8()
        entries.append(reader.read(value_length))
        reader.skip(free)
    if count < ZIPMAP_BIGLEN and 2 * count != len(entries):
        _reporter(report)(base, 'zipmap header claims {} pairs but {} were found'
                          .format(count, len(entries) // 2))
    return entries


def pairs(entries: Sequence[Element], offset: int = 0,
          filename: Optional[_PathType] = None) -> List[Tuple[Element, Element]]:
    """Group a flat sequence of entries into (field, value) pairs."""
    if len(entries) % 2:
        raise BadEncoding('expected an even number of entries, found {}'.format(len(entries)),
                          offset, filename)
    return list(zip(entries[0::2], entries[1::2]))


def parse_score(score: Element, offset: int = 0, filename: Optional[_PathType] = None) -> float:
    """Interpret a sorted set score stored as a ziplist or listpack entry."""
    try:
        return float(score)
    except ValueError:
        raise BadEncoding('invalid sorted set score {!r}'.format(score),
                          offset, filename) from None
