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

"""Implements decoding of the basic RDB file format building blocks.

Some documentation is included here, but for a more complete reference, see
https://github.com/sripathikrishnan/redis-rdb-tools/wiki/Redis-RDB-Dump-File-Format
"""

import math
from typing import Optional, Tuple

import lzf

from .errors import BadEncoding, DecompressionFailed
from .stream import ByteReader


# Top two bits of the first length byte
RDB_6BITLEN = 0
RDB_14BITLEN = 1
RDB_WIDELEN = 2
RDB_ENCVAL = 3
# Full first byte for the wide lengths
RDB_32BITLEN = 0x80
RDB_64BITLEN = 0x81

# Special string encodings, selected by the low 6 bits when RDB_ENCVAL is set
RDB_ENC_INT8 = 0
RDB_ENC_INT16 = 1
RDB_ENC_INT32 = 2
RDB_ENC_LZF = 3

# Outer stream opcodes
RDB_OPCODE_SLOT_INFO = 244
RDB_OPCODE_FUNCTION2 = 245
RDB_OPCODE_FUNCTION_PRE_GA = 246
RDB_OPCODE_MODULE_AUX = 247
RDB_OPCODE_IDLE = 248
RDB_OPCODE_FREQ = 249
RDB_OPCODE_AUX = 250
RDB_OPCODE_RESIZEDB = 251
RDB_OPCODE_EXPIRETIME_MS = 252
RDB_OPCODE_EXPIRETIME = 253
RDB_OPCODE_SELECTDB = 254
RDB_OPCODE_EOF = 255

# Value types (these share the opcode byte with the framing opcodes above)
RDB_TYPE_STRING = 0
RDB_TYPE_LIST = 1
RDB_TYPE_SET = 2
RDB_TYPE_ZSET = 3
RDB_TYPE_HASH = 4
RDB_TYPE_ZSET_2 = 5          # ZSET version 2 with doubles stored in binary
RDB_TYPE_MODULE = 6
RDB_TYPE_MODULE_2 = 7        # Module value with annotations for parsing without the module
RDB_TYPE_HASH_ZIPMAP = 9
RDB_TYPE_LIST_ZIPLIST = 10
RDB_TYPE_SET_INTSET = 11
RDB_TYPE_ZSET_ZIPLIST = 12
RDB_TYPE_HASH_ZIPLIST = 13
RDB_TYPE_LIST_QUICKLIST = 14
RDB_TYPE_STREAM_LISTPACKS = 15
RDB_TYPE_HASH_LISTPACK = 16
RDB_TYPE_ZSET_LISTPACK = 17
RDB_TYPE_LIST_QUICKLIST_2 = 18
RDB_TYPE_STREAM_LISTPACKS_2 = 19
RDB_TYPE_SET_LISTPACK = 20
RDB_TYPE_STREAM_LISTPACKS_3 = 21
RDB_TYPE_HASH_METADATA_PRE_GA = 22
RDB_TYPE_HASH_LISTPACK_EX_PRE_GA = 23
RDB_TYPE_HASH_METADATA = 24
RDB_TYPE_HASH_LISTPACK_EX = 25

# Opcodes inside module-2 values and module aux records
RDB_MODULE_OPCODE_EOF = 0
RDB_MODULE_OPCODE_SINT = 1
RDB_MODULE_OPCODE_UINT = 2
RDB_MODULE_OPCODE_FLOAT = 3
RDB_MODULE_OPCODE_DOUBLE = 4
RDB_MODULE_OPCODE_STRING = 5

# Quicklist-2 node containers
QUICKLIST_NODE_CONTAINER_PLAIN = 1
QUICKLIST_NODE_CONTAINER_PACKED = 2

# Markers in the legacy ASCII double encoding
_DOUBLE_NAN = 253
_DOUBLE_POS_INF = 254
_DOUBLE_NEG_INF = 255

# A 3-byte LZF back-reference expands to at most 264 bytes
LZF_MAX_EXPANSION = 88


def read_length_with_encoding(reader: ByteReader) -> Tuple[int, bool]:
    """Read an RDB length prefix.

    The two most significant bits of the first byte select the format:

    - 00: the remaining 6 bits are the length

    - 01: the remaining 6 bits and the next byte form a 14-bit length

    - 10: the first byte is 0x80 (32-bit big-endian length follows) or
      0x81 (64-bit big-endian length follows); other values are reserved

    - 11: the remaining 6 bits select a special string encoding

    Returns
    -------
    length : int
        Decoded length, or the special encoding type if `is_encoded` is true
    is_encoded : bool
        True if the value is a special string encoding rather than a length

    Raises
    ------
    BadEncoding
        If the first byte is one of the reserved wide-length values
    """
    start = reader.offset
    first = reader.read_uint8()
    enc_type = (first & 0xC0) >> 6
    if enc_type == RDB_ENCVAL:
        return first & 0x3F, True
    elif enc_type == RDB_6BITLEN:
        return first & 0x3F, False
    elif enc_type == RDB_14BITLEN:
        return ((first & 0x3F) << 8) | reader.read_uint8(), False
    elif first == RDB_32BITLEN:
        return reader.read_uint32_be(), False
    elif first == RDB_64BITLEN:
        return reader.read_uint64_be(), False
    else:
        raise BadEncoding('reserved length encoding 0x{:02x}'.format(first),
                          start, reader.filename)


def read_length(reader: ByteReader) -> int:
    """Read an RDB length that is not allowed to be a special encoding."""
    start = reader.offset
    length, is_encoded = read_length_with_encoding(reader)
    if is_encoded:
        raise BadEncoding('expected a length but found string encoding {}'.format(length),
                          start, reader.filename)
    return length


def lzf_decompress(compressed: bytes, expected_length: int, offset: Optional[int] = None,
                   filename=None) -> bytes:
    """Expand an LZF payload that must decompress to exactly `expected_length` bytes."""
    if expected_length == 0:
        if compressed:
            raise DecompressionFailed('LZF payload declared to expand to nothing',
                                      offset, filename)
        return b''
    if expected_length > LZF_MAX_EXPANSION * len(compressed):
        raise DecompressionFailed('{} LZF bytes cannot expand to {} bytes'
                                  .format(len(compressed), expected_length), offset, filename)
    try:
        data = lzf.decompress(compressed, expected_length)
    except ValueError as exc:
        raise DecompressionFailed('corrupt LZF payload: {}'.format(exc),
                                  offset, filename) from exc
    if data is None or len(data) != expected_length:
        actual = 'more' if data is None else len(data)
        raise DecompressionFailed('LZF payload expanded to {} bytes instead of {}'
                                  .format(actual, expected_length), offset, filename)
    return data


def read_string(reader: ByteReader) -> bytes:
    """Read an RDB string, expanding integer and LZF encodings.

    Integer encodings are returned as their decimal representation, which is
    how Redis itself presents them.
    """
    start = reader.offset
    length, is_encoded = read_length_with_encoding(reader)
    if not is_encoded:
        return reader.read(length)
    if length == RDB_ENC_INT8:
        return b'%d' % reader.read_int8()
    elif length == RDB_ENC_INT16:
        return b'%d' % reader.read_int16_le()
    elif length == RDB_ENC_INT32:
        return b'%d' % reader.read_int32_le()
    elif length == RDB_ENC_LZF:
        clen = read_length(reader)
        ulen = read_length(reader)
        compressed = reader.read(clen)
        return lzf_decompress(compressed, ulen, start, reader.filename)
    else:
        raise BadEncoding('invalid string encoding {}'.format(length),
                          start, reader.filename)


def skip_string(reader: ByteReader) -> None:
    """Move past an RDB string without expanding it."""
    start = reader.offset
    length, is_encoded = read_length_with_encoding(reader)
    if not is_encoded:
        reader.skip(length)
    elif length == RDB_ENC_INT8:
        reader.skip(1)
    elif length == RDB_ENC_INT16:
        reader.skip(2)
    elif length == RDB_ENC_INT32:
        reader.skip(4)
    elif length == RDB_ENC_LZF:
        clen = read_length(reader)
        read_length(reader)
        reader.skip(clen)
    else:
        raise BadEncoding('invalid string encoding {}'.format(length),
                          start, reader.filename)


def read_double_value(reader: ByteReader) -> float:
    """Read a score in the legacy ASCII encoding used by ZSET (version 1).

    A single length byte is followed by that many ASCII characters, except
    that the lengths 253, 254 and 255 stand for NaN, +inf and -inf.
    """
    start = reader.offset
    length = reader.read_uint8()
    if length == _DOUBLE_NAN:
        return math.nan
    elif length == _DOUBLE_POS_INF:
        return math.inf
    elif length == _DOUBLE_NEG_INF:
        return -math.inf
    text = reader.read(length)
    try:
        return float(text)
    except ValueError:
        raise BadEncoding('invalid ASCII double {!r}'.format(text),
                          start, reader.filename) from None


def read_binary_double(reader: ByteReader) -> float:
    """Read a score stored as a little-endian IEEE-754 double (ZSET version 2)."""
    return reader.read_double_le()
