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

"""Minimal RDB encoder used to build test fixtures.

Some documentation is included here, but for a more complete reference, see
https://github.com/sripathikrishnan/redis-rdb-tools/wiki/Redis-RDB-Dump-File-Format
"""

import struct
from typing import Iterable, Optional, Sequence, Tuple, Union

import lzf

from ..crc64 import crc64


def encode_len(length: int) -> bytes:
    """Encodes the specified length as 1, 2, 5 or 9 bytes of
    RDB specific length encoded byte.

    - For values less than 64 (i.e two MSBs zero - encode directly in the byte)

    - For values less than 16384 use two bytes, leading MSBs are 01 followed by
      14 bits encoding the value

    - For values less than 2^32 use 5 bytes: 0x80 followed by the length as
      32-bit big-endian

    - Otherwise use 9 bytes: 0x81 followed by the length as 64-bit big-endian
    """
    if length < 64:
        return struct.pack('B', length)
    if length < 16384:
        return struct.pack(">H", 0x4000 + length)
    if length < 2**32:
        return b'\x80' + struct.pack('>I', length)
    return b'\x81' + struct.pack('>Q', length)


def encode_string(data: bytes) -> bytes:
    return encode_len(len(data)) + data


def encode_int_string(value: int) -> bytes:
    """Encode an integer using the most compact special string encoding."""
    if -2**7 <= value < 2**7:
        return b'\xc0' + struct.pack('<b', value)
    if -2**15 <= value < 2**15:
        return b'\xc1' + struct.pack('<h', value)
    return b'\xc2' + struct.pack('<i', value)


def encode_lzf_string(data: bytes) -> bytes:
    compressed = lzf.compress(data)
    assert compressed is not None, "test data must be compressible"
    return b'\xc3' + encode_len(len(compressed)) + encode_len(len(data)) + compressed


def encode_prev_length(length: int) -> bytes:
    """Special helper for ziplist previous entry lengths.

    If length < 254 then use 1 byte directly, otherwise
    set first byte to 254 and add 4 trailing bytes as an
    unsigned integer.
    """
    if length < 254:
        return struct.pack('B', length)
    return b'\xfe' + struct.pack("<I", length)


def _encode_ziplist_int(value: int) -> bytes:
    if 0 <= value <= 12:
        return struct.pack('<B', 0xf1 + value)
    if -2**7 <= value < 2**7:
        return b'\xfe' + struct.pack('<b', value)
    if -2**15 <= value < 2**15:
        return b'\xc0' + struct.pack('<h', value)
    if -2**23 <= value < 2**23:
        return b'\xf0' + value.to_bytes(3, 'little', signed=True)
    if -2**31 <= value < 2**31:
        return b'\xd0' + struct.pack('<i', value)
    return b'\xe0' + struct.pack('<q', value)


def encode_ziplist(entries: Iterable[Union[bytes, int]], count: Optional[int] = None) -> bytes:
    """Create an RDB ziplist, including the envelope.

    The entries can either be byte strings or integers, and any iterable can
    be used. If `count` is given it overrides the entry count in the header.

    The ziplist string envelope itself is an RDB-encoded string with the
    following form:

        (bytes in list '<i')(offset to tail '<i')
        (number of entries '<h')(entry 1)(entry 2)(entry N)(terminator 0xFF)

    The entries themselves are encoded as follows:

        (previous entry length 1byte or 5bytes)
        (entry length - up to 5 bytes as per length encoding)(value)
    """
    def append(raw):
        nonlocal zl_len
        raw_entries.append(raw)
        zl_len += len(raw)

    raw_entries = [b'']   # Later replaced by a header
    zl_len = 10           # Header is 10 bytes
    zl_entries = 0
    zl_last = zl_len      # Offset to previous entry
    for entry in entries:
        previous_length = zl_len - zl_last
        zl_last = zl_len
        zl_entries += 1
        append(encode_prev_length(previous_length))
        if isinstance(entry, int):
            append(_encode_ziplist_int(entry))
            continue
        assert isinstance(entry, bytes)
        # The ziplist string headers coincide with RDB lengths below 2**32
        append(encode_len(len(entry)))
        append(entry)
    append(b'\xff')
    if count is None:
        count = zl_entries
    # Fill in the header
    raw_entries[0] = (struct.pack('<I', zl_len) + struct.pack('<I', zl_last)
                      + struct.pack('<H', count))
    return b''.join(raw_entries)


def encode_intset(values: Sequence[int], width: int) -> bytes:
    fmt = {2: 'h', 4: 'i', 8: 'q'}[width]
    return struct.pack('<II', width, len(values)) + struct.pack('<%d%s' % (len(values), fmt),
                                                                *values)


def _encode_backlen(length: int) -> bytes:
    if length <= 127:
        size = 1
    elif length < 16383:
        size = 2
    else:
        size = 3
    groups = [(length >> (7 * k)) & 127 for k in reversed(range(size))]
    return bytes([groups[0]] + [g | 128 for g in groups[1:]])


def _encode_listpack_entry(entry: Union[bytes, int]) -> bytes:
    if isinstance(entry, int):
        if 0 <= entry <= 127:
            raw = struct.pack('B', entry)
        elif -4096 <= entry < 4096:
            value = entry & 0x1fff
            raw = struct.pack('BB', 0xc0 | (value >> 8), value & 0xff)
        elif -2**15 <= entry < 2**15:
            raw = b'\xf1' + struct.pack('<h', entry)
        elif -2**23 <= entry < 2**23:
            raw = b'\xf2' + entry.to_bytes(3, 'little', signed=True)
        elif -2**31 <= entry < 2**31:
            raw = b'\xf3' + struct.pack('<i', entry)
        else:
            raw = b'\xf4' + struct.pack('<q', entry)
    elif len(entry) < 64:
        raw = struct.pack('B', 0x80 | len(entry)) + entry
    elif len(entry) < 4096:
        raw = struct.pack('BB', 0xe0 | (len(entry) >> 8), len(entry) & 0xff) + entry
    else:
        raw = b'\xf0' + struct.pack('<I', len(entry)) + entry
    return raw + _encode_backlen(len(raw))


def encode_listpack(entries: Iterable[Union[bytes, int]]) -> bytes:
    """Create a listpack: (total bytes '<I')(entries '<H')(entry)...(0xFF)."""
    raw = [_encode_listpack_entry(entry) for entry in entries]
    body = b''.join(raw) + b'\xff'
    return struct.pack('<IH', 6 + len(body), len(raw)) + body


def _encode_zipmap_len(length: int) -> bytes:
    if length < 254:
        return struct.pack('B', length)
    return b'\xfe' + struct.pack('<I', length)


def encode_zipmap(items: Sequence[Tuple[bytes, bytes]], free: int = 0) -> bytes:
    raw = [struct.pack('B', min(len(items), 254))]
    for field, value in items:
        raw.extend([_encode_zipmap_len(len(field)), field,
                    _encode_zipmap_len(len(value)), struct.pack('B', free), value,
                    b'\x00' * free])
    raw.append(b'\xff')
    return b''.join(raw)


def dump_payload(value_type: int, encoded_value: bytes, version: int = 9) -> bytes:
    """Wrap an encoded value in the envelope produced by the DUMP command."""
    body = struct.pack('B', value_type) + encoded_value + struct.pack('<H', version)
    return body + struct.pack('<Q', crc64(body))


class RdbBuilder:
    """Assemble an RDB file in memory, one record at a time.

    Values are passed already encoded (e.g. with :func:`encode_string`),
    keys are passed raw.
    """

    def __init__(self, version: int = 9) -> None:
        self._parts = [b'REDIS%04d' % version]

    def raw(self, data: bytes) -> 'RdbBuilder':
        self._parts.append(data)
        return self

    def aux(self, key: bytes, value: bytes) -> 'RdbBuilder':
        return self.raw(b'\xfa' + encode_string(key) + encode_string(value))

    def select_db(self, db: int) -> 'RdbBuilder':
        return self.raw(b'\xfe' + encode_len(db))

    def resize_db(self, total: int, expires: int) -> 'RdbBuilder':
        return self.raw(b'\xfb' + encode_len(total) + encode_len(expires))

    def expire_ms(self, when: int) -> 'RdbBuilder':
        return self.raw(b'\xfc' + struct.pack('<q', when))

    def expire_s(self, when: int) -> 'RdbBuilder':
        return self.raw(b'\xfd' + struct.pack('<i', when))

    def idle(self, seconds: int) -> 'RdbBuilder':
        return self.raw(b'\xf8' + encode_len(seconds))

    def freq(self, frequency: int) -> 'RdbBuilder':
        return self.raw(b'\xf9' + struct.pack('B', frequency))

    def item(self, value_type: int, key: bytes, encoded_value: bytes) -> 'RdbBuilder':
        return self.raw(struct.pack('B', value_type) + encode_string(key) + encoded_value)

    def string(self, key: bytes, value: bytes) -> 'RdbBuilder':
        return self.item(0, key, encode_string(value))

    def body(self) -> bytes:
        return b''.join(self._parts)

    def build(self, checksum: bool = True) -> bytes:
        """Terminate the file with EOF and an 8-byte checksum (zero if disabled)."""
        data = self.body() + b'\xff'
        crc = crc64(data) if checksum else 0
        return data + struct.pack('<Q', crc)
