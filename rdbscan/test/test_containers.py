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

"""Tests for the intset, ziplist, listpack and zipmap decoders."""

import random
import struct
import unittest
from unittest import mock

from ..containers import (decode_intset, decode_ziplist, decode_listpack, decode_zipmap,
                          pairs, parse_score)
from ..errors import BadEncoding, TruncatedInput
from .rdb_builder import encode_intset, encode_ziplist, encode_listpack, encode_zipmap


class TestIntset(unittest.TestCase):
    def test_example(self):
        blob = bytes.fromhex('04000000 03000000 01000000 02000000 03000000')
        self.assertEqual(decode_intset(blob), [1, 2, 3])

    def test_widths(self):
        rs = random.Random(3)
        for width in [2, 4, 8]:
            bits = 8 * width
            values = [rs.randrange(-2**(bits - 1), 2**(bits - 1)) for _ in range(50)]
            values += [-2**(bits - 1), 2**(bits - 1) - 1, 0, -1]
            decoded = decode_intset(encode_intset(values, width))
            self.assertEqual(decoded, values)
            self.assertTrue(all(type(value) is int for value in decoded))

    def test_width8_little_endian(self):
        # Each 8-byte entry is little-endian and consecutive
        blob = struct.pack('<II', 8, 2) + struct.pack('<qq', 2**40 + 1, -7)
        self.assertEqual(decode_intset(blob), [2**40 + 1, -7])

    def test_empty(self):
        self.assertEqual(decode_intset(encode_intset([], 4)), [])

    def test_bad_width(self):
        for width in [0, 1, 3, 16]:
            with self.assertRaises(BadEncoding) as cm:
                decode_intset(struct.pack('<II', width, 0), base=50)
            self.assertEqual(cm.exception.offset, 50)

    def test_truncated(self):
        blob = encode_intset([1, 2, 3], 4)[:-1]
        with self.assertRaises(TruncatedInput):
            decode_intset(blob)

    def test_trailing_bytes(self):
        report = mock.Mock()
        self.assertEqual(decode_intset(encode_intset([5], 2) + b'\x00', report=report), [5])
        report.assert_called_once()


class TestZiplist(unittest.TestCase):
    def test_strings(self):
        entries = [b'', b'a', b'x' * 63, b'y' * 64, b'z' * 300, b'w' * 16384]
        self.assertEqual(decode_ziplist(encode_ziplist(entries)), entries)

    def test_integers(self):
        entries = [0, 12, 13, -1, 127, -128, 128, 32767, -32768, 32768, 2**23 - 1, -2**23,
                   2**23, 2**31 - 1, -2**31, 2**31, 2**63 - 1, -2**63]
        self.assertEqual(decode_ziplist(encode_ziplist(entries)), entries)

    def test_mixed(self):
        entries = [b'first', 1, b'second', -100000, b'third\n\0', 7]
        self.assertEqual(decode_ziplist(encode_ziplist(entries)), entries)

    def test_walker_lands_on_terminator(self):
        """The walker yields exactly the declared number of entries."""
        rs = random.Random(4)
        for k in [0, 1, 2, 17, 300]:
            entries = [rs.choice([b'v%d' % i, i]) for i in range(k)]
            report = mock.Mock()
            self.assertEqual(decode_ziplist(encode_ziplist(entries), report=report), entries)
            report.assert_not_called()

    def test_count_mismatch(self):
        report = mock.Mock()
        blob = encode_ziplist([b'a', b'b', b'c'], count=5)
        self.assertEqual(decode_ziplist(blob, base=20, report=report), [b'a', b'b', b'c'])
        report.assert_called_once_with(20, mock.ANY)
        self.assertIn('5 entries', report.call_args[0][1])

    def test_unknown_count(self):
        report = mock.Mock()
        blob = encode_ziplist([b'a'], count=0xffff)
        self.assertEqual(decode_ziplist(blob, report=report), [b'a'])
        report.assert_not_called()

    def test_missing_terminator(self):
        blob = encode_ziplist([b'a', b'b'])[:-1]
        with self.assertRaises(BadEncoding):
            decode_ziplist(blob)

    def test_too_short(self):
        with self.assertRaises(BadEncoding):
            decode_ziplist(b'\x0b\x00\x00\x00')

    def test_reserved_encoding(self):
        for header in [0xc1, 0xd5, 0xe7, 0xef]:
            blob = struct.pack('<IIH', 14, 10, 1) + bytes([0, header, 0, 0]) + b'\xff'
            with self.assertRaises(BadEncoding) as cm:
                decode_ziplist(blob, base=1000)
            self.assertEqual(cm.exception.offset, 1011)

    def test_truncated_entry(self):
        blob = struct.pack('<IIH', 14, 10, 1) + b'\x00\x05ab'
        with self.assertRaises(TruncatedInput):
            decode_ziplist(blob)

    def test_trailing_bytes(self):
        report = mock.Mock()
        blob = encode_ziplist([b'a']) + b'junk'
        self.assertEqual(decode_ziplist(blob, report=report), [b'a'])
        # Both the byte count in the header and the trailing data are reported
        self.assertEqual(report.call_count, 2)


class TestListpack(unittest.TestCase):
    def test_strings(self):
        entries = [b'', b'a', b'x' * 63, b'y' * 64, b'z' * 4095, b'w' * 4096, b'v' * 20000]
        self.assertEqual(decode_listpack(encode_listpack(entries)), entries)

    def test_integers(self):
        entries = [0, 127, 128, -1, 4095, -4096, 4096, -4097, 32767, -32768, 32768,
                   2**23 - 1, -2**23, 2**23, 2**31 - 1, -2**31, 2**31, 2**63 - 1, -2**63]
        self.assertEqual(decode_listpack(encode_listpack(entries)), entries)

    def test_empty(self):
        report = mock.Mock()
        self.assertEqual(decode_listpack(encode_listpack([]), report=report), [])
        report.assert_not_called()

    def test_missing_terminator(self):
        with self.assertRaises(BadEncoding):
            decode_listpack(encode_listpack([b'a', 1])[:-1])

    def test_reserved_encoding(self):
        blob = struct.pack('<IH', 9, 1) + b'\xf5\x01\xff'
        with self.assertRaises(BadEncoding):
            decode_listpack(blob)

    def test_count_mismatch(self):
        report = mock.Mock()
        blob = bytearray(encode_listpack([b'a', b'b']))
        blob[4] = 3
        self.assertEqual(decode_listpack(bytes(blob), report=report), [b'a', b'b'])
        report.assert_called_once()


class TestZipmap(unittest.TestCase):
    def test_pairs(self):
        items = [(b'f1', b'v1'), (b'field' * 60, b'value' * 60), (b'', b'')]
        entries = decode_zipmap(encode_zipmap(items))
        self.assertEqual(pairs(entries), items)

    def test_free_space(self):
        items = [(b'a', b'1'), (b'b', b'2')]
        self.assertEqual(pairs(decode_zipmap(encode_zipmap(items, free=3))), items)

    def test_truncated_pair(self):
        blob = b'\x01\x02f1\xff'
        with self.assertRaises(BadEncoding):
            decode_zipmap(blob)


class TestHelpers(unittest.TestCase):
    def test_pairs_odd(self):
        with self.assertRaises(BadEncoding):
            pairs([b'a', b'b', b'c'])

    def test_parse_score(self):
        self.assertEqual(parse_score(3), 3.0)
        self.assertEqual(parse_score(b'1.25'), 1.25)
        self.assertEqual(parse_score(b'-inf'), float('-inf'))
        with self.assertRaises(BadEncoding):
            parse_score(b'one')
