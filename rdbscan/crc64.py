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

"""CRC-64 as used by Redis for RDB trailers and DUMP payloads.

This is the "Jones" variant: polynomial 0xad93d23594c935a9, reflected input
and output, zero initial value and no final XOR. The check value for
b'123456789' is 0xe9c6d914c4b8d9ca. Note that crcmod's predefined
'crc-64-jones' starts from all ones instead, so it does not match Redis.
"""

import crcmod


POLY = 0xad93d23594c935a9

#: crc64(data, crc=0) -> int. Passing the previous return value as `crc`
#: continues the checksum of a stream incrementally.
crc64 = crcmod.mkCrcFun((1 << 64) | POLY, initCrc=0, rev=True, xorOut=0)
