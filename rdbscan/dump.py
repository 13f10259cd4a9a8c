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

"""Summarise values serialised by the Redis DUMP command.

A DUMP payload is a single RDB value (type byte followed by the encoded
value, without the key name), a 2-byte little-endian RDB version and an
8-byte little-endian CRC-64 of everything before it.
"""

import io
import logging
from typing import Iterable, Iterator, Optional, Union

import redis

from .crc64 import crc64
from .errors import BadEncoding, ChecksumMismatch, TruncatedInput
from .events import KeySummary
from .rdb_reader import RdbParser
from .utils import display_str, ensure_binary


logger = logging.getLogger(__name__)

DUMP_FOOTER_SIZE = 10


def parse_dump_payload(key: bytes, payload: bytes, db: int = 0, *, details: bool = False,
                       verify_checksum: bool = True) -> KeySummary:
    """Decode a DUMP payload into a key summary.

    Parameters
    ----------
    key : bytes
        Name of the key that was dumped (not part of the payload)
    payload : bytes
        Output of the DUMP command
    db : int, optional
        Database index to record in the summary
    details : bool, optional
        If true, include decoded elements in the summary
    verify_checksum : bool, optional
        If true, check the CRC-64 footer (unless it is zero)

    Raises
    ------
    RdbParseError
        If the payload is malformed
    """
    if len(payload) < DUMP_FOOTER_SIZE + 1:
        raise TruncatedInput('DUMP payload of {} bytes is too short'.format(len(payload)), 0)
    footer = payload[-DUMP_FOOTER_SIZE:]
    version = int.from_bytes(footer[:2], 'little')
    expected = int.from_bytes(footer[2:], 'little')
    if verify_checksum and expected != 0:
        actual = crc64(payload[:-8])
        if actual != expected:
            raise ChecksumMismatch('DUMP checksum is {:016x} but payload gives {:016x}'
                                   .format(expected, actual), len(payload) - 8)
    body = payload[1:-DUMP_FOOTER_SIZE]
    # Offsets reported by the parser refer to the whole payload
    parser = RdbParser(io.BytesIO(body), details=details, verify_checksum=False,
                       base_offset=1)
    parser.version = version
    parser.state.db = db
    summary = parser.read_value(payload[0], key)
    end = len(payload) - DUMP_FOOTER_SIZE
    if parser.offset != end:
        raise BadEncoding('{} unused bytes after value in DUMP payload'
                          .format(end - parser.offset), parser.offset)
    return summary


def scan_client(client: redis.Redis, keys: Optional[Iterable[Union[str, bytes]]] = None,
                db: int = 0, **kwargs) -> Iterator[KeySummary]:
    """Summarise keys of a live Redis database via DUMP.

    This only reads from the server. Missing keys are skipped and logged
    without raising an exception.

    Parameters
    ----------
    client : :class:`~redis.Redis`-like
        A Redis-compatible client instance supporting keys() and dump()
    keys : iterable of str or bytes, optional
        The keys to summarise. None (default) includes all keys.
    db : int, optional
        Database index to record in the summaries
    kwargs : dict
        Options passed on to :func:`parse_dump_payload`
    """
    if keys is None:
        logger.info("No keys specified - scanning entire database")
        keys = client.keys(b'*')
    for key in keys:
        key = ensure_binary(key)
        payload = client.dump(key)
        if not payload:
            logger.error("Failed to summarise key %s: Key not found in Redis", display_str(key))
            continue
        yield parse_dump_payload(key, payload, db, **kwargs)
