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

"""Records produced while parsing an RDB file."""

import enum
from typing import Any, List, Optional

from .utils import display_str


class KeyKind(enum.Enum):
    """Logical Redis data type of a key, independent of its encoding."""

    STRING = 'string'
    LIST = 'list'
    SET = 'set'
    HASH = 'hash'
    ZSET = 'zset'
    STREAM = 'stream'
    MODULE = 'module'


class _Record:
    """Value-semantics base class: equal if same class and same attributes."""

    def __eq__(self, other: Any) -> bool:
        return type(self) is type(other) and vars(self) == vars(other)

    def __ne__(self, other: Any) -> bool:
        return not self == other

    def __repr__(self) -> str:
        args = ', '.join('{}={!r}'.format(name, value) for name, value in vars(self).items())
        return '{}({})'.format(type(self).__name__, args)


class KeySummary(_Record):
    """Summary of a single key found in the RDB file.

    Parameters
    ----------
    db : int
        Database index selected when the key was read
    key : bytes
        Name of the key (an arbitrary byte string)
    kind : :class:`KeyKind`
        Logical type of the value
    element_count : int
        Number of elements (1 for strings, pairs for hashes, members for
        sets and sorted sets, entries for streams)
    value_bytes : int, optional
        Decoded length for strings, otherwise the number of bytes the value
        occupies in the RDB stream
    expiry_ms : int, optional
        Absolute expiry time in milliseconds since the Unix epoch
    idle_seconds : int, optional
        LRU idle time recorded for the key
    frequency : int, optional
        LFU access frequency counter (0-255)
    encoding : str, optional
        Name of the on-disk encoding, e.g. 'ziplist' or 'quicklist'
    elements : list, optional
        Decoded contents if details were requested: values for lists and
        sets, (field, value) pairs for hashes and (member, score) pairs for
        sorted sets
    """

    def __init__(self, db: int, key: bytes, kind: KeyKind, element_count: int,
                 value_bytes: Optional[int] = None, expiry_ms: Optional[int] = None,
                 idle_seconds: Optional[int] = None, frequency: Optional[int] = None,
                 encoding: Optional[str] = None, elements: Optional[List] = None) -> None:
        self.db = db
        self.key = key
        self.kind = kind
        self.element_count = element_count
        self.value_bytes = value_bytes
        self.expiry_ms = expiry_ms
        self.idle_seconds = idle_seconds
        self.frequency = frequency
        self.encoding = encoding
        self.elements = elements

    def __str__(self) -> str:
        return 'db={} key={} {} ({} elements)'.format(
            self.db, display_str(self.key), self.kind.value, self.element_count)


class ParserState:
    """Mutable state carried between records of the outer stream.

    The expiry, idle and frequency markers only modify the next key, so
    they are held here until a value record consumes them.
    """

    def __init__(self) -> None:
        self.db = 0
        self.expiry_ms = None      # type: Optional[int]
        self.idle_seconds = None   # type: Optional[int]
        self.frequency = None      # type: Optional[int]

    @property
    def has_pending(self) -> bool:
        return (self.expiry_ms is not None or self.idle_seconds is not None
                or self.frequency is not None)

    def clear_pending(self) -> None:
        self.expiry_ms = None
        self.idle_seconds = None
        self.frequency = None


class Inconsistency(_Record):
    """A non-fatal disagreement inside a value, such as a wrong header count."""

    def __init__(self, offset: int, key: Optional[bytes], message: str) -> None:
        self.offset = offset
        self.key = key
        self.message = message


class Event(_Record):
    """Base class for items yielded by :meth:`rdbscan.rdb_reader.RdbParser.events`."""


class HeaderSeen(Event):
    """The RDB signature was verified; `version` is the format version."""

    def __init__(self, version: int) -> None:
        self.version = version


class AuxPair(Event):
    """Auxiliary metadata field, e.g. redis-ver or ctime."""

    def __init__(self, key: bytes, value: bytes) -> None:
        self.key = key
        self.value = value


class DbSelected(Event):
    def __init__(self, db: int) -> None:
        self.db = db


class ResizeHint(Event):
    """Advisory sizes of the main and expires hash tables of the current database."""

    def __init__(self, total: int, expires: int) -> None:
        self.total = total
        self.expires = expires


class SlotInfo(Event):
    """Cluster slot sizing hint."""

    def __init__(self, slot: int, size: int, expires_size: int) -> None:
        self.slot = slot
        self.size = size
        self.expires_size = expires_size


class FunctionSeen(Event):
    """A function library (Redis 7 FUNCTION LOAD source code)."""

    def __init__(self, code: bytes) -> None:
        self.code = code


class Key(Event):
    """A key and its value were decoded."""

    def __init__(self, summary: KeySummary) -> None:
        self.summary = summary


class Eof(Event):
    """End of the RDB stream; `checksum` holds the raw trailer bytes."""

    def __init__(self, checksum: bytes) -> None:
        self.checksum = checksum


class Error(Event):
    """Parsing stopped due to an error of the given `kind` at byte `offset`."""

    def __init__(self, kind: str, offset: Optional[int], message: str,
                 exception: Optional[BaseException] = None) -> None:
        self.kind = kind
        self.offset = offset
        self.message = message
        self.exception = exception
