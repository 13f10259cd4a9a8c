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

"""Parse RDB snapshot files into a stream of events and key summaries."""

import logging
import os.path
from typing import BinaryIO, Callable, Dict, Iterator, List, Optional, Tuple, Union, cast

from . import rdb_utility as ru
from .containers import (decode_intset, decode_ziplist, decode_listpack, decode_zipmap,
                         pairs, parse_score)
from .errors import (RdbParseError, BadMagic, BadEncoding, ChecksumMismatch, UnknownOpcode,
                     UnsupportedRecord)
from .events import (KeyKind, KeySummary, ParserState, Inconsistency, Event, HeaderSeen,
                     AuxPair, DbSelected, ResizeHint, SlotInfo, FunctionSeen, Key, Eof, Error)
from .rdb_utility import read_length, read_string, skip_string
from .stream import ByteReader
from .utils import display_str, _PathType


logger = logging.getLogger(__name__)

#: Read-ahead used when opening files by name
DEFAULT_BUFFER_SIZE = 4 * 1024 * 1024

RDB_MAGIC = b'REDIS'
#: Newest RDB version whose layout is known
RDB_VERSION_MAX = 12
#: Oldest version with 32-bit and 64-bit length encodings
RDB_VERSION_MIN = 7
#: Oldest version that has a checksum after the EOF opcode
RDB_CHECKSUM_MIN_VERSION = 5
RDB_CHECKSUM_SIZE = 8
# Stream IDs in consumer group PELs are stored raw
STREAM_ID_SIZE = 16

_MODULE_ID_CHARSET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_'

# Each value reader returns (element count, elements or None, encoding override)
_ValueResult = Tuple[int, Optional[list], Optional[str]]

# Value type -> (logical kind, encoding name)
_VALUE_TYPES = {
    ru.RDB_TYPE_STRING: (KeyKind.STRING, 'string'),
    ru.RDB_TYPE_LIST: (KeyKind.LIST, 'linkedlist'),
    ru.RDB_TYPE_SET: (KeyKind.SET, 'hashtable'),
    ru.RDB_TYPE_ZSET: (KeyKind.ZSET, 'skiplist'),
    ru.RDB_TYPE_HASH: (KeyKind.HASH, 'hashtable'),
    ru.RDB_TYPE_ZSET_2: (KeyKind.ZSET, 'skiplist'),
    ru.RDB_TYPE_MODULE: (KeyKind.MODULE, 'module'),
    ru.RDB_TYPE_MODULE_2: (KeyKind.MODULE, 'module'),
    ru.RDB_TYPE_HASH_ZIPMAP: (KeyKind.HASH, 'zipmap'),
    ru.RDB_TYPE_LIST_ZIPLIST: (KeyKind.LIST, 'ziplist'),
    ru.RDB_TYPE_SET_INTSET: (KeyKind.SET, 'intset'),
    ru.RDB_TYPE_ZSET_ZIPLIST: (KeyKind.ZSET, 'ziplist'),
    ru.RDB_TYPE_HASH_ZIPLIST: (KeyKind.HASH, 'ziplist'),
    ru.RDB_TYPE_LIST_QUICKLIST: (KeyKind.LIST, 'quicklist'),
    ru.RDB_TYPE_STREAM_LISTPACKS: (KeyKind.STREAM, 'listpacks'),
    ru.RDB_TYPE_HASH_LISTPACK: (KeyKind.HASH, 'listpack'),
    ru.RDB_TYPE_ZSET_LISTPACK: (KeyKind.ZSET, 'listpack'),
    ru.RDB_TYPE_LIST_QUICKLIST_2: (KeyKind.LIST, 'quicklist'),
    ru.RDB_TYPE_STREAM_LISTPACKS_2: (KeyKind.STREAM, 'listpacks'),
    ru.RDB_TYPE_SET_LISTPACK: (KeyKind.SET, 'listpack'),
    ru.RDB_TYPE_STREAM_LISTPACKS_3: (KeyKind.STREAM, 'listpacks'),
}

# Recognised, but neither decodable nor skippable without the owning module
# or the exact (pre-release) layout
_UNSUPPORTED_TYPES = {
    ru.RDB_TYPE_MODULE: 'module value (version 1)',
    ru.RDB_TYPE_HASH_METADATA_PRE_GA: 'hash with field expiry (pre-GA)',
    ru.RDB_TYPE_HASH_LISTPACK_EX_PRE_GA: 'listpack hash with field expiry (pre-GA)',
    ru.RDB_TYPE_HASH_METADATA: 'hash with field expiry',
    ru.RDB_TYPE_HASH_LISTPACK_EX: 'listpack hash with field expiry',
}


def module_type_name(module_id: int) -> str:
    """Decode the 9-character module type name packed into a 64-bit module ID."""
    name = [''] * 9
    module_id >>= 10
    for i in reversed(range(9)):
        name[i] = _MODULE_ID_CHARSET[module_id & 63]
        module_id >>= 6
    return ''.join(name)


class RdbParser:
    """Pull parser for RDB files.

    The parser reads strictly forward through `fd` and produces
    :class:`~rdbscan.events.Event` objects via :meth:`events`, or just the
    per-key summaries via :meth:`keys`. A parser can only be iterated once.

    Parameters
    ----------
    fd : file-like object
        Binary source positioned at the start of the RDB file
    details : bool, optional
        If true, include decoded elements in each
        :class:`~rdbscan.events.KeySummary`
    verify_checksum : bool, optional
        If true, compare the CRC-64 trailer with the contents of the file
        (a zero trailer means the writer disabled checksums and is accepted)
    stop_on_unsupported : bool, optional
        If true, end the parse quietly on a record that cannot be decoded
        or skipped, instead of raising :exc:`~rdbscan.errors.UnsupportedRecord`
    filename : path-like, optional
        Name of the file being parsed, for error messages
    base_offset : int, optional
        Offset of the first byte of `fd` within the enclosing data, so that
        errors in embedded values point into the enclosing data

    Attributes
    ----------
    version : int or None
        RDB format version, once the header has been read
    aux : dict
        Auxiliary fields (e.g. b'redis-ver') seen so far
    inconsistencies : list of :class:`~rdbscan.events.Inconsistency`
        Non-fatal problems found in values
    n_keys : int
        Number of keys emitted so far
    """

    def __init__(self, fd: BinaryIO, *, details: bool = False, verify_checksum: bool = True,
                 stop_on_unsupported: bool = False,
                 filename: Optional[_PathType] = None, base_offset: int = 0) -> None:
        self.details = details
        self.verify_checksum = verify_checksum
        self.stop_on_unsupported = stop_on_unsupported
        self.filename = filename
        self.version = None          # type: Optional[int]
        self.aux = {}                # type: Dict[bytes, bytes]
        self.inconsistencies = []    # type: List[Inconsistency]
        self.n_keys = 0
        self.state = ParserState()
        self._reader = ByteReader(fd, filename, checksum=verify_checksum,
                                  offset=base_offset)
        self._key = None             # type: Optional[bytes]
        self._started = False

    @property
    def offset(self) -> int:
        """Offset of the next unread byte in the RDB stream."""
        return self._reader.offset

    def events(self, raise_errors: bool = True) -> Iterator[Event]:
        """Iterate over the records of the RDB file.

        Parameters
        ----------
        raise_errors : bool, optional
            If true, parse errors are raised as exceptions. Otherwise a final
            :class:`~rdbscan.events.Error` event is yielded instead.

        Raises
        ------
        RdbParseError
            If the file is malformed and `raise_errors` is true. Errors from
            the underlying file object are not remapped.
        """
        if self._started:
            raise RuntimeError('RdbParser can only be iterated once')
        self._started = True
        try:
            yield from self._parse()
        except RdbParseError as exc:
            if self.state.has_pending:
                logger.debug('Discarding pending expiry/idle/frequency due to error')
            self.state.clear_pending()
            if raise_errors:
                raise
            yield Error(exc.kind, exc.offset, exc.message, exc)

    def keys(self) -> Iterator[KeySummary]:
        """Iterate over the keys in the RDB file, raising on the first error."""
        for event in self.events():
            if isinstance(event, Key):
                yield event.summary

    def _report(self, offset: int, message: str) -> None:
        where = 'key ' + display_str(self._key) if self._key is not None else 'RDB file'
        logger.warning('Inconsistency in %s at offset %d: %s', where, offset, message)
        self.inconsistencies.append(Inconsistency(offset, self._key, message))

    def _discard_pending(self, opcode: int) -> None:
        if self.state.has_pending:
            logger.debug('Discarding expiry/idle/frequency not followed by a key '
                         '(opcode 0x%02x intervened)', opcode)
            self.state.clear_pending()

    def _read_header(self) -> int:
        reader = self._reader
        magic = reader.read(len(RDB_MAGIC))
        if magic != RDB_MAGIC:
            raise BadMagic('signature {!r} is not {!r}'.format(magic, RDB_MAGIC),
                           0, self.filename)
        version_str = reader.read(4)
        if not version_str.isdigit():
            raise BadMagic('version {!r} is not a decimal number'.format(version_str),
                           len(RDB_MAGIC), self.filename)
        version = int(version_str)
        if version > RDB_VERSION_MAX:
            logger.warning('RDB version %d is newer than %d - parsing anyway',
                           version, RDB_VERSION_MAX)
        elif version < RDB_VERSION_MIN:
            logger.warning('RDB version %d predates 64-bit lengths - parsing on a '
                           'best-effort basis', version)
        logger.debug('RDB file version %d', version)
        self.version = version
        return version

    def _read_trailer(self) -> Eof:
        reader = self._reader
        crc = reader.crc
        if cast(int, self.version) < RDB_CHECKSUM_MIN_VERSION:
            checksum = b''
        else:
            start = reader.offset
            checksum = reader.read(RDB_CHECKSUM_SIZE)
            expected = int.from_bytes(checksum, 'little')
            if crc is None or expected == 0:
                logger.debug('Checksum not verified')
            elif crc != expected:
                raise ChecksumMismatch('checksum is {:016x} but contents give {:016x}'
                                       .format(expected, crc), start, self.filename)
        end = reader.offset
        if not reader.at_eof():
            self._key = None
            self._report(end, 'unexpected data after end of RDB file')
        logger.debug('Reached end of RDB file after %d bytes and %d keys', end, self.n_keys)
        return Eof(checksum)

    def _parse(self) -> Iterator[Event]:
        reader = self._reader
        state = self.state
        yield HeaderSeen(self._read_header())
        while True:
            start = reader.offset
            opcode = reader.read_uint8()
            if opcode == ru.RDB_OPCODE_EXPIRETIME_MS:
                state.expiry_ms = reader.read_int64_le()
            elif opcode == ru.RDB_OPCODE_EXPIRETIME:
                state.expiry_ms = reader.read_int32_le() * 1000
            elif opcode == ru.RDB_OPCODE_IDLE:
                state.idle_seconds = read_length(reader)
            elif opcode == ru.RDB_OPCODE_FREQ:
                state.frequency = reader.read_uint8()
            elif opcode == ru.RDB_OPCODE_EOF:
                self._discard_pending(opcode)
                yield self._read_trailer()
                return
            elif opcode == ru.RDB_OPCODE_SELECTDB:
                self._discard_pending(opcode)
                state.db = read_length(reader)
                logger.debug('Selecting database %d', state.db)
                yield DbSelected(state.db)
            elif opcode == ru.RDB_OPCODE_AUX:
                self._discard_pending(opcode)
                key = read_string(reader)
                value = read_string(reader)
                logger.debug('Aux field %s = %s', display_str(key), display_str(value))
                self.aux[key] = value
                yield AuxPair(key, value)
            elif opcode == ru.RDB_OPCODE_RESIZEDB:
                self._discard_pending(opcode)
                total = read_length(reader)
                expires = read_length(reader)
                yield ResizeHint(total, expires)
            elif opcode == ru.RDB_OPCODE_MODULE_AUX:
                self._discard_pending(opcode)
                name = self._skip_module_value()
                logger.debug('Skipped aux data of module %s', name)
            elif opcode == ru.RDB_OPCODE_FUNCTION2:
                self._discard_pending(opcode)
                yield FunctionSeen(read_string(reader))
            elif opcode == ru.RDB_OPCODE_SLOT_INFO:
                self._discard_pending(opcode)
                yield SlotInfo(read_length(reader), read_length(reader), read_length(reader))
            elif opcode == ru.RDB_OPCODE_FUNCTION_PRE_GA:
                if not self._unsupported('pre-GA function library', start):
                    return
            elif opcode in _VALUE_TYPES or opcode in _UNSUPPORTED_TYPES:
                if opcode in _UNSUPPORTED_TYPES:
                    if not self._unsupported(_UNSUPPORTED_TYPES[opcode], start):
                        return
                summary = self._read_key_value(opcode)
                self.n_keys += 1
                yield Key(summary)
            else:
                raise UnknownOpcode('unknown opcode 0x{:02x}'.format(opcode),
                                    start, self.filename)

    def _unsupported(self, what: str, offset: int) -> bool:
        """Raise for an unsupported record, or return False to stop the parse."""
        if not self.stop_on_unsupported:
            raise UnsupportedRecord('cannot decode {}'.format(what), offset, self.filename)
        logger.warning('Stopping at unsupported %s at offset %d', what, offset)
        self.state.clear_pending()
        return False

    def _read_key_value(self, value_type: int) -> KeySummary:
        key = read_string(self._reader)
        return self.read_value(value_type, key)

    def read_value(self, value_type: int, key: bytes) -> KeySummary:
        """Decode the value that follows in the stream and summarise it.

        This is the part of a key record after the type byte and key name,
        and it is also the body of a Redis DUMP payload. Pending expiry,
        idle and frequency markers are attached to the summary and cleared.

        Parameters
        ----------
        value_type : int
            RDB value type (the opcode byte of the record)
        key : bytes
            Name of the key, used for the summary and for reporting

        Raises
        ------
        UnknownOpcode
            If `value_type` is not a value type at all
        UnsupportedRecord
            If the value type is known but cannot be decoded or skipped
        """
        reader = self._reader
        state = self.state
        if value_type in _UNSUPPORTED_TYPES:
            raise UnsupportedRecord('cannot decode {}'.format(_UNSUPPORTED_TYPES[value_type]),
                                    reader.offset, self.filename)
        if value_type not in _VALUE_TYPES:
            raise UnknownOpcode('unknown value type {}'.format(value_type),
                                reader.offset, self.filename)
        kind, encoding = _VALUE_TYPES[value_type]
        self._key = key
        value_start = reader.offset
        reader_func = self._VALUE_READERS[value_type]
        count, elements, name = reader_func(self, value_type)
        if kind == KeyKind.STRING:
            value_bytes = len(cast(List[bytes], elements)[0])
        else:
            value_bytes = reader.offset - value_start
        summary = KeySummary(state.db, key, kind, count, value_bytes,
                             expiry_ms=state.expiry_ms, idle_seconds=state.idle_seconds,
                             frequency=state.frequency, encoding=name or encoding,
                             elements=elements if self.details else None)
        state.clear_pending()
        self._key = None
        return summary

    def _read_blob(self) -> Tuple[bytes, int]:
        start = self._reader.offset
        return read_string(self._reader), start

    def _read_string_value(self, value_type: int) -> _ValueResult:
        return 1, [read_string(self._reader)], None

    def _read_list_or_set(self, value_type: int) -> _ValueResult:
        reader = self._reader
        elements = [read_string(reader) for _ in range(read_length(reader))]
        return len(elements), elements, None

    def _read_hash(self, value_type: int) -> _ValueResult:
        reader = self._reader
        elements = []
        for _ in range(read_length(reader)):
            field = read_string(reader)
            elements.append((field, read_string(reader)))
        return len(elements), elements, None

    def _read_zset(self, value_type: int) -> _ValueResult:
        reader = self._reader
        if value_type == ru.RDB_TYPE_ZSET_2:
            read_score = ru.read_binary_double       # type: Callable[[ByteReader], float]
        else:
            read_score = ru.read_double_value
        elements = []
        for _ in range(read_length(reader)):
            member = read_string(reader)
            elements.append((member, read_score(reader)))
        return len(elements), elements, None

    def _read_intset(self, value_type: int) -> _ValueResult:
        blob, base = self._read_blob()
        elements = decode_intset(blob, base, self.filename, self._report)
        return len(elements), elements, None

    def _read_ziplist(self, value_type: int) -> _ValueResult:
        blob, base = self._read_blob()
        elements = decode_ziplist(blob, base, self.filename, self._report)
        return len(elements), elements, None

    def _read_listpack(self, value_type: int) -> _ValueResult:
        blob, base = self._read_blob()
        elements = decode_listpack(blob, base, self.filename, self._report)
        return len(elements), elements, None

    def _read_pairs(self, decode: Callable, scores: bool) -> _ValueResult:
        blob, base = self._read_blob()
        entries = decode(blob, base, self.filename, self._report)
        elements = pairs(entries, base, self.filename)
        if scores:
            elements = [(member, parse_score(score, base, self.filename))
                        for member, score in elements]
        return len(elements), elements, None

    def _read_hash_ziplist(self, value_type: int) -> _ValueResult:
        return self._read_pairs(decode_ziplist, scores=False)

    def _read_zset_ziplist(self, value_type: int) -> _ValueResult:
        return self._read_pairs(decode_ziplist, scores=True)

    def _read_hash_listpack(self, value_type: int) -> _ValueResult:
        return self._read_pairs(decode_listpack, scores=False)

    def _read_zset_listpack(self, value_type: int) -> _ValueResult:
        return self._read_pairs(decode_listpack, scores=True)

    def _read_hash_zipmap(self, value_type: int) -> _ValueResult:
        return self._read_pairs(decode_zipmap, scores=False)

    def _read_quicklist(self, value_type: int) -> _ValueResult:
        """Read a list stored as a sequence of ziplist (or listpack) nodes."""
        reader = self._reader
        elements = []        # type: list
        for _ in range(read_length(reader)):
            if value_type == ru.RDB_TYPE_LIST_QUICKLIST:
                blob, base = self._read_blob()
                elements.extend(decode_ziplist(blob, base, self.filename, self._report))
                continue
            start = reader.offset
            container = read_length(reader)
            if container == ru.QUICKLIST_NODE_CONTAINER_PLAIN:
                elements.append(read_string(reader))
            elif container == ru.QUICKLIST_NODE_CONTAINER_PACKED:
                blob, base = self._read_blob()
                elements.extend(decode_listpack(blob, base, self.filename, self._report))
            else:
                raise BadEncoding('invalid quicklist node container {}'.format(container),
                                  start, self.filename)
        return len(elements), elements, None

    def _skip_module_value(self) -> str:
        """Skip a module value (or module aux record) in the self-describing format.

        Returns the module type name.
        """
        reader = self._reader
        module_id = read_length(reader)
        while True:
            start = reader.offset
            opcode = read_length(reader)
            if opcode == ru.RDB_MODULE_OPCODE_EOF:
                break
            elif opcode in (ru.RDB_MODULE_OPCODE_SINT, ru.RDB_MODULE_OPCODE_UINT):
                read_length(reader)
            elif opcode == ru.RDB_MODULE_OPCODE_FLOAT:
                reader.read_float_le()
            elif opcode == ru.RDB_MODULE_OPCODE_DOUBLE:
                reader.read_double_le()
            elif opcode == ru.RDB_MODULE_OPCODE_STRING:
                skip_string(reader)
            else:
                raise BadEncoding('unknown module opcode {}'.format(opcode),
                                  start, self.filename)
        return module_type_name(module_id)

    def _read_module(self, value_type: int) -> _ValueResult:
        name = self._skip_module_value()
        logger.debug('Skipped value of module %s for key %s', name, display_str(self._key))
        return 0, None, name

    def _read_stream(self, value_type: int) -> _ValueResult:
        """Walk past a stream, returning its number of entries.

        Layout: listpack nodes (master ID, listpack), length, last ID,
        [first ID, max deleted ID, entries added], consumer groups each with
        a pending entries list and consumers with their own PELs.
        """
        reader = self._reader
        v2 = value_type >= ru.RDB_TYPE_STREAM_LISTPACKS_2
        v3 = value_type >= ru.RDB_TYPE_STREAM_LISTPACKS_3
        for _ in range(read_length(reader)):
            skip_string(reader)
            skip_string(reader)
        length = read_length(reader)
        n_ids = 7 if v2 else 2
        for _ in range(n_ids):
            read_length(reader)
        for _ in range(read_length(reader)):
            skip_string(reader)
            read_length(reader)
            read_length(reader)
            if v2:
                read_length(reader)
            for _ in range(read_length(reader)):
                reader.skip(STREAM_ID_SIZE)
                reader.read_uint64_le()
                read_length(reader)
            for _ in range(read_length(reader)):
                skip_string(reader)
                reader.read_uint64_le()
                if v3:
                    reader.read_uint64_le()
                reader.skip(read_length(reader) * STREAM_ID_SIZE)
        return length, None, None

    _VALUE_READERS = {
        ru.RDB_TYPE_STRING: _read_string_value,
        ru.RDB_TYPE_LIST: _read_list_or_set,
        ru.RDB_TYPE_SET: _read_list_or_set,
        ru.RDB_TYPE_ZSET: _read_zset,
        ru.RDB_TYPE_HASH: _read_hash,
        ru.RDB_TYPE_ZSET_2: _read_zset,
        ru.RDB_TYPE_MODULE_2: _read_module,
        ru.RDB_TYPE_HASH_ZIPMAP: _read_hash_zipmap,
        ru.RDB_TYPE_LIST_ZIPLIST: _read_ziplist,
        ru.RDB_TYPE_SET_INTSET: _read_intset,
        ru.RDB_TYPE_ZSET_ZIPLIST: _read_zset_ziplist,
        ru.RDB_TYPE_HASH_ZIPLIST: _read_hash_ziplist,
        ru.RDB_TYPE_LIST_QUICKLIST: _read_quicklist,
        ru.RDB_TYPE_STREAM_LISTPACKS: _read_stream,
        ru.RDB_TYPE_HASH_LISTPACK: _read_hash_listpack,
        ru.RDB_TYPE_ZSET_LISTPACK: _read_zset_listpack,
        ru.RDB_TYPE_LIST_QUICKLIST_2: _read_quicklist,
        ru.RDB_TYPE_STREAM_LISTPACKS_2: _read_stream,
        ru.RDB_TYPE_SET_LISTPACK: _read_listpack,
        ru.RDB_TYPE_STREAM_LISTPACKS_3: _read_stream,
    }   # type: Dict[int, Callable[..., _ValueResult]]


def iter_keys(file: Union[_PathType, BinaryIO], *, buffer_size: int = DEFAULT_BUFFER_SIZE,
              **kwargs) -> Iterator[KeySummary]:
    """Iterate over the keys of an RDB file.

    Parameters
    ----------
    file : str or file-like object
        Filename of .rdb file to read, or object representing contents of RDB
    buffer_size : int, optional
        Read-ahead buffer size used when opening `file` by name
    kwargs : dict
        Options passed on to :class:`RdbParser`

    Raises
    ------
    RdbParseError
        If `file` does not represent a valid RDB file
    """
    try:
        fd = open(cast(_PathType, file), 'rb', buffering=buffer_size)
    except TypeError:
        yield from RdbParser(cast(BinaryIO, file), **kwargs).keys()
    else:
        with fd:
            kwargs.setdefault('filename', file)
            yield from RdbParser(fd, **kwargs).keys()


def load_from_file(file: Union[_PathType, BinaryIO], **kwargs) -> List[KeySummary]:
    """Load the summaries of all keys in the specified RDB file.

    Parameters
    ----------
    file : str or file-like object
        Filename of .rdb file to import, or object representing contents of RDB
    kwargs : dict
        Options passed on to :func:`iter_keys` and :class:`RdbParser`

    Returns
    -------
    list of :class:`~rdbscan.events.KeySummary`
        One summary per key, in file order

    Raises
    ------
    RdbParseError
        If `file` does not represent a valid RDB file
    """
    size = 'unknown'                      # type: object
    try:
        size = os.path.getsize(cast(_PathType, file))
    except TypeError:
        # One could maybe seek() and tell() on file object but is it worth it?
        pass
    logger.debug("Loading keys from RDB dump of %s bytes", size)
    summaries = list(iter_keys(file, **kwargs))
    logger.debug("Loaded %d keys", len(summaries))
    return summaries
