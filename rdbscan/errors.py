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

from typing import Optional

from .utils import _PathType


class RdbScanError(RuntimeError):
    """Base class for errors from this package."""


class RdbParseError(RdbScanError):
    """Error parsing RDB file.

    Parameters
    ----------
    message : str, optional
        Description of what went wrong
    offset : int, optional
        Absolute byte offset in the RDB stream at which the error was observed
    filename : path-like, optional
        Name of the file being parsed, if known
    """

    #: Short name of the error category, as reported in :class:`~rdbscan.events.Error`
    kind = 'ParseError'

    def __init__(self, message: str = '', offset: Optional[int] = None,
                 filename: Optional[_PathType] = None) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.filename = filename

    def __str__(self) -> str:
        name = repr(self.filename) if self.filename else 'object'
        where = ' at offset {}'.format(self.offset) if self.offset is not None else ''
        msg = 'Invalid RDB file {}{}'.format(name, where)
        if self.message:
            msg += ': ' + self.message
        return msg


class TruncatedInput(RdbParseError):
    """A read ran out of bytes in the middle of a field."""

    kind = 'TruncatedInput'


class BadMagic(RdbParseError):
    """The file does not start with the RDB signature and version."""

    kind = 'BadMagic'


class UnknownOpcode(RdbParseError):
    """The record dispatcher encountered an unrecognised opcode."""

    kind = 'UnknownOpcode'


class BadEncoding(RdbParseError):
    """A length, string or container encoding is malformed or reserved."""

    kind = 'BadEncoding'


class ChecksumMismatch(BadEncoding):
    """The CRC-64 trailer does not match the contents of the file."""

    kind = 'ChecksumMismatch'


class UnsupportedRecord(RdbParseError):
    """A record type was recognised but cannot be decoded or skipped."""

    kind = 'UnsupportedRecord'


class DecompressionFailed(RdbParseError):
    """An LZF-compressed string did not expand to its declared length."""

    kind = 'DecompressionFailed'
