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

from .errors import (RdbScanError, RdbParseError, TruncatedInput, BadMagic, UnknownOpcode,
                     BadEncoding, ChecksumMismatch, UnsupportedRecord, DecompressionFailed)
from .events import KeyKind, KeySummary
from .rdb_reader import RdbParser, iter_keys, load_from_file
from .dump import parse_dump_payload, scan_client

from importlib.metadata import version as _version, PackageNotFoundError

# Attempt to determine installed package version
try:
    __version__ = _version("rdbscan")
except PackageNotFoundError:
    __version__ = "unknown"
