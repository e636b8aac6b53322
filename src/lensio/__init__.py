# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Low-level text support for configuration lenses.

- :mod:`lensio.escape` converts raw text to printable string literals and back
- :mod:`lensio.streams` reads files under a hard size ceiling and accumulates
  output in growable streams
- :mod:`lensio.position` renders the text around an error offset
"""

from __future__ import annotations

from ._path import path_join
from .config import ConfigError, LensioConfig, load_config
from .errors import AllocationError, CapExceededError, LensioError, ReadError
from .escape import escape, escaped_length, print_chars, unescape
from .logging import configure_logging, get_logger
from .position import POSITION_WINDOW, format_pos, print_pos
from .streams import (
    MAX_READ_LEN,
    GrowableStream,
    MemoryStream,
    TempFileStream,
    open_stream,
    read_bounded,
    read_file,
)

__version__ = "0.1.0"

__all__ = [
    "MAX_READ_LEN",
    "POSITION_WINDOW",
    "AllocationError",
    "CapExceededError",
    "ConfigError",
    "GrowableStream",
    "LensioConfig",
    "LensioError",
    "MemoryStream",
    "ReadError",
    "TempFileStream",
    "configure_logging",
    "escape",
    "escaped_length",
    "format_pos",
    "get_logger",
    "load_config",
    "open_stream",
    "path_join",
    "print_chars",
    "print_pos",
    "read_bounded",
    "read_file",
    "unescape",
]
