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

"""Bounded reads and growable output streams.

Reading a file with the hard ceiling applied::

    from lensio.streams import read_file

    content = read_file("/etc/hosts")

Accumulating output and taking it as one buffer::

    from lensio.streams import open_stream

    with open_stream("indirect") as stream:
        stream.write(b"header\\n")
    content = stream.getvalue()

Implementations:

- ``MemoryStream``: direct strategy, writes land in a growable buffer
- ``TempFileStream``: indirect strategy, writes spool to a temporary file
  that is drained through :func:`read_bounded` on close
"""

from __future__ import annotations

from ._grow import GrowBuffer
from ._open import open_stream
from ._reader import ByteSource, check_cap, read_bounded, read_file
from ._stream_memory import MemoryStream
from ._stream_protocols import GrowableStream
from ._stream_temp import TempFileStream
from ._types import INT32_MAX, MAX_READ_LEN, READ_CHUNK_SIZE

__all__ = [
    "INT32_MAX",
    "MAX_READ_LEN",
    "READ_CHUNK_SIZE",
    "ByteSource",
    "GrowBuffer",
    "GrowableStream",
    "MemoryStream",
    "TempFileStream",
    "check_cap",
    "open_stream",
    "read_bounded",
    "read_file",
]
