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

"""Limits for bounded reads and growable streams.

Constants:

- ``MAX_READ_LEN``: Hard ceiling on any materialized result (32 MiB)
- ``READ_CHUNK_SIZE``: Minimum free space reserved per read round (8 KiB)
- ``INT32_MAX``: Largest length representable as a signed 32-bit size
"""

from __future__ import annotations

from typing import Final

#: Cap file reads somewhat arbitrarily at 32 MiB.
MAX_READ_LEN: Final[int] = 32 * 1024 * 1024
READ_CHUNK_SIZE: Final[int] = 8_192
INT32_MAX: Final[int] = 2**31 - 1

__all__ = [
    "INT32_MAX",
    "MAX_READ_LEN",
    "READ_CHUNK_SIZE",
]
