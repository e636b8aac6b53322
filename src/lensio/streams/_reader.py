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

"""Bounded reads of byte sources into memory.

:func:`read_bounded` reads a source into a :class:`GrowBuffer` and stops at
EOF or after ``max_len`` bytes, whichever comes first. Reaching ``max_len`` is
a successful read at that layer. :func:`read_file` adds the hard ceiling on
top: a file whose content reaches :data:`MAX_READ_LEN` is rejected, because a
result of exactly the cap cannot be told apart from a truncated one.
"""

from __future__ import annotations

import errno
import os
from pathlib import Path
from typing import IO, Protocol

from ..dbc import ContractResult, require
from ..errors import CapExceededError, ReadError
from ..logging import StructuredLogger, get_logger
from ._grow import GrowBuffer
from ._types import INT32_MAX, MAX_READ_LEN, READ_CHUNK_SIZE

__all__ = [
    "ByteSource",
    "check_cap",
    "read_bounded",
    "read_file",
]

logger: StructuredLogger = get_logger(__name__, context={"component": "reader"})


class ByteSource(Protocol):
    """Binary readable such as an open file, socket file or ``io.BytesIO``."""

    def read(self, size: int = -1, /) -> bytes | None: ...


def _valid_limits(
    source: ByteSource, max_len: int, *, chunk_size: int = READ_CHUNK_SIZE
) -> ContractResult:
    return (
        max_len >= 0 and chunk_size > 0,
        f"max_len={max_len} chunk_size={chunk_size}",
    )


def _fill(source: ByteSource, view: memoryview) -> int:
    """Read into ``view`` until it is full or the source reports EOF."""

    readinto = getattr(source, "readinto", None)
    filled = 0
    while filled < len(view):
        count: int | None
        if readinto is not None:
            with view[filled:] as target:
                count = readinto(target)
        else:
            chunk = source.read(len(view) - filled)
            count = None if chunk is None else len(chunk)
            if chunk:
                view[filled : filled + len(chunk)] = chunk
        if count is None:
            raise BlockingIOError(errno.EAGAIN, "Source has no data available")
        if count == 0:
            break
        filled += count
    return filled


@require(_valid_limits)
def read_bounded(
    source: ByteSource, max_len: int, *, chunk_size: int = READ_CHUNK_SIZE
) -> bytes:
    """Read ``source`` to EOF, stopping after at most ``max_len`` bytes.

    Each round keeps at least ``chunk_size`` bytes of free space, growing the
    buffer by half again when needed, and requests no more than what is left
    of ``max_len``. A short read, or a round with nothing left to request,
    ends the read.

    Args:
        source: Binary readable. ``readinto`` is used when available.
        max_len: Maximum number of bytes to return.
        chunk_size: Minimum free space reserved before each round.

    Returns:
        The bytes read. Exactly ``max_len`` bytes when the source is at
        least that long.

    Raises:
        ReadError: If the source fails. No partial content is returned.
        AllocationError: If the buffer cannot grow.
    """

    buffer = GrowBuffer()
    try:
        while True:
            wanted = buffer.size + chunk_size + 1
            if wanted > buffer.capacity:
                buffer.reserve(wanted)
            # One byte of headroom stays free in every round.
            remaining = max_len - buffer.size if buffer.size < max_len else 0
            requested = min(remaining, buffer.capacity - buffer.size - 1)
            with buffer.window(requested) as view:
                count = _fill(source, view)
            buffer.commit(count)
            if count != requested or requested == 0:
                return buffer.finish()
    except OSError as exc:
        logger.debug(
            "Read from byte source failed.",
            event="read_bounded.failed",
            context={"bytes_read": buffer.size, "error": str(exc)},
        )
        msg = f"Failed to read from source: {exc}"
        raise ReadError(msg) from exc
    finally:
        buffer.release()


def check_cap(length: int, limit: int = MAX_READ_LEN) -> None:
    """Reject lengths at or beyond ``limit`` or outside a signed 32-bit size.

    Raises:
        CapExceededError: If the length is not acceptable.
    """

    if length >= limit or length > INT32_MAX:
        raise CapExceededError(length, limit)


def _close_file(handle: IO[bytes], path: str | os.PathLike[str]) -> None:
    try:
        handle.close()
    except OSError as exc:
        logger.debug(
            "Unable to close file.",
            event="read_file.close_failed",
            context={"path": os.fspath(path), "error": str(exc)},
        )
        msg = f"Unable to close {os.fspath(path)}: {exc}"
        raise ReadError(msg) from exc


def read_file(path: str | os.PathLike[str]) -> bytes:
    """Read the whole file at ``path`` into memory.

    Raises:
        ReadError: If the file cannot be opened, read or closed.
        CapExceededError: If the content reaches :data:`MAX_READ_LEN`.
        AllocationError: If the buffer cannot grow.
    """

    try:
        handle = Path(path).open("rb")
    except OSError as exc:
        logger.debug(
            "Unable to open file.",
            event="read_file.open_failed",
            context={"path": os.fspath(path), "error": str(exc)},
        )
        msg = f"Unable to open {os.fspath(path)}: {exc}"
        raise ReadError(msg) from exc

    try:
        content = read_bounded(handle, MAX_READ_LEN)
    finally:
        _close_file(handle, path)

    try:
        check_cap(len(content), MAX_READ_LEN)
    except CapExceededError:
        logger.warning(
            "Rejected file reaching the read cap.",
            event="read_file.cap_exceeded",
            context={"path": os.fspath(path), "limit": MAX_READ_LEN},
        )
        raise
    return content
