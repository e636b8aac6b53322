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

"""Protocol shared by the growable stream implementations."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, Self, runtime_checkable

from ..config import StreamStrategy

__all__ = ["GrowableStream"]


@runtime_checkable
class GrowableStream(Protocol):
    """Write bytes, then take the complete contents as one buffer.

    ``str`` writes are encoded as UTF-8, so the stream can serve as the sink
    of :func:`lensio.escape.print_chars` and :func:`lensio.position.print_pos`.

    Example::

        with open_stream() as stream:
            stream.write(b"key = ")
            print_chars(stream, value)
        content = stream.getvalue()

    Both strategies enforce the same ceiling: a stream whose contents reach
    ``MAX_READ_LEN`` fails on close instead of being truncated.
    """

    @property
    def strategy(self) -> StreamStrategy:
        """Which implementation backs the stream."""
        ...

    @property
    def size(self) -> int:
        """Bytes written so far, or the final length once closed."""
        ...

    @property
    def closed(self) -> bool:
        """True once :meth:`close` has run, successfully or not."""
        ...

    def write(self, data: bytes | str, /) -> int:
        """Append ``data`` and return the number of bytes written.

        Raises:
            ValueError: If the stream is closed.
        """
        ...

    def write_all(self, chunks: Iterable[bytes | str]) -> int:
        """Write every chunk and return the total number of bytes written."""
        ...

    def getvalue(self) -> bytes:
        """Return the contents.

        Raises:
            ValueError: If the contents are not available yet.
            LensioError: The error that made :meth:`close` fail.
        """
        ...

    def close(self) -> bytes:
        """Finish the stream and return its complete contents.

        Calling ``close`` again returns the same contents, or raises the same
        error when the first close failed.

        Raises:
            CapExceededError: If the contents reach ``MAX_READ_LEN``.
            ReadError: If a backing store cannot be drained or closed.
        """
        ...

    def __enter__(self) -> Self:
        """Enter context manager."""
        ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Close on success; discard the contents when the block raised."""
        ...
