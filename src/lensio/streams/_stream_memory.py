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

"""Direct growable stream backed by an in-memory buffer."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Self

from ..config import StreamStrategy
from ..errors import CapExceededError, LensioError
from ..logging import StructuredLogger, get_logger
from ._grow import GrowBuffer
from ._reader import check_cap
from ._types import MAX_READ_LEN

__all__ = ["MemoryStream"]

logger: StructuredLogger = get_logger(__name__, context={"component": "streams"})


def encode_chunk(data: bytes | str) -> bytes:
    """Return ``data`` as bytes, encoding text as UTF-8."""
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


@dataclass(slots=True)
class MemoryStream:
    """GrowableStream writing straight into a :class:`GrowBuffer`.

    The contents are visible through :meth:`getvalue` while writing; closing
    only checks the ceiling and hands the buffer over.
    """

    _buffer: GrowBuffer = field(default_factory=GrowBuffer)
    _value: bytes = field(default=b"", init=False)
    _closed: bool = field(default=False, init=False)
    _failure: LensioError | None = field(default=None, init=False)

    @property
    def strategy(self) -> StreamStrategy:
        return "direct"

    @property
    def size(self) -> int:
        if self._closed:
            return len(self._value)
        return self._buffer.size

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_closed(self) -> None:
        if self._closed:
            msg = "I/O operation on closed stream"
            raise ValueError(msg)

    def write(self, data: bytes | str, /) -> int:
        self._check_closed()
        return self._buffer.append(encode_chunk(data))

    def write_all(self, chunks: Iterable[bytes | str]) -> int:
        self._check_closed()
        total = 0
        for chunk in chunks:
            total += self.write(chunk)
        return total

    def getvalue(self) -> bytes:
        if self._closed:
            return self._settled()
        return self._buffer.getvalue()

    def close(self) -> bytes:
        if self._closed:
            return self._settled()
        self._closed = True
        content = self._buffer.finish()
        try:
            check_cap(len(content), MAX_READ_LEN)
        except CapExceededError as exc:
            logger.warning(
                "Discarded stream reaching the read cap.",
                event="stream.cap_exceeded",
                context={"strategy": "direct", "length": len(content)},
            )
            self._failure = exc
            raise
        self._value = content
        return content

    def _settled(self) -> bytes:
        if self._failure is not None:
            raise self._failure
        return self._value

    def _abort(self) -> None:
        self._closed = True
        self._buffer.release()
        self._value = b""

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        if exc_type is not None:
            self._abort()
        else:
            _ = self.close()
