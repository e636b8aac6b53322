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

"""Indirect growable stream backed by an anonymous temporary file.

Writes go straight to the scratch file. On close the file is rewound and
drained through :func:`read_bounded` under the same ceiling as
:func:`read_file`, then removed.
"""

from __future__ import annotations

import tempfile
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Self

from ..config import StreamStrategy
from ..errors import LensioError, ReadError
from ..logging import StructuredLogger, get_logger
from ._reader import check_cap, read_bounded
from ._stream_memory import encode_chunk
from ._types import MAX_READ_LEN

__all__ = ["TempFileStream"]

logger: StructuredLogger = get_logger(__name__, context={"component": "streams"})


@dataclass(slots=True)
class TempFileStream:
    """GrowableStream spooling writes to a temporary file until close."""

    _handle: BinaryIO
    _bytes_written: int = field(default=0, init=False)
    _value: bytes = field(default=b"", init=False)
    _closed: bool = field(default=False, init=False)
    _failure: LensioError | None = field(default=None, init=False)

    @classmethod
    def open(cls, scratch_dir: Path | None = None) -> TempFileStream:
        """Create a stream whose backing file lives in ``scratch_dir``.

        The file has no name on platforms that support it and disappears
        when the stream is closed.

        Raises:
            ReadError: If the temporary file cannot be created.
        """
        try:
            handle = tempfile.TemporaryFile(dir=scratch_dir)
        except OSError as exc:
            msg = f"Unable to create stream backing file: {exc}"
            raise ReadError(msg) from exc
        return cls(_handle=handle)

    @property
    def strategy(self) -> StreamStrategy:
        return "indirect"

    @property
    def size(self) -> int:
        if self._closed:
            return len(self._value)
        return self._bytes_written

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_closed(self) -> None:
        if self._closed:
            msg = "I/O operation on closed stream"
            raise ValueError(msg)

    def write(self, data: bytes | str, /) -> int:
        self._check_closed()
        written = self._handle.write(encode_chunk(data))
        self._bytes_written += written
        return written

    def write_all(self, chunks: Iterable[bytes | str]) -> int:
        self._check_closed()
        total = 0
        for chunk in chunks:
            total += self.write(chunk)
        return total

    def getvalue(self) -> bytes:
        """Return the contents once the stream is closed.

        Raises:
            ValueError: If the stream is still open; the contents only exist
                in the backing file until :meth:`close` drains it.
            LensioError: The error that made :meth:`close` fail.
        """
        if not self._closed:
            msg = "Contents of an indirect stream are available after close"
            raise ValueError(msg)
        return self._settled()

    def close(self) -> bytes:
        if self._closed:
            return self._settled()
        self._closed = True
        try:
            content = self._drain()
            check_cap(len(content), MAX_READ_LEN)
        except LensioError as exc:
            self._discard(exc)
            raise
        except OSError as exc:
            msg = f"Failed to drain stream backing file: {exc}"
            error = ReadError(msg)
            self._discard(error)
            raise error from exc

        try:
            self._handle.close()
        except OSError as exc:
            msg = f"Failed to close stream backing file: {exc}"
            error = ReadError(msg)
            self._discard(error)
            raise error from exc
        self._value = content
        return content

    def _settled(self) -> bytes:
        if self._failure is not None:
            raise self._failure
        return self._value

    def _drain(self) -> bytes:
        self._handle.flush()
        _ = self._handle.seek(0)
        return read_bounded(self._handle, MAX_READ_LEN)

    def _discard(self, error: LensioError) -> None:
        logger.warning(
            "Discarded indirect stream contents.",
            event="stream.drain_failed",
            context={
                "strategy": "indirect",
                "bytes_written": self._bytes_written,
                "error": str(error),
            },
        )
        self._value = b""
        self._bytes_written = 0
        self._failure = error
        self._release_handle()

    def _release_handle(self) -> None:
        """Close the backing file while another error is already in flight."""
        if self._handle.closed:
            return
        try:
            self._handle.close()
        except OSError as exc:
            logger.warning(
                "Failed to close stream backing file.",
                event="stream.close_failed",
                context={"strategy": "indirect", "error": str(exc)},
            )

    def _abort(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._value = b""
        self._bytes_written = 0
        self._release_handle()

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
