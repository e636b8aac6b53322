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

"""Growable byte buffer with explicit capacity tracking."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..dbc import ContractResult, invariant, require
from ..errors import AllocationError

__all__ = ["GrowBuffer"]


def _size_within_capacity(buffer: GrowBuffer) -> ContractResult:
    return (
        buffer.size <= buffer.capacity,
        f"size {buffer.size} exceeds capacity {buffer.capacity}",
    )


def _window_fits(buffer: GrowBuffer, length: int) -> ContractResult:
    return (
        0 <= length <= buffer.capacity - buffer.size,
        f"window of {length} bytes does not fit free space",
    )


@invariant(_size_within_capacity)
@dataclass(slots=True)
class GrowBuffer:
    """Byte buffer whose capacity grows by half again when it runs out.

    ``capacity`` is the allocated length and ``size`` the number of bytes in
    use. Callers either :meth:`append` bytes, or reserve space, fill a
    :meth:`window` in place and :meth:`commit` what was written. The final
    contents are handed over once by :meth:`finish`, which releases the
    underlying storage.
    """

    _data: bytearray = field(default_factory=bytearray)
    _size: int = 0

    @property
    def capacity(self) -> int:
        """Allocated length in bytes."""
        return len(self._data)

    @property
    def size(self) -> int:
        """Bytes in use."""
        return self._size

    def reserve(self, minimum: int) -> None:
        """Ensure ``capacity >= minimum``, growing by at least 1.5x.

        Raises:
            AllocationError: If the storage cannot grow. The buffer is
                released before raising.
        """
        capacity = len(self._data)
        if minimum <= capacity:
            return
        target = max(capacity + capacity // 2, minimum)
        try:
            self._data.extend(bytes(target - capacity))
        except MemoryError as exc:
            self.release()
            msg = f"Unable to grow buffer from {capacity} to {target} bytes."
            raise AllocationError(msg) from exc

    @require(_window_fits)
    def window(self, length: int) -> memoryview:
        """Return a writable view of ``length`` free bytes after ``size``.

        The view must be released before the buffer grows again.
        """
        return memoryview(self._data)[self._size : self._size + length]

    def commit(self, count: int) -> None:
        """Mark ``count`` bytes written through :meth:`window` as used."""
        self._size += count

    def append(self, data: bytes) -> int:
        """Copy ``data`` after the used region, growing as needed."""
        end = self._size + len(data)
        self.reserve(end)
        self._data[self._size : end] = data
        self._size = end
        return len(data)

    def getvalue(self) -> bytes:
        """Return a copy of the bytes in use."""
        return bytes(self._data[: self._size])

    def finish(self) -> bytes:
        """Hand over the used bytes and release the storage."""
        result = self.getvalue()
        self.release()
        return result

    def release(self) -> None:
        """Drop the storage. Safe to call more than once."""
        self._data = bytearray()
        self._size = 0
