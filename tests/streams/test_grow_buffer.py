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

"""Tests for the growable byte buffer."""

from __future__ import annotations

import pytest

from lensio.errors import AllocationError
from lensio.streams import GrowBuffer


class _FailingBytes(bytearray):
    def extend(self, iterable_of_ints: object) -> None:
        raise MemoryError


class TestGrowBuffer:
    def test_starts_empty(self) -> None:
        buffer = GrowBuffer()
        assert buffer.size == 0
        assert buffer.capacity == 0
        assert buffer.getvalue() == b""

    def test_reserve_grows_to_request_when_larger(self) -> None:
        buffer = GrowBuffer()
        buffer.reserve(100)
        assert buffer.capacity == 100

    def test_reserve_grows_by_half_again(self) -> None:
        buffer = GrowBuffer()
        buffer.reserve(100)
        buffer.reserve(101)
        assert buffer.capacity == 150

    def test_reserve_within_capacity_is_noop(self) -> None:
        buffer = GrowBuffer()
        buffer.reserve(100)
        buffer.reserve(40)
        assert buffer.capacity == 100

    def test_append_tracks_size(self) -> None:
        buffer = GrowBuffer()
        assert buffer.append(b"hello") == 5
        assert buffer.append(b" world") == 6
        assert buffer.size == 11
        assert buffer.size <= buffer.capacity
        assert buffer.getvalue() == b"hello world"

    def test_window_and_commit(self) -> None:
        buffer = GrowBuffer()
        buffer.reserve(8)
        with buffer.window(3) as view:
            view[:] = b"abc"
        buffer.commit(3)
        assert buffer.getvalue() == b"abc"

    def test_window_larger_than_free_space_violates_contract(self) -> None:
        buffer = GrowBuffer()
        buffer.reserve(4)
        with pytest.raises(AssertionError, match="window"):
            buffer.window(5)

    def test_finish_hands_over_and_releases(self) -> None:
        buffer = GrowBuffer()
        buffer.append(b"data")
        assert buffer.finish() == b"data"
        assert buffer.size == 0
        assert buffer.capacity == 0

    def test_release_is_idempotent(self) -> None:
        buffer = GrowBuffer()
        buffer.append(b"data")
        buffer.release()
        buffer.release()
        assert buffer.size == 0

    def test_allocation_failure_releases_and_raises(self) -> None:
        buffer = GrowBuffer(_FailingBytes(b"partial"), 7)
        with pytest.raises(AllocationError, match="Unable to grow"):
            buffer.reserve(1_000)
        assert buffer.size == 0
        assert buffer.capacity == 0
