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

"""Base exception hierarchy for :mod:`lensio`."""

from __future__ import annotations


class LensioError(Exception):
    """Base class for all lensio exceptions.

    Every failure surfaced by the reader, the growable streams and the
    configuration layer derives from this class, so callers that only need to
    skip an unreadable file can catch it with a single handler.

    Example:
        Skip files that cannot be ingested::

            try:
                content = read_file(path)
            except LensioError as e:
                logger.warning("Skipping %s: %s", path, e)

    Note:
        Subclasses also inherit from the matching builtin exception
        (``MemoryError``, ``OSError``, ``ValueError``) so existing handlers
        for those types keep working.
    """


class AllocationError(LensioError, MemoryError):
    """Raised when a buffer could not grow to the requested capacity.

    Any partially filled buffer has already been released when this is
    raised; callers never receive a partial result.
    """


class ReadError(LensioError, OSError):
    """Raised when opening, reading or closing a byte source fails.

    The underlying :class:`OSError` is attached as ``__cause__``.

    Example:
        Inspecting the original failure::

            try:
                read_file("/etc/hosts")
            except ReadError as e:
                cause = e.__cause__
    """


class CapExceededError(LensioError, ValueError):
    """Raised when a materialized result reaches the read cap.

    The lower-level read may have succeeded; the cap is a hard ceiling that
    is enforced once the full length is known. A result whose length equals
    the cap is rejected as well, since it cannot be told apart from a
    truncated one.
    """

    def __init__(self, length: int, limit: int) -> None:
        super().__init__(f"Content length {length} reaches the {limit} byte limit.")
        self.length = length
        self.limit = limit


__all__ = [
    "AllocationError",
    "CapExceededError",
    "LensioError",
    "ReadError",
]
