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

"""Render the text around an offset for error messages.

The offset is marked with ``|=|`` between the escaped text before it and the
escaped text after it, each side limited to :data:`POSITION_WINDOW` bytes and
padded so that markers line up across messages::

    >>> format_pos("abcdefghij", 5)
    '                      <abcde|=|fghij>                      \\n'
"""

from __future__ import annotations

from typing import Final

from .escape import TextSink, escape

__all__ = ["POSITION_WINDOW", "format_pos", "print_pos"]

#: Bytes of context shown on each side of the offset.
POSITION_WINDOW: Final[int] = 28


def format_pos(text: str | bytes, pos: int) -> str | None:
    """Return the context line for byte offset ``pos`` in ``text``.

    Returns ``None`` when a side could not be escaped for lack of memory.

    Raises:
        ValueError: If ``pos`` lies outside ``text``.
    """

    data = text.encode("utf-8", "surrogateescape") if isinstance(text, str) else text
    if pos < 0 or pos > len(data):
        msg = f"Offset {pos} outside text of length {len(data)}"
        raise ValueError(msg)

    window = POSITION_WINDOW
    before = min(pos, window)
    try:
        left = escape(bytes(data[pos - before : pos])).decode("ascii")
        right = escape(bytes(data[pos:]), window).decode("ascii")
    except MemoryError:
        return None

    head = f"{'<':>{window - len(left)}}" if len(left) < window else "<"
    tail = f"{'>':<{window - len(right)}}" if len(right) < window else ">"
    return f"{head}{left}|=|{right}{tail}\n"


def print_pos(out: TextSink, text: str | bytes, pos: int) -> None:
    """Write the context line for ``pos`` to ``out``, if it could be built."""

    formatted = format_pos(text, pos)
    if formatted is not None:
        out.write(formatted)
