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

"""Escape and unescape string literals.

Raw text is made printable by replacing control characters with two byte
mnemonic escapes (``\\n``, ``\\t``, ...) and every other non-printable byte
with a three digit octal escape (``\\001``). :func:`unescape` only reverses the
mnemonic escapes; octal escapes are left as literal text. Hand-written
literals use the mnemonic names, and the octal form exists purely for display.

``str`` arguments are processed as their UTF-8 encoding, so counts are byte
counts and non-ASCII characters display as octal escapes of their bytes.
Results keep the type of the input.
"""

from __future__ import annotations

from typing import Final, Protocol, TypeVar, cast

from .dbc import ensure, pure

__all__ = [
    "ESCAPE_CHARS",
    "ESCAPE_NAMES",
    "NIL",
    "TextSink",
    "escape",
    "escaped_length",
    "print_chars",
    "unescape",
]

#: Control bytes with a mnemonic escape, parallel to :data:`ESCAPE_NAMES`.
ESCAPE_CHARS: Final[bytes] = b'"\a\b\t\n\v\f\r\\'
#: Mnemonic letters, parallel to :data:`ESCAPE_CHARS`.
ESCAPE_NAMES: Final[bytes] = b'"abtnvfr\\'
#: Token written in place of absent text.
NIL: Final[str] = "nil"

_BACKSLASH: Final[int] = ord("\\")
_UNESCAPES: Final[dict[int, int]] = dict(zip(ESCAPE_NAMES, ESCAPE_CHARS, strict=True))
_ENCODING: Final[str] = "utf-8"
_ERRORS: Final[str] = "surrogateescape"

TextT = TypeVar("TextT", str, bytes)


def _escaped_form(byte: int) -> bytes:
    index = ESCAPE_CHARS.find(byte)
    if index >= 0:
        return bytes((_BACKSLASH, ESCAPE_NAMES[index]))
    if 0x20 <= byte <= 0x7E:
        return bytes((byte,))
    return f"\\{byte:03o}".encode("ascii")


# Indexed by byte value.
_ESCAPED_FORMS: Final[tuple[bytes, ...]] = tuple(_escaped_form(b) for b in range(256))


class TextSink(Protocol):
    """Anything accepting ``str`` writes: text files, ``io.StringIO``, streams."""

    def write(self, data: str, /) -> object: ...


def _as_bytes(text: str | bytes) -> bytes:
    if isinstance(text, str):
        return text.encode(_ENCODING, _ERRORS)
    return bytes(text)


def _restore(template: TextT, data: bytes) -> TextT:
    if isinstance(template, str):
        return cast(TextT, data.decode(_ENCODING, _ERRORS))
    return cast(TextT, data)


def _clamp(count: int, size: int) -> int:
    if count < 0 or count > size:
        return size
    return count


def _is_printable(*_: object, result: str | bytes, **__: object) -> bool:
    return all(0x20 <= byte <= 0x7E for byte in _as_bytes(result))


def escaped_length(text: str | bytes, count: int = -1) -> int:
    """Return the length of ``escape(text, count)`` without building it."""

    data = _as_bytes(text)
    end = _clamp(count, len(data))
    return sum(len(_ESCAPED_FORMS[byte]) for byte in data[:end])


@ensure(_is_printable)
@pure
def escape(text: TextT, count: int = -1) -> TextT:
    """Return the printable form of the first ``count`` bytes of ``text``.

    A negative ``count``, or one past the end of ``text``, covers the whole
    input.

    Example::

        >>> escape("tab\\there\\x01")
        'tab\\\\there\\\\001'
    """

    data = _as_bytes(text)
    end = _clamp(count, len(data))
    out = bytearray(escaped_length(data, end))
    position = 0
    for byte in data[:end]:
        form = _ESCAPED_FORMS[byte]
        out[position : position + len(form)] = form
        position += len(form)
    return _restore(text, bytes(out))


@pure
def unescape(text: TextT, length: int = -1) -> TextT:
    """Collapse mnemonic escapes in the first ``length`` bytes of ``text``.

    A backslash that is not followed by a mnemonic letter is kept as is, so
    ``unescape("\\\\001")`` returns its input unchanged.
    """

    data = _as_bytes(text)
    end = _clamp(length, len(data))
    out = bytearray()
    index = 0
    while index < end:
        byte = data[index]
        if byte == _BACKSLASH and index + 1 < end and data[index + 1] in _UNESCAPES:
            out.append(_UNESCAPES[data[index + 1]])
            index += 2
        else:
            out.append(byte)
            index += 1
    return _restore(text, bytes(out))


def print_chars(out: TextSink | None, text: str | bytes | None, count: int = -1) -> int:
    """Write the escaped form of ``text`` to ``out`` and return its length.

    With ``out=None`` nothing is written and only the length is computed.
    Absent text prints as ``nil``.
    """

    if text is None:
        if out is not None:
            out.write(NIL)
        return len(NIL)

    escaped = escape(_as_bytes(text), count)
    if out is not None:
        out.write(escaped.decode("ascii"))
    return len(escaped)
