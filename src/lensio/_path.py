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

"""Path string joining for tree and file paths.

Unlike :func:`os.path.join`, a segment starting with ``/`` does not reset the
path, and missing segments render as ``()`` so that a broken path is still
visible in error messages.
"""

from __future__ import annotations

from typing import Final

SEP: Final[str] = "/"
MISSING_SEGMENT: Final[str] = "()"


def path_join(base: str | None, *segments: str | None) -> str:
    """Append ``segments`` to ``base`` with single ``/`` separators.

    Args:
        base: Existing path, or ``None`` to start from the first segment.
        segments: Segments to append. ``None`` becomes ``"()"``.

    Returns:
        The joined path, or ``""`` when there is nothing to join.

    Examples:
        >>> path_join("/files", "etc/hosts")
        '/files/etc/hosts'
        >>> path_join("/files/", "/etc")
        '/files/etc'
        >>> path_join(None, "/augeas", None)
        '/augeas/()'
    """
    path = base
    for segment in segments:
        seg = MISSING_SEGMENT if segment is None else segment
        if path is None:
            path = seg
            continue
        if not path.endswith(SEP):
            path += SEP
        if seg.startswith(SEP):
            seg = seg[1:]
        path += seg
    return path if path is not None else ""


__all__ = [
    "MISSING_SEGMENT",
    "SEP",
    "path_join",
]
