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

"""Strategy selection for growable streams."""

from __future__ import annotations

from ..config import LensioConfig, StreamStrategy, load_config
from ..logging import StructuredLogger, get_logger
from ._stream_memory import MemoryStream
from ._stream_protocols import GrowableStream
from ._stream_temp import TempFileStream

__all__ = ["open_stream"]

logger: StructuredLogger = get_logger(__name__, context={"component": "streams"})


def open_stream(
    strategy: StreamStrategy | None = None,
    *,
    config: LensioConfig | None = None,
) -> GrowableStream:
    """Open a growable stream.

    ``strategy`` wins when given; otherwise the configured strategy is used.
    The default configuration is loaded only when ``config`` is ``None`` and
    either the strategy or the indirect scratch directory has to be looked up.

    Raises:
        ReadError: If the indirect strategy cannot create its backing file.
        ConfigError: If the configuration is invalid.
    """

    resolved = config
    chosen = strategy
    if chosen is None:
        resolved = resolved if resolved is not None else load_config()
        chosen = resolved.stream_strategy

    logger.debug(
        "Opening growable stream.",
        event="stream.open",
        context={"strategy": chosen},
    )
    if chosen == "indirect":
        if resolved is None:
            resolved = load_config()
        return TempFileStream.open(resolved.scratch_dir)
    if chosen == "direct":
        return MemoryStream()
    msg = f"Unknown stream strategy: {chosen!r}"
    raise ValueError(msg)
