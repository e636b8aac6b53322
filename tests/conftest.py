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

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

import lensio.dbc as dbc_module
from lensio.config import LensioConfig


@pytest.fixture(autouse=True)
def enforce_contracts(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test with design-by-contract checks switched on."""

    monkeypatch.delenv("LENSIO_DBC", raising=False)
    dbc_module.enable_dbc()
    yield
    dbc_module._forced_state = None


@pytest.fixture
def lowered_cap(monkeypatch: pytest.MonkeyPatch) -> int:
    """Shrink the read ceiling so cap boundaries can be tested quickly."""

    cap = 64 * 1024
    for module in (
        "lensio.streams._reader",
        "lensio.streams._stream_memory",
        "lensio.streams._stream_temp",
    ):
        monkeypatch.setattr(f"{module}.MAX_READ_LEN", cap)
    return cap


@pytest.fixture
def indirect_config(tmp_path: Path) -> LensioConfig:
    """Configuration selecting temp-file streams inside ``tmp_path``."""

    return LensioConfig(stream_strategy="indirect", scratch_dir=tmp_path)
