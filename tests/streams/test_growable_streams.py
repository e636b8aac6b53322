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

"""Tests for growable streams under both strategies."""

from __future__ import annotations

import errno
from io import BytesIO
from pathlib import Path

import pytest

from lensio.config import ConfigError, LensioConfig, StreamStrategy
from lensio.dbc import dbc_enabled
from lensio.errors import CapExceededError, ReadError
from lensio.streams import (
    GrowableStream,
    MemoryStream,
    TempFileStream,
    open_stream,
)


class _UnclosableBuffer(BytesIO):
    """In-memory backing file whose close reports an I/O error."""

    def close(self) -> None:
        super().close()
        raise OSError(errno.EIO, "Input/output error")


@pytest.fixture(params=["direct", "indirect"])
def strategy(request: pytest.FixtureRequest) -> StreamStrategy:
    return request.param


@pytest.fixture
def stream(strategy: StreamStrategy, indirect_config: LensioConfig) -> GrowableStream:
    return open_stream(strategy, config=indirect_config)


class TestGrowableStream:
    def test_satisfies_protocol(self, stream: GrowableStream, strategy: str) -> None:
        assert isinstance(stream, GrowableStream)
        assert stream.strategy == strategy
        _ = stream.close()

    def test_collects_writes(self, stream: GrowableStream) -> None:
        assert stream.write(b"key") == 3
        assert stream.write(" = ") == 3
        assert stream.write(b"value\n") == 6
        assert stream.size == 12
        assert stream.close() == b"key = value\n"
        assert stream.getvalue() == b"key = value\n"

    def test_text_is_written_as_utf8(self, stream: GrowableStream) -> None:
        _ = stream.write("café")
        assert stream.close() == "café".encode()

    def test_write_all(self, stream: GrowableStream) -> None:
        assert stream.write_all([b"a", "b", b"cd"]) == 4
        assert stream.close() == b"abcd"

    def test_empty_stream(self, stream: GrowableStream) -> None:
        assert stream.close() == b""
        assert stream.size == 0

    def test_million_single_byte_writes(self, stream: GrowableStream) -> None:
        with dbc_enabled(active=False):
            for index in range(1_000_000):
                _ = stream.write(bytes((0x41 + index % 26,)))
            content = stream.close()
        expected = bytes(0x41 + index % 26 for index in range(1_000_000))
        assert content == expected

    def test_second_close_returns_same_content(self, stream: GrowableStream) -> None:
        _ = stream.write(b"once")
        assert stream.close() == b"once"
        assert stream.close() == b"once"

    def test_write_after_close_fails(self, stream: GrowableStream) -> None:
        _ = stream.close()
        assert stream.closed
        with pytest.raises(ValueError, match="closed stream"):
            _ = stream.write(b"late")
        with pytest.raises(ValueError, match="closed stream"):
            _ = stream.write_all([b"late"])

    def test_context_manager_closes(self, stream: GrowableStream) -> None:
        with stream as active:
            _ = active.write(b"body")
        assert stream.closed
        assert stream.getvalue() == b"body"

    def test_context_manager_aborts_on_error(self, stream: GrowableStream) -> None:
        with pytest.raises(RuntimeError, match="boom"), stream as active:
            _ = active.write(b"partial")
            raise RuntimeError("boom")
        assert stream.closed
        assert stream.getvalue() == b""
        assert stream.size == 0

    def test_content_reaching_cap_is_rejected(
        self,
        stream: GrowableStream,
        lowered_cap: int,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        _ = stream.write(b"x" * lowered_cap)
        with pytest.raises(CapExceededError):
            _ = stream.close()
        assert stream.closed
        with pytest.raises(CapExceededError):
            _ = stream.getvalue()
        events = {getattr(record, "event", None) for record in caplog.records}
        assert events & {"stream.cap_exceeded", "stream.drain_failed"}

    def test_content_below_cap_is_accepted(
        self, stream: GrowableStream, lowered_cap: int
    ) -> None:
        _ = stream.write(b"x" * (lowered_cap - 1))
        assert len(stream.close()) == lowered_cap - 1

    def test_failed_close_keeps_failing(
        self, stream: GrowableStream, lowered_cap: int
    ) -> None:
        _ = stream.write(b"x" * lowered_cap)
        with pytest.raises(CapExceededError) as first:
            _ = stream.close()
        with pytest.raises(CapExceededError) as second:
            _ = stream.close()
        assert second.value is first.value
        assert stream.size == 0


class TestMemoryStream:
    def test_contents_visible_while_open(self) -> None:
        stream = MemoryStream()
        _ = stream.write(b"draft")
        assert stream.getvalue() == b"draft"
        _ = stream.write(b"!")
        assert stream.close() == b"draft!"


class TestTempFileStream:
    def test_contents_unavailable_while_open(self, tmp_path: Path) -> None:
        stream = TempFileStream.open(tmp_path)
        _ = stream.write(b"spooled")
        with pytest.raises(ValueError, match="after close"):
            _ = stream.getvalue()
        assert stream.close() == b"spooled"

    def test_backing_file_leaves_no_trace(self, tmp_path: Path) -> None:
        stream = TempFileStream.open(tmp_path)
        _ = stream.write(b"scratch")
        _ = stream.close()
        assert list(tmp_path.iterdir()) == []

    def test_missing_scratch_dir_fails_to_open(self, tmp_path: Path) -> None:
        with pytest.raises(ReadError, match="backing file"):
            _ = TempFileStream.open(tmp_path / "missing")

    def test_drain_failure_discards_contents(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def failing_read(*_: object, **__: object) -> bytes:
            raise ReadError("disk went away")

        monkeypatch.setattr("lensio.streams._stream_temp.read_bounded", failing_read)
        stream = TempFileStream.open(tmp_path)
        _ = stream.write(b"lost")
        with pytest.raises(ReadError, match="disk went away"):
            _ = stream.close()
        assert stream.closed
        assert stream.size == 0
        with pytest.raises(ReadError, match="disk went away"):
            _ = stream.getvalue()
        with pytest.raises(ReadError, match="disk went away"):
            _ = stream.close()

    def test_os_error_while_draining_becomes_read_error(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def failing_read(*_: object, **__: object) -> bytes:
            raise OSError("seek failed")

        monkeypatch.setattr("lensio.streams._stream_temp.read_bounded", failing_read)
        stream = TempFileStream.open(tmp_path)
        with pytest.raises(ReadError, match="drain") as excinfo:
            _ = stream.close()
        assert isinstance(excinfo.value.__cause__, OSError)


    def test_close_failure_does_not_mask_drain_error(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        def failing_read(*_: object, **__: object) -> bytes:
            raise ReadError("disk went away")

        monkeypatch.setattr("lensio.streams._stream_temp.read_bounded", failing_read)
        stream = TempFileStream(_handle=_UnclosableBuffer())
        with pytest.raises(ReadError, match="disk went away"):
            _ = stream.close()
        events = [getattr(record, "event", None) for record in caplog.records]
        assert "stream.close_failed" in events

    def test_close_failure_after_drain_becomes_read_error(self) -> None:
        stream = TempFileStream(_handle=_UnclosableBuffer())
        _ = stream.write(b"ok")
        with pytest.raises(ReadError, match="close stream backing file") as excinfo:
            _ = stream.close()
        assert isinstance(excinfo.value.__cause__, OSError)
        with pytest.raises(ReadError) as again:
            _ = stream.close()
        assert again.value is excinfo.value
        assert stream.size == 0

    def test_abort_keeps_error_raised_in_block(self) -> None:
        stream = TempFileStream(_handle=_UnclosableBuffer())
        with pytest.raises(RuntimeError, match="boom"), stream as active:
            _ = active.write(b"partial")
            raise RuntimeError("boom")
        assert stream.closed


class TestOpenStream:
    def test_configured_strategy(self, indirect_config: LensioConfig) -> None:
        stream = open_stream(config=indirect_config)
        assert isinstance(stream, TempFileStream)
        _ = stream.close()

    def test_explicit_strategy_wins(self, indirect_config: LensioConfig) -> None:
        stream = open_stream("direct", config=indirect_config)
        assert isinstance(stream, MemoryStream)

    def test_default_is_direct(self) -> None:
        assert isinstance(open_stream(config=LensioConfig()), MemoryStream)

    def test_loads_configuration_when_missing(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("lensio.config.DEFAULT_CONFIG_PATH", tmp_path / "none.toml")
        monkeypatch.setenv("LENSIO_STREAM_STRATEGY", "indirect")
        monkeypatch.setenv("LENSIO_SCRATCH_DIR", str(tmp_path))
        stream = open_stream()
        assert stream.strategy == "indirect"
        _ = stream.close()

    def test_unknown_strategy(self) -> None:
        with pytest.raises(ValueError, match="Unknown stream strategy"):
            _ = open_stream("sideways", config=LensioConfig())  # pyright: ignore[reportArgumentType]

    def test_explicit_direct_skips_configuration(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        broken = tmp_path / "config.toml"
        _ = broken.write_text("streams = [\n", encoding="utf-8")
        monkeypatch.setattr("lensio.config.DEFAULT_CONFIG_PATH", broken)
        assert isinstance(open_stream("direct"), MemoryStream)
        with pytest.raises(ConfigError):
            _ = open_stream()
