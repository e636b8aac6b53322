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

"""Configuration for :mod:`lensio`.

Settings come from a TOML or YAML file, then environment variables::

    # ~/.config/lensio/config.toml
    [streams]
    strategy = "indirect"
    scratch_dir = "/var/tmp/lensio"

``LENSIO_STREAM_STRATEGY`` and ``LENSIO_SCRATCH_DIR`` override the file.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Literal, cast

import yaml

from .errors import LensioError

StreamStrategy = Literal["direct", "indirect"]
STREAM_STRATEGIES: Final[tuple[StreamStrategy, ...]] = ("direct", "indirect")

DEFAULT_CONFIG_PATH = Path("~/.config/lensio/config.toml")

ENV_STREAM_STRATEGY = "LENSIO_STREAM_STRATEGY"
ENV_SCRATCH_DIR = "LENSIO_SCRATCH_DIR"

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ENV_SCRATCH_DIR",
    "ENV_STREAM_STRATEGY",
    "STREAM_STRATEGIES",
    "ConfigError",
    "LensioConfig",
    "StreamStrategy",
    "load_config",
]


class ConfigError(LensioError, ValueError):
    """Raised when the lensio configuration is invalid."""


@dataclass(frozen=True, slots=True)
class LensioConfig:
    """Resolved lensio settings.

    Attributes:
        stream_strategy: ``"direct"`` keeps stream writes in memory,
            ``"indirect"`` spools them to a temporary file until close.
        scratch_dir: Directory for indirect stream backing files. ``None``
            uses the platform default.
    """

    stream_strategy: StreamStrategy = "direct"
    scratch_dir: Path | None = None


def load_config(
    path: Path | Mapping[str, Any] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> LensioConfig:
    """Load and validate the lensio configuration.

    Parameters
    ----------
    path:
        Path to a ``.toml``, ``.yaml`` or ``.yml`` file. ``None`` falls back
        to ``~/.config/lensio/config.toml``, which may be absent. Tests may
        pass an in-memory mapping to skip filesystem I/O.
    env:
        Optional environment mapping. Defaults to :data:`os.environ`.

    Raises
    ------
    ConfigError
        If the file format or any value is invalid.
    FileNotFoundError
        If an explicitly given file does not exist.
    """

    env_map = os.environ if env is None else env

    if isinstance(path, Mapping):
        raw: dict[str, object] = dict(path)
    else:
        config_path = path if path is not None else DEFAULT_CONFIG_PATH.expanduser()
        raw = _load_config_file(config_path)

    settings = _normalise_config(raw)
    if ENV_STREAM_STRATEGY in env_map:
        settings["stream_strategy"] = env_map[ENV_STREAM_STRATEGY]
    if ENV_SCRATCH_DIR in env_map:
        settings["scratch_dir"] = env_map[ENV_SCRATCH_DIR] or None

    return LensioConfig(
        stream_strategy=_coerce_strategy(settings.get("stream_strategy")),
        scratch_dir=_coerce_path(settings.get("scratch_dir"), "scratch_dir"),
    )


def _load_config_file(path: Path) -> dict[str, object]:
    if not path.exists():
        if path == DEFAULT_CONFIG_PATH.expanduser():
            return {}
        msg = f"Configuration file not found: {path}"
        raise FileNotFoundError(msg)

    suffix = path.suffix.lower()
    data: object
    if suffix == ".toml" or not suffix:
        with path.open("rb") as handle:
            try:
                data = tomllib.load(handle)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {path}: {exc}"
                raise ConfigError(msg) from exc
    elif suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = yaml.safe_load(handle) or {}
            except yaml.YAMLError as exc:
                msg = f"Invalid YAML in {path}: {exc}"
                raise ConfigError(msg) from exc
    else:
        msg = f"Unsupported configuration format: {path.suffix}"
        raise ConfigError(msg)

    if not isinstance(data, MutableMapping):
        msg = "Configuration file must contain a mapping at the root."
        raise ConfigError(msg)

    typed: dict[str, object] = {}
    for key, value in cast(MutableMapping[object, object], data).items():
        if not isinstance(key, str):
            msg = f"Configuration keys must be strings (got {key!r})."
            raise ConfigError(msg)
        typed[key] = value
    return typed


def _normalise_config(raw: Mapping[str, object]) -> dict[str, object]:
    config: dict[str, object] = {
        "stream_strategy": raw.get("stream_strategy"),
        "scratch_dir": raw.get("scratch_dir"),
    }

    streams_obj = raw.get("streams")
    if isinstance(streams_obj, Mapping):
        streams = cast(Mapping[str, object], streams_obj)
        if config["stream_strategy"] is None:
            config["stream_strategy"] = streams.get("strategy")
        if config["scratch_dir"] is None:
            config["scratch_dir"] = streams.get("scratch_dir")
    elif streams_obj is not None:
        msg = "The [streams] section must be a mapping."
        raise ConfigError(msg)

    return config


def _coerce_strategy(value: object) -> StreamStrategy:
    if value is None:
        return "direct"
    if isinstance(value, str):
        lowered = value.strip().lower()
        for strategy in STREAM_STRATEGIES:
            if lowered == strategy:
                return strategy
    msg = f"stream_strategy must be one of {STREAM_STRATEGIES} (got {value!r})."
    raise ConfigError(msg)


def _coerce_path(value: object, field_name: str) -> Path | None:
    if value is None:
        return None
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    msg = f"{field_name} must be a path-like value."
    raise ConfigError(msg)
