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

"""Design by contract utilities for :mod:`lensio`.

Contracts are inert unless ``LENSIO_DBC`` is set to a truthy value or
enforcement is forced with :func:`enable_dbc` / :func:`dbc_enabled`. The test
suite turns them on so buffer invariants and codec postconditions are checked
on every call.
"""

from __future__ import annotations

import builtins
import copy
import logging
import os
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import ExitStack, contextmanager
from functools import wraps
from pathlib import Path
from typing import ParamSpec, TypeVar, cast

P = ParamSpec("P")
R = TypeVar("R")
T = TypeVar("T", bound=object)

type ContractResult = bool | tuple[bool, *tuple[object, ...]] | None
ContractCallable = Callable[..., ContractResult | object]

_ENV_FLAG = "LENSIO_DBC"
_forced_state: bool | None = None


def _coerce_flag(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() not in {"", "0", "false", "off", "no"}


def dbc_active() -> bool:
    """Return ``True`` when DbC checks should run."""

    if _forced_state is not None:
        return _forced_state
    return _coerce_flag(os.getenv(_ENV_FLAG))


def enable_dbc() -> None:
    """Force DbC enforcement on."""

    global _forced_state
    _forced_state = True


def disable_dbc() -> None:
    """Force DbC enforcement off."""

    global _forced_state
    _forced_state = False


@contextmanager
def dbc_enabled(*, active: bool = True) -> Iterator[None]:
    """Temporarily set the DbC flag inside a ``with`` block."""

    global _forced_state
    previous = _forced_state
    _forced_state = active
    try:
        yield
    finally:
        _forced_state = previous


def _qualname(target: object) -> str:
    return getattr(target, "__qualname__", repr(target))


def _normalize_contract_result(
    result: ContractResult | object,
) -> tuple[bool, str | None]:
    if isinstance(result, tuple):
        items = cast(Sequence[object], result)
        if not items:
            msg = "Contract callables must not return empty tuples"
            raise TypeError(msg)
        return bool(items[0]), None if len(items) == 1 else str(items[1])
    if result is None:
        return False, None
    return bool(result), None


def _evaluate_contract(
    *,
    kind: str,
    func: Callable[..., object],
    predicate: ContractCallable,
    args: tuple[object, ...],
    kwargs: Mapping[str, object],
) -> None:
    try:
        result = predicate(*args, **kwargs)
    except AssertionError:
        raise
    except Exception as exc:
        msg = (
            f"{kind} contract for {_qualname(func)} raised {type(exc).__name__}: {exc}"
        )
        raise AssertionError(msg) from exc
    outcome, detail = _normalize_contract_result(result)
    if outcome:
        return
    predicate_name = getattr(predicate, "__name__", repr(predicate))
    msg = f"{kind} contract for {_qualname(func)} failed via {predicate_name}."
    if detail:
        msg = f"{msg} Details: {detail}"
    raise AssertionError(msg)


def require(
    *predicates: ContractCallable,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Validate preconditions before invoking the wrapped callable."""

    if not predicates:
        msg = "@require expects at least one predicate"
        raise ValueError(msg)

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapped(*args: P.args, **kwargs: P.kwargs) -> R:
            if dbc_active():
                for predicate in predicates:
                    _evaluate_contract(
                        kind="require",
                        func=func,
                        predicate=predicate,
                        args=tuple(args),
                        kwargs=dict(kwargs),
                    )
            return func(*args, **kwargs)

        return wrapped

    return decorator


def ensure(*predicates: ContractCallable) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Validate postconditions once the callable returns.

    Predicates receive the call's arguments plus ``result=`` as a keyword.
    """

    if not predicates:
        msg = "@ensure expects at least one predicate"
        raise ValueError(msg)

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapped(*args: P.args, **kwargs: P.kwargs) -> R:
            result = func(*args, **kwargs)
            if dbc_active():
                for predicate in predicates:
                    _evaluate_contract(
                        kind="ensure",
                        func=func,
                        predicate=predicate,
                        args=tuple(args),
                        kwargs={**kwargs, "result": result},
                    )
            return result

        return wrapped

    return decorator


def _wrap_method_with_invariants(
    method: Callable[..., object],
    *,
    predicates: tuple[ContractCallable, ...],
) -> Callable[..., object]:
    @wraps(method)
    def wrapper(self: object, *args: object, **kwargs: object) -> object:
        if not dbc_active():
            return method(self, *args, **kwargs)
        for predicate in predicates:
            _evaluate_contract(
                kind="invariant", func=method, predicate=predicate, args=(self,), kwargs={}
            )
        try:
            return method(self, *args, **kwargs)
        finally:
            for predicate in predicates:
                _evaluate_contract(
                    kind="invariant",
                    func=method,
                    predicate=predicate,
                    args=(self,),
                    kwargs={},
                )

    return wrapper


def invariant(*predicates: ContractCallable) -> Callable[[type[T]], type[T]]:
    """Enforce class invariants around every public method call."""

    if not predicates:
        msg = "@invariant expects at least one predicate"
        raise ValueError(msg)

    def decorator(cls: type[T]) -> type[T]:
        for name, attribute in list(cls.__dict__.items()):
            if name.startswith("_") or not callable(attribute):
                continue
            if isinstance(attribute, (staticmethod, classmethod)):
                continue
            setattr(
                cls,
                name,
                _wrap_method_with_invariants(attribute, predicates=predicates),
            )
        return cls

    return decorator


_SNAPSHOT_SENTINEL = object()


def _snapshot(value: object) -> object:
    try:
        return copy.deepcopy(value)
    except Exception:
        return _SNAPSHOT_SENTINEL


def _pure_violation(func: Callable[..., object], target: str) -> Callable[..., object]:
    def raiser(*args: object, **kwargs: object) -> object:
        msg = f"pure contract for {_qualname(func)} forbids calling {target}"
        raise AssertionError(msg)

    return raiser


@contextmanager
def _patch(
    obj: object, attribute: str, replacement: Callable[..., object]
) -> Iterator[None]:
    original = getattr(obj, attribute)
    setattr(obj, attribute, replacement)
    try:
        yield
    finally:
        setattr(obj, attribute, original)


@contextmanager
def _pure_environment(func: Callable[..., object]) -> Iterator[None]:
    with ExitStack() as stack:
        stack.enter_context(
            _patch(builtins, "open", _pure_violation(func, "builtins.open"))
        )
        stack.enter_context(
            _patch(Path, "write_bytes", _pure_violation(func, "Path.write_bytes"))
        )
        stack.enter_context(
            _patch(logging.Logger, "_log", _pure_violation(func, "logging"))
        )
        yield


def pure(func: Callable[P, R]) -> Callable[P, R]:  # noqa: UP047
    """Validate that the wrapped callable neither mutates arguments nor does I/O."""

    @wraps(func)
    def wrapped(*args: P.args, **kwargs: P.kwargs) -> R:
        if not dbc_active():
            return func(*args, **kwargs)

        snapshots = [_snapshot(arg) for arg in args]
        with _pure_environment(func):
            result = func(*args, **kwargs)

        for index, (original, snapshot) in enumerate(zip(args, snapshots, strict=True)):
            if snapshot is not _SNAPSHOT_SENTINEL and original != snapshot:
                msg = (
                    f"pure contract for {_qualname(func)} detected mutation of "
                    f"positional argument {index}"
                )
                raise AssertionError(msg)
        return result

    return wrapped


__all__ = [
    "ContractResult",
    "dbc_active",
    "dbc_enabled",
    "disable_dbc",
    "enable_dbc",
    "ensure",
    "invariant",
    "pure",
    "require",
]
