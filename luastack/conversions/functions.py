"""Callables <-> VM functions.

Pushing a Python callable pushes a VM function that reads its arguments by
the callable's parameter annotations (or the `Callable[[...], R]` annotation
it was pushed as), calls it, and pushes the result by the return annotation.
A return annotation of None pushes no result.

Reading a VM function gives a `BoundFunction`: calling it pushes the
function and the arguments, calls into the VM and pops the typed result.
"""

from __future__ import annotations

import inspect
import logging
import typing
from dataclasses import dataclass
from types import NoneType
from typing import Any, Callable, Optional, Sequence

from luastack import stack
from luastack.classify import describe
from luastack.errors import LuaError, StackImbalanceError
from luastack.mismatch import bad_argument
from luastack.objects import LuaObject
from luastack.types.descriptor import HostType

logger = logging.getLogger(__name__)

_EMPTY = inspect.Parameter.empty


@dataclass(frozen=True)
class Param:
    name: str
    annotation: Any = Any
    default: Any = _EMPTY
    variadic: bool = False


@dataclass(frozen=True)
class Signature:
    params: tuple[Param, ...]
    returns: Any = Any

    @property
    def returns_nothing(self) -> bool:
        return self.returns is None or self.returns is NoneType


def _from_callable_args(args: tuple) -> Optional[Signature]:
    # Callable[[A, B], R] -> ([A, B], R); Callable[..., R] -> (Ellipsis, R)
    if len(args) != 2:
        return None
    params, returns = args
    if params is Ellipsis:
        return Signature((Param("...", Any, variadic=True),), returns)
    return Signature(tuple(Param(f"arg{i}", tp) for i, tp in enumerate(params, 1)), returns)


def signature_of(fn: Callable, host: HostType) -> Signature:
    declared = _from_callable_args(host.args)
    if declared is not None:
        return declared
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        # builtins without introspectable signatures take anything
        return Signature((Param("...", Any, variadic=True),))
    try:
        hints = typing.get_type_hints(fn)
    except (NameError, TypeError):
        hints = {}
    params = []
    for p in sig.parameters.values():
        if p.kind in (p.KEYWORD_ONLY, p.VAR_KEYWORD):
            continue
        params.append(Param(p.name, hints.get(p.name, Any), p.default, p.kind is p.VAR_POSITIONAL))
    returns = hints.get("return", Any) if sig.return_annotation is not _EMPTY else Any
    return Signature(tuple(params), returns)


def _read_arguments(L, sig: Signature, name: str) -> list[Any]:
    nargs = L.get_top()
    args = []
    for i, p in enumerate(sig.params, 1):
        if p.variadic:
            args.extend(stack.get_value(L, j, p.annotation, bad_argument(j, name))
                        for j in range(i, nargs + 1))
            break
        if p.default is not _EMPTY and L.is_none_or_nil(i):
            args.append(p.default)
            continue
        args.append(stack.get_value(L, i, p.annotation, bad_argument(i, name)))
    return args


def push_function(L, fn: Callable, host: HostType) -> None:
    if isinstance(fn, BoundFunction):
        if fn.function.state is not L:
            raise ValueError("BoundFunction belongs to a different state")
        fn.function.push()
        return
    sig = signature_of(fn, host)
    # every annotation must convert before the function reaches the VM
    for p in sig.params:
        describe(p.annotation, "read")
    describe(sig.returns, "push")
    name = getattr(fn, "__name__", None) or type(fn).__name__

    def trampoline(L) -> int:
        try:
            args = _read_arguments(L, sig, name)
            result = fn(*args)
            if sig.returns_nothing or (sig.returns is Any and result is None):
                return 0
            stack.push_value(L, result, None if sig.returns is Any else sig.returns)
            return 1
        except (LuaError, StackImbalanceError):
            raise
        except Exception as exc:
            logger.debug("host function %r raised %r", name, exc)
            raise LuaError(f"{type(exc).__name__}: {exc}".encode("utf-8")) from exc

    L.push_function(trampoline, name)


class BoundFunction:
    """A VM function callable from Python.

    `params` types the arguments (inferred from the values when None),
    `returns` types the single result; None/NoneType discards results.
    """

    __slots__ = ("function", "params", "returns")

    def __init__(self, L, idx: int, params: Optional[Sequence[Any]] = None, returns: Any = Any):
        self.function = LuaObject(L, idx)
        self.params = None if params is None else tuple(params)
        self.returns = returns

    def __call__(self, *args: Any) -> Any:
        L = self.function.state
        if self.params is not None and len(args) != len(self.params):
            raise TypeError(f"expected {len(self.params)} arguments, got {len(args)}")
        nresults = 0 if self.returns is None or self.returns is NoneType else 1
        with stack.restore_top(L):
            self.function.push()
            for i, arg in enumerate(args):
                stack.push_value(L, arg, None if self.params is None else self.params[i])
            L.call(len(args), nresults)
            if nresults:
                return stack.pop_value(L, self.returns)
        return None

    def release(self) -> None:
        self.function.release()

    def __repr__(self):
        return f"BoundFunction({self.function!r})"


def get_function(L, idx: int, host: HostType, handler) -> BoundFunction:
    declared = _from_callable_args(host.args)
    if declared is None:
        return BoundFunction(L, idx)
    if declared.params and declared.params[0].variadic:
        return BoundFunction(L, idx, None, declared.returns)
    return BoundFunction(L, idx, [p.annotation for p in declared.params], declared.returns)
