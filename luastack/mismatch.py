"""Strategies invoked when a slot's category is not the one a read asked for.

A handler is called as ``handler(L, actual, expected)`` with two
`Category` values. The VM-facing handlers never return: they unwind through
`LuaState.raise_error`, leaving the stack exactly as they found it. A custom
handler that does return hands its return value back as the result of the
read.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, NoReturn

from luastack.errors import TypeMismatchError
from luastack.types.category import Category

logger = logging.getLogger(__name__)

MismatchHandler = Callable[[Any, Category, Category], Any]


def default_type_mismatch(L, actual: Category, expected: Category) -> NoReturn:
    logger.debug("type mismatch: expected %s, got %s", expected.label, actual.label)
    L.raise_error(f"expected {L.type_name(expected)}, got {L.type_name(actual)}")


def raise_type_mismatch(L, actual: Category, expected: Category) -> NoReturn:
    """Report the mismatch as a host exception instead of a VM error."""
    raise TypeMismatchError(actual, expected)


def bad_argument(position: int, function_name: str | None = None) -> MismatchHandler:
    """Handler for reading argument `position` of a VM-called function."""
    where = f" to '{function_name}'" if function_name else ""

    def handler(L, actual: Category, expected: Category) -> NoReturn:
        L.raise_error(
            f"bad argument #{position}{where} "
            f"({L.type_name(expected)} expected, got {L.type_name(actual)})"
        )

    return handler
