from __future__ import annotations

import codecs
import os
from typing import Optional

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def flag_from_env(var: str, default: bool) -> bool:
    raw = os.environ.get(var)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{var} must be one of {sorted(_TRUE | _FALSE)}, got {raw!r}")


def encoding_from_env(var: str, default: str) -> str:
    raw = os.environ.get(var, "").strip()
    if not raw:
        return default
    # fail early on unknown codecs
    return codecs.lookup(raw).name


# NOTE: process-global, like the VM handle discipline this assumes a single
# owner at a time.
_check_stack: bool = flag_from_env("LUASTACK_CHECK_STACK", __debug__)
_string_encoding: str = encoding_from_env("LUASTACK_STRING_ENCODING", "utf-8")


def stack_checks_enabled() -> bool:
    return _check_stack


def set_stack_checks(enabled: bool) -> None:
    global _check_stack
    _check_stack = bool(enabled)


def get_string_encoding() -> str:
    return _string_encoding


def set_string_encoding(encoding: Optional[str]) -> None:
    global _string_encoding
    _string_encoding = "utf-8" if encoding is None else codecs.lookup(encoding).name


def reload_from_env() -> None:
    """Re-read LUASTACK_* variables, e.g. after a test changed them."""
    global _check_stack, _string_encoding
    _check_stack = flag_from_env("LUASTACK_CHECK_STACK", __debug__)
    _string_encoding = encoding_from_env("LUASTACK_STRING_ENCODING", "utf-8")
