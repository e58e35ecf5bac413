from __future__ import annotations

from .nil import Nil, NilType
from .cstring import CString
from .category import Category

__all__ = ["Nil", "NilType", "CString", "Category"]
