from __future__ import annotations


class NilType:
    """The absence marker. Pushing it pushes a VM nil, reading a nil slot as
    `NilType` returns `Nil`."""

    _instance: NilType | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self): return "nil"
    def __bool__(self): return False

    def __eq__(self, other):
        return isinstance(other, NilType)

    def __hash__(self):
        return 0

    def __reduce__(self):
        return (NilType, ())


Nil = NilType()
