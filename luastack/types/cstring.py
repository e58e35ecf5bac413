from __future__ import annotations


class CString(bytes):
    """A zero-terminated byte string.

    Unlike `bytes`, which is pushed length-prefixed, a CString ends at its
    first NUL byte: anything after it is invisible to the VM.
    """

    def __new__(cls, value: bytes | str = b"", encoding: str = "utf-8"):
        if isinstance(value, str):
            value = value.encode(encoding)
        return super().__new__(cls, value)

    def terminated(self) -> bytes:
        """The bytes up to (not including) the first NUL."""
        return bytes(self).split(b"\0", 1)[0]

    def __repr__(self):
        return f"CString({bytes(self)!r})"
