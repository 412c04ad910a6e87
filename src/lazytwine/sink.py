"""Sinks: destinations that accept rendered text chunk by chunk.

Anything with a `write(str)` method is a sink (io.StringIO, an open text
file, sys.stdout). Exceptions raised by a sink's write propagate to the
caller of the render untouched.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Sink(Protocol):
    def write(self, s: str, /) -> object:
        ...


def utf8_len(s: str) -> int:
    """Byte length of s encoded as UTF-8, counted without encoding."""
    if s.isascii():
        return len(s)
    return sum(
        1 if c < "\x80" else 2 if c < "\u0800" else 3 if c < "\U00010000" else 4
        for c in s
    )


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


class CountingSink:
    """Sink that only counts UTF-8 bytes written, never keeps them."""

    __slots__ = ("count",)

    def __init__(self) -> None:
        self.count: int = 0

    def write(self, s: str) -> int:
        n = utf8_len(s)
        self.count += n
        return n


class StringBuffer:
    """Growable UTF-8 byte buffer with an explicit initial capacity.

    Capacity doubles (or jumps to the required size, whichever is larger)
    when a write does not fit. Growth appends zeroed space after the
    written bytes, so nothing already written is moved out of order or
    truncated.
    """

    def __init__(self, capacity: int = 0) -> None:
        if capacity < 0:
            raise ValueError("capacity must be >= 0")
        self._buf = bytearray(capacity)
        self._len = 0
        self.reallocations = 0

    @property
    def capacity(self) -> int:
        return len(self._buf)

    def __len__(self) -> int:
        return self._len

    def reserve(self, additional: int) -> None:
        """Make room for at least `additional` more bytes."""
        needed = self._len + additional
        if needed <= len(self._buf):
            return
        new_cap = max(len(self._buf) * 2, needed)
        self._buf.extend(bytes(new_cap - len(self._buf)))
        self.reallocations += 1

    def write(self, s: str) -> int:
        data = s.encode("utf-8", "surrogatepass")
        n = len(data)
        self.reserve(n)
        self._buf[self._len : self._len + n] = data
        self._len += n
        return n

    def getvalue(self) -> str:
        return self._buf[: self._len].decode("utf-8", "surrogatepass")

    def __repr__(self) -> str:
        return f"StringBuffer(len={self._len}, capacity={self.capacity})"
