"""Twine - a lazy, non-owning concatenation tree.

A Twine describes how a string would be assembled without assembling it.
Concatenation builds a new fixed-size value over references to its
operands; text is produced only by `write_to`, `to_string` or
`to_string_preallocating`.

Shapes:

| kind   | lhs  | rhs  | Renders as        |
|--------|------|------|-------------------|
| null   | None | None | "" (absorbing)    |
| empty  | None | None | "" (identity)     |
| unary  | Leaf | None | lhs               |
| binary | Leaf | Leaf | lhs then rhs      |

Every Twine has the same three slots whatever its shape.
"""

from __future__ import annotations

from dataclasses import dataclass
import io
from typing import Literal

from .leaf import (
    Arguments,
    Leaf,
    TwineError,
    char_leaf,
    fmt_leaf,
    int_leaf,
    str_leaf,
    twine_leaf,
)
from .sink import CountingSink, Sink, StringBuffer, next_power_of_two

TwineKind = Literal["null", "empty", "unary", "binary"]

_ARITY: dict[str, int] = {"null": 0, "empty": 0, "unary": 1, "binary": 2}


@dataclass(frozen=True, slots=True)
class Twine:
    """Immutable concatenation tree over borrowed leaves.

    Invariants:
    - null and empty have no leaves
    - unary has lhs only, binary has both
    - a str leaf in a unary built by from_str/from_pair is never ""
    - referenced objects must not be mutated while the Twine is alive
    """

    kind: TwineKind
    lhs: Leaf | None = None
    rhs: Leaf | None = None

    def __post_init__(self) -> None:
        if self.kind not in _ARITY:
            raise TwineError(f"unknown twine kind {self.kind!r}")
        leaves = [leaf for leaf in (self.lhs, self.rhs) if leaf is not None]
        if len(leaves) != _ARITY[self.kind] or (self.rhs is not None and self.lhs is None):
            raise TwineError(f"{self.kind} twine needs {_ARITY[self.kind]} leaves")
        for leaf in leaves:
            if not isinstance(leaf, Leaf):
                raise TwineError(f"twine slot needs a Leaf, got {type(leaf).__name__}")

    # --- Constructors ---

    @classmethod
    def null(cls) -> Twine:
        return cls("null")

    @classmethod
    def empty(cls) -> Twine:
        return cls("empty")

    @classmethod
    def from_str(cls, s: str) -> Twine:
        """Wrap a string; "" normalizes to the empty shape."""
        leaf = str_leaf(s)
        if s == "":
            return cls("empty")
        return cls("unary", leaf)

    @classmethod
    def from_char(cls, c: str) -> Twine:
        return cls("unary", char_leaf(c))

    @classmethod
    def from_u16(cls, n: int) -> Twine:
        return cls("unary", int_leaf("u16", n))

    @classmethod
    def from_u32(cls, n: int) -> Twine:
        return cls("unary", int_leaf("u32", n))

    @classmethod
    def from_u64(cls, n: int) -> Twine:
        return cls("unary", int_leaf("u64", n))

    @classmethod
    def from_usize(cls, n: int) -> Twine:
        return cls("unary", int_leaf("usize", n))

    @classmethod
    def from_i16(cls, n: int) -> Twine:
        return cls("unary", int_leaf("i16", n))

    @classmethod
    def from_i32(cls, n: int) -> Twine:
        return cls("unary", int_leaf("i32", n))

    @classmethod
    def from_i64(cls, n: int) -> Twine:
        return cls("unary", int_leaf("i64", n))

    @classmethod
    def from_isize(cls, n: int) -> Twine:
        return cls("unary", int_leaf("isize", n))

    @classmethod
    def hex(cls, n: int) -> Twine:
        """Unsigned 64-bit value rendered in lower-case hex, no prefix."""
        return cls("unary", int_leaf("hex_u64", n))

    @classmethod
    def hex_usize(cls, n: int) -> Twine:
        return cls("unary", int_leaf("hex_usize", n))

    @classmethod
    def from_args(cls, args: Arguments) -> Twine:
        return cls("unary", fmt_leaf(args))

    @classmethod
    def from_twine(cls, t: Twine) -> Twine:
        """Wrap another Twine as a single nested leaf."""
        return cls("unary", twine_leaf(t))

    @classmethod
    def from_pair(cls, a: str, b: str) -> Twine:
        """Concatenate two strings, dropping whichever side is ""."""
        lhs = str_leaf(a)
        rhs = str_leaf(b)
        if a == "" and b == "":
            return cls("empty")
        if a == "":
            return cls("unary", rhs)
        if b == "":
            return cls("unary", lhs)
        return cls("binary", lhs, rhs)

    # --- Concatenation ---

    def _flatten(self) -> Twine:
        # One level only: unary(twine(unary(twine(t)))) yields unary(twine(t)).
        if self.kind == "unary" and self.lhs.kind == "twine":
            return self.lhs.value
        return self

    def concat(self, other: Twine) -> Twine:
        """Return a new Twine rendering self followed by other.

        Callable as `Twine.concat(lhs, rhs)` or `lhs.concat(rhs)`.
        """
        lhs = self._flatten()
        rhs = other._flatten()
        if lhs.kind == "null" or rhs.kind == "null":
            return Twine("null")
        if lhs.kind == "empty":
            return other
        if rhs.kind == "empty":
            return self
        if lhs.kind == "unary" and rhs.kind == "unary":
            return Twine("binary", lhs.lhs, rhs.lhs)
        return Twine("binary", twine_leaf(self), twine_leaf(other))

    def __add__(self, other: object) -> Twine:
        if not isinstance(other, Twine):
            return NotImplemented
        return self.concat(other)

    # --- Introspection ---

    def is_null(self) -> bool:
        return self.kind == "null"

    def is_nullary(self) -> bool:
        return self.kind == "null" or self.kind == "empty"

    def is_unary(self) -> bool:
        return self.kind == "unary"

    def is_binary(self) -> bool:
        return self.kind == "binary"

    def is_trivially_empty(self) -> bool:
        """True for null/empty only; see is_empty for the rendered check."""
        return self.is_nullary()

    def as_single_string(self) -> str | None:
        """The string if this is empty or a unary str leaf, else None."""
        if self.kind == "empty":
            return ""
        if self.kind == "unary" and self.lhs.kind == "str":
            return self.lhs.value
        return None

    def is_single_string(self) -> bool:
        return self.as_single_string() is not None

    def is_empty(self) -> bool:
        """True if the tree renders to "". Counts bytes, builds no text."""
        counter = CountingSink()
        self.write_to(counter)
        return counter.count == 0

    def estimated_capacity(self) -> int:
        """Lower bound on the rendered UTF-8 length."""
        if self.kind == "unary":
            return self.lhs.estimate()
        if self.kind == "binary":
            return self.lhs.estimate() + self.rhs.estimate()
        return 0

    # --- Materialization ---

    def write_to(self, sink: Sink) -> None:
        """Render into sink left to right. Sink errors propagate."""
        if self.kind == "unary":
            self.lhs.render(sink)
        elif self.kind == "binary":
            self.lhs.render(sink)
            self.rhs.render(sink)

    def to_string(self) -> str:
        out = io.StringIO()
        self.write_to(out)
        return out.getvalue()

    def to_string_preallocating(self) -> str:
        buf = StringBuffer(next_power_of_two(self.estimated_capacity()))
        self.write_to(buf)
        return buf.getvalue()

    def __str__(self) -> str:
        return self.to_string()

    def __format__(self, format_spec: str) -> str:
        return format(self.to_string(), format_spec)
