"""Leaf values held in the slots of a Twine.

A leaf is a tagged reference: a kind plus the caller's object. Rendering
never copies the referenced text until a sink asks for it.

| Kind      | Value       | Rendered as                    | Estimate      |
|-----------|-------------|--------------------------------|---------------|
| twine     | Twine       | the nested tree                | recursive     |
| str       | str         | passthrough                    | UTF-8 length  |
| char      | str (len 1) | passthrough                    | UTF-8 length  |
| u16..i64  | int         | base 10, leading '-' if < 0    | 1             |
| usize     | int         | base 10                        | 1             |
| isize     | int         | base 10, leading '-' if < 0    | 1             |
| hex_u64   | int         | base 16, lower-case, no prefix | 1             |
| hex_usize | int         | base 16, lower-case, no prefix | 1             |
| fmt       | Arguments   | Arguments.write_to             | as_str or 1   |

Numeric estimates are a deliberate lower bound: counting digits would do
the formatting work the tree exists to defer.
"""

from __future__ import annotations

from dataclasses import dataclass
import struct
from typing import TYPE_CHECKING, Literal

from .sink import Sink, utf8_len

if TYPE_CHECKING:
    from .twine import Twine


# ============================================================
# Diagnostics
# ============================================================


class TwineError(Exception):
    """Base error for lazytwine."""

    def __init__(self, msg: str):
        super().__init__(msg)
        self.msg = msg


class LeafError(TwineError):
    """Value does not fit the leaf kind it was given to."""


# ============================================================
# Integer widths
# ============================================================

POINTER_BITS: int = struct.calcsize("P") * 8

LeafKind = Literal[
    "twine",
    "str",
    "char",
    "u16",
    "u32",
    "u64",
    "usize",
    "i16",
    "i32",
    "i64",
    "isize",
    "hex_u64",
    "hex_usize",
    "fmt",
]

# kind -> (bits, signed)
INT_WIDTHS: dict[str, tuple[int, bool]] = {
    "u16": (16, False),
    "u32": (32, False),
    "u64": (64, False),
    "usize": (POINTER_BITS, False),
    "i16": (16, True),
    "i32": (32, True),
    "i64": (64, True),
    "isize": (POINTER_BITS, True),
    "hex_u64": (64, False),
    "hex_usize": (POINTER_BITS, False),
}

HEX_KINDS: frozenset[str] = frozenset({"hex_u64", "hex_usize"})


def int_bounds(kind: str) -> tuple[int, int]:
    """Return the inclusive (min, max) range of an integer leaf kind."""
    bits, signed = INT_WIDTHS[kind]
    if signed:
        return (-(1 << (bits - 1)), (1 << (bits - 1)) - 1)
    return (0, (1 << bits) - 1)


def check_int(kind: str, value: object) -> int:
    """Validate value for an integer leaf kind and return it."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise LeafError(f"{kind} leaf needs an int, got {type(value).__name__}")
    lo, hi = int_bounds(kind)
    if value < lo or value > hi:
        raise LeafError(f"{value} out of range for {kind} [{lo}, {hi}]")
    return value


# ============================================================
# Pre-formatted arguments
# ============================================================


class Arguments:
    """A format template bound to its arguments, rendered on demand.

    `as_str()` exposes the already-rendered text only when there is nothing
    to substitute, so the estimate can use it without formatting.
    """

    __slots__ = ("template", "args", "kwargs")

    def __init__(self, template: str, *args: object, **kwargs: object):
        self.template = template
        self.args = args
        self.kwargs = kwargs

    def as_str(self) -> str | None:
        if self.args or self.kwargs:
            return None
        if "{" in self.template or "}" in self.template:
            return None
        return self.template

    def write_to(self, sink: Sink) -> None:
        text = self.as_str()
        if text is None:
            text = self.template.format(*self.args, **self.kwargs)
        sink.write(text)

    def __repr__(self) -> str:
        parts = [repr(self.template)]
        parts.extend(repr(a) for a in self.args)
        parts.extend(f"{k}={v!r}" for k, v in self.kwargs.items())
        return f"Arguments({', '.join(parts)})"


# ============================================================
# Leaf
# ============================================================


@dataclass(frozen=True, slots=True)
class Leaf:
    """One renderable unit in a unary or binary slot.

    Invariants:
    - kind "twine" holds a Twine, "fmt" an Arguments
    - kind "str" holds a str; "char" a str of length 1
    - integer kinds hold an int inside the kind's range
    """

    kind: LeafKind
    value: object

    def estimate(self) -> int:
        return estimate(self)

    def render(self, sink: Sink) -> None:
        render(self, sink)


def estimate(leaf: Leaf) -> int:
    """Lower bound on the UTF-8 byte length the leaf renders to."""
    kind = leaf.kind
    if kind == "str" or kind == "char":
        return utf8_len(leaf.value)
    if kind == "twine":
        return leaf.value.estimated_capacity()
    if kind == "fmt":
        text = leaf.value.as_str()
        if text is not None:
            return utf8_len(text)
        return 1
    if kind in INT_WIDTHS:
        return 1
    raise LeafError(f"unknown leaf kind {kind!r}")


def render(leaf: Leaf, sink: Sink) -> None:
    """Write the leaf's text into sink."""
    kind = leaf.kind
    if kind == "str" or kind == "char":
        sink.write(leaf.value)
    elif kind == "twine":
        leaf.value.write_to(sink)
    elif kind in HEX_KINDS:
        sink.write(format(leaf.value, "x"))
    elif kind in INT_WIDTHS:
        sink.write(str(leaf.value))
    elif kind == "fmt":
        leaf.value.write_to(sink)
    else:
        raise LeafError(f"unknown leaf kind {kind!r}")


def str_leaf(value: str) -> Leaf:
    if not isinstance(value, str):
        raise LeafError(f"str leaf needs a str, got {type(value).__name__}")
    return Leaf("str", value)


def char_leaf(value: str) -> Leaf:
    if not isinstance(value, str) or len(value) != 1:
        raise LeafError(f"char leaf needs a single character, got {value!r}")
    return Leaf("char", value)


def int_leaf(kind: LeafKind, value: int) -> Leaf:
    return Leaf(kind, check_int(kind, value))


def twine_leaf(value: Twine) -> Leaf:
    return Leaf("twine", value)


def fmt_leaf(value: Arguments) -> Leaf:
    if not isinstance(value, Arguments):
        raise LeafError(f"fmt leaf needs Arguments, got {type(value).__name__}")
    return Leaf("fmt", value)
