"""lazytwine - lazy, non-owning string concatenation trees."""

from .leaf import Arguments, Leaf, LeafError, TwineError
from .sink import CountingSink, Sink, StringBuffer, next_power_of_two, utf8_len
from .twine import Twine

__all__ = [
    "Arguments",
    "CountingSink",
    "Leaf",
    "LeafError",
    "Sink",
    "StringBuffer",
    "Twine",
    "TwineError",
    "next_power_of_two",
    "utf8_len",
]
