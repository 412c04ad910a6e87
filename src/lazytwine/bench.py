"""Micro-benchmark: Twine concatenation against plain str concatenation."""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Callable

from .twine import Twine

LONG: str = (
    "1234567890123456789012345789012345678901234567890123457890123457890"
    "123456789012345678901234567890123456789012345678901234567890"
)


@dataclass
class BenchResult:
    """Timing for one benchmark case."""

    name: str
    iterations: int
    total_ns: int

    @property
    def per_iter_ns(self) -> float:
        if self.iterations == 0:
            return 0.0
        return self.total_ns / self.iterations


def _twine_pair(a: str, b: str) -> Callable[[], object]:
    def build() -> object:
        return Twine.from_str(a) + Twine.from_str(b)

    return build


def _twine_pair_render(a: str, b: str, preallocate: bool) -> Callable[[], object]:
    def build() -> object:
        t = Twine.from_str(a) + Twine.from_str(b)
        if preallocate:
            return t.to_string_preallocating()
        return t.to_string()

    return build


def _twine_u32(render: str | None) -> Callable[[], object]:
    def build() -> object:
        t = Twine.from_str("identifier-") + Twine.from_u32(4321)
        if render == "to_string":
            return t.to_string()
        if render == "preallocating":
            return t.to_string_preallocating()
        return t

    return build


def _str_concat(a: str, b: str) -> Callable[[], object]:
    def build() -> object:
        return a + b

    return build


def _str_format_u32() -> Callable[[], object]:
    def build() -> object:
        return "{}{}".format("identifier-", 4321)

    return build


CASES: list[tuple[str, Callable[[], object]]] = [
    ("Twine: str concat short", _twine_pair("foo", "bar")),
    (
        "Twine: str concat short + to_string_preallocating",
        _twine_pair_render("foo", "bar", True),
    ),
    ("Twine: str concat short + to_string", _twine_pair_render("foo", "bar", False)),
    ("String: str concat short", _str_concat("foo", "bar")),
    ("Twine: str concat long", _twine_pair(LONG, LONG)),
    (
        "Twine: str concat long + to_string_preallocating",
        _twine_pair_render(LONG, LONG, True),
    ),
    ("Twine: str concat long + to_string", _twine_pair_render(LONG, LONG, False)),
    ("String: str concat long", _str_concat(LONG, LONG)),
    ("Twine: str concat u32", _twine_u32(None)),
    ("Twine: str concat u32 + to_string", _twine_u32("to_string")),
    ("Twine: str concat u32 + to_string_preallocating", _twine_u32("preallocating")),
    ("String: format str concat u32", _str_format_u32()),
]


def run_case(name: str, fn: Callable[[], object], iterations: int) -> BenchResult:
    start = time.perf_counter_ns()
    for _ in range(iterations):
        fn()
    return BenchResult(name, iterations, time.perf_counter_ns() - start)


def run_benchmarks(iterations: int, only: str | None = None) -> list[BenchResult]:
    """Run every case (or those whose name contains `only`)."""
    results: list[BenchResult] = []
    for name, fn in CASES:
        if only is not None and only not in name:
            continue
        results.append(run_case(name, fn, iterations))
    return results


def format_results(results: list[BenchResult]) -> str:
    """Render results as an aligned text table."""
    if not results:
        return ""
    width = max(len(r.name) for r in results)
    lines = [f"{'case':<{width}}  {'ns/iter':>10}"]
    for r in results:
        lines.append(f"{r.name:<{width}}  {r.per_iter_ns:>10.1f}")
    return "\n".join(lines)
