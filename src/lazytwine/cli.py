"""Command-line entry point: demo, expression rendering, benchmark."""

from __future__ import annotations

from dataclasses import dataclass
import sys

from .bench import format_results, run_benchmarks
from .expr import ExprError, parse_expr
from .leaf import Leaf
from .serialize import to_json
from .sink import StringBuffer, next_power_of_two
from .twine import Twine

USAGE: str = """\
lazytwine [OPTIONS]

Options:
  -e, --expr EXPR     Build a twine from EXPR and render it
  -f, --file FILE     Read the expression from FILE ("-" for stdin)
  --dump              Print the tree structure as JSON instead of rendering
  --stats             Print shape, estimated capacity and emptiness
  --preallocate       Render through a buffer preallocated from the estimate
  --bench             Run the concatenation micro-benchmark
  --iterations N      Benchmark iterations per case (default 100000)
  --only TEXT         Run only benchmark cases whose name contains TEXT
  -o, --output FILE   Write output to FILE instead of stdout
  --help              Show this help message

With no expression and no --bench, runs a short demonstration.
"""

DEFAULT_ITERATIONS: int = 100_000


@dataclass
class Options:
    """Parsed command-line options."""

    expr: str | None = None
    input_file: str | None = None
    output_file: str | None = None
    dump: bool = False
    stats: bool = False
    preallocate: bool = False
    bench: bool = False
    iterations: int = DEFAULT_ITERATIONS
    only: str | None = None


def read_source(input_file: str) -> tuple[str, int]:
    """Read an expression from file or stdin. Returns (source, exit_code) where exit_code 0 means OK."""
    if input_file != "-":
        try:
            with open(input_file, "rb") as f:
                raw = f.read()
        except OSError:
            print("error: cannot open '" + input_file + "'", file=sys.stderr)
            return ("", 1)
    else:
        raw = sys.stdin.buffer.read()
    try:
        source = raw.decode("utf-8")
    except ValueError:
        print("error: invalid utf-8 in input", file=sys.stderr)
        return ("", 1)
    return (source, 0)


def write_output(output: str, output_file: str | None) -> int:
    """Write output to file or stdout. Returns 0 on success, 1 on error."""
    if output_file is not None:
        try:
            with open(output_file, "w", encoding="utf-8") as f:
                f.write(output)
                f.write("\n")
        except OSError:
            print("error: cannot write '" + output_file + "'", file=sys.stderr)
            return 1
        return 0
    print(output)
    return 0


def _require_value(args: list[str], i: int) -> str:
    if i + 1 >= len(args):
        print("error: " + args[i] + " requires an argument", file=sys.stderr)
        sys.exit(2)
    return args[i + 1]


def parse_args(args: list[str]) -> Options:
    """Parse command-line arguments into Options. Exits with 2 on usage errors."""
    opts = Options()
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            sys.exit(0)
        elif arg == "-e" or arg == "--expr":
            opts.expr = _require_value(args, i)
            i += 2
        elif arg == "-f" or arg == "--file":
            opts.input_file = _require_value(args, i)
            i += 2
        elif arg == "-o" or arg == "--output":
            opts.output_file = _require_value(args, i)
            i += 2
        elif arg == "--iterations":
            value = _require_value(args, i)
            if not value.isdigit() or int(value) == 0:
                print("error: --iterations needs a positive integer", file=sys.stderr)
                sys.exit(2)
            opts.iterations = int(value)
            i += 2
        elif arg == "--only":
            opts.only = _require_value(args, i)
            i += 2
        elif arg == "--dump":
            opts.dump = True
            i += 1
        elif arg == "--stats":
            opts.stats = True
            i += 1
        elif arg == "--preallocate":
            opts.preallocate = True
            i += 1
        elif arg == "--bench":
            opts.bench = True
            i += 1
        else:
            if arg.startswith("-"):
                print("error: unknown flag '" + arg + "'", file=sys.stderr)
            else:
                print("error: unexpected argument '" + arg + "'", file=sys.stderr)
            sys.exit(2)
    if opts.expr is not None and opts.input_file is not None:
        print("error: --expr and --file are mutually exclusive", file=sys.stderr)
        sys.exit(2)
    return opts


def describe(twine: Twine) -> str:
    """Shape, capacity and emptiness summary, one fact per line."""
    lines = [
        "kind: " + twine.kind,
        "estimated_capacity: " + str(twine.estimated_capacity()),
        "is_empty: " + str(twine.is_empty()).lower(),
        "is_trivially_empty: " + str(twine.is_trivially_empty()).lower(),
    ]
    single = twine.as_single_string()
    if single is not None:
        lines.append("single_string: " + repr(single))
    return "\n".join(lines)


def render_expr(source: str, opts: Options) -> tuple[int, str]:
    """Build a twine from source and produce the requested output."""
    try:
        twine = parse_expr(source)
    except ExprError as e:
        print("error: " + str(e), file=sys.stderr)
        return (1, "")
    if opts.dump:
        return (0, to_json(twine))
    # fmt templates meet their arguments only when rendered
    try:
        if opts.stats:
            return (0, describe(twine))
        if opts.preallocate:
            return (0, twine.to_string_preallocating())
        return (0, twine.to_string())
    except (ValueError, IndexError, KeyError) as e:
        print("error: " + str(e), file=sys.stderr)
        return (1, "")


def demo() -> str:
    """Build a few sample trees and report on them."""
    out: list[str] = []
    out.append("sizeof(Twine)=" + str(sys.getsizeof(Twine.null())))
    out.append("slots(Twine)=" + str(len(Twine.__slots__)))
    out.append("slots(Leaf)=" + str(len(Leaf.__slots__)))
    bar = Twine.from_str("bar")
    out.append(repr(bar))
    space = Twine.from_str(" ")
    out.append(repr(space))
    foo = Twine.from_str("foo")
    out.append(repr(foo))
    r = foo.concat(space)
    out.append(repr(r))
    t = r.concat(bar)
    out.append(repr(t))
    out.append(repr(t.to_string()))
    h = t + Twine.hex(55)
    out.append(repr(h.to_string()))
    h2 = h + h
    out.append(repr(h2.to_string()))

    t1 = Twine.from_str("prealloc-") + Twine.hex(1)
    buf = StringBuffer(next_power_of_two(t1.estimated_capacity()))
    out.append("capacity before render=" + str(buf.capacity))
    t1.write_to(buf)
    out.append(repr(buf.getvalue()))
    out.append("capacity after render=" + str(buf.capacity))
    out.append("reallocations=" + str(buf.reallocations))
    return "\n".join(out)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    opts = parse_args(sys.argv[1:] if argv is None else argv)
    if opts.bench:
        results = run_benchmarks(opts.iterations, opts.only)
        return write_output(format_results(results), opts.output_file)
    source: str | None = opts.expr
    if opts.input_file is not None:
        source, err = read_source(opts.input_file)
        if err != 0:
            return err
    if source is None:
        return write_output(demo(), opts.output_file)
    if source.strip() == "":
        print("error: no input provided", file=sys.stderr)
        return 2
    exit_code, output = render_expr(source, opts)
    if exit_code != 0:
        return exit_code
    return write_output(output, opts.output_file)


if __name__ == "__main__":
    sys.exit(main())
