"""CLI tests for the lazytwine entry point."""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).parent.parent / "src"


def run_cli(args: list[str], stdin: str | None = None) -> subprocess.CompletedProcess:
    env = dict(os.environ)
    env["PYTHONPATH"] = str(SRC_DIR) + os.pathsep + env.get("PYTHONPATH", "")
    return subprocess.run(
        [sys.executable, "-m", "lazytwine.cli", *args],
        input=stdin,
        capture_output=True,
        text=True,
        timeout=30,
        env=env,
    )


def test_demo_runs():
    result = run_cli([])
    assert result.returncode == 0, result.stderr
    assert "slots(Twine)=3" in result.stdout
    assert "'foo bar'" in result.stdout
    assert "'foo bar37'" in result.stdout
    assert "'foo bar37foo bar37'" in result.stdout
    assert "'prealloc-1'" in result.stdout
    assert "reallocations=0" in result.stdout


def test_render_expression():
    result = run_cli(["-e", '(+ "id-" (u32 4321))'])
    assert result.returncode == 0
    assert result.stdout == "id-4321\n"
    assert result.stderr == ""


def test_render_preallocating():
    result = run_cli(["--preallocate", "-e", '(+ "n=" (u64 12345678901234567890))'])
    assert result.returncode == 0
    assert result.stdout == "n=12345678901234567890\n"


def test_dump_is_json():
    result = run_cli(["--dump", "-e", '(pair "a" "b")'])
    assert result.returncode == 0
    tree = json.loads(result.stdout)
    assert tree == {
        "kind": "binary",
        "lhs": {"kind": "str", "value": "a"},
        "rhs": {"kind": "str", "value": "b"},
    }


def test_stats():
    result = run_cli(["--stats", "-e", "(+ (twine (twine empty)) (twine (twine empty)))"])
    assert result.returncode == 0
    assert "kind: binary" in result.stdout
    assert "estimated_capacity: 0" in result.stdout
    assert "is_empty: true" in result.stdout
    assert "is_trivially_empty: false" in result.stdout


def test_expression_from_stdin():
    result = run_cli(["-f", "-"], stdin='(+ "a" (hex 0x42))')
    assert result.returncode == 0
    assert result.stdout == "a42\n"


def test_expression_from_file(tmp_path):
    src = tmp_path / "in.twine"
    src.write_text('(pair "x" "y")', encoding="utf-8")
    out = tmp_path / "out.txt"
    result = run_cli(["-f", str(src), "-o", str(out)])
    assert result.returncode == 0
    assert result.stdout == ""
    assert out.read_text(encoding="utf-8") == "xy\n"


def test_missing_file():
    result = run_cli(["-f", "/nonexistent/file.twine"])
    assert result.returncode == 1
    assert result.stderr.startswith("error: cannot open")


def test_expression_error():
    result = run_cli(["-e", "(u16 -1)"])
    assert result.returncode == 1
    assert result.stdout == ""
    assert "error: -1 out of range for u16" in result.stderr


@pytest.mark.parametrize(
    "args",
    [
        ["-e", '(fmt "{}")'],
        ["--preallocate", "-e", '(fmt "{}")'],
        ["--stats", "-e", '(fmt "{")'],
    ],
)
def test_format_error_at_render(args):
    result = run_cli(args)
    assert result.returncode == 1
    assert result.stdout == ""
    assert result.stderr.startswith("error: ")
    assert "Traceback" not in result.stderr


def test_format_error_message():
    result = run_cli(["--stats", "-e", '(fmt "{")'])
    assert result.stderr == "error: Single '{' encountered in format string\n"


def test_empty_input():
    result = run_cli(["-f", "-"], stdin="   \n")
    assert result.returncode == 2
    assert result.stderr == "error: no input provided\n"


@pytest.mark.parametrize(
    "args,message",
    [
        (["--bogus"], "error: unknown flag '--bogus'"),
        (["stray"], "error: unexpected argument 'stray'"),
        (["-e"], "error: -e requires an argument"),
        (["--iterations", "0"], "error: --iterations needs a positive integer"),
        (["-e", '"a"', "-f", "-"], "error: --expr and --file are mutually exclusive"),
    ],
)
def test_usage_errors(args, message):
    result = run_cli(args)
    assert result.returncode == 2
    assert result.stderr.strip() == message


def test_help():
    result = run_cli(["--help"])
    assert result.returncode == 0
    assert result.stdout.startswith("lazytwine [OPTIONS]")


def test_bench_subset():
    result = run_cli(["--bench", "--iterations", "5", "--only", "u32"])
    assert result.returncode == 0
    lines = result.stdout.strip().split("\n")
    assert lines[0].startswith("case")
    assert len(lines) == 5
    assert all("u32" in line for line in lines[1:])
