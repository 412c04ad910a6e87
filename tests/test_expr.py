"""Tests for the twine expression tokenizer and parser."""

import pytest

from lazytwine.expr import ExprError, parse_expr, tokenize


def test_tokenize_positions():
    tokens = tokenize('(+ "a"\n  (u32 -0x10))')
    types = [t.type for t in tokens]
    assert types == ["(", "IDENT", "STRING", "(", "IDENT", "INT", ")", ")", "EOF"]
    assert tokens[4].line == 2
    assert tokens[4].col == 4
    assert tokens[5].value == "-0x10"


def test_string_escapes():
    t = parse_expr(r'"a\tb\\c\"d\x41"')
    assert t.to_string() == 'a\tb\\c"dA'


def test_comments_are_skipped():
    t = parse_expr('; leading comment\n(+ "a" "b") ; trailing')
    assert t.to_string() == "ab"


def test_concat_folds_left():
    t = parse_expr('(+ "a" "b" "c")')
    assert t.is_binary()
    assert t.lhs.kind == "twine"
    assert t.lhs.value.to_string() == "ab"
    assert t.to_string() == "abc"


def test_int_forms():
    t = parse_expr('(concat (i16 -5) ":" (hex 255) ":" (u64 0x10))')
    assert t.to_string() == "-5:ff:16"


def test_fmt_form():
    t = parse_expr('(fmt "{}={}" "x" 3)')
    assert t.to_string() == "x=3"


def test_nullary_atoms():
    assert parse_expr("null").is_null()
    assert parse_expr("empty").kind == "empty"
    assert parse_expr('""').kind == "empty"
    assert parse_expr('(+ null "a")').is_null()


@pytest.mark.parametrize(
    "src,fragment",
    [
        ('"abc', "unterminated string"),
        ('"\\q"', "invalid escape"),
        ("(u16 70000)", "out of range"),
        ('(char "ab")', "single character"),
        ('(bogus "a")', "unknown form"),
        ("nothing", "unknown atom"),
        ('(+ "a")', "at least two operands"),
        ('"a" "b"', "trailing input"),
        ('(+ "a" "b"', "end of input"),
        ("(u32 0xZZ)", "invalid integer"),
        ("#", "unexpected character"),
        ("", "unexpected end of input"),
    ],
)
def test_errors(src, fragment):
    with pytest.raises(ExprError) as info:
        parse_expr(src)
    assert fragment in str(info.value)


def test_error_position():
    with pytest.raises(ExprError) as info:
        parse_expr('(+ "a"\n   (u16 -1))')
    assert info.value.line == 2
    assert info.value.col == 5
    assert info.value.msg.startswith("-1 out of range")


def test_nesting_within_limit():
    src = "(twine " * 50 + '"x"' + ")" * 50
    assert parse_expr(src).to_string() == "x"


def test_nesting_too_deep():
    src = "(twine " * 1000 + '"x"' + ")" * 1000
    with pytest.raises(ExprError) as info:
        parse_expr(src)
    assert info.value.msg == "expression nested too deeply"
    assert info.value.line == 1
