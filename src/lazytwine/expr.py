"""Textual twine expressions.

A small s-expression syntax for building Twine trees from text:

    "foo"                   from_str
    null, empty             the zero-arity shapes
    (char "x")              from_char
    (u16 N) ... (isize N)   decimal integer leaves
    (hex N) (hex_usize N)   hex integer leaves
    (pair "a" "b")          from_pair
    (twine E)               from_twine
    (fmt "tmpl" ARG...)     from_args, ARG is an int or string
    (concat E E ...)        concat, folding left; `+` is a synonym

Integers are decimal or 0x-prefixed hex with an optional leading '-'.
"""

from __future__ import annotations

from .leaf import Arguments, LeafError, TwineError
from .twine import Twine

ESCAPE_MAP: dict[str, str] = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    '"': '"',
    "0": "\0",
}

# Forms nest at most this deep; rendering recurses once per level.
MAX_DEPTH: int = 200

INT_FORMS: dict[str, str] = {
    "u16": "from_u16",
    "u32": "from_u32",
    "u64": "from_u64",
    "usize": "from_usize",
    "i16": "from_i16",
    "i32": "from_i32",
    "i64": "from_i64",
    "isize": "from_isize",
    "hex": "hex",
    "hex_usize": "hex_usize",
}


class ExprError(TwineError):
    """Error while reading a twine expression."""

    def __init__(self, msg: str, line: int, col: int):
        super().__init__(msg + " at line " + str(line) + " col " + str(col))
        self.msg = msg
        self.line: int = line
        self.col: int = col


class Token:
    """A token with type, value, and position."""

    def __init__(self, type_: str, value: str, line: int, col: int):
        self.type: str = type_
        self.value: str = value
        self.line: int = line
        self.col: int = col

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r}, {self.line}, {self.col})"


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_hex(c: str) -> bool:
    return _is_digit(c) or (c >= "a" and c <= "f") or (c >= "A" and c <= "F")


def _is_ident(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or _is_digit(c) or c in "_+"


def _read_string(src: str, pos: int, line: int, col: int) -> tuple[str, int]:
    """Read a string literal starting after the opening quote. Returns (value, new_pos)."""
    chars: list[str] = []
    while pos < len(src):
        c = src[pos]
        if c == '"':
            return "".join(chars), pos + 1
        if c == "\n":
            break
        if c == "\\":
            pos += 1
            if pos >= len(src):
                break
            e = src[pos]
            if e in ESCAPE_MAP:
                chars.append(ESCAPE_MAP[e])
                pos += 1
            elif e == "x":
                h = src[pos + 1 : pos + 3]
                if len(h) != 2 or not _is_hex(h[0]) or not _is_hex(h[1]):
                    raise ExprError("invalid hex escape", line, col)
                chars.append(chr(int(h, 16)))
                pos += 3
            else:
                raise ExprError("invalid escape: \\" + e, line, col)
            continue
        chars.append(c)
        pos += 1
    raise ExprError("unterminated string", line, col)


def tokenize(src: str) -> list[Token]:
    """Split source into tokens, ending with an EOF token."""
    tokens: list[Token] = []
    pos = 0
    line = 1
    line_start = 0
    while pos < len(src):
        c = src[pos]
        col = pos - line_start + 1
        if c == "\n":
            pos += 1
            line += 1
            line_start = pos
        elif c == " " or c == "\t" or c == "\r":
            pos += 1
        elif c == ";":
            # comment to end of line
            while pos < len(src) and src[pos] != "\n":
                pos += 1
        elif c == "(" or c == ")":
            tokens.append(Token(c, c, line, col))
            pos += 1
        elif c == '"':
            value, pos = _read_string(src, pos + 1, line, col)
            tokens.append(Token("STRING", value, line, col))
        elif _is_digit(c) or (c == "-" and pos + 1 < len(src) and _is_digit(src[pos + 1])):
            start = pos
            pos += 1
            while pos < len(src) and (_is_hex(src[pos]) or src[pos] in "xX"):
                pos += 1
            tokens.append(Token("INT", src[start:pos], line, col))
        elif _is_ident(c):
            start = pos
            while pos < len(src) and _is_ident(src[pos]):
                pos += 1
            tokens.append(Token("IDENT", src[start:pos], line, col))
        else:
            raise ExprError("unexpected character " + repr(c), line, col)
    tokens.append(Token("EOF", "", line, pos - line_start + 1))
    return tokens


def _int_value(tok: Token) -> int:
    text = tok.value
    neg = text.startswith("-")
    if neg:
        text = text[1:]
    try:
        if text[:2] in ("0x", "0X"):
            value = int(text[2:], 16)
        else:
            value = int(text, 10)
    except ValueError:
        raise ExprError("invalid integer " + repr(tok.value), tok.line, tok.col) from None
    return -value if neg else value


class Parser:
    """Recursive-descent parser producing Twine values."""

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0
        self.depth = 0

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != "EOF":
            self.pos += 1
        return tok

    def expect(self, type_: str) -> Token:
        tok = self.peek()
        if tok.type != type_:
            what = "end of input" if tok.type == "EOF" else repr(tok.value)
            raise ExprError("expected " + type_ + ", got " + what, tok.line, tok.col)
        return self.advance()

    def parse_program(self) -> Twine:
        result = self.parse_expr()
        tok = self.peek()
        if tok.type != "EOF":
            raise ExprError("unexpected trailing input " + repr(tok.value), tok.line, tok.col)
        return result

    def parse_expr(self) -> Twine:
        tok = self.advance()
        if tok.type == "STRING":
            return Twine.from_str(tok.value)
        if tok.type == "IDENT":
            if tok.value == "null":
                return Twine.null()
            if tok.value == "empty":
                return Twine.empty()
            raise ExprError("unknown atom " + repr(tok.value), tok.line, tok.col)
        if tok.type == "(":
            if self.depth >= MAX_DEPTH:
                raise ExprError("expression nested too deeply", tok.line, tok.col)
            head = self.expect("IDENT")
            self.depth += 1
            try:
                result = self._parse_form(head)
            except LeafError as e:
                raise ExprError(e.msg, head.line, head.col) from e
            self.depth -= 1
            self.expect(")")
            return result
        what = "end of input" if tok.type == "EOF" else repr(tok.value)
        raise ExprError("unexpected " + what, tok.line, tok.col)

    def _parse_form(self, head: Token) -> Twine:
        name = head.value
        if name in INT_FORMS:
            value = _int_value(self.expect("INT"))
            return getattr(Twine, INT_FORMS[name])(value)
        if name == "char":
            return Twine.from_char(self.expect("STRING").value)
        if name == "pair":
            a = self.expect("STRING").value
            b = self.expect("STRING").value
            return Twine.from_pair(a, b)
        if name == "twine":
            return Twine.from_twine(self.parse_expr())
        if name == "fmt":
            template = self.expect("STRING").value
            args: list[object] = []
            while self.peek().type == "INT" or self.peek().type == "STRING":
                tok = self.advance()
                args.append(_int_value(tok) if tok.type == "INT" else tok.value)
            return Twine.from_args(Arguments(template, *args))
        if name == "concat" or name == "+":
            result = self.parse_expr()
            count = 1
            while self.peek().type != ")" and self.peek().type != "EOF":
                result = result.concat(self.parse_expr())
                count += 1
            if count < 2:
                raise ExprError(name + " needs at least two operands", head.line, head.col)
            return result
        raise ExprError("unknown form " + repr(name), head.line, head.col)


def parse_expr(src: str) -> Twine:
    """Parse a twine expression into a Twine."""
    return Parser(tokenize(src)).parse_program()
